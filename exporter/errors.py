"""
exporter/errors.py

Exporter error taxonomy.
"""

from __future__ import annotations

from collections.abc import Sequence


class ExporterError(Exception):
    """Base exception for exporter failures."""


class ConfigurationError(ExporterError):
    """
    Raised when store or process configuration is invalid.

    Every problem found during validation is collected into ``errors`` so the
    operator can fix all of them in one restart cycle.
    """

    def __init__(self, errors: Sequence[str] | str) -> None:
        if isinstance(errors, str):
            errors = [errors]
        self.errors: list[str] = list(errors)
        super().__init__(
            "Invalid configuration:\n" + "\n".join(f"  - {error}" for error in self.errors)
        )


class FetchError(ExporterError):
    """
    Raised when one page retrieval fails at the transport or API level.
    """

    def __init__(self, record_type: str, http_status: int | None, message: str) -> None:
        self.record_type = record_type
        self.http_status = http_status
        self.message = message
        super().__init__(f"{record_type}: {message} (status={http_status})")


class StoreConnectionError(ExporterError):
    """Raised internally when a store connectivity probe fails."""


class StoreNotFoundError(ExporterError, LookupError):
    """Raised when a store id is unknown or was never initialized."""


class RegistrySchemaError(ExporterError):
    """
    Raised when a metric write does not match the declared series schema.

    This indicates a code defect, not a runtime condition.
    """
