"""
reductions/base.py

Abstract base class for record reductions and the field parsers they share.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

SummaryT = TypeVar("SummaryT")


class BaseReduction(ABC, Generic[SummaryT]):
    """
    Contract for record reductions.

    A reduction is fed raw API records one at a time through :meth:`add`
    and produces an immutable summary from :meth:`summary`.  Nothing is
    written anywhere until the caller decides the input was complete.

    No I/O, no logging, and no side effects are permitted.
    """

    @abstractmethod
    def add(self, record: dict[str, Any]) -> None:
        """
        Fold one raw record into the running totals.
        """

    @abstractmethod
    def summary(self) -> SummaryT:
        """
        Return the summary of every record added so far.
        """

    def add_all(self, records: Iterable[dict[str, Any]]) -> None:
        for record in records:
            self.add(record)


def parse_amount(value: Any) -> float:
    """
    Parse a monetary amount. Absent or non-numeric values count as zero.
    """

    if value is None or isinstance(value, bool):
        return 0.0
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    if parsed != parsed or parsed in (float("inf"), float("-inf")):
        return 0.0
    return parsed


def parse_quantity(value: Any) -> int | None:
    """
    Parse an integer quantity. Returns None when the value is absent or not numeric.
    """

    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def parse_local_datetime(value: Any) -> datetime | None:
    """
    Parse an API timestamp into a naive local-time datetime.

    Timestamps without an offset are taken as already local; timestamps
    with an offset are converted to the process' local timezone.
    """

    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed
    return parsed.astimezone().replace(tzinfo=None)


def utc_iso(moment: datetime) -> str:
    """
    Render a datetime as an ISO-8601 UTC string with a ``Z`` suffix.
    """

    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + (
        f"{moment.microsecond // 1000:03d}Z"
    )
