"""
exporter/connectors/base.py

Base connector abstraction and shared HTTP mechanics.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import requests

logger = logging.getLogger(__name__)


class ConnectorRequestError(RuntimeError):
    """
    Raised when a single HTTP request fails at the transport or API level.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BaseConnector(ABC):
    """
    Connector interface with single-attempt JSON request mechanics.

    There are no retries: a failed call fails the current
    collection and the next scheduled cycle is the retry.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        timeout_seconds: float,
        session: requests.Session | None = None,
    ) -> None:
        self.source = source
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds

    @abstractmethod
    def probe(self) -> bool:
        """
        Return True when the remote API answers a lightweight status call.
        """

    def close(self) -> None:
        self._session.close()

    def _request_json(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Execute an HTTP request and return parsed JSON.
        """

        response = self._request(method=method, url=url, params=params, headers=headers)
        try:
            return response.json()
        except ValueError as exc:
            raise ConnectorRequestError(
                f"{self.source}: response was not valid JSON.",
                status_code=response.status_code,
            ) from exc

    def _request(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        """
        Execute one HTTP request bounded by the configured timeout.
        """

        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                headers=headers,
                timeout=self._timeout_seconds,
            )
            response.raise_for_status()
            return response
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            logger.error(
                "Connector request failed source=%s status=%s url=%s",
                self.source,
                status_code,
                url,
            )
            raise ConnectorRequestError(
                f"{self.source}: HTTP {status_code} from {url}",
                status_code=status_code,
            ) from exc
        except requests.Timeout as exc:
            logger.error(
                "Connector request timed out source=%s timeout_seconds=%.1f url=%s",
                self.source,
                self._timeout_seconds,
                url,
            )
            raise ConnectorRequestError(
                f"{self.source}: request timed out after {self._timeout_seconds:.1f}s"
            ) from exc
        except requests.RequestException as exc:
            # requests embeds the full URL, query string credentials included, in its messages
            error_kind = type(exc).__name__
            logger.error(
                "Connector transport failure source=%s url=%s error=%s",
                self.source,
                url,
                error_kind,
            )
            raise ConnectorRequestError(f"{self.source}: {error_kind} while calling {url}") from exc
