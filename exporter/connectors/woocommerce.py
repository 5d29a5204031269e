"""
exporter/connectors/woocommerce.py

WooCommerce REST API (wc/v3) store client.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

import requests

from exporter.connectors.base import BaseConnector, ConnectorRequestError
from exporter.domain import RECORD_TYPES, RecordPage
from exporter.errors import FetchError, StoreConnectionError
from exporter.logging_utils import log_event
from exporter.stores.models import StoreDescriptor

logger = logging.getLogger(__name__)

API_PATH = "wp-json/wc/v3"
PAGE_SIZE = 100
MAX_PAGES = 100


class StoreClient(BaseConnector):
    """
    Paginated retrieval against one store's REST API.

    The client owns no aggregation logic; it only turns API calls into
    ``RecordPage`` values or ``FetchError`` failures.
    """

    def __init__(
        self,
        store: StoreDescriptor,
        *,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(
            source=store.id,
            timeout_seconds=store.request_timeout_seconds,
            session=session,
        )
        self.store = store
        self._api_root = f"{store.public_url}/{API_PATH}"
        logger.info("Store client initialized store=%s name=%r", store.id, store.display_name)

    @property
    def store_id(self) -> str:
        return self.store.id

    @property
    def store_name(self) -> str:
        return self.store.display_name

    @property
    def currency(self) -> str:
        return self.store.currency_code

    def fetch_page(
        self,
        record_type: str,
        page_number: int = 1,
        page_size: int = PAGE_SIZE,
        filters: Mapping[str, Any] | None = None,
    ) -> RecordPage:
        """
        Fetch one page of raw records.

        Raises ``FetchError`` on any transport, HTTP or payload problem.
        """

        if record_type not in RECORD_TYPES:
            raise ValueError(
                f"Unsupported record type '{record_type}'. "
                f"Allowed types: {', '.join(sorted(RECORD_TYPES))}."
            )

        params = {**(filters or {}), "page": page_number, "per_page": page_size}
        logger.debug(
            "Fetching page store=%s record_type=%s page=%s per_page=%s",
            self.store_id,
            record_type,
            page_number,
            page_size,
        )
        try:
            payload = self._get(record_type, params)
        except ConnectorRequestError as exc:
            raise FetchError(record_type, exc.status_code, str(exc)) from exc

        if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
            raise FetchError(
                record_type,
                None,
                f"{self.store_id}: expected a JSON list of {record_type} records",
            )

        logger.debug(
            "Retrieved page store=%s record_type=%s page=%s records=%s",
            self.store_id,
            record_type,
            page_number,
            len(payload),
        )
        return RecordPage(record_type=record_type, page_number=page_number, records=tuple(payload))

    def fetch_all(
        self,
        record_type: str,
        filters: Mapping[str, Any] | None = None,
        *,
        page_size: int = PAGE_SIZE,
        max_pages: int = MAX_PAGES,
    ) -> Iterator[RecordPage]:
        """
        Lazily yield every non-empty page, starting from page 1.

        Stops at the first empty page. After ``max_pages`` non-empty pages the
        walk stops with an advisory log instead of an error, so callers may get
        an incomplete result. A ``FetchError`` aborts the walk.
        """

        for page_number in range(1, max_pages + 1):
            page = self.fetch_page(record_type, page_number, page_size, filters)
            if page.is_empty:
                return
            yield page

        log_event(
            logger,
            logging.WARNING,
            "pagination_ceiling_reached",
            store_id=self.store_id,
            record_type=record_type,
            max_pages=max_pages,
        )

    def probe(self) -> bool:
        """
        Issue one status call. Failures are logged and reported as False.
        """

        logger.info("Testing connection store=%s", self.store_id)
        try:
            self._check_connection()
        except StoreConnectionError as exc:
            logger.error("Connection test failed store=%s error=%s", self.store_id, exc)
            return False

        logger.info("Connection test successful store=%s", self.store_id)
        return True

    def describe(self) -> dict[str, Any]:
        """
        Public store information, credentials excluded.
        """

        return {
            "id": self.store.id,
            "name": self.store.display_name,
            "url": self.store.public_url,
            "currency": self.store.currency_code,
            "enabled": self.store.enabled,
            "scrape_interval_ms": self.store.scrape_interval_ms,
        }

    def _check_connection(self) -> None:
        try:
            self._get("system_status", {})
        except ConnectorRequestError as exc:
            raise StoreConnectionError(str(exc)) from exc
        except Exception as exc:  # noqa: BLE001
            raise StoreConnectionError(f"{self.store_id}: unexpected probe failure: {exc}") from exc

    def _get(self, resource: str, params: dict[str, Any]) -> Any:
        auth = {
            "consumer_key": self.store.api_key,
            "consumer_secret": self.store.api_secret,
        }
        return self._request_json(
            method="GET",
            url=f"{self._api_root}/{resource}",
            params={**params, **auth},
        )
