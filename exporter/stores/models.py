"""
Store configuration models.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_WP_JSON_SUFFIX = re.compile(r"/wp-json.*$")


@dataclass(frozen=True)
class StoreDescriptor:
    """
    Identity, credentials and tuning for one WooCommerce store.
    """

    id: str
    display_name: str
    base_url: str
    api_key: str
    api_secret: str
    currency_code: str = "USD"
    enabled: bool = True
    request_timeout_ms: int = 30000
    max_retries: int = 3
    scrape_interval_ms: int = 300000

    @property
    def request_timeout_seconds(self) -> float:
        return self.request_timeout_ms / 1000.0

    @property
    def public_url(self) -> str:
        """Store URL without any REST API path."""
        return _WP_JSON_SUFFIX.sub("", self.base_url).rstrip("/")

    def __repr__(self) -> str:
        return (
            f"StoreDescriptor(id={self.id!r}, display_name={self.display_name!r}, "
            f"base_url={self.public_url!r}, enabled={self.enabled!r})"
        )
