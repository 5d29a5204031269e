"""
JSON store configuration loader.

The document holds an explicit, ordered list of stores::

    {"stores": [{"id": "store1", "name": "Main shop", "url": "https://shop.example",
                 "consumer_key_env": "STORE1_KEY", "consumer_secret_env": "STORE1_SECRET"}]}

Every entry is validated and all problems are reported together in a single
``ConfigurationError``.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from exporter.config import resolve_project_path
from exporter.errors import ConfigurationError
from exporter.stores.models import StoreDescriptor

MIN_SCRAPE_INTERVAL_MS = 60000
MIN_TIMEOUT_MS = 5000

_DEFAULT_CURRENCY = "USD"
_DEFAULT_SCRAPE_INTERVAL_MS = 300000
_DEFAULT_TIMEOUT_MS = 30000
_DEFAULT_MAX_RETRIES = 3


def load_store_configs(*, config_path: str) -> list[StoreDescriptor]:
    """
    Load and validate store descriptors from a JSON file.
    """

    path: Path = resolve_project_path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Store config file not found: {path}")

    try:
        raw_data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"Store config file {path} could not be read: {exc}") from exc

    if not isinstance(raw_data, dict):
        raise ConfigurationError("Invalid store config: top level must be an object.")
    return parse_store_configs(raw_data.get("stores", []))


def parse_store_configs(entries: Any) -> list[StoreDescriptor]:
    """
    Build store descriptors from already-decoded configuration entries.
    """

    if not isinstance(entries, list):
        raise ConfigurationError("Invalid store config: 'stores' must be a list.")

    errors: list[str] = []
    stores: list[StoreDescriptor] = []
    seen_ids: set[str] = set()

    for index, entry in enumerate(entries, start=1):
        if not isinstance(entry, Mapping):
            errors.append(f"Store #{index}: entry must be an object")
            continue

        store_id = _optional_str(entry.get("id")) or f"store{index}"
        label = f"Store {store_id}"
        if store_id in seen_ids:
            errors.append(f"{label}: duplicate store id")
        seen_ids.add(store_id)

        url = _optional_str(entry.get("url")) or ""
        consumer_key = _credential(entry, "consumer_key")
        consumer_secret = _credential(entry, "consumer_secret")

        if not url:
            errors.append(f"{label}: URL is required")
        elif not url.startswith(("http://", "https://")):
            errors.append(f"{label}: URL must start with http:// or https://")
        if not consumer_key:
            errors.append(f"{label}: Consumer Key is required")
        if not consumer_secret:
            errors.append(f"{label}: Consumer Secret is required")

        scrape_interval_ms = _int_field(
            entry, "scrape_interval_ms", _DEFAULT_SCRAPE_INTERVAL_MS, label, errors
        )
        timeout_ms = _int_field(entry, "timeout_ms", _DEFAULT_TIMEOUT_MS, label, errors)
        max_retries = _int_field(entry, "max_retries", _DEFAULT_MAX_RETRIES, label, errors)

        if scrape_interval_ms < MIN_SCRAPE_INTERVAL_MS:
            errors.append(
                f"{label}: Scrape interval must be at least {MIN_SCRAPE_INTERVAL_MS}ms (1 minute)"
            )
        if timeout_ms < MIN_TIMEOUT_MS:
            errors.append(f"{label}: Timeout must be at least {MIN_TIMEOUT_MS}ms (5 seconds)")
        if max_retries < 0:
            errors.append(f"{label}: max_retries must not be negative")

        stores.append(
            StoreDescriptor(
                id=store_id,
                display_name=_optional_str(entry.get("name")) or f"Store {index}",
                base_url=url.rstrip("/"),
                api_key=consumer_key,
                api_secret=consumer_secret,
                currency_code=(_optional_str(entry.get("currency")) or _DEFAULT_CURRENCY).upper(),
                enabled=_optional_bool(entry.get("enabled"), True),
                request_timeout_ms=timeout_ms,
                max_retries=max_retries,
                scrape_interval_ms=scrape_interval_ms,
            )
        )

    if errors:
        raise ConfigurationError(errors)
    return stores


def enabled_stores(stores: Sequence[StoreDescriptor]) -> list[StoreDescriptor]:
    return [store for store in stores if store.enabled]


def _credential(entry: Mapping[str, Any], field_name: str) -> str:
    direct = _optional_str(entry.get(field_name))
    if direct:
        return direct
    env_name = _optional_str(entry.get(f"{field_name}_env"))
    if env_name:
        return (os.getenv(env_name) or "").strip()
    return ""


def _int_field(
    entry: Mapping[str, Any],
    field_name: str,
    default: int,
    label: str,
    errors: list[str],
) -> int:
    value = entry.get(field_name)
    if value is None:
        return default
    if isinstance(value, bool):
        errors.append(f"{label}: {field_name} must be an integer")
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        errors.append(f"{label}: {field_name} must be an integer")
        return default


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, (str, int)) or isinstance(value, bool):
        return None
    stripped = str(value).strip()
    return stripped or None


def _optional_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    return default
