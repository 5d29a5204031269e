"""
exporter/config.py

Process-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

_DEVELOPMENT_ENVIRONMENTS = {"dev", "development", "local"}


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    for filename in (".env", ".env.local"):
        env_path = PROJECT_ROOT / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def resolve_project_path(raw_path: str) -> Path:
    """
    Resolve a possibly relative path against the project root.
    """

    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (PROJECT_ROOT / candidate).resolve()


@dataclass(frozen=True)
class ExporterSettings:
    """
    Runtime settings for the exporter process.
    """

    host: str = "0.0.0.0"
    port: int = 9090
    scrape_schedule: str = "*/5 * * * *"
    stores_config_path: str = "config/stores.json"
    environment: str = "production"
    log_level: str = "INFO"
    collect_on_startup: bool = True
    shutdown_drain_seconds: float = 60.0

    @property
    def is_development(self) -> bool:
        return self.environment in _DEVELOPMENT_ENVIRONMENTS


@lru_cache(maxsize=1)
def get_exporter_settings() -> ExporterSettings:
    """
    Return cached exporter settings from environment variables.
    """

    return ExporterSettings(
        host=_get_str_env("HOST", "0.0.0.0"),
        port=max(1, _get_int_env("PORT", 9090)),
        scrape_schedule=_get_str_env("SCRAPE_SCHEDULE", "*/5 * * * *"),
        stores_config_path=str(
            resolve_project_path(_get_str_env("STORES_CONFIG_PATH", "config/stores.json"))
        ),
        environment=_get_str_env("ENVIRONMENT", "production").lower(),
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
        collect_on_startup=_get_bool_env("COLLECT_ON_STARTUP", True),
        shutdown_drain_seconds=max(0.0, _get_float_env("SHUTDOWN_DRAIN_SECONDS", 60.0)),
    )
