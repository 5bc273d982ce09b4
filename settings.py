from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple


_API_KEY_ENV = "OPENWEATHER_API_KEY"
_BASE_URL_ENV = "OPENWEATHER_BASE_URL"
_LOCATIONS_ENV = "WEATHER_LOCATIONS"
_POLL_INTERVAL_ENV = "POLL_INTERVAL_SECONDS"
_THRESHOLD_ENV = "ALERT_TEMP_THRESHOLD"
_CONSECUTIVE_ENV = "ALERT_CONSECUTIVE_UPDATES"
_TIMEOUT_ENV = "REQUEST_TIMEOUT_SECONDS"
_DB_PATH_ENV = "SUMMARY_DB_PATH"
_CORS_ORIGINS_ENV = "CORS_ALLOWED_ORIGINS"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_LOCATIONS = ("Delhi", "Mumbai", "Chennai", "Bangalore", "Kolkata", "Hyderabad")


class ConfigurationError(RuntimeError):
    """Raised when the environment does not describe a runnable service."""


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str]
    base_url: str
    locations: Tuple[str, ...]
    poll_interval: float
    alert_threshold: float
    alert_consecutive: int
    request_timeout: float
    summary_db_path: Optional[str]
    cors_origins: Tuple[str, ...]
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_list_env(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    items = (item.strip() for item in value.split(","))
    # dict.fromkeys keeps the first occurrence of each entry
    return tuple(dict.fromkeys(item for item in items if item))


def _read_float(name: str, default: float, positive: bool = False) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {candidate!r}.") from exc
    if positive and parsed <= 0:
        raise ConfigurationError(f"{name} must be greater than zero, got {candidate!r}.")
    return parsed


def _read_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        return int(candidate)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {candidate!r}.") from exc


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        api_key=_read_optional_env(_API_KEY_ENV, None),
        base_url=_read_str_env(_BASE_URL_ENV, "https://api.openweathermap.org/data/2.5").rstrip("/"),
        locations=_read_list_env(_LOCATIONS_ENV, DEFAULT_LOCATIONS),
        poll_interval=_read_float(_POLL_INTERVAL_ENV, 300.0, positive=True),
        alert_threshold=_read_float(_THRESHOLD_ENV, 35.0),
        alert_consecutive=_read_int(_CONSECUTIVE_ENV, 2),
        request_timeout=_read_float(_TIMEOUT_ENV, 10.0, positive=True),
        summary_db_path=_read_optional_env(_DB_PATH_ENV, "./tmp/weather_summary.db"),
        cors_origins=_read_list_env(_CORS_ORIGINS_ENV, ("*",)),
        log_level=_read_log_level("INFO"),
    )


def require_api_key(settings: Settings) -> str:
    """Return the provider credential or fail startup."""
    if not settings.api_key:
        raise ConfigurationError(f"{_API_KEY_ENV} is not set in the environment.")
    return settings.api_key
