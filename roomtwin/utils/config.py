"""Environment-driven runtime settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


def _env_int(name: str, default: int) -> int:
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return default
    try:
        return int(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw_value!r}") from exc


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    room_count: int
    default_capacity: int
    host: str
    port: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process.

    Tests derive variants with ``dataclasses.replace`` and call
    ``get_settings.cache_clear()`` after changing environment variables.
    """
    return Settings(
        app_name=os.getenv("ROOMTWIN_APP_NAME", "RoomTwin Reservation Service"),
        app_version=os.getenv("ROOMTWIN_APP_VERSION", "1.0.0"),
        log_level=os.getenv("ROOMTWIN_LOG_LEVEL", "INFO"),
        room_count=_env_int("ROOMTWIN_ROOM_COUNT", 3),
        default_capacity=_env_int("ROOMTWIN_DEFAULT_CAPACITY", 10),
        host=os.getenv("ROOMTWIN_HOST", "127.0.0.1"),
        port=_env_int("ROOMTWIN_PORT", 8000),
    )
