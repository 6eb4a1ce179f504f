"""Dashboard configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlsplit

from .models import Thresholds

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3003
DEFAULT_WEB_URL = "http://localhost:4096"
DEFAULT_REFRESH_INTERVAL_MS = 5000
DEFAULT_BUSY_MINUTES = 5
DEFAULT_STALE_MINUTES = 30


@dataclass(frozen=True)
class Settings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    storage_path: Path = field(default_factory=lambda: default_storage_path())
    web_url: str = DEFAULT_WEB_URL
    refresh_interval_ms: int = DEFAULT_REFRESH_INTERVAL_MS
    thresholds: Thresholds = field(default_factory=Thresholds)


def load_settings() -> Settings:
    storage_path = _env_or("OPENCODE_STORAGE_PATH", None)
    return Settings(
        host=_env_or("HOST", DEFAULT_HOST),
        port=_env_int("PORT", DEFAULT_PORT),
        storage_path=expand_home(storage_path) if storage_path else default_storage_path(),
        web_url=normalize_base_url(os.environ.get("OPENCODE_WEB_URL"), DEFAULT_WEB_URL),
        refresh_interval_ms=_env_int("REFRESH_INTERVAL_MS", DEFAULT_REFRESH_INTERVAL_MS),
        thresholds=Thresholds(
            busy_minutes=_env_int("SESSION_BUSY_THRESHOLD_MIN", DEFAULT_BUSY_MINUTES),
            stale_minutes=_env_int("SESSION_STALE_THRESHOLD_MIN", DEFAULT_STALE_MINUTES),
        ),
    )


def default_storage_path() -> Path:
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return expand_home(xdg) / "opencode" / "storage"
    return Path.home() / ".local" / "share" / "opencode" / "storage"


def expand_home(value: str) -> Path:
    return Path(value).expanduser()


def normalize_base_url(raw: str | None, fallback: str) -> str:
    """``raw`` without a trailing slash, or ``fallback`` when it is not an absolute URL."""
    value = raw if raw else fallback
    parts = urlsplit(value)
    if not parts.scheme or not parts.netloc:
        value = fallback
    return value.rstrip("/")


def _env_or(name: str, default: str | None) -> str | None:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return value


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default
