"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int, *, low: int, high: int) -> int:
    """Read an integer environment variable and enforce an inclusive range."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        number = int(value.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    if not low <= number <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {number}")
    return number


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_log_level(name: str, default: str) -> str:
    """Read a logging level name such as ``DEBUG`` or ``warning``."""

    value = (os.getenv(name) or default).strip().upper()
    if value not in _LOG_LEVELS:
        raise ValueError(f"{name} must be one of {', '.join(_LOG_LEVELS)}, got {value!r}")
    return value


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "habitloop"
    DB_FILENAME = "habitloop.db"
    CACHE_FILENAME = "local_cache.db"

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("HABITLOOP_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv(
            "HABITLOOP_DATABASE_URL", self._build_sqlite_url(self.DB_FILENAME)
        )
        self.CACHE_URL = os.getenv("HABITLOOP_CACHE_URL", self._build_sqlite_url(self.CACHE_FILENAME))
        self.DEFAULT_RESET_HOUR = _env_int("HABITLOOP_RESET_HOUR", 4, low=0, high=23)
        self.DEFAULT_RESET_MINUTE = _env_int("HABITLOOP_RESET_MINUTE", 0, low=0, high=59)
        self.CACHE_WINDOW_DAYS = _env_int("HABITLOOP_CACHE_WINDOW_DAYS", 3, low=0, high=31)
        self.LOG_LEVEL = _env_log_level("HABITLOOP_LOG_LEVEL", "INFO")
        self.LOG_DIR = Path(os.getenv("HABITLOOP_LOG_DIR") or self.DATA_DIR / "logs").expanduser()

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite files and logs live."""

        data_root = os.getenv("HABITLOOP_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Read-only install locations fall back to the user's home directory.
            fallback_path = Path.home() / f".{self.APP_NAME}"
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()

    def _build_sqlite_url(self, filename: str) -> str:
        """Construct a SQLite URL for a file inside the data directory."""

        return f"sqlite:///{self.DATA_DIR / filename}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        return {"connect_args": {"check_same_thread": False}}
