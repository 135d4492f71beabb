"""Application configuration accessors.

Centralizes environment variable parsing & defaults. Variable names match
the deployment .env used by operators (PG_*, SESSION_SECRET, GOOGLE_*), so
existing configs keep working unchanged.
"""
from __future__ import annotations

import os
from functools import lru_cache

from sqlalchemy.engine import URL, make_url

APP_NAME = "book_tracker"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Personal reading log with ratings, notes and covers"

DEFAULT_DB_PATH = "book_tracker.db"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_COVER_LOOKUP_TIMEOUT = 5.0
DEFAULT_GOOGLE_CALLBACK_URL = "http://localhost:3000/auth/google/book-tracker"
_TRUE = {"1", "true", "yes", "on"}


def _raw_env(name: str, default: str | None = None) -> str | None:
    val = os.getenv(name)
    return val if val is not None else default


def _stripped_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def env_bool(name: str, default: bool = False) -> bool:
    raw = _raw_env(name, str(default).lower())
    if raw is None:
        return default
    return raw.lower() in _TRUE


def get_db_path() -> str:
    return _raw_env("BOOK_TRACKER_DB_PATH", DEFAULT_DB_PATH)  # type: ignore[return-value]


def _postgres_configured() -> bool:
    return any(_stripped_env(name) for name in ("PG_HOST", "PG_DATABASE"))


def database_url() -> str:
    """Resolve the SQLAlchemy URL for the relational store.

    Precedence: DATABASE_URL, then the PG_* connection parameters, then a
    local SQLite file (BOOK_TRACKER_DB_PATH).
    """
    explicit = _stripped_env("DATABASE_URL")
    if explicit:
        return explicit
    if _postgres_configured():
        port_raw = _stripped_env("PG_PORT")
        try:
            port = int(port_raw) if port_raw else None
        except ValueError:
            port = None
        url = URL.create(
            "postgresql+psycopg2",
            username=_stripped_env("PG_USER"),
            password=os.getenv("PG_PASSWORD"),
            host=_stripped_env("PG_HOST"),
            port=port,
            database=_stripped_env("PG_DATABASE"),
        )
        return url.render_as_string(hide_password=False)
    return f"sqlite:///{get_db_path()}"


def session_secret() -> str | None:
    return _stripped_env("SESSION_SECRET")


def google_client_id() -> str | None:
    return _stripped_env("GOOGLE_CLIENT_ID")


def google_client_secret() -> str | None:
    return _stripped_env("GOOGLE_CLIENT_SECRET")


def google_callback_url() -> str:
    return _stripped_env("GOOGLE_CALLBACK_URL") or DEFAULT_GOOGLE_CALLBACK_URL


def google_configured() -> bool:
    return bool(google_client_id() and google_client_secret())


def cover_lookup_timeout() -> float:
    """Seconds to wait on the Open Library search before using the fallback."""
    raw = _stripped_env("COVER_LOOKUP_TIMEOUT")
    if not raw:
        return DEFAULT_COVER_LOOKUP_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_COVER_LOOKUP_TIMEOUT
    return value if value > 0 else DEFAULT_COVER_LOOKUP_TIMEOUT


def log_level_name() -> str:
    return _raw_env("BOOK_TRACKER_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()  # type: ignore[union-attr]


def server_host() -> str:
    return _stripped_env("BOOK_TRACKER_HOST") or DEFAULT_HOST


def server_port() -> int:
    raw = _stripped_env("BOOK_TRACKER_PORT") or _stripped_env("PORT")
    if not raw:
        return DEFAULT_PORT
    try:
        return int(raw)
    except ValueError:
        return DEFAULT_PORT


def debug_enabled() -> bool:
    return env_bool("BOOK_TRACKER_DEBUG", default=False)


def csrf_enabled() -> bool:
    return env_bool("BOOK_TRACKER_CSRF_ENABLED", default=True)


@lru_cache(maxsize=1)
def metadata() -> dict:
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "description": APP_DESCRIPTION,
    }


def summarize_runtime_config() -> dict:
    return {
        "database": make_url(database_url()).render_as_string(hide_password=True),
        "log_level": log_level_name(),
        "google_oauth": google_configured(),
        "cover_lookup_timeout": cover_lookup_timeout(),
    }


__all__ = [
    "APP_NAME",
    "APP_VERSION",
    "APP_DESCRIPTION",
    "env_bool",
    "get_db_path",
    "database_url",
    "session_secret",
    "google_client_id",
    "google_client_secret",
    "google_callback_url",
    "google_configured",
    "cover_lookup_timeout",
    "log_level_name",
    "server_host",
    "server_port",
    "debug_enabled",
    "csrf_enabled",
    "metadata",
    "summarize_runtime_config",
]
