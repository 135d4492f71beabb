"""Database layer root.

Re-exports the engine/session helpers so callers can import from
`book_tracker.db` directly.
"""

from .engine import (
    Database,
    init_db,
    get_db,
    app_session,
)

__all__ = [
    "Database",
    "init_db",
    "get_db",
    "app_session",
]
