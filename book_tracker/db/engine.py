"""Database engine & session management.

Each Flask app owns one `Database` (engine + session factory), stored in
`app.extensions`. Repositories never reach for a module-level connection;
callers open a session from the owning `Database` and pass it in.
"""
from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from flask import current_app
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session as SASession, sessionmaker
from sqlalchemy.pool import StaticPool

from book_tracker.db.models import Base
from book_tracker.utils.logging import get_logger

LOG = get_logger("db")
EXTENSION_KEY = "book_tracker.db"


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def _build_engine(url: str, echo: bool = False) -> Engine:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return create_engine(url, echo=echo, pool_pre_ping=True)
    database = parsed.database
    if not database or database == ":memory:":
        # One shared connection so every session sees the same in-memory DB.
        engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        parent_dir = os.path.dirname(os.path.abspath(database)) or "."
        os.makedirs(parent_dir, exist_ok=True)
        if not os.access(parent_dir, os.W_OK):
            raise RuntimeError(f"book_tracker DB directory not writable: {parent_dir}")
        engine = create_engine(url, echo=echo, connect_args={"check_same_thread": False})
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


class Database:
    """Explicitly-owned store handle: engine plus session factory."""

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self.engine: Engine = _build_engine(url, echo=echo)
        self._factory: Callable[[], SASession] = sessionmaker(
            bind=self.engine, expire_on_commit=False, class_=SASession
        )

    def create_schema(self) -> None:
        """Run metadata.create_all, tolerating the multi-worker startup race.

        Parallel workers can hit "table ... already exists" between the
        existence check and the DDL; that specific error is benign.
        """
        try:
            Base.metadata.create_all(self.engine)
        except OperationalError as e:  # pragma: no cover - concurrency edge
            if "already exists" in str(e).lower():
                LOG.warning("Schema create encountered existing tables (benign race)")
            else:
                raise
        LOG.debug("book_tracker schema ready")

    @contextmanager
    def session(self) -> Iterator[SASession]:
        sess = self._factory()
        try:
            yield sess
            sess.commit()
        except Exception:
            sess.rollback()
            raise
        finally:
            sess.close()

    def dispose(self) -> None:
        self.engine.dispose()


def init_db(app: Any, url: str) -> Database:
    existing = app.extensions.get(EXTENSION_KEY)
    if existing is not None:
        return existing
    LOG.info("Initializing book_tracker database engine at %s",
             make_url(url).render_as_string(hide_password=True))
    db = Database(url)
    db.create_schema()
    app.extensions[EXTENSION_KEY] = db
    return db


def get_db() -> Database:
    db = current_app.extensions.get(EXTENSION_KEY)
    if db is None:
        raise RuntimeError("database_not_initialized")
    return db


@contextmanager
def app_session() -> Iterator[SASession]:
    with get_db().session() as sess:
        yield sess


__all__ = [
    "Database",
    "init_db",
    "get_db",
    "app_session",
    "EXTENSION_KEY",
]
