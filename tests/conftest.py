"""Shared fixtures: in-memory store, app factory and signed-in clients."""
from __future__ import annotations

import pytest

from book_tracker.db.engine import EXTENSION_KEY, Database
from book_tracker.services import covers_service
from book_tracker.startup import create_app

STUB_COVER_URL = "https://covers.openlibrary.org/b/isbn/9780000000000-L.jpg"


@pytest.fixture
def stub_cover_url() -> str:
    return STUB_COVER_URL


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_schema()
    yield db
    db.dispose()


@pytest.fixture
def cover_calls(monkeypatch):
    """Replace the Open Library lookup; returns the list of (title, author) calls."""
    calls: list = []

    def fake_lookup(title, author, **_kwargs):
        calls.append((title, author))
        return STUB_COVER_URL

    monkeypatch.setattr(covers_service, "lookup_cover", fake_lookup)
    return calls


@pytest.fixture
def flask_app(monkeypatch, cover_calls):
    monkeypatch.delenv("GOOGLE_CLIENT_ID", raising=False)
    monkeypatch.delenv("GOOGLE_CLIENT_SECRET", raising=False)
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "book-tracker-test-secret",
            "DATABASE_URL": "sqlite://",
            "WTF_CSRF_ENABLED": False,
        }
    )
    yield app
    app.extensions[EXTENSION_KEY].dispose()


@pytest.fixture
def app_db(flask_app) -> Database:
    return flask_app.extensions[EXTENSION_KEY]


@pytest.fixture
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture
def signed_in_client(client):
    resp = client.post(
        "/register",
        data={"email": "reader@example.com", "password": "Secret123!"},
        follow_redirects=False,
    )
    assert resp.status_code == 302
    return client
