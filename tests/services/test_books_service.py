"""Tests for books_service use cases against an in-memory store."""
from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from book_tracker.db.models import Book
from book_tracker.db.repositories import books_repo, users_repo
from book_tracker.services import books_service
from book_tracker.services.books_service import (
    BookFields,
    BookNotFoundError,
    BookValidationError,
    StoreError,
)


@pytest.fixture
def reader_ids(database):
    with database.session() as session:
        reader = users_repo.create_user(session, email="reader@example.com", password="hash")
        other = users_repo.create_user(session, email="other@example.com", password="hash")
    return reader.id, other.id


def _fields(**overrides) -> BookFields:
    form = {
        "title": "Dune",
        "author": "Frank Herbert",
        "notes": "Spice.",
        "rating": "4.5",
        "date_read": "2024-03-01",
    }
    form.update(overrides)
    return BookFields.from_form(form)


def test_from_form_parses_and_cleans_values():
    fields = _fields(notes="  ", rating="", cover_url=" ")

    assert fields.title == "Dune"
    assert fields.date_read == date(2024, 3, 1)
    assert fields.notes is None
    assert fields.rating is None
    assert fields.cover_url is None


@pytest.mark.parametrize(
    "overrides,code",
    [
        ({"title": " "}, "title_required"),
        ({"author": ""}, "author_required"),
        ({"date_read": "01/03/2024"}, "date_read_invalid"),
        ({"date_read": ""}, "date_read_invalid"),
        ({"rating": "five"}, "rating_invalid"),
        ({"rating": "5.5"}, "rating_invalid"),
        ({"rating": "nan"}, "rating_invalid"),
    ],
)
def test_from_form_rejects_invalid_input(overrides, code):
    with pytest.raises(BookValidationError) as excinfo:
        _fields(**overrides)
    assert str(excinfo.value) == code


def test_add_book_replaces_cover_with_lookup(database, reader_ids, cover_calls, stub_cover_url):
    reader, _other = reader_ids

    book = books_service.add_book(
        database, user_id=reader, fields=_fields(cover_url="https://evil.example/cover.png")
    )

    assert book.cover_url == stub_cover_url
    assert cover_calls == [("Dune", "Frank Herbert")]


def test_add_then_list_get_edit_delete(database, reader_ids, cover_calls, stub_cover_url):
    reader, _other = reader_ids
    books_service.add_book(database, user_id=reader, fields=_fields(title="Older", date_read="2020-01-01"))
    added = books_service.add_book(
        database, user_id=reader, fields=_fields(title="Today", date_read=date.today().isoformat())
    )

    listed = books_service.list_books(database, user_id=reader)
    assert listed[0].id == added.id

    books_service.update_book(
        database,
        user_id=reader,
        book_id=added.id,
        fields=_fields(title="Today (reread)", rating="3", notes="Better the second time"),
    )
    fetched = books_service.get_book(database, user_id=reader, book_id=added.id)
    assert fetched.title == "Today (reread)"
    assert fetched.rating == 3
    assert fetched.notes == "Better the second time"
    assert fetched.cover_url == stub_cover_url

    books_service.delete_book(database, user_id=reader, book_id=added.id)
    assert added.id not in {book.id for book in books_service.list_books(database, user_id=reader)}


def test_update_with_cover_url_overrides_stored_cover(database, reader_ids, cover_calls):
    reader, _other = reader_ids
    added = books_service.add_book(database, user_id=reader, fields=_fields())

    books_service.update_book(
        database, user_id=reader, book_id=added.id, fields=_fields(cover_url="/static/custom.jpg")
    )

    assert books_service.get_book(database, user_id=reader, book_id=added.id).cover_url == "/static/custom.jpg"


def test_foreign_book_is_not_found_for_every_operation(database, reader_ids, cover_calls):
    reader, other = reader_ids
    added = books_service.add_book(database, user_id=reader, fields=_fields())

    with pytest.raises(BookNotFoundError):
        books_service.get_book(database, user_id=other, book_id=added.id)
    with pytest.raises(BookNotFoundError):
        books_service.update_book(database, user_id=other, book_id=added.id, fields=_fields(title="Mine now"))
    with pytest.raises(BookNotFoundError):
        books_service.delete_book(database, user_id=other, book_id=added.id)

    assert books_service.get_book(database, user_id=reader, book_id=added.id).title == "Dune"


def test_delete_missing_book_reports_not_found(database, reader_ids):
    reader, _other = reader_ids
    with pytest.raises(BookNotFoundError):
        books_service.delete_book(database, user_id=reader, book_id=12345)


def test_list_swallows_store_failures(database, reader_ids, monkeypatch):
    reader, _other = reader_ids

    def broken_list(*_args, **_kwargs):
        raise OperationalError("SELECT * FROM books", {}, Exception("connection lost"))

    monkeypatch.setattr(books_service.books_repo, "list_books", broken_list)

    assert books_service.list_books(database, user_id=reader, sort_key="rating") == []


def test_add_store_failure_raises_store_error_without_partial_row(database, reader_ids, cover_calls, monkeypatch):
    reader, _other = reader_ids

    def broken_create(*_args, **_kwargs):
        raise OperationalError("INSERT INTO books", {}, Exception("disk full"))

    monkeypatch.setattr(books_service.books_repo, "create_book", broken_create)

    with pytest.raises(StoreError):
        books_service.add_book(database, user_id=reader, fields=_fields())
    with database.session() as session:
        assert session.query(Book).count() == 0


def test_list_uses_repository_sorting(database, reader_ids, cover_calls):
    reader, _other = reader_ids
    books_service.add_book(database, user_id=reader, fields=_fields(title="B", rating="2"))
    books_service.add_book(database, user_id=reader, fields=_fields(title="A", rating="5"))

    by_title = books_service.list_books(database, user_id=reader, sort_key=books_repo.SORT_TITLE)
    by_rating = books_service.list_books(database, user_id=reader, sort_key=books_repo.SORT_RATING)

    assert [book.title for book in by_title] == ["A", "B"]
    assert [book.rating for book in by_rating] == [5, 2]
