"""Reading-log use cases: validate input, enrich covers, persist per user."""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError

from book_tracker.db.engine import Database
from book_tracker.db.models import Book
from book_tracker.db.repositories import books_repo
from book_tracker.services import covers_service
from book_tracker.utils.logging import get_logger

LOG = get_logger("books_service")

RATING_MIN = 0.0
RATING_MAX = 5.0


class BookServiceError(RuntimeError):
    """Base error for book workflows."""


class BookNotFoundError(BookServiceError):
    """Raised when the book is missing or owned by another user."""


class StoreError(BookServiceError):
    """Raised when the relational store rejects or fails a request."""


class BookValidationError(BookServiceError):
    """Raised when submitted form fields are unusable."""


def _clean_text(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    cleaned = str(raw).strip()
    return cleaned or None


def _parse_date(raw: Any) -> date:
    cleaned = _clean_text(raw)
    if not cleaned:
        raise BookValidationError("date_read_invalid")
    try:
        return date.fromisoformat(cleaned)
    except ValueError as exc:
        raise BookValidationError("date_read_invalid") from exc


def _parse_rating(raw: Any) -> Optional[float]:
    cleaned = _clean_text(raw)
    if cleaned is None:
        return None
    try:
        value = float(cleaned)
    except ValueError as exc:
        raise BookValidationError("rating_invalid") from exc
    if not math.isfinite(value) or not RATING_MIN <= value <= RATING_MAX:
        raise BookValidationError("rating_invalid")
    return value


@dataclass(frozen=True)
class BookFields:
    """Submitted book attributes.

    title, author and date_read are required; notes and rating may be empty.
    cover_url is only honoured on update (empty keeps the stored cover); on
    add it is always replaced by the Open Library lookup.
    """

    title: str
    author: str
    date_read: date
    notes: Optional[str] = None
    rating: Optional[float] = None
    cover_url: Optional[str] = None

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "BookFields":
        title = _clean_text(form.get("title"))
        if not title:
            raise BookValidationError("title_required")
        author = _clean_text(form.get("author"))
        if not author:
            raise BookValidationError("author_required")
        return cls(
            title=title,
            author=author,
            date_read=_parse_date(form.get("date_read")),
            notes=_clean_text(form.get("notes")),
            rating=_parse_rating(form.get("rating")),
            cover_url=_clean_text(form.get("cover_url")),
        )

    def update_values(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {
            "title": self.title,
            "author": self.author,
            "notes": self.notes,
            "rating": self.rating,
            "date_read": self.date_read,
        }
        if self.cover_url:
            values["cover_url"] = self.cover_url
        return values


def list_books(db: Database, *, user_id: int, sort_key: Optional[str] = None) -> List[Book]:
    """Return the user's books; an unreadable store yields an empty list."""
    try:
        with db.session() as session:
            return books_repo.list_books(session, user_id=user_id, sort_key=sort_key)
    except SQLAlchemyError:
        LOG.warning("list_books failed user_id=%s sort=%s", user_id, sort_key, exc_info=True)
        return []


def get_book(db: Database, *, user_id: int, book_id: int) -> Book:
    try:
        with db.session() as session:
            book = books_repo.get_book(session, book_id=book_id, user_id=user_id)
    except SQLAlchemyError as exc:
        LOG.warning("get_book failed user_id=%s book_id=%s", user_id, book_id, exc_info=True)
        raise StoreError("store_failed") from exc
    if book is None:
        raise BookNotFoundError("book_not_found")
    return book


def add_book(db: Database, *, user_id: int, fields: BookFields) -> Book:
    cover_url = covers_service.lookup_cover(fields.title, fields.author)
    try:
        with db.session() as session:
            book = books_repo.create_book(
                session,
                user_id=user_id,
                title=fields.title,
                author=fields.author,
                notes=fields.notes,
                rating=fields.rating,
                date_read=fields.date_read,
                cover_url=cover_url,
            )
    except SQLAlchemyError as exc:
        LOG.warning("add_book failed user_id=%s title=%s", user_id, fields.title, exc_info=True)
        raise StoreError("store_failed") from exc
    LOG.info("Added book id=%s user_id=%s", book.id, user_id)
    return book


def update_book(db: Database, *, user_id: int, book_id: int, fields: BookFields) -> None:
    try:
        with db.session() as session:
            updated = books_repo.update_book(
                session, book_id=book_id, user_id=user_id, values=fields.update_values()
            )
    except SQLAlchemyError as exc:
        LOG.warning("update_book failed user_id=%s book_id=%s", user_id, book_id, exc_info=True)
        raise StoreError("store_failed") from exc
    if not updated:
        LOG.info("update_book matched no row user_id=%s book_id=%s", user_id, book_id)
        raise BookNotFoundError("book_not_found")


def delete_book(db: Database, *, user_id: int, book_id: int) -> None:
    try:
        with db.session() as session:
            deleted = books_repo.delete_book(session, book_id=book_id, user_id=user_id)
    except SQLAlchemyError as exc:
        LOG.warning("delete_book failed user_id=%s book_id=%s", user_id, book_id, exc_info=True)
        raise StoreError("store_failed") from exc
    if not deleted:
        LOG.info("delete_book matched no row user_id=%s book_id=%s", user_id, book_id)
        raise BookNotFoundError("book_not_found")
    LOG.info("Deleted book id=%s user_id=%s", book_id, user_id)


__all__ = [
    "BookServiceError",
    "BookNotFoundError",
    "StoreError",
    "BookValidationError",
    "BookFields",
    "list_books",
    "get_book",
    "add_book",
    "update_book",
    "delete_book",
]
