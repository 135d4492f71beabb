"""Repository helpers for the per-user book collection.

Every query filters on both the book id and the owning user id; a caller
can never read, change or remove another user's row through this module.
"""
from __future__ import annotations

import unicodedata
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from book_tracker.db.models import Book

SORT_RATING = "rating"
SORT_TITLE = "title"
SORT_DATE_READ = "date_read"
SORT_KEYS = (SORT_RATING, SORT_TITLE, SORT_DATE_READ)
DEFAULT_SORT = SORT_DATE_READ

_UPDATABLE_COLUMNS = {"title", "author", "notes", "rating", "date_read", "cover_url"}


def normalize_sort(sort_key: Optional[str]) -> str:
    cleaned = (sort_key or "").strip().lower()
    return cleaned if cleaned in SORT_KEYS else DEFAULT_SORT


def _order_by(sort_key: str) -> list:
    if sort_key == SORT_RATING:
        return [Book.rating.desc().nulls_last(), Book.id.desc()]
    if sort_key == SORT_TITLE:
        # Title collation happens in Python; see title_sort_key.
        return [Book.id.desc()]
    return [Book.date_read.desc(), Book.id.desc()]


def title_sort_key(title: Optional[str]) -> tuple:
    """Accent- and case-insensitive key ('Émile' sorts with 'emile').

    SQLite's lower() only folds ASCII, so titles are ordered here rather
    than in SQL; the exact title breaks ties.
    """
    raw = title or ""
    decomposed = unicodedata.normalize("NFKD", raw)
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return (folded, raw)


def list_books(session: Session, *, user_id: int, sort_key: Optional[str] = None) -> List[Book]:
    key = normalize_sort(sort_key)
    books = (
        session.query(Book)
        .filter(Book.user_id == user_id)
        .order_by(*_order_by(key))
        .all()
    )
    if key == SORT_TITLE:
        # sorted() is stable, so equal titles keep the id-desc order.
        books = sorted(books, key=lambda book: title_sort_key(book.title))
    return books


def get_book(session: Session, *, book_id: int, user_id: int) -> Optional[Book]:
    return (
        session.query(Book)
        .filter(Book.id == book_id, Book.user_id == user_id)
        .one_or_none()
    )


def create_book(
    session: Session,
    *,
    user_id: int,
    title: str,
    author: str,
    date_read: date,
    notes: Optional[str] = None,
    rating: Optional[float] = None,
    cover_url: Optional[str] = None,
) -> Book:
    book = Book(
        user_id=user_id,
        title=title,
        author=author,
        notes=notes,
        rating=rating,
        date_read=date_read,
        cover_url=cover_url,
    )
    session.add(book)
    session.flush()
    return book


def update_book(session: Session, *, book_id: int, user_id: int, values: Dict[str, Any]) -> bool:
    """Apply `values` to the owned row; False when no row matched."""
    unknown = set(values) - _UPDATABLE_COLUMNS
    if unknown:
        raise ValueError(f"unknown_columns:{','.join(sorted(unknown))}")
    if not values:
        return get_book(session, book_id=book_id, user_id=user_id) is not None
    updated = (
        session.query(Book)
        .filter(Book.id == book_id, Book.user_id == user_id)
        .update(values, synchronize_session=False)
    )
    return bool(updated)


def delete_book(session: Session, *, book_id: int, user_id: int) -> bool:
    deleted = (
        session.query(Book)
        .filter(Book.id == book_id, Book.user_id == user_id)
        .delete(synchronize_session=False)
    )
    return bool(deleted)


__all__ = [
    "SORT_KEYS",
    "SORT_RATING",
    "SORT_TITLE",
    "SORT_DATE_READ",
    "DEFAULT_SORT",
    "normalize_sort",
    "title_sort_key",
    "list_books",
    "get_book",
    "create_book",
    "update_book",
    "delete_book",
]
