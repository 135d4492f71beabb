"""Repository helpers for user accounts (credential store)."""
from __future__ import annotations

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from book_tracker.db.models import User


class UserExistsError(Exception):
    """Raised when inserting an email that is already registered."""


def get_user(session: Session, user_id: int) -> Optional[User]:
    return session.query(User).filter(User.id == user_id).one_or_none()


def get_user_by_email(session: Session, email: str) -> Optional[User]:
    """Exact (case-sensitive) match on the stored email."""
    return session.query(User).filter(User.email == email).one_or_none()


def create_user(session: Session, *, email: str, password: str) -> User:
    user = User(email=email, password=password)
    session.add(user)
    try:
        session.flush()
    except IntegrityError as exc:
        raise UserExistsError("User already exists for email") from exc
    return user


__all__ = [
    "UserExistsError",
    "get_user",
    "get_user_by_email",
    "create_user",
]
