"""ORM models for the reading log (users + their books)."""
from __future__ import annotations

from sqlalchemy import (
    Column,
    Date,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class User(Base):
    """Account row.

    `password` holds a werkzeug hash, or the federated sentinel for accounts
    created through Google sign-in (those can never log in locally).
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    password = Column(String(255), nullable=False)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User id={self.id} email={self.email}>"


class Book(Base):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False)
    notes = Column(Text, nullable=True)
    rating = Column(Float, nullable=True)
    date_read = Column(Date, nullable=False)
    cover_url = Column(String(500), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    def __repr__(self) -> str:  # pragma: no cover
        return "<Book id={0} user_id={1} title={2!r}>".format(self.id, self.user_id, self.title)


__all__ = ["Base", "User", "Book"]
