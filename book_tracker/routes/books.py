"""Reading-log pages: list, add, show, edit, delete.

Every route requires a logged-in user and only ever touches that user's
books; a foreign or missing id behaves exactly like not-found.
"""
from __future__ import annotations

from typing import Any

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_babel import gettext as _
from flask_babel import lazy_gettext as _l

from book_tracker.db.engine import get_db
from book_tracker.services import books_service
from book_tracker.services.books_service import (
    BookFields,
    BookNotFoundError,
    BookValidationError,
    StoreError,
)
from book_tracker.utils.identity import current_user, login_required
from book_tracker.utils.logging import get_logger

LOG = get_logger("routes.books")
bp = Blueprint("books", __name__)

_VALIDATION_MESSAGES = {
    "title_required": _l("Title is required."),
    "author_required": _l("Author is required."),
    "date_read_invalid": _l("Enter the date read as YYYY-MM-DD."),
    "rating_invalid": _l("Rating must be a number between 0 and 5."),
}


def _validation_message(exc: BookValidationError) -> str:
    return str(_VALIDATION_MESSAGES.get(str(exc), _l("Check the book details and try again.")))


def _user_id() -> int:
    return int(current_user().id)  # type: ignore[union-attr]


def _list_redirect():
    return redirect(url_for("books.list_books"))


@bp.route("/book-tracker", methods=["GET"])
@login_required
def list_books():
    sort = request.args.get("sort")
    books = books_service.list_books(get_db(), user_id=_user_id(), sort_key=sort)
    return render_template("index.html", books=books, current_sort=sort)


@bp.route("/add", methods=["GET"])
@login_required
def add_page():
    return render_template("add.html")


@bp.route("/add", methods=["POST"])
@login_required
def add_submit():
    try:
        fields = BookFields.from_form(request.form)
    except BookValidationError as exc:
        flash(_validation_message(exc), "error")
        return redirect(url_for("books.add_page"))
    try:
        books_service.add_book(get_db(), user_id=_user_id(), fields=fields)
    except StoreError:
        flash(_("Could not add book. Please try again."), "error")
    else:
        flash(_("Book added successfully!"), "success")
    return _list_redirect()


@bp.route("/book/<int:book_id>", methods=["GET"])
@login_required
def show_book(book_id: int):
    try:
        book = books_service.get_book(get_db(), user_id=_user_id(), book_id=book_id)
    except BookNotFoundError:
        return _list_redirect()
    except StoreError:
        flash(_("Could not load book."), "error")
        return _list_redirect()
    return render_template("book.html", book=book)


@bp.route("/edit/<int:book_id>", methods=["GET"])
@login_required
def edit_page(book_id: int):
    try:
        book = books_service.get_book(get_db(), user_id=_user_id(), book_id=book_id)
    except BookNotFoundError:
        return _list_redirect()
    except StoreError:
        flash(_("Could not load book."), "error")
        return _list_redirect()
    return render_template("edit.html", book=book)


@bp.route("/edit/<int:book_id>", methods=["POST"])
@login_required
def edit_submit(book_id: int):
    try:
        fields = BookFields.from_form(request.form)
    except BookValidationError as exc:
        flash(_validation_message(exc), "error")
        return redirect(url_for("books.edit_page", book_id=book_id))
    try:
        books_service.update_book(get_db(), user_id=_user_id(), book_id=book_id, fields=fields)
    except (BookNotFoundError, StoreError):
        flash(_("Could not update book."), "error")
    else:
        flash(_("Book updated successfully!"), "success")
    return _list_redirect()


@bp.route("/delete/<int:book_id>", methods=["POST"])
@login_required
def delete_submit(book_id: int):
    try:
        books_service.delete_book(get_db(), user_id=_user_id(), book_id=book_id)
    except (BookNotFoundError, StoreError):
        flash(_("Could not delete book."), "error")
    else:
        flash(_("Book deleted successfully!"), "success")
    return _list_redirect()


def register_books(app: Any) -> None:
    if getattr(app, "_book_tracker_books_bp", None):  # idempotent
        return
    app.register_blueprint(bp)
    setattr(app, "_book_tracker_books_bp", bp)
    LOG.debug("books blueprint registered")


__all__ = ["register_books", "bp"]
