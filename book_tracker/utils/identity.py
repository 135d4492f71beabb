"""Session identity helpers and the login guard for book routes.

The Flask session only carries the user id; the user row is reloaded on
every request (`load_current_user`) so profile changes are never stale.
"""
from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Optional

from flask import flash, g, redirect, request, session, url_for
from flask_babel import gettext as _
from sqlalchemy.exc import SQLAlchemyError

from book_tracker.db.engine import get_db
from book_tracker.db.models import User
from book_tracker.db.repositories import users_repo
from book_tracker.utils.logging import get_logger

LOG = get_logger("identity")

SESSION_USER_KEY = "user_id"


def get_session_user_id() -> Optional[int]:
    uid = session.get(SESSION_USER_KEY)
    if uid is None:
        return None
    try:
        return int(uid)
    except (TypeError, ValueError):
        return None


def establish_session(user: User) -> None:
    """Start a fresh session for `user` (drops any pre-login state)."""
    session.clear()
    session[SESSION_USER_KEY] = int(user.id)
    g.user = user


def clear_identity_session() -> None:
    session.clear()
    g.user = None


def load_current_user() -> None:
    """before_request hook: resolve the session's user id to a stored user."""
    g.user = None
    if request.endpoint == "static":
        return
    uid = get_session_user_id()
    if uid is None:
        return
    try:
        with get_db().session() as db_session:
            user = users_repo.get_user(db_session, uid)
    except SQLAlchemyError:
        LOG.warning("current user lookup failed user_id=%s", uid, exc_info=True)
        return
    if user is None:
        LOG.info("session user missing from store user_id=%s; clearing session", uid)
        clear_identity_session()
        return
    g.user = user


def current_user() -> Optional[User]:
    return g.get("user")


def login_required(view: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(view)
    def _guarded(*args: Any, **kwargs: Any) -> Any:
        if current_user() is None:
            flash(_("Please log in to view that resource"), "error")
            return redirect(url_for("auth.login_page"))
        return view(*args, **kwargs)

    return _guarded


__all__ = [
    "SESSION_USER_KEY",
    "get_session_user_id",
    "establish_session",
    "clear_identity_session",
    "load_current_user",
    "current_user",
    "login_required",
]
