"""Application initialization / wiring.

Orchestrates: Flask config from environment, DB init, extensions (Babel,
CSRF), per-request identity loading and route registration.
"""
from __future__ import annotations

import secrets
from typing import Any, Mapping, Optional

from flask import Flask, flash, redirect, url_for
from flask_babel import Babel
from flask_babel import gettext as _
from flask_wtf.csrf import CSRFError, CSRFProtect

from book_tracker import config
from book_tracker.db import init_db
from book_tracker.routes import register_all as register_routes
from book_tracker.utils.identity import current_user, load_current_user
from book_tracker.utils.logging import get_logger

LOG = get_logger("startup")

csrf = CSRFProtect()


def _base_config() -> dict:
    return {
        "SECRET_KEY": config.session_secret(),
        "DATABASE_URL": config.database_url(),
        "WTF_CSRF_ENABLED": config.csrf_enabled(),
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
    }


def _handle_csrf_error(exc: CSRFError):
    LOG.warning("CSRF validation failed: %s", exc.description)
    flash(_("Your form expired. Please try again."), "error")
    if current_user() is not None:
        return redirect(url_for("books.list_books"))
    return redirect(url_for("auth.login_page"))


def init_app(app: Any) -> None:
    LOG.debug("init_app starting")
    if not app.config.get("SECRET_KEY"):
        LOG.warning("SESSION_SECRET not set; sessions will not survive a restart")
        app.config["SECRET_KEY"] = secrets.token_hex(32)
    init_db(app, app.config["DATABASE_URL"])
    LOG.debug("DB engine initialized")
    Babel(app)
    # Identity loads first so the CSRF error handler can see g.user.
    app.before_request(load_current_user)
    csrf.init_app(app)
    app.register_error_handler(CSRFError, _handle_csrf_error)
    register_routes(app)
    LOG.info("App startup wiring complete config=%s", config.summarize_runtime_config())


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask("book_tracker")
    app.config.update(_base_config())
    if overrides:
        app.config.update(overrides)
    init_app(app)
    return app


__all__ = ["create_app", "init_app"]
