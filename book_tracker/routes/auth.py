"""Login, registration, logout and Google sign-in routes."""
from __future__ import annotations

from typing import Any

from flask import (
    Blueprint,
    flash,
    redirect,
    render_template,
    request,
    session,
    url_for,
)
from flask_babel import gettext as _
from sqlalchemy.exc import SQLAlchemyError

from book_tracker import config
from book_tracker.db.engine import get_db
from book_tracker.services import auth_service, google_oauth_service
from book_tracker.utils.identity import clear_identity_session, current_user, establish_session
from book_tracker.utils.logging import get_logger

LOG = get_logger("routes.auth")
bp = Blueprint("auth", __name__)


def _form_email() -> str:
    # Older forms post the email under "username".
    return request.form.get("email") or request.form.get("username") or ""


def _books_home():
    return redirect(url_for("books.list_books"))


@bp.route("/", methods=["GET"])
def index():
    if current_user() is not None:
        return _books_home()
    return redirect(url_for("auth.login_page"))


@bp.route("/login", methods=["GET"])
def login_page():
    return render_template("login.html", google_enabled=_google_enabled())


@bp.route("/login", methods=["POST"])
def login_submit():
    email = _form_email()
    try:
        user = auth_service.authenticate(get_db(), email=email, password=request.form.get("password", ""))
    except auth_service.UserNotFoundError:
        flash(_("User not found."), "error")
        return redirect(url_for("auth.login_page"))
    except auth_service.InvalidCredentialsError:
        flash(_("Incorrect password."), "error")
        return redirect(url_for("auth.login_page"))
    except auth_service.AuthError:
        flash(_("Enter your email and password."), "error")
        return redirect(url_for("auth.login_page"))
    except SQLAlchemyError:
        LOG.warning("login lookup failed email=%s", email, exc_info=True)
        flash(_("Something went wrong. Please try again."), "error")
        return redirect(url_for("auth.login_page"))
    establish_session(user)
    LOG.info("User signed in id=%s", user.id)
    return _books_home()


@bp.route("/register", methods=["GET"])
def register_page():
    return render_template("register.html", google_enabled=_google_enabled())


@bp.route("/register", methods=["POST"])
def register_submit():
    email = _form_email()
    try:
        user = auth_service.register(get_db(), email=email, password=request.form.get("password", ""))
    except auth_service.DuplicateUserError:
        flash(_("Email already registered. Please log in."), "error")
        return redirect(url_for("auth.register_page"))
    except auth_service.AuthError:
        flash(_("Enter an email address and a password."), "error")
        return redirect(url_for("auth.register_page"))
    except SQLAlchemyError:
        LOG.warning("registration failed email=%s", email, exc_info=True)
        flash(_("Something went wrong during registration."), "error")
        return redirect(url_for("auth.register_page"))
    establish_session(user)
    flash(_("You are now registered and logged in"), "success")
    return _books_home()


@bp.route("/logout", methods=["GET"])
def logout():
    clear_identity_session()
    return redirect(url_for("auth.index"))


def _google_enabled() -> bool:
    return config.google_configured()


def _google_failure(reason: str, **context: Any):
    LOG.warning("google sign-in failed reason=%s %s", reason, context or "")
    flash(_("Google sign-in failed. Please try again."), "error")
    return redirect(url_for("auth.login_page"))


@bp.route("/auth/google", methods=["GET"])
def google_start():
    state = google_oauth_service.new_state()
    try:
        target = google_oauth_service.build_authorization_url(state)
    except google_oauth_service.OAuthNotConfiguredError:
        flash(_("Google sign-in is not available."), "error")
        return redirect(url_for("auth.login_page"))
    session[google_oauth_service.STATE_SESSION_KEY] = state
    return redirect(target)


@bp.route("/auth/google/book-tracker", methods=["GET"])
def google_callback():
    expected_state = session.pop(google_oauth_service.STATE_SESSION_KEY, None)
    if request.args.get("error"):
        return _google_failure("provider_error", error=request.args.get("error"))
    if not expected_state or request.args.get("state") != expected_state:
        return _google_failure("state_mismatch")
    try:
        profile = google_oauth_service.complete_authorization(request.args.get("code", ""))
        user = auth_service.login_federated(get_db(), profile)
    except google_oauth_service.GoogleOAuthError as exc:
        return _google_failure(str(exc))
    except auth_service.FederatedAuthError as exc:
        return _google_failure(str(exc))
    except SQLAlchemyError:
        LOG.warning("federated account lookup failed", exc_info=True)
        return _google_failure("store_failed")
    establish_session(user)
    LOG.info("User signed in with Google id=%s", user.id)
    return _books_home()


def register_auth(app: Any) -> None:
    if getattr(app, "_book_tracker_auth_bp", None):  # idempotent
        return
    app.register_blueprint(bp)
    setattr(app, "_book_tracker_auth_bp", bp)
    LOG.debug("auth blueprint registered")


__all__ = ["register_auth", "bp"]
