"""Account registration and credential checks (local + Google).

Session handling lives in `book_tracker.utils.identity`; this module only
answers "which user is this" against the credential store.
"""
from __future__ import annotations

from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from book_tracker.db.engine import Database
from book_tracker.db.models import User
from book_tracker.db.repositories import users_repo
from book_tracker.services.google_oauth_service import FederatedProfile
from book_tracker.utils.logging import get_logger

LOG = get_logger("auth_service")

# Stored in place of a hash for Google-only accounts; never matches a hash check.
FEDERATED_PASSWORD_SENTINEL = "google"
PASSWORD_HASH_METHOD = "scrypt"


class AuthError(RuntimeError):
    """Base error for authentication workflows."""


class DuplicateUserError(AuthError):
    """Raised when registering an email that already has an account."""


class UserNotFoundError(AuthError):
    """Raised when no account matches the email."""


class InvalidCredentialsError(AuthError):
    """Raised when the password does not verify (or the account has none)."""


class FederatedAuthError(AuthError):
    """Raised when an external identity assertion cannot be accepted."""


def _clean_email(raw: Optional[str]) -> Optional[str]:
    if not isinstance(raw, str):
        return None
    cleaned = raw.strip()
    return cleaned or None


def hash_password(plaintext: str) -> str:
    return generate_password_hash(plaintext, method=PASSWORD_HASH_METHOD)


def has_local_password(user: User) -> bool:
    stored = getattr(user, "password", None)
    return bool(stored) and stored != FEDERATED_PASSWORD_SENTINEL


def register(db: Database, *, email: str, password: str) -> User:
    normalized = _clean_email(email)
    if not normalized:
        raise AuthError("email_required")
    if not password:
        raise AuthError("password_required")
    with db.session() as session:
        if users_repo.get_user_by_email(session, normalized) is not None:
            raise DuplicateUserError("duplicate_user")
        try:
            user = users_repo.create_user(session, email=normalized, password=hash_password(password))
        except users_repo.UserExistsError as exc:
            raise DuplicateUserError("duplicate_user") from exc
    LOG.info("Registered user id=%s email=%s", user.id, normalized)
    return user


def authenticate(db: Database, *, email: str, password: str) -> User:
    normalized = _clean_email(email)
    if not normalized:
        raise AuthError("email_required")
    with db.session() as session:
        user = users_repo.get_user_by_email(session, normalized)
    if user is None:
        raise UserNotFoundError("user_not_found")
    if not password or not has_local_password(user):
        raise InvalidCredentialsError("invalid_credentials")
    if not check_password_hash(str(user.password), password):
        LOG.info("password check failed email=%s", normalized)
        raise InvalidCredentialsError("invalid_credentials")
    return user


def login_federated(db: Database, profile: FederatedProfile) -> User:
    """Find or create the account for a provider-verified email."""
    email = _clean_email(profile.email)
    if not email:
        raise FederatedAuthError("email_missing")
    if not profile.email_verified:
        raise FederatedAuthError("email_unverified")
    with db.session() as session:
        user = users_repo.get_user_by_email(session, email)
        if user is not None:
            return user
        try:
            user = users_repo.create_user(
                session, email=email, password=FEDERATED_PASSWORD_SENTINEL
            )
        except users_repo.UserExistsError as exc:
            raise FederatedAuthError("account_race") from exc
    LOG.info("Created federated user id=%s email=%s", user.id, email)
    return user


__all__ = [
    "AuthError",
    "DuplicateUserError",
    "UserNotFoundError",
    "InvalidCredentialsError",
    "FederatedAuthError",
    "FEDERATED_PASSWORD_SENTINEL",
    "hash_password",
    "has_local_password",
    "register",
    "authenticate",
    "login_federated",
]
