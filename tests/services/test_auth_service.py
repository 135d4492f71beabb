"""Tests for auth_service registration and credential checks."""
from __future__ import annotations

import pytest

from book_tracker.db.models import User
from book_tracker.services import auth_service
from book_tracker.services.google_oauth_service import FederatedProfile


def _user_count(database) -> int:
    with database.session() as session:
        return session.query(User).count()


def test_register_stores_hash_not_plaintext(database):
    user = auth_service.register(database, email=" reader@example.com ", password="Secret123!")

    assert user.email == "reader@example.com"
    assert user.password != "Secret123!"
    assert user.password.startswith("scrypt:")


def test_register_duplicate_email_never_creates_second_row(database):
    auth_service.register(database, email="reader@example.com", password="Secret123!")

    with pytest.raises(auth_service.DuplicateUserError):
        auth_service.register(database, email="reader@example.com", password="Other456!")

    assert _user_count(database) == 1


@pytest.mark.parametrize("email,password", [("", "Secret123!"), ("reader@example.com", "")])
def test_register_requires_email_and_password(database, email, password):
    with pytest.raises(auth_service.AuthError):
        auth_service.register(database, email=email, password=password)
    assert _user_count(database) == 0


def test_authenticate_success(database):
    created = auth_service.register(database, email="reader@example.com", password="Secret123!")

    user = auth_service.authenticate(database, email="reader@example.com", password="Secret123!")

    assert user.id == created.id


def test_authenticate_wrong_password(database):
    auth_service.register(database, email="reader@example.com", password="Secret123!")

    with pytest.raises(auth_service.InvalidCredentialsError):
        auth_service.authenticate(database, email="reader@example.com", password="secret123!")


def test_authenticate_unknown_user(database):
    with pytest.raises(auth_service.UserNotFoundError):
        auth_service.authenticate(database, email="nobody@example.com", password="whatever")


def test_federated_login_creates_account_once(database):
    profile = FederatedProfile(email="reader@gmail.com", email_verified=True, name="Reader")

    first = auth_service.login_federated(database, profile)
    second = auth_service.login_federated(database, profile)

    assert first.id == second.id
    assert first.password == auth_service.FEDERATED_PASSWORD_SENTINEL
    assert _user_count(database) == 1


def test_federated_login_reuses_local_account(database):
    local = auth_service.register(database, email="reader@gmail.com", password="Secret123!")

    user = auth_service.login_federated(
        database, FederatedProfile(email="reader@gmail.com", email_verified=True)
    )

    assert user.id == local.id


def test_federated_account_cannot_log_in_locally(database):
    auth_service.login_federated(database, FederatedProfile(email="reader@gmail.com", email_verified=True))

    for attempt in ("google", "", "anything"):
        with pytest.raises(auth_service.InvalidCredentialsError):
            auth_service.authenticate(database, email="reader@gmail.com", password=attempt)


@pytest.mark.parametrize(
    "profile",
    [
        FederatedProfile(email="reader@gmail.com", email_verified=False),
        FederatedProfile(email=None, email_verified=True),
    ],
)
def test_federated_login_rejects_unverified_or_missing_email(database, profile):
    with pytest.raises(auth_service.FederatedAuthError):
        auth_service.login_federated(database, profile)
    assert _user_count(database) == 0
