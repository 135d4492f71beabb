"""Google OAuth 2.0 authorization-code flow ("Sign in with Google").

Only the pieces needed for login: build the consent URL, swap the returned
code for an access token, and read the verified email from userinfo.
"""
from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlencode

import requests

from book_tracker import config
from book_tracker.utils.logging import get_logger

LOG = get_logger("google_oauth_service")

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"
SCOPES = ("profile", "email")
STATE_SESSION_KEY = "google_oauth_state"
_TIMEOUT = 10


class GoogleOAuthError(RuntimeError):
    """Base error for the Google sign-in flow."""


class OAuthNotConfiguredError(GoogleOAuthError):
    """Raised when GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET are missing."""


@dataclass(frozen=True)
class FederatedProfile:
    email: Optional[str]
    email_verified: bool
    name: Optional[str] = None


def _credentials() -> Tuple[str, str]:
    client_id = config.google_client_id()
    client_secret = config.google_client_secret()
    if not client_id or not client_secret:
        raise OAuthNotConfiguredError("google_not_configured")
    return client_id, client_secret


def new_state() -> str:
    return secrets.token_urlsafe(32)


def build_authorization_url(state: str) -> str:
    client_id, _secret = _credentials()
    params = {
        "client_id": client_id,
        "redirect_uri": config.google_callback_url(),
        "response_type": "code",
        "scope": " ".join(SCOPES),
        "state": state,
        "prompt": "select_account",
    }
    return f"{AUTHORIZE_URL}?{urlencode(params)}"


def _json_or_error(r: requests.Response, code: str) -> Dict[str, Any]:
    if r.status_code != 200:
        LOG.warning("google %s http status=%s", code, r.status_code)
        raise GoogleOAuthError(code)
    try:
        data = r.json()
    except ValueError as exc:
        raise GoogleOAuthError(code) from exc
    if not isinstance(data, dict):
        raise GoogleOAuthError(code)
    return data


def exchange_code(code: str, *, timeout: float = _TIMEOUT) -> str:
    """Trade an authorization code for an access token."""
    client_id, client_secret = _credentials()
    body = {
        "code": code,
        "client_id": client_id,
        "client_secret": client_secret,
        "redirect_uri": config.google_callback_url(),
        "grant_type": "authorization_code",
    }
    try:
        r = requests.post(TOKEN_URL, data=body, timeout=timeout)
    except requests.RequestException as exc:
        raise GoogleOAuthError("token_exchange_failed") from exc
    data = _json_or_error(r, "token_exchange_failed")
    token = data.get("access_token")
    if not isinstance(token, str) or not token:
        raise GoogleOAuthError("access_token_missing")
    return token


def _as_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        return raw.strip().lower() == "true"
    return False


def fetch_profile(access_token: str, *, timeout: float = _TIMEOUT) -> FederatedProfile:
    headers = {"Authorization": f"Bearer {access_token}"}
    try:
        r = requests.get(USERINFO_URL, headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        raise GoogleOAuthError("userinfo_failed") from exc
    data = _json_or_error(r, "userinfo_failed")
    email = data.get("email")
    return FederatedProfile(
        email=email.strip() if isinstance(email, str) and email.strip() else None,
        email_verified=_as_bool(data.get("email_verified")),
        name=data.get("name") if isinstance(data.get("name"), str) else None,
    )


def complete_authorization(code: str) -> FederatedProfile:
    if not code:
        raise GoogleOAuthError("code_missing")
    token = exchange_code(code)
    profile = fetch_profile(token)
    LOG.info("google profile fetched email=%s verified=%s", profile.email, profile.email_verified)
    return profile


__all__ = [
    "GoogleOAuthError",
    "OAuthNotConfiguredError",
    "FederatedProfile",
    "STATE_SESSION_KEY",
    "SCOPES",
    "new_state",
    "build_authorization_url",
    "exchange_code",
    "fetch_profile",
    "complete_authorization",
]
