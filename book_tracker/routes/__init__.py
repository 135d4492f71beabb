"""Route registration.

Called from startup wiring to register every blueprint on the app.
"""
from __future__ import annotations

from typing import Any

from .auth import register_auth
from .books import register_books
from .health import register_health


def register_all(app: Any) -> None:
    register_auth(app)
    register_books(app)
    register_health(app)


__all__ = ["register_all"]
