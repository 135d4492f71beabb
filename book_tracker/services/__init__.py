"""Service exports."""

from .auth_service import (
    AuthError,
    DuplicateUserError,
    UserNotFoundError,
    InvalidCredentialsError,
    FederatedAuthError,
)
from .books_service import (
    BookFields,
    BookServiceError,
    BookNotFoundError,
    StoreError,
    BookValidationError,
)
from .covers_service import EnrichmentError
from . import auth_service, books_service, covers_service, google_oauth_service

__all__ = [
    "AuthError",
    "DuplicateUserError",
    "UserNotFoundError",
    "InvalidCredentialsError",
    "FederatedAuthError",
    "BookFields",
    "BookServiceError",
    "BookNotFoundError",
    "StoreError",
    "BookValidationError",
    "EnrichmentError",
    "auth_service",
    "books_service",
    "covers_service",
    "google_oauth_service",
]
