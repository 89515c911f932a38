"""Error taxonomy for the access core."""

from juris.core.errors.exceptions import (
    AccountSuspendedError,
    AppException,
    AuthenticationError,
    BackingStoreError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)


__all__ = [
    "AccountSuspendedError",
    "AppException",
    "AuthenticationError",
    "BackingStoreError",
    "ConflictError",
    "ForbiddenError",
    "NotFoundError",
    "ValidationError",
]
