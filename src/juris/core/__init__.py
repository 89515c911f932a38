"""Core services and cross-cutting concerns."""

from juris.core.errors import (
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
