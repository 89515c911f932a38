"""Domain exceptions for the access core.

Access denials are never raised: ``can`` returns ``False``. These
exceptions cover genuine faults and authentication outcomes the caller
has to route (wrong password, suspended account, unavailable store).
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application errors.

    All domain exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Raised when credentials or a sign-in link are rejected.

    Example:
        raise AuthenticationError("Invalid email or password")
    """

    message = "Invalid email or password"
    error_code = "invalid_credentials"


class AccountSuspendedError(AppException):
    """Raised when a login reaches a soft-deleted account.

    The session has already been ended when this is raised. The distinct
    error code lets callers offer the sign-in link flow instead of a
    generic credentials message.
    """

    message = "This account is suspended. Sign in with an emailed link to reactivate it."
    error_code = "account_suspended"


class BackingStoreError(AppException):
    """Raised when a collaborator store fails (network, database, cache).

    Transient by nature; callers may retry, the core never does.

    Example:
        raise BackingStoreError("Account status lookup failed")
    """

    message = "Backing store temporarily unavailable"
    error_code = "backing_store_unavailable"


class NotFoundError(AppException):
    """Raised when a requested resource is not found.

    Example:
        raise NotFoundError("Office not found", resource="office", resource_id=office_id)
    """

    message = "Resource not found"
    error_code = "not_found"

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(AppException):
    """Raised when there's a conflict with existing data.

    Example:
        raise ConflictError("Handle already in use", details={"handle": handle})
    """

    message = "Resource conflict"
    error_code = "conflict"


class ForbiddenError(AppException):
    """Raised when a management operation is attempted without permission.

    Example:
        raise ForbiddenError(
            "Insufficient permissions",
            details={"required_permission": "team:delete"}
        )
    """

    message = "Access forbidden"
    error_code = "forbidden"


class ValidationError(AppException):
    """Raised when input data fails validation.

    Example:
        raise ValidationError(
            "Invalid input data",
            errors=[{"field": "handle", "message": "Invalid handle"}]
        )
    """

    message = "Validation error"
    error_code = "validation_error"

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = errors
        super().__init__(message=message, details=details, **kwargs)
