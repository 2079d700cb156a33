"""
Custom exception classes for the 2bigha admin backend.

This module defines a hierarchy of custom exceptions. Each carries a stable
machine-readable ``error_code`` that is surfaced to GraphQL clients in
``extensions.code`` and an HTTP-equivalent status code.

Exception hierarchy:
    AppException (base, INTERNAL_ERROR)
    ├── AuthenticationError (401)
    │   ├── UnauthenticatedError (UNAUTHENTICATED)
    │   ├── InvalidCredentialsError (INVALID_CREDENTIALS)
    │   ├── InvalidOTPError (INVALID_OTP)
    │   └── InvalidTokenError (INVALID_TOKEN)
    ├── AuthorizationError (403)
    │   └── ForbiddenError (FORBIDDEN)
    ├── ResourceError
    │   ├── NotFoundError (404)
    │   ├── AlreadyExistsError (409, CONFLICT)
    │   └── ConflictError (409, CONFLICT)
    ├── ValidationError (422)
    │   ├── WeakPasswordError
    │   └── InvalidInputError
    ├── RateLimitExceededError (429)
    └── InternalError (500)
"""

from typing import Any


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    Attributes:
        status_code: HTTP-equivalent status code for the error
        error_code: Machine-readable error code
        message: Human-readable error message
        details: Optional additional error details
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}


# =============================================================================
# Authentication Errors (401 Unauthorized)
# =============================================================================


class AuthenticationError(AppException):
    """Base class for authentication errors."""

    def __init__(
        self,
        message: str = "Authentication failed",
        error_code: str = "UNAUTHENTICATED",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=401,
            error_code=error_code,
            details=details,
        )


class UnauthenticatedError(AuthenticationError):
    """Raised when a protected operation is called without a valid session."""

    def __init__(
        self,
        message: str = "Authentication required",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code="UNAUTHENTICATED", details=details)


class InvalidCredentialsError(AuthenticationError):
    """Raised when login credentials are invalid."""

    def __init__(
        self,
        message: str = "Invalid email or password",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code="INVALID_CREDENTIALS", details=details)


class InvalidOTPError(AuthenticationError):
    """Raised when a one-time password is wrong, expired or already used."""

    def __init__(
        self,
        message: str = "Invalid or expired OTP",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code="INVALID_OTP", details=details)


class InvalidTokenError(AuthenticationError):
    """Raised when a refresh token is unknown, revoked or expired."""

    def __init__(
        self,
        message: str = "Invalid or expired token",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code="INVALID_TOKEN", details=details)


# =============================================================================
# Authorization Errors (403 Forbidden)
# =============================================================================


class AuthorizationError(AppException):
    """Base class for authorization errors."""

    def __init__(
        self,
        message: str = "Access denied",
        error_code: str = "FORBIDDEN",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=403,
            error_code=error_code,
            details=details,
        )


class ForbiddenError(AuthorizationError):
    """Raised when a known admin lacks the permission an operation requires."""

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        required_permissions: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        if required_permissions:
            details["required_permissions"] = required_permissions
        super().__init__(message=message, error_code="FORBIDDEN", details=details)


# =============================================================================
# Resource Errors (404 Not Found, 409 Conflict)
# =============================================================================


class ResourceError(AppException):
    """Base class for resource-related errors."""

    pass


class NotFoundError(ResourceError):
    """Raised when a requested resource does not exist."""

    def __init__(
        self,
        resource: str = "Resource",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=f"{resource} not found",
            status_code=404,
            error_code="NOT_FOUND",
            details=details,
        )


class AlreadyExistsError(ResourceError):
    """Raised when a unique key (email, slug, permission name) is already taken."""

    def __init__(
        self,
        resource: str = "Resource",
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = f"{resource} already exists"
        if field:
            message = f"{resource} with this {field} already exists"
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONFLICT",
            details=details,
        )


class ConflictError(ResourceError):
    """Raised when an operation conflicts with the current state of a resource."""

    def __init__(
        self,
        message: str = "Resource conflict",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONFLICT",
            details=details,
        )


# =============================================================================
# Validation Errors (422 Unprocessable Entity)
# =============================================================================


class ValidationError(AppException):
    """Base class for input validation errors."""

    def __init__(
        self,
        message: str = "Validation failed",
        error_code: str = "BAD_USER_INPUT",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=422,
            error_code=error_code,
            details=details,
        )


class WeakPasswordError(ValidationError):
    """Raised when a new password does not meet strength requirements."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message=message, error_code="WEAK_PASSWORD", details=details)


class InvalidInputError(ValidationError):
    """Raised when operation arguments are semantically invalid."""

    def __init__(
        self,
        message: str = "Invalid input",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code="BAD_USER_INPUT", details=details)


# =============================================================================
# Rate Limiting (429 Too Many Requests)
# =============================================================================


class RateLimitExceededError(AppException):
    """Raised when a caller must wait before retrying (OTP resend cooldown, hourly caps)."""

    def __init__(
        self,
        message: str = "Too many requests. Please try again later.",
        retry_after: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        if retry_after is not None:
            details["retry_after"] = retry_after
        super().__init__(
            message=message,
            status_code=429,
            error_code="RATE_LIMITED",
            details=details,
        )
        self.retry_after = retry_after


# =============================================================================
# Internal Errors (500)
# =============================================================================


class InternalError(AppException):
    """Raised when a storage or aggregation step fails unexpectedly."""

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=500,
            error_code="INTERNAL_ERROR",
            details=details,
        )
