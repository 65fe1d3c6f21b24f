"""
Centralized Exception Handling Module
=====================================

Defines custom exception classes for the application.

Every exception carries a user-facing message, an HTTP status code and
optional structured details. The handlers registered in ``app.main``
render them as ``{"message": ..., "details": ...}``.

Usage:
    raise NotFoundError(resource="Vehicle", identifier="42")
    raise ConflictError("A vehicle with this plate already exists")
"""

from typing import Any, Dict, Optional

from fastapi import status


class InbmException(Exception):
    """
    Base exception class for the INBM backend.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ==========================
# Authentication Exceptions
# ==========================

class AuthenticationError(InbmException):
    """Raised when authentication fails."""

    def __init__(
        self,
        message: str = "Could not validate credentials",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details,
        )


class InvalidCredentialsError(AuthenticationError):
    """Raised when the auth provider rejects email and password."""

    def __init__(self):
        super().__init__(message="Invalid email or password")


class TokenExpiredError(AuthenticationError):
    """Raised when an access token has expired."""

    def __init__(self):
        super().__init__(message="Access token has expired")


class TokenInvalidError(AuthenticationError):
    """Raised when an access token is invalid."""

    def __init__(self, reason: str = "Invalid token"):
        super().__init__(
            message="Invalid token",
            details={"reason": reason}
        )


# ==========================
# Authorization Exceptions
# ==========================

class AuthorizationError(InbmException):
    """Raised when user lacks required permissions."""

    def __init__(
        self,
        message: str = "Insufficient permissions",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
        )


class RoleNotAuthorizedError(AuthorizationError):
    """Raised when user's role is not authorized for the action."""

    def __init__(self, required_roles: list):
        super().__init__(
            message="Your role is not authorized for this action",
            details={"required_roles": required_roles}
        )


class AccountDisabledError(AuthorizationError):
    """Raised when the profile behind a valid token is disabled."""

    def __init__(self):
        super().__init__(
            message="Account has been disabled. Please contact your administrator."
        )


class ProfileMissingError(AuthorizationError):
    """Raised when an authenticated auth user has no profile row."""

    def __init__(self):
        super().__init__(
            message="No profile is registered for this account"
        )


# ==========================
# Resource Exceptions
# ==========================

class NotFoundError(InbmException):
    """Raised when a resource is not found."""

    def __init__(self, resource: str = "Resource", identifier: Optional[str] = None):
        message = f"{resource} not found"
        details = {"resource": resource}
        if identifier:
            details["identifier"] = identifier
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
        )


class ConflictError(InbmException):
    """Raised when a write collides with existing data."""

    def __init__(
        self,
        message: str = "The record conflicts with existing data",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )


class RecordInUseError(ConflictError):
    """Raised when deleting a row that other rows still reference."""

    def __init__(self, resource: str):
        super().__init__(
            message=f"{resource} is referenced by other records and cannot be deleted",
            details={"resource": resource},
        )


# ==========================
# Validation Exceptions
# ==========================

class ValidationError(InbmException):
    """Raised when business validation fails."""

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = dict(details or {})
        if field:
            details["field"] = field
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
        )


# ==========================
# Upstream Service Exceptions
# ==========================

class UpstreamServiceError(InbmException):
    """Raised when an external service (Supabase, FIPE, export) fails."""

    def __init__(self, service: str, message: Optional[str] = None, upstream_status: Optional[int] = None):
        details: Dict[str, Any] = {"service": service}
        if upstream_status is not None:
            details["upstream_status"] = upstream_status
        super().__init__(
            message=message or f"The {service} service failed to process the request",
            status_code=status.HTTP_502_BAD_GATEWAY,
            details=details,
        )


class ServiceUnavailableError(InbmException):
    """Raised when a required external service is not configured."""

    def __init__(self, service: str):
        super().__init__(
            message=f"The {service} service is not available",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details={"service": service},
        )


# ==========================
# Rate Limiting Exceptions
# ==========================

class RateLimitError(InbmException):
    """Raised when rate limit is exceeded."""

    def __init__(self, retry_after: int = 60):
        super().__init__(
            message="Too many requests. Please try again later.",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            details={"retry_after_seconds": retry_after}
        )


class LoginRateLimitError(RateLimitError):
    """Raised when login rate limit is exceeded."""

    def __init__(self, retry_after: int = 60):
        super().__init__(retry_after=retry_after)
        self.message = "Too many login attempts. Please try again later."
