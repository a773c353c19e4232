"""Domain exceptions for the application.

These exceptions represent business-logic errors and are automatically
converted to RFC 7807 Problem Details responses by the exception handlers.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application errors.

    All domain exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

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


class NotFoundError(AppException):
    """Raised when a requested resource is not found.

    Example:
        raise NotFoundError("Workspace not found", resource="workspace")
    """

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

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
    """Raised when the request conflicts with the current state.

    Covers duplicate invitations, existing memberships, already resolved
    invitations and lost optimistic-concurrency races. Clients should
    re-read the resource before retrying.

    Example:
        raise ConflictError("Already a member", error_code="already_member")
    """

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class InvariantViolationError(AppException):
    """Raised when a change would break a workspace membership invariant.

    Example:
        raise InvariantViolationError(
            "A workspace must keep at least one member",
            error_code="last_member",
        )
    """

    message = "Operation would violate a workspace invariant"
    error_code = "invariant_violation"
    status_code = 409


class ExpiredError(AppException):
    """Raised when acting on something whose validity window has passed.

    Example:
        raise ExpiredError("Invitation has expired", error_code="invitation_expired")
    """

    message = "Resource has expired"
    error_code = "expired"
    status_code = 410


class ValidationError(AppException):
    """Raised when request data fails validation.

    Example:
        raise ValidationError(
            "Invalid role",
            errors=[{"field": "role", "message": "Unknown role"}]
        )
    """

    message = "Validation error"
    error_code = "validation_error"
    status_code = 422

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


class UnauthorizedError(AppException):
    """Raised when authentication is required but not provided or invalid.

    Example:
        raise UnauthorizedError("Invalid access token")
    """

    message = "Authentication required"
    error_code = "unauthorized"
    status_code = 401


class ForbiddenError(AppException):
    """Raised when user lacks permission to perform an action.

    Example:
        raise ForbiddenError(
            "Insufficient permissions",
            details={"required_permission": "invite_members"}
        )
    """

    message = "Access forbidden"
    error_code = "forbidden"
    status_code = 403


class ServiceUnavailableError(AppException):
    """Raised when a required dependency is unavailable.

    The message stays generic so no store internals reach the client.
    """

    message = "Service temporarily unavailable, please try again"
    error_code = "dependency_failure"
    status_code = 503


class TooManyRequestsError(AppException):
    """Raised when a client exceeds its request budget.

    Example:
        raise TooManyRequestsError(details={"limit": 30, "window": 60})
    """

    message = "Rate limit exceeded. Please slow down."
    error_code = "rate_limit_exceeded"
    status_code = 429
