"""Error handling with RFC 7807 Problem Details."""

from promption.core.errors.exceptions import (
    AppException,
    ConflictError,
    ExpiredError,
    ForbiddenError,
    InvariantViolationError,
    NotFoundError,
    ServiceUnavailableError,
    TooManyRequestsError,
    UnauthorizedError,
    ValidationError,
)
from promption.core.errors.handlers import (
    FieldError,
    ProblemDetail,
    app_exception_handler,
    problem_type_uri,
    register_exception_handlers,
)


__all__ = [
    "AppException",
    "ConflictError",
    "ExpiredError",
    "FieldError",
    "ForbiddenError",
    "InvariantViolationError",
    "NotFoundError",
    "ProblemDetail",
    "ServiceUnavailableError",
    "TooManyRequestsError",
    "UnauthorizedError",
    "ValidationError",
    "app_exception_handler",
    "problem_type_uri",
    "register_exception_handlers",
]
