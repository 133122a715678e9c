"""Error handling module with RFC 7807 Problem Details."""

from leaselink.core.errors.exceptions import (
    AppException,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ServiceUnavailableError,
    TransactionFailedError,
    UnauthenticatedError,
    ValidationError,
)
from leaselink.core.errors.handlers import (
    FieldError,
    ProblemDetail,
    register_exception_handlers,
)


__all__ = [
    # Exceptions
    "AppException",
    "ConflictError",
    # Handlers
    "FieldError",
    "ForbiddenError",
    "NotFoundError",
    "ProblemDetail",
    "RateLimitError",
    "ServiceUnavailableError",
    "TransactionFailedError",
    "UnauthenticatedError",
    "ValidationError",
    "register_exception_handlers",
]
