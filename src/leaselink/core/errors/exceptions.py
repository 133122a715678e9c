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
        headers: Extra response headers (e.g. Retry-After)
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        self.headers = headers or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Raised when a requested resource is not found or not visible.

    Rows hidden by a read policy raise this too, so that a denial and
    a genuine absence look the same to the caller.

    Example:
        raise NotFoundError("Property not found", resource="property")
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
    """Raised when a write lost a race or collides with existing data.

    Example:
        raise ConflictError("Invite already redeemed", error_code="invite_already_used")
    """

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class ValidationError(AppException):
    """Raised when request data fails validation before any row is touched.

    Example:
        raise ValidationError(
            "Invalid input data",
            errors=[{"field": "property_type", "message": "Unknown property type"}]
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


class UnauthenticatedError(AppException):
    """Raised when no identity can be resolved from the request.

    Example:
        raise UnauthenticatedError("Invalid access token")
    """

    message = "Authentication required"
    error_code = "unauthenticated"
    status_code = 401


class ForbiddenError(AppException):
    """Raised when a resolved identity fails the policy for a write.

    Example:
        raise ForbiddenError(
            "Not allowed to modify this property",
            details={"property_id": str(property_id)}
        )
    """

    message = "Access forbidden"
    error_code = "authorization_denied"
    status_code = 403


class RateLimitError(AppException):
    """Raised when rate limit is exceeded.

    Example:
        raise RateLimitError("Too many requests", retry_after=60)
    """

    message = "Rate limit exceeded"
    error_code = "rate_limited"
    status_code = 429

    def __init__(
        self,
        message: str | None = None,
        retry_after: int | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        headers = kwargs.pop("headers", {})
        if retry_after is not None:
            details["retry_after"] = retry_after
            headers.setdefault("Retry-After", str(retry_after))
        super().__init__(message=message, details=details, headers=headers, **kwargs)


class ServiceUnavailableError(AppException):
    """Raised when a required service is unavailable.

    Example:
        raise ServiceUnavailableError("Database connection failed")
    """

    message = "Service temporarily unavailable"
    error_code = "service_unavailable"
    status_code = 503


class TransactionFailedError(ServiceUnavailableError):
    """Raised when a backing-store transaction fails or times out.

    Callers may retry reads; writes should only be retried with an
    idempotency key.
    """

    message = "The operation could not be completed, please retry"
    error_code = "transaction_failed"
