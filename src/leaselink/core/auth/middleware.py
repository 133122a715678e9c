"""Request context middleware.

This module provides middleware for:
- Request tracing with unique IDs
- Binding the caller's subject into the log context
"""

import uuid

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from leaselink.core.auth.identity import resolve_subject


class SubjectContextMiddleware(BaseHTTPMiddleware):
    """Middleware that exposes the caller's subject for logging.

    Sets ``request.state.subject`` and binds it to structlog. This is for
    observability only: routes still authenticate through the
    ``get_subject`` dependency and never trust request state for access
    decisions.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process the request and bind the subject if one resolves."""
        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            subject = resolve_subject(auth_header.split(" ", 1)[1])
            if subject:
                request.state.subject = subject
                structlog.contextvars.bind_contextvars(subject=subject)

        return await call_next(request)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware that adds a unique request ID to each request.

    The request ID is added to:
    - request.state.request_id
    - Response header X-Request-ID
    - Structlog context
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process the request and add request ID."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id", "subject")

        response.headers["X-Request-ID"] = request_id
        return response
