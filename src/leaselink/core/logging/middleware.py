"""Access logging for the HTTP API."""

import time
from typing import Any

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from leaselink.config import settings


logger = structlog.get_logger()

# Probes and docs would drown out real traffic
QUIET_PATHS = ("/health/", "/docs", "/redoc", "/openapi.json")


def route_template(request: Request) -> str:
    """Return the matched route pattern, falling back to the raw path.

    The route is only known once routing has run, so this is meant for
    the completion record, where it groups requests per endpoint.
    """
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def get_client_ip(request: Request) -> str | None:
    """Best guess at the caller's address.

    Forwarding headers are only honoured when ``trust_forwarded_for`` is
    set, since anyone can send them and the address keys the anonymous
    rate-limit buckets.

    Args:
        request: The incoming request

    Returns:
        The client IP address, or None when it cannot be determined
    """
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()

    return request.client.host if request.client else None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one ``request_started`` and one ``request_completed`` per request.

    Request bodies and query strings never reach the log, because invite
    secrets and join codes travel in them.
    """

    def __init__(self, app: Any, quiet_paths: tuple[str, ...] = QUIET_PATHS) -> None:
        super().__init__(app)
        self.quiet_paths = quiet_paths

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path.startswith(self.quiet_paths):
            return await call_next(request)

        started = time.perf_counter()
        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            client_ip=get_client_ip(request),
        )

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_failed",
                method=request.method,
                route=route_template(request),
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise

        fields: dict[str, Any] = {
            "method": request.method,
            "route": route_template(request),
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        }
        if subject := getattr(request.state, "subject", None):
            fields["subject"] = subject
        if remaining := response.headers.get("X-RateLimit-Remaining"):
            fields["rate_limit_remaining"] = int(remaining)

        if response.status_code >= 500:
            logger.error("request_completed", **fields)
        elif response.status_code >= 400:
            logger.warning("request_completed", **fields)
        else:
            logger.info("request_completed", **fields)

        return response
