"""FastAPI dependencies that apply rate limits to routes.

Example:
    @router.get(
        "/validate",
        dependencies=[Depends(rate_limited(INVITE_VALIDATE))],
    )
    async def validate(...):
        ...
"""

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Request, Response

from leaselink.core.auth.dependencies import Subject
from leaselink.core.errors import RateLimitError
from leaselink.core.logging import get_client_ip
from leaselink.core.rate_limit.backend import RateLimitResult
from leaselink.core.rate_limit.limiter import RateLimiter, get_rate_limiter


async def client_ip_key(request: Request) -> str:
    """Bucket key for unauthenticated endpoints: the client address."""
    return f"ip:{get_client_ip(request) or 'unknown'}"


async def subject_key(subject: Subject) -> str:
    """Bucket key for authenticated endpoints: the verified subject.

    A subject owns at most one profile, so this throttles per profile
    without reading the request session before the route runs.
    """
    return f"subject:{subject}"


async def request_identity_key(request: Request) -> str:
    """Bucket key for general traffic: subject when present, otherwise IP.

    Uses the subject bound by SubjectContextMiddleware, which is fine for
    throttling because the route still authenticates on its own.
    """
    subject = getattr(request.state, "subject", None)
    if subject:
        return f"subject:{subject}"
    return await client_ip_key(request)


def rate_limited(
    endpoint: str,
    key: Callable[..., Awaitable[str]] = client_ip_key,
) -> Callable[..., Awaitable[RateLimitResult]]:
    """Build a dependency that consumes one token for ``endpoint``.

    Args:
        endpoint: Logical endpoint name with a configured policy
        key: Dependency returning the caller key

    Returns:
        Dependency raising RateLimitError when the bucket is empty
    """

    async def dependency(
        response: Response,
        caller_key: Annotated[str, Depends(key)],
        limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    ) -> RateLimitResult:
        result = await limiter.check(endpoint, caller_key)
        headers = {
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": str(result.remaining),
            "X-RateLimit-Reset": str(result.reset_time),
        }

        if not result.allowed:
            raise RateLimitError(
                "Too many requests, please retry later",
                retry_after=result.retry_after,
                headers=headers,
            )

        response.headers.update(headers)
        return result

    return dependency
