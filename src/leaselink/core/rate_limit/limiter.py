"""Rate limiter front end: policy lookup and store-failure handling."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from functools import lru_cache

import structlog
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from leaselink.config import settings
from leaselink.core.constants import MAX_CALLER_KEY_LENGTH
from leaselink.core.database.session import async_session_factory
from leaselink.core.rate_limit.backend import (
    DatabaseTokenBucket,
    RateLimitBackend,
    RateLimitResult,
    RedisTokenBucket,
)
from leaselink.core.rate_limit.policies import RateLimitPolicy, build_policies


logger = structlog.get_logger()

# Errors that mean "the bucket store is unavailable", as opposed to bugs
STORE_ERRORS: tuple[type[BaseException], ...] = (
    SQLAlchemyError,
    RedisError,
    OSError,
    TimeoutError,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RateLimiter:
    """Checks buckets keyed by (endpoint, caller_key).

    When the store fails, the endpoint's policy decides: fail-closed
    endpoints deny, fail-open endpoints admit. Either way the failure is
    logged.
    """

    def __init__(
        self,
        backend: RateLimitBackend,
        policies: dict[str, RateLimitPolicy],
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.backend = backend
        self.policies = policies
        self.clock = clock

    async def check(self, endpoint: str, caller_key: str) -> RateLimitResult:
        """Consume one token for the caller on this endpoint.

        Args:
            endpoint: Logical endpoint name with a configured policy
            caller_key: Client IP or profile identifier

        Returns:
            RateLimitResult with allowed status and metadata

        Raises:
            KeyError: If no policy is configured for ``endpoint``
        """
        policy = self.policies[endpoint]
        caller_key = caller_key[:MAX_CALLER_KEY_LENGTH]
        now = self.clock()

        try:
            result = await self.backend.take(policy, caller_key, now)
        except STORE_ERRORS as exc:
            logger.error(
                "rate_limit_backend_error",
                endpoint=endpoint,
                fail_closed=policy.fail_closed,
                error_type=type(exc).__name__,
            )
            return self._store_unavailable(policy, now)

        if not result.allowed:
            logger.warning(
                "rate_limit_exceeded",
                endpoint=endpoint,
                caller_key=caller_key,
                retry_after=result.retry_after,
            )
        return result

    def _store_unavailable(self, policy: RateLimitPolicy, now: datetime) -> RateLimitResult:
        reset_time = int((now + timedelta(seconds=policy.window_seconds)).timestamp())
        if policy.fail_closed:
            return RateLimitResult(
                allowed=False,
                limit=policy.capacity,
                remaining=0,
                reset_time=reset_time,
                retry_after=policy.window_seconds,
            )
        return RateLimitResult(
            allowed=True,
            limit=policy.capacity,
            remaining=policy.capacity,
            reset_time=reset_time,
        )


@lru_cache
def get_rate_limiter() -> RateLimiter:
    """Get the process-wide limiter for the configured backend.

    Also used as a FastAPI dependency so tests can override it.
    """
    backend: RateLimitBackend
    if settings.rate_limit_backend == "redis":
        backend = RedisTokenBucket()
    else:
        backend = DatabaseTokenBucket(async_session_factory)
    return RateLimiter(backend, build_policies(settings))
