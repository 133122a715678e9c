"""Token bucket backends.

Buckets hold up to ``capacity`` tokens. At the end of every window
``refill_tokens`` are added back (capped at capacity). A full bucket
restarts its window at the next request, so a burst of ``capacity + 1``
requests inside one window always has its last request denied.

Both backends make the read-modify-write of a bucket atomic: the
database backend holds a row lock for the duration of one transaction,
the Redis backend runs the whole update as a single Lua script.
"""

import math
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from leaselink.core.cache.redis import redis_client
from leaselink.core.database.transaction import unit_of_work
from leaselink.core.rate_limit.models import RateLimitBucket
from leaselink.core.rate_limit.policies import RateLimitPolicy


@dataclass
class RateLimitResult:
    """Result of a rate limit check."""

    allowed: bool
    limit: int
    remaining: int
    reset_time: int
    retry_after: int | None = None


@dataclass(frozen=True)
class BucketState:
    """Tokens left and the start of the current refill interval."""

    tokens: int
    window_start: datetime


def refill_and_take(
    state: BucketState | None, policy: RateLimitPolicy, now: datetime
) -> tuple[BucketState, RateLimitResult]:
    """Apply elapsed refills to a bucket, then try to take one token.

    Args:
        state: Stored bucket, or None for a bucket seen for the first time
        policy: Bucket parameters
        now: Current time

    Returns:
        Tuple of (new bucket state, check result)
    """
    if state is None:
        tokens, window_start = policy.capacity, now
    else:
        tokens, window_start = state.tokens, state.window_start
        elapsed = max(0.0, (now - window_start).total_seconds())
        intervals = int(elapsed // policy.window_seconds)
        if intervals:
            tokens = min(policy.capacity, tokens + intervals * policy.refill_tokens)
            window_start += timedelta(seconds=intervals * policy.window_seconds)

    if tokens >= policy.capacity:
        tokens, window_start = policy.capacity, now

    allowed = tokens >= 1
    if allowed:
        tokens -= 1

    window_end = window_start + timedelta(seconds=policy.window_seconds)
    retry_after = None
    if not allowed:
        retry_after = max(1, math.ceil((window_end - now).total_seconds()))

    result = RateLimitResult(
        allowed=allowed,
        limit=policy.capacity,
        remaining=tokens,
        reset_time=int(window_end.timestamp()),
        retry_after=retry_after,
    )
    return BucketState(tokens=tokens, window_start=window_start), result


class RateLimitBackend(Protocol):
    """Shared store that performs one atomic bucket check."""

    async def take(
        self, policy: RateLimitPolicy, caller_key: str, now: datetime
    ) -> RateLimitResult: ...


SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class DatabaseTokenBucket:
    """Bucket store in the ``rate_limit_buckets`` table.

    Each check runs in its own session so that rolling back the request's
    transaction never refunds a token.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self.session_factory = session_factory

    async def take(
        self, policy: RateLimitPolicy, caller_key: str, now: datetime
    ) -> RateLimitResult:
        """Check and update one bucket under a row lock."""
        async with self.session_factory() as session, unit_of_work(session):
            # Make sure the row exists so concurrent first requests lock the same row
            await session.execute(
                pg_insert(RateLimitBucket)
                .values(
                    endpoint=policy.endpoint,
                    caller_key=caller_key,
                    tokens=policy.capacity,
                    capacity=policy.capacity,
                    refilled_at=now,
                    reset_at=now,
                )
                .on_conflict_do_nothing(index_elements=["endpoint", "caller_key"])
            )

            bucket = (
                await session.execute(
                    select(RateLimitBucket)
                    .where(
                        RateLimitBucket.endpoint == policy.endpoint,
                        RateLimitBucket.caller_key == caller_key,
                    )
                    .with_for_update()
                    .execution_options(populate_existing=True)
                )
            ).scalar_one()

            state, result = refill_and_take(
                BucketState(tokens=bucket.tokens, window_start=bucket.refilled_at),
                policy,
                now,
            )
            bucket.tokens = state.tokens
            bucket.capacity = policy.capacity
            bucket.refilled_at = state.window_start
            bucket.reset_at = datetime.fromtimestamp(result.reset_time, tz=UTC)

        return result


# KEYS[1] bucket key; ARGV: capacity, refill_tokens, window_seconds, now (epoch seconds)
TOKEN_BUCKET_SCRIPT = """
local capacity = tonumber(ARGV[1])
local refill = tonumber(ARGV[2])
local window = tonumber(ARGV[3])
local now = tonumber(ARGV[4])

local state = redis.call('HMGET', KEYS[1], 'tokens', 'window_start')
local tokens = tonumber(state[1])
local window_start = tonumber(state[2])

if tokens == nil or window_start == nil then
    tokens = capacity
    window_start = now
else
    local intervals = math.floor(math.max(0, now - window_start) / window)
    if intervals > 0 then
        tokens = math.min(capacity, tokens + intervals * refill)
        window_start = window_start + intervals * window
    end
end

if tokens >= capacity then
    tokens = capacity
    window_start = now
end

local allowed = 0
if tokens >= 1 then
    tokens = tokens - 1
    allowed = 1
end

redis.call('HSET', KEYS[1], 'tokens', tokens, 'window_start', tostring(window_start))
redis.call('EXPIRE', KEYS[1], math.ceil(window * 2))

return {allowed, tokens, tostring(window_start)}
"""


class RedisTokenBucket:
    """Bucket store in Redis hashes, updated by a Lua script."""

    def __init__(self, prefix: str = "ratelimit") -> None:
        """Initialize the backend.

        Args:
            prefix: Key prefix for Redis keys
        """
        self.prefix = prefix

    def _build_key(self, endpoint: str, caller_key: str) -> str:
        return f"{self.prefix}:{endpoint}:{caller_key}"

    async def take(
        self, policy: RateLimitPolicy, caller_key: str, now: datetime
    ) -> RateLimitResult:
        """Check and update one bucket atomically in Redis."""
        async with redis_client() as client:
            raw: Any = await client.eval(
                TOKEN_BUCKET_SCRIPT,
                1,
                self._build_key(policy.endpoint, caller_key),
                policy.capacity,
                policy.refill_tokens,
                policy.window_seconds,
                now.timestamp(),
            )

        allowed, tokens, window_start = int(raw[0]), int(raw[1]), float(raw[2])
        window_end = window_start + policy.window_seconds
        return RateLimitResult(
            allowed=bool(allowed),
            limit=policy.capacity,
            remaining=tokens,
            reset_time=int(window_end),
            retry_after=None
            if allowed
            else max(1, math.ceil(window_end - now.timestamp())),
        )
