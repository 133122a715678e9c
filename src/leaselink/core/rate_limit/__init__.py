"""Persistent token-bucket rate limiting.

Buckets are keyed by (endpoint, caller_key) and live in a shared store
(PostgreSQL or Redis), so every application instance sees the same
counts.
"""

from leaselink.core.rate_limit.backend import (
    DatabaseTokenBucket,
    RateLimitResult,
    RedisTokenBucket,
)
from leaselink.core.rate_limit.limiter import RateLimiter, get_rate_limiter
from leaselink.core.rate_limit.policies import (
    API,
    INVITE_ACCEPT,
    INVITE_VALIDATE,
    JOIN_CODE,
    RateLimitPolicy,
)


__all__ = [
    "API",
    "INVITE_ACCEPT",
    "INVITE_VALIDATE",
    "JOIN_CODE",
    "DatabaseTokenBucket",
    "RateLimitPolicy",
    "RateLimitResult",
    "RateLimiter",
    "RedisTokenBucket",
    "get_rate_limiter",
]
