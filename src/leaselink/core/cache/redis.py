"""Shared Redis connection for the rate-limit store.

Redis is optional: nothing connects until the Redis bucket backend or the
readiness probe asks for a client.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from leaselink.config import settings


_pool: ConnectionPool | None = None


def _get_pool() -> ConnectionPool:
    global _pool
    if _pool is None:
        # Short timeouts: a stalled store must not hold up the request
        # that is being rate limited.
        _pool = ConnectionPool.from_url(
            str(settings.redis_url),
            max_connections=settings.redis_max_connections,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_socket_timeout,
            decode_responses=True,
        )
    return _pool


@asynccontextmanager
async def redis_client() -> AsyncGenerator[redis.Redis, None]:  # type: ignore[type-arg]
    """Borrow a pooled client for the duration of the block."""
    client = redis.Redis(connection_pool=_get_pool())
    try:
        yield client
    finally:
        await client.aclose()


async def ping() -> bool:
    """Return True if Redis answers PING."""
    async with redis_client() as client:
        return bool(await client.ping())


async def close_redis_pool() -> None:
    """Drop the pool on shutdown; a later call to ``redis_client`` makes a new one."""
    global _pool
    if _pool is not None:
        await _pool.disconnect()
        _pool = None
