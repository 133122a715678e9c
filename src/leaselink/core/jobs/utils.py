"""Shared utilities for job infrastructure."""

from arq.connections import RedisSettings

from leaselink.config import settings


def get_redis_settings() -> RedisSettings:
    """Get Redis settings for ARQ from app configuration.

    Returns:
        ARQ RedisSettings parsed from ``settings.redis_url``
    """
    return RedisSettings.from_dsn(str(settings.redis_url))
