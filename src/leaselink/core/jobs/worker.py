"""ARQ worker configuration.

Defines the registered jobs, their cron schedules and the startup and
shutdown hooks.
"""

from typing import Any, ClassVar

import structlog
from arq import cron
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from leaselink.config import settings
from leaselink.core.jobs.tasks.cleanup import cleanup_invite_tokens, cleanup_rate_limit_buckets
from leaselink.core.jobs.utils import get_redis_settings
from leaselink.core.logging import configure_logging


async def startup(ctx: dict[str, Any]) -> None:
    """Initialize resources for the worker.

    Called once when the worker starts. Jobs read the session factory
    from ``ctx``.

    Args:
        ctx: Worker context dict (shared across all jobs)
    """
    configure_logging()
    log = structlog.get_logger()
    log.info("worker_startup", environment=settings.environment)

    engine = create_async_engine(
        settings.async_database_url,
        pool_size=5,
        max_overflow=10,
        echo=settings.database_echo,
    )
    ctx["db_engine"] = engine
    ctx["db_session_factory"] = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    log.info("worker_startup_complete")


async def shutdown(ctx: dict[str, Any]) -> None:
    """Cleanup resources when the worker stops.

    Args:
        ctx: Worker context dict
    """
    log = structlog.get_logger()
    log.info("worker_shutdown")

    engine = ctx.get("db_engine")
    if engine:
        await engine.dispose()
        log.info("database_engine_disposed")

    log.info("worker_shutdown_complete")


class WorkerSettings:
    """ARQ worker settings.

    Run the worker with:
        arq leaselink.core.jobs.worker.WorkerSettings
    """

    functions: ClassVar[list[Any]] = [
        cleanup_rate_limit_buckets,
        cleanup_invite_tokens,
    ]

    cron_jobs: ClassVar[list[Any]] = [
        # Buckets hourly, invites daily at 3 AM
        cron(cleanup_rate_limit_buckets, minute=15),
        cron(cleanup_invite_tokens, hour=3, minute=0),
    ]

    on_startup = startup
    on_shutdown = shutdown

    redis_settings = get_redis_settings()

    max_jobs = 10
    job_timeout = 300
    keep_result = 3600
    retry_jobs = True
    max_tries = 3
