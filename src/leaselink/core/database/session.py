"""Engine, session factory and the per-request session dependency."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from leaselink.config import settings


def build_engine(url: str | None = None) -> AsyncEngine:
    """Create the asyncpg engine.

    Connections are tagged with the application name so long-running
    procedures can be told apart in ``pg_stat_activity``.
    """
    return create_async_engine(
        url or settings.async_database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        echo=settings.database_echo,
        pool_pre_ping=True,
        connect_args={"server_settings": {"application_name": settings.app_name}},
    )


async_engine = build_engine()

# Objects stay usable after commit; procedures return ORM rows to routes
async_session_factory = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield the request's session.

    Atomic procedures commit their own work. Whatever plain row writes
    the route made are committed once it returns, and everything still
    pending is rolled back if it raises.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        if session.in_transaction():
            await session.commit()
