"""Pytest configuration and shared fixtures."""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from leaselink.config import settings
from leaselink.core.database import Base, get_db
from leaselink.core.rate_limit import DatabaseTokenBucket, RateLimiter, get_rate_limiter
from leaselink.core.rate_limit.models import RateLimitBucket  # noqa: F401
from leaselink.core.rate_limit.policies import build_policies
from leaselink.main import create_app
from leaselink.modules.invites.models import InviteToken  # noqa: F401
from leaselink.modules.links.models import TenantPropertyLink
from leaselink.modules.maintenance.models import MaintenanceRequest  # noqa: F401

# Import all models to ensure they're registered with Base.metadata
from leaselink.modules.profiles.models import Profile, ProfileRole
from leaselink.modules.properties.models import Property, PropertyArea  # noqa: F401
from tests.factories.auth import auth_headers
from tests.factories.profile import ProfileFactory
from tests.factories.property import PropertyFactory, TenantPropertyLinkFactory


# Test database URL - same server, database name with a _test suffix
TEST_DATABASE_URL = os.environ.get(
    "TEST_DATABASE_URL",
    settings.async_database_url.rsplit("/", 1)[0]
    + "/"
    + settings.async_database_url.rsplit("/", 1)[1]
    + "_test",
)


@pytest.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine with a fresh schema (triggers included)."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a transactional database session for tests.

    Each test runs in its own transaction that is rolled back after the
    test completes. Commits made by the code under test only release a
    savepoint inside that transaction.
    """
    async with engine.connect() as conn:
        await conn.begin()

        session = AsyncSession(
            bind=conn,
            expire_on_commit=False,
            autoflush=False,
            join_transaction_mode="create_savepoint",
        )
        try:
            yield session
        finally:
            await session.close()
            await conn.rollback()


@pytest.fixture
def session_factory(db: AsyncSession):
    """Session factory that hands out the test session without closing it."""

    @asynccontextmanager
    async def factory() -> AsyncGenerator[AsyncSession, None]:
        yield db

    return factory


@pytest.fixture
def rate_limiter(session_factory) -> RateLimiter:
    """Database-backed limiter whose buckets live in the test transaction."""
    return RateLimiter(DatabaseTokenBucket(session_factory), build_policies(settings))


@pytest.fixture
async def app(db: AsyncSession, rate_limiter: RateLimiter) -> AsyncGenerator[FastAPI, None]:
    """Create test application instance."""
    application = create_app()

    # Override database dependency
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_rate_limiter] = lambda: rate_limiter

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================================
# Profile, Property and Link Fixtures
# ============================================================


@pytest.fixture
async def landlord(db: AsyncSession) -> Profile:
    """Create a landlord profile."""
    profile = ProfileFactory.build(role=ProfileRole.LANDLORD)
    db.add(profile)
    await db.flush()
    return profile


@pytest.fixture
async def other_landlord(db: AsyncSession) -> Profile:
    """Create a second, unrelated landlord profile."""
    profile = ProfileFactory.build(role=ProfileRole.LANDLORD)
    db.add(profile)
    await db.flush()
    return profile


@pytest.fixture
async def tenant(db: AsyncSession) -> Profile:
    """Create a tenant profile."""
    profile = ProfileFactory.build(role=ProfileRole.TENANT)
    db.add(profile)
    await db.flush()
    return profile


@pytest.fixture
async def property_(db: AsyncSession, landlord: Profile) -> Property:
    """Create a property owned by ``landlord`` that accepts its join code."""
    prop = PropertyFactory.build(owner_id=landlord.id)
    db.add(prop)
    await db.flush()
    return prop


@pytest.fixture
async def link(db: AsyncSession, tenant: Profile, property_: Property) -> TenantPropertyLink:
    """Create an active link between ``tenant`` and ``property_``."""
    link = TenantPropertyLinkFactory.build(tenant_id=tenant.id, property_id=property_.id)
    db.add(link)
    await db.flush()
    return link


@pytest.fixture
def landlord_headers(landlord: Profile) -> dict[str, str]:
    return auth_headers(landlord.external_subject)


@pytest.fixture
def other_landlord_headers(other_landlord: Profile) -> dict[str, str]:
    return auth_headers(other_landlord.external_subject)


@pytest.fixture
def tenant_headers(tenant: Profile) -> dict[str, str]:
    return auth_headers(tenant.external_subject)
