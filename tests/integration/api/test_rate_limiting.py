"""Integration tests for rate limiting over the API."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leaselink.config import settings
from leaselink.core.rate_limit import (
    API,
    INVITE_VALIDATE,
    DatabaseTokenBucket,
    RateLimiter,
    RateLimitPolicy,
    get_rate_limiter,
)
from leaselink.core.rate_limit.models import RateLimitBucket
from leaselink.core.rate_limit.policies import build_policies
from leaselink.modules.profiles.models import Profile


pytestmark = pytest.mark.integration


def _tight_policies(capacity: int) -> dict[str, RateLimitPolicy]:
    policies = build_policies(settings)
    for endpoint in (API, INVITE_VALIDATE):
        policies[endpoint] = RateLimitPolicy(
            endpoint=endpoint,
            capacity=capacity,
            refill_tokens=capacity,
            window_seconds=60,
            fail_closed=policies[endpoint].fail_closed,
        )
    return policies


class TestDatabaseBuckets:
    """Buckets persisted in rate_limit_buckets."""

    @pytest.fixture(autouse=True)
    def tight_limits(self, app: FastAPI, session_factory) -> None:
        limiter = RateLimiter(DatabaseTokenBucket(session_factory), _tight_policies(2))
        app.dependency_overrides[get_rate_limiter] = lambda: limiter

    async def test_capacity_plus_one_is_rejected(
        self,
        client: AsyncClient,
        landlord: Profile,
        landlord_headers: dict[str, str],
    ):
        first = await client.get("/api/v1/properties", headers=landlord_headers)
        second = await client.get("/api/v1/properties", headers=landlord_headers)
        third = await client.get("/api/v1/properties", headers=landlord_headers)

        assert first.status_code == second.status_code == 200
        assert first.headers["X-RateLimit-Remaining"] == "1"
        assert second.headers["X-RateLimit-Remaining"] == "0"
        assert third.status_code == 429
        assert 0 < int(third.headers["Retry-After"]) <= 60
        assert third.headers["X-RateLimit-Limit"] == "2"
        assert third.json()["type"].endswith("/errors/rate_limited")

    async def test_callers_have_separate_buckets(
        self,
        client: AsyncClient,
        landlord_headers: dict[str, str],
        other_landlord_headers: dict[str, str],
    ):
        for _ in range(2):
            await client.get("/api/v1/properties", headers=landlord_headers)

        response = await client.get("/api/v1/properties", headers=other_landlord_headers)

        assert response.status_code == 200

    async def test_bucket_is_stored(
        self,
        client: AsyncClient,
        db: AsyncSession,
        landlord: Profile,
        landlord_headers: dict[str, str],
    ):
        await client.get("/api/v1/properties", headers=landlord_headers)

        bucket = (
            await db.execute(
                select(RateLimitBucket).where(
                    RateLimitBucket.endpoint == API,
                    RateLimitBucket.caller_key == f"subject:{landlord.external_subject}",
                )
            )
        ).scalar_one()
        assert bucket.tokens == 1
        assert bucket.capacity == 2

    async def test_unauthenticated_endpoint_keyed_by_ip(self, client: AsyncClient):
        """Validation draws from both the api and invite_validate buckets."""
        statuses = []
        for _ in range(3):
            response = await client.post(
                "/api/v1/invites/validate", json={"token": "ABCDEFGHJKMN"}
            )
            statuses.append(response.status_code)

        assert statuses == [200, 200, 429]


class TestStoreFailure:
    """Behaviour when the bucket store cannot be reached."""

    @pytest.fixture(autouse=True)
    def broken_store(self, app: FastAPI) -> None:
        backend = MagicMock()
        backend.take = AsyncMock(side_effect=OSError("connection refused"))
        limiter = RateLimiter(backend, build_policies(settings))
        app.dependency_overrides[get_rate_limiter] = lambda: limiter

    async def test_general_api_fails_open(
        self, client: AsyncClient, landlord_headers: dict[str, str]
    ):
        response = await client.get("/api/v1/properties", headers=landlord_headers)

        assert response.status_code == 200

    async def test_invite_validation_fails_closed(self, client: AsyncClient):
        response = await client.post("/api/v1/invites/validate", json={"token": "ABCDEFGHJKMN"})

        assert response.status_code == 429
        assert "Retry-After" in response.headers
