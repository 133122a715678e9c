"""Integration tests for the cleanup jobs."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leaselink.core.jobs.tasks.cleanup import (
    cleanup_invite_tokens,
    cleanup_rate_limit_buckets,
)
from leaselink.core.rate_limit.models import RateLimitBucket
from leaselink.modules.invites.models import InviteToken
from leaselink.modules.profiles.models import Profile
from leaselink.modules.properties.models import Property
from tests.factories.property import build_invite


pytestmark = pytest.mark.integration

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def _bucket(caller_key: str, reset_at: datetime) -> RateLimitBucket:
    return RateLimitBucket(
        endpoint="api",
        caller_key=caller_key,
        tokens=10,
        capacity=10,
        refilled_at=reset_at - timedelta(minutes=1),
        reset_at=reset_at,
    )


class TestCleanupRateLimitBuckets:
    """Tests for cleanup_rate_limit_buckets."""

    async def test_deletes_only_stale_buckets(self, db: AsyncSession, session_factory):
        db.add_all(
            [
                _bucket("ip:stale", NOW - timedelta(hours=48)),
                _bucket("ip:fresh", NOW - timedelta(hours=1)),
            ]
        )
        await db.flush()

        result = await cleanup_rate_limit_buckets({"db_session_factory": session_factory}, NOW)

        assert result == {"buckets_deleted": 1}
        remaining = (await db.execute(select(RateLimitBucket.caller_key))).scalars().all()
        assert remaining == ["ip:fresh"]

    async def test_nothing_to_delete(self, session_factory):
        result = await cleanup_rate_limit_buckets({"db_session_factory": session_factory}, NOW)

        assert result == {"buckets_deleted": 0}


class TestCleanupInviteTokens:
    """Tests for cleanup_invite_tokens."""

    async def test_deletes_closed_and_long_expired_invites(
        self,
        db: AsyncSession,
        session_factory,
        landlord: Profile,
        tenant: Profile,
        property_: Property,
    ):
        def invite(issued_days_ago: int, lifetime: timedelta) -> InviteToken:
            token, _ = build_invite(
                property_.id,
                landlord.id,
                issued_at=NOW - timedelta(days=issued_days_ago),
                expires_in=lifetime,
            )
            return token

        long_expired = invite(12, timedelta(days=2))
        recently_expired = invite(3, timedelta(days=2))
        pending = invite(1, timedelta(days=2))

        used_long_ago = invite(42, timedelta(days=2))
        used_long_ago.used_at = NOW - timedelta(days=40)
        used_long_ago.used_by = tenant.id

        revoked_long_ago = invite(33, timedelta(days=2))
        revoked_long_ago.revoked_at = NOW - timedelta(days=31)

        revoked_recently = invite(2, timedelta(days=2))
        revoked_recently.revoked_at = NOW - timedelta(days=1)

        db.add_all(
            [
                long_expired,
                recently_expired,
                pending,
                used_long_ago,
                revoked_long_ago,
                revoked_recently,
            ]
        )
        await db.flush()
        kept_ids = {recently_expired.id, pending.id, revoked_recently.id}

        result = await cleanup_invite_tokens({"db_session_factory": session_factory}, NOW)

        assert result == {"invites_deleted": 3}
        remaining = set((await db.execute(select(InviteToken.id))).scalars().all())
        assert remaining == kept_ids
