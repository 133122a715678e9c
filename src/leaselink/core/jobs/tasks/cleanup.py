"""Cleanup tasks for stale rows.

These only reclaim storage. Expiry is always judged at read time, so a
token or bucket that has not been cleaned up yet behaves the same as
one that has.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import structlog
from sqlalchemy import and_, delete, or_

from leaselink.config import settings
from leaselink.core.rate_limit.models import RateLimitBucket
from leaselink.modules.invites.models import InviteToken


log = structlog.get_logger()


async def cleanup_rate_limit_buckets(
    ctx: dict[str, Any], now: datetime | None = None
) -> dict[str, int]:
    """Delete buckets that have been full for longer than the retention window.

    Args:
        ctx: Worker context containing the database session factory
        now: Reference time, defaults to the current time

    Returns:
        Dict with the number of deleted buckets
    """
    session_factory = ctx["db_session_factory"]
    now = now or datetime.now(UTC)
    cutoff = now - timedelta(hours=settings.rate_limit_bucket_retention_hours)

    async with session_factory() as session:
        result = await session.execute(
            delete(RateLimitBucket).where(RateLimitBucket.reset_at < cutoff)
        )
        deleted = result.rowcount
        await session.commit()

    log.info("cleanup_rate_limit_buckets_complete", buckets_deleted=deleted)
    return {"buckets_deleted": deleted}


async def cleanup_invite_tokens(
    ctx: dict[str, Any], now: datetime | None = None
) -> dict[str, int]:
    """Delete invites that can never be redeemed again and are past retention.

    Expired tokens go after ``invite_retention_days``; used or revoked
    tokens after ``invite_used_retention_days``.

    Args:
        ctx: Worker context containing the database session factory
        now: Reference time, defaults to the current time

    Returns:
        Dict with the number of deleted tokens
    """
    session_factory = ctx["db_session_factory"]
    now = now or datetime.now(UTC)
    expired_cutoff = now - timedelta(days=settings.invite_retention_days)
    closed_cutoff = now - timedelta(days=settings.invite_used_retention_days)

    async with session_factory() as session:
        result = await session.execute(
            delete(InviteToken).where(
                or_(
                    and_(
                        InviteToken.used_at.is_(None),
                        InviteToken.expires_at < expired_cutoff,
                    ),
                    InviteToken.used_at < closed_cutoff,
                    InviteToken.revoked_at < closed_cutoff,
                )
            )
        )
        deleted = result.rowcount
        await session.commit()

    log.info("cleanup_invite_tokens_complete", invites_deleted=deleted)
    return {"invites_deleted": deleted}
