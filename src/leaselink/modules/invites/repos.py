"""Invite token repository for database operations."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, select, update

from leaselink.api.dependencies import DBSession
from leaselink.core.policy import owns_property
from leaselink.modules.invites.models import InviteToken
from leaselink.modules.invites.tokens import verify_secret


class InviteRepository:
    """Repository for InviteToken database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, invite: InviteToken) -> InviteToken:
        """Create a new invite token.

        Args:
            invite: InviteToken instance to create

        Returns:
            The created token with ID populated
        """
        self.session.add(invite)
        await self.session.flush()
        await self.session.refresh(invite)
        return invite

    async def get_by_id(self, invite_id: UUID) -> InviteToken | None:
        result = await self.session.execute(
            select(InviteToken).where(InviteToken.id == invite_id)
        )
        return result.scalar_one_or_none()

    async def find_by_secret(self, secret: str) -> InviteToken | None:
        """Find the token whose salted hash matches ``secret``.

        Every stored salt has to be tried, so this scans the table. Rows
        are removed by the cleanup job, which keeps the scan bounded.

        Args:
            secret: Plaintext invite secret

        Returns:
            Matching token, or None
        """
        candidates = await self.session.execute(
            select(InviteToken.id, InviteToken.salt, InviteToken.token_hash)
        )
        match: UUID | None = None
        for invite_id, salt, token_hash in candidates:
            if verify_secret(secret, salt, token_hash) and match is None:
                match = invite_id

        if match is None:
            return None
        return await self.get_by_id(match)

    async def mark_used(self, invite_id: UUID, profile_id: UUID, now: datetime) -> bool:
        """Redeem a token if it is still unused and not revoked.

        Concurrent callers serialize on the row lock taken by the UPDATE;
        every caller after the first sees ``used_at`` already set. A revoke
        that commits between the caller's status check and this claim is
        honoured too.

        Args:
            invite_id: Token to redeem
            profile_id: Redeeming profile
            now: Redemption time

        Returns:
            True if this call redeemed the token, False if it was already used
            or revoked
        """
        result = await self.session.execute(
            update(InviteToken)
            .where(
                InviteToken.id == invite_id,
                InviteToken.used_at.is_(None),
                InviteToken.revoked_at.is_(None),
            )
            .values(used_at=now, used_by=profile_id)
            .returning(InviteToken.id)
        )
        return result.scalar_one_or_none() is not None

    async def list_for_owner(self, subject: str, property_id: UUID) -> list[InviteToken]:
        """List a property's invites if ``subject`` owns it, newest first."""
        result = await self.session.execute(
            select(InviteToken)
            .where(
                InviteToken.property_id == property_id,
                owns_property(subject, InviteToken.property_id),
            )
            .order_by(InviteToken.issued_at.desc(), InviteToken.id)
        )
        return list(result.scalars().all())

    async def revoke(self, invite_id: UUID, now: datetime) -> InviteToken | None:
        """Revoke a token unless it has been redeemed.

        Revoking twice keeps the first ``revoked_at``.

        Returns:
            The revoked token, or None if it was redeemed first
        """
        result = await self.session.execute(
            update(InviteToken)
            .where(InviteToken.id == invite_id, InviteToken.used_at.is_(None))
            .values(revoked_at=func.coalesce(InviteToken.revoked_at, now))
            .returning(InviteToken),
            execution_options={"populate_existing": True},
        )
        return result.scalar_one_or_none()


# Type alias for dependency injection
InviteRepo = Annotated[InviteRepository, Depends(InviteRepository)]
