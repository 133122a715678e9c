"""Tenant-property link repository for database operations."""

from datetime import UTC, datetime
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select

from leaselink.api.dependencies import DBSession
from leaselink.core.policy import can_read_shared
from leaselink.modules.links.models import TenantPropertyLink


class LinkRepository:
    """Repository for TenantPropertyLink database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def get_by_id(self, link_id: UUID) -> TenantPropertyLink | None:
        result = await self.session.execute(
            select(TenantPropertyLink).where(TenantPropertyLink.id == link_id)
        )
        return result.scalar_one_or_none()

    async def get_visible(self, subject: str, link_id: UUID) -> TenantPropertyLink | None:
        """Get a link if ``subject`` is its tenant or owns its property."""
        result = await self.session.execute(
            select(TenantPropertyLink).where(
                TenantPropertyLink.id == link_id,
                can_read_shared(
                    subject, TenantPropertyLink.tenant_id, TenantPropertyLink.property_id
                ),
            )
        )
        return result.scalar_one_or_none()

    async def get_active(self, tenant_id: UUID, property_id: UUID) -> TenantPropertyLink | None:
        """Get the active link between a tenant and a property, if any."""
        result = await self.session.execute(
            select(TenantPropertyLink).where(
                TenantPropertyLink.tenant_id == tenant_id,
                TenantPropertyLink.property_id == property_id,
                TenantPropertyLink.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def ensure_active(
        self,
        tenant_id: UUID,
        property_id: UUID,
        unit_label: str | None = None,
    ) -> TenantPropertyLink:
        """Return the active link for the pair, creating it if missing.

        Args:
            tenant_id: Tenant profile ID
            property_id: Property ID
            unit_label: Label stored on a newly created link

        Returns:
            The existing or newly inserted active link
        """
        existing = await self.get_active(tenant_id, property_id)
        if existing is not None:
            return existing

        link = TenantPropertyLink(
            tenant_id=tenant_id,
            property_id=property_id,
            unit_label=unit_label,
            is_active=True,
        )
        self.session.add(link)
        await self.session.flush()
        await self.session.refresh(link)
        return link

    async def list_visible(
        self,
        subject: str,
        property_id: UUID | None = None,
        include_inactive: bool = False,
    ) -> list[TenantPropertyLink]:
        """List links ``subject`` may read.

        A tenant sees their own links, a landlord sees the links of the
        properties they own.

        Args:
            subject: Caller's subject
            property_id: Restrict to one property
            include_inactive: Also return deactivated links

        Returns:
            Links ordered newest first
        """
        stmt = select(TenantPropertyLink).where(
            can_read_shared(subject, TenantPropertyLink.tenant_id, TenantPropertyLink.property_id)
        )
        if property_id is not None:
            stmt = stmt.where(TenantPropertyLink.property_id == property_id)
        if not include_inactive:
            stmt = stmt.where(TenantPropertyLink.is_active.is_(True))

        result = await self.session.execute(
            stmt.order_by(TenantPropertyLink.created_at.desc(), TenantPropertyLink.id)
        )
        return list(result.scalars().all())

    async def deactivate(self, link: TenantPropertyLink) -> TenantPropertyLink:
        """Mark a link inactive. The row is kept for history."""
        link.is_active = False
        link.deactivated_at = datetime.now(UTC)
        await self.session.flush()
        await self.session.refresh(link)
        return link


# Type alias for dependency injection
LinkRepo = Annotated[LinkRepository, Depends(LinkRepository)]
