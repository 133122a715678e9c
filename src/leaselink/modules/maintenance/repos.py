"""Maintenance request repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import ColumnElement, func, select

from leaselink.api.dependencies import DBSession
from leaselink.core.policy import can_read_tenant_activity
from leaselink.modules.maintenance.models import MaintenanceRequest, MaintenanceStatus


def _readable_by(subject: str) -> ColumnElement[bool]:
    return can_read_tenant_activity(
        subject, MaintenanceRequest.tenant_id, MaintenanceRequest.property_id
    )


class MaintenanceRepository:
    """Repository for MaintenanceRequest database operations.

    Reads are filtered per row: the raising tenant while their link is
    active, and the owner of the property.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, request: MaintenanceRequest) -> MaintenanceRequest:
        self.session.add(request)
        await self.session.flush()
        await self.session.refresh(request)
        return request

    async def get_visible(self, subject: str, request_id: UUID) -> MaintenanceRequest | None:
        """Get a request if ``subject`` may read it."""
        result = await self.session.execute(
            select(MaintenanceRequest).where(
                MaintenanceRequest.id == request_id,
                _readable_by(subject),
            )
        )
        return result.scalar_one_or_none()

    async def list_visible(
        self,
        subject: str,
        property_id: UUID | None = None,
        status: MaintenanceStatus | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[MaintenanceRequest], int]:
        """List requests ``subject`` may read with pagination.

        Args:
            subject: Caller's subject
            property_id: Restrict to one property
            status: Restrict to one status
            page: Page number (1-indexed)
            page_size: Number of items per page

        Returns:
            Tuple of (requests list, total count)
        """
        filters = [_readable_by(subject)]
        if property_id is not None:
            filters.append(MaintenanceRequest.property_id == property_id)
        if status is not None:
            filters.append(MaintenanceRequest.status == status)

        count_stmt = select(func.count()).select_from(MaintenanceRequest).where(*filters)
        total = (await self.session.execute(count_stmt)).scalar_one()

        offset = (page - 1) * page_size
        stmt = (
            select(MaintenanceRequest)
            .where(*filters)
            .order_by(MaintenanceRequest.created_at.desc(), MaintenanceRequest.id)
            .offset(offset)
            .limit(page_size)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def update(self, request: MaintenanceRequest) -> MaintenanceRequest:
        await self.session.flush()
        await self.session.refresh(request)
        return request


# Type alias for dependency injection
MaintenanceRepo = Annotated[MaintenanceRepository, Depends(MaintenanceRepository)]
