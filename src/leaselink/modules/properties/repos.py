"""Property repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, select

from leaselink.api.dependencies import DBSession
from leaselink.core.policy import can_read_property
from leaselink.modules.properties.models import Property, PropertyArea


class PropertyRepository:
    """Repository for Property and PropertyArea database operations.

    The ``*_visible`` methods filter by the read policy, so a caller
    without access gets the same answer as for a row that does not exist.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, prop: Property) -> Property:
        """Create a new property.

        Args:
            prop: Property instance to create

        Returns:
            The created property with ID populated
        """
        self.session.add(prop)
        await self.session.flush()
        await self.session.refresh(prop)
        return prop

    async def add_areas(self, property_id: UUID, names: list[str]) -> list[PropertyArea]:
        """Insert one area per name.

        Duplicate names violate the unique constraint on flush.
        """
        areas = [PropertyArea(property_id=property_id, name=name) for name in names]
        self.session.add_all(areas)
        await self.session.flush()
        return areas

    async def get_by_id(self, property_id: UUID) -> Property | None:
        """Get a property by ID without any policy filter."""
        result = await self.session.execute(select(Property).where(Property.id == property_id))
        return result.scalar_one_or_none()

    async def get_by_join_code(self, join_code: str) -> Property | None:
        result = await self.session.execute(
            select(Property).where(Property.join_code == join_code)
        )
        return result.scalar_one_or_none()

    async def join_code_exists(self, join_code: str) -> bool:
        result = await self.session.execute(
            select(func.count()).select_from(Property).where(Property.join_code == join_code)
        )
        return result.scalar_one() > 0

    async def get_by_idempotency_key(self, owner_id: UUID, key: str) -> Property | None:
        """Find the property an earlier onboarding call created with ``key``.

        Args:
            owner_id: Landlord profile ID
            key: Client-supplied idempotency key

        Returns:
            Property if the key was used before by this owner, None otherwise
        """
        result = await self.session.execute(
            select(Property).where(
                Property.owner_id == owner_id,
                Property.idempotency_key == key,
            )
        )
        return result.scalar_one_or_none()

    async def get_visible(self, subject: str, property_id: UUID) -> Property | None:
        """Get a property if ``subject`` may read it."""
        stmt = select(Property).where(
            Property.id == property_id,
            can_read_property(subject, Property.id),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_visible(
        self,
        subject: str,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Property], int]:
        """List the properties ``subject`` may read with pagination.

        Args:
            subject: Caller's subject
            page: Page number (1-indexed)
            page_size: Number of items per page

        Returns:
            Tuple of (properties list, total count)
        """
        visible = can_read_property(subject, Property.id)

        count_stmt = select(func.count()).select_from(Property).where(visible)
        total = (await self.session.execute(count_stmt)).scalar_one()

        offset = (page - 1) * page_size
        stmt = (
            select(Property)
            .where(visible)
            .order_by(Property.created_at.desc(), Property.id)
            .offset(offset)
            .limit(page_size)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def list_areas(self, property_id: UUID) -> list[PropertyArea]:
        result = await self.session.execute(
            select(PropertyArea)
            .where(PropertyArea.property_id == property_id)
            .order_by(PropertyArea.name)
        )
        return list(result.scalars().all())

    async def update(self, prop: Property) -> Property:
        """Flush pending changes to a property and reload it."""
        await self.session.flush()
        await self.session.refresh(prop)
        return prop


# Type alias for dependency injection
PropertyRepo = Annotated[PropertyRepository, Depends(PropertyRepository)]
