"""Property service for business logic."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from leaselink.core.constants import JOIN_CODE_MAX_ATTEMPTS
from leaselink.core.errors import ConflictError, NotFoundError
from leaselink.core.policy import PolicyEvaluator, can_manage_property
from leaselink.core.utils.codes import generate_join_code
from leaselink.modules.properties.models import Property, PropertyArea
from leaselink.modules.properties.repos import PropertyRepo, PropertyRepository
from leaselink.modules.properties.schemas import PropertyUpdate


logger = structlog.get_logger()


JOIN_CODE_EXHAUSTED = "join_code_exhausted"
JOIN_CODE_EXHAUSTED_MESSAGE = "Could not allocate a join code, please retry"


async def unique_join_code(repo: PropertyRepository) -> str | None:
    """Generate a join code no property uses yet.

    The unique index still guards against a concurrent insert picking the
    same code between this check and the write.

    Returns:
        The code, or None if every attempt collided
    """
    for _ in range(JOIN_CODE_MAX_ATTEMPTS):
        code = generate_join_code()
        if not await repo.join_code_exists(code):
            return code
    logger.warning("join_code_exhausted", attempts=JOIN_CODE_MAX_ATTEMPTS)
    return None


class PropertyService:
    """Service for reading and managing properties.

    Reads go through the policy-filtered repository methods. Writes check
    ``can_manage_property`` first and raise ForbiddenError for anyone but
    the owner.
    """

    def __init__(self, repo: PropertyRepo) -> None:
        self.repo = repo
        self.policy = PolicyEvaluator(repo.session)

    async def list_properties(
        self, subject: str, page: int = 1, page_size: int = 20
    ) -> tuple[list[Property], int]:
        """List properties the caller owns or is actively linked to."""
        return await self.repo.list_visible(subject, page, page_size)

    async def get_property(self, subject: str, property_id: UUID) -> Property:
        """Get a property the caller may read.

        Raises:
            NotFoundError: If it does not exist or the caller may not see it
        """
        prop = await self.repo.get_visible(subject, property_id)
        if prop is None:
            raise NotFoundError(
                "Property not found",
                resource="property",
                resource_id=str(property_id),
            )
        return prop

    async def list_areas(self, property_id: UUID) -> list[PropertyArea]:
        return await self.repo.list_areas(property_id)

    async def is_owner(self, subject: str, property_id: UUID) -> bool:
        return await self.policy.allows(can_manage_property(subject, property_id))

    async def _get_managed(self, subject: str, property_id: UUID) -> Property:
        await self.policy.require(
            can_manage_property(subject, property_id),
            "Not allowed to manage this property",
            property_id=property_id,
        )
        prop = await self.repo.get_by_id(property_id)
        if prop is None:
            raise NotFoundError(
                "Property not found",
                resource="property",
                resource_id=str(property_id),
            )
        return prop

    async def update_property(
        self, subject: str, property_id: UUID, data: PropertyUpdate
    ) -> Property:
        """Update a property's details.

        Args:
            subject: Caller's subject
            property_id: Property to update
            data: Fields to change

        Returns:
            The updated property

        Raises:
            ForbiddenError: If the caller does not own the property
        """
        prop = await self._get_managed(subject, property_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(prop, field, value)

        prop = await self.repo.update(prop)
        logger.info("property_updated", property_id=str(property_id))
        return prop

    async def regenerate_join_code(self, subject: str, property_id: UUID) -> Property:
        """Replace the join code, invalidating the old one.

        Raises:
            ForbiddenError: If the caller does not own the property
            ConflictError: If no free join code was found
        """
        prop = await self._get_managed(subject, property_id)
        join_code = await unique_join_code(self.repo)
        if join_code is None:
            raise ConflictError(JOIN_CODE_EXHAUSTED_MESSAGE, error_code=JOIN_CODE_EXHAUSTED)
        prop.join_code = join_code
        prop = await self.repo.update(prop)
        logger.info("property_join_code_regenerated", property_id=str(property_id))
        return prop


# Type alias for dependency injection
PropertySvc = Annotated[PropertyService, Depends(PropertyService)]
