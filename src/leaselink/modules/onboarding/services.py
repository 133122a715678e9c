"""Landlord onboarding.

Onboarding creates the landlord's profile, their first property and its
areas in one atomic procedure. Inputs are checked before the procedure
starts, so invalid requests never open a transaction.
"""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from leaselink.api.dependencies import DBSession
from leaselink.api.results import VALIDATION_FAILED
from leaselink.config import settings
from leaselink.core.constants import MAX_AREA_NAME_LENGTH, MAX_BEDROOMS
from leaselink.core.database import ProcedureError, ProcedureResult, run_atomic
from leaselink.modules.profiles.models import ProfileRole
from leaselink.modules.profiles.repos import ProfileRepository
from leaselink.modules.properties.models import Property, PropertyType
from leaselink.modules.properties.repos import PropertyRepository
from leaselink.modules.properties.services import (
    JOIN_CODE_EXHAUSTED,
    JOIN_CODE_EXHAUSTED_MESSAGE,
    unique_join_code,
)


logger = structlog.get_logger()

NOT_A_LANDLORD = "not_a_landlord"

# Numeric(3, 1) column
MAX_BATHROOMS = 99.9


def validate_onboarding(
    property_name: str | None,
    address: str | None,
    property_type: str | None,
    bedrooms: int,
    bathrooms: float,
    area_names: list[str],
    require_areas: bool = False,
) -> str | None:
    """Check onboarding input.

    Returns:
        The first problem found, or None when the input is valid
    """
    if not property_name or not property_name.strip():
        return "Property name is required"
    if address is None or not address.strip():
        return "Address is required"
    if property_type not in {member.value for member in PropertyType}:
        return "Property type must be one of: " + ", ".join(m.value for m in PropertyType)
    if bedrooms < 0:
        return "Bedrooms cannot be negative"
    if bedrooms > MAX_BEDROOMS:
        return f"Bedrooms cannot exceed {MAX_BEDROOMS}"
    if bathrooms < 0 or bathrooms > MAX_BATHROOMS:
        return "Bathrooms must be between 0 and 99.9"
    if require_areas and not area_names:
        return "At least one area is required"
    seen: set[str] = set()
    for name in area_names:
        if not name or not name.strip():
            return "Area names cannot be blank"
        if len(name.strip()) > MAX_AREA_NAME_LENGTH:
            return f"Area names are limited to {MAX_AREA_NAME_LENGTH} characters"
        key = name.strip().casefold()
        if key in seen:
            return f"Area name '{name.strip()}' is listed more than once"
        seen.add(key)
    return None


class OnboardingService:
    """Service running the OnboardLandlord procedure."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def onboard_landlord(
        self,
        subject: str,
        *,
        property_name: str,
        address: str,
        property_type: str,
        bedrooms: int = 0,
        bathrooms: float = 0,
        area_names: list[str] | None = None,
        display_name: str | None = None,
        allow_signup_via_code: bool = False,
        idempotency_key: str | None = None,
    ) -> ProcedureResult[UUID]:
        """Create a landlord profile with its first property and areas.

        Either everything is written or nothing is. Repeating a call with
        the same ``idempotency_key`` returns the property created the
        first time.

        Args:
            subject: Caller's subject
            property_name: Property display name
            address: Street address
            property_type: One of apartment, house, condo, townhouse
            bedrooms: Bedroom count
            bathrooms: Bathroom count
            area_names: One area is created per name
            display_name: Landlord display name
            allow_signup_via_code: Whether tenants may join with the join code
            idempotency_key: Client key for safe retries

        Returns:
            ProcedureResult with the property ID
        """
        area_names = area_names or []
        problem = validate_onboarding(
            property_name,
            address,
            property_type,
            bedrooms,
            bathrooms,
            area_names,
            require_areas=settings.onboarding_require_areas,
        )
        if problem is not None:
            logger.info("onboarding_rejected", reason="validation", problem=problem)
            return ProcedureResult.failed(VALIDATION_FAILED, problem)

        async def _onboard(session: AsyncSession) -> UUID:
            profile = await ProfileRepository(session).upsert_for_onboarding(
                subject, ProfileRole.LANDLORD, display_name
            )
            if profile.role != ProfileRole.LANDLORD:
                raise ProcedureError(
                    NOT_A_LANDLORD,
                    "This account cannot onboard as a landlord",
                )

            properties = PropertyRepository(session)
            if idempotency_key:
                existing = await properties.get_by_idempotency_key(profile.id, idempotency_key)
                if existing is not None:
                    logger.info("onboarding_replayed", property_id=str(existing.id))
                    return existing.id

            join_code = await unique_join_code(properties)
            if join_code is None:
                raise ProcedureError(
                    JOIN_CODE_EXHAUSTED, JOIN_CODE_EXHAUSTED_MESSAGE, retryable=True
                )

            prop = await properties.create(
                Property(
                    owner_id=profile.id,
                    name=property_name.strip(),
                    address=address.strip(),
                    property_type=PropertyType(property_type),
                    bedrooms=bedrooms,
                    bathrooms=bathrooms,
                    join_code=join_code,
                    allow_signup_via_code=allow_signup_via_code,
                    idempotency_key=idempotency_key,
                )
            )
            await properties.add_areas(prop.id, [name.strip() for name in area_names])

            logger.info(
                "landlord_onboarded",
                profile_id=str(profile.id),
                property_id=str(prop.id),
                area_count=len(area_names),
            )
            return prop.id

        return await run_atomic(self.session, _onboard, name="onboard_landlord")


# Type alias for dependency injection
OnboardingSvc = Annotated[OnboardingService, Depends(OnboardingService)]
