"""Link service: listing, deactivation and joining by code."""

from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from leaselink.core.database import ProcedureError, ProcedureResult, run_atomic
from leaselink.core.errors import NotFoundError
from leaselink.core.policy import PolicyEvaluator, owns_property
from leaselink.core.utils.codes import normalize_code
from leaselink.modules.links.models import TenantPropertyLink
from leaselink.modules.links.repos import LinkRepo, LinkRepository
from leaselink.modules.profiles.models import ProfileRole
from leaselink.modules.profiles.repos import ProfileRepository
from leaselink.modules.properties.repos import PropertyRepository


logger = structlog.get_logger()

JOIN_FAILED = "join_failed"
JOIN_FAILED_MESSAGE = "This join code is invalid or no longer accepted"


@dataclass
class JoinedProperty:
    """What a tenant learns after linking to a property."""

    property_id: UUID
    property_name: str


async def link_tenant(
    session: AsyncSession,
    subject: str,
    property_id: UUID,
    display_name: str | None = None,
    unit_label: str | None = None,
) -> TenantPropertyLink | None:
    """Onboard ``subject`` as a tenant and link them to a property.

    Must run inside an atomic procedure. An existing profile keeps its
    role; if that role is not tenant nothing is linked.

    Args:
        session: Session of the surrounding procedure
        subject: Caller's subject
        property_id: Property to link to
        display_name: Name to store on the profile
        unit_label: Label for a newly created link

    Returns:
        The active link, or None if the subject is not a tenant
    """
    profile = await ProfileRepository(session).upsert_for_onboarding(
        subject, ProfileRole.TENANT, display_name
    )
    if profile.role != ProfileRole.TENANT:
        return None
    return await LinkRepository(session).ensure_active(profile.id, property_id, unit_label)


class LinkService:
    """Service for tenant-property links."""

    def __init__(self, repo: LinkRepo) -> None:
        self.repo = repo
        self.policy = PolicyEvaluator(repo.session)

    async def list_links(
        self,
        subject: str,
        property_id: UUID | None = None,
        include_inactive: bool = False,
    ) -> list[TenantPropertyLink]:
        """List links visible to the caller. Empty when there are none or access is denied."""
        return await self.repo.list_visible(subject, property_id, include_inactive)

    async def deactivate_link(self, subject: str, link_id: UUID) -> TenantPropertyLink:
        """Deactivate a link, revoking the tenant's access to the property.

        Args:
            subject: Caller's subject
            link_id: Link to deactivate

        Returns:
            The deactivated link

        Raises:
            NotFoundError: If the caller cannot see the link
            ForbiddenError: If the caller can see it but does not own the property
        """
        link = await self.repo.get_visible(subject, link_id)
        if link is None:
            raise NotFoundError("Link not found", resource="link", resource_id=str(link_id))

        await self.policy.require(
            owns_property(subject, link.property_id),
            "Only the property owner can deactivate a link",
            link_id=link_id,
        )

        if not link.is_active:
            return link

        link = await self.repo.deactivate(link)
        logger.info(
            "link_deactivated",
            link_id=str(link.id),
            property_id=str(link.property_id),
        )
        return link

    async def join_by_code(
        self,
        subject: str,
        join_code: str,
        display_name: str | None = None,
        unit_label: str | None = None,
    ) -> ProcedureResult[JoinedProperty]:
        """Link the caller to a property through its public join code.

        Unknown codes, properties that do not accept self-signup and
        callers with a landlord profile all get the same failure.

        Args:
            subject: Caller's subject
            join_code: Code as typed by the tenant
            display_name: Name to store on the profile
            unit_label: Optional unit label

        Returns:
            ProcedureResult carrying the joined property
        """
        code = normalize_code(join_code)

        async def _join(session: AsyncSession) -> JoinedProperty:
            prop = await PropertyRepository(session).get_by_join_code(code)
            if prop is None or not prop.allow_signup_via_code:
                logger.info("join_code_rejected", reason="unknown_or_closed")
                raise ProcedureError(JOIN_FAILED, JOIN_FAILED_MESSAGE)

            link = await link_tenant(session, subject, prop.id, display_name, unit_label)
            if link is None:
                logger.info("join_code_rejected", reason="not_a_tenant")
                raise ProcedureError(JOIN_FAILED, JOIN_FAILED_MESSAGE)

            logger.info("join_code_accepted", property_id=str(prop.id), link_id=str(link.id))
            return JoinedProperty(property_id=prop.id, property_name=prop.name)

        return await run_atomic(self.repo.session, _join, name="join_property_by_code")


# Type alias for dependency injection
LinkSvc = Annotated[LinkService, Depends(LinkService)]
