"""Invite lifecycle: issue, validate, accept, revoke and list.

A token is in one of four states, judged at the moment it is looked at:
pending, used, revoked or expired. Expiry is never written; a token past
``expires_at`` simply stops validating. Revoked tokens behave exactly
like expired ones.

Everything a caller outside the owning landlord sees about a failed
lookup is the same generic message. The precise reason only goes to
the log.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from leaselink.config import settings
from leaselink.core.database import ProcedureError, ProcedureResult, run_atomic
from leaselink.core.errors import ConflictError, NotFoundError, ValidationError
from leaselink.core.policy import PolicyEvaluator, owns_property
from leaselink.core.utils.codes import is_well_formed_invite_secret, normalize_code
from leaselink.modules.invites.models import DeliveryMethod, InviteToken
from leaselink.modules.invites.repos import InviteRepo, InviteRepository
from leaselink.modules.invites.schemas import InviteStatus
from leaselink.modules.invites.tokens import generate_salt, generate_secret, hash_secret
from leaselink.modules.links.services import link_tenant
from leaselink.modules.profiles.repos import ProfileRepository
from leaselink.modules.properties.models import Property
from leaselink.modules.properties.repos import PropertyRepository


logger = structlog.get_logger()

INVITE_INVALID = "invite_invalid"
INVITE_ALREADY_USED = "invite_already_used"
INVITE_ERROR_MESSAGE = "This invite is invalid or has expired"


def utcnow() -> datetime:
    return datetime.now(UTC)


def invite_status(invite: InviteToken, now: datetime) -> InviteStatus:
    """Derive a token's state at ``now``."""
    if invite.used_at is not None:
        return InviteStatus.USED
    if invite.revoked_at is not None:
        return InviteStatus.REVOKED
    if invite.expires_at <= now:
        return InviteStatus.EXPIRED
    return InviteStatus.PENDING


@dataclass
class IssuedInvite:
    """A new invite together with its one-time plaintext secret."""

    invite: InviteToken
    token: str


@dataclass
class InviteCheck:
    """Outcome of validating a secret. ``reason`` is for logs only."""

    valid: bool
    invite: InviteToken | None = None
    property: Property | None = None
    reason: str | None = None


@dataclass
class AcceptedInvite:
    property_id: UUID
    property_name: str


async def check_secret(session: AsyncSession, secret: str, now: datetime) -> InviteCheck:
    """Look up a secret and decide whether it may be redeemed right now.

    Args:
        session: Database session
        secret: Secret as entered by the tenant
        now: Time to judge expiry against

    Returns:
        InviteCheck with the token and its property when valid
    """
    secret = normalize_code(secret)
    if not is_well_formed_invite_secret(secret):
        return InviteCheck(valid=False, reason="malformed")

    invite = await InviteRepository(session).find_by_secret(secret)
    if invite is None:
        return InviteCheck(valid=False, reason="not_found")

    state = invite_status(invite, now)
    if state is not InviteStatus.PENDING:
        return InviteCheck(valid=False, invite=invite, reason=state.value)

    prop = await PropertyRepository(session).get_by_id(invite.property_id)
    if prop is None:
        return InviteCheck(valid=False, invite=invite, reason="not_found")
    return InviteCheck(valid=True, invite=invite, property=prop)


class InviteService:
    """Service for the invite lifecycle."""

    def __init__(self, repo: InviteRepo) -> None:
        self.repo = repo
        self.session = repo.session
        self.policy = PolicyEvaluator(repo.session)

    async def issue_invite(
        self,
        subject: str,
        property_id: UUID,
        delivery_method: DeliveryMethod = DeliveryMethod.CODE,
        intended_email: str | None = None,
    ) -> IssuedInvite:
        """Issue a single-use invite for a property.

        Args:
            subject: Caller's subject
            property_id: Property the invite links to
            delivery_method: code or email
            intended_email: Recipient, required for email delivery

        Returns:
            IssuedInvite holding the plaintext secret, which is not stored

        Raises:
            ForbiddenError: If the caller does not own the property
            ValidationError: If email delivery has no recipient
        """
        await self.policy.require(
            owns_property(subject, property_id),
            "Only the property owner can issue invites",
            property_id=property_id,
        )

        if delivery_method == DeliveryMethod.EMAIL and not intended_email:
            raise ValidationError(
                "Email delivery requires a recipient",
                errors=[{"field": "intended_email", "message": "Required for email delivery"}],
            )

        owner = await ProfileRepository(self.session).get_by_subject(subject)
        if owner is None:
            raise NotFoundError("Profile not found", resource="profile")

        secret = generate_secret()
        salt = generate_salt()
        now = utcnow()
        invite = await self.repo.create(
            InviteToken(
                property_id=property_id,
                created_by=owner.id,
                token_hash=hash_secret(secret, salt),
                salt=salt,
                delivery_method=delivery_method,
                intended_email=intended_email,
                issued_at=now,
                expires_at=now + timedelta(hours=settings.invite_ttl_hours),
            )
        )

        logger.info(
            "invite_issued",
            invite_id=str(invite.id),
            property_id=str(property_id),
            delivery_method=delivery_method.value,
        )
        return IssuedInvite(invite=invite, token=secret)

    async def validate_invite(self, secret: str) -> InviteCheck:
        """Check whether a secret is currently redeemable.

        Read-only, so it can be repeated any number of times.
        """
        check = await check_secret(self.session, secret, utcnow())
        if not check.valid:
            logger.info("invite_validation_failed", reason=check.reason)
        return check

    async def accept_invite(
        self,
        subject: str,
        secret: str,
        display_name: str | None = None,
    ) -> ProcedureResult[AcceptedInvite]:
        """Redeem an invite and link the caller to its property as a tenant.

        The token is claimed with a conditional update, so of any number
        of concurrent redemptions exactly one succeeds. All failures carry
        the same message.

        Args:
            subject: Caller's subject
            secret: Secret as entered by the tenant
            display_name: Name to store on the profile

        Returns:
            ProcedureResult carrying the property name on success
        """
        now = utcnow()

        async def _accept(session: AsyncSession) -> AcceptedInvite:
            check = await check_secret(session, secret, now)
            if not check.valid or check.invite is None or check.property is None:
                logger.info("invite_accept_rejected", reason=check.reason)
                raise ProcedureError(INVITE_INVALID, INVITE_ERROR_MESSAGE)

            link = await link_tenant(session, subject, check.property.id, display_name)
            if link is None:
                logger.info("invite_accept_rejected", reason="not_a_tenant")
                raise ProcedureError(INVITE_INVALID, INVITE_ERROR_MESSAGE)

            # Claim last: a losing concurrent caller waits on the row lock here
            if not await InviteRepository(session).mark_used(check.invite.id, link.tenant_id, now):
                logger.info("invite_accept_rejected", reason="already_used")
                raise ProcedureError(INVITE_ALREADY_USED, INVITE_ERROR_MESSAGE)

            logger.info(
                "invite_accepted",
                invite_id=str(check.invite.id),
                property_id=str(check.property.id),
                link_id=str(link.id),
            )
            return AcceptedInvite(
                property_id=check.property.id,
                property_name=check.property.name,
            )

        return await run_atomic(self.session, _accept, name="accept_invite")

    async def revoke_invite(self, subject: str, invite_id: UUID) -> InviteToken:
        """Withdraw an unused invite.

        Raises:
            NotFoundError: If the invite does not exist
            ForbiddenError: If the caller does not own its property
            ConflictError: If the invite was already redeemed
        """
        invite = await self.repo.get_by_id(invite_id)
        if invite is None:
            raise NotFoundError("Invite not found", resource="invite", resource_id=str(invite_id))

        await self.policy.require(
            owns_property(subject, invite.property_id),
            "Only the property owner can revoke invites",
            invite_id=invite_id,
        )

        revoked = await self.repo.revoke(invite_id, utcnow())
        if revoked is None:
            raise ConflictError("Invite already redeemed", error_code=INVITE_ALREADY_USED)

        logger.info("invite_revoked", invite_id=str(invite_id))
        return revoked

    async def list_invites(self, subject: str, property_id: UUID) -> list[InviteToken]:
        """List a property's invites. Empty unless the caller owns the property."""
        return await self.repo.list_for_owner(subject, property_id)


# Type alias for dependency injection
InviteSvc = Annotated[InviteService, Depends(InviteService)]
