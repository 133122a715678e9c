"""Invite API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from leaselink.api.results import procedure_status
from leaselink.core.auth.dependencies import Subject
from leaselink.core.rate_limit import INVITE_ACCEPT, INVITE_VALIDATE
from leaselink.core.rate_limit.dependencies import client_ip_key, rate_limited, subject_key
from leaselink.modules.invites.models import InviteToken
from leaselink.modules.invites.schemas import (
    AcceptInviteRequest,
    AcceptInviteResponse,
    InviteListResponse,
    InviteResponse,
    IssueInviteRequest,
    IssueInviteResponse,
    ValidateInviteRequest,
    ValidateInviteResponse,
)
from leaselink.modules.invites.services import (
    INVITE_ERROR_MESSAGE,
    InviteSvc,
    invite_status,
    utcnow,
)
from leaselink.modules.properties.schemas import PropertyPublicInfo


router = APIRouter(prefix="/invites", tags=["invites"])


def _to_response(invite: InviteToken) -> InviteResponse:
    return InviteResponse(
        id=invite.id,
        property_id=invite.property_id,
        delivery_method=invite.delivery_method,
        intended_email=invite.intended_email,
        issued_at=invite.issued_at,
        expires_at=invite.expires_at,
        used_at=invite.used_at,
        revoked_at=invite.revoked_at,
        status=invite_status(invite, utcnow()),
    )


@router.post(
    "",
    response_model=IssueInviteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Issue invite",
    description="Owner only. The returned token is shown once and cannot be retrieved later.",
)
async def issue_invite(
    data: IssueInviteRequest,
    subject: Subject,
    service: InviteSvc,
) -> IssueInviteResponse:
    """Issue an invite for a property."""
    issued = await service.issue_invite(
        subject,
        data.property_id,
        delivery_method=data.delivery_method,
        intended_email=data.intended_email,
    )
    return IssueInviteResponse(
        invite_id=issued.invite.id,
        token=issued.token,
        expires_at=issued.invite.expires_at,
    )


@router.get(
    "",
    response_model=InviteListResponse,
    summary="List invites",
    description="Invites of a property. Empty unless the caller owns it.",
)
async def list_invites(
    subject: Subject,
    service: InviteSvc,
    property_id: UUID = Query(..., description="Property to list invites for"),
) -> InviteListResponse:
    """List invites for a property."""
    invites = await service.list_invites(subject, property_id)
    return InviteListResponse(items=[_to_response(i) for i in invites], total=len(invites))


@router.post(
    "/validate",
    response_model=ValidateInviteResponse,
    summary="Validate invite",
    description="Checks a token without redeeming it. No authentication required.",
    dependencies=[Depends(rate_limited(INVITE_VALIDATE, key=client_ip_key))],
)
async def validate_invite(
    data: ValidateInviteRequest,
    service: InviteSvc,
) -> ValidateInviteResponse:
    """Validate an invite token."""
    check = await service.validate_invite(data.token)
    if not check.valid or check.property is None:
        return ValidateInviteResponse(valid=False, reason=INVITE_ERROR_MESSAGE)
    return ValidateInviteResponse(
        valid=True,
        property=PropertyPublicInfo.model_validate(check.property),
    )


@router.post(
    "/accept",
    response_model=AcceptInviteResponse,
    summary="Accept invite",
    description="Redeems a token and links the caller to the property as a tenant.",
    dependencies=[Depends(rate_limited(INVITE_ACCEPT, key=subject_key))],
)
async def accept_invite(
    data: AcceptInviteRequest,
    subject: Subject,
    service: InviteSvc,
    response: Response,
) -> AcceptInviteResponse:
    """Accept an invite."""
    result = await service.accept_invite(subject, data.token, display_name=data.display_name)
    response.status_code = procedure_status(result)

    if not result.success or result.value is None:
        return AcceptInviteResponse(success=False, error_message=result.error_message)
    return AcceptInviteResponse(success=True, property_name=result.value.property_name)


@router.post(
    "/{invite_id}/revoke",
    response_model=InviteResponse,
    summary="Revoke invite",
    description="Owner only. A revoked invite can no longer be validated or accepted.",
)
async def revoke_invite(
    invite_id: UUID,
    subject: Subject,
    service: InviteSvc,
) -> InviteResponse:
    """Revoke an unused invite."""
    invite = await service.revoke_invite(subject, invite_id)
    return _to_response(invite)
