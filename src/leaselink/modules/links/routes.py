"""Link API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response

from leaselink.api.results import procedure_status
from leaselink.core.auth.dependencies import Subject
from leaselink.core.rate_limit import JOIN_CODE
from leaselink.core.rate_limit.dependencies import rate_limited, subject_key
from leaselink.modules.links.schemas import (
    JoinByCodeRequest,
    JoinByCodeResponse,
    LinkListResponse,
    LinkResponse,
)
from leaselink.modules.links.services import LinkSvc


router = APIRouter(prefix="/links", tags=["links"])


@router.get(
    "",
    response_model=LinkListResponse,
    summary="List links",
    description="Tenants see their own links; landlords see links of the properties they own.",
)
async def list_links(
    subject: Subject,
    service: LinkSvc,
    property_id: UUID | None = Query(None, description="Only links of this property"),
    include_inactive: bool = Query(False, description="Include deactivated links"),
) -> LinkListResponse:
    """List visible links."""
    links = await service.list_links(subject, property_id, include_inactive)
    return LinkListResponse(
        items=[LinkResponse.model_validate(link) for link in links],
        total=len(links),
    )


@router.post(
    "/{link_id}/deactivate",
    response_model=LinkResponse,
    summary="Deactivate link",
    description="Owner only. The tenant immediately loses access to the property.",
)
async def deactivate_link(
    link_id: UUID,
    subject: Subject,
    service: LinkSvc,
) -> LinkResponse:
    """Deactivate a tenant-property link."""
    link = await service.deactivate_link(subject, link_id)
    return LinkResponse.model_validate(link)


@router.post(
    "/join",
    response_model=JoinByCodeResponse,
    summary="Join a property by code",
    description="Links the caller as a tenant to a property that accepts self-signup.",
    dependencies=[Depends(rate_limited(JOIN_CODE, key=subject_key))],
)
async def join_by_code(
    data: JoinByCodeRequest,
    subject: Subject,
    service: LinkSvc,
    response: Response,
) -> JoinByCodeResponse:
    """Join a property by its join code."""
    result = await service.join_by_code(
        subject,
        data.join_code,
        display_name=data.display_name,
        unit_label=data.unit_label,
    )
    response.status_code = procedure_status(result)

    if not result.success or result.value is None:
        return JoinByCodeResponse(success=False, error_message=result.error_message)
    return JoinByCodeResponse(
        success=True,
        property_id=result.value.property_id,
        property_name=result.value.property_name,
    )
