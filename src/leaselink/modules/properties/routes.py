"""Property API routes."""

from uuid import UUID

from fastapi import APIRouter

from leaselink.api.dependencies import PageParams
from leaselink.core.auth.dependencies import Subject
from leaselink.modules.properties.models import Property
from leaselink.modules.properties.schemas import (
    PropertyAreaResponse,
    PropertyDetailResponse,
    PropertyListResponse,
    PropertyResponse,
    PropertyUpdate,
)
from leaselink.modules.properties.services import PropertySvc


router = APIRouter(prefix="/properties", tags=["properties"])


def _to_response(prop: Property, subject_is_owner: bool) -> PropertyResponse:
    response = PropertyResponse.model_validate(prop)
    if not subject_is_owner:
        response.join_code = None
        response.allow_signup_via_code = None
    return response


@router.get(
    "",
    response_model=PropertyListResponse,
    summary="List properties",
    description="Properties the caller owns or is actively linked to. Empty when there are none.",
)
async def list_properties(
    subject: Subject,
    service: PropertySvc,
    pagination: PageParams,
) -> PropertyListResponse:
    """List visible properties."""
    props, total = await service.list_properties(
        subject, page=pagination.page, page_size=pagination.page_size
    )
    items = [
        _to_response(prop, await service.is_owner(subject, prop.id)) for prop in props
    ]
    return PropertyListResponse(
        items=items,
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


@router.get(
    "/{property_id}",
    response_model=PropertyDetailResponse,
    summary="Get property",
    description="Returns 404 for unknown properties and for properties the caller may not read.",
)
async def get_property(
    property_id: UUID,
    subject: Subject,
    service: PropertySvc,
) -> PropertyDetailResponse:
    """Get a property with its areas."""
    prop = await service.get_property(subject, property_id)
    base = _to_response(prop, await service.is_owner(subject, property_id))
    areas = await service.list_areas(property_id)
    return PropertyDetailResponse(
        **base.model_dump(),
        areas=[PropertyAreaResponse.model_validate(area) for area in areas],
    )


@router.patch(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update property",
    description="Owner only.",
)
async def update_property(
    property_id: UUID,
    data: PropertyUpdate,
    subject: Subject,
    service: PropertySvc,
) -> PropertyResponse:
    """Update a property."""
    prop = await service.update_property(subject, property_id, data)
    return _to_response(prop, subject_is_owner=True)


@router.post(
    "/{property_id}/join-code",
    response_model=PropertyResponse,
    summary="Regenerate join code",
    description="Owner only. The previous code stops working immediately.",
)
async def regenerate_join_code(
    property_id: UUID,
    subject: Subject,
    service: PropertySvc,
) -> PropertyResponse:
    """Regenerate the property's join code."""
    prop = await service.regenerate_join_code(subject, property_id)
    return _to_response(prop, subject_is_owner=True)
