"""Maintenance request API routes."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from leaselink.api.dependencies import PageParams
from leaselink.core.auth.dependencies import Subject
from leaselink.modules.maintenance.models import MaintenanceStatus
from leaselink.modules.maintenance.schemas import (
    MaintenanceRequestCreate,
    MaintenanceRequestListResponse,
    MaintenanceRequestResponse,
    MaintenanceRequestUpdate,
)
from leaselink.modules.maintenance.services import MaintenanceSvc


router = APIRouter(prefix="/maintenance-requests", tags=["maintenance"])


@router.post(
    "",
    response_model=MaintenanceRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Raise maintenance request",
    description="Tenants with an active link to the property only.",
)
async def create_request(
    data: MaintenanceRequestCreate,
    subject: Subject,
    service: MaintenanceSvc,
) -> MaintenanceRequestResponse:
    """Raise a maintenance request."""
    request = await service.create_request(subject, data)
    return MaintenanceRequestResponse.model_validate(request)


@router.get(
    "",
    response_model=MaintenanceRequestListResponse,
    summary="List maintenance requests",
    description="Requests the caller raised or that concern properties they own.",
)
async def list_requests(
    subject: Subject,
    service: MaintenanceSvc,
    pagination: PageParams,
    property_id: UUID | None = Query(None, description="Only requests for this property"),
    request_status: MaintenanceStatus | None = Query(None, alias="status"),
) -> MaintenanceRequestListResponse:
    """List visible maintenance requests."""
    requests, total = await service.list_requests(
        subject,
        property_id=property_id,
        status=request_status,
        page=pagination.page,
        page_size=pagination.page_size,
    )
    return MaintenanceRequestListResponse(
        items=[MaintenanceRequestResponse.model_validate(r) for r in requests],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


@router.get(
    "/{request_id}",
    response_model=MaintenanceRequestResponse,
    summary="Get maintenance request",
)
async def get_request(
    request_id: UUID,
    subject: Subject,
    service: MaintenanceSvc,
) -> MaintenanceRequestResponse:
    """Get a maintenance request."""
    request = await service.get_request(subject, request_id)
    return MaintenanceRequestResponse.model_validate(request)


@router.patch(
    "/{request_id}",
    response_model=MaintenanceRequestResponse,
    summary="Update maintenance request",
    description="Property owner only. Completed and cancelled requests cannot change status.",
)
async def update_request(
    request_id: UUID,
    data: MaintenanceRequestUpdate,
    subject: Subject,
    service: MaintenanceSvc,
) -> MaintenanceRequestResponse:
    """Update a maintenance request."""
    request = await service.update_request(subject, request_id, data)
    return MaintenanceRequestResponse.model_validate(request)


@router.post(
    "/{request_id}/cancel",
    response_model=MaintenanceRequestResponse,
    summary="Cancel maintenance request",
    description="The raising tenant may cancel while the request is still pending.",
)
async def cancel_request(
    request_id: UUID,
    subject: Subject,
    service: MaintenanceSvc,
) -> MaintenanceRequestResponse:
    """Cancel a maintenance request."""
    request = await service.cancel_request(subject, request_id)
    return MaintenanceRequestResponse.model_validate(request)
