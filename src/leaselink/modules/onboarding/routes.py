"""Onboarding API routes."""

from fastapi import APIRouter, Response, status

from leaselink.api.results import procedure_status
from leaselink.core.auth.dependencies import Subject
from leaselink.modules.onboarding.schemas import OnboardLandlordRequest, OnboardLandlordResponse
from leaselink.modules.onboarding.services import OnboardingSvc


router = APIRouter(prefix="/onboarding", tags=["onboarding"])


@router.post(
    "/landlord",
    response_model=OnboardLandlordResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Onboard a landlord",
    description=(
        "Creates the caller's landlord profile, first property and its areas atomically. "
        "Send an idempotency_key to make retries safe."
    ),
)
async def onboard_landlord(
    data: OnboardLandlordRequest,
    subject: Subject,
    service: OnboardingSvc,
    response: Response,
) -> OnboardLandlordResponse:
    """Onboard the caller as a landlord."""
    result = await service.onboard_landlord(
        subject,
        property_name=data.property_name,
        address=data.address,
        property_type=data.property_type,
        bedrooms=data.bedrooms,
        bathrooms=data.bathrooms,
        area_names=data.area_names,
        display_name=data.display_name,
        allow_signup_via_code=data.allow_signup_via_code,
        idempotency_key=data.idempotency_key,
    )
    response.status_code = procedure_status(result, success_status=status.HTTP_201_CREATED)

    if not result.success:
        return OnboardLandlordResponse(success=False, error_message=result.error_message)
    return OnboardLandlordResponse(success=True, property_id=result.value)
