"""Profile API routes."""

from fastapi import APIRouter

from leaselink.core.auth.dependencies import Subject
from leaselink.modules.profiles.schemas import ProfileResponse
from leaselink.modules.profiles.services import ProfileSvc


router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get(
    "/me",
    response_model=ProfileResponse,
    summary="Get current profile",
    description="Returns the profile of the authenticated caller.",
)
async def get_me(subject: Subject, service: ProfileSvc) -> ProfileResponse:
    """Get current profile."""
    profile = await service.get_for_subject(subject)
    return ProfileResponse.model_validate(profile)
