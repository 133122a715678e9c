"""Profile service for business logic."""

from typing import Annotated

import structlog
from fastapi import Depends

from leaselink.core.errors import NotFoundError
from leaselink.modules.profiles.models import Profile, ProfileRole
from leaselink.modules.profiles.repos import ProfileRepo


logger = structlog.get_logger()


class ProfileService:
    """Service for profile lookups and the administrative role change."""

    def __init__(self, repo: ProfileRepo) -> None:
        self.repo = repo

    async def get_for_subject(self, subject: str) -> Profile:
        """Get the caller's profile.

        Raises:
            NotFoundError: If the subject has not onboarded
        """
        profile = await self.repo.get_by_subject(subject)
        if profile is None:
            raise NotFoundError("Profile not found", resource="profile")
        return profile

    async def change_role(self, subject: str, role: ProfileRole) -> Profile:
        """Change a profile's role. Only the admin CLI calls this.

        Raises:
            NotFoundError: If the subject has no profile
        """
        profile = await self.repo.change_role(subject, role)
        if profile is None:
            raise NotFoundError("Profile not found", resource="profile")

        logger.warning("profile_role_changed", profile_id=str(profile.id), role=role.value)
        return profile


# Type alias for dependency injection
ProfileSvc = Annotated[ProfileService, Depends(ProfileService)]
