"""Pydantic schemas for profile operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from leaselink.modules.profiles.models import ProfileRole


class ProfileResponse(BaseModel):
    """The caller's own profile."""

    id: UUID
    role: ProfileRole
    display_name: str | None = None
    onboarding_completed: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
