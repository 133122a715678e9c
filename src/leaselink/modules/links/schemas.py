"""Pydantic schemas for link operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from leaselink.core.constants import MAX_NAME_LENGTH, MAX_UNIT_LABEL_LENGTH


class LinkResponse(BaseModel):
    """A tenant-property link."""

    id: UUID
    tenant_id: UUID
    property_id: UUID
    is_active: bool
    unit_label: str | None = None
    created_at: datetime
    deactivated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class LinkListResponse(BaseModel):
    items: list[LinkResponse]
    total: int


class JoinByCodeRequest(BaseModel):
    """Request to link to a property through its join code."""

    join_code: str = Field(..., min_length=1, max_length=32)
    display_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)
    unit_label: str | None = Field(None, max_length=MAX_UNIT_LABEL_LENGTH)


class JoinByCodeResponse(BaseModel):
    """Outcome of joining by code; ``error_message`` is set on failure."""

    success: bool
    property_id: UUID | None = None
    property_name: str | None = None
    error_message: str | None = None
