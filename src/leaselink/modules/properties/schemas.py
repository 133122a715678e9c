"""Pydantic schemas for property operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from leaselink.core.constants import MAX_ADDRESS_LENGTH, MAX_BEDROOMS, MAX_NAME_LENGTH
from leaselink.modules.properties.models import PropertyType


class PropertyAreaResponse(BaseModel):
    """A named area of a property."""

    id: UUID
    name: str
    area_type: str

    model_config = ConfigDict(from_attributes=True)


class PropertyPublicInfo(BaseModel):
    """What an invite holder may see before accepting.

    Carries nothing about the owner.
    """

    name: str
    address: str
    property_type: PropertyType

    model_config = ConfigDict(from_attributes=True)


class PropertyResponse(BaseModel):
    """Property as seen by its owner or a linked tenant.

    ``join_code`` and ``allow_signup_via_code`` are only filled in for
    the owner.
    """

    id: UUID
    owner_id: UUID
    name: str
    address: str
    property_type: PropertyType
    bedrooms: int
    bathrooms: float
    join_code: str | None = None
    allow_signup_via_code: bool | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropertyDetailResponse(PropertyResponse):
    """Property with its areas."""

    areas: list[PropertyAreaResponse] = Field(default_factory=list)


class PropertyUpdate(BaseModel):
    """Schema for updating a property. Owner only."""

    name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    address: str | None = Field(None, min_length=1, max_length=MAX_ADDRESS_LENGTH)
    bedrooms: int | None = Field(None, ge=0, le=MAX_BEDROOMS)
    bathrooms: float | None = Field(None, ge=0, le=99.9)
    allow_signup_via_code: bool | None = None


class PropertyListResponse(BaseModel):
    """Paginated list of properties."""

    items: list[PropertyResponse]
    total: int
    page: int
    page_size: int
