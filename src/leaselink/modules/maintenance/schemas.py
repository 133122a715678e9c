"""Pydantic schemas for maintenance requests."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from leaselink.core.constants import (
    MAX_AREA_NAME_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_TITLE_LENGTH,
)
from leaselink.modules.maintenance.models import MaintenancePriority, MaintenanceStatus


class MaintenanceRequestCreate(BaseModel):
    """Schema for a tenant raising a request."""

    property_id: UUID
    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)
    description: str = Field(..., min_length=1, max_length=MAX_DESCRIPTION_LENGTH)
    area: str | None = Field(None, max_length=MAX_AREA_NAME_LENGTH)
    priority: MaintenancePriority = MaintenancePriority.MEDIUM


class MaintenanceRequestUpdate(BaseModel):
    """Schema for the property owner updating a request."""

    status: MaintenanceStatus | None = None
    priority: MaintenancePriority | None = None
    estimated_cost: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    actual_cost: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)


class MaintenanceRequestResponse(BaseModel):
    id: UUID
    tenant_id: UUID
    property_id: UUID
    title: str
    description: str
    area: str | None = None
    priority: MaintenancePriority
    status: MaintenanceStatus
    estimated_cost: Decimal | None = None
    actual_cost: Decimal | None = None
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MaintenanceRequestListResponse(BaseModel):
    """Paginated list of maintenance requests."""

    items: list[MaintenanceRequestResponse]
    total: int
    page: int
    page_size: int
