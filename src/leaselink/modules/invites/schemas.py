"""Pydantic schemas for invite operations."""

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from leaselink.core.constants import MAX_NAME_LENGTH
from leaselink.modules.invites.models import DeliveryMethod
from leaselink.modules.properties.schemas import PropertyPublicInfo


class InviteStatus(StrEnum):
    """Derived state of a token at a given moment."""

    PENDING = "pending"
    USED = "used"
    REVOKED = "revoked"
    EXPIRED = "expired"


class IssueInviteRequest(BaseModel):
    """Request to issue an invite for a property."""

    property_id: UUID
    delivery_method: DeliveryMethod = DeliveryMethod.CODE
    intended_email: EmailStr | None = None


class IssueInviteResponse(BaseModel):
    """Newly issued invite. ``token`` is never shown again."""

    invite_id: UUID
    token: str
    expires_at: datetime


class InviteResponse(BaseModel):
    """Invite as listed to its property owner. Never carries the hash or salt."""

    id: UUID
    property_id: UUID
    delivery_method: DeliveryMethod
    intended_email: str | None = None
    issued_at: datetime
    expires_at: datetime
    used_at: datetime | None = None
    revoked_at: datetime | None = None
    status: InviteStatus

    model_config = ConfigDict(from_attributes=True)


class InviteListResponse(BaseModel):
    items: list[InviteResponse]
    total: int


class ValidateInviteRequest(BaseModel):
    token: str = Field(..., max_length=64)


class ValidateInviteResponse(BaseModel):
    """Either ``property`` (valid) or ``reason`` (invalid) is set."""

    valid: bool
    property: PropertyPublicInfo | None = None
    reason: str | None = None


class AcceptInviteRequest(BaseModel):
    token: str = Field(..., max_length=64)
    display_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)


class AcceptInviteResponse(BaseModel):
    """Outcome of accepting; ``error_message`` is set on failure."""

    success: bool
    property_name: str | None = None
    error_message: str | None = None
