"""Pydantic schemas for landlord onboarding."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from leaselink.core.constants import (
    MAX_ADDRESS_LENGTH,
    MAX_IDEMPOTENCY_KEY_LENGTH,
    MAX_NAME_LENGTH,
)


class OnboardLandlordRequest(BaseModel):
    """First property of a new landlord.

    Field rules are re-checked by the service, which reports them as a
    structured failure rather than a request error.
    """

    property_name: str = Field(..., max_length=MAX_NAME_LENGTH)
    address: str = Field(..., max_length=MAX_ADDRESS_LENGTH)
    property_type: str
    bedrooms: int = 0
    bathrooms: float = 0
    area_names: list[str] = Field(default_factory=list)
    display_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)
    allow_signup_via_code: bool = False
    idempotency_key: str | None = Field(None, max_length=MAX_IDEMPOTENCY_KEY_LENGTH)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "property_name": "Maple Court",
                    "address": "12 Maple Street",
                    "property_type": "apartment",
                    "bedrooms": 2,
                    "bathrooms": 1.5,
                    "area_names": ["Kitchen", "Bedroom 1", "Bathroom"],
                }
            ]
        }
    )


class OnboardLandlordResponse(BaseModel):
    """Outcome of onboarding; ``error_message`` is set on failure."""

    success: bool
    property_id: UUID | None = None
    error_message: str | None = None
