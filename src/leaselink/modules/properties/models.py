"""Property and property-area database models."""

from enum import StrEnum
from uuid import UUID

from sqlalchemy import (
    DDL,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column

from leaselink.core.constants import (
    JOIN_CODE_LENGTH,
    MAX_ADDRESS_LENGTH,
    MAX_AREA_NAME_LENGTH,
    MAX_IDEMPOTENCY_KEY_LENGTH,
    MAX_NAME_LENGTH,
)
from leaselink.core.database.base import Base, TimestampMixin, UUIDMixin, str_enum


class PropertyType(StrEnum):
    """Kinds of property a landlord can onboard."""

    APARTMENT = "apartment"
    HOUSE = "house"
    CONDO = "condo"
    TOWNHOUSE = "townhouse"


class Property(Base, UUIDMixin, TimestampMixin):
    """A property owned by exactly one landlord profile.

    Attributes:
        owner_id: Landlord profile that owns the property (immutable)
        name: Display name
        address: Street address
        property_type: apartment, house, condo or townhouse
        bedrooms: Number of bedrooms
        bathrooms: Number of bathrooms (halves allowed)
        join_code: Short public code tenants can use to self-link
        allow_signup_via_code: Whether the join code is accepted
        idempotency_key: Client key that makes onboarding replays safe
    """

    __tablename__ = "properties"
    __table_args__ = (
        UniqueConstraint("owner_id", "idempotency_key", name="uq_properties_owner_idempotency"),
        CheckConstraint("bedrooms >= 0", name="ck_properties_bedrooms"),
        CheckConstraint("bathrooms >= 0", name="ck_properties_bathrooms"),
    )

    owner_id: Mapped[UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)
    address: Mapped[str] = mapped_column(String(MAX_ADDRESS_LENGTH), nullable=False)
    property_type: Mapped[PropertyType] = mapped_column(
        str_enum(PropertyType, "property_type"),
        nullable=False,
    )
    bedrooms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    bathrooms: Mapped[float] = mapped_column(
        Numeric(3, 1, asdecimal=False), default=0, nullable=False
    )
    join_code: Mapped[str] = mapped_column(
        String(JOIN_CODE_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    allow_signup_via_code: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    idempotency_key: Mapped[str | None] = mapped_column(
        String(MAX_IDEMPOTENCY_KEY_LENGTH),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, owner_id={self.owner_id})>"


class PropertyArea(Base, UUIDMixin, TimestampMixin):
    """A named room or area of a property (e.g. Kitchen)."""

    __tablename__ = "property_areas"
    __table_args__ = (
        UniqueConstraint("property_id", "name", name="uq_property_areas_property_name"),
    )

    property_id: Mapped[UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(MAX_AREA_NAME_LENGTH), nullable=False)
    area_type: Mapped[str] = mapped_column(
        String(MAX_AREA_NAME_LENGTH),
        default="room",
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<PropertyArea(property_id={self.property_id}, name={self.name})>"


# owner_id may only point at a landlord and never changes after insert.
PROPERTY_OWNER_FUNCTION = DDL(
    """
    CREATE OR REPLACE FUNCTION properties_guard_owner() RETURNS trigger AS $$
    BEGIN
        IF TG_OP = 'UPDATE' AND NEW.owner_id IS DISTINCT FROM OLD.owner_id THEN
            RAISE EXCEPTION 'property owner is immutable'
                USING ERRCODE = 'check_violation';
        END IF;
        IF NOT EXISTS (
            SELECT 1 FROM profiles WHERE id = NEW.owner_id AND role = 'landlord'
        ) THEN
            RAISE EXCEPTION 'property owner must be a landlord'
                USING ERRCODE = 'check_violation';
        END IF;
        RETURN NEW;
    END;
    $$ LANGUAGE plpgsql
    """
)

PROPERTY_OWNER_TRIGGER = DDL(
    """
    CREATE TRIGGER properties_guard_owner
        BEFORE INSERT OR UPDATE OF owner_id ON properties
        FOR EACH ROW EXECUTE FUNCTION properties_guard_owner()
    """
)

event.listen(Property.__table__, "after_create", PROPERTY_OWNER_FUNCTION)
event.listen(Property.__table__, "after_create", PROPERTY_OWNER_TRIGGER)
