"""Profile database model."""

from enum import StrEnum

from sqlalchemy import DDL, Boolean, String, event
from sqlalchemy.orm import Mapped, mapped_column

from leaselink.core.constants import MAX_NAME_LENGTH, MAX_SUBJECT_LENGTH, ROLE_CHANGE_SETTING
from leaselink.core.database.base import Base, TimestampMixin, UUIDMixin, str_enum


class ProfileRole(StrEnum):
    """Role a profile takes on when it first onboards."""

    LANDLORD = "landlord"
    TENANT = "tenant"


class Profile(Base, UUIDMixin, TimestampMixin):
    """Internal identity record for an authenticated subject.

    Attributes:
        external_subject: Subject claim from the identity provider (unique, immutable)
        role: landlord or tenant, fixed once assigned
        display_name: Optional name shown to the other party
        onboarding_completed: Whether the onboarding flow finished
    """

    __tablename__ = "profiles"

    external_subject: Mapped[str] = mapped_column(
        String(MAX_SUBJECT_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    role: Mapped[ProfileRole] = mapped_column(
        str_enum(ProfileRole, "profile_role"),
        nullable=False,
    )
    display_name: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )
    onboarding_completed: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, role={self.role})>"


# Role and subject are frozen at the database level. The admin CLI is the
# only caller that sets the session flag checked below.
PROFILE_GUARD_FUNCTION = DDL(
    f"""
    CREATE OR REPLACE FUNCTION profiles_guard_immutable() RETURNS trigger AS $$
    BEGIN
        IF NEW.external_subject IS DISTINCT FROM OLD.external_subject THEN
            RAISE EXCEPTION 'profile subject is immutable'
                USING ERRCODE = 'check_violation';
        END IF;
        IF NEW.role IS DISTINCT FROM OLD.role
           AND coalesce(current_setting('{ROLE_CHANGE_SETTING}', true), '') <> 'on' THEN
            RAISE EXCEPTION 'profile role is immutable'
                USING ERRCODE = 'check_violation';
        END IF;
        RETURN NEW;
    END;
    $$ LANGUAGE plpgsql
    """
)

PROFILE_GUARD_TRIGGER = DDL(
    """
    CREATE TRIGGER profiles_guard_immutable
        BEFORE UPDATE ON profiles
        FOR EACH ROW EXECUTE FUNCTION profiles_guard_immutable()
    """
)

event.listen(Profile.__table__, "after_create", PROFILE_GUARD_FUNCTION)
event.listen(Profile.__table__, "after_create", PROFILE_GUARD_TRIGGER)
