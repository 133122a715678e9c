"""Profile repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert

from leaselink.api.dependencies import DBSession
from leaselink.core.constants import ROLE_CHANGE_SETTING
from leaselink.modules.profiles.models import Profile, ProfileRole


class ProfileRepository:
    """Repository for Profile database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def get_by_id(self, profile_id: UUID) -> Profile | None:
        """Get a profile by ID."""
        result = await self.session.execute(select(Profile).where(Profile.id == profile_id))
        return result.scalar_one_or_none()

    async def get_by_subject(self, subject: str) -> Profile | None:
        """Get the profile for an external subject.

        Args:
            subject: Subject claim from the identity provider

        Returns:
            Profile if the subject has onboarded, None otherwise
        """
        result = await self.session.execute(
            select(Profile).where(Profile.external_subject == subject)
        )
        return result.scalar_one_or_none()

    async def upsert_for_onboarding(
        self,
        subject: str,
        role: ProfileRole,
        display_name: str | None = None,
    ) -> Profile:
        """Create the subject's profile or mark an existing one onboarded.

        The role is only written when the row is created; an existing
        profile keeps its role, which the caller must check.

        Args:
            subject: Subject claim from the identity provider
            role: Role for a newly created profile
            display_name: Name to store, keeping the old one when None

        Returns:
            The inserted or updated profile
        """
        stmt = pg_insert(Profile).values(
            external_subject=subject,
            role=role,
            display_name=display_name,
            onboarding_completed=True,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Profile.external_subject],
            set_={
                "onboarding_completed": True,
                "display_name": func.coalesce(
                    stmt.excluded.display_name, Profile.display_name
                ),
                "updated_at": func.now(),
            },
        ).returning(Profile)

        result = await self.session.execute(
            stmt, execution_options={"populate_existing": True}
        )
        return result.scalar_one()

    async def change_role(self, subject: str, role: ProfileRole) -> Profile | None:
        """Change a profile's role through the privileged path.

        Sets the transaction-local flag that the role trigger checks, so
        the change only works inside the caller's current transaction.

        Args:
            subject: Subject of the profile to change
            role: New role

        Returns:
            Updated profile, or None if the subject has no profile
        """
        await self.session.execute(
            select(func.set_config(ROLE_CHANGE_SETTING, "on", True))
        )
        result = await self.session.execute(
            update(Profile)
            .where(Profile.external_subject == subject)
            .values(role=role)
            .returning(Profile),
            execution_options={"populate_existing": True},
        )
        return result.scalar_one_or_none()


# Type aliases for dependency injection
ProfileRepo = Annotated[ProfileRepository, Depends(ProfileRepository)]
