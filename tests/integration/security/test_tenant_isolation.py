"""Integration tests for cross-landlord isolation.

These tests verify that access predicates are enforced: a landlord
never sees another landlord's rows, a tenant only sees what an active
link grants, and a denied read is indistinguishable from absence.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from leaselink.core.policy import (
    PolicyEvaluator,
    can_read_property,
    can_read_shared,
    can_read_tenant_activity,
    has_active_link,
    is_self,
    owns_property,
)
from leaselink.modules.links.models import TenantPropertyLink
from leaselink.modules.maintenance.models import MaintenanceRequest
from leaselink.modules.profiles.models import Profile
from leaselink.modules.properties.models import Property
from tests.factories.auth import auth_headers
from tests.factories.property import build_invite


pytestmark = pytest.mark.integration


class TestPredicates:
    """Predicates evaluated against real rows."""

    async def test_owner(self, db: AsyncSession, landlord: Profile, property_: Property):
        policy = PolicyEvaluator(db)

        assert await policy.allows(owns_property(landlord.external_subject, property_.id))
        assert await policy.allows(can_read_property(landlord.external_subject, property_.id))

    async def test_other_landlord(
        self, db: AsyncSession, other_landlord: Profile, property_: Property
    ):
        policy = PolicyEvaluator(db)

        assert not await policy.allows(owns_property(other_landlord.external_subject, property_.id))
        assert not await policy.allows(
            can_read_property(other_landlord.external_subject, property_.id)
        )

    async def test_linked_tenant(
        self,
        db: AsyncSession,
        tenant: Profile,
        property_: Property,
        link: TenantPropertyLink,
    ):
        policy = PolicyEvaluator(db)
        subject = tenant.external_subject

        assert await policy.allows(is_self(subject, tenant.id))
        assert await policy.allows(has_active_link(subject, property_.id))
        assert await policy.allows(can_read_property(subject, property_.id))
        assert await policy.allows(can_read_tenant_activity(subject, tenant.id, property_.id))
        assert not await policy.allows(owns_property(subject, property_.id))

    async def test_inactive_link_grants_nothing(
        self,
        db: AsyncSession,
        tenant: Profile,
        property_: Property,
        link: TenantPropertyLink,
    ):
        link.is_active = False
        await db.flush()
        policy = PolicyEvaluator(db)
        subject = tenant.external_subject

        assert not await policy.allows(has_active_link(subject, property_.id))
        assert not await policy.allows(can_read_property(subject, property_.id))
        assert not await policy.allows(can_read_tenant_activity(subject, tenant.id, property_.id))
        # The link row itself stays readable to its tenant
        assert await policy.allows(can_read_shared(subject, tenant.id, property_.id))

    async def test_landlord_is_never_self(self, db: AsyncSession, landlord: Profile):
        """is_self only matches tenant profiles."""
        assert not await PolicyEvaluator(db).allows(is_self(landlord.external_subject, landlord.id))

    async def test_unknown_subject(self, db: AsyncSession, property_: Property):
        assert not await PolicyEvaluator(db).allows(can_read_property("nobody", property_.id))


class TestLandlordIsolation:
    """Tests for landlord-to-landlord isolation over the API."""

    async def test_property_list_is_empty_for_other_landlord(
        self,
        client: AsyncClient,
        property_: Property,
        other_landlord_headers: dict[str, str],
    ):
        response = await client.get("/api/v1/properties", headers=other_landlord_headers)

        assert response.status_code == 200
        assert response.json()["items"] == []
        assert response.json()["total"] == 0

    async def test_property_read_is_404_for_other_landlord(
        self,
        client: AsyncClient,
        property_: Property,
        other_landlord_headers: dict[str, str],
    ):
        response = await client.get(
            f"/api/v1/properties/{property_.id}", headers=other_landlord_headers
        )

        assert response.status_code == 404

    async def test_property_write_is_403_for_other_landlord(
        self,
        client: AsyncClient,
        property_: Property,
        other_landlord_headers: dict[str, str],
    ):
        response = await client.patch(
            f"/api/v1/properties/{property_.id}",
            json={"name": "Taken over"},
            headers=other_landlord_headers,
        )

        assert response.status_code == 403

    async def test_links_invisible_to_other_landlord(
        self,
        client: AsyncClient,
        link: TenantPropertyLink,
        other_landlord_headers: dict[str, str],
    ):
        response = await client.get("/api/v1/links", headers=other_landlord_headers)

        assert response.json()["items"] == []

    async def test_invites_invisible_to_other_landlord(
        self,
        client: AsyncClient,
        db: AsyncSession,
        landlord: Profile,
        property_: Property,
        other_landlord_headers: dict[str, str],
    ):
        invite, _ = build_invite(property_.id, landlord.id)
        db.add(invite)
        await db.flush()

        response = await client.get(
            "/api/v1/invites",
            params={"property_id": str(property_.id)},
            headers=other_landlord_headers,
        )

        assert response.status_code == 200
        assert response.json()["items"] == []

    async def test_maintenance_invisible_to_other_landlord(
        self,
        client: AsyncClient,
        db: AsyncSession,
        tenant: Profile,
        property_: Property,
        link: TenantPropertyLink,
        other_landlord_headers: dict[str, str],
    ):
        request = MaintenanceRequest(
            tenant_id=tenant.id,
            property_id=property_.id,
            title="Leaking tap",
            description="Kitchen tap drips",
        )
        db.add(request)
        await db.flush()

        listed = await client.get("/api/v1/maintenance-requests", headers=other_landlord_headers)
        fetched = await client.get(
            f"/api/v1/maintenance-requests/{request.id}", headers=other_landlord_headers
        )

        assert listed.json()["items"] == []
        assert fetched.status_code == 404


class TestTenantVisibility:
    """Tests for what a tenant can see."""

    async def test_linked_tenant_reads_property_without_join_code(
        self,
        client: AsyncClient,
        property_: Property,
        link: TenantPropertyLink,
        tenant_headers: dict[str, str],
    ):
        response = await client.get(f"/api/v1/properties/{property_.id}", headers=tenant_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == property_.name
        assert body["join_code"] is None

    async def test_owner_sees_join_code(
        self,
        client: AsyncClient,
        property_: Property,
        landlord_headers: dict[str, str],
    ):
        response = await client.get(
            f"/api/v1/properties/{property_.id}", headers=landlord_headers
        )

        assert response.json()["join_code"] == property_.join_code

    async def test_unlinked_tenant_gets_404(
        self,
        client: AsyncClient,
        property_: Property,
        tenant_headers: dict[str, str],
    ):
        response = await client.get(f"/api/v1/properties/{property_.id}", headers=tenant_headers)

        assert response.status_code == 404

    async def test_unknown_subject_sees_nothing(self, client: AsyncClient, property_: Property):
        response = await client.get("/api/v1/properties", headers=auth_headers("stranger"))

        assert response.status_code == 200
        assert response.json()["items"] == []

    async def test_missing_credential_is_401(self, client: AsyncClient, property_: Property):
        response = await client.get(f"/api/v1/properties/{property_.id}")

        assert response.status_code == 401
