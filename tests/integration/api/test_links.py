"""Integration tests for tenant-property links and joining by code."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from leaselink.modules.links.models import TenantPropertyLink
from leaselink.modules.links.services import JOIN_FAILED_MESSAGE
from leaselink.modules.maintenance.models import MaintenanceRequest
from leaselink.modules.profiles.models import Profile
from leaselink.modules.properties.models import Property
from tests.factories.auth import auth_headers


pytestmark = pytest.mark.integration

JOIN_URL = "/api/v1/links/join"


class TestJoinByCode:
    """Tests for POST /api/v1/links/join."""

    async def test_join(self, client: AsyncClient, property_: Property):
        headers = auth_headers("self-signup-tenant")

        response = await client.post(
            JOIN_URL,
            json={"join_code": property_.join_code.lower(), "unit_label": "Flat 2"},
            headers=headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["property_id"] == str(property_.id)
        assert body["property_name"] == property_.name

        links = await client.get("/api/v1/links", headers=headers)
        items = links.json()["items"]
        assert len(items) == 1
        assert items[0]["unit_label"] == "Flat 2"

    async def test_joining_twice_keeps_one_active_link(
        self, client: AsyncClient, property_: Property
    ):
        headers = auth_headers("eager-tenant")

        payload = {"join_code": property_.join_code}
        first = await client.post(JOIN_URL, json=payload, headers=headers)
        second = await client.post(JOIN_URL, json=payload, headers=headers)

        assert first.json()["success"] is True
        assert second.json()["success"] is True
        links = await client.get("/api/v1/links", headers=headers)
        assert links.json()["total"] == 1

    async def test_closed_property(
        self,
        client: AsyncClient,
        db: AsyncSession,
        property_: Property,
    ):
        property_.allow_signup_via_code = False
        await db.flush()

        response = await client.post(
            JOIN_URL,
            json={"join_code": property_.join_code},
            headers=auth_headers("hopeful-tenant"),
        )

        assert response.status_code == 400
        assert response.json()["error_message"] == JOIN_FAILED_MESSAGE

    async def test_unknown_code(self, client: AsyncClient, property_: Property):
        response = await client.post(
            JOIN_URL, json={"join_code": "ZZZ999"}, headers=auth_headers("guessing-tenant")
        )

        assert response.status_code == 400
        assert response.json()["error_message"] == JOIN_FAILED_MESSAGE

    async def test_landlord_cannot_join(
        self,
        client: AsyncClient,
        property_: Property,
        other_landlord_headers: dict[str, str],
    ):
        response = await client.post(
            JOIN_URL, json={"join_code": property_.join_code}, headers=other_landlord_headers
        )

        assert response.status_code == 400
        assert response.json()["error_message"] == JOIN_FAILED_MESSAGE


class TestDeactivateLink:
    """Tests for POST /api/v1/links/{id}/deactivate."""

    async def test_owner_deactivates_and_tenant_loses_access(
        self,
        client: AsyncClient,
        db: AsyncSession,
        tenant: Profile,
        property_: Property,
        link: TenantPropertyLink,
        landlord_headers: dict[str, str],
        tenant_headers: dict[str, str],
    ):
        request = MaintenanceRequest(
            tenant_id=tenant.id,
            property_id=property_.id,
            title="Broken heater",
            description="No heat in the bedroom",
        )
        db.add(request)
        await db.flush()

        before = await client.get("/api/v1/maintenance-requests", headers=tenant_headers)
        assert before.json()["total"] == 1

        response = await client.post(
            f"/api/v1/links/{link.id}/deactivate", headers=landlord_headers
        )

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert response.json()["deactivated_at"] is not None

        prop = await client.get(f"/api/v1/properties/{property_.id}", headers=tenant_headers)
        assert prop.status_code == 404

        after = await client.get("/api/v1/maintenance-requests", headers=tenant_headers)
        assert after.json()["total"] == 0

        create = await client.post(
            "/api/v1/maintenance-requests",
            json={
                "property_id": str(property_.id),
                "title": "Another issue",
                "description": "Still broken",
            },
            headers=tenant_headers,
        )
        assert create.status_code == 403

        # The owner still sees the request
        owner_view = await client.get("/api/v1/maintenance-requests", headers=landlord_headers)
        assert owner_view.json()["total"] == 1

    async def test_inactive_links_listed_on_request(
        self,
        client: AsyncClient,
        link: TenantPropertyLink,
        landlord_headers: dict[str, str],
    ):
        await client.post(f"/api/v1/links/{link.id}/deactivate", headers=landlord_headers)

        active = await client.get("/api/v1/links", headers=landlord_headers)
        everything = await client.get(
            "/api/v1/links", params={"include_inactive": True}, headers=landlord_headers
        )

        assert active.json()["total"] == 0
        assert everything.json()["total"] == 1

    async def test_tenant_cannot_deactivate(
        self,
        client: AsyncClient,
        link: TenantPropertyLink,
        tenant_headers: dict[str, str],
    ):
        response = await client.post(
            f"/api/v1/links/{link.id}/deactivate", headers=tenant_headers
        )

        assert response.status_code == 403

    async def test_other_landlord_gets_404(
        self,
        client: AsyncClient,
        link: TenantPropertyLink,
        other_landlord_headers: dict[str, str],
    ):
        response = await client.post(
            f"/api/v1/links/{link.id}/deactivate", headers=other_landlord_headers
        )

        assert response.status_code == 404

    async def test_rejoin_after_deactivation_creates_new_link(
        self,
        client: AsyncClient,
        property_: Property,
        link: TenantPropertyLink,
        landlord_headers: dict[str, str],
        tenant_headers: dict[str, str],
    ):
        await client.post(f"/api/v1/links/{link.id}/deactivate", headers=landlord_headers)

        response = await client.post(
            JOIN_URL, json={"join_code": property_.join_code}, headers=tenant_headers
        )

        assert response.json()["success"] is True
        links = await client.get(
            "/api/v1/links", params={"include_inactive": True}, headers=landlord_headers
        )
        assert sorted(item["is_active"] for item in links.json()["items"]) == [False, True]
