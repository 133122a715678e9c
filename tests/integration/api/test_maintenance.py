"""Integration tests for maintenance requests."""

from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from leaselink.modules.links.models import TenantPropertyLink
from leaselink.modules.maintenance.models import MaintenanceRequest, MaintenanceStatus
from leaselink.modules.profiles.models import Profile
from leaselink.modules.properties.models import Property
from tests.factories.auth import auth_headers


pytestmark = pytest.mark.integration

URL = "/api/v1/maintenance-requests"


@pytest.fixture
async def request_(
    db: AsyncSession,
    tenant: Profile,
    property_: Property,
    link: TenantPropertyLink,
) -> MaintenanceRequest:
    """A pending request raised by the linked tenant."""
    request = MaintenanceRequest(
        tenant_id=tenant.id,
        property_id=property_.id,
        title="Leaking tap",
        description="The kitchen tap drips all night",
        area="Kitchen",
    )
    db.add(request)
    await db.flush()
    return request


class TestCreateRequest:
    """Tests for POST /api/v1/maintenance-requests."""

    async def test_linked_tenant_creates(
        self,
        client: AsyncClient,
        tenant: Profile,
        property_: Property,
        link: TenantPropertyLink,
        tenant_headers: dict[str, str],
        landlord_headers: dict[str, str],
    ):
        response = await client.post(
            URL,
            json={
                "property_id": str(property_.id),
                "title": "Broken window",
                "description": "Cracked pane in the living room",
                "priority": "high",
            },
            headers=tenant_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["priority"] == "high"
        assert body["tenant_id"] == str(tenant.id)

        owner_view = await client.get(f"{URL}/{body['id']}", headers=landlord_headers)
        assert owner_view.status_code == 200

    async def test_unlinked_tenant_is_forbidden(
        self,
        client: AsyncClient,
        property_: Property,
        tenant_headers: dict[str, str],
    ):
        response = await client.post(
            URL,
            json={"property_id": str(property_.id), "title": "Hi", "description": "Let me in"},
            headers=tenant_headers,
        )

        assert response.status_code == 403

    async def test_landlord_cannot_raise_requests(
        self,
        client: AsyncClient,
        property_: Property,
        landlord_headers: dict[str, str],
    ):
        response = await client.post(
            URL,
            json={"property_id": str(property_.id), "title": "Check", "description": "Boiler"},
            headers=landlord_headers,
        )

        assert response.status_code == 403

    async def test_subject_without_profile_is_forbidden(
        self, client: AsyncClient, property_: Property
    ):
        response = await client.post(
            URL,
            json={"property_id": str(property_.id), "title": "Hi", "description": "Hello"},
            headers=auth_headers("no-profile"),
        )

        assert response.status_code == 403


class TestListRequests:
    """Tests for GET /api/v1/maintenance-requests."""

    async def test_tenant_and_owner_see_request(
        self,
        client: AsyncClient,
        request_: MaintenanceRequest,
        tenant_headers: dict[str, str],
        landlord_headers: dict[str, str],
    ):
        for headers in (tenant_headers, landlord_headers):
            response = await client.get(URL, headers=headers)
            assert [item["id"] for item in response.json()["items"]] == [str(request_.id)]

    async def test_status_filter(
        self,
        client: AsyncClient,
        request_: MaintenanceRequest,
        landlord_headers: dict[str, str],
    ):
        pending = await client.get(URL, params={"status": "pending"}, headers=landlord_headers)
        completed = await client.get(URL, params={"status": "completed"}, headers=landlord_headers)

        assert pending.json()["total"] == 1
        assert completed.json()["total"] == 0


class TestUpdateRequest:
    """Tests for PATCH /api/v1/maintenance-requests/{id}."""

    async def test_owner_moves_request_to_completed(
        self,
        client: AsyncClient,
        request_: MaintenanceRequest,
        landlord_headers: dict[str, str],
    ):
        started = await client.patch(
            f"{URL}/{request_.id}",
            json={"status": "in_progress", "estimated_cost": "120.50"},
            headers=landlord_headers,
        )
        assert started.status_code == 200
        assert started.json()["status"] == "in_progress"
        assert Decimal(started.json()["estimated_cost"]) == Decimal("120.50")
        assert started.json()["completed_at"] is None

        done = await client.patch(
            f"{URL}/{request_.id}",
            json={"status": "completed", "actual_cost": "99.99"},
            headers=landlord_headers,
        )
        assert done.status_code == 200
        assert done.json()["status"] == "completed"
        assert done.json()["completed_at"] is not None

    async def test_invalid_transition(
        self,
        client: AsyncClient,
        request_: MaintenanceRequest,
        landlord_headers: dict[str, str],
    ):
        response = await client.patch(
            f"{URL}/{request_.id}", json={"status": "completed"}, headers=landlord_headers
        )

        assert response.status_code == 422
        assert response.json()["type"].endswith("/errors/invalid_status_transition")

    async def test_negative_cost_rejected(
        self,
        client: AsyncClient,
        request_: MaintenanceRequest,
        landlord_headers: dict[str, str],
    ):
        response = await client.patch(
            f"{URL}/{request_.id}", json={"estimated_cost": "-1"}, headers=landlord_headers
        )

        assert response.status_code == 422

    async def test_tenant_cannot_update(
        self,
        client: AsyncClient,
        request_: MaintenanceRequest,
        tenant_headers: dict[str, str],
    ):
        response = await client.patch(
            f"{URL}/{request_.id}", json={"status": "in_progress"}, headers=tenant_headers
        )

        assert response.status_code == 403

    async def test_other_landlord_gets_404(
        self,
        client: AsyncClient,
        request_: MaintenanceRequest,
        other_landlord_headers: dict[str, str],
    ):
        response = await client.patch(
            f"{URL}/{request_.id}", json={"status": "in_progress"}, headers=other_landlord_headers
        )

        assert response.status_code == 404


class TestCancelRequest:
    """Tests for POST /api/v1/maintenance-requests/{id}/cancel."""

    async def test_tenant_cancels_pending(
        self,
        client: AsyncClient,
        request_: MaintenanceRequest,
        tenant_headers: dict[str, str],
    ):
        response = await client.post(f"{URL}/{request_.id}/cancel", headers=tenant_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    async def test_cannot_cancel_after_work_started(
        self,
        client: AsyncClient,
        db: AsyncSession,
        request_: MaintenanceRequest,
        tenant_headers: dict[str, str],
    ):
        request_.status = MaintenanceStatus.IN_PROGRESS
        await db.flush()

        response = await client.post(f"{URL}/{request_.id}/cancel", headers=tenant_headers)

        assert response.status_code == 422

    async def test_owner_cannot_use_tenant_cancel(
        self,
        client: AsyncClient,
        request_: MaintenanceRequest,
        landlord_headers: dict[str, str],
    ):
        response = await client.post(f"{URL}/{request_.id}/cancel", headers=landlord_headers)

        assert response.status_code == 403
