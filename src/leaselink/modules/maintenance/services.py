"""Maintenance request service for business logic."""

from datetime import UTC, datetime
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from leaselink.core.errors import ForbiddenError, NotFoundError, ValidationError
from leaselink.core.policy import PolicyEvaluator, can_write_as_tenant, owns_property
from leaselink.modules.maintenance.models import (
    STATUS_TRANSITIONS,
    MaintenanceRequest,
    MaintenanceStatus,
)
from leaselink.modules.maintenance.repos import MaintenanceRepo
from leaselink.modules.maintenance.schemas import (
    MaintenanceRequestCreate,
    MaintenanceRequestUpdate,
)
from leaselink.modules.profiles.repos import ProfileRepository


logger = structlog.get_logger()


def check_transition(current: MaintenanceStatus, target: MaintenanceStatus) -> None:
    """Raise unless ``current`` may move to ``target``.

    Raises:
        ValidationError: For a move the status machine does not allow
    """
    if target == current:
        return
    if target not in STATUS_TRANSITIONS[current]:
        raise ValidationError(
            f"Cannot change status from {current.value} to {target.value}",
            error_code="invalid_status_transition",
            details={"from": current.value, "to": target.value},
        )


class MaintenanceService:
    """Service for maintenance requests.

    Tenants raise and cancel requests on properties they are actively
    linked to; owners move them through their statuses and record costs.
    """

    def __init__(self, repo: MaintenanceRepo) -> None:
        self.repo = repo
        self.policy = PolicyEvaluator(repo.session)

    async def create_request(
        self, subject: str, data: MaintenanceRequestCreate
    ) -> MaintenanceRequest:
        """Raise a maintenance request as a tenant.

        Args:
            subject: Caller's subject
            data: Request details

        Returns:
            The created request

        Raises:
            ForbiddenError: If the caller is not a tenant actively linked
                to the property
        """
        profile = await ProfileRepository(self.repo.session).get_by_subject(subject)
        if profile is None:
            raise ForbiddenError("Only linked tenants can raise maintenance requests")

        await self.policy.require(
            can_write_as_tenant(subject, profile.id, data.property_id),
            "Only linked tenants can raise maintenance requests",
            property_id=data.property_id,
        )

        request = await self.repo.create(
            MaintenanceRequest(
                tenant_id=profile.id,
                property_id=data.property_id,
                title=data.title.strip(),
                description=data.description,
                area=data.area,
                priority=data.priority,
                status=MaintenanceStatus.PENDING,
            )
        )
        logger.info(
            "maintenance_request_created",
            request_id=str(request.id),
            property_id=str(data.property_id),
            priority=data.priority.value,
        )
        return request

    async def list_requests(
        self,
        subject: str,
        property_id: UUID | None = None,
        status: MaintenanceStatus | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[MaintenanceRequest], int]:
        return await self.repo.list_visible(subject, property_id, status, page, page_size)

    async def get_request(self, subject: str, request_id: UUID) -> MaintenanceRequest:
        """Get a request the caller may read.

        Raises:
            NotFoundError: If it does not exist or the caller may not see it
        """
        request = await self.repo.get_visible(subject, request_id)
        if request is None:
            raise NotFoundError(
                "Maintenance request not found",
                resource="maintenance_request",
                resource_id=str(request_id),
            )
        return request

    async def update_request(
        self, subject: str, request_id: UUID, data: MaintenanceRequestUpdate
    ) -> MaintenanceRequest:
        """Update status, priority or costs as the property owner.

        Args:
            subject: Caller's subject
            request_id: Request to update
            data: Fields to change

        Returns:
            The updated request

        Raises:
            NotFoundError: If the caller cannot see the request
            ForbiddenError: If the caller can see it but does not own the property
            ValidationError: If the status change is not allowed
        """
        request = await self.get_request(subject, request_id)
        await self.policy.require(
            owns_property(subject, request.property_id),
            "Only the property owner can update this request",
            request_id=request_id,
        )

        if data.status is not None:
            check_transition(request.status, data.status)
            if data.status != request.status and data.status == MaintenanceStatus.COMPLETED:
                request.completed_at = datetime.now(UTC)
            request.status = data.status
        if data.priority is not None:
            request.priority = data.priority
        if data.estimated_cost is not None:
            request.estimated_cost = data.estimated_cost
        if data.actual_cost is not None:
            request.actual_cost = data.actual_cost

        request = await self.repo.update(request)
        logger.info(
            "maintenance_request_updated",
            request_id=str(request_id),
            status=request.status.value,
        )
        return request

    async def cancel_request(self, subject: str, request_id: UUID) -> MaintenanceRequest:
        """Cancel a pending request as the tenant who raised it.

        Raises:
            NotFoundError: If the caller cannot see the request
            ForbiddenError: If the caller is not the raising tenant
            ValidationError: If the request is no longer pending
        """
        request = await self.get_request(subject, request_id)
        await self.policy.require(
            can_write_as_tenant(subject, request.tenant_id, request.property_id),
            "Only the tenant who raised this request can cancel it",
            request_id=request_id,
        )

        if request.status != MaintenanceStatus.PENDING:
            raise ValidationError(
                "Only pending requests can be cancelled",
                error_code="invalid_status_transition",
                details={"from": request.status.value, "to": MaintenanceStatus.CANCELLED.value},
            )

        request.status = MaintenanceStatus.CANCELLED
        request = await self.repo.update(request)
        logger.info("maintenance_request_cancelled", request_id=str(request_id))
        return request


# Type alias for dependency injection
MaintenanceSvc = Annotated[MaintenanceService, Depends(MaintenanceService)]
