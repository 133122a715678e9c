"""Maintenance request database model."""

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from leaselink.core.constants import MAX_AREA_NAME_LENGTH, MAX_TITLE_LENGTH
from leaselink.core.database.base import Base, TimestampMixin, UUIDMixin, str_enum


class MaintenanceStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MaintenancePriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# Allowed status moves; completed and cancelled are terminal.
STATUS_TRANSITIONS: dict[MaintenanceStatus, frozenset[MaintenanceStatus]] = {
    MaintenanceStatus.PENDING: frozenset(
        {MaintenanceStatus.IN_PROGRESS, MaintenanceStatus.CANCELLED}
    ),
    MaintenanceStatus.IN_PROGRESS: frozenset(
        {MaintenanceStatus.COMPLETED, MaintenanceStatus.CANCELLED}
    ),
    MaintenanceStatus.COMPLETED: frozenset(),
    MaintenanceStatus.CANCELLED: frozenset(),
}


class MaintenanceRequest(Base, UUIDMixin, TimestampMixin):
    """A repair request raised by a tenant against a linked property.

    Attributes:
        tenant_id: Tenant profile that raised the request
        property_id: Property the request concerns
        title: Short summary
        description: Free-text details
        area: Optional area of the property (e.g. Kitchen)
        priority: low, medium, high or urgent
        status: pending, in_progress, completed or cancelled
        estimated_cost: Landlord's estimate
        actual_cost: Final cost
        completed_at: When the request reached completed
    """

    __tablename__ = "maintenance_requests"
    __table_args__ = (
        CheckConstraint(
            "estimated_cost IS NULL OR estimated_cost >= 0",
            name="ck_maintenance_requests_estimated_cost",
        ),
        CheckConstraint(
            "actual_cost IS NULL OR actual_cost >= 0",
            name="ck_maintenance_requests_actual_cost",
        ),
    )

    tenant_id: Mapped[UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    property_id: Mapped[UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(MAX_TITLE_LENGTH), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    area: Mapped[str | None] = mapped_column(String(MAX_AREA_NAME_LENGTH), nullable=True)
    priority: Mapped[MaintenancePriority] = mapped_column(
        str_enum(MaintenancePriority, "maintenance_priority"),
        default=MaintenancePriority.MEDIUM,
        nullable=False,
    )
    status: Mapped[MaintenanceStatus] = mapped_column(
        str_enum(MaintenanceStatus, "maintenance_status"),
        default=MaintenanceStatus.PENDING,
        nullable=False,
        index=True,
    )
    estimated_cost: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    actual_cost: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<MaintenanceRequest(id={self.id}, status={self.status})>"
