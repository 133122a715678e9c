"""Tenant-property link database model."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from leaselink.core.constants import MAX_UNIT_LABEL_LENGTH
from leaselink.core.database.base import Base, TimestampMixin, UUIDMixin


class TenantPropertyLink(Base, UUIDMixin, TimestampMixin):
    """Grants a tenant profile access to a property.

    Links are deactivated, never deleted, so the history of who lived
    where survives. Only one active link may exist per tenant and
    property.

    Attributes:
        tenant_id: Tenant profile
        property_id: Linked property
        is_active: Whether the link currently grants access
        unit_label: Optional unit or room label
        deactivated_at: When the link was deactivated
    """

    __tablename__ = "tenant_property_links"
    __table_args__ = (
        Index(
            "uq_tenant_property_links_active",
            "tenant_id",
            "property_id",
            unique=True,
            postgresql_where=text("is_active"),
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
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    unit_label: Mapped[str | None] = mapped_column(
        String(MAX_UNIT_LABEL_LENGTH),
        nullable=True,
    )
    deactivated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<TenantPropertyLink(tenant_id={self.tenant_id}, "
            f"property_id={self.property_id}, is_active={self.is_active})>"
        )
