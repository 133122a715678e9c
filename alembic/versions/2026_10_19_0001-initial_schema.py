"""initial_schema

Revision ID: 4f1c2a9d7e01
Revises:
Create Date: 2026-10-19 00:01:00.000000

This migration adds:
- profiles, properties, property_areas, tenant_property_links
- invite_tokens, maintenance_requests, rate_limit_buckets
- Partial unique index allowing one active link per tenant and property
- Triggers freezing profile role/subject and property ownership
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

from leaselink.core.database.base import str_enum
from leaselink.modules.invites.models import DeliveryMethod
from leaselink.modules.maintenance.models import MaintenancePriority, MaintenanceStatus
from leaselink.modules.profiles.models import (
    PROFILE_GUARD_FUNCTION,
    PROFILE_GUARD_TRIGGER,
    ProfileRole,
)
from leaselink.modules.properties.models import (
    PROPERTY_OWNER_FUNCTION,
    PROPERTY_OWNER_TRIGGER,
    PropertyType,
)


# revision identifiers, used by Alembic.
revision: str = "4f1c2a9d7e01"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "profiles",
        *_base_columns(),
        sa.Column("external_subject", sa.String(length=255), nullable=False),
        sa.Column("role", str_enum(ProfileRole, "profile_role"), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("onboarding_completed", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_profiles_id", "profiles", ["id"])
    op.create_index(
        "ix_profiles_external_subject", "profiles", ["external_subject"], unique=True
    )

    op.create_table(
        "properties",
        *_base_columns(),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.String(length=500), nullable=False),
        sa.Column("property_type", str_enum(PropertyType, "property_type"), nullable=False),
        sa.Column("bedrooms", sa.Integer(), nullable=False),
        sa.Column("bathrooms", sa.Numeric(3, 1), nullable=False),
        sa.Column("join_code", sa.String(length=6), nullable=False),
        sa.Column("allow_signup_via_code", sa.Boolean(), nullable=False),
        sa.Column("idempotency_key", sa.String(length=128), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["owner_id"], ["profiles.id"], ondelete="RESTRICT"),
        sa.UniqueConstraint(
            "owner_id", "idempotency_key", name="uq_properties_owner_idempotency"
        ),
        sa.CheckConstraint("bedrooms >= 0", name="ck_properties_bedrooms"),
        sa.CheckConstraint("bathrooms >= 0", name="ck_properties_bathrooms"),
    )
    op.create_index("ix_properties_id", "properties", ["id"])
    op.create_index("ix_properties_owner_id", "properties", ["owner_id"])
    op.create_index("ix_properties_join_code", "properties", ["join_code"], unique=True)

    op.create_table(
        "property_areas",
        *_base_columns(),
        sa.Column("property_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("area_type", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("property_id", "name", name="uq_property_areas_property_name"),
    )
    op.create_index("ix_property_areas_id", "property_areas", ["id"])
    op.create_index("ix_property_areas_property_id", "property_areas", ["property_id"])

    op.create_table(
        "tenant_property_links",
        *_base_columns(),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("property_id", sa.Uuid(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("unit_label", sa.String(length=50), nullable=True),
        sa.Column("deactivated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_tenant_property_links_id", "tenant_property_links", ["id"])
    op.create_index(
        "ix_tenant_property_links_tenant_id", "tenant_property_links", ["tenant_id"]
    )
    op.create_index(
        "ix_tenant_property_links_property_id", "tenant_property_links", ["property_id"]
    )
    op.create_index(
        "uq_tenant_property_links_active",
        "tenant_property_links",
        ["tenant_id", "property_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "invite_tokens",
        *_base_columns(),
        sa.Column("property_id", sa.Uuid(), nullable=False),
        sa.Column("created_by", sa.Uuid(), nullable=False),
        sa.Column("token_hash", sa.String(length=64), nullable=False),
        sa.Column("salt", sa.String(length=32), nullable=False),
        sa.Column(
            "delivery_method",
            str_enum(DeliveryMethod, "invite_delivery_method"),
            nullable=False,
        ),
        sa.Column("intended_email", sa.String(length=255), nullable=True),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("used_by", sa.Uuid(), nullable=True),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by"], ["profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["used_by"], ["profiles.id"], ondelete="RESTRICT"),
        sa.UniqueConstraint("token_hash"),
        sa.CheckConstraint(
            "delivery_method <> 'email' OR intended_email IS NOT NULL",
            name="ck_invite_tokens_email_recipient",
        ),
        sa.CheckConstraint(
            "(used_at IS NULL) = (used_by IS NULL)",
            name="ck_invite_tokens_redemption_pair",
        ),
    )
    op.create_index("ix_invite_tokens_id", "invite_tokens", ["id"])
    op.create_index("ix_invite_tokens_property_id", "invite_tokens", ["property_id"])
    op.create_index("ix_invite_tokens_expires_at", "invite_tokens", ["expires_at"])

    op.create_table(
        "maintenance_requests",
        *_base_columns(),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("property_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("area", sa.String(length=100), nullable=True),
        sa.Column(
            "priority",
            str_enum(MaintenancePriority, "maintenance_priority"),
            nullable=False,
        ),
        sa.Column(
            "status",
            str_enum(MaintenanceStatus, "maintenance_status"),
            nullable=False,
        ),
        sa.Column("estimated_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("actual_cost", sa.Numeric(10, 2), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "estimated_cost IS NULL OR estimated_cost >= 0",
            name="ck_maintenance_requests_estimated_cost",
        ),
        sa.CheckConstraint(
            "actual_cost IS NULL OR actual_cost >= 0",
            name="ck_maintenance_requests_actual_cost",
        ),
    )
    op.create_index("ix_maintenance_requests_id", "maintenance_requests", ["id"])
    op.create_index(
        "ix_maintenance_requests_tenant_id", "maintenance_requests", ["tenant_id"]
    )
    op.create_index(
        "ix_maintenance_requests_property_id", "maintenance_requests", ["property_id"]
    )
    op.create_index("ix_maintenance_requests_status", "maintenance_requests", ["status"])

    op.create_table(
        "rate_limit_buckets",
        *_base_columns(),
        sa.Column("endpoint", sa.String(length=64), nullable=False),
        sa.Column("caller_key", sa.String(length=255), nullable=False),
        sa.Column("tokens", sa.Integer(), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("refilled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reset_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("endpoint", "caller_key", name="uq_rate_limit_buckets_key"),
    )
    op.create_index("ix_rate_limit_buckets_id", "rate_limit_buckets", ["id"])
    op.create_index("ix_rate_limit_buckets_refilled_at", "rate_limit_buckets", ["refilled_at"])

    # Triggers
    op.execute(PROFILE_GUARD_FUNCTION)
    op.execute(PROFILE_GUARD_TRIGGER)
    op.execute(PROPERTY_OWNER_FUNCTION)
    op.execute(PROPERTY_OWNER_TRIGGER)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table("rate_limit_buckets")
    op.drop_table("maintenance_requests")
    op.drop_table("invite_tokens")
    op.drop_table("tenant_property_links")
    op.drop_table("property_areas")
    op.drop_table("properties")
    op.drop_table("profiles")
    op.execute("DROP FUNCTION IF EXISTS properties_guard_owner()")
    op.execute("DROP FUNCTION IF EXISTS profiles_guard_immutable()")
