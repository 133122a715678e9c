"""Invite token database model."""

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from leaselink.core.constants import MAX_EMAIL_LENGTH, SHA256_HEX_LENGTH
from leaselink.core.database.base import Base, TimestampMixin, UUIDMixin, str_enum


class DeliveryMethod(StrEnum):
    """How the landlord hands the secret to the tenant."""

    CODE = "code"
    EMAIL = "email"


class InviteToken(Base, UUIDMixin, TimestampMixin):
    """Single-use capability linking a tenant to a property.

    Only a salted SHA-256 hash of the secret is stored. A token is
    redeemed by setting ``used_at``/``used_by`` exactly once; expiry is
    judged against ``expires_at`` whenever the token is looked at.

    Attributes:
        property_id: Target property
        created_by: Landlord profile that issued the token
        token_hash: sha256(secret + salt) as hex
        salt: Per-token random salt as hex
        delivery_method: code or email
        intended_email: Recipient for email delivery
        issued_at: Issue time
        expires_at: Time after which the token is dead
        used_at: Redemption time
        used_by: Profile that redeemed the token
        revoked_at: Time the landlord withdrew the token
    """

    __tablename__ = "invite_tokens"
    __table_args__ = (
        CheckConstraint(
            "delivery_method <> 'email' OR intended_email IS NOT NULL",
            name="ck_invite_tokens_email_recipient",
        ),
        CheckConstraint(
            "(used_at IS NULL) = (used_by IS NULL)",
            name="ck_invite_tokens_redemption_pair",
        ),
    )

    property_id: Mapped[UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_by: Mapped[UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    token_hash: Mapped[str] = mapped_column(
        String(SHA256_HEX_LENGTH),
        nullable=False,
        unique=True,
    )
    salt: Mapped[str] = mapped_column(String(32), nullable=False)
    delivery_method: Mapped[DeliveryMethod] = mapped_column(
        str_enum(DeliveryMethod, "invite_delivery_method"),
        nullable=False,
    )
    intended_email: Mapped[str | None] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=True,
    )
    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    used_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("profiles.id", ondelete="RESTRICT"),
        nullable=True,
    )
    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<InviteToken(id={self.id}, property_id={self.property_id})>"
