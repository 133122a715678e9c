"""Persistent token-bucket state."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from leaselink.core.constants import MAX_CALLER_KEY_LENGTH, MAX_ENDPOINT_NAME_LENGTH
from leaselink.core.database.base import Base, TimestampMixin, UUIDMixin


class RateLimitBucket(Base, UUIDMixin, TimestampMixin):
    """One token bucket per (endpoint, caller_key).

    Attributes:
        endpoint: Logical endpoint name (e.g. invite_validate)
        caller_key: Client IP or profile identifier
        tokens: Tokens left after the last check
        capacity: Bucket size at the time of the last check
        refilled_at: Start of the current refill interval
        reset_at: Time the bucket will be full again
    """

    __tablename__ = "rate_limit_buckets"
    __table_args__ = (
        UniqueConstraint("endpoint", "caller_key", name="uq_rate_limit_buckets_key"),
    )

    endpoint: Mapped[str] = mapped_column(String(MAX_ENDPOINT_NAME_LENGTH), nullable=False)
    caller_key: Mapped[str] = mapped_column(String(MAX_CALLER_KEY_LENGTH), nullable=False)
    tokens: Mapped[int] = mapped_column(Integer, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    refilled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    reset_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<RateLimitBucket(endpoint={self.endpoint}, tokens={self.tokens})>"
