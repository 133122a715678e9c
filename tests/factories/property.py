"""Property, link and invite factories for tests."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from leaselink.core.utils.codes import generate_join_code
from leaselink.modules.invites.models import DeliveryMethod, InviteToken
from leaselink.modules.invites.tokens import generate_salt, generate_secret, hash_secret
from leaselink.modules.links.models import TenantPropertyLink
from leaselink.modules.properties.models import Property, PropertyType
from tests.factories.base import TimestampedFactory


class PropertyFactory(TimestampedFactory[Property]):
    """Factory for creating test Property instances.

    ``owner_id`` must be passed and point at a landlord profile.
    """

    __model__ = Property

    @classmethod
    def owner_id(cls):
        return uuid4()

    @classmethod
    def name(cls) -> str:
        return f"Property {uuid4().hex[:6]}"

    @classmethod
    def address(cls) -> str:
        return "12 Maple Street"

    @classmethod
    def property_type(cls) -> PropertyType:
        return PropertyType.APARTMENT

    @classmethod
    def bedrooms(cls) -> int:
        return 2

    @classmethod
    def bathrooms(cls) -> float:
        return 1.5

    @classmethod
    def join_code(cls) -> str:
        return generate_join_code()

    @classmethod
    def allow_signup_via_code(cls) -> bool:
        return True

    @classmethod
    def idempotency_key(cls) -> None:
        return None


class TenantPropertyLinkFactory(TimestampedFactory[TenantPropertyLink]):
    """Factory for creating active test links."""

    __model__ = TenantPropertyLink

    @classmethod
    def tenant_id(cls):
        return uuid4()

    @classmethod
    def property_id(cls):
        return uuid4()

    @classmethod
    def is_active(cls) -> bool:
        return True

    @classmethod
    def unit_label(cls) -> None:
        return None

    @classmethod
    def deactivated_at(cls) -> None:
        return None


def build_invite(
    property_id,
    created_by,
    *,
    expires_in: timedelta = timedelta(hours=48),
    issued_at: datetime | None = None,
) -> tuple[InviteToken, str]:
    """Build an unsaved pending invite and return it with its plaintext secret."""
    secret = generate_secret()
    salt = generate_salt()
    issued_at = issued_at or datetime.now(UTC)
    invite = InviteToken(
        property_id=property_id,
        created_by=created_by,
        token_hash=hash_secret(secret, salt),
        salt=salt,
        delivery_method=DeliveryMethod.CODE,
        issued_at=issued_at,
        expires_at=issued_at + expires_in,
    )
    return invite, secret
