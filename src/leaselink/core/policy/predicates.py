"""Access predicates over (subject, row reference).

Each predicate returns a SQL boolean expression, so the same rule can be
used as a WHERE filter for reads or evaluated on its own before a write.
Row references may be literal ids or columns of the outer query; in the
latter case the predicate is correlated per row.

A blank subject or a missing row reference always yields ``false()``.
Predicates never raise and never default to true.
"""

from typing import Any

from sqlalchemy import ColumnElement, and_, exists, false, or_
from sqlalchemy.orm import aliased

from leaselink.modules.links.models import TenantPropertyLink
from leaselink.modules.profiles.models import Profile, ProfileRole
from leaselink.modules.properties.models import Property


def _is_blank(subject: str | None) -> bool:
    return subject is None or not isinstance(subject, str) or not subject.strip()


def is_self(subject: str | None, profile_id: Any) -> ColumnElement[bool]:
    """True iff ``profile_id`` is the tenant profile of ``subject``."""
    if _is_blank(subject) or profile_id is None:
        return false()

    profile = aliased(Profile)
    return exists().where(
        profile.id == profile_id,
        profile.external_subject == subject,
        profile.role == ProfileRole.TENANT,
    )


def owns_property(subject: str | None, property_id: Any) -> ColumnElement[bool]:
    """True iff the landlord profile of ``subject`` owns ``property_id``."""
    if _is_blank(subject) or property_id is None:
        return false()

    owner = aliased(Profile)
    prop = aliased(Property)
    return exists().where(
        prop.id == property_id,
        prop.owner_id == owner.id,
        owner.external_subject == subject,
        owner.role == ProfileRole.LANDLORD,
    )


def has_active_link(subject: str | None, property_id: Any) -> ColumnElement[bool]:
    """True iff an active link joins the tenant profile of ``subject`` to ``property_id``."""
    if _is_blank(subject) or property_id is None:
        return false()

    tenant = aliased(Profile)
    link = aliased(TenantPropertyLink)
    return exists().where(
        link.property_id == property_id,
        link.tenant_id == tenant.id,
        link.is_active.is_(True),
        tenant.external_subject == subject,
        tenant.role == ProfileRole.TENANT,
    )


# ============================================================
# Compositions, named by the operation they gate
# ============================================================


def can_read_shared(
    subject: str | None, profile_id: Any, property_id: Any
) -> ColumnElement[bool]:
    """Read rule for rows that belong to a tenant and a property."""
    return or_(is_self(subject, profile_id), owns_property(subject, property_id))


def can_read_tenant_activity(
    subject: str | None, profile_id: Any, property_id: Any
) -> ColumnElement[bool]:
    """Read rule for tenant-created rows whose visibility follows the link.

    Same as ``can_read_shared`` except that the tenant side also needs an
    active link, so deactivating the link hides the rows from the tenant.
    """
    return or_(
        and_(is_self(subject, profile_id), has_active_link(subject, property_id)),
        owns_property(subject, property_id),
    )


def can_write_as_tenant(
    subject: str | None, profile_id: Any, property_id: Any
) -> ColumnElement[bool]:
    """Write rule for rows a tenant creates against a property."""
    return and_(is_self(subject, profile_id), has_active_link(subject, property_id))


def can_read_property(subject: str | None, property_id: Any) -> ColumnElement[bool]:
    """Read rule for a property: its owner or an actively linked tenant."""
    return or_(owns_property(subject, property_id), has_active_link(subject, property_id))


def can_manage_property(subject: str | None, property_id: Any) -> ColumnElement[bool]:
    """Write rule for property-level changes: owner only."""
    return owns_property(subject, property_id)
