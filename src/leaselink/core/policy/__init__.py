"""Row-level access policy: predicates and their evaluation."""

from leaselink.core.policy.evaluator import PolicyEvaluator
from leaselink.core.policy.predicates import (
    can_manage_property,
    can_read_property,
    can_read_shared,
    can_read_tenant_activity,
    can_write_as_tenant,
    has_active_link,
    is_self,
    owns_property,
)


__all__ = [
    "PolicyEvaluator",
    "can_manage_property",
    "can_read_property",
    "can_read_shared",
    "can_read_tenant_activity",
    "can_write_as_tenant",
    "has_active_link",
    "is_self",
    "owns_property",
]
