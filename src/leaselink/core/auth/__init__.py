"""Authentication module.

Credentials come from an external identity provider; this package only
resolves them to a subject and loads the matching profile.
"""

from leaselink.core.auth.identity import decode_credential, resolve_subject
from leaselink.core.auth.middleware import RequestIdMiddleware, SubjectContextMiddleware


__all__ = [
    "RequestIdMiddleware",
    "SubjectContextMiddleware",
    "decode_credential",
    "resolve_subject",
]
