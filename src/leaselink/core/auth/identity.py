"""Identity resolution for bearer credentials.

Credentials are JWTs issued by the external identity provider. This module
only verifies the signature and standard claims and extracts the subject;
it never issues tokens.
"""

from typing import Any

import structlog
from jose import JWTError, jwt

from leaselink.config import settings


logger = structlog.get_logger()


def decode_credential(credential: str) -> dict[str, Any] | None:
    """Verify a bearer JWT and return its claims.

    Args:
        credential: Raw token from the Authorization header

    Returns:
        Claims dict if the token is valid, None otherwise
    """
    audience = settings.auth_jwt_audience
    try:
        return jwt.decode(
            credential,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_algorithm],
            audience=audience,
            options={"verify_aud": audience is not None},
        )
    except JWTError as exc:
        logger.debug("credential_rejected", error_type=type(exc).__name__)
        return None


def resolve_subject(credential: str | None) -> str | None:
    """Map a bearer credential to its subject.

    A missing credential, an invalid token, or a token whose ``sub``
    claim is absent, blank, not a string or padded with whitespace all
    give None. There is no anonymous or shared identity.

    Args:
        credential: Raw token, or None when no Authorization header was sent

    Returns:
        The subject string, or None when no identity can be resolved
    """
    if not credential or not credential.strip():
        return None

    claims = decode_credential(credential.strip())
    if claims is None:
        return None

    subject = claims.get("sub")
    if not isinstance(subject, str):
        return None

    # Used verbatim as the profile key, so padded subjects are refused
    if not subject or subject != subject.strip():
        logger.info("credential_rejected", reason="malformed_subject")
        return None
    return subject
