"""FastAPI dependencies for authentication.

Routes depend on ``Subject``; profiles are loaded by each module's service,
which turns a missing profile into a 404.
"""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from leaselink.core.auth.identity import resolve_subject
from leaselink.core.errors import UnauthenticatedError


# HTTP Bearer token security scheme
bearer_scheme = HTTPBearer(auto_error=False)


async def get_subject(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str:
    """Resolve the caller's subject from the Authorization header.

    Raises:
        UnauthenticatedError: If the credential is missing, invalid or has
            no usable subject
    """
    if not credentials:
        raise UnauthenticatedError(
            "Missing authentication token",
            error_code="missing_token",
        )

    subject = resolve_subject(credentials.credentials)
    if subject is None:
        raise UnauthenticatedError(
            "Invalid or expired token",
            error_code="invalid_token",
        )

    request.state.subject = subject
    return subject


# Type aliases for cleaner dependency injection
Subject = Annotated[str, Depends(get_subject)]
