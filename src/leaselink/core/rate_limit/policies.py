"""Per-endpoint rate limit policies."""

from dataclasses import dataclass

from leaselink.config import Settings


# Logical endpoint names used as the first half of every bucket key
API = "api"
INVITE_VALIDATE = "invite_validate"
INVITE_ACCEPT = "invite_accept"
JOIN_CODE = "join_code"


@dataclass(frozen=True)
class RateLimitPolicy:
    """Bucket parameters for one endpoint.

    Attributes:
        endpoint: Logical endpoint name
        capacity: Maximum tokens a bucket holds
        refill_tokens: Tokens added at the end of every window
        window_seconds: Length of one refill interval
        fail_closed: Deny requests when the bucket store is unreachable
    """

    endpoint: str
    capacity: int
    refill_tokens: int
    window_seconds: int
    fail_closed: bool


def build_policies(settings: Settings) -> dict[str, RateLimitPolicy]:
    """Build the policy table from settings.

    Unauthenticated or enumeration-prone endpoints fail closed; general
    API traffic fails open.
    """
    return {
        API: RateLimitPolicy(
            endpoint=API,
            capacity=settings.rate_limit_requests,
            refill_tokens=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window,
            fail_closed=False,
        ),
        INVITE_VALIDATE: RateLimitPolicy(
            endpoint=INVITE_VALIDATE,
            capacity=settings.rate_limit_invite_validate_requests,
            refill_tokens=settings.rate_limit_invite_validate_requests,
            window_seconds=settings.rate_limit_invite_validate_window,
            fail_closed=True,
        ),
        INVITE_ACCEPT: RateLimitPolicy(
            endpoint=INVITE_ACCEPT,
            capacity=settings.rate_limit_invite_accept_requests,
            refill_tokens=settings.rate_limit_invite_accept_requests,
            window_seconds=settings.rate_limit_invite_accept_window,
            fail_closed=True,
        ),
        JOIN_CODE: RateLimitPolicy(
            endpoint=JOIN_CODE,
            capacity=settings.rate_limit_join_code_requests,
            refill_tokens=settings.rate_limit_join_code_requests,
            window_seconds=settings.rate_limit_join_code_window,
            fail_closed=True,
        ),
    }
