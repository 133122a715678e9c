"""Random code generation and normalization."""

import secrets

from leaselink.core.constants import (
    INVITE_TOKEN_ALPHABET,
    INVITE_TOKEN_LENGTH,
    JOIN_CODE_DIGITS,
    JOIN_CODE_LETTERS,
)


def random_code(alphabet: str, length: int) -> str:
    """Generate a random string from ``alphabet`` using a CSPRNG.

    Args:
        alphabet: Allowed characters
        length: Number of characters

    Returns:
        Random code
    """
    return "".join(secrets.choice(alphabet) for _ in range(length))


def generate_join_code() -> str:
    """Generate a property join code: three letters then three digits.

    Examples:
        >>> len(generate_join_code())
        6
    """
    return random_code(JOIN_CODE_LETTERS, 3) + random_code(JOIN_CODE_DIGITS, 3)


def normalize_code(value: str) -> str:
    """Uppercase a user-typed code and drop spaces and dashes.

    Examples:
        >>> normalize_code(" abc-123 ")
        'ABC123'
    """
    return "".join(ch for ch in value.upper() if ch not in " -")


def is_well_formed_invite_secret(value: str) -> bool:
    """Check length and alphabet of an invite secret without touching storage."""
    return len(value) == INVITE_TOKEN_LENGTH and all(
        ch in INVITE_TOKEN_ALPHABET for ch in value
    )
