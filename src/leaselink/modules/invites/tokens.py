"""Invite secret generation and hashing.

The secret is shown to the landlord once and never stored. Storage keeps
``sha256(secret + salt)`` and the salt, and lookups compare digests in
constant time.
"""

import hashlib
import hmac
import secrets

from leaselink.core.constants import INVITE_SALT_BYTES, INVITE_TOKEN_ALPHABET, INVITE_TOKEN_LENGTH
from leaselink.core.utils.codes import random_code


def generate_secret() -> str:
    """Generate a new invite secret.

    Examples:
        >>> len(generate_secret())
        12
    """
    return random_code(INVITE_TOKEN_ALPHABET, INVITE_TOKEN_LENGTH)


def generate_salt() -> str:
    """Generate a per-token salt as hex."""
    return secrets.token_hex(INVITE_SALT_BYTES)


def hash_secret(secret: str, salt: str) -> str:
    """Hash a secret with its salt.

    Args:
        secret: Plaintext invite secret
        salt: Hex salt stored with the token

    Returns:
        Hex-encoded SHA-256 digest
    """
    return hashlib.sha256((secret + salt).encode()).hexdigest()


def verify_secret(secret: str, salt: str, token_hash: str) -> bool:
    """Check a secret against a stored hash in constant time."""
    return hmac.compare_digest(hash_secret(secret, salt), token_hash)
