"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# Hash lengths
SHA256_HEX_LENGTH = 64

# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_ADDRESS_LENGTH = 500
MAX_SUBJECT_LENGTH = 255
MAX_UNIT_LABEL_LENGTH = 50
MAX_AREA_NAME_LENGTH = 100
MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 4000
MAX_IDEMPOTENCY_KEY_LENGTH = 128
MAX_ENDPOINT_NAME_LENGTH = 64
MAX_CALLER_KEY_LENGTH = 255

# properties.bedrooms is an int4 column
MAX_BEDROOMS = 2_147_483_647

# Invite tokens
INVITE_TOKEN_LENGTH = 12
# Uppercase letters and digits without look-alikes (0/O, 1/I/L)
INVITE_TOKEN_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
INVITE_SALT_BYTES = 16
DEFAULT_INVITE_TTL_HOURS = 48

# Property join codes: three letters followed by three digits
JOIN_CODE_LETTERS = "ABCDEFGHJKMNPQRSTUVWXYZ"
JOIN_CODE_DIGITS = "23456789"
JOIN_CODE_LENGTH = 6
JOIN_CODE_MAX_ATTEMPTS = 10

# Pagination defaults
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"

# Database session flag that unlocks the profile role trigger
ROLE_CHANGE_SETTING = "leaselink.allow_role_change"
