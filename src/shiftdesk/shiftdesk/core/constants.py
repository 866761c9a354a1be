"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

WEEKLY_TOKEN_GRACE_DAYS = 7
SHIFT_TOKEN_TTL_HOURS = 72
PERMANENT_TOKEN_DAYS = 365
REGISTRATION_TOKEN_HOURS = 24
TOKEN_ISSUE_ATTEMPTS = 3
TOKEN_LOG_PREFIX = 8
MAX_BULK_SHIFT_DAYS = 62
MAX_TOKEN_TTL_HOURS = PERMANENT_TOKEN_DAYS * 24
