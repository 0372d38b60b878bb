"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PERIODS_PER_DAY = 8
DEFAULT_MARK_RETRY_LIMIT = 3
DEFAULT_PERIOD_STATUS = "Present"
PRESENT_STATUS = "Present"
MIN_PASSWORD_LENGTH = 6
DEFAULT_TOKEN_MAX_AGE_SECONDS = 7 * 24 * 3600
