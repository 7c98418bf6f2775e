"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_BUSINESS_DAY_START_HOUR = 18
DEFAULT_BUSINESS_DAY_END_HOUR = 6
DEFAULT_BUSINESS_DAY_GRACE_MINUTES = 120
DEFAULT_PAYROLL_ROUNDING_MINUTES = 15
DEFAULT_ACTIVE_STAFF_WINDOW_HOURS = 48
DEFAULT_PUNCH_MAX_ATTEMPTS = 3
DATE_LABEL_FORMAT = "%Y-%m-%d"
