"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_REPORT_DAYS = 30
HOURS_DECIMAL_PLACES = 2
BREAK_ID_PREFIX = "break-"
DATE_FORMAT = "%Y-%m-%d"
