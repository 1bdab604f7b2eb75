"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DATE_FORMAT = "%Y-%m-%d"

# Break compliance thresholds (net minutes -> required break minutes)
BREAK_REQUIRED_AFTER_6H = 30
BREAK_REQUIRED_AFTER_9H = 45
SIX_HOURS_MINUTES = 6 * 60
NINE_HOURS_MINUTES = 9 * 60
OVERTIME_THRESHOLD_MINUTES = 10 * 60

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

DEFAULT_CLEANUP_HOUR = 2
DEFAULT_CLEANUP_MINUTE = 0
