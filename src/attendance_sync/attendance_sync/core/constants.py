"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_STREAM_ID = "live"
BACKFILL_STREAM_ID = "backfill"

DEFAULT_TIMEZONE = "Asia/Kolkata"
DEFAULT_LATE_CUTOFF = time(10, 45)

DEFAULT_SYNC_INTERVAL_MINUTES = 3
DEFAULT_RETRY_DELAYS = (2.0, 4.0, 8.0)
DEFAULT_VENDOR_TIMEOUT_SECONDS = 60

DEFAULT_MIN_MATCH_SCORE = 0.3
DEFAULT_AUTO_MAP_THRESHOLD = 0.8
DEFAULT_SUGGESTION_LIMIT = 5
NAME_WEIGHT = 0.6
EMAIL_WEIGHT = 0.4

VENDOR_ALL_EMPLOYEES = "ALL"
VENDOR_EMPTY_TIME = "--:--"
# Paired rows of absent days carry 00:00 on both sides.
VENDOR_ABSENT_TIME = "00:00"
SOURCE_VENDOR = "teamoffice"
SYNC_ACTOR = "sync"
