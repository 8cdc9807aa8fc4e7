"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_NOTIFY_DELAY_SECONDS = 0.0
DEFAULT_WEBHOOK_TIMEOUT_SECONDS = 5
DEFAULT_LIST_LIMIT = 500

# Reason sent to callers for unexpected failures; storage details stay in the log.
INTERNAL_ERROR_REASON = "unknown"

NOTIFICATION_DRAIN_JOB = "notifications:drain"

# Column limits of hour_logs (database/schema.sql).
MIN_HOURS = 0.01
MAX_HOURS = 9999.99
MAX_CATEGORY_LENGTH = 64
MAX_EXTERNAL_REF_LENGTH = 64
MAX_MESSAGE_LENGTH = 16000
