"""
Shared habit constants: weekday names, frequency spellings and the fixed keys
used in durable local storage.
"""

# Indexed by date.weekday() (Monday == 0)
WEEK_DAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

# Spellings the remote store has used for one-time habits
ONE_TIME_FREQUENCIES = frozenset({"", "None", "No Repeat"})

DEFAULT_RESET_HOUR = 4
DEFAULT_RESET_MINUTE = 0

CACHE_WINDOW_DAYS = 3

# Durable storage keys
HABITS_CACHE_KEY = "@habits_cache"
RESET_TIME_KEY = "@user_reset_time"
TOTAL_POINTS_KEY = "@total_points"

# One-time habits that are skipped are parked on this start date
ARCHIVED_START_DATE = "2099-12-31"

# How far back the app-wide streak looks
APP_STREAK_LOOKBACK_DAYS = 365
