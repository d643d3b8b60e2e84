"""Core constants: cache key prefixes and shared literal values."""

# Cache key prefixes
CACHE_PREFIX_ORG = "org"
CACHE_PREFIX_BRANDING = "branding"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Defaults applied when an org or program leaves a value unset
DEFAULT_DAILY_FOCUS_SLOTS = 3
DEFAULT_SQUAD_CAPACITY = 10
DEFAULT_PROGRAM_LENGTH_DAYS = 30
# Cohort instances created for programs that predate length_days
DEFAULT_INSTANCE_LENGTH_DAYS = 28

# Intake booking
BOOKING_TOKEN_TTL_HOURS = 24
CONFLICT_WINDOW_HOURS = 1

# Feed
FEED_POST_MAX_LENGTH = 5000
FEED_COMMENT_MAX_LENGTH = 2000
FEED_PAGE_MAX = 50

# Events
EVENTS_PAGE_MAX = 100
