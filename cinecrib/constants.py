"""Application constants - centralized configuration values."""

# =============================================================================
# Pagination
# =============================================================================
DEFAULT_PAGE_SIZE = 20
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100

# =============================================================================
# Recommendation filters
# =============================================================================
DEFAULT_MIN_RELEASE_YEAR = 1900
MIN_RELEASE_YEAR = 0
MAX_RELEASE_YEAR = 9999
MIN_RATING_FLOOR = 0.0
MAX_RATING_FLOOR = 10.0
MAX_UID_LENGTH = 100

# Duration buckets: movie runtime in minutes, series season counts
SHORT_MOVIE_MAX_MINUTES = 60  # exclusive
MEDIUM_MOVIE_MAX_MINUTES = 120  # inclusive
SHORT_SERIES_SEASONS = 1
MEDIUM_SERIES_MIN_SEASONS = 2
MEDIUM_SERIES_MAX_SEASONS = 4

# =============================================================================
# Content
# =============================================================================
DEFAULT_AVAILABILITY_REGION = "GLOBAL"

# =============================================================================
# Cache TTLs (in seconds)
# =============================================================================
CACHE_TTL_LOOKUPS = 300  # 5 minutes

# =============================================================================
# Session & Security
# =============================================================================
SESSION_TIMEOUT_DAYS = 7
SESSION_COOKIE_NAME = "cinecrib_session"
MIN_PASSWORD_LENGTH = 8
