"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# Slug generation
MAX_SLUG_LENGTH = 63

# Hash lengths
SHA256_HEX_LENGTH = 64

# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_TITLE_LENGTH = 255
MAX_URL_LENGTH = 2048
MAX_AUTH_SUBJECT_LENGTH = 255
MAX_ROLE_LENGTH = 20
MAX_STATUS_LENGTH = 20
MAX_NOTIFICATION_TYPE_LENGTH = 40
MAX_COLOR_LENGTH = 20
MAX_ICON_LENGTH = 50
MAX_INVITATION_MESSAGE_LENGTH = 1000
MAX_DESCRIPTION_LENGTH = 2000

# Pagination defaults
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Token settings
INVITATION_TOKEN_BYTES = 32
DEFAULT_INVITATION_EXPIRE_DAYS = 7

# Search
DEFAULT_SEARCH_MIN_QUERY_LENGTH = 2
DEFAULT_SEARCH_RESULTS_PER_TYPE = 20
MAX_SEARCH_QUERY_LENGTH = 200

# Bot mitigation
IP_BLOCK_SECONDS = 24 * 60 * 60
SUSPICIOUS_IP_THRESHOLD = 3
HONEYPOT_SUSPICION_WEIGHT = 2

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"
