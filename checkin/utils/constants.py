"""Application-wide constants."""

# API Configuration
API_VERSION = "v1"
API_PREFIX = f"/api/{API_VERSION}"

# Pagination defaults
DEFAULT_PAGE_SIZE = 10
DEFAULT_ADMIN_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100

# Roles
ROLE_USER = "user"
ROLE_ADMIN = "admin"
ALLOWED_ROLES = (ROLE_USER, ROLE_ADMIN)

# Payload keys that would let a client choose whose record it writes
IDENTITY_FIELDS = frozenset({"accountId", "account_id", "userId", "user_id"})

# Date format used for daily record partitioning
RECORD_DATE_FORMAT = "%Y-%m-%d"

# Text limits
MAX_NAME_LENGTH = 120
MAX_RECORD_TEXT_LENGTH = 5000
MAX_VOTE_LENGTH = 64
MAX_PASSWORD_LENGTH = 256
