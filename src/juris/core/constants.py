"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# Office handles: "@" followed by 3-20 lowercase alphanumerics/underscores
OFFICE_HANDLE_PATTERN = r"^@[a-z0-9_]{3,20}$"
OFFICE_HANDLE_PREFIX = "@"

# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_HANDLE_LENGTH = 21
MAX_PROVIDER_LENGTH = 20
MAX_ROLE_LENGTH = 20
MAX_LOCATION_LENGTH = 255
ID_LENGTH = 36

# Password hashing
BCRYPT_ROUNDS = 12

# Session lifecycle
DEFAULT_INACTIVITY_TIMEOUT_MINUTES = 30
DEFAULT_ACTIVITY_THROTTLE_SECONDS = 5
INACTIVITY_NOTICE = "Session expired due to inactivity."

# Persisted session state keys
SESSION_TOKEN_KEY = "token"
SESSION_USER_KEY = "user"
SESSION_LAST_ACTIVITY_KEY = "lastActivity"

# Token settings
TOKEN_JTI_LENGTH = 32
MAX_TOKEN_ID_LENGTH = 64
AMR_PASSWORD = "pwd"
AMR_ONE_TIME_LINK = "otp"

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"
