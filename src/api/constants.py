"""API-related constants."""

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"

# Routing
API_V1_PREFIX = "/api/v1"

# Pagination
DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

# Logging
MAX_USER_AGENT_LENGTH = 200

# Security
DEFAULT_HSTS_MAX_AGE = 31536000  # 1 year in seconds
CONTENT_SECURITY_POLICY = "default-src 'self'"
REFERRER_POLICY = "strict-origin-when-cross-origin"

# CORS
CORS_ALLOW_ORIGIN = "*"
CORS_ALLOW_METHODS = "GET, POST, PATCH, DELETE, OPTIONS"
CORS_ALLOW_HEADERS = (
    "Origin, Content-Type, Content-Length, Accept-Encoding, X-CSRF-Token, "
    "Authorization"
)

# Client-facing messages
INTERNAL_ERROR_MESSAGE = "An internal server error occurred"
VALIDATION_FAILED_MESSAGE = "Validation failed"
INVALID_JSON_MESSAGE = "Invalid JSON format"
INVALID_TASK_ID_MESSAGE = "Invalid task ID format"
RATE_LIMIT_MESSAGE = (
    "Rate limit exceeded. Maximum {limit} requests per {window} seconds"
)
