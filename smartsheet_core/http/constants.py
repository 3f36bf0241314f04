"""HTTP constants for the request core.

Centralizes all HTTP-related constants to avoid duplication across modules.
"""

# Default API host when neither base_url nor SMARTSHEET_API_HOST is set
DEFAULT_API_HOST = "https://api.smartsheet.com/2.0/"

# User-Agent product token
PRODUCT_NAME = "smartsheet-python-core"

# Default header values
DEFAULT_ACCEPT = "application/json"
DEFAULT_CONTENT_TYPE = "application/json"

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300

# Payload preview length for verbose logging
PAYLOAD_PREVIEW_LENGTH = 1024
PAYLOAD_PREVIEW_SUFFIX = "..."

# Number of trailing characters left visible by censoring
CENSOR_VISIBLE_CHARS = 4
CENSOR_CHAR = "*"

# Error codes the API documents as transient
RETRYABLE_ERROR_CODES = frozenset(
    {
        4001,  # system maintenance
        4002,  # server timeout
        4003,  # rate limit exceeded
        4004,  # unexpected error
    }
)

# Default retry budget (seconds) when configured through settings
DEFAULT_MAX_RETRY_DURATION_SECONDS = 15

# Error code used when an error body cannot be parsed
UNKNOWN_ERROR_CODE = -1
