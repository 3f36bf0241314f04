"""HTTP request core with logging, censoring, and time-budgeted retries.

This module turns request intents into wire requests and executes them:
- URL assembly with base_url / environment / default host precedence
- Header assembly, including upload Content-Length from the file system
- Structured request/response logging with secret censoring
- Retries driven by a caller-supplied backoff policy and time budget
"""

from smartsheet_core.http.constants import (
    DEFAULT_API_HOST,
    PRODUCT_NAME,
    RETRYABLE_ERROR_CODES,
)
from smartsheet_core.http.errors import (
    DomainError,
    FileAccessError,
    RequestError,
    TransportError,
    TransportErrorClass,
)
from smartsheet_core.http.headers import build_headers, build_user_agent
from smartsheet_core.http.metrics import RequestMetrics
from smartsheet_core.http.models import (
    ApiResponse,
    BackoffPolicy,
    RawResponse,
    RequestIntent,
    ResolvedRequest,
)
from smartsheet_core.http.redact import censor, censor_fields, censor_headers
from smartsheet_core.http.request_logger import RequestLogger, create_request_logger
from smartsheet_core.http.requestor import HttpRequestor
from smartsheet_core.http.response import handle_response
from smartsheet_core.http.retry import (
    RetryEngine,
    default_calc_retry_backoff,
    is_retryable,
)
from smartsheet_core.http.transport import HttpxTransport, Transport
from smartsheet_core.http.urls import build_url, render_query, render_url


__all__ = [
    # Facade
    "HttpRequestor",
    # Engine
    "RetryEngine",
    "default_calc_retry_backoff",
    "is_retryable",
    # Builders
    "build_url",
    "render_query",
    "render_url",
    "build_headers",
    "build_user_agent",
    # Logging
    "RequestLogger",
    "create_request_logger",
    "censor",
    "censor_fields",
    "censor_headers",
    # Transport and validation
    "Transport",
    "HttpxTransport",
    "handle_response",
    # Models
    "RequestIntent",
    "ResolvedRequest",
    "RawResponse",
    "ApiResponse",
    "BackoffPolicy",
    # Errors
    "RequestError",
    "TransportError",
    "TransportErrorClass",
    "DomainError",
    "FileAccessError",
    # Constants
    "DEFAULT_API_HOST",
    "PRODUCT_NAME",
    "RETRYABLE_ERROR_CODES",
    # Metrics
    "RequestMetrics",
]
