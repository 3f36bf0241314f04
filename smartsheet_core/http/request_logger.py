"""Structured request/response logging with secret censoring.

Every line goes through an injected LogSink. On construction the logger
registers a filter that prefixes each line with an ISO-8601 UTC timestamp and
the padded level name, e.g. ``2024-01-01T00:00:00.000Z[INFO   ] GET ...``.
"""

import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from smartsheet_core.http.constants import (
    PAYLOAD_PREVIEW_LENGTH,
    PAYLOAD_PREVIEW_SUFFIX,
)
from smartsheet_core.http.errors import RequestError
from smartsheet_core.http.models import ApiResponse, ResolvedRequest
from smartsheet_core.http.redact import (
    SENSITIVE_CONTENT_FIELDS,
    censor_fields,
    censor_headers,
)
from smartsheet_core.http.urls import render_url
from smartsheet_core.observability.sink import LogSink, StructlogSink


BINARY_PAYLOAD_PLACEHOLDER = "<binary content>"
LEVEL_NAME_WIDTH = 7


def format_log_line(level: str, msg: str, meta: dict[str, Any]) -> str:
    """Prefix a line with a UTC timestamp and the padded level name."""
    timestamp = datetime.now(UTC).isoformat(timespec="milliseconds")
    timestamp = timestamp.replace("+00:00", "Z")
    return f"{timestamp}[{level.upper():<{LEVEL_NAME_WIDTH}}] {msg}"


def preview(payload: str) -> str:
    """Truncate a payload for verbose logging.

    Args:
        payload: Full payload text.

    Returns:
        The payload unchanged if it fits, else its first 1024 characters
        followed by "...".
    """
    if len(payload) <= PAYLOAD_PREVIEW_LENGTH:
        return payload
    return payload[:PAYLOAD_PREVIEW_LENGTH] + PAYLOAD_PREVIEW_SUFFIX


def _to_json(value: Any) -> str:
    return json.dumps(value, default=str, separators=(",", ":"), ensure_ascii=False)


def _request_payload(body: Any) -> str | None:
    if body is None:
        return None
    if isinstance(body, str):
        return body
    return BINARY_PAYLOAD_PLACEHOLDER


def _response_payload(content: Any) -> str | None:
    if content is None:
        return None
    if isinstance(content, bytes | bytearray):
        return BINARY_PAYLOAD_PLACEHOLDER
    if isinstance(content, Mapping):
        content = censor_fields(content, SENSITIVE_CONTENT_FIELDS)
    return _to_json(content)


class RequestLogger:
    """Formats and censors request, response, and retry records."""

    def __init__(self, sink: LogSink) -> None:
        self._sink = sink
        sink.filters.append(format_log_line)

    @property
    def sink(self) -> LogSink:
        return self._sink

    def log_request(self, verb: str, request: ResolvedRequest) -> None:
        """Log an outgoing request.

        Args:
            verb: HTTP method.
            request: Resolved request as sent.
        """
        self._sink.info("%s %s", verb, render_url(request.url, request.qs))
        self._log_headers(request.headers)
        self._log_payload(_request_payload(request.body))

    def log_retry_attempt(
        self,
        verb: str,
        request: ResolvedRequest,
        error: RequestError,
        attempt_number: int,
    ) -> None:
        """Log that a failed attempt is about to be retried."""
        self._sink.warn(
            "Request failed, performing retry #%d\nCause: %s", attempt_number, error
        )
        self._sink.warn("%s %s", verb, render_url(request.url, request.qs))

    def log_retry_failure(
        self,
        verb: str,
        request: ResolvedRequest,
        attempt_number: int,
    ) -> None:
        """Log that retrying stopped without success."""
        self._sink.error("Request failed after %d retries", attempt_number)

    def log_successful_response(self, response: ApiResponse) -> None:
        """Log a validated response.

        Top-level access_token and refresh_token fields of the content are
        censored before encoding.

        Args:
            response: Validated response.
        """
        self._sink.info("Response: Success (HTTP %s)", response.status_code)
        self._log_headers(response.headers)
        self._log_payload(_response_payload(response.content))

    def log_error_response(
        self,
        verb: str,
        request: ResolvedRequest,
        error: RequestError,
    ) -> None:
        """Log a terminal request failure.

        Args:
            verb: HTTP method.
            request: Resolved request of the failed attempt.
            error: Error surfaced to the caller.
        """
        self._sink.error(
            "Response: Failure (HTTP %s)\n\tError Code: %s - %s\n\tRef ID: %s",
            error.status_code,
            error.error_code,
            error.message,
            error.ref_id,
        )
        self._sink.error("%s %s", verb, render_url(request.url, request.qs))
        self._log_headers(error.headers)

    def _log_headers(self, headers: Mapping[str, str]) -> None:
        if not headers:
            return
        self._sink.silly("%s", _to_json(censor_headers(headers)))

    def _log_payload(self, payload: str | None) -> None:
        if not payload:
            return
        self._sink.debug("%s", payload)
        self._sink.verbose("%s", preview(payload))


def create_request_logger(sink: LogSink | None = None) -> RequestLogger:
    """Create a request logger, defaulting to a structlog-backed sink.

    Args:
        sink: Leveled sink to write to.

    Returns:
        RequestLogger registered on the sink.
    """
    return RequestLogger(sink if sink is not None else StructlogSink())
