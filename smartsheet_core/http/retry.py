"""Time-budgeted retry engine for request execution."""

import random
import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from smartsheet_core.http.constants import RETRYABLE_ERROR_CODES
from smartsheet_core.http.errors import DomainError, RequestError, TransportError
from smartsheet_core.http.metrics import RequestMetrics
from smartsheet_core.http.models import (
    ApiResponse,
    BackoffPolicy,
    RawResponse,
    ResolvedRequest,
)
from smartsheet_core.http.request_logger import RequestLogger


logger = structlog.get_logger()

ResponseHandler = Callable[[RawResponse], ApiResponse]


def is_retryable(error: RequestError) -> bool:
    """Check whether an error is worth retrying.

    Transport failures are always retryable; domain failures only when the
    API reports a transient error code.

    Args:
        error: The error that ended an attempt.

    Returns:
        True if the error is transient.
    """
    if isinstance(error, TransportError):
        return True
    return error.error_code in RETRYABLE_ERROR_CODES


def default_calc_retry_backoff(attempt_number: int, error: RequestError) -> float:
    """Exponential backoff with jitter, stopping on non-transient errors.

    Args:
        attempt_number: Number of the attempt that just failed (1-indexed).
        error: The error that ended the attempt.

    Returns:
        Delay in milliseconds, or -1 to stop retrying.
    """
    if not is_retryable(error):
        return -1
    return (2**attempt_number + random.random()) * 1000  # noqa: S311


@dataclass
class RetrySession:
    """State of one logical call; never shared between calls."""

    started_at: float
    attempt: int = 1
    last_error: RequestError | None = None

    def elapsed_millis(self, now: float) -> float:
        """Milliseconds since the first attempt started."""
        return (now - self.started_at) * 1000


class RetryEngine:
    """Runs attempts of a transport call until success or the budget is spent.

    Each attempt resolves the request, logs it, sends it, and validates the
    raw response. Transport and domain errors are retried according to the
    caller's backoff policy; anything else propagates untouched.
    """

    def __init__(
        self,
        request_logger: RequestLogger,
        handle_response: ResponseHandler,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the engine.

        Args:
            request_logger: Logger for request/response records.
            handle_response: Validator turning raw responses into results.
            sleep: Sleep function taking seconds.
            clock: Monotonic clock returning seconds.
        """
        self._request_logger = request_logger
        self._handle_response = handle_response
        self._sleep = sleep
        self._clock = clock
        self._metrics = RequestMetrics.get_instance()
        self._log = logger.bind(component="http", subcomponent="retry")

    def execute(
        self,
        verb: str,
        resolve: Callable[[], ResolvedRequest],
        send: Callable[[ResolvedRequest], RawResponse],
        max_retry_duration_millis: int | None = None,
        calc_retry_backoff: BackoffPolicy = default_calc_retry_backoff,
    ) -> ApiResponse:
        """Execute a request with retries.

        Args:
            verb: HTTP method, for logging.
            resolve: Builds the request for each attempt.
            send: Transport call.
            max_retry_duration_millis: Total retry budget; None disables retry.
            calc_retry_backoff: Policy mapping (attempt, error) to a delay in
                milliseconds; a negative delay stops retrying.

        Returns:
            The validated response.

        Raises:
            TransportError: If no response was received on the last attempt.
            DomainError: If the last response was rejected by the validator.
            FileAccessError: If resolving the request fails; never retried.
        """
        session = RetrySession(started_at=self._clock())

        while True:
            request = resolve()
            self._request_logger.log_request(verb, request)

            try:
                response = self._attempt(request, send)
            except (TransportError, DomainError) as error:
                session.last_error = error
                if not self._should_retry(
                    verb,
                    request,
                    error,
                    session,
                    max_retry_duration_millis,
                    calc_retry_backoff,
                ):
                    self._metrics.record_failure(type(error).__name__)
                    raise
                session.attempt += 1
                continue

            self._request_logger.log_successful_response(response)
            return response

    def _attempt(
        self,
        request: ResolvedRequest,
        send: Callable[[ResolvedRequest], RawResponse],
    ) -> ApiResponse:
        self._metrics.record_attempt()
        raw = send(request)
        self._metrics.record_response(raw.status_code)
        return self._handle_response(raw)

    def _should_retry(
        self,
        verb: str,
        request: ResolvedRequest,
        error: RequestError,
        session: RetrySession,
        max_retry_duration_millis: int | None,
        calc_retry_backoff: BackoffPolicy,
    ) -> bool:
        """Log the failure and wait out the backoff if another attempt follows.

        Returns:
            True if the caller should attempt again.
        """
        if max_retry_duration_millis is None:
            self._request_logger.log_error_response(verb, request, error)
            return False

        delay_ms = calc_retry_backoff(session.attempt, error)
        elapsed_ms = session.elapsed_millis(self._clock())
        if delay_ms < 0 or elapsed_ms >= max_retry_duration_millis:
            self._request_logger.log_retry_failure(verb, request, session.attempt)
            return False

        self._request_logger.log_retry_attempt(verb, request, error, session.attempt)
        self._metrics.record_retry()
        self._log.debug(
            "retry_scheduled",
            attempt=session.attempt,
            delay_ms=round(delay_ms, 2),
            elapsed_ms=round(elapsed_ms, 2),
            max_retry_duration_millis=max_retry_duration_millis,
        )
        self._sleep(delay_ms / 1000.0)
        return True
