"""Verb-level request facade.

Each verb method accepts an optional ``callback(error, content)``. Without a
callback the method returns the response content or raises; with one, the
outcome is delivered to the callback and the method returns None. Both
conventions run through the same retry engine.
"""

import json
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, BinaryIO

from pydantic import BaseModel

from smartsheet_core.http.constants import PRODUCT_NAME
from smartsheet_core.http.errors import DomainError, FileAccessError, TransportError
from smartsheet_core.http.headers import build_headers
from smartsheet_core.http.models import (
    ApiResponse,
    BackoffPolicy,
    RawResponse,
    RequestIntent,
    ResolvedRequest,
)
from smartsheet_core.http.request_logger import RequestLogger, create_request_logger
from smartsheet_core.http.response import handle_response
from smartsheet_core.http.retry import (
    ResponseHandler,
    RetryEngine,
    default_calc_retry_backoff,
)
from smartsheet_core.http.transport import HttpxTransport, Transport
from smartsheet_core.http.urls import build_url
from smartsheet_core.observability.logging import configure_logging
from smartsheet_core.observability.sink import StructlogSink
from smartsheet_core.version import __version__


if TYPE_CHECKING:
    from smartsheet_core.settings import ClientSettings


Callback = Callable[[TransportError | DomainError | None, Any], None]


def serialize_body(body: Any) -> Any:
    """JSON-encode a request body unless it is already a string.

    Args:
        body: Payload; pydantic models are dumped by alias.

    Returns:
        Encoded body, or None when there is no body.
    """
    if body is None or isinstance(body, str | bytes):
        return body
    if isinstance(body, BaseModel):
        return body.model_dump_json(by_alias=True, exclude_none=True)
    return json.dumps(body)


def open_upload(path: str) -> BinaryIO:
    """Open an upload file for reading.

    Args:
        path: File path.

    Returns:
        Binary file object.

    Raises:
        FileAccessError: If the file cannot be opened.
    """
    try:
        return open(path, "rb")  # noqa: SIM115
    except OSError as e:
        msg = f"Cannot open upload file {path}: {e}"
        raise FileAccessError(msg, path=path) from e


class HttpRequestor:
    """Executes API requests with logging and time-budgeted retries.

    Attributes:
        default_host: Host used when an intent has no base_url.
        access_token: Bearer token for intents that set none.
        max_retry_duration_millis: Retry budget for intents that set none.
    """

    def __init__(
        self,
        transport: Transport | None = None,
        response_handler: ResponseHandler = handle_response,
        request_logger: RequestLogger | None = None,
        default_host: str | None = None,
        access_token: str | None = None,
        max_retry_duration_millis: int | None = None,
        calc_retry_backoff: BackoffPolicy = default_calc_retry_backoff,
        product: str = PRODUCT_NAME,
        version: str = __version__,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the requestor.

        Args:
            transport: Transport capability; defaults to an HttpxTransport
                owned and closed by this requestor.
            response_handler: Validator for raw responses.
            request_logger: Request logger; defaults to a structlog sink.
            default_host: Host used when an intent has no base_url.
            access_token: Default bearer token; an intent's own token wins.
            max_retry_duration_millis: Default retry budget; None disables
                retry unless the intent sets one.
            calc_retry_backoff: Default backoff policy.
            product: Product token for User-Agent.
            version: Product version for User-Agent.
            sleep: Sleep function used between retries.
        """
        self._owned_transport: HttpxTransport | None = None
        if transport is None:
            transport = self._owned_transport = HttpxTransport()
        self._transport = transport
        self._request_logger = request_logger or create_request_logger()
        self._engine = RetryEngine(self._request_logger, response_handler, sleep=sleep)
        self.default_host = default_host
        self.access_token = access_token
        self.max_retry_duration_millis = max_retry_duration_millis
        self._calc_retry_backoff = calc_retry_backoff
        self._product = product
        self._version = version

    @classmethod
    def from_settings(
        cls,
        settings: "ClientSettings",
        **kwargs: Any,
    ) -> "HttpRequestor":
        """Create a requestor configured from environment settings.

        When settings.log_format is set, structlog output is configured too.

        Args:
            settings: Loaded client settings.
            **kwargs: Overrides passed to the constructor.

        Returns:
            Configured HttpRequestor.
        """
        if settings.log_format is not None:
            configure_logging(
                level=settings.log_level, json_format=settings.log_format == "json"
            )
        kwargs.setdefault(
            "request_logger", RequestLogger(StructlogSink(level=settings.log_level))
        )
        kwargs.setdefault("default_host", settings.api_host)
        kwargs.setdefault("access_token", settings.access_token)
        kwargs.setdefault(
            "max_retry_duration_millis", settings.max_retry_duration_millis
        )
        return cls(**kwargs)

    def close(self) -> None:
        """Close the transport if this requestor created it."""
        if self._owned_transport is not None:
            self._owned_transport.close()

    def __enter__(self) -> "HttpRequestor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def build_url(self, intent: RequestIntent) -> str:
        return build_url(intent, self.default_host)

    def build_headers(self, intent: RequestIntent) -> dict[str, str]:
        if intent.access_token is None and self.access_token is not None:
            intent = intent.model_copy(update={"access_token": self.access_token})
        return build_headers(intent, product=self._product, version=self._version)

    def get(self, intent: RequestIntent, callback: Callback | None = None) -> Any:
        return self._call("GET", intent, self._transport.get, None, callback)

    def post(self, intent: RequestIntent, callback: Callback | None = None) -> Any:
        body = serialize_body(intent.body)
        return self._call("POST", intent, self._transport.post, body, callback)

    def put(self, intent: RequestIntent, callback: Callback | None = None) -> Any:
        body = serialize_body(intent.body)
        return self._call("PUT", intent, self._transport.put, body, callback)

    def delete(self, intent: RequestIntent, callback: Callback | None = None) -> Any:
        return self._call("DELETE", intent, self._transport.delete, None, callback)

    def post_file(
        self,
        intent: RequestIntent,
        callback: Callback | None = None,
    ) -> Any:
        """POST a binary body read from intent.path or intent.file_stream.

        Args:
            intent: Request intent carrying a file source.
            callback: Optional completion callback.

        Returns:
            Response content, or None when a callback is given.

        Raises:
            FileAccessError: If the upload file cannot be opened or stat'ed.
            ValueError: If the intent has no file source.
        """
        if intent.path is not None:
            with open_upload(intent.path) as stream:
                return self._call("POST", intent, self._transport.post, stream, callback)
        if intent.file_stream is None:
            msg = "post_file requires path or file_stream"
            raise ValueError(msg)
        return self._call(
            "POST", intent, self._transport.post, intent.file_stream, callback
        )

    def _call(
        self,
        verb: str,
        intent: RequestIntent,
        send: Callable[[ResolvedRequest], RawResponse],
        body: Any,
        callback: Callback | None,
    ) -> Any:
        if callback is None:
            return self._execute(verb, intent, send, body).content

        try:
            response = self._execute(verb, intent, send, body)
        except (TransportError, DomainError) as error:
            callback(error, None)
            return None
        callback(None, response.content)
        return None

    def _execute(
        self,
        verb: str,
        intent: RequestIntent,
        send: Callable[[ResolvedRequest], RawResponse],
        body: Any,
    ) -> ApiResponse:
        # Streams are rewound to their starting offset before every attempt
        start = body.tell() if _is_seekable(body) else None

        def resolve() -> ResolvedRequest:
            if start is not None:
                body.seek(start)
            return ResolvedRequest(
                url=self.build_url(intent),
                headers=self.build_headers(intent),
                qs=intent.query_parameters,
                body=body,
            )

        max_retry = intent.max_retry_duration_millis
        if max_retry is None:
            max_retry = self.max_retry_duration_millis

        return self._engine.execute(
            verb,
            resolve,
            send,
            max_retry_duration_millis=max_retry,
            calc_retry_backoff=intent.calc_retry_backoff or self._calc_retry_backoff,
        )


def _is_seekable(body: Any) -> bool:
    seekable = getattr(body, "seekable", None)
    return callable(seekable) and bool(seekable())
