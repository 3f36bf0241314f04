"""Transport capability and its httpx implementation."""

from typing import Protocol, runtime_checkable

import httpx
import structlog

from smartsheet_core.http.errors import TransportError, TransportErrorClass
from smartsheet_core.http.models import RawResponse, ResolvedRequest
from smartsheet_core.http.urls import render_url


logger = structlog.get_logger()

DEFAULT_TIMEOUT_SECONDS = 30.0


@runtime_checkable
class Transport(Protocol):
    """Protocol for the component that puts requests on the wire.

    Each verb method sends one request and returns the raw response, or
    raises TransportError when no response was received.
    """

    def get(self, request: ResolvedRequest) -> RawResponse: ...

    def post(self, request: ResolvedRequest) -> RawResponse: ...

    def put(self, request: ResolvedRequest) -> RawResponse: ...

    def delete(self, request: ResolvedRequest) -> RawResponse: ...


class HttpxTransport:
    """Transport backed by an ``httpx.Client``.

    The wire URL is rendered with the same function the request logger uses,
    so logged and sent query strings are identical.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the transport.

        Args:
            client: Preconfigured client; one is created when omitted.
            timeout: Request timeout in seconds for a created client.
        """
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)
        self._log = logger.bind(component="http", subcomponent="transport")

    def get(self, request: ResolvedRequest) -> RawResponse:
        return self._send("GET", request)

    def post(self, request: ResolvedRequest) -> RawResponse:
        return self._send("POST", request)

    def put(self, request: ResolvedRequest) -> RawResponse:
        return self._send("PUT", request)

    def delete(self, request: ResolvedRequest) -> RawResponse:
        return self._send("DELETE", request)

    def close(self) -> None:
        """Close the underlying client."""
        self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _send(self, method: str, request: ResolvedRequest) -> RawResponse:
        """Send one request.

        Args:
            method: HTTP method.
            request: Resolved request.

        Returns:
            RawResponse with status, headers, and body bytes.

        Raises:
            TransportError: If no response was received.
        """
        url = render_url(request.url, request.qs)
        try:
            response = self._client.request(
                method,
                url,
                headers=request.headers,
                content=request.body,
            )
        except httpx.TimeoutException as e:
            msg = f"Request timed out: {e}"
            raise TransportError(msg, TransportErrorClass.NETWORK_TIMEOUT) from e
        except httpx.ConnectError as e:
            msg = f"Connection failed: {e}"
            raise TransportError(msg, TransportErrorClass.CONNECTION_ERROR) from e
        except httpx.HTTPError as e:
            msg = f"Unexpected transport error: {e}"
            raise TransportError(msg, TransportErrorClass.UNKNOWN) from e

        self._log.debug(
            "transport_response",
            method=method,
            status_code=response.status_code,
            bytes=len(response.content),
        )
        return RawResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.content,
        )
