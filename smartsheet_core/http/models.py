"""Data models for the request core."""

from collections.abc import Callable
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from smartsheet_core.http.constants import HTTP_STATUS_OK_MAX, HTTP_STATUS_OK_MIN
from smartsheet_core.http.errors import RequestError


QueryValue = str | int | float | bool | None

# (attempt_number, causing_error) -> delay in milliseconds; negative stops
BackoffPolicy = Callable[[int, RequestError], float]


class RequestIntent(BaseModel):
    """Caller's declarative description of a request.

    Host and header resolution happen later, once per attempt; the intent
    itself is never modified.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: str | None = Field(default=None, description="Absolute URL prefix")
    url: str = Field(default="", description="Path (or full URL) after the host")
    id: str | int | None = Field(
        default=None, description="Id concatenated onto url; url carries the separator"
    )
    query_parameters: dict[str, QueryValue] = Field(default_factory=dict)

    access_token: str | None = None
    assume_user: str | None = None
    content_type: str | None = None
    accept: str | None = None
    user_agent: str | None = None
    custom_properties: dict[str, str] = Field(default_factory=dict)
    content_disposition: str | None = None
    file_name: str | None = None
    file_size: Annotated[int, Field(ge=0)] | None = None

    body: Any = None
    path: str | None = Field(default=None, description="Upload file path")
    file_stream: Any = Field(default=None, description="Upload stream or buffer")

    max_retry_duration_millis: Annotated[int, Field(ge=0)] | None = None
    calc_retry_backoff: BackoffPolicy | None = None

    @model_validator(mode="after")
    def validate_single_body_source(self) -> "RequestIntent":
        """Reject intents carrying both a plain body and a file source."""
        if self.body is not None and (
            self.path is not None or self.file_stream is not None
        ):
            msg = "body cannot be combined with path or file_stream"
            raise ValueError(msg)
        return self

    @property
    def has_file_source(self) -> bool:
        """Check whether the intent carries an upload source."""
        return self.path is not None or self.file_stream is not None


class ResolvedRequest(BaseModel):
    """Intent after URL and header rules are applied, ready for transmission.

    The same instance is sent and logged, so logged values equal sent values.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: Annotated[str, Field(description="Request URL without query string")]
    headers: dict[str, str] = Field(default_factory=dict)
    qs: dict[str, QueryValue] = Field(default_factory=dict)
    body: Any = None


class RawResponse(BaseModel):
    """Response as returned by the transport, before validation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int = Field(ge=100, le=599, description="HTTP status code")
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = Field(default=b"", description="Raw response body")

    @property
    def is_success(self) -> bool:
        """Check if the status code is 2xx."""
        return HTTP_STATUS_OK_MIN <= self.status_code < HTTP_STATUS_OK_MAX

    @property
    def text(self) -> str:
        """Body decoded as UTF-8, with undecodable bytes replaced."""
        return self.body.decode("utf-8", errors="replace")

    def header(self, name: str) -> str | None:
        """Look up a header case-insensitively.

        Args:
            name: Header name.

        Returns:
            Header value, or None if absent.
        """
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


class ApiResponse(BaseModel):
    """Validated success value of a request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int = Field(ge=100, le=599)
    headers: dict[str, str] = Field(default_factory=dict)
    content: Any = None
