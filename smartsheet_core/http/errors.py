"""Error types for the request core."""

from enum import Enum
from typing import Any


class TransportErrorClass(str, Enum):
    """Classification of transport failures.

    - NETWORK_TIMEOUT: Request timed out
    - CONNECTION_ERROR: Could not establish connection
    - UNKNOWN: Unclassified error
    """

    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    UNKNOWN = "UNKNOWN"


class RequestError(Exception):
    """Base exception for request errors.

    Every error carries the same response-related attributes so that logging
    can treat them uniformly; attributes that do not apply are None.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: int | None = None,
        ref_id: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Initialize the request error.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code, if a response was received.
            error_code: Application error code from the API.
            ref_id: API reference id for support requests.
            headers: Response headers, if a response was received.
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.ref_id = ref_id
        self.headers = headers or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "type": type(self).__name__,
            "message": self.message,
            "status_code": self.status_code,
            "error_code": self.error_code,
            "ref_id": self.ref_id,
        }


class TransportError(RequestError):
    """No response was received (network failure, timeout)."""

    def __init__(
        self,
        message: str,
        error_class: TransportErrorClass = TransportErrorClass.UNKNOWN,
    ) -> None:
        super().__init__(message)
        self.error_class = error_class

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["error_class"] = self.error_class.value
        return result


class DomainError(RequestError):
    """A response was received but the validator rejected it.

    Attributes:
        detail: Optional structured detail object from the error body.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        error_code: int,
        ref_id: str | None = None,
        headers: dict[str, str] | None = None,
        detail: Any = None,
    ) -> None:
        super().__init__(
            message,
            status_code=status_code,
            error_code=error_code,
            ref_id=ref_id,
            headers=headers,
        )
        self.detail = detail


class FileAccessError(RequestError):
    """An upload file could not be stat'ed or opened.

    Raised synchronously while building the request; never retried.
    """

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["path"] = self.path
        return result
