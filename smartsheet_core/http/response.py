"""Default response validator."""

import json
from typing import Any

from smartsheet_core.http.constants import UNKNOWN_ERROR_CODE
from smartsheet_core.http.errors import DomainError
from smartsheet_core.http.models import ApiResponse, RawResponse


def _is_json(raw: RawResponse) -> bool:
    content_type = raw.header("Content-Type") or ""
    return "json" in content_type.lower()


def _parse_json(raw: RawResponse) -> Any:
    """Parse a JSON body, returning None if it is not valid JSON."""
    if not raw.body:
        return None
    try:
        return json.loads(raw.body)
    except ValueError:
        return None


def decode_content(raw: RawResponse) -> Any:
    """Decode a success body.

    JSON responses are parsed; anything else is returned as text. A JSON
    content type with an unparseable body falls back to text.

    Args:
        raw: Raw transport response.

    Returns:
        Parsed JSON, text, or None for an empty body.
    """
    if not raw.body:
        return None
    if _is_json(raw):
        parsed = _parse_json(raw)
        if parsed is not None:
            return parsed
    return raw.text


def handle_response(raw: RawResponse) -> ApiResponse:
    """Validate a raw response.

    Args:
        raw: Raw transport response.

    Returns:
        ApiResponse for 2xx responses.

    Raises:
        DomainError: For any other status, populated from the API error body
            (errorCode, message, refId, detail) when one is present.
    """
    if raw.is_success:
        return ApiResponse(
            status_code=raw.status_code,
            headers=raw.headers,
            content=decode_content(raw),
        )

    payload = _parse_json(raw)
    if isinstance(payload, dict) and "errorCode" in payload:
        raise DomainError(
            str(payload.get("message") or f"HTTP {raw.status_code}"),
            status_code=raw.status_code,
            error_code=payload["errorCode"],
            ref_id=payload.get("refId"),
            headers=raw.headers,
            detail=payload.get("detail"),
        )

    raise DomainError(
        raw.text or f"HTTP {raw.status_code}",
        status_code=raw.status_code,
        error_code=UNKNOWN_ERROR_CODE,
        headers=raw.headers,
    )
