"""Secret censoring utilities for request logging."""

from collections.abc import Iterable, Mapping
from typing import Any

from smartsheet_core.http.constants import CENSOR_CHAR, CENSOR_VISIBLE_CHARS


# Header keys censored before logging. Matching is exact: the builder emits
# "Authorization" and httpx reports response headers lower-cased.
SENSITIVE_HEADERS = ("Authorization", "authorization")

# Top-level response fields censored before logging
SENSITIVE_CONTENT_FIELDS = ("access_token", "refresh_token")


def censor(value: str) -> str:
    """Mask every character except the last four.

    Args:
        value: Secret value.

    Returns:
        Censored value; empty values are returned unchanged.

    Examples:
        >>> censor("SuperSecret")
        '*******cret'
    """
    if not value:
        return value
    hidden = max(len(value) - CENSOR_VISIBLE_CHARS, 0)
    return CENSOR_CHAR * hidden + value[hidden:]


def censor_fields(data: Mapping[str, Any], fields: Iterable[str]) -> dict[str, Any]:
    """Censor the named fields of a mapping.

    Only string values are censored; other values are left as they are.

    Args:
        data: Original mapping.
        fields: Keys to censor (exact match).

    Returns:
        New dictionary with the named fields censored.
    """
    result = dict(data)
    for field in fields:
        value = result.get(field)
        if isinstance(value, str):
            result[field] = censor(value)
    return result


def censor_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Censor credential headers for logging.

    Keys are matched exactly against SENSITIVE_HEADERS, so both
    "Authorization" and "authorization" are censored while other casings
    such as "AUTHORIZATION" pass through unchanged.

    Args:
        headers: Original headers dictionary.

    Returns:
        New dictionary with credential values censored.
    """
    return censor_fields(headers, SENSITIVE_HEADERS)
