"""URL assembly for the request core."""

from collections.abc import Mapping
from urllib.parse import quote

from smartsheet_core.http.constants import DEFAULT_API_HOST
from smartsheet_core.http.models import QueryValue, RequestIntent


def build_url(intent: RequestIntent, default_host: str | None = None) -> str:
    """Build the request URL for an intent.

    The host is the intent's base_url if set, else default_host (normally
    SMARTSHEET_API_HOST), else DEFAULT_API_HOST. The url and id are appended
    by plain concatenation; duplicate slashes are not normalized.

    Args:
        intent: Request intent.
        default_host: Environment-level default host; empty counts as unset.

    Returns:
        URL without query string.
    """
    host = intent.base_url or default_host or DEFAULT_API_HOST
    url = host + intent.url
    if intent.id is not None:
        url += str(intent.id)
    return url


def _format_query_value(value: QueryValue) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render_query(qs: Mapping[str, QueryValue]) -> str:
    """Percent-encode a query map in insertion order.

    Spaces are encoded as %20, never '+'.

    Args:
        qs: Query parameters.

    Returns:
        Encoded query string without the leading '?'.
    """
    return "&".join(
        f"{quote(str(key), safe='')}={quote(_format_query_value(value), safe='')}"
        for key, value in qs.items()
    )


def render_url(url: str, qs: Mapping[str, QueryValue]) -> str:
    """Render a URL with its query string.

    Used both for log lines and by the default transport for the wire URL.

    Args:
        url: URL without query string.
        qs: Query parameters.

    Returns:
        The URL, followed by '?' and the query when qs is non-empty.
    """
    query = render_query(qs)
    if not query:
        return url
    return f"{url}?{query}"
