"""Header assembly for the request core."""

import os
from urllib.parse import quote

from smartsheet_core.http.constants import (
    DEFAULT_ACCEPT,
    DEFAULT_CONTENT_TYPE,
    PRODUCT_NAME,
)
from smartsheet_core.http.errors import FileAccessError
from smartsheet_core.http.models import RequestIntent
from smartsheet_core.version import __version__


def build_user_agent(
    user_agent: str | None,
    product: str = PRODUCT_NAME,
    version: str = __version__,
) -> str:
    """Build the User-Agent value.

    Args:
        user_agent: Caller-supplied suffix, if any.
        product: Product token.
        version: Product version.

    Returns:
        "<product>/<version>" or "<product>/<version>/<user_agent>".
    """
    base = f"{product}/{version}"
    if user_agent:
        return f"{base}/{user_agent}"
    return base


def get_file_size(path: str) -> int:
    """Stat an upload file.

    Args:
        path: File path.

    Returns:
        Size in bytes.

    Raises:
        FileAccessError: If the file cannot be stat'ed.
    """
    try:
        return os.stat(path).st_size
    except OSError as e:
        msg = f"Cannot stat upload file {path}: {e}"
        raise FileAccessError(msg, path=path) from e


def build_headers(
    intent: RequestIntent,
    product: str = PRODUCT_NAME,
    version: str = __version__,
) -> dict[str, str]:
    """Build request headers for an intent.

    Args:
        intent: Request intent.
        product: Product token for User-Agent.
        version: Product version for User-Agent.

    Returns:
        Complete headers dictionary.

    Raises:
        FileAccessError: If intent.path is set but cannot be stat'ed.
    """
    headers: dict[str, str] = {
        "Accept": intent.accept or DEFAULT_ACCEPT,
        "Content-Type": intent.content_type or DEFAULT_CONTENT_TYPE,
        "User-Agent": build_user_agent(intent.user_agent, product, version),
    }

    if intent.access_token:
        headers["Authorization"] = f"Bearer {intent.access_token}"
    if intent.assume_user:
        headers["Assume-User"] = quote(intent.assume_user, safe="")

    if intent.content_disposition:
        headers["Content-Disposition"] = intent.content_disposition
    elif intent.file_name:
        headers["Content-Disposition"] = f'attachment; filename="{intent.file_name}"'

    # A stat'ed size wins over a caller-declared one
    if intent.path is not None:
        headers["Content-Length"] = str(get_file_size(intent.path))
    elif intent.file_size is not None:
        headers["Content-Length"] = str(intent.file_size)

    headers.update(intent.custom_properties)

    return headers
