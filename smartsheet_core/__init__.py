"""Request-execution core for the Smartsheet API client."""

from smartsheet_core.http import HttpRequestor, RequestIntent
from smartsheet_core.version import __version__


__all__ = ["HttpRequestor", "RequestIntent", "__version__"]
