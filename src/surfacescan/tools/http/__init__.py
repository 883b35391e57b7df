"""HTTP helpers for SurfaceScan."""

from .client import DEFAULT_USER_AGENT, FetchError, FetchTimeout, HTTPClient, HTTPResponse

__all__ = [
    "DEFAULT_USER_AGENT",
    "FetchError",
    "FetchTimeout",
    "HTTPClient",
    "HTTPResponse",
]
