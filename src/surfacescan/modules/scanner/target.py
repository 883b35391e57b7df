"""Target normalization."""

import re
from urllib.parse import urlsplit

import httpx

from surfacescan.errors import InputError

from .models import Target

_LABEL_RE = re.compile(r"^[a-z0-9_](?:[a-z0-9_-]*[a-z0-9_])?$")
_SUPPORTED_SCHEMES = ("http", "https")


def _netloc(url: httpx.URL) -> str | None:
    """Return ``host[:port]`` in ASCII form, or None if the host is not usable.

    IDNA hosts are punycoded, a trailing root dot is dropped and default
    ports are omitted (httpx reports them as None).
    """
    host = url.raw_host.decode("ascii").lower().rstrip(".")
    if not host:
        return None
    if ":" in host:
        host = f"[{host}]"
    elif not all(_LABEL_RE.match(label) for label in host.split(".")):
        return None
    port = url.port
    if port is not None and not 0 < port < 65536:
        return None
    return f"{host}:{port}" if port is not None else host


def origin_of(url: str) -> str | None:
    """Return the canonical ``scheme://host[:port]`` of *url*, or None if unparsable."""
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return None
    scheme = parsed.scheme.lower()
    netloc = _netloc(parsed) if scheme in _SUPPORTED_SCHEMES else None
    return f"{scheme}://{netloc}" if netloc else None


def normalize_target(raw: str) -> Target:
    """Normalize raw user input into a :class:`Target`.

    A bare host gets ``https://``; trailing slashes and fragments are dropped.

    Raises:
        InputError: the input cannot be turned into an http(s) origin.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise InputError("URL is required")

    candidate = raw.strip()
    if any(char.isspace() for char in candidate):
        raise InputError(f"Invalid URL: {raw!r}")

    if "://" not in candidate:
        candidate = f"https://{candidate}"

    try:
        parsed = httpx.URL(candidate)
    except httpx.InvalidURL:
        raise InputError(f"Invalid URL: {raw!r}") from None

    scheme = parsed.scheme.lower()
    if scheme not in _SUPPORTED_SCHEMES:
        raise InputError(f"Unsupported scheme: {scheme or '(none)'}")
    if not parsed.raw_host:
        raise InputError(f"Invalid URL: {raw!r}")

    netloc = _netloc(parsed)
    if netloc is None:
        raise InputError(f"Invalid host: {parsed.host!r}")
    origin = f"{scheme}://{netloc}"

    parts = urlsplit(candidate)
    path = parts.path.rstrip("/")
    url = f"{origin}{path}"
    if parts.query:
        url = f"{url}?{parts.query}"

    return Target(url=url, origin=origin, scheme=scheme, host=netloc)
