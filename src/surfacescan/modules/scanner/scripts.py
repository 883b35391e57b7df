"""HTML link and script extraction shared by discovery and secret scanning."""

import re
from urllib.parse import urljoin, urlsplit, urlunsplit

from .models import Target
from .target import origin_of

SCRIPT_SRC_RE = re.compile(r"""<script[^>]+src=["']([^"']+)["']""", re.IGNORECASE)
ANCHOR_HREF_RE = re.compile(r"""<a\s[^>]*?href=["']([^"']+)["']""", re.IGNORECASE)

# Third-party script hosts that never carry the application bundle.
EXCLUDED_SCRIPT_MARKERS = (
    "cdn.",
    "googleapis",
    "googletagmanager",
    "google-analytics",
    "gstatic",
    "doubleclick",
    "facebook.net",
    "hotjar",
    "segment.com",
    "cloudflareinsights",
    "jsdelivr",
    "unpkg",
    "node_modules",
    "plausible.io",
    "intercom",
)

_SKIPPED_SCHEMES = ("mailto:", "tel:", "javascript:", "data:")


def same_origin(url: str, target: Target) -> bool:
    """Return True if *url* shares the target's scheme, host and port."""
    return origin_of(url) == target.origin


def resolve(href: str, target: Target) -> str | None:
    """Resolve *href* against the target and drop the fragment.

    Returns None for non-navigational references (mailto:, javascript:, ...).
    """
    href = href.strip()
    if not href or href.startswith("#") or href.lower().startswith(_SKIPPED_SCHEMES):
        return None
    base = target.url.split("?", 1)[0]
    absolute = urljoin(f"{base}/", href)
    parts = urlsplit(absolute)
    if parts.scheme not in ("http", "https"):
        return None
    return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", parts.query, ""))


def extract_links(html: str, target: Target) -> list[str]:
    """Return same-origin anchor targets found in *html*, in page order."""
    links: list[str] = []
    for href in ANCHOR_HREF_RE.findall(html):
        url = resolve(href, target)
        if url and same_origin(url, target) and url not in links:
            links.append(url)
    return links


def extract_script_urls(html: str, target: Target) -> list[str]:
    """Return same-origin ``<script src>`` URLs, excluding CDN and analytics hosts."""
    scripts: list[str] = []
    for src in SCRIPT_SRC_RE.findall(html):
        if any(marker in src.lower() for marker in EXCLUDED_SCRIPT_MARKERS):
            continue
        url = resolve(src, target)
        if url and same_origin(url, target) and url not in scripts:
            scripts.append(url)
    return scripts
