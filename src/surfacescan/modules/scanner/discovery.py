"""Same-origin URL discovery: sitemap, robots.txt, homepage links and bundle routes."""

import asyncio
import html
import logging
import re

from surfacescan.errors import ProbeFailure
from surfacescan.tools.http import HTTPClient

from .base import Probe
from .models import Finding, ProbeResult, Target
from .scripts import extract_links, extract_script_urls, resolve, same_origin

logger = logging.getLogger(__name__)

MAX_URLS = 60
MAX_SITEMAP_LOCS = 50
MAX_ROUTE_BUNDLES = 4
MIN_BUNDLE_BYTES = 5 * 1024
MAX_ROUTE_DEPTH = 5

LOC_RE = re.compile(r"<loc>\s*([^<]+?)\s*</loc>", re.IGNORECASE)
ROBOTS_RULE_RE = re.compile(r"^\s*(?:allow|disallow)\s*:\s*(\S*)", re.IGNORECASE)
ROUTE_LITERAL_RE = re.compile(r"""["'`](/[a-z0-9][a-z0-9._/-]{0,120})["'`]""")
ROUTE_SEGMENT_RE = re.compile(r"^[a-z0-9][a-z0-9._-]*$")

# First path segments that belong to build output or static assets, not routes.
ASSET_PREFIXES = frozenset(
    {
        "_next",
        "_nuxt",
        "__",
        "static",
        "assets",
        "build",
        "dist",
        "chunks",
        "js",
        "css",
        "fonts",
        "img",
        "images",
        "media",
        "icons",
        "node_modules",
        "webpack",
        "favicon",
    }
)


def parse_sitemap(body: str) -> list[str]:
    """Return the first ``<loc>`` values of a sitemap document."""
    return [html.unescape(loc) for loc in LOC_RE.findall(body)[:MAX_SITEMAP_LOCS]]


def parse_robots(body: str, target: Target) -> list[str]:
    """Resolve ``Allow``/``Disallow`` paths, skipping wildcards and the root."""
    urls: list[str] = []
    for line in body.splitlines():
        match = ROBOTS_RULE_RE.match(line)
        if not match:
            continue
        path = match.group(1).split("#", 1)[0].strip()
        if not path or path == "/" or "*" in path:
            continue
        url = resolve(path if path.startswith("/") else f"/{path}", target)
        if url:
            urls.append(url)
    return urls


def is_route_literal(path: str) -> bool:
    """Return True if a quoted string from a bundle looks like a client-side route."""
    if "." in path and not path.endswith("/"):
        return False
    segments = path.strip("/").split("/")
    if not segments or segments == [""] or len(segments) > MAX_ROUTE_DEPTH:
        return False
    if segments[0] in ASSET_PREFIXES or segments[0].startswith("__"):
        return False
    return all(ROUTE_SEGMENT_RE.match(segment) for segment in segments)


def extract_routes(bundle: str) -> list[str]:
    """Mine route-shaped string literals out of a JavaScript bundle."""
    routes: list[str] = []
    for literal in ROUTE_LITERAL_RE.findall(bundle):
        if is_route_literal(literal) and literal not in routes:
            routes.append(literal)
    return routes


def finalize_urls(candidates: list[str], target: Target) -> list[str]:
    """Drop fragments and foreign origins, dedupe, sort and cap."""
    unique: set[str] = set()
    for candidate in candidates:
        url = resolve(candidate, target)
        if url and same_origin(url, target):
            unique.add(url)
    return sorted(unique)[:MAX_URLS]


class URLDiscoverer(Probe):
    """Enumerate reachable same-origin URLs.

    Each source is independent: a failed sitemap fetch does not stop robots.txt
    or homepage parsing. Bundle route mining recovers single-page-app routes
    that have no server-rendered links.
    """

    name = "discovery"

    def __init__(self, timeout: float = 5.0, bundle_timeout: float = 6.0):
        self.timeout = timeout
        self.bundle_timeout = bundle_timeout

    async def run(self, target: Target, client: HTTPClient) -> ProbeResult:
        sitemap, robots, (links, scripts) = await asyncio.gather(
            self._from_sitemap(target, client),
            self._from_robots(target, client),
            self._from_homepage(target, client),
        )
        routes = await self._from_bundles(target, client, scripts)

        urls = finalize_urls([*sitemap, *robots, *links, *routes], target)
        logger.debug(
            "discovery: sitemap=%d robots=%d links=%d routes=%d -> %d urls",
            len(sitemap),
            len(robots),
            len(links),
            len(routes),
            len(urls),
        )
        finding = Finding(
            identifier="url-discovery",
            category="pages",
            severity="info",
            label="Page Discovery",
            detail=(
                f"Found {len(urls)} URLs via sitemap, robots.txt, link crawling "
                "and JavaScript route analysis."
            ),
            value=f"{len(urls)} URLs discovered",
        )
        return ProbeResult(probe=self.name, findings=(finding,), discovered_urls=tuple(urls))

    async def _fetch_ok(self, client: HTTPClient, url: str, timeout: float) -> str | None:
        try:
            response = await client.get(url, timeout=timeout)
        except ProbeFailure as exc:
            logger.debug("discovery: %s", exc)
            return None
        return response.body if response.ok else None

    async def _from_sitemap(self, target: Target, client: HTTPClient) -> list[str]:
        body = await self._fetch_ok(client, target.join("/sitemap.xml"), self.timeout)
        return parse_sitemap(body) if body else []

    async def _from_robots(self, target: Target, client: HTTPClient) -> list[str]:
        body = await self._fetch_ok(client, target.join("/robots.txt"), self.timeout)
        return parse_robots(body, target) if body else []

    async def _from_homepage(
        self, target: Target, client: HTTPClient
    ) -> tuple[list[str], list[str]]:
        body = await self._fetch_ok(client, target.url, self.timeout)
        if not body:
            return [], []
        return extract_links(body, target), extract_script_urls(body, target)

    async def _from_bundles(
        self, target: Target, client: HTTPClient, scripts: list[str]
    ) -> list[str]:
        bodies = await asyncio.gather(
            *(
                self._fetch_ok(client, url, self.bundle_timeout)
                for url in scripts[:MAX_ROUTE_BUNDLES]
            )
        )
        routes: list[str] = []
        for body in bodies:
            if not body or len(body.encode()) < MIN_BUNDLE_BYTES:
                continue
            routes.extend(target.join(route) for route in extract_routes(body))
        return routes
