"""Probe for accidentally exposed files, with content validation."""

import asyncio
import json
import logging
import re
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from difflib import SequenceMatcher

from surfacescan.errors import ProbeFailure
from surfacescan.tools.http import HTTPClient, HTTPResponse

from .base import Probe
from .models import Finding, ProbeResult, Severity, Target

logger = logging.getLogger(__name__)

ENV_LINE_RE = re.compile(r"^\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_.]*)\s*=")
GIT_SECTION_RE = re.compile(r'^\s*\[(?:core|remote "[^"]*"|branch "[^"]*")\]', re.MULTILINE)
SCRIPT_TAG_RE = re.compile(r"<script\b", re.IGNORECASE)

SPA_MARKERS = (
    'id="root"',
    "id='root'",
    'id="app"',
    "id='app'",
    'id="__next"',
    'id="__nuxt"',
    'id="svelte"',
    "__next_data__",
    "window.__nuxt__",
    "data-reactroot",
    "data-server-rendered",
    "ng-version",
    "<app-root",
)
SPA_SHELL_MAX_BYTES = 2048
ENV_PREVIEW_KEYS = 5
SOFT_404_SIMILARITY = 0.9
SOFT_404_COMPARE_CHARS = 4000


def is_html(content_type: str) -> bool:
    return "html" in content_type.lower()


def looks_like_spa_fallback(body: str) -> bool:
    """Return True if *body* is a single-page-app index served for any path.

    Matches a root mount element, a framework hydration marker, or a tiny
    HTML shell whose only content is script bundle references.
    """
    lowered = body.lower()
    if any(marker in lowered for marker in SPA_MARKERS):
        return True
    is_document = "<html" in lowered or "<!doctype html" in lowered
    return (
        is_document
        and len(body.encode()) < SPA_SHELL_MAX_BYTES
        and SCRIPT_TAG_RE.search(body) is not None
    )


def env_keys(body: str) -> list[str]:
    """Return variable names from ``KEY=value`` lines."""
    keys: list[str] = []
    for line in body.splitlines():
        match = ENV_LINE_RE.match(line)
        if match and match.group(1) not in keys:
            keys.append(match.group(1))
    return keys


def matches_not_found_page(body: str, path: str, baseline: str, baseline_path: str) -> bool:
    """Return True if *body* is the same page the server sends for a random path.

    Each page has its own request path removed first, since soft-404 pages
    often echo it.
    """
    page = body.replace(path, "").strip()[:SOFT_404_COMPARE_CHARS]
    reference = baseline.replace(baseline_path, "").strip()[:SOFT_404_COMPARE_CHARS]
    if page == reference:
        return True
    return SequenceMatcher(None, page, reference).ratio() >= SOFT_404_SIMILARITY


def _json_object(body: str) -> dict | None:
    try:
        parsed = json.loads(body)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def _valid_env(content_type: str, body: str) -> bool:
    if is_html(content_type):
        return False
    if any(line.lstrip().startswith("<") for line in body.splitlines()):
        return False
    return bool(env_keys(body))


def _valid_git_config(content_type: str, body: str) -> bool:
    return GIT_SECTION_RE.search(body) is not None


def _valid_package_json(content_type: str, body: str) -> bool:
    manifest = _json_object(body)
    return manifest is not None and "name" in manifest and "dependencies" in manifest


def _valid_json_config(content_type: str, body: str) -> bool:
    return not is_html(content_type) and _json_object(body) is not None


def _valid_api(content_type: str, body: str) -> bool:
    return not is_html(content_type)


def _valid_phpinfo(content_type: str, body: str) -> bool:
    return "phpinfo()" in body or "PHP Version" in body


def _valid_wordpress(content_type: str, body: str) -> bool:
    lowered = body.lower()
    return "wordpress" in lowered or "wp-login" in lowered or "wp-admin" in lowered


def _valid_page(content_type: str, body: str) -> bool:
    return bool(body.strip())


@dataclass(frozen=True)
class SensitivePath:
    """One catalog entry: a path, its severity and its content validator."""

    path: str
    severity: Severity
    validator: Callable[[str, str], bool]
    label: str | None = None
    # Validator accepts any page, so a catch-all 200 handler must be ruled out.
    generic: bool = False

    def accepts(self, content_type: str, body: str) -> bool:
        """Return True if a 200 response body is the genuine artifact."""
        return not looks_like_spa_fallback(body) and self.validator(content_type, body)

    @property
    def identifier(self) -> str:
        return "exposure-" + self.path.replace("/", "-")

    @property
    def is_env(self) -> bool:
        return self.path.startswith("/.env")


SENSITIVE_PATHS: tuple[SensitivePath, ...] = (
    SensitivePath("/.env", "critical", _valid_env),
    SensitivePath("/.env.local", "critical", _valid_env),
    SensitivePath("/.env.production", "critical", _valid_env),
    SensitivePath("/.git/config", "critical", _valid_git_config),
    SensitivePath("/package.json", "warning", _valid_package_json),
    SensitivePath("/config.json", "warning", _valid_json_config),
    SensitivePath("/database.json", "critical", _valid_json_config),
    SensitivePath("/api/users", "warning", _valid_api),
    SensitivePath("/api/admin", "warning", _valid_api),
    SensitivePath("/api/config", "warning", _valid_api),
    SensitivePath("/admin", "warning", _valid_page, generic=True),
    SensitivePath("/internal", "warning", _valid_page, generic=True),
    SensitivePath("/debug", "warning", _valid_page, generic=True),
    SensitivePath("/wp-admin", "info", _valid_wordpress, label="WordPress Detected"),
    SensitivePath("/phpinfo.php", "warning", _valid_phpinfo),
)

_CATALOG = {entry.path: entry for entry in SENSITIVE_PATHS}


def validate_exposure(path: str, content_type: str, body: str) -> bool:
    """Decide whether a ``200`` response at *path* is the real artifact.

    Pure and idempotent: the same inputs always give the same decision.
    """
    entry = _CATALOG.get(path)
    if entry is None:
        return False
    return entry.accepts(content_type, body)


def build_exposure_finding(entry: SensitivePath, body: str) -> Finding:
    """Create the finding for a validated exposure."""
    if entry.severity == "info":
        return Finding(
            identifier=entry.identifier,
            category="exposure",
            severity="info",
            label=entry.label or f"Detected: {entry.path}",
            detail=f"{entry.path} is reachable. This is context, not a flaw by itself.",
            value=entry.path,
        )

    value = entry.path
    if entry.is_env:
        keys = env_keys(body)
        shown = ", ".join(keys[:ENV_PREVIEW_KEYS])
        if len(keys) > ENV_PREVIEW_KEYS:
            shown += f" (+{len(keys) - ENV_PREVIEW_KEYS} more)"
        value = shown

    if entry.severity == "critical":
        detail = (
            f"{entry.path} is publicly accessible. This file may contain secrets, "
            "API keys, or database credentials."
        )
    else:
        detail = (
            f"{entry.path} returned real content. "
            "Review whether this should be publicly accessible."
        )
    return Finding(
        identifier=entry.identifier,
        category="exposure",
        severity=entry.severity,
        label=entry.label or f"Exposed: {entry.path}",
        detail=detail,
        value=value,
    )


class SensitivePathProber(Probe):
    """GET every catalog path concurrently and keep only validated hits.

    A random path is fetched alongside as the baseline for servers that answer
    any URL with a 200 not-found page.
    """

    name = "sensitive_paths"

    def __init__(
        self,
        timeout: float = 5.0,
        catalog: tuple[SensitivePath, ...] = SENSITIVE_PATHS,
    ):
        self.timeout = timeout
        self.catalog = catalog

    async def run(self, target: Target, client: HTTPClient) -> ProbeResult:
        baseline_path = f"/{uuid.uuid4().hex}"
        baseline, *responses = await asyncio.gather(
            self._fetch_200(target, client, baseline_path),
            *(self._fetch_200(target, client, entry.path) for entry in self.catalog),
        )

        findings: list[Finding] = []
        for entry, response in zip(self.catalog, responses):
            if response is None:
                continue
            if not entry.accepts(response.content_type, response.body):
                logger.debug("sensitive_paths: %s rejected by content validation", entry.path)
                continue
            if (
                entry.generic
                and baseline is not None
                and matches_not_found_page(response.body, entry.path, baseline.body, baseline_path)
            ):
                logger.debug("sensitive_paths: %s matches the not-found page", entry.path)
                continue
            findings.append(build_exposure_finding(entry, response.body))
        if not findings:
            findings.append(
                Finding(
                    identifier="sensitive-paths",
                    category="exposure",
                    severity="pass",
                    label="Sensitive Path Exposure",
                    detail="No sensitive files or paths found publicly accessible.",
                )
            )
        return ProbeResult(probe=self.name, findings=tuple(findings))

    async def _fetch_200(
        self, target: Target, client: HTTPClient, path: str
    ) -> HTTPResponse | None:
        try:
            response = await client.get(target.join(path), timeout=self.timeout)
        except ProbeFailure as exc:
            logger.debug("sensitive_paths: %s", exc)
            return None
        return response if response.status_code == 200 else None
