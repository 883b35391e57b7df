"""Credential detection in same-origin JavaScript bundles."""

import asyncio
import base64
import json
import logging
import re
from dataclasses import dataclass

from surfacescan.errors import ProbeFailure
from surfacescan.tools.http import HTTPClient

from .base import Probe
from .models import CredentialFinding, Finding, ProbeResult, Severity, Target
from .scripts import extract_script_urls

logger = logging.getLogger(__name__)

MAX_BUNDLES = 3
PREVIEW_CHARS = 8

SUPABASE_URL_RE = re.compile(r"https://[a-z0-9-]+\.supabase\.co")
JWT_RE = re.compile(r"eyJ[A-Za-z0-9_+/=-]{8,}\.eyJ[A-Za-z0-9_+/=-]{8,}\.[A-Za-z0-9_+/=-]*")

SUPABASE_JWT = "Supabase JWT"
SERVICE_ROLE_KEY = "Supabase Service Role Key"
GENERIC_JWT = "JWT Token"


@dataclass(frozen=True)
class SecretPattern:
    """A credential shape with its intrinsic severity."""

    kind: str
    regex: re.Pattern[str]
    severity: Severity
    truncate: bool = True


SECRET_PATTERNS: tuple[SecretPattern, ...] = (
    SecretPattern("Supabase URL", SUPABASE_URL_RE, "warning", truncate=False),
    SecretPattern("OpenAI API Key", re.compile(r"sk-(?:proj-)?[A-Za-z0-9_-]{40,}"), "critical"),
    SecretPattern("Stripe Live Key", re.compile(r"(?:pk|sk|rk)_live_[A-Za-z0-9]{10,}"), "critical"),
    SecretPattern("Stripe Test Key", re.compile(r"(?:pk|sk|rk)_test_[A-Za-z0-9]{10,}"), "warning"),
    SecretPattern("Google API Key", re.compile(r"AIza[0-9A-Za-z_-]{35}"), "critical"),
    SecretPattern("AWS Access Key", re.compile(r"\bAKIA[0-9A-Z]{16}\b"), "critical"),
    SecretPattern("GitHub Token", re.compile(r"\bgh[pousr]_[A-Za-z0-9]{36,}\b"), "critical"),
    SecretPattern(
        "Private Key",
        re.compile(r"-----BEGIN (?:RSA |DSA |EC |OPENSSH )?PRIVATE KEY-----"),
        "critical",
    ),
    SecretPattern(
        "NEXT_PUBLIC Secret",
        re.compile(r"NEXT_PUBLIC_[A-Z_]*(?:SECRET|KEY|TOKEN)[A-Z_]*"),
        "warning",
        truncate=False,
    ),
)


@dataclass(frozen=True)
class TokenClaims:
    """Unverified claims read from a JWT payload."""

    role: str | None = None
    issuer: str | None = None
    decode_error: str | None = None

    @property
    def is_service_role(self) -> bool:
        return self.role == "service_role"

    @property
    def is_anon(self) -> bool:
        return self.role == "anon"


def classify_token(token: str | bytes) -> TokenClaims:
    """Decode a JWT payload without verifying it.

    Never raises: a malformed token comes back with ``decode_error`` set.
    """
    if isinstance(token, bytes):
        token = token.decode("ascii", errors="replace")
    parts = token.split(".")
    if len(parts) < 2 or not parts[1]:
        return TokenClaims(decode_error="not a JWT")

    segment = parts[1].replace("+", "-").replace("/", "_").rstrip("=")
    try:
        payload = json.loads(base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4)))
    except ValueError as exc:
        return TokenClaims(decode_error=type(exc).__name__)
    if not isinstance(payload, dict):
        return TokenClaims(decode_error="payload is not an object")

    role = payload.get("role")
    issuer = payload.get("iss")
    return TokenClaims(
        role=role if isinstance(role, str) else None,
        issuer=issuer if isinstance(issuer, str) else None,
    )


def preview(value: str, length: int = PREVIEW_CHARS) -> str:
    """Fixed-length truncated form of a secret."""
    return f"{value[:length]}..."


def scan_bundles(bundles: list[str]) -> list[CredentialFinding]:
    """Match every pattern against the bundles; the first match per kind wins."""
    found: dict[str, CredentialFinding] = {}
    backend_url: str | None = None
    tokens: list[str] = []

    for content in bundles:
        if backend_url is None:
            url_match = SUPABASE_URL_RE.search(content)
            if url_match:
                backend_url = url_match.group(0)
        for pattern in SECRET_PATTERNS:
            if pattern.kind in found:
                continue
            match = pattern.regex.search(content)
            if match:
                secret = match.group(0)
                found[pattern.kind] = CredentialFinding(
                    kind=pattern.kind,
                    preview=preview(secret) if pattern.truncate else secret,
                    severity=pattern.severity,
                )
        for token in JWT_RE.findall(content):
            if token not in tokens:
                tokens.append(token)

    classified = [(token, classify_token(token)) for token in tokens]
    service_token = next((t for t, claims in classified if claims.is_service_role), None)
    usable = [(t, claims) for t, claims in classified if not claims.is_service_role]
    # Prefer an explicit anon claim; otherwise the first token stands in.
    anon = next(((t, claims) for t, claims in usable if claims.is_anon), None)
    chosen = anon or (usable[0] if usable else None)

    if chosen:
        token, claims = chosen
        is_supabase = backend_url is not None or claims.issuer == "supabase"
        found[SUPABASE_JWT if is_supabase else GENERIC_JWT] = CredentialFinding(
            kind=SUPABASE_JWT if is_supabase else GENERIC_JWT,
            preview=preview(token),
            severity="critical" if is_supabase else "warning",
            backend_url=backend_url,
            backend_key=token if backend_url else None,
        )
    if service_token:
        found[SERVICE_ROLE_KEY] = CredentialFinding(
            kind=SERVICE_ROLE_KEY,
            preview=preview(service_token),
            severity="critical",
        )
    return list(found.values())


def credential_to_finding(credential: CredentialFinding) -> Finding:
    """Turn a detected credential into a report finding."""
    if credential.kind == SERVICE_ROLE_KEY:
        detail = (
            "A Supabase service role key was found in public JavaScript. It bypasses "
            "Row Level Security on every table. Rotate it immediately."
        )
    elif credential.severity == "critical":
        detail = (
            f"A {credential.kind} was found in public JavaScript. Rotate this key immediately."
        )
    else:
        detail = (
            f"A {credential.kind} was found in public JavaScript. "
            "Review whether it belongs there."
        )
    return Finding(
        identifier="secret-" + credential.kind.lower().replace(" ", "-"),
        category="secrets",
        severity=credential.severity,
        label=f"Exposed: {credential.kind}",
        detail=detail,
        value=credential.preview,
    )


class SecretScanner(Probe):
    """Fetch the first same-origin bundles and look for leaked credentials."""

    name = "secrets"

    def __init__(self, timeout: float = 8.0, bundle_timeout: float = 6.0):
        self.timeout = timeout
        self.bundle_timeout = bundle_timeout

    async def run(self, target: Target, client: HTTPClient) -> ProbeResult:
        homepage = await client.get(target.url, timeout=self.timeout)
        scripts = extract_script_urls(homepage.body, target) if homepage.ok else []

        bodies = await asyncio.gather(
            *(self._fetch_bundle(client, url) for url in scripts[:MAX_BUNDLES])
        )
        credentials = scan_bundles([body for body in bodies if body])
        logger.debug(
            "secrets: scanned %d bundles, found %s",
            len(bodies),
            [credential.kind for credential in credentials],
        )

        findings = [credential_to_finding(credential) for credential in credentials]
        if not findings:
            findings.append(
                Finding(
                    identifier="api-keys",
                    category="secrets",
                    severity="pass",
                    label="API Key Exposure in JS",
                    detail="No API keys or secrets detected in public JavaScript bundles.",
                )
            )
        return ProbeResult(
            probe=self.name,
            findings=tuple(findings),
            credentials=tuple(credentials),
        )

    async def _fetch_bundle(self, client: HTTPClient, url: str) -> str | None:
        try:
            response = await client.get(url, timeout=self.bundle_timeout)
        except ProbeFailure as exc:
            logger.debug("secrets: %s", exc)
            return None
        return response.body if response.ok else None
