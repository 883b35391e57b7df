"""Security response header inspection."""

from dataclasses import dataclass

from surfacescan.tools.http import HTTPClient

from .base import Probe
from .models import Finding, ProbeResult, Target


@dataclass(frozen=True)
class SecurityHeader:
    """A header to check plus the text shown when it is present or missing."""

    name: str
    label: str
    present: str
    missing: str


SECURITY_HEADERS: tuple[SecurityHeader, ...] = (
    SecurityHeader(
        "strict-transport-security",
        "HSTS (Strict-Transport-Security)",
        "HSTS is set. Browsers will always use HTTPS.",
        "HSTS missing. Browsers may downgrade to HTTP.",
    ),
    SecurityHeader(
        "content-security-policy",
        "Content-Security-Policy",
        "CSP header present. Helps prevent XSS attacks.",
        "No CSP header. The site is more vulnerable to XSS.",
    ),
    SecurityHeader(
        "x-frame-options",
        "X-Frame-Options",
        "X-Frame-Options set. Protects against clickjacking.",
        "X-Frame-Options missing. The site can be embedded in iframes.",
    ),
    SecurityHeader(
        "x-content-type-options",
        "X-Content-Type-Options",
        "X-Content-Type-Options set. Prevents MIME sniffing.",
        "X-Content-Type-Options missing. Browsers may sniff content types.",
    ),
    SecurityHeader(
        "referrer-policy",
        "Referrer-Policy",
        "Referrer-Policy set. Controls referrer information.",
        "Referrer-Policy missing. Full URLs may leak in referrer headers.",
    ),
    SecurityHeader(
        "permissions-policy",
        "Permissions-Policy",
        "Permissions-Policy set. Controls browser features.",
        "Permissions-Policy missing. Browser features are not explicitly restricted.",
    ),
)


def check_security_headers(headers: dict[str, str]) -> list[Finding]:
    """One finding per security header: pass when present, warning when absent."""
    lowered = {key.lower(): value for key, value in headers.items()}
    findings: list[Finding] = []
    for header in SECURITY_HEADERS:
        value = lowered.get(header.name)
        findings.append(
            Finding(
                identifier=f"header-{header.name}",
                category="headers",
                severity="pass" if value else "warning",
                label=header.label,
                detail=header.present if value else header.missing,
                value=value or None,
            )
        )
    return findings


class HeaderInspector(Probe):
    """Fetch the homepage once and read the security headers."""

    name = "headers"

    def __init__(self, timeout: float = 8.0):
        self.timeout = timeout

    async def run(self, target: Target, client: HTTPClient) -> ProbeResult:
        response = await client.get(target.url, timeout=self.timeout)
        findings = check_security_headers(response.headers)
        return ProbeResult(probe=self.name, findings=tuple(findings))
