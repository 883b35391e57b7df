"""Wildcard CORS detection on conventional API prefixes."""

import logging

from surfacescan.errors import ProbeFailure
from surfacescan.tools.http import HTTPClient

from .base import Probe
from .models import Finding, ProbeResult, Target

logger = logging.getLogger(__name__)

FOREIGN_ORIGIN = "https://evil-attacker.com"
CORS_ENDPOINTS = ("/api/", "/api/health")


class CORSProber(Probe):
    """Send a preflight with a foreign Origin and look for ``*``."""

    name = "cors"

    def __init__(self, timeout: float = 5.0, endpoints: tuple[str, ...] = CORS_ENDPOINTS):
        self.timeout = timeout
        self.endpoints = endpoints

    async def run(self, target: Target, client: HTTPClient) -> ProbeResult:
        answered = False
        for path in self.endpoints:
            try:
                response = await client.fetch(
                    target.join(path),
                    method="OPTIONS",
                    headers={
                        "Origin": FOREIGN_ORIGIN,
                        "Access-Control-Request-Method": "GET",
                    },
                    timeout=self.timeout,
                )
            except ProbeFailure as exc:
                logger.debug("cors: %s", exc)
                continue

            answered = True
            allow_origin = response.header("access-control-allow-origin")
            if allow_origin and allow_origin.strip() == "*":
                return ProbeResult(
                    probe=self.name,
                    findings=(
                        Finding(
                            identifier="cors",
                            category="headers",
                            severity="warning",
                            label="CORS Policy",
                            detail=(
                                "CORS is wide open (Access-Control-Allow-Origin: *). "
                                "Any website can make API requests to your app."
                            ),
                            value="*",
                        ),
                    ),
                )

        if not answered:
            raise ProbeFailure(f"no CORS endpoint answered on {target.origin}")

        return ProbeResult(
            probe=self.name,
            findings=(
                Finding(
                    identifier="cors",
                    category="headers",
                    severity="pass",
                    label="CORS Policy",
                    detail="CORS policy appears correctly configured.",
                ),
            ),
        )
