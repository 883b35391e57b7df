"""Coordinator that runs all probes for one target and builds the report."""

import asyncio
import logging
import time
from collections.abc import Callable, Iterable, Sequence

from surfacescan.errors import GlobalTimeout
from surfacescan.tools.http import HTTPClient

from .base import Probe
from .data_exposure import DataExposureProber, exposure_finding
from .factory import create_data_exposure_prober, create_default_probes
from .models import (
    BackendCredential,
    CredentialFinding,
    DataExposure,
    Finding,
    ProbeResult,
    ScanConfig,
    ScanReport,
    Target,
)
from .target import normalize_target

logger = logging.getLogger(__name__)

Progress = Callable[[str], None]


def ssl_finding(target: Target) -> Finding:
    """Structural HTTPS check; needs no network call."""
    if target.is_https:
        return Finding(
            identifier="ssl",
            category="ssl",
            severity="pass",
            label="HTTPS / SSL",
            detail="Site uses HTTPS. Traffic is encrypted.",
        )
    return Finding(
        identifier="ssl",
        category="ssl",
        severity="critical",
        label="HTTPS / SSL",
        detail="Site does not use HTTPS. All traffic is unencrypted.",
    )


def select_credential(credentials: Iterable[CredentialFinding]) -> BackendCredential | None:
    """Return the first credential that can be used against a backend."""
    for credential in credentials:
        if credential.usable:
            return BackendCredential(
                backend_url=credential.backend_url,
                key=credential.backend_key,
            )
    return None


class ScanOrchestrator:
    """Run registered probes concurrently under one global deadline.

    A probe that raises simply contributes nothing. If the deadline elapses
    every outstanding request is cancelled and :class:`GlobalTimeout` is
    raised instead of returning a partial report.
    """

    def __init__(
        self,
        probes: Iterable[Probe] | None = None,
        config: ScanConfig | None = None,
        data_exposure: DataExposureProber | None = None,
        client_factory: Callable[[], HTTPClient] | None = None,
    ):
        self.config = config or ScanConfig()
        self._probes: dict[str, Probe] = {}
        for probe in create_default_probes(self.config) if probes is None else probes:
            self.register(probe)
        self.data_exposure = data_exposure or create_data_exposure_prober(self.config)
        self._client_factory = client_factory or self._default_client

    def _default_client(self) -> HTTPClient:
        return HTTPClient(
            follow_redirects=self.config.follow_redirects,
            verify_ssl=self.config.verify_ssl,
            user_agent=self.config.user_agent,
        )

    def register(self, probe: Probe) -> None:
        """Register or replace a probe by name."""
        self._probes[probe.name] = probe

    def available_probes(self) -> list[str]:
        """Return probe names in registration order."""
        return list(self._probes)

    async def run(
        self,
        raw_url: str,
        probes: Sequence[str] | None = None,
        progress: Progress | None = None,
    ) -> ScanReport:
        """Scan one target and return the synthesized report.

        Raises:
            InputError: *raw_url* is malformed (raised before any request).
            GlobalTimeout: the scan exceeded ``config.scan_timeout``.
        """
        target = normalize_target(raw_url)
        selected = self._select_probes(probes)
        logger.debug("scan: %s with probes %s", target.origin, [p.name for p in selected])

        try:
            async with asyncio.timeout(self.config.scan_timeout):
                return await self._scan(target, selected, progress)
        except TimeoutError:
            logger.debug("scan: %s exceeded %.1fs", target.origin, self.config.scan_timeout)
            raise GlobalTimeout(self.config.scan_timeout) from None

    async def _scan(
        self, target: Target, selected: list[Probe], progress: Progress | None
    ) -> ScanReport:
        findings: list[Finding] = [ssl_finding(target)]
        discovered: list[str] = []
        credentials: list[CredentialFinding] = []

        async with self._client_factory() as client:
            async with asyncio.TaskGroup() as group:
                tasks = [
                    group.create_task(self._settle(probe, target, client, progress))
                    for probe in selected
                ]

            for task in tasks:
                result = task.result()
                if result is None:
                    continue
                findings.extend(result.findings)
                discovered.extend(result.discovered_urls)
                credentials.extend(result.credentials)

            exposure = None
            credential = select_credential(credentials)
            if credential is not None:
                exposure = await self._run_data_exposure(client, credential, progress)
                finding = exposure_finding(exposure) if exposure else None
                if finding:
                    findings.append(finding)

        return ScanReport.build(
            target=target,
            findings=findings,
            discovered_urls=discovered,
            data_exposure=exposure,
        )

    async def _settle(
        self,
        probe: Probe,
        target: Target,
        client: HTTPClient,
        progress: Progress | None,
    ) -> ProbeResult | None:
        started = time.perf_counter()
        if progress:
            progress(f"● [{probe.name}] started")
        try:
            result = await probe.run(target, client)
        except Exception as exc:
            elapsed = time.perf_counter() - started
            logger.debug("probe %s failed: %s", probe.name, exc)
            if progress:
                progress(f"! [{probe.name}] failed after {elapsed:.1f}s: {exc}")
            return None
        if progress:
            elapsed = time.perf_counter() - started
            progress(
                f"✓ [{probe.name}] completed: {len(result.findings)} findings ({elapsed:.1f}s)"
            )
        return result

    async def _run_data_exposure(
        self,
        client: HTTPClient,
        credential: BackendCredential,
        progress: Progress | None,
    ) -> DataExposure | None:
        if progress:
            progress(f"● [{self.data_exposure.name}] querying {credential.backend_url}")
        try:
            exposure = await self.data_exposure.run(client, credential)
        except Exception as exc:
            logger.debug("data exposure probe failed: %s", exc)
            return None
        if progress:
            if exposure is None:
                progress(f"! [{self.data_exposure.name}] schema catalog unavailable")
            else:
                progress(
                    f"✓ [{self.data_exposure.name}] {exposure.tables_found} tables, "
                    f"{exposure.open_tables} open"
                )
        return exposure

    def _select_probes(self, names: Sequence[str] | None) -> list[Probe]:
        if not names:
            return list(self._probes.values())

        missing = sorted({name for name in names if name not in self._probes})
        if missing:
            available = ", ".join(self.available_probes()) or "none"
            raise ValueError(
                f"Unknown probe(s): {', '.join(missing)}. Available probes: {available}"
            )
        return [self._probes[name] for name in names]
