"""Data models for targets, findings and scan reports."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal
from urllib.parse import urlsplit

from surfacescan.tools.http import DEFAULT_USER_AGENT

Category = Literal["pages", "headers", "secrets", "exposure", "ssl"]
Severity = Literal["critical", "warning", "pass", "info"]
TableStatus = Literal["open", "empty", "blocked"]

SEVERITY_ORDER: dict[str, int] = {"critical": 0, "warning": 1, "pass": 2, "info": 3}


@dataclass
class ScanConfig:
    """Timeouts and transport settings for one scan."""

    scan_timeout: float = 25.0
    discovery_timeout: float = 5.0
    path_timeout: float = 5.0
    homepage_timeout: float = 8.0
    bundle_timeout: float = 6.0
    cors_timeout: float = 5.0
    schema_timeout: float = 8.0
    table_timeout: float = 6.0
    verify_ssl: bool = True
    follow_redirects: bool = True
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(frozen=True)
class Target:
    """A normalized scan target."""

    url: str
    origin: str
    scheme: str
    host: str

    @property
    def is_https(self) -> bool:
        return self.scheme == "https"

    @property
    def domain(self) -> str:
        return urlsplit(self.origin).hostname or self.host

    def join(self, path: str) -> str:
        """Return an absolute URL for an origin-relative *path*."""
        return f"{self.origin}{path}"


@dataclass(frozen=True)
class Finding:
    """One reportable observation produced by a probe."""

    identifier: str
    category: Category
    severity: Severity
    label: str
    detail: str
    value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.identifier,
            "category": self.category,
            "severity": self.severity,
            "label": self.label,
            "detail": self.detail,
            "value": self.value,
        }


@dataclass(frozen=True)
class CredentialFinding:
    """A secret detected in a client-side bundle.

    Only ``preview`` is ever shown; ``backend_key`` holds the full value just
    long enough to run the data-exposure probe.
    """

    kind: str
    preview: str
    severity: Severity
    backend_url: str | None = None
    backend_key: str | None = field(default=None, repr=False)

    @property
    def usable(self) -> bool:
        return bool(self.backend_url and self.backend_key)


@dataclass(frozen=True)
class BackendCredential:
    """Backend URL plus the low-privilege key recovered from a bundle."""

    backend_url: str
    key: str = field(repr=False)

    @property
    def key_preview(self) -> str:
        return f"{self.key[:12]}..."


@dataclass(frozen=True)
class ExposedTable:
    """Access result for one backend table."""

    name: str
    status: TableStatus
    columns: tuple[str, ...] = ()
    sample_rows: tuple[dict[str, Any], ...] = ()
    total_rows: int | None = None

    @property
    def accessible(self) -> bool:
        return self.status != "blocked"


@dataclass(frozen=True)
class DataExposure:
    """Aggregated result of querying a backend with a leaked credential."""

    backend_url: str
    key_preview: str
    tables: tuple[ExposedTable, ...]

    @property
    def tables_found(self) -> int:
        return len(self.tables)

    @property
    def open_tables(self) -> int:
        return sum(1 for table in self.tables if table.status == "open")

    @property
    def empty_tables(self) -> int:
        return sum(1 for table in self.tables if table.status == "empty")

    @property
    def blocked_tables(self) -> int:
        return sum(1 for table in self.tables if table.status == "blocked")


@dataclass(frozen=True)
class Summary:
    """Per-severity counts of a finding list."""

    critical: int = 0
    warnings: int = 0
    passed: int = 0
    info: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "critical": self.critical,
            "warnings": self.warnings,
            "passed": self.passed,
            "info": self.info,
        }


@dataclass(frozen=True)
class HistoryEntry:
    """Summary tuple handed to the local history store after a scan."""

    url: str
    domain: str
    score: int
    critical: int
    warnings: int
    passed: int
    scanned_at: datetime


@dataclass(frozen=True)
class ProbeResult:
    """The result slot a single probe fills."""

    probe: str
    findings: tuple[Finding, ...] = ()
    discovered_urls: tuple[str, ...] = ()
    credentials: tuple[CredentialFinding, ...] = ()


@dataclass(frozen=True)
class ScanReport:
    """Terminal aggregate of one scan. Build it with :meth:`build`."""

    target: Target
    scanned_at: datetime
    score: int
    summary: Summary
    discovered_urls: tuple[str, ...]
    findings: tuple[Finding, ...]
    data_exposure: DataExposure | None = None

    @classmethod
    def build(
        cls,
        target: Target,
        findings: list[Finding],
        discovered_urls: list[str] | tuple[str, ...] = (),
        data_exposure: DataExposure | None = None,
        scanned_at: datetime | None = None,
    ) -> "ScanReport":
        """Derive score, summary and ordering from *findings*."""
        from .scoring import compute_score, order_findings, summarize

        ordered = order_findings(findings)
        return cls(
            target=target,
            scanned_at=scanned_at or datetime.now().astimezone(),
            score=compute_score(ordered),
            summary=summarize(ordered),
            discovered_urls=tuple(discovered_urls),
            findings=tuple(ordered),
            data_exposure=data_exposure,
        )

    def history_entry(self) -> HistoryEntry:
        return HistoryEntry(
            url=self.target.url,
            domain=self.target.domain,
            score=self.score,
            critical=self.summary.critical,
            warnings=self.summary.warnings,
            passed=self.summary.passed,
            scanned_at=self.scanned_at,
        )
