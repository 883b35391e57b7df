"""Score, summary and ordering for a finding list."""

from collections.abc import Iterable

from .models import SEVERITY_ORDER, Finding, Summary

CRITICAL_PENALTY = 20
WARNING_PENALTY = 5


def compute_score(findings: Iterable[Finding]) -> int:
    """Return ``100 - 20*critical - 5*warning`` clamped to ``[0, 100]``."""
    summary = summarize(findings)
    score = 100 - summary.critical * CRITICAL_PENALTY - summary.warnings * WARNING_PENALTY
    return max(0, min(100, score))


def summarize(findings: Iterable[Finding]) -> Summary:
    """Partition findings by severity."""
    counts = {"critical": 0, "warning": 0, "pass": 0, "info": 0}
    for finding in findings:
        counts[finding.severity] += 1
    return Summary(
        critical=counts["critical"],
        warnings=counts["warning"],
        passed=counts["pass"],
        info=counts["info"],
    )


def order_findings(findings: Iterable[Finding]) -> list[Finding]:
    """Stable sort: critical, warning, pass, info."""
    return sorted(findings, key=lambda finding: SEVERITY_ORDER[finding.severity])
