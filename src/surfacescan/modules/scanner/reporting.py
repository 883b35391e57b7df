"""Scan report output helpers: rich console rendering and JSON export."""

import json
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .models import DataExposure, ExposedTable, ScanReport
from .redaction import redact_rows

SEVERITY_STYLES = {
    "critical": "bold red",
    "warning": "yellow",
    "pass": "green",
    "info": "cyan",
}
SEVERITY_ICONS = {"critical": "✗", "warning": "!", "pass": "✓", "info": "i"}
MAX_SHOWN_URLS = 10


def score_style(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


def _table_to_dict(table: ExposedTable, redact: bool) -> dict[str, Any]:
    rows = (
        redact_rows(table.columns, table.sample_rows) if redact else list(table.sample_rows)
    )
    return {
        "name": table.name,
        "status": table.status,
        "columns": list(table.columns),
        "total_rows": table.total_rows,
        "sample_rows": rows,
    }


def exposure_to_dict(exposure: DataExposure, redact: bool = True) -> dict[str, Any]:
    return {
        "backend_url": exposure.backend_url,
        "key_preview": exposure.key_preview,
        "tables_found": exposure.tables_found,
        "open_tables": exposure.open_tables,
        "empty_tables": exposure.empty_tables,
        "blocked_tables": exposure.blocked_tables,
        "tables": [_table_to_dict(table, redact) for table in exposure.tables],
    }


def report_to_dict(report: ScanReport, redact: bool = True) -> dict[str, Any]:
    """Serialize a report. Sample rows are redacted unless *redact* is False."""
    return {
        "target": report.target.url,
        "scanned_at": report.scanned_at.isoformat(),
        "score": report.score,
        "summary": report.summary.to_dict(),
        "discovered_urls": list(report.discovered_urls),
        "findings": [finding.to_dict() for finding in report.findings],
        "data_exposure": (
            exposure_to_dict(report.data_exposure, redact) if report.data_exposure else None
        ),
    }


def report_to_json(report: ScanReport) -> str:
    return json.dumps(report_to_dict(report), indent=2, ensure_ascii=False)


def write_json_report(report: ScanReport, path: Path) -> Path:
    """Write the redacted JSON report to *path* and return it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(report_to_json(report), encoding="utf-8")
    return path


def _findings_table(report: ScanReport) -> Table:
    table = Table(show_header=True, header_style="bold", expand=True)
    table.add_column("", width=1, no_wrap=True)
    table.add_column("Check", style="bold", no_wrap=True)
    table.add_column("Category", style="dim", no_wrap=True)
    table.add_column("Detail")
    table.add_column("Value", overflow="fold")
    for finding in report.findings:
        style = SEVERITY_STYLES.get(finding.severity, "")
        table.add_row(
            f"[{style}]{SEVERITY_ICONS.get(finding.severity, '?')}[/{style}]",
            finding.label,
            finding.category,
            escape(finding.detail),
            escape(finding.value or ""),
        )
    return table


def _exposed_table(table: ExposedTable) -> Table:
    total = "?" if table.total_rows is None else str(table.total_rows)
    grid = Table(
        title=f"{escape(table.name)} [dim]({total} rows)[/dim]",
        title_justify="left",
        show_header=True,
        header_style="bold",
    )
    for column in table.columns:
        grid.add_column(column, overflow="fold")
    for row in redact_rows(table.columns, table.sample_rows):
        grid.add_row(*(escape(row[column]) for column in table.columns))
    return grid


def print_report(report: ScanReport, console: Console | None = None) -> None:
    """Render a report to the terminal."""
    console = console or Console()
    summary = report.summary
    style = score_style(report.score)

    console.print(
        Panel(
            f"[bold]{escape(report.target.url)}[/bold]\n"
            f"Score: [{style}]{report.score}/100[/{style}]   "
            f"[red]{summary.critical} critical[/red] · "
            f"[yellow]{summary.warnings} warnings[/yellow] · "
            f"[green]{summary.passed} passed[/green] · "
            f"[cyan]{summary.info} info[/cyan]",
            title="Scan Results",
            expand=False,
        )
    )
    console.print(_findings_table(report))

    if report.discovered_urls:
        console.print(f"\n[bold]Discovered URLs ({len(report.discovered_urls)}):[/bold]")
        for url in report.discovered_urls[:MAX_SHOWN_URLS]:
            console.print(f"  • {escape(url)}")
        hidden = len(report.discovered_urls) - MAX_SHOWN_URLS
        if hidden > 0:
            console.print(f"  [dim]... and {hidden} more[/dim]")

    exposure = report.data_exposure
    if exposure is None:
        return
    console.print(
        f"\n[bold]Backend data exposure[/bold] {exposure.backend_url} "
        f"[dim](key {exposure.key_preview})[/dim]"
    )
    console.print(
        f"  {exposure.tables_found} tables: [red]{exposure.open_tables} open[/red], "
        f"{exposure.empty_tables} empty, [green]{exposure.blocked_tables} blocked[/green]"
    )
    for table in exposure.tables:
        if table.status == "open":
            console.print(_exposed_table(table))
