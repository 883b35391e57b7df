"""Scan CLI command."""

import logging
from pathlib import Path

import typer
from rich.markup import escape
from sqlalchemy.exc import SQLAlchemyError

from surfacescan.errors import GlobalTimeout, InputError
from surfacescan.modules.scanner.reporting import print_report, report_to_json, write_json_report

from .deps import cli_module
from .shared import app, configure_logging, console

logger = logging.getLogger(__name__)


@app.command()
def scan(
    url: str = typer.Argument(..., help="Target URL or domain (https:// is assumed)"),
    json_output: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Also write the JSON report to this file",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        min=0.1,
        help="Global scan deadline in seconds (default: 25)",
    ),
    no_history: bool = typer.Option(False, "--no-history", help="Do not record this scan"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose scan output"),
) -> None:
    """Run a passive attack-surface scan against URL."""
    cli = cli_module()
    configure_logging(verbose or cli.get_verbose())

    config = cli.get_scan_config(scan_timeout=timeout)
    orchestrator = cli.ScanOrchestrator(config=config)
    progress = None if json_output else (lambda msg: console.print(f"[dim]{escape(msg)}[/dim]"))

    if not json_output:
        console.print(f"[blue]Scanning {escape(url)}...[/blue]")
    try:
        report = cli.safe_async_run(orchestrator.run(url, progress=progress))
    except InputError as exc:
        console.print(f"[red]Invalid target: {escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc
    except GlobalTimeout as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc

    if json_output:
        typer.echo(report_to_json(report))
    else:
        print_report(report, console)

    if output is not None:
        written = write_json_report(report, output)
        if not json_output:
            console.print(f"[green]Report written:[/green] {written}")

    if no_history:
        return
    try:
        store = cli.ScanHistory(cli.get_history_db_path(), limit=cli.get_history_limit())
        store.record(report.history_entry())
    except (OSError, SQLAlchemyError) as exc:
        logger.warning("Could not record scan history: %s", exc)
