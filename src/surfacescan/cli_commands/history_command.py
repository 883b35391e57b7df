"""Scan history CLI command."""

import typer
from rich.markup import escape
from rich.table import Table

from surfacescan.modules.scanner.reporting import score_style

from .deps import cli_module
from .shared import app, console


@app.command()
def history(
    clear: bool = typer.Option(False, "--clear", help="Forget all remembered scans"),
    remove: str | None = typer.Option(
        None,
        "--remove",
        help="Forget the scan of one domain",
    ),
) -> None:
    """List recently scanned targets."""
    cli = cli_module()
    store = cli.ScanHistory(cli.get_history_db_path(), limit=cli.get_history_limit())

    if clear:
        deleted = store.clear()
        console.print(f"[green]Cleared {deleted} history entries.[/green]")
        return

    if remove:
        if store.remove(remove):
            console.print(f"[green]Removed {remove} from history.[/green]")
        else:
            console.print(f"[yellow]No history entry for {remove}.[/yellow]")
        return

    entries = store.entries()
    if not entries:
        console.print("[dim]No scans in history.[/dim]")
        return

    table = Table(title="Recent scans", title_justify="left", header_style="bold")
    table.add_column("Domain", style="bold")
    table.add_column("Score", justify="right")
    table.add_column("Critical", justify="right", style="red")
    table.add_column("Warnings", justify="right", style="yellow")
    table.add_column("Passed", justify="right", style="green")
    table.add_column("Scanned", style="dim")
    for entry in entries:
        style = score_style(entry.score)
        table.add_row(
            escape(entry.domain),
            f"[{style}]{entry.score}[/{style}]",
            str(entry.critical),
            str(entry.warnings),
            str(entry.passed),
            entry.scanned_at.astimezone().strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)
