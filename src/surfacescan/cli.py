"""SurfaceScan CLI - passive web attack-surface scanner.

Command implementations live in ``surfacescan.cli_commands``; they look up the
collaborators below through this module at call time.
"""

from surfacescan.config import (
    get_history_db_path,
    get_history_limit,
    get_scan_config,
    get_verbose,
)
from surfacescan.modules.history import ScanHistory
from surfacescan.modules.scanner import ScanOrchestrator
from surfacescan.utils.async_utils import safe_async_run

from .cli_commands import history_command, scan_command, version_command  # noqa: F401
from .cli_commands.shared import app, console

__all__ = [
    "ScanHistory",
    "ScanOrchestrator",
    "app",
    "console",
    "get_history_db_path",
    "get_history_limit",
    "get_scan_config",
    "get_verbose",
    "main",
    "safe_async_run",
]


def main():
    """Entry point for the CLI."""
    app()
