"""macos-control CLI.

Small helper commands for the help/UX layer around macOS automation:

    cli/
    ├── __init__.py      # app assembly and global options
    ├── helpers.py       # logging option state
    ├── output.py        # Rich formatting
    └── commands/
        ├── explain.py   # classify osascript output, show remediation
        ├── backoff.py   # print a retry policy's sleep schedule
        └── check.py     # platform and osascript availability
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from macos_control import __version__

from .commands import backoff, check, explain
from .helpers import configure_global_logging, set_log_file, set_log_format, set_log_level
from .output import console

# =============================================================================
# Typer app definition
# =============================================================================

app = typer.Typer(
    name="macos-control",
    help="Error classification and retry helpers for macOS automation",
    add_completion=False,
)


# =============================================================================
# Global option callbacks
# =============================================================================


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"macos-control v{__version__}")
        raise typer.Exit()


def log_level_callback(value: str | None) -> str | None:
    if value:
        set_log_level(value)
    return value


def log_file_callback(value: Path | None) -> Path | None:
    if value:
        set_log_file(value)
    return value


def log_format_callback(value: str | None) -> str | None:
    if value:
        set_log_format(value)
    return value


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            "-L",
            callback=log_level_callback,
            help="Logging level (DEBUG, INFO, WARNING, ERROR)",
        ),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            callback=log_file_callback,
            help="Path for log file output",
        ),
    ] = None,
    log_format: Annotated[
        str | None,
        typer.Option(
            "--log-format",
            callback=log_format_callback,
            help="Log format: json, console, or both",
        ),
    ] = None,
) -> None:
    """macos-control - classify osascript failures and plan retries."""
    configure_global_logging(console)


# =============================================================================
# Command registration
# =============================================================================

app.command()(explain)
app.command()(backoff)
app.command()(check)


__all__ = ["app", "console", "main"]
