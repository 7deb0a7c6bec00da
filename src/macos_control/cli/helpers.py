"""Shared state and utilities for macos-control CLI commands.

Holds the logging options collected by the global callback so that
logging is configured exactly once per invocation, after every option
callback has run.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

import typer
from rich.console import Console

from macos_control.core.logging import configure_logging

# =============================================================================
# Logging configuration
# =============================================================================

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMATS = ("json", "console", "both")


@dataclass
class CliLoggingConfig:
    """Logging options gathered from global CLI flags."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    file: Path | None = None
    format: Literal["json", "console", "both"] = "console"
    configured: bool = False


_log_config = CliLoggingConfig()


def set_log_level(level: str) -> None:
    """Set the log level (DEBUG, INFO, WARNING, ERROR; case-insensitive)."""
    _log_config.level = level.upper()  # type: ignore[assignment]


def set_log_format(fmt: str) -> None:
    """Set the log format (json, console, both)."""
    _log_config.format = fmt.lower()  # type: ignore[assignment]


def set_log_file(path: Path | None) -> None:
    _log_config.file = path


def configure_global_logging(console: Console) -> None:
    """Configure logging from the global CLI options.

    Only configures once per session.

    Raises:
        typer.Exit: If the options are inconsistent (e.g. format="both"
            without a log file) or name an unknown level.
    """
    if _log_config.configured:
        return

    if _log_config.level not in LOG_LEVELS:
        console.print(f"[red]Logging configuration error:[/red] unknown level {_log_config.level!r}")
        raise typer.Exit(1)
    if _log_config.format not in LOG_FORMATS:
        console.print(f"[red]Logging configuration error:[/red] unknown format {_log_config.format!r}")
        raise typer.Exit(1)

    try:
        configure_logging(
            level=_log_config.level,
            format=_log_config.format,
            file_path=_log_config.file,
        )
    except ValueError as e:
        console.print(f"[red]Logging configuration error:[/red] {e}")
        raise typer.Exit(1) from None
    _log_config.configured = True


def reset_logging_state() -> None:
    """Reset CLI logging options to defaults (used by tests)."""
    global _log_config
    _log_config = CliLoggingConfig()


__all__ = [
    "CliLoggingConfig",
    "configure_global_logging",
    "reset_logging_state",
    "set_log_file",
    "set_log_format",
    "set_log_level",
]
