"""Rich output formatting for the macos-control CLI.

Centralizes the console, colors and table/panel builders so every command
renders errors and schedules the same way.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from macos_control.core.errors.codes import ErrorKind
from macos_control.core.errors.models import StructuredError
from macos_control.core.errors.remediation import format_message

# =============================================================================
# Shared console instance
# =============================================================================

console = Console()


# =============================================================================
# Colors
# =============================================================================


class KindColors:
    """Color per error kind for panels and tables."""

    KIND: dict[ErrorKind, str] = {
        ErrorKind.SYNTAX_ERROR: "red",
        ErrorKind.EXECUTION_ERROR: "red",
        ErrorKind.TIMEOUT: "yellow",
        ErrorKind.NOT_FOUND: "magenta",
        ErrorKind.PERMISSION_DENIED: "red",
        ErrorKind.UNSUPPORTED_PLATFORM: "dim",
    }

    @classmethod
    def get(cls, kind: ErrorKind) -> str:
        return cls.KIND.get(kind, "white")


# =============================================================================
# Formatters
# =============================================================================


def format_ms(milliseconds: int | float) -> str:
    """Format milliseconds for display (e.g. "200ms", "1.6s")."""
    if milliseconds < 1000:
        return f"{milliseconds:g}ms"
    return f"{milliseconds / 1000:.1f}s"


# =============================================================================
# Tables and panels
# =============================================================================


def create_details_table(error: StructuredError) -> Table:
    """Key/value table of an error's kind and details."""
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", no_wrap=False)
    color = KindColors.get(error.kind)
    table.add_row("kind", f"[{color}]{error.kind.value}[/{color}]")
    table.add_row("retriable", "yes" if error.retriable else "no")
    for key in sorted(error.details):
        if key == "stderr":
            continue
        table.add_row(key, Text(str(error.details[key])))
    return table


def create_error_panel(error: StructuredError) -> Panel:
    """Panel with the kind-specific headline of ``error``."""
    color = KindColors.get(error.kind)
    return Panel(Text(format_message(error)), title="Classified Error", border_style=color)


def create_schedule_table(delays_ms: Sequence[int]) -> Table:
    """Table of backoff sleeps between attempts."""
    table = Table(title="Backoff Schedule", show_header=True, header_style="bold")
    table.add_column("After attempt", justify="right", style="cyan")
    table.add_column("Sleep", justify="right")
    table.add_column("Elapsed", justify="right", style="dim")
    elapsed = 0
    for attempt, delay in enumerate(delays_ms, start=1):
        elapsed += delay
        table.add_row(str(attempt), format_ms(delay), format_ms(elapsed))
    return table


# =============================================================================
# Plain output
# =============================================================================


def print_steps(steps: Sequence[str], console_instance: Console | None = None) -> None:
    """Print remediation steps as a bulleted list."""
    out = console_instance or console
    if not steps:
        return
    out.print()
    out.print("[bold]Remediation steps:[/bold]")
    for step in steps:
        out.print(f"  - {step}", markup=False, soft_wrap=True)


def print_json(payload: Any, console_instance: Console | None = None) -> None:
    """Print ``payload`` as indented JSON without markup or wrapping."""
    out = console_instance or console
    out.print(
        json.dumps(payload, indent=2, ensure_ascii=False, default=str),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


__all__ = [
    "KindColors",
    "console",
    "create_details_table",
    "create_error_panel",
    "create_schedule_table",
    "format_ms",
    "print_json",
    "print_steps",
]
