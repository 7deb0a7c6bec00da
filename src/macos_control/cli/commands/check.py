"""``check`` command: report whether this machine can run osascript."""

from __future__ import annotations

import typer

from macos_control.core import platform
from macos_control.core.errors.remediation import render

from ..output import console, print_json


def check(
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output the platform report as JSON",
    ),
) -> None:
    """Check platform support and osascript availability.

    Exits with status 1 when osascript cannot be used here.
    """
    family, name = platform.os_type()
    version = platform.macos_version()
    osascript = platform.validate_osascript()
    supported = platform.validate_macos()

    if json_output:
        print_json({
            "os_type": [family, name],
            "macos": supported.is_ok(),
            "macos_version": version.value if version.is_ok() else None,
            "osascript_available": osascript.is_ok(),
        })
    else:
        console.print(f"OS: {family}/{name}")
        if version.is_ok():
            console.print(f"macOS version: {version.value}")
        if osascript.is_ok():
            console.print("[green]osascript is available[/green]")
        else:
            console.print(render(osascript.error), markup=False, soft_wrap=True)

    if osascript.is_err():
        raise typer.Exit(1)
