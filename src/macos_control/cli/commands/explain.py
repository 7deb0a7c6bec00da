"""``explain`` command: classify osascript output and show remediation."""

from __future__ import annotations

import typer

from macos_control.core.errors.classifier import classify
from macos_control.core.errors.remediation import format_message, remediation_steps

from ..output import console, create_details_table, create_error_panel, print_json, print_steps


def explain(
    text: str = typer.Argument(
        ...,
        help="Diagnostic text printed by osascript (usually its stderr)",
    ),
    exit_code: int = typer.Option(
        1,
        "--exit-code",
        "-e",
        help="Exit status of the osascript process (124 means timeout)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output the classified error as JSON",
    ),
) -> None:
    """Classify an osascript failure and print remediation steps."""
    error = classify(text, exit_code)
    steps = remediation_steps(error)

    if json_output:
        payload = error.to_dict()
        payload["retriable"] = error.retriable
        payload["headline"] = format_message(error)
        payload["remediation"] = steps
        print_json(payload)
        return

    console.print(create_error_panel(error))
    console.print(create_details_table(error))
    print_steps(steps)
