"""``backoff`` command: show the sleep schedule of a retry policy."""

from __future__ import annotations

import typer
from pydantic import ValidationError

from macos_control.core.config import BackoffStrategy, RetryPolicy
from macos_control.execution.retry import backoff_schedule

from ..output import console, create_schedule_table, format_ms, print_json


def backoff(
    max_attempts: int = typer.Option(
        3,
        "--max-attempts",
        "-n",
        help="Maximum number of attempts, including the first one",
    ),
    strategy: BackoffStrategy = typer.Option(
        BackoffStrategy.EXPONENTIAL,
        "--strategy",
        "-s",
        case_sensitive=False,
        help="Backoff strategy between attempts",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output the schedule as JSON",
    ),
) -> None:
    """Show how long a retry policy sleeps between timed-out attempts."""
    try:
        policy = RetryPolicy(max_attempts=max_attempts, backoff=strategy)
    except ValidationError as e:
        console.print(f"[red]Invalid policy:[/red] {e.errors()[0]['msg']}")
        raise typer.Exit(1) from None

    delays = backoff_schedule(policy)

    if json_output:
        print_json({
            "max_attempts": policy.max_attempts,
            "backoff": policy.backoff.value,
            "sleeps_ms": delays,
            "total_ms": sum(delays),
        })
        return

    if not delays:
        console.print("[dim]Single attempt: no retries, no sleeps.[/dim]")
        return
    console.print(create_schedule_table(delays))
    console.print(
        f"Worst case: {policy.max_attempts} attempts, "
        f"{format_ms(sum(delays))} spent sleeping"
    )
