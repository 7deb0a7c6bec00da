"""Captured outcome of one osascript invocation.

The invocation boundary (the code that actually spawns osascript) fills an
ExecutionResult and hands it here to be turned into a Result. This module
never runs a process itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from macos_control.core.constants import SCRIPT_PREVIEW_CHARS
from macos_control.core.errors.classifier import ErrorClassifier, classify
from macos_control.core.errors.codes import ErrorKind
from macos_control.core.errors.models import StructuredError
from macos_control.core.result import Err, Ok, Result

from .telemetry import InvocationEvent


def script_preview(script: str | None, limit: int = SCRIPT_PREVIEW_CHARS) -> str:
    """First ``limit`` characters of ``script`` for telemetry metadata."""
    if not script:
        return ""
    if len(script) <= limit:
        return script
    return script[:limit] + "..."


@dataclass
class ExecutionResult:
    """Result of executing a script through osascript.

    Captures the raw output and metadata needed for classification and
    invocation telemetry.
    """

    exit_code: int
    """Process exit code."""

    stdout: str = ""
    """Standard output from the command."""

    stderr: str = ""
    """Standard error from the command."""

    duration_seconds: float = 0.0
    """Execution duration in seconds."""

    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    """When execution started."""

    timed_out: bool = False
    """Whether the boundary killed the process for exceeding its timeout."""

    timeout_ms: int | None = None
    """Timeout the boundary applied, in milliseconds."""

    command: str = "osascript"
    """Executable that was run."""

    script: str | None = None
    """Script body, used only for length/preview telemetry."""

    @property
    def success(self) -> bool:
        """Whether execution completed without error (exit code 0, no timeout)."""
        return self.exit_code == 0 and not self.timed_out

    @property
    def output(self) -> str:
        """Combined stdout and stderr."""
        return f"{self.stdout}\n{self.stderr}".strip()

    def to_result(self, classifier: ErrorClassifier | None = None) -> Result[str, StructuredError]:
        """Convert to ``Ok(trimmed stdout)`` or ``Err(StructuredError)``.

        A boundary-enforced timeout always yields a ``timeout`` error carrying
        the applied ``timeout`` (ms). Other failures go through the classifier;
        ``timeout`` is attached to timeout classifications when known.
        """
        if self.timed_out:
            return Err(StructuredError.timeout(
                "Script execution timed out",
                timeout=self.timeout_ms,
                exit_code=self.exit_code,
                stderr=self.stderr.strip() or None,
            ))

        if self.exit_code == 0:
            return Ok(self.stdout.strip())

        if classifier is None:
            error = classify(self.stderr, self.exit_code)
        else:
            error = classifier.classify(self.stderr, self.exit_code)
        if error.kind == ErrorKind.TIMEOUT and self.timeout_ms is not None:
            error = error.with_details(timeout=self.timeout_ms)
        return Err(error)

    # -------------------------------------------------------------------------
    # Invocation telemetry conventions
    # -------------------------------------------------------------------------

    def start_metadata(self) -> dict[str, Any]:
        """Metadata for ``invocation.start``."""
        return {
            "command": self.command,
            "script_preview": script_preview(self.script),
            "timeout": self.timeout_ms,
        }

    def telemetry(self) -> tuple[str, dict[str, Any], dict[str, Any]]:
        """Terminal invocation event as ``(name, measurements, metadata)``.

        ``invocation.stop`` for successes, ``invocation.exception`` otherwise.
        """
        measurements: dict[str, Any] = {
            "script_length": len(self.script or ""),
            "duration": self.duration_seconds,
        }
        metadata = self.start_metadata()
        if self.success:
            metadata["result_type"] = "ok"
            metadata["output_length"] = len(self.stdout.strip())
            return InvocationEvent.STOP.value, measurements, metadata

        metadata["result_type"] = "error"
        metadata["error"] = self.to_result().error
        return InvocationEvent.EXCEPTION.value, measurements, metadata


__all__ = ["ExecutionResult", "script_preview"]
