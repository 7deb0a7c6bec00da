"""Remediation advice and user-facing rendering for StructuredErrors.

RemediationAdvisor maps each error kind to a list of actionable steps.
Some kinds add one detail-specific step when the relevant detail is
present (``app`` for not_found, ``timeout`` for timeout); a missing or
malformed detail simply skips that step.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from .codes import ErrorKind
from .models import StructuredError

# =============================================================================
# Static advice per kind
# =============================================================================

_BASE_STEPS: dict[ErrorKind, tuple[str, ...]] = {
    ErrorKind.SYNTAX_ERROR: (
        "Check your AppleScript/JXA syntax for errors",
        "Verify all quotes, parentheses, and braces are properly closed",
        "Consult the AppleScript Language Guide for correct syntax",
        "Try running the script in Script Editor to get more detailed error information",
    ),
    ErrorKind.PERMISSION_DENIED: (
        "Open System Settings (or System Preferences on older macOS)",
        "Go to Privacy & Security → Accessibility",
        "Add or enable your application/terminal",
        "You may need to restart your application after granting permissions",
    ),
    ErrorKind.NOT_FOUND: (
        "Verify the application is installed on your system",
        "Check the application name spelling (case-sensitive)",
    ),
    ErrorKind.TIMEOUT: (
        "Increase the timeout value if the script legitimately needs more time",
        "Check if the script is stuck in an infinite loop",
        "Verify the target application is responsive",
    ),
    ErrorKind.UNSUPPORTED_PLATFORM: (
        "This library requires macOS to function",
        "If you need cross-platform automation, consider platform-specific alternatives",
        "Use platform detection to conditionally run macOS-specific code",
    ),
    ErrorKind.EXECUTION_ERROR: (
        "Review the error message for specific details",
        "Verify the target application supports the requested operation",
        "Check that all required parameters are provided correctly",
        "Try running a simpler version of the script to isolate the issue",
    ),
}


def _app_step(details: Mapping[str, Any]) -> str | None:
    app = details.get("app")
    if not isinstance(app, str) or not app:
        return None
    return f"Try opening {app} manually to confirm it's available"


def _timeout_step(details: Mapping[str, Any]) -> str | None:
    timeout = details.get("timeout")
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        return None
    return f"Current timeout: {timeout}ms - consider increasing to {timeout * 2}ms or more"


_DETAIL_STEPS: dict[ErrorKind, Callable[[Mapping[str, Any]], str | None]] = {
    ErrorKind.NOT_FOUND: _app_step,
    ErrorKind.TIMEOUT: _timeout_step,
}


class RemediationAdvisor:
    """Looks up remediation steps for a StructuredError.

    Stateless; ``steps`` never raises for a well-formed StructuredError.
    """

    def __init__(
        self,
        base_steps: Mapping[ErrorKind, tuple[str, ...]] | None = None,
    ) -> None:
        self.base_steps: Mapping[ErrorKind, tuple[str, ...]] = (
            _BASE_STEPS if base_steps is None else base_steps
        )

    def steps(self, error: StructuredError) -> list[str]:
        """Return the ordered remediation steps for ``error``."""
        steps = list(self.base_steps.get(error.kind, ()))
        detail_step = _DETAIL_STEPS.get(error.kind)
        if detail_step is not None:
            extra = detail_step(error.details)
            if extra is not None:
                steps.append(extra)
        return steps


_default_advisor = RemediationAdvisor()


def remediation_steps(error: StructuredError) -> list[str]:
    """Remediation steps from the default advisor."""
    return _default_advisor.steps(error)


# =============================================================================
# Rendering
# =============================================================================


def format_message(error: StructuredError) -> str:
    """Render the kind-specific headline for ``error``."""
    details = error.details
    msg = error.message

    if error.kind == ErrorKind.SYNTAX_ERROR:
        line = details.get("line")
        line_info = f" at line {line}" if line is not None else ""
        return f"AppleScript syntax error{line_info}: {msg}"
    if error.kind == ErrorKind.EXECUTION_ERROR:
        return f"Script execution error: {msg}"
    if error.kind == ErrorKind.TIMEOUT:
        timeout = details.get("timeout")
        timeout_info = f" after {timeout}ms" if timeout is not None else ""
        return f"Script execution timed out{timeout_info}: {msg}"
    if error.kind == ErrorKind.NOT_FOUND:
        return f"Resource not found: {msg}"
    if error.kind == ErrorKind.PERMISSION_DENIED:
        return f"Permission denied: {msg}"
    platform = details.get("platform")
    platform_info = f" (current: {platform})" if platform is not None else ""
    return f"Unsupported platform{platform_info}: {msg}"


def render(error: StructuredError, advisor: RemediationAdvisor | None = None) -> str:
    """Render the headline followed by remediation steps, one per line."""
    headline = format_message(error)
    steps = (advisor or _default_advisor).steps(error)
    if not steps:
        return headline
    lines = [headline, "", "Remediation steps:"]
    lines.extend(f"  - {step}" for step in steps)
    return "\n".join(lines)


__all__ = [
    "RemediationAdvisor",
    "format_message",
    "remediation_steps",
    "render",
]
