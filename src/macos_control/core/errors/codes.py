"""Error kinds and exit status conventions.

Contains the closed error taxonomy used throughout macos_control.

Error Kind Taxonomy
===================

Every failure produced by an osascript invocation is classified into exactly
one of six kinds. Only ``timeout`` is considered transient; every other kind
needs a change on the caller's side (script, permissions, installed apps,
platform) before a retry can succeed.

    | Kind | Retriable | Typical source |
    |------|-----------|----------------|
    | syntax_error | No | osascript compile step (``syntax error: ...``) |
    | execution_error | No | Runtime failure (``execution error: ...``) |
    | timeout | Yes | Exit status 124 or ``timeout`` in stderr |
    | not_found | No | Missing application or script file |
    | permission_denied | No | Accessibility / automation consent missing |
    | unsupported_platform | No | Not running on macOS |

Usage
-----

Kinds are ``str`` enums, so they compare equal to their plain string value::

    error = classify(stderr, exit_code)
    if error.kind == ErrorKind.TIMEOUT:
        ...
    assert ErrorKind.TIMEOUT == "timeout"
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

# =============================================================================
# Exit status conventions
# =============================================================================

TIMEOUT_EXIT_STATUS = 124
"""Exit status used by ``timeout(1)`` and the invocation boundary for timeouts."""


# =============================================================================
# Error kinds
# =============================================================================


class ErrorKind(str, Enum):
    """Closed set of error kinds for classified automation failures."""

    SYNTAX_ERROR = "syntax_error"
    """Invalid AppleScript/JXA syntax."""

    EXECUTION_ERROR = "execution_error"
    """Runtime error during script execution (also the fallback kind)."""

    TIMEOUT = "timeout"
    """Script execution exceeded the timeout limit."""

    NOT_FOUND = "not_found"
    """Script file or application not found."""

    PERMISSION_DENIED = "permission_denied"
    """Accessibility or automation permissions required."""

    UNSUPPORTED_PLATFORM = "unsupported_platform"
    """Operation attempted on a non-macOS platform."""

    @property
    def is_retriable(self) -> bool:
        """Whether failures of this kind are worth retrying."""
        return self in RETRIABLE_KINDS

    @classmethod
    def coerce(cls, value: ErrorKind | str) -> ErrorKind:
        """Return the member named by ``value``.

        Raises:
            ValueError: If ``value`` does not name a member of the taxonomy.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(member.value for member in cls)
            raise ValueError(
                f"Unknown error kind {value!r}; expected one of: {valid}"
            ) from None


RETRIABLE_KINDS: frozenset[ErrorKind] = frozenset({ErrorKind.TIMEOUT})
"""Kinds the retry orchestrator is allowed to retry."""


def kind_of(error: Any) -> str | None:
    """Read the kind tag of an arbitrary failure value.

    Accepts objects exposing a ``kind`` attribute (``StructuredError`` and
    friends) and mappings with a ``"kind"`` key. Returns the plain string
    value, or None when the failure carries no recognizable tag.
    """
    kind = getattr(error, "kind", None)
    if kind is None and isinstance(error, Mapping):
        kind = error.get("kind")
    if isinstance(kind, Enum):
        kind = kind.value
    return kind if isinstance(kind, str) else None


def is_retriable(error: Any) -> bool:
    """True if ``error`` is tagged with a retriable kind."""
    return kind_of(error) in {kind.value for kind in RETRIABLE_KINDS}
