"""Data models for classified automation errors.

This module provides:
- StructuredError: Immutable classified failure (kind + message + details)
- OperationFailed: Exception carrying a StructuredError for callers that
  prefer raising over inspecting a Result
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .codes import ErrorKind


def _freeze_details(details: Mapping[str, Any] | None) -> Mapping[str, Any]:
    """Copy details into a read-only mapping, dropping None values."""
    if not details:
        return MappingProxyType({})
    return MappingProxyType({
        str(key): value for key, value in details.items() if value is not None
    })


def _is_hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True


@dataclass(frozen=True)
class StructuredError:
    """A classified automation failure.

    StructuredError is a value: it is returned (inside ``Err``), never raised.
    Instances are immutable; ``details`` is exposed through a read-only mapping
    so neither the fields nor the detail map can change after construction.
    Equal errors hash equal, and instances pickle and deep-copy by rebuilding
    from a plain copy of ``details``.

    Example:
    ```python
    error = StructuredError.timeout("Script exceeded timeout", timeout=5000)
    error.kind          # ErrorKind.TIMEOUT
    error.details["timeout"]  # 5000
    ```

    Attributes:
        kind: Member of the closed ErrorKind taxonomy.
        message: Human-readable description, never empty.
        details: Open context map. Common keys: exit_code, error_code,
            timeout, app, platform, stderr, line.
    """

    kind: ErrorKind
    message: str
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", ErrorKind.coerce(self.kind))
        if not isinstance(self.message, str) or not self.message.strip():
            raise ValueError("StructuredError.message must be a non-empty string")
        object.__setattr__(self, "details", _freeze_details(self.details))

    def __str__(self) -> str:
        from .remediation import render

        return render(self)

    def __hash__(self) -> int:
        hashable = frozenset(
            (key, value) for key, value in self.details.items() if _is_hashable(value)
        )
        return hash((self.kind, self.message, hashable))

    def __reduce__(self) -> tuple[Any, ...]:
        # Rebuild from a plain dict; the read-only proxy does not pickle.
        return (StructuredError, (self.kind, self.message, dict(self.details)))

    # -------------------------------------------------------------------------
    # Typed constructors
    # -------------------------------------------------------------------------

    @classmethod
    def syntax_error(cls, message: str, **details: Any) -> StructuredError:
        """Create a syntax error (details such as ``line``, ``column``)."""
        return cls(ErrorKind.SYNTAX_ERROR, message, details)

    @classmethod
    def execution_error(cls, message: str, **details: Any) -> StructuredError:
        """Create an execution error."""
        return cls(ErrorKind.EXECUTION_ERROR, message, details)

    @classmethod
    def timeout(cls, message: str, **details: Any) -> StructuredError:
        """Create a timeout error (``timeout`` detail in milliseconds)."""
        return cls(ErrorKind.TIMEOUT, message, details)

    @classmethod
    def not_found(cls, message: str, **details: Any) -> StructuredError:
        """Create a not-found error (details such as ``app`` or ``file``)."""
        return cls(ErrorKind.NOT_FOUND, message, details)

    @classmethod
    def permission_denied(cls, message: str, **details: Any) -> StructuredError:
        """Create a permission-denied error."""
        return cls(ErrorKind.PERMISSION_DENIED, message, details)

    @classmethod
    def unsupported_platform(cls, message: str, **details: Any) -> StructuredError:
        """Create an unsupported-platform error (``platform`` detail)."""
        return cls(ErrorKind.UNSUPPORTED_PLATFORM, message, details)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def retriable(self) -> bool:
        """Whether the retry orchestrator would retry this error."""
        return self.kind.is_retriable

    @property
    def error_code(self) -> int | None:
        """The osascript error number (e.g. -1728), if one was extracted."""
        return self.details.get("error_code")

    @property
    def exit_code(self) -> int | None:
        return self.details.get("exit_code")

    def with_details(self, **extra: Any) -> StructuredError:
        """Return a copy with ``extra`` merged into the details."""
        return StructuredError(self.kind, self.message, {**self.details, **extra})

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary for logging/serialization."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "details": dict(self.details),
        }


class OperationFailed(Exception):
    """Raised by ``Err.unwrap()`` to surface a failure as an exception.

    The retry and classification code never raises this; it exists for call
    sites that want exception-style control flow at the outermost layer.
    """

    def __init__(self, error: Any) -> None:
        self.error = error
        super().__init__(error)

    def __str__(self) -> str:
        return str(self.error)
