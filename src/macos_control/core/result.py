"""Result type for operations that can fail with a classified error.

Operations handed to the retry orchestrator return ``Ok(value)`` on success
and ``Err(error)`` on failure. Classified failures travel as values; only
programmer errors are raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from macos_control.core.errors.models import OperationFailed

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome wrapping ``value``."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: object) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed outcome wrapping ``error``."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> None:
        """Raise the wrapped error as ``OperationFailed``."""
        raise OperationFailed(self.error)

    def unwrap_or(self, default: T) -> T:
        return default


Result = Union[Ok[T], Err[E]]
"""Either ``Ok[T]`` or ``Err[E]``."""


__all__ = ["Err", "Ok", "Result"]
