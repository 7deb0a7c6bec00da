"""CLI command implementations."""

from .backoff import backoff
from .check import check
from .explain import explain

__all__ = ["backoff", "check", "explain"]
