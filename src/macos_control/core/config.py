"""Configuration models for macos_control.

Pydantic models for the retry policy and logging settings. Models are frozen:
a policy is built once per ``with_retry`` call and never changes afterwards.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from macos_control.core.constants import DEFAULT_MAX_ATTEMPTS


class BackoffStrategy(str, Enum):
    """Pacing strategies for delays between retried attempts."""

    EXPONENTIAL = "exponential"
    """100ms * 2^attempt: 200, 400, 800, 1600, 3200, ..."""

    LINEAR = "linear"
    """Constant 1000ms between attempts."""


class RetryPolicy(BaseModel):
    """Bounded retry configuration.

    Example:
        policy = RetryPolicy(max_attempts=5, backoff="linear")
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(
        default=DEFAULT_MAX_ATTEMPTS,
        ge=1,
        description="Maximum number of attempts, including the first one",
    )
    backoff: BackoffStrategy = Field(
        default=BackoffStrategy.EXPONENTIAL,
        description="Delay strategy between retried attempts",
    )

    @classmethod
    def from_options(cls, **options: Any) -> RetryPolicy:
        """Build a policy from keyword options, ignoring unrelated keys.

        Lets callers forward a wider option set (e.g. ``timeout=...``)
        without filtering it first.
        """
        known = {key: value for key, value in options.items() if key in cls.model_fields}
        return cls(**known)


class LogConfig(BaseModel):
    """Configuration for structured logging.

    Controls log level, output format, and file rotation settings.
    """

    model_config = ConfigDict(frozen=True)

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum log level to capture",
    )
    format: Literal["json", "console", "both"] = Field(
        default="console",
        description="Output format: json for structured, console for human-readable, "
        "both for console to stderr and JSON to file",
    )
    file_path: Path | None = Field(
        default=None,
        description="Path for log file output (required if format='both')",
    )
    max_file_size_mb: int = Field(
        default=50,
        gt=0,
        le=1000,
        description="Maximum log file size before rotation (MB)",
    )
    backup_count: int = Field(
        default=5,
        ge=0,
        le=100,
        description="Number of rotated log files to keep",
    )
    include_timestamps: bool = Field(
        default=True,
        description="Include ISO8601 UTC timestamps in log entries",
    )
    include_context: bool = Field(
        default=True,
        description="Include retry context (retry_id, attempt) in log entries",
    )

    @model_validator(mode="after")
    def _validate_file_path_for_both(self) -> LogConfig:
        if self.format == "both" and self.file_path is None:
            raise ValueError("file_path is required when format='both'")
        return self


__all__ = ["BackoffStrategy", "LogConfig", "RetryPolicy"]
