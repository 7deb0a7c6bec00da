"""Structured logging infrastructure for macos_control.

Provides structured logging using structlog with retry-aware context such as
retry_id, operation and attempt. Supports console and JSON output, with an
optional rotating log file.

Example usage:
    from macos_control.core.logging import get_logger, configure_logging, with_context

    # Configure once at startup
    configure_logging(level="DEBUG", format="console")

    # Get a component-specific logger
    logger = get_logger("retry")

    # Log with auto-context
    logger.info("retry_started", max_attempts=3)

    # Bind context for a scope
    ctx_logger = logger.bind(operation="finder.list_windows")
    ctx_logger.debug("attempting")

    # Correlate every log line of one retry loop
    ctx = RetryContext(operation="finder.list_windows")
    with with_context(ctx):
        logger.info("attempt_started")  # Includes retry_id, operation
"""

from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from macos_control.core.config import LogConfig

# Sensitive field patterns that should never be logged
SENSITIVE_PATTERNS = frozenset({
    "api_key",
    "apikey",
    "token",
    "secret",
    "password",
    "credential",
    "bearer",
    "authorization",
})


@dataclass(frozen=True)
class RetryContext:
    """Immutable context for correlating log entries of one retry loop.

    Attributes:
        retry_id: Unique identifier of the ``with_retry`` call (UUID).
        operation: Optional caller-supplied label for the wrapped operation.
        attempt: Current attempt number (None before the first attempt).
        component: Component name for the current operation.
    """

    retry_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    operation: str | None = None
    attempt: int | None = None
    component: str = "retry"

    def with_attempt(self, attempt: int) -> RetryContext:
        """Create a new context with the specified attempt number."""
        return replace(self, attempt=attempt)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging (excludes None values)."""
        result: dict[str, Any] = {
            "retry_id": self.retry_id,
            "component": self.component,
        }
        if self.operation is not None:
            result["operation"] = self.operation
        if self.attempt is not None:
            result["attempt"] = self.attempt
        return result


# Thread/task-safe context variable; ContextVar keeps async tasks isolated
_current_context: ContextVar[RetryContext | None] = ContextVar(
    "macos_control_context", default=None
)


def get_current_context() -> RetryContext | None:
    """Get the current RetryContext if set."""
    return _current_context.get()


@contextmanager
def with_context(ctx: RetryContext) -> Iterator[RetryContext]:
    """Context manager that sets RetryContext for the duration of a block.

    All log calls within the block automatically include the context fields
    when the _add_context processor is active.
    """
    token = _current_context.set(ctx)
    try:
        yield ctx
    finally:
        _current_context.reset(token)


def _sanitize_value(key: str, value: Any) -> Any:
    """Return "[REDACTED]" for keys that look sensitive, else the value."""
    key_lower = key.lower()
    for pattern in SENSITIVE_PATTERNS:
        if pattern in key_lower:
            return "[REDACTED]"
    return value


def _sanitize_event_dict(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that redacts sensitive fields (one level deep)."""
    sanitized: EventDict = {}
    for key, value in event_dict.items():
        if isinstance(value, dict):
            sanitized[key] = {
                k: _sanitize_value(k, v) for k, v in value.items()
            }
        else:
            sanitized[key] = _sanitize_value(key, value)
    return sanitized


def _add_timestamp(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that adds an ISO8601 UTC timestamp."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def _add_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that merges the current RetryContext.

    Explicitly passed fields take precedence over context fields.
    """
    ctx = get_current_context()
    if ctx is not None:
        for key, value in ctx.to_dict().items():
            if key not in event_dict:
                event_dict[key] = value
    return event_dict


LIBRARY_LOGGER_NAME = "macos_control"

logging.getLogger(LIBRARY_LOGGER_NAME).addHandler(logging.NullHandler())

_UNCONFIGURED_PROCESSORS: list[Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_log_level,
    _sanitize_event_dict,
    structlog.processors.format_exc_info,
    structlog.processors.KeyValueRenderer(key_order=["event"]),
]


class ControlLogger:
    """Component logger wrapping structlog.

    The underlying structlog logger is fetched on every call so loggers
    created at import time still respect a later configure_logging().
    Until structlog is configured, events go to the stdlib ``macos_control``
    logger, which carries a NullHandler: an unconfigured host sees nothing.
    """

    def __init__(self, component: str, **initial_context: Any) -> None:
        self._component = component
        self._context: dict[str, Any] = {"component": component, **initial_context}

    def _get_logger(self) -> structlog.stdlib.BoundLogger:
        logger: structlog.stdlib.BoundLogger
        if structlog.is_configured():
            logger = structlog.get_logger().bind(**self._context)
        else:
            logger = structlog.wrap_logger(
                logging.getLogger(LIBRARY_LOGGER_NAME),
                processors=_UNCONFIGURED_PROCESSORS,
                wrapper_class=structlog.stdlib.BoundLogger,
            ).bind(**self._context)
        return logger

    @property
    def component(self) -> str:
        return self._component

    def bind(self, **context: Any) -> ControlLogger:
        """Create a new logger with additional bound context."""
        new_logger = ControlLogger.__new__(ControlLogger)
        new_logger._component = self._component
        new_logger._context = {**self._context, **context}
        return new_logger

    def debug(self, event: str, **kw: Any) -> None:
        self._get_logger().debug(event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._get_logger().info(event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._get_logger().warning(event, **kw)

    def exception(self, event: str, **kw: Any) -> None:
        """Log an exception with traceback; call from an exception handler."""
        self._get_logger().exception(event, **kw)


def _build_processors(
    renderer: Processor,
    include_timestamps: bool,
    include_context: bool,
) -> list[Processor]:
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        _sanitize_event_dict,
    ]

    if include_context:
        processors.append(_add_context)

    if include_timestamps:
        processors.append(_add_timestamp)

    processors.extend([
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ])
    return processors


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO",
    format: Literal["json", "console", "both"] = "console",  # noqa: A002
    file_path: Path | None = None,
    max_file_size_mb: int = 50,
    backup_count: int = 5,
    include_timestamps: bool = True,
    include_context: bool = True,
) -> None:
    """Configure structured logging.

    Call once at application startup.

    Args:
        level: Minimum log level to capture.
        format: "json" for structured, "console" for human-readable,
            "both" for console to stderr and JSON to file (requires file_path).
        file_path: Optional file path for log output.
        max_file_size_mb: Maximum log file size before rotation (MB).
        backup_count: Number of rotated log files to keep.
        include_timestamps: Whether to include ISO8601 timestamps.
        include_context: Whether to include RetryContext fields.

    Raises:
        ValueError: If format="both" but file_path is not provided.
    """
    if format == "both" and file_path is None:
        raise ValueError("file_path is required when format='both'")

    log_level = getattr(logging, level)
    handlers: list[logging.Handler] = []

    if format in ("console", "both"):
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        handlers.append(console_handler)

    if format in ("json", "both"):
        if file_path:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                file_path,
                maxBytes=max_file_size_mb * 1024 * 1024,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            handlers.append(file_handler)
        elif format == "json":
            json_handler = logging.StreamHandler(sys.stdout)
            json_handler.setLevel(log_level)
            handlers.append(json_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)

    renderer: Processor
    if format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    # cache_logger_on_first_use=False so import-time loggers follow reconfiguration
    structlog.configure(
        processors=_build_processors(renderer, include_timestamps, include_context),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_from(config: LogConfig) -> None:
    """Configure logging from a validated LogConfig model."""
    configure_logging(
        level=config.level,
        format=config.format,
        file_path=config.file_path,
        max_file_size_mb=config.max_file_size_mb,
        backup_count=config.backup_count,
        include_timestamps=config.include_timestamps,
        include_context=config.include_context,
    )


def get_logger(component: str, **initial_context: Any) -> ControlLogger:
    """Get a logger bound to ``component``."""
    return ControlLogger(component, **initial_context)


__all__ = [
    "ControlLogger",
    "LIBRARY_LOGGER_NAME",
    "RetryContext",
    "SENSITIVE_PATTERNS",
    "configure_from",
    "configure_logging",
    "get_current_context",
    "get_logger",
    "with_context",
]
