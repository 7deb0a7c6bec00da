"""Execution layer: retry orchestration, telemetry and invocation outcomes."""

from macos_control.execution.outcome import ExecutionResult
from macos_control.execution.retry import (
    RetryCancelled,
    RetryOrchestrator,
    calculate_backoff,
    with_retry,
    with_retry_async,
)
from macos_control.execution.telemetry import (
    CallbackEmitter,
    CompositeEmitter,
    InvocationEvent,
    LoggingEmitter,
    NullEmitter,
    RecordingEmitter,
    RetryEvent,
    TelemetryEmitter,
)

__all__ = [
    "CallbackEmitter",
    "CompositeEmitter",
    "ExecutionResult",
    "InvocationEvent",
    "LoggingEmitter",
    "NullEmitter",
    "RecordingEmitter",
    "RetryCancelled",
    "RetryEvent",
    "RetryOrchestrator",
    "TelemetryEmitter",
    "calculate_backoff",
    "with_retry",
    "with_retry_async",
]
