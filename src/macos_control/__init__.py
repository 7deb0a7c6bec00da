"""macos_control: error classification, remediation and retry for macOS automation.

Turns raw osascript diagnostics into structured errors, suggests remediation
steps, and retries transient (timeout) failures with bounded backoff.
"""

from macos_control.core import (
    BackoffStrategy,
    Err,
    ErrorClassifier,
    ErrorKind,
    Ok,
    OperationFailed,
    RemediationAdvisor,
    Result,
    RetryPolicy,
    StructuredError,
    classify,
    render,
)
from macos_control.execution import (
    ExecutionResult,
    LoggingEmitter,
    RecordingEmitter,
    RetryEvent,
    RetryOrchestrator,
    with_retry,
    with_retry_async,
)

__version__ = "0.1.0"

__all__ = [
    "BackoffStrategy",
    "Err",
    "ErrorClassifier",
    "ErrorKind",
    "ExecutionResult",
    "LoggingEmitter",
    "Ok",
    "OperationFailed",
    "RecordingEmitter",
    "RemediationAdvisor",
    "Result",
    "RetryEvent",
    "RetryOrchestrator",
    "RetryPolicy",
    "StructuredError",
    "__version__",
    "classify",
    "render",
    "with_retry",
    "with_retry_async",
]
