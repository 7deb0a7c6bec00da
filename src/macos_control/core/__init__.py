"""Core domain models: error taxonomy, results, configuration and logging."""

from macos_control.core.config import BackoffStrategy, LogConfig, RetryPolicy
from macos_control.core.errors import (
    ErrorClassifier,
    ErrorKind,
    OperationFailed,
    RemediationAdvisor,
    StructuredError,
    classify,
    render,
)
from macos_control.core.result import Err, Ok, Result

__all__ = [
    "BackoffStrategy",
    "Err",
    "ErrorClassifier",
    "ErrorKind",
    "LogConfig",
    "Ok",
    "OperationFailed",
    "RemediationAdvisor",
    "Result",
    "RetryPolicy",
    "StructuredError",
    "classify",
    "render",
]
