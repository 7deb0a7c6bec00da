"""Error classification and remediation.

Re-exports the public symbols of the codes, models, classifier and
remediation modules.
"""

from macos_control.core.errors.codes import (
    RETRIABLE_KINDS,
    TIMEOUT_EXIT_STATUS,
    ErrorKind,
    is_retriable,
    kind_of,
)
from macos_control.core.errors.models import OperationFailed, StructuredError
from macos_control.core.errors.classifier import (
    DEFAULT_RULES,
    ClassificationRule,
    ErrorClassifier,
    classify,
)
from macos_control.core.errors.remediation import (
    RemediationAdvisor,
    format_message,
    remediation_steps,
    render,
)

__all__ = [
    "RETRIABLE_KINDS",
    "TIMEOUT_EXIT_STATUS",
    "ErrorKind",
    "is_retriable",
    "kind_of",
    "OperationFailed",
    "StructuredError",
    "DEFAULT_RULES",
    "ClassificationRule",
    "ErrorClassifier",
    "classify",
    "RemediationAdvisor",
    "format_message",
    "remediation_steps",
    "render",
]
