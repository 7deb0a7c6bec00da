"""ErrorClassifier implementation for osascript diagnostics.

Turns the stderr text and exit status of an osascript invocation into a
StructuredError. Classification is a first-match-wins walk over an ordered
rule table; the table is plain data so the priority order can be inspected
and tested on its own.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from macos_control.core.logging import get_logger

from .codes import TIMEOUT_EXIT_STATUS, ErrorKind
from .models import StructuredError

_logger = get_logger("errors")


# =============================================================================
# Patterns and prefixes
# =============================================================================

SYNTAX_ERROR_PREFIX = "syntax error:"
EXECUTION_ERROR_PREFIX = "execution error:"

_PERMISSION_MARKERS: tuple[str, ...] = ("not allowed", "not authorized")
_NOT_FOUND_MARKER = "could not be found"

_ERROR_CODE_PATTERN = re.compile(r"\((-?\d+)\)")
_TRAILING_ERROR_CODE_PATTERN = re.compile(r"\s*\(-?\d+\)\s*$")
_APPLICATION_MENTION_PATTERN = re.compile(r'the application "[^"]+"', re.IGNORECASE)
_APPLICATION_NAME_PATTERN = re.compile(r'[Tt]he application "([^"]+)"')


# =============================================================================
# Extraction helpers
# =============================================================================


def extract_error_code(text: str) -> int | None:
    """Return the last parenthesized signed integer in ``text``.

    osascript appends its error number as ``(-2741)``; when several appear
    the last one belongs to the outermost error.
    """
    codes = _ERROR_CODE_PATTERN.findall(text)
    if not codes:
        return None
    return int(codes[-1])


def extract_message(text: str, prefix: str) -> str | None:
    """Extract the message body from the first line starting with ``prefix``.

    The prefix is removed, the remainder trimmed, and a trailing error number
    such as ``(-1728)`` stripped. Returns None when no line carries the prefix.
    """
    for line in text.split("\n"):
        if line.startswith(prefix):
            body = line[len(prefix):].strip()
            return _TRAILING_ERROR_CODE_PATTERN.sub("", body)
    return None


def extract_application_name(text: str) -> str | None:
    """Return NAME from ``the application "NAME"``, if mentioned."""
    match = _APPLICATION_NAME_PATTERN.search(text)
    return match.group(1) if match else None


# =============================================================================
# Rule table
# =============================================================================


@dataclass(frozen=True)
class ClassificationRule:
    """One entry of the classifier's priority table.

    Attributes:
        kind: Kind produced when this rule matches.
        name: Stable identifier used in logs and tests.
        matches: Predicate over (trimmed text, exit status).
        build: Builds the StructuredError for a matching input.
    """

    kind: ErrorKind
    name: str
    matches: Callable[[str, int], bool]
    build: Callable[[str, int], StructuredError]


def _base_details(text: str, exit_status: int) -> dict[str, Any]:
    return {
        "exit_code": exit_status,
        "error_code": extract_error_code(text),
        "stderr": text,
    }


def _non_empty(message: str | None, default: str) -> str:
    if message is None or not message.strip():
        return default
    return message


def _is_timeout(text: str, exit_status: int) -> bool:
    return exit_status == TIMEOUT_EXIT_STATUS or "timeout" in text


def _is_syntax_error(text: str, exit_status: int) -> bool:
    return text.startswith(SYNTAX_ERROR_PREFIX)


def _is_permission_error(text: str, exit_status: int) -> bool:
    return any(marker in text for marker in _PERMISSION_MARKERS)


def _is_not_found(text: str, exit_status: int) -> bool:
    return _NOT_FOUND_MARKER in text or _APPLICATION_MENTION_PATTERN.search(text) is not None


def _is_execution_error(text: str, exit_status: int) -> bool:
    return text.startswith(EXECUTION_ERROR_PREFIX)


def _build_timeout(text: str, exit_status: int) -> StructuredError:
    return StructuredError.timeout(
        "Script execution timed out", **_base_details(text, exit_status)
    )


def _build_syntax_error(text: str, exit_status: int) -> StructuredError:
    message = _non_empty(extract_message(text, SYNTAX_ERROR_PREFIX), "Syntax error")
    return StructuredError.syntax_error(message, **_base_details(text, exit_status))


def _build_permission_error(text: str, exit_status: int) -> StructuredError:
    message = _non_empty(
        extract_message(text, EXECUTION_ERROR_PREFIX) or text,
        "Operation not permitted",
    )
    return StructuredError.permission_denied(message, **_base_details(text, exit_status))


def _build_not_found(text: str, exit_status: int) -> StructuredError:
    message = _non_empty(
        extract_message(text, EXECUTION_ERROR_PREFIX) or text,
        "Resource could not be found",
    )
    return StructuredError.not_found(
        message,
        app=extract_application_name(text),
        **_base_details(text, exit_status),
    )


def _build_execution_error(text: str, exit_status: int) -> StructuredError:
    message = _non_empty(
        extract_message(text, EXECUTION_ERROR_PREFIX), "Script execution failed"
    )
    return StructuredError.execution_error(message, **_base_details(text, exit_status))


def _build_unknown(text: str, exit_status: int) -> StructuredError:
    return StructuredError.execution_error(
        f"An unknown error occurred: {text}", **_base_details(text, exit_status)
    )


DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(ErrorKind.TIMEOUT, "timeout", _is_timeout, _build_timeout),
    ClassificationRule(
        ErrorKind.SYNTAX_ERROR, "syntax_error", _is_syntax_error, _build_syntax_error
    ),
    ClassificationRule(
        ErrorKind.PERMISSION_DENIED, "permission_denied",
        _is_permission_error, _build_permission_error,
    ),
    ClassificationRule(ErrorKind.NOT_FOUND, "not_found", _is_not_found, _build_not_found),
    ClassificationRule(
        ErrorKind.EXECUTION_ERROR, "execution_error",
        _is_execution_error, _build_execution_error,
    ),
)
"""Priority-ordered rules. permission_denied is checked before not_found."""

FALLBACK_RULE = ClassificationRule(
    ErrorKind.EXECUTION_ERROR, "unknown", lambda text, exit_status: True, _build_unknown
)


# =============================================================================
# Error Classifier
# =============================================================================


class ErrorClassifier:
    """Classifies osascript diagnostics into StructuredErrors.

    Stateless and safe to share between threads. ``classify`` never raises:
    unrecognized text falls through to an ``execution_error``.

    Example:
        classifier = ErrorClassifier()
        error = classifier.classify(
            'execution error: The application "Foo" could not be found. (-1728)', 1
        )
        error.kind              # ErrorKind.NOT_FOUND
        error.details["app"]    # "Foo"
    """

    def __init__(self, rules: tuple[ClassificationRule, ...] | None = None) -> None:
        """Initialize the classifier.

        Args:
            rules: Priority-ordered rule table. Defaults to DEFAULT_RULES.
                The fallback rule is always applied last.
        """
        self.rules: tuple[ClassificationRule, ...] = (
            DEFAULT_RULES if rules is None else tuple(rules)
        )

    def match_rule(self, text: str, exit_status: int) -> ClassificationRule:
        """Return the first rule matching the trimmed text, or the fallback."""
        for rule in self.rules:
            if rule.matches(text, exit_status):
                return rule
        return FALLBACK_RULE

    def classify(self, diagnostic_text: str | None, exit_status: int) -> StructuredError:
        """Classify diagnostic text and exit status.

        Args:
            diagnostic_text: Raw stderr from osascript (trimmed before matching).
            exit_status: Process exit status.

        Returns:
            StructuredError carrying exit_code and stderr details.
        """
        text = (diagnostic_text or "").strip()
        rule = self.match_rule(text, exit_status)
        result = rule.build(text, exit_status)
        _logger.debug(
            "error_classified",
            kind=result.kind.value,
            rule=rule.name,
            exit_code=exit_status,
            error_code=result.error_code,
            message=result.message,
        )
        return result


_default_classifier = ErrorClassifier()


def classify(diagnostic_text: str | None, exit_status: int) -> StructuredError:
    """Classify with the default rule table."""
    return _default_classifier.classify(diagnostic_text, exit_status)


__all__ = [
    "DEFAULT_RULES",
    "EXECUTION_ERROR_PREFIX",
    "FALLBACK_RULE",
    "SYNTAX_ERROR_PREFIX",
    "ClassificationRule",
    "ErrorClassifier",
    "classify",
    "extract_application_name",
    "extract_error_code",
    "extract_message",
]
