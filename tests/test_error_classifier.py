"""Tests for macos_control.core.errors.classifier."""

from __future__ import annotations

import pytest

from macos_control.core.errors import ErrorKind
from macos_control.core.errors.classifier import (
    DEFAULT_RULES,
    FALLBACK_RULE,
    ClassificationRule,
    ErrorClassifier,
    classify,
    extract_application_name,
    extract_error_code,
    extract_message,
)
from macos_control.core.errors.models import StructuredError

NOT_FOUND_TEXT = 'execution error: The application "Foo" could not be found. (-1728)'
SYNTAX_TEXT = "syntax error: Expected end of line but found identifier. (-2741)"


class TestExtractionHelpers:
    """Tests for the text extraction helpers."""

    def test_error_code_is_signed(self):
        assert extract_error_code("failed (-1728)") == -1728

    def test_error_code_uses_last_match(self):
        assert extract_error_code("inner (-10004) outer (-1743)") == -1743

    def test_error_code_absent(self):
        assert extract_error_code("no code here") is None

    def test_message_strips_prefix_and_trailing_code(self):
        assert extract_message(SYNTAX_TEXT, "syntax error:") == (
            "Expected end of line but found identifier."
        )

    def test_message_scans_lines(self):
        text = "warning: something\nexecution error: Boom (-1)\nmore"
        assert extract_message(text, "execution error:") == "Boom"

    def test_message_missing_prefix(self):
        assert extract_message("plain text", "syntax error:") is None

    @pytest.mark.parametrize(
        "text,expected",
        [
            ('The application "Safari" is not running', "Safari"),
            ('execution error: the application "Mail" got an error', "Mail"),
            ("no application mentioned", None),
        ],
        ids=["capitalized", "lowercase", "absent"],
    )
    def test_application_name(self, text, expected):
        assert extract_application_name(text) == expected


class TestRuleTable:
    """Tests for the ordered rule table itself."""

    def test_priority_order(self):
        assert [rule.name for rule in DEFAULT_RULES] == [
            "timeout",
            "syntax_error",
            "permission_denied",
            "not_found",
            "execution_error",
        ]

    def test_permission_checked_before_not_found(self):
        names = [rule.name for rule in DEFAULT_RULES]
        assert names.index("permission_denied") < names.index("not_found")

    def test_fallback_matches_anything(self):
        assert FALLBACK_RULE.matches("", 0)
        assert FALLBACK_RULE.kind is ErrorKind.EXECUTION_ERROR

    def test_match_rule_falls_back(self):
        assert ErrorClassifier().match_rule("something odd", 1) is FALLBACK_RULE

    def test_custom_rules(self):
        rule = ClassificationRule(
            ErrorKind.UNSUPPORTED_PLATFORM,
            "no_darwin",
            lambda text, status: "darwin" in text,
            lambda text, status: StructuredError.unsupported_platform("needs darwin"),
        )
        classifier = ErrorClassifier(rules=(rule,))
        assert classifier.classify("requires darwin", 1).kind is ErrorKind.UNSUPPORTED_PLATFORM
        # Default rules are not consulted when a custom table is given
        assert classifier.classify(SYNTAX_TEXT, 1).kind is ErrorKind.EXECUTION_ERROR


class TestClassify:
    """Tests for classify()."""

    def test_not_found_example(self):
        error = classify(NOT_FOUND_TEXT, 1)
        assert error.kind is ErrorKind.NOT_FOUND
        assert error.details["app"] == "Foo"
        assert error.details["error_code"] == -1728
        assert error.message == 'The application "Foo" could not be found.'

    def test_syntax_example(self):
        error = classify(SYNTAX_TEXT, 1)
        assert error.kind is ErrorKind.SYNTAX_ERROR
        assert error.details["error_code"] == -2741
        assert error.message == "Expected end of line but found identifier."

    @pytest.mark.parametrize(
        "text",
        ["", "all good", SYNTAX_TEXT, NOT_FOUND_TEXT, "not authorized"],
        ids=["empty", "plain", "syntax", "not-found", "permission"],
    )
    def test_exit_status_124_is_always_timeout(self, text):
        assert classify(text, 124).kind is ErrorKind.TIMEOUT

    def test_timeout_substring(self):
        error = classify("osascript: timeout waiting for reply", 1)
        assert error.kind is ErrorKind.TIMEOUT
        assert error.message == "Script execution timed out"

    @pytest.mark.parametrize(
        "text",
        [
            "syntax error: A identifier can't go after this identifier.",
            "syntax error:",
            "syntax error: unexpected token\nsecond line",
        ],
        ids=["message", "bare-prefix", "multi-line"],
    )
    def test_syntax_prefix(self, text):
        error = classify(text, 1)
        assert error.kind is ErrorKind.SYNTAX_ERROR
        assert error.message

    @pytest.mark.parametrize(
        "text",
        [
            "execution error: Not authorized to send Apple events to Finder. (-1743)",
            'execution error: The application "Foo" could not be found because it is not allowed',
            "System Events got an error: osascript is not allowed assistive access. (-1719)",
        ],
        ids=["not-authorized", "beats-not-found", "no-prefix"],
    )
    def test_permission_markers(self, text):
        assert classify(text, 1).kind is ErrorKind.PERMISSION_DENIED

    def test_permission_message_uses_execution_body(self):
        error = classify(
            "execution error: Not authorized to send Apple events to Finder. (-1743)", 1
        )
        assert error.message == "Not authorized to send Apple events to Finder."
        assert error.details["error_code"] == -1743

    def test_not_found_by_application_pattern_only(self):
        error = classify('THE APPLICATION "Bar" is busy', 1)
        assert error.kind is ErrorKind.NOT_FOUND
        # The name capture only accepts "The"/"the"
        assert "app" not in error.details

    def test_not_found_without_prefix_uses_full_text(self):
        error = classify("File could not be found", 1)
        assert error.kind is ErrorKind.NOT_FOUND
        assert error.message == "File could not be found"

    def test_execution_error(self):
        error = classify("execution error: Can't get window 1. (-1719)", 1)
        assert error.kind is ErrorKind.EXECUTION_ERROR
        assert error.message == "Can't get window 1."
        assert error.details["error_code"] == -1719

    def test_fallback(self):
        error = classify("  something unexpected  ", 2)
        assert error.kind is ErrorKind.EXECUTION_ERROR
        assert error.message == "An unknown error occurred: something unexpected"

    def test_empty_text_falls_back(self):
        error = classify("", 1)
        assert error.kind is ErrorKind.EXECUTION_ERROR
        assert error.message == "An unknown error occurred: "
        assert error.details["stderr"] == ""

    def test_none_text_is_treated_as_empty(self):
        assert classify(None, 1).kind is ErrorKind.EXECUTION_ERROR

    def test_common_details(self):
        error = classify("  execution error: Boom (-5)  \n", 1)
        assert error.details["exit_code"] == 1
        assert error.details["stderr"] == "execution error: Boom (-5)"

    def test_error_code_absent_is_omitted(self):
        assert "error_code" not in classify("execution error: Boom", 1).details

    def test_deterministic(self):
        assert classify(NOT_FOUND_TEXT, 1) == classify(NOT_FOUND_TEXT, 1)

    def test_non_ascii_text(self):
        error = classify("execution error: Fenêtre « Dokument » introuvable ✓", 1)
        assert error.kind is ErrorKind.EXECUTION_ERROR
        assert error.message == "Fenêtre « Dokument » introuvable ✓"
