"""Global constants for macos_control.

Centralizes magic numbers used throughout the codebase,
making them discoverable, consistent, and easy to modify.
"""

# =============================================================================
# Retry / Backoff (milliseconds)
# =============================================================================

DEFAULT_MAX_ATTEMPTS = 3
"""Attempts performed by with_retry when no policy is given."""

EXPONENTIAL_BACKOFF_BASE_MS = 100
"""Exponential backoff is EXPONENTIAL_BACKOFF_BASE_MS * 2^attempt."""

LINEAR_BACKOFF_MS = 1000
"""Constant delay used by the linear strategy."""

# =============================================================================
# Text Truncation Limits (characters)
# =============================================================================

SCRIPT_PREVIEW_CHARS = 100
"""Maximum characters of a script included in invocation telemetry metadata."""
