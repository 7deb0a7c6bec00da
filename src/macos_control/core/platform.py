"""Platform detection and validation.

Everything here is a thin wrapper over the interpreter and PATH so callers can
fail early with an ``unsupported_platform`` error instead of a confusing
osascript failure on Linux or Windows.

Example:
    result = validate_macos()
    if result.is_err():
        print(render(result.error))

    if version_at_least((13, 0)):
        ...
"""

from __future__ import annotations

import platform
import re
import shutil
import subprocess
import sys

from macos_control.core.errors.models import StructuredError
from macos_control.core.logging import get_logger
from macos_control.core.result import Err, Ok, Result

_logger = get_logger("platform")

Version = tuple[int, int, int]

OSASCRIPT = "osascript"
SW_VERS_TIMEOUT_SECONDS = 10

_PRODUCT_VERSION_PREFIX = re.compile(r"^ProductVersion:\s*")


# =============================================================================
# Detection
# =============================================================================


def os_type() -> tuple[str, str]:
    """Return ``(family, name)``, e.g. ``("unix", "darwin")`` or ``("unix", "linux")``."""
    family = "win32" if sys.platform == "win32" else "unix"
    return family, platform.system().lower()


def is_macos() -> bool:
    return os_type() == ("unix", "darwin")


def osascript_available() -> bool:
    """Whether ``osascript`` is on PATH and executable."""
    return shutil.which(OSASCRIPT) is not None


def _platform_name() -> str:
    return os_type()[1] or "unknown"


# =============================================================================
# Validation (Result-returning)
# =============================================================================


def validate_macos() -> Result[None, StructuredError]:
    """``Ok(None)`` on macOS, else an ``unsupported_platform`` error."""
    if is_macos():
        return Ok(None)
    name = _platform_name()
    return Err(StructuredError.unsupported_platform(
        "macOS is required: AppleScript and osascript are only available on darwin",
        platform=name,
    ))


def validate_osascript() -> Result[None, StructuredError]:
    """``Ok(None)`` if osascript can be found.

    Off macOS the failure is ``unsupported_platform``; on macOS a missing
    binary is ``not_found`` since it ships with the base system.
    """
    if osascript_available():
        return Ok(None)
    if not is_macos():
        return Err(StructuredError.unsupported_platform(
            "osascript is not available on this platform",
            platform=_platform_name(),
        ))
    return Err(StructuredError.not_found(
        "The osascript command was not found on PATH",
        file=OSASCRIPT,
    ))


# =============================================================================
# Version queries
# =============================================================================


def macos_version() -> Result[str, StructuredError]:
    """Current macOS version string (e.g. ``"14.0"``) via ``sw_vers -productVersion``."""
    if not is_macos():
        return Err(StructuredError.unsupported_platform(
            "Cannot get macOS version: not running on macOS",
            platform=_platform_name(),
        ))

    try:
        completed = subprocess.run(
            ["sw_vers", "-productVersion"],
            capture_output=True,
            text=True,
            timeout=SW_VERS_TIMEOUT_SECONDS,
        )
    except FileNotFoundError:
        return Err(StructuredError.not_found(
            "Failed to determine macOS version: sw_vers not found",
            file="sw_vers",
        ))
    except subprocess.TimeoutExpired:
        return Err(StructuredError.timeout(
            "Failed to determine macOS version: sw_vers timed out",
            timeout=SW_VERS_TIMEOUT_SECONDS * 1000,
        ))

    if completed.returncode != 0:
        _logger.warning("sw_vers_failed", exit_code=completed.returncode)
        return Err(StructuredError.execution_error(
            "Failed to determine macOS version",
            exit_code=completed.returncode,
            stderr=completed.stderr.strip() or None,
        ))
    return Ok(completed.stdout.strip())


def parse_macos_version(text: str) -> Version:
    """Parse ``"14"``, ``"13.5.1"`` or ``"ProductVersion: 14.0"`` into a 3-tuple.

    Raises:
        ValueError: If the text is not 1 to 3 dot-separated integers.
    """
    cleaned = _PRODUCT_VERSION_PREFIX.sub("", text.strip())
    parts = cleaned.split(".")
    if not 1 <= len(parts) <= 3 or not all(part.isdigit() for part in parts):
        raise ValueError(f"Invalid version format: {text!r}")
    numbers = [int(part) for part in parts]
    numbers.extend([0] * (3 - len(numbers)))
    return numbers[0], numbers[1], numbers[2]


def _normalize(version: tuple[int, ...]) -> Version:
    if not 1 <= len(version) <= 3:
        raise ValueError(f"Version must have 1 to 3 components, got {version!r}")
    padded = tuple(version) + (0,) * (3 - len(version))
    return padded[0], padded[1], padded[2]


def compare_version(first: tuple[int, ...], second: tuple[int, ...]) -> int:
    """Return -1, 0 or 1. ``(14,)`` and ``(14, 0)`` compare equal to ``(14, 0, 0)``."""
    a, b = _normalize(first), _normalize(second)
    if a > b:
        return 1
    if a < b:
        return -1
    return 0


def version_at_least(required: tuple[int, ...]) -> bool:
    """Whether this is macOS at ``required`` or later. False off macOS."""
    result = macos_version()
    if result.is_err():
        return False
    try:
        current = parse_macos_version(result.value)
    except ValueError:
        _logger.debug("unparseable_macos_version", version=result.value)
        return False
    return compare_version(current, required) >= 0


__all__ = [
    "Version",
    "compare_version",
    "is_macos",
    "macos_version",
    "os_type",
    "osascript_available",
    "parse_macos_version",
    "validate_macos",
    "validate_osascript",
    "version_at_least",
]
