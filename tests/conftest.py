"""Pytest fixtures for macos_control tests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator

import pytest
import structlog

from macos_control.cli import helpers as cli_helpers
from macos_control.core.errors.models import StructuredError
from macos_control.core.result import Result


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None, None, None]:
    """Reset structlog, root handlers and CLI logging options around each test."""
    cli_helpers.reset_logging_state()
    structlog.reset_defaults()

    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level
    for handler in original_handlers:
        root_logger.removeHandler(handler)

    yield

    cli_helpers.reset_logging_state()
    structlog.reset_defaults()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in original_handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(original_level)


class RecordingSleep:
    """Stand-in for time.sleep that records requested delays (seconds)."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    @property
    def milliseconds(self) -> list[int]:
        return [round(seconds * 1000) for seconds in self.calls]


class RecordingAsyncSleep(RecordingSleep):
    """Awaitable stand-in for asyncio.sleep."""

    async def __call__(self, seconds: float) -> None:  # type: ignore[override]
        self.calls.append(seconds)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def recording_async_sleep() -> RecordingAsyncSleep:
    return RecordingAsyncSleep()


class ScriptedOperation:
    """Zero-argument operation returning pre-scripted results in order.

    The last result repeats once the script runs out.
    """

    def __init__(self, *results: Result[str, StructuredError]) -> None:
        self._results = list(results)
        self.calls = 0

    def _next(self) -> Result[str, StructuredError]:
        index = min(self.calls, len(self._results) - 1)
        self.calls += 1
        return self._results[index]

    def __call__(self) -> Result[str, StructuredError]:
        return self._next()

    async def run_async(self) -> Result[str, StructuredError]:
        return self._next()


@pytest.fixture
def timeout_error() -> StructuredError:
    return StructuredError.timeout("Script execution timed out", timeout=5000)


@pytest.fixture
def permission_error() -> StructuredError:
    return StructuredError.permission_denied("Not authorized to send Apple events")


@pytest.fixture
def scripted() -> Callable[..., ScriptedOperation]:
    """Factory: ``scripted(Err(...), Ok("done"))``."""
    return ScriptedOperation
