"""Bounded retry with backoff for timeout failures.

Runs a zero-argument operation returning ``Ok``/``Err`` until it succeeds,
fails with a non-retriable kind, or the attempt budget is used up. Only
failures tagged ``timeout`` are retried; syntax errors, missing apps and
missing permissions will not fix themselves between attempts.

Example usage:
    from macos_control.execution.retry import RetryOrchestrator
    from macos_control.core.config import RetryPolicy

    orchestrator = RetryOrchestrator(emitter=LoggingEmitter())
    result = orchestrator.with_retry(
        lambda: run_script(script, timeout=5000),
        RetryPolicy(max_attempts=5, backoff="linear"),
    )
    if result.is_err():
        print(render(result.error))

State machine for one call::

    Start -> Attempting --Ok--------------------------> Success (retry.stop)
                |  \\--Err(non-timeout) or budget spent-> Exhausted (retry.error)
                \\--Err(timeout), budget left-> Sleeping -> Attempting
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

from macos_control.core.config import BackoffStrategy, RetryPolicy
from macos_control.core.constants import EXPONENTIAL_BACKOFF_BASE_MS, LINEAR_BACKOFF_MS
from macos_control.core.errors.codes import is_retriable, kind_of
from macos_control.core.logging import RetryContext, get_logger, with_context
from macos_control.core.result import Err, Ok, Result

from .telemetry import NullEmitter, RetryEvent, TelemetryEmitter

_logger = get_logger("retry")

T = TypeVar("T")

Operation = Callable[[], "Result[T, Any]"]
AsyncOperation = Callable[[], Awaitable["Result[T, Any]"]]


class CancelSignal(Protocol):
    """Anything with ``is_set()``: threading.Event, asyncio.Event."""

    def is_set(self) -> bool:
        ...


@dataclass(frozen=True)
class RetryCancelled:
    """Outcome returned (inside ``Err``) when a retry loop is cancelled.

    Not a StructuredError and carries no kind, so it is never retried.

    Attributes:
        attempts_made: Attempts completed before cancellation was observed.
        last_error: Failure of the last completed attempt, if any.
    """

    attempts_made: int
    last_error: Any = None

    @property
    def message(self) -> str:
        return f"Retry cancelled after {self.attempts_made} attempt(s)"

    def to_dict(self) -> dict[str, Any]:
        return {"cancelled": True, "attempts_made": self.attempts_made}


def calculate_backoff(attempt: int, strategy: BackoffStrategy | str) -> int:
    """Delay in milliseconds before the attempt following ``attempt``.

    Exponential: 100 * 2^attempt (200, 400, 800, 1600, 3200 for 1..5).
    Linear: constant 1000.

    Raises:
        ValueError: If ``attempt`` < 1 or ``strategy`` is unknown.
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")
    strategy = BackoffStrategy(strategy)
    if strategy is BackoffStrategy.EXPONENTIAL:
        return EXPONENTIAL_BACKOFF_BASE_MS * 2**attempt
    return LINEAR_BACKOFF_MS


def backoff_schedule(policy: RetryPolicy) -> list[int]:
    """Sleep times (ms) a policy uses if every attempt times out."""
    return [calculate_backoff(attempt, policy.backoff) for attempt in range(1, policy.max_attempts)]


class _RetryRun:
    """Per-call bookkeeping: identifiers, metadata and event emission."""

    def __init__(
        self,
        policy: RetryPolicy,
        emitter: TelemetryEmitter,
        operation_name: str | None,
    ) -> None:
        self.policy = policy
        self.emitter = emitter
        self.context = RetryContext(operation=operation_name)
        self.base_metadata: dict[str, Any] = {
            "max_attempts": policy.max_attempts,
            "backoff": policy.backoff.value,
            "retry_id": self.context.retry_id,
        }
        if operation_name is not None:
            self.base_metadata["operation"] = operation_name
        self.logger = _logger.bind(retry_id=self.context.retry_id)

    def start(self) -> None:
        self.emitter.emit(RetryEvent.START.value, {}, dict(self.base_metadata))

    def attempt(self, attempt: int) -> None:
        self.emitter.emit(
            RetryEvent.ATTEMPT.value,
            {"attempt": attempt},
            {**self.base_metadata, "attempt": attempt},
        )

    def sleep(self, attempt: int, delay_ms: int, error: Any) -> None:
        self.logger.info(
            "retry_backoff",
            attempt=attempt,
            max_attempts=self.policy.max_attempts,
            sleep_ms=delay_ms,
            kind=kind_of(error),
        )
        self.emitter.emit(
            RetryEvent.SLEEP.value,
            {"sleep_time": delay_ms},
            {**self.base_metadata, "attempt": attempt, "sleep_time": delay_ms, "error": error},
        )

    def finish(self, result: Result[Any, Any], attempt: int) -> Result[Any, Any]:
        if isinstance(result, Ok):
            if attempt > 1:
                self.logger.info("retry_succeeded", attempts=attempt)
            self.emitter.emit(RetryEvent.STOP.value, {"attempts": attempt}, dict(self.base_metadata))
            return result

        error = result.error
        if is_retriable(error):
            self.logger.warning("retry_exhausted", attempts=attempt, kind=kind_of(error))
        else:
            self.logger.debug("retry_not_retriable", attempts=attempt, kind=kind_of(error))
        self.emitter.emit(
            RetryEvent.ERROR.value,
            {"attempts": attempt},
            {**self.base_metadata, "error": error},
        )
        return result

    def cancel(self, attempts_made: int, last_error: Any) -> Err[RetryCancelled]:
        outcome = RetryCancelled(attempts_made=attempts_made, last_error=last_error)
        self.logger.info("retry_cancelled", attempts=attempts_made)
        self.emitter.emit(
            RetryEvent.ERROR.value,
            {"attempts": attempts_made},
            {**self.base_metadata, "error": outcome, "cancelled": True},
        )
        return Err(outcome)


def _check_result(result: Any) -> Result[Any, Any]:
    if not isinstance(result, (Ok, Err)):
        raise TypeError(
            f"Retry operations must return Ok or Err, got {type(result).__name__}"
        )
    return result


def _is_cancelled(cancel_event: CancelSignal | None) -> bool:
    return cancel_event is not None and cancel_event.is_set()


class RetryOrchestrator:
    """Drives bounded retries of timeout failures.

    Holds no per-call state: one orchestrator can serve any number of
    concurrent ``with_retry`` calls. Each call gets its own ``retry_id``,
    included in every event's metadata and every log line.

    Telemetry is emitted synchronously on the calling path, so an emitter
    observes the exact per-call order ``start, attempt, (sleep, attempt)*,
    stop | error``.

    The orchestrator never classifies, wraps or copies failures: the ``Err``
    returned by the final attempt is returned as-is.
    """

    def __init__(
        self,
        emitter: TelemetryEmitter | None = None,
        *,
        sleep: Callable[[float], None] | None = None,
        async_sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            emitter: Telemetry sink. Defaults to NullEmitter.
            sleep: Blocking sleep taking seconds (threaded path).
                Defaults to time.sleep.
            async_sleep: Awaitable sleep taking seconds (async path).
                Defaults to asyncio.sleep.
        """
        self.emitter: TelemetryEmitter = emitter if emitter is not None else NullEmitter()
        self._sleep = sleep if sleep is not None else time.sleep
        self._async_sleep = async_sleep if async_sleep is not None else asyncio.sleep

    def _next_delay(self, result: Result[Any, Any], attempt: int, policy: RetryPolicy) -> int | None:
        """Backoff delay (ms) if the loop should retry, else None."""
        if isinstance(result, Ok):
            return None
        if is_retriable(result.error) and attempt < policy.max_attempts:
            return calculate_backoff(attempt, policy.backoff)
        return None

    def with_retry(
        self,
        operation: Operation[T],
        policy: RetryPolicy | None = None,
        *,
        cancel_event: CancelSignal | None = None,
        operation_name: str | None = None,
    ) -> Result[T, Any]:
        """Run ``operation`` with retries, blocking the thread during backoff.

        Args:
            operation: Zero-argument callable returning Ok or Err.
            policy: Attempt bound and backoff strategy. Defaults to RetryPolicy().
            cancel_event: Checked before each attempt and before each sleep.
            operation_name: Label included in telemetry metadata and logs.

        Returns:
            The final Ok or Err of the operation, or Err(RetryCancelled).

        Raises:
            TypeError: If the operation returns something other than Ok/Err.
        """
        policy = policy or RetryPolicy()
        run = _RetryRun(policy, self.emitter, operation_name)
        run.start()

        attempt = 1
        last_error: Any = None
        while True:
            if _is_cancelled(cancel_event):
                return run.cancel(attempt - 1, last_error)
            run.attempt(attempt)
            with with_context(run.context.with_attempt(attempt)):
                result = _check_result(operation())

            delay = self._next_delay(result, attempt, policy)
            if delay is None:
                return run.finish(result, attempt)

            last_error = result.error
            if _is_cancelled(cancel_event):
                return run.cancel(attempt, last_error)
            run.sleep(attempt, delay, last_error)
            self._sleep(delay / 1000)
            attempt += 1

    async def with_retry_async(
        self,
        operation: AsyncOperation[T],
        policy: RetryPolicy | None = None,
        *,
        cancel_event: CancelSignal | None = None,
        operation_name: str | None = None,
    ) -> Result[T, Any]:
        """Async variant of :meth:`with_retry`.

        Backoff awaits ``asyncio.sleep`` so other tasks on the loop keep
        running. Event order and return semantics are identical.
        """
        policy = policy or RetryPolicy()
        run = _RetryRun(policy, self.emitter, operation_name)
        run.start()

        attempt = 1
        last_error: Any = None
        while True:
            if _is_cancelled(cancel_event):
                return run.cancel(attempt - 1, last_error)
            run.attempt(attempt)
            with with_context(run.context.with_attempt(attempt)):
                result = _check_result(await operation())

            delay = self._next_delay(result, attempt, policy)
            if delay is None:
                return run.finish(result, attempt)

            last_error = result.error
            if _is_cancelled(cancel_event):
                return run.cancel(attempt, last_error)
            run.sleep(attempt, delay, last_error)
            await self._async_sleep(delay / 1000)
            attempt += 1


def _resolve_policy(policy: RetryPolicy | None, options: dict[str, Any]) -> RetryPolicy:
    if policy is not None and options:
        raise TypeError("Pass either a RetryPolicy or keyword options, not both")
    if policy is not None:
        return policy
    return RetryPolicy.from_options(**options)


def with_retry(
    operation: Operation[T],
    policy: RetryPolicy | None = None,
    *,
    emitter: TelemetryEmitter | None = None,
    cancel_event: CancelSignal | None = None,
    **options: Any,
) -> Result[T, Any]:
    """Convenience wrapper: ``with_retry(op, max_attempts=5, backoff="linear")``."""
    return RetryOrchestrator(emitter).with_retry(
        operation, _resolve_policy(policy, options), cancel_event=cancel_event
    )


async def with_retry_async(
    operation: AsyncOperation[T],
    policy: RetryPolicy | None = None,
    *,
    emitter: TelemetryEmitter | None = None,
    cancel_event: CancelSignal | None = None,
    **options: Any,
) -> Result[T, Any]:
    """Async convenience wrapper mirroring :func:`with_retry`."""
    return await RetryOrchestrator(emitter).with_retry_async(
        operation, _resolve_policy(policy, options), cancel_event=cancel_event
    )


__all__ = [
    "CancelSignal",
    "RetryCancelled",
    "RetryOrchestrator",
    "backoff_schedule",
    "calculate_backoff",
    "with_retry",
    "with_retry_async",
]
