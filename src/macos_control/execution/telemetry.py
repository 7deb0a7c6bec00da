"""Telemetry events and emitters for retry instrumentation.

Provides:
- RetryEvent / InvocationEvent enums naming the lifecycle events
- TelemetryEmitter protocol: a synchronous observer called on the same call
  stack as the code emitting the event
- Stock emitters: NullEmitter, LoggingEmitter, RecordingEmitter,
  CallbackEmitter and CompositeEmitter

Emitters are passed to the code that emits (e.g. RetryOrchestrator) instead of
being registered globally, so every retry loop decides who observes it.

Event order for one ``with_retry`` call::

    retry.start -> retry.attempt -> (retry.sleep -> retry.attempt)* -> retry.stop | retry.error
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

from macos_control.core.logging import ControlLogger, get_logger

_logger = get_logger("telemetry")


class RetryEvent(str, Enum):
    """Events emitted by the retry orchestrator."""

    START = "retry.start"
    """Once per with_retry call. Metadata: max_attempts, backoff, retry_id."""

    ATTEMPT = "retry.attempt"
    """Once per invocation of the operation. Measurements: attempt."""

    SLEEP = "retry.sleep"
    """Before each backoff wait. Measurements: sleep_time (ms)."""

    STOP = "retry.stop"
    """Terminal: the operation succeeded."""

    ERROR = "retry.error"
    """Terminal: attempts exhausted, non-retriable failure, or cancellation."""


TERMINAL_RETRY_EVENTS: frozenset[RetryEvent] = frozenset({RetryEvent.STOP, RetryEvent.ERROR})


class InvocationEvent(str, Enum):
    """Events emitted by the invocation boundary around a raw tool call.

    Measurements: ``script_length``, ``duration`` (on stop/exception).
    Metadata: ``command``, ``script_preview``, ``timeout``, ``result_type``,
    and ``output_length`` (stop) or ``error`` (exception).
    """

    START = "invocation.start"
    STOP = "invocation.stop"
    EXCEPTION = "invocation.exception"


@dataclass(frozen=True)
class TelemetryRecord:
    """One emitted event with read-only measurement and metadata maps."""

    event: str
    measurements: Mapping[str, Any] = field(default_factory=dict)
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "event", _event_name(self.event))
        object.__setattr__(self, "measurements", MappingProxyType(dict(self.measurements)))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))


def _event_name(event: str) -> str:
    return event.value if isinstance(event, Enum) else str(event)


@runtime_checkable
class TelemetryEmitter(Protocol):
    """Synchronous event sink.

    ``emit`` is called on the emitting call path; implementations should
    return quickly and must not defer delivery if observers rely on the
    per-call event order.
    """

    def emit(
        self,
        event: str,
        measurements: Mapping[str, Any],
        metadata: Mapping[str, Any],
    ) -> None:
        ...


class NullEmitter:
    """Discards every event."""

    def emit(
        self,
        event: str,
        measurements: Mapping[str, Any],
        metadata: Mapping[str, Any],
    ) -> None:
        return None


class LoggingEmitter:
    """Writes events to structlog.

    Terminal error events log at WARNING, everything else at DEBUG.
    """

    def __init__(self, logger: ControlLogger | None = None) -> None:
        self._logger = logger or get_logger("telemetry")

    def emit(
        self,
        event: str,
        measurements: Mapping[str, Any],
        metadata: Mapping[str, Any],
    ) -> None:
        name = _event_name(event)
        fields = {**metadata, **measurements}
        error = fields.get("error")
        if hasattr(error, "to_dict"):
            fields["error"] = error.to_dict()
        if name in (RetryEvent.ERROR.value, InvocationEvent.EXCEPTION.value):
            self._logger.warning(name, **fields)
        else:
            self._logger.debug(name, **fields)


class RecordingEmitter:
    """Keeps every event in memory, in emission order.

    Useful for tests and for callers that want to inspect a retry loop after
    it finished.
    """

    def __init__(self) -> None:
        self.records: list[TelemetryRecord] = []

    def emit(
        self,
        event: str,
        measurements: Mapping[str, Any],
        metadata: Mapping[str, Any],
    ) -> None:
        self.records.append(TelemetryRecord(event, measurements, metadata))

    @property
    def names(self) -> list[str]:
        """Event names in emission order."""
        return [record.event for record in self.records]

    def of(self, event: str) -> list[TelemetryRecord]:
        """All records for ``event``."""
        name = _event_name(event)
        return [record for record in self.records if record.event == name]

    def clear(self) -> None:
        self.records.clear()


TelemetryCallback = Callable[[str, Mapping[str, Any], Mapping[str, Any]], Any]


class CallbackEmitter:
    """Routes events to callbacks registered per event name.

    Usage::

        emitter = CallbackEmitter()
        emitter.on(RetryEvent.SLEEP, lambda event, measurements, metadata: ...)
        emitter.on("*", audit)  # every event
    """

    WILDCARD = "*"

    def __init__(self) -> None:
        self._handlers: dict[str, list[TelemetryCallback]] = {}

    def on(self, event: str, callback: TelemetryCallback) -> None:
        """Register ``callback`` for ``event`` (or ``"*"`` for all events)."""
        self._handlers.setdefault(_event_name(event), []).append(callback)

    def off(self, event: str, callback: TelemetryCallback) -> bool:
        """Remove a callback. Returns True if it was registered."""
        handlers = self._handlers.get(_event_name(event), [])
        if callback in handlers:
            handlers.remove(callback)
            return True
        return False

    def emit(
        self,
        event: str,
        measurements: Mapping[str, Any],
        metadata: Mapping[str, Any],
    ) -> None:
        name = _event_name(event)
        for callback in [*self._handlers.get(name, []), *self._handlers.get(self.WILDCARD, [])]:
            callback(name, measurements, metadata)


class CompositeEmitter:
    """Fans events out to several emitters in registration order.

    A failing emitter is logged and skipped so one broken observer cannot
    break the retry loop or starve the observers after it.
    """

    def __init__(self, *emitters: TelemetryEmitter) -> None:
        self._emitters: list[TelemetryEmitter] = list(emitters)

    def add(self, emitter: TelemetryEmitter) -> None:
        self._emitters.append(emitter)

    @property
    def emitter_count(self) -> int:
        return len(self._emitters)

    def emit(
        self,
        event: str,
        measurements: Mapping[str, Any],
        metadata: Mapping[str, Any],
    ) -> None:
        for emitter in self._emitters:
            try:
                emitter.emit(event, measurements, metadata)
            except Exception:
                _logger.exception(
                    "telemetry.emitter_error",
                    emitter=type(emitter).__name__,
                    event_type=_event_name(event),
                )


__all__ = [
    "CallbackEmitter",
    "CompositeEmitter",
    "InvocationEvent",
    "LoggingEmitter",
    "NullEmitter",
    "RecordingEmitter",
    "RetryEvent",
    "TERMINAL_RETRY_EVENTS",
    "TelemetryEmitter",
    "TelemetryRecord",
]
