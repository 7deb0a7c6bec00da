"""Tests for telemetry events and emitters."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from macos_control.core.errors import StructuredError
from macos_control.execution.telemetry import (
    TERMINAL_RETRY_EVENTS,
    CallbackEmitter,
    CompositeEmitter,
    InvocationEvent,
    LoggingEmitter,
    NullEmitter,
    RecordingEmitter,
    RetryEvent,
    TelemetryEmitter,
    TelemetryRecord,
)


class TestEventNames:
    """Tests for event name enums."""

    def test_retry_event_names(self):
        assert [event.value for event in RetryEvent] == [
            "retry.start",
            "retry.attempt",
            "retry.sleep",
            "retry.stop",
            "retry.error",
        ]

    def test_terminal_events(self):
        assert TERMINAL_RETRY_EVENTS == {RetryEvent.STOP, RetryEvent.ERROR}

    def test_invocation_event_names(self):
        assert [event.value for event in InvocationEvent] == [
            "invocation.start",
            "invocation.stop",
            "invocation.exception",
        ]


class TestEmitterProtocol:
    """All stock emitters satisfy TelemetryEmitter."""

    @pytest.mark.parametrize(
        "emitter",
        [NullEmitter(), LoggingEmitter(), RecordingEmitter(), CallbackEmitter(), CompositeEmitter()],
        ids=["null", "logging", "recording", "callback", "composite"],
    )
    def test_is_telemetry_emitter(self, emitter):
        assert isinstance(emitter, TelemetryEmitter)


class TestTelemetryRecord:
    def test_enum_event_is_normalized(self):
        record = TelemetryRecord(RetryEvent.SLEEP, {"sleep_time": 200}, {})
        assert record.event == "retry.sleep"

    def test_maps_are_snapshots(self):
        measurements = {"attempt": 1}
        record = TelemetryRecord("retry.attempt", measurements, {})
        measurements["attempt"] = 2
        assert record.measurements["attempt"] == 1
        with pytest.raises(TypeError):
            record.metadata["x"] = 1  # type: ignore[index]


class TestRecordingEmitter:
    def test_records_in_order(self):
        emitter = RecordingEmitter()
        emitter.emit("retry.start", {}, {"max_attempts": 3})
        emitter.emit(RetryEvent.ATTEMPT, {"attempt": 1}, {})

        assert emitter.names == ["retry.start", "retry.attempt"]
        assert emitter.of(RetryEvent.ATTEMPT)[0].measurements["attempt"] == 1

    def test_clear(self):
        emitter = RecordingEmitter()
        emitter.emit("retry.start", {}, {})
        emitter.clear()
        assert emitter.records == []


class TestCallbackEmitter:
    def test_routes_by_event_name(self):
        emitter = CallbackEmitter()
        sleeps = []
        emitter.on(RetryEvent.SLEEP, lambda event, measurements, metadata: sleeps.append(measurements))

        emitter.emit("retry.attempt", {"attempt": 1}, {})
        emitter.emit("retry.sleep", {"sleep_time": 200}, {})

        assert sleeps == [{"sleep_time": 200}]

    def test_wildcard_receives_everything(self):
        emitter = CallbackEmitter()
        seen = []
        emitter.on("*", lambda event, measurements, metadata: seen.append(event))

        emitter.emit(RetryEvent.START, {}, {})
        emitter.emit("retry.stop", {}, {})

        assert seen == ["retry.start", "retry.stop"]

    def test_off(self):
        emitter = CallbackEmitter()
        seen = []

        def callback(event, measurements, metadata):
            seen.append(event)

        emitter.on("retry.start", callback)
        assert emitter.off("retry.start", callback) is True
        assert emitter.off("retry.start", callback) is False
        emitter.emit("retry.start", {}, {})
        assert seen == []


class TestCompositeEmitter:
    def test_fans_out_in_order(self):
        first, second = RecordingEmitter(), RecordingEmitter()
        composite = CompositeEmitter(first)
        composite.add(second)

        composite.emit("retry.start", {}, {})

        assert composite.emitter_count == 2
        assert first.names == second.names == ["retry.start"]

    def test_failing_emitter_is_logged_and_skipped(self):
        class Broken:
            def emit(self, event, measurements, metadata):
                raise RuntimeError("observer down")

        recorder = RecordingEmitter()
        composite = CompositeEmitter(Broken(), recorder)

        with capture_logs() as logs:
            composite.emit("retry.attempt", {"attempt": 1}, {})

        assert recorder.names == ["retry.attempt"]
        failure = next(entry for entry in logs if entry["event"] == "telemetry.emitter_error")
        assert failure["emitter"] == "Broken"
        assert failure["event_type"] == "retry.attempt"
        assert failure["log_level"] == "error"
        assert failure["exc_info"] is True


class TestLoggingEmitter:
    def test_error_events_log_warning(self):
        error = StructuredError.timeout("slow", timeout=100)
        with capture_logs() as logs:
            LoggingEmitter().emit("retry.error", {"attempts": 3}, {"error": error, "max_attempts": 3})

        entry = logs[0]
        assert entry["event"] == "retry.error"
        assert entry["log_level"] == "warning"
        assert entry["attempts"] == 3
        assert entry["error"] == {"kind": "timeout", "message": "slow", "details": {"timeout": 100}}

    def test_other_events_log_debug(self):
        with capture_logs() as logs:
            LoggingEmitter().emit(RetryEvent.SLEEP, {"sleep_time": 200}, {"attempt": 1})

        assert logs[0]["event"] == "retry.sleep"
        assert logs[0]["log_level"] == "debug"
        assert logs[0]["sleep_time"] == 200
