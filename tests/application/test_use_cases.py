from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any

from lib_log_rolling.application.use_cases import create_process_log_event, create_shutdown
from lib_log_rolling.domain.events import LogEvent
from lib_log_rolling.domain.levels import LogLevel
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def record(self, name: str, payload: dict[str, Any]) -> None:
        self.calls.append((name, payload))


class _CollectingAppender:
    def __init__(self, name: str, log: list[str] | None = None) -> None:
        self.name = name
        self.events: list[LogEvent] = []
        self.closed = False
        self._log = log

    def append(self, event: LogEvent) -> None:
        self.events.append(event)
        if self._log is not None:
            self._log.append(self.name)

    def append_many(self, events: Iterable[LogEvent]) -> None:
        for event in events:
            self.append(event)

    def close(self) -> None:
        self.closed = True


class _ExplodingAppender(_CollectingAppender):
    def append(self, event: LogEvent) -> None:
        raise RuntimeError("destination gone")

    def close(self) -> None:
        raise OSError("cannot close")


class _Clock:
    def __init__(self, moment: datetime) -> None:
        self.moment = moment

    def now(self) -> datetime:
        return self.moment


def test_process_builds_event_and_delivers_in_order() -> None:
    order: list[str] = []
    first = _CollectingAppender("first", order)
    second = _CollectingAppender("second", order)
    process = create_process_log_event(
        appenders=[first, second],
        clock=_Clock(datetime(2025, 3, 7, 12, 0, tzinfo=timezone.utc)),
    )

    result = process(
        logger_name="svc.api",
        level=LogLevel.WARN,
        message="careful",
        properties={"request": "r1"},
        thread_name="main",
        process_id=42,
    )

    assert result == {"ok": True, "delivered": 2}
    assert order == ["first", "second"]
    event = first.events[0]
    assert event is second.events[0]
    assert (event.logger_name, event.level, event.message) == ("svc.api", LogLevel.WARN, "careful")
    assert event.properties == {"request": "r1"}
    assert event.thread_name == "main"
    assert event.process_id == 42
    assert event.timestamp == datetime(2025, 3, 7, 12, 0, tzinfo=timezone.utc)


def test_process_interprets_naive_clock_values_as_local_time() -> None:
    naive = datetime(2025, 3, 7, 12, 0)
    sink = _CollectingAppender("sink")
    process = create_process_log_event(appenders=[sink], clock=_Clock(naive))

    process(logger_name="svc", level=LogLevel.INFO, message="hi")

    assert sink.events[0].timestamp == naive.astimezone().astimezone(timezone.utc)
    assert sink.events[0].timestamp.utcoffset() == timedelta(0)


def test_process_isolates_failing_appender_and_reports_it() -> None:
    recorder = _Recorder()
    healthy = _CollectingAppender("healthy")
    process = create_process_log_event(
        appenders=[_ExplodingAppender("broken"), healthy],
        clock=_Clock(datetime(2025, 3, 7, tzinfo=timezone.utc)),
        diagnostic=recorder.record,
    )

    result = process(logger_name="svc", level=LogLevel.ERROR, message="boom")

    assert result == {"ok": False, "reason": "adapter_error", "failed": ["broken"]}
    assert [event.message for event in healthy.events] == ["boom"]
    assert recorder.calls[0][0] == "appender_error"
    assert recorder.calls[0][1]["appender"] == "broken"


def test_process_emits_event_processed_diagnostic() -> None:
    recorder = _Recorder()
    process = create_process_log_event(
        appenders=[_CollectingAppender("sink")],
        clock=_Clock(datetime(2025, 3, 7, tzinfo=timezone.utc)),
        diagnostic=recorder.record,
    )

    process(logger_name="svc", level=LogLevel.DEBUG, message="trace")

    assert recorder.calls == [("event_processed", {"logger": "svc", "level": "DEBUG"})]


def test_failing_diagnostic_hook_does_not_break_processing() -> None:
    def broken_hook(name: str, payload: dict[str, Any]) -> None:
        raise RuntimeError("hook failure")

    sink = _CollectingAppender("sink")
    process = create_process_log_event(
        appenders=[sink],
        clock=_Clock(datetime(2025, 3, 7, tzinfo=timezone.utc)),
        diagnostic=broken_hook,
    )

    assert process(logger_name="svc", level=LogLevel.INFO, message="hi")["ok"] is True
    assert len(sink.events) == 1


def test_dispatch_forwards_prebuilt_event() -> None:
    sink = _CollectingAppender("sink")
    process = create_process_log_event(appenders=[sink], clock=_Clock(datetime(2025, 3, 7, tzinfo=timezone.utc)))
    event = LogEvent(datetime(2024, 1, 1, tzinfo=timezone.utc), "svc", LogLevel.INFO, "prebuilt")

    assert process.dispatch(event) == {"ok": True, "delivered": 1}
    assert sink.events == [event]


def test_shutdown_closes_every_appender_and_collects_failures() -> None:
    first = _CollectingAppender("first")
    broken = _ExplodingAppender("broken")
    last = _CollectingAppender("last")

    failures = create_shutdown(appenders=[first, broken, last])()

    assert failures == ["broken"]
    assert first.closed and last.closed
