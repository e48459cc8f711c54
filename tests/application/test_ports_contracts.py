from __future__ import annotations

import io
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import BinaryIO

from lib_log_rolling.adapters import (
    ExclusiveLock,
    LocalClock,
    MinimalLock,
    OnlyOnceErrorHandler,
    PatternLayout,
    QueueAdapter,
    RollingFileAppender,
    UniversalClock,
)
from lib_log_rolling.application.ports import (
    AppenderPort,
    ClockPort,
    ErrorHandlerPort,
    LayoutPort,
    LockingModelPort,
    QueuePort,
)
from lib_log_rolling.domain.events import LogEvent
from lib_log_rolling.domain.levels import LogLevel
from lib_log_rolling.domain.pattern import SupportsWrite
from tests.conftest import RecordingErrorHandler
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


class _ListAppender:
    name = "list"

    def __init__(self) -> None:
        self.events: list[LogEvent] = []

    def append(self, event: LogEvent) -> None:
        self.events.append(event)

    def append_many(self, events: Iterable[LogEvent]) -> None:
        self.events.extend(events)

    def close(self) -> None:
        return None


class _UpperLayout:
    header = None
    footer = None
    ignores_exception = True

    def format(self, writer: SupportsWrite, event: LogEvent) -> None:
        writer.write(event.message.upper())


class _MemoryLock:
    def __init__(self) -> None:
        self.stream = io.BytesIO()

    def open_file(self, filename: str, append: bool, encoding: str) -> None:
        return None

    def close_file(self) -> None:
        return None

    def acquire(self) -> BinaryIO | None:
        return self.stream

    def release(self) -> None:
        return None


class _FixedClock:
    def now(self) -> datetime:
        return datetime(2025, 1, 1, tzinfo=timezone.utc)


def test_fakes_satisfy_protocols() -> None:
    assert isinstance(_ListAppender(), AppenderPort)
    assert isinstance(_UpperLayout(), LayoutPort)
    assert isinstance(_MemoryLock(), LockingModelPort)
    assert isinstance(_FixedClock(), ClockPort)
    assert isinstance(RecordingErrorHandler(), ErrorHandlerPort)


def test_adapters_satisfy_protocols() -> None:
    assert isinstance(RollingFileAppender(), AppenderPort)
    assert isinstance(PatternLayout(), LayoutPort)
    assert isinstance(ExclusiveLock(), LockingModelPort)
    assert isinstance(MinimalLock(), LockingModelPort)
    assert isinstance(LocalClock(), ClockPort)
    assert isinstance(UniversalClock(), ClockPort)
    assert isinstance(OnlyOnceErrorHandler(), ErrorHandlerPort)
    assert isinstance(QueueAdapter(), QueuePort)


def test_layout_fake_renders_through_writer() -> None:
    buffer = io.StringIO()
    event = LogEvent(_FixedClock().now(), "svc", LogLevel.INFO, "quiet")
    _UpperLayout().format(buffer, event)
    assert buffer.getvalue() == "QUIET"
