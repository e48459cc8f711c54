"""Shared fixtures: deterministic clock, event factory and error recording."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone
from io import StringIO
from typing import Any

import pytest
from rich.console import Console

from lib_log_rolling.adapters import diagnostics
from lib_log_rolling.domain.errors import ErrorCode
from lib_log_rolling.domain.events import LogEvent
from lib_log_rolling.domain.levels import LogLevel


class FakeClock:
    """Naive local clock that only moves when a test says so."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **delta: float) -> datetime:
        self.current = self.current + timedelta(**delta)
        return self.current

    def set(self, moment: datetime) -> None:
        self.current = moment


class RecordingErrorHandler:
    """Error handler that keeps every report for assertions."""

    def __init__(self) -> None:
        self.errors: list[tuple[str, BaseException | None, ErrorCode]] = []

    def error(self, message: str, exc: BaseException | None = None, code: ErrorCode = ErrorCode.GENERIC_FAILURE) -> None:
        self.errors.append((message, exc, code))

    @property
    def codes(self) -> list[ErrorCode]:
        return [code for _, _, code in self.errors]


EventFactory = Callable[..., LogEvent]


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock(datetime(2025, 3, 7, 10, 0, 0))


@pytest.fixture
def error_recorder() -> RecordingErrorHandler:
    return RecordingErrorHandler()


@pytest.fixture
def make_event() -> EventFactory:
    def factory(
        message: str = "hello",
        *,
        level: LogLevel = LogLevel.INFO,
        logger_name: str = "tests",
        timestamp: datetime | None = None,
        **fields: Any,
    ) -> LogEvent:
        return LogEvent(
            timestamp=timestamp or datetime(2025, 3, 7, 10, 0, 0, tzinfo=timezone.utc),
            logger_name=logger_name,
            level=level,
            message=message,
            **fields,
        )

    return factory


@pytest.fixture(autouse=True)
def _reset_internal_debugging() -> Iterator[None]:
    diagnostics.reset_internal_debugging()
    yield
    diagnostics.reset_internal_debugging()


@pytest.fixture
def record_console() -> Console:
    return Console(file=StringIO(), record=True, width=120, color_system="truecolor", force_terminal=True)
