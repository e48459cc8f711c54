"""Converters rendering fields of a :class:`LogEvent`.

Contents
--------
* One converter per ``%level``/``%message``/``%logger``/... directive.
* :data:`EVENT_CONVERTERS` – registrations layered over the string converters
  by :class:`lib_log_rolling.adapters.pattern.layout.PatternLayout`.
"""

from __future__ import annotations

from typing import Any

from lib_log_rolling.domain.date_format import format_date, resolve_pattern
from lib_log_rolling.domain.events import LogEvent
from lib_log_rolling.domain.pattern import ConverterFactory, NewLineConverter, PatternConverter, SupportsWrite

from .. import diagnostics
from .string_converters import write_properties


class EventConverter(PatternConverter):
    """Base class for converters that require a :class:`LogEvent` state."""

    def convert(self, writer: SupportsWrite, state: Any) -> None:
        if isinstance(state, LogEvent):
            self.convert_event(writer, state)

    def convert_event(self, writer: SupportsWrite, event: LogEvent) -> None:
        raise NotImplementedError


class LevelConverter(EventConverter):
    def convert_event(self, writer: SupportsWrite, event: LogEvent) -> None:
        writer.write(event.level.name)


class MessageConverter(EventConverter):
    def convert_event(self, writer: SupportsWrite, event: LogEvent) -> None:
        writer.write(event.message)


class LoggerConverter(EventConverter):
    """Logger name; ``%logger{2}`` keeps the last two dotted components."""

    keep_end_on_truncate = True
    precision = 0

    def activate_options(self) -> None:
        if not self.option:
            return
        try:
            precision = int(self.option.strip())
        except ValueError:
            diagnostics.warn("LoggerConverter: precision option %r is not an integer", self.option)
            return
        if precision <= 0:
            diagnostics.warn("LoggerConverter: precision option %r must be positive", self.option)
            return
        self.precision = precision

    def convert_event(self, writer: SupportsWrite, event: LogEvent) -> None:
        name = event.logger_name
        if self.precision > 0:
            name = ".".join(name.split(".")[-self.precision :])
        writer.write(name)


class EventDateConverter(EventConverter):
    """Event timestamp in local time."""

    date_pattern: str | None = None

    def activate_options(self) -> None:
        self.date_pattern = resolve_pattern(self.option)

    def convert_event(self, writer: SupportsWrite, event: LogEvent) -> None:
        writer.write(format_date(event.timestamp.astimezone(), self.date_pattern or resolve_pattern(self.option)))


class EventUtcDateConverter(EventDateConverter):
    def convert_event(self, writer: SupportsWrite, event: LogEvent) -> None:
        writer.write(format_date(event.timestamp, self.date_pattern or resolve_pattern(self.option)))


class ExceptionConverter(EventConverter):
    """Captured exception text; layouts containing it render ``exc_info`` themselves."""

    def convert_event(self, writer: SupportsWrite, event: LogEvent) -> None:
        if event.exc_info:
            writer.write(event.exc_info)


class ThreadConverter(EventConverter):
    def convert_event(self, writer: SupportsWrite, event: LogEvent) -> None:
        writer.write(event.thread_name or "")


class HostnameConverter(EventConverter):
    def convert_event(self, writer: SupportsWrite, event: LogEvent) -> None:
        writer.write(event.hostname or "")


class EventUserNameConverter(EventConverter):
    def convert_event(self, writer: SupportsWrite, event: LogEvent) -> None:
        writer.write(event.user_name or "")


class EventPropertyConverter(EventConverter):
    def convert_event(self, writer: SupportsWrite, event: LogEvent) -> None:
        write_properties(writer, event.properties, self.option)


EVENT_CONVERTERS: dict[str, ConverterFactory] = {
    "c": LoggerConverter,
    "d": EventDateConverter,
    "date": EventDateConverter,
    "exception": ExceptionConverter,
    "hostname": HostnameConverter,
    "level": LevelConverter,
    "logger": LoggerConverter,
    "m": MessageConverter,
    "message": MessageConverter,
    "n": NewLineConverter,
    "p": LevelConverter,
    "P": EventPropertyConverter,
    "property": EventPropertyConverter,
    "t": ThreadConverter,
    "thread": ThreadConverter,
    "username": EventUserNameConverter,
    "utcdate": EventUtcDateConverter,
    "w": EventUserNameConverter,
    "X": EventPropertyConverter,
}


__all__ = [
    "EVENT_CONVERTERS",
    "EventConverter",
    "EventDateConverter",
    "EventPropertyConverter",
    "EventUserNameConverter",
    "EventUtcDateConverter",
    "ExceptionConverter",
    "HostnameConverter",
    "LevelConverter",
    "LoggerConverter",
    "MessageConverter",
    "ThreadConverter",
]
