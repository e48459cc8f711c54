"""Appender that buffers events and forwards them in batches.

Purpose
-------
Hold the most recent events in a :class:`CyclicBuffer` and forward them to the
attached appenders either when the buffer fills (normal mode) or when a
triggering event arrives (lossy mode: "write the last N events leading up to
an error, drop the rest").

Contents
--------
* :func:`level_evaluator` – trigger on events at or above a level.
* :class:`BufferingForwardingAppender`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from lib_log_rolling.application.ports.appender import AppenderPort
from lib_log_rolling.application.ports.error_handler import ErrorHandlerPort
from lib_log_rolling.domain.cyclic_buffer import CyclicBuffer
from lib_log_rolling.domain.events import LogEvent
from lib_log_rolling.domain.levels import LogLevel

from .appender_base import AppenderSkeleton

Evaluator = Callable[[LogEvent], bool]

DEFAULT_BUFFER_SIZE = 512


def level_evaluator(threshold: LogLevel) -> Evaluator:
    """Return an evaluator triggering on events at least as severe as ``threshold``."""

    def evaluate(event: LogEvent) -> bool:
        return event.level.is_at_least(threshold)

    return evaluate


class BufferingForwardingAppender(AppenderSkeleton):
    """Buffer events and forward them to ``appenders``.

    Parameters
    ----------
    appenders:
        Destinations receiving the buffered batches, in order.
    buffer_size:
        Capacity of the cyclic buffer; ``1`` or less disables buffering.
    lossy:
        When ``True`` a full buffer silently discards its oldest event and
        the buffer is only sent when ``evaluator`` triggers.
    evaluator:
        Trigger that sends the whole buffer.
    lossy_evaluator:
        In lossy mode, events pushed out of the buffer are still forwarded
        when this evaluator accepts them.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> class Collect:
    ...     name = 'collect'
    ...     def __init__(self):
    ...         self.batches = []
    ...     def append(self, event):
    ...         self.batches.append([event.message])
    ...     def append_many(self, events):
    ...         self.batches.append([event.message for event in events])
    ...     def close(self):
    ...         pass
    >>> sink = Collect()
    >>> appender = BufferingForwardingAppender([sink], buffer_size=3, lossy=True, evaluator=level_evaluator(LogLevel.ERROR))
    >>> appender.activate_options()
    >>> for level, text in [(LogLevel.INFO, 'a'), (LogLevel.INFO, 'b'), (LogLevel.INFO, 'c'), (LogLevel.INFO, 'd'), (LogLevel.ERROR, 'boom')]:
    ...     appender.append(LogEvent(datetime(2025, 3, 7, tzinfo=timezone.utc), 'svc', level, text))
    >>> sink.batches
    [['c', 'd', 'boom']]
    """

    requires_layout = False

    def __init__(
        self,
        appenders: Sequence[AppenderPort] = (),
        *,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        lossy: bool = False,
        evaluator: Evaluator | None = None,
        lossy_evaluator: Evaluator | None = None,
        name: str | None = None,
        threshold: LogLevel | None = None,
        error_handler: ErrorHandlerPort | None = None,
    ) -> None:
        super().__init__(name=name, threshold=threshold, error_handler=error_handler)
        self.appenders: list[AppenderPort] = list(appenders)
        self.buffer_size = buffer_size
        self.lossy = lossy
        self.evaluator = evaluator
        self.lossy_evaluator = lossy_evaluator
        self._buffer: CyclicBuffer | None = None

    @property
    def buffer(self) -> CyclicBuffer | None:
        return self._buffer

    def add_appender(self, appender: AppenderPort) -> None:
        with self.lock:
            self.appenders.append(appender)

    def activate_options(self) -> None:
        super().activate_options()
        with self.lock:
            if self.lossy and self.evaluator is None:
                self.error_handler.error(
                    f"Appender [{self.name}] is lossy but has no evaluator; the buffer will never be sent."
                )
            self._buffer = CyclicBuffer(self.buffer_size) if self.buffer_size > 1 else None

    def do_append(self, event: LogEvent) -> None:
        buffer = self._buffer
        if buffer is None:
            if not self.lossy or self._triggers(self.evaluator, event) or self._triggers(self.lossy_evaluator, event):
                self.send_buffer([event.fix()])
            return

        event = event.fix()
        discarded = buffer.append(event)
        if discarded is None:
            if self._triggers(self.evaluator, event):
                self.send_from_buffer(None, buffer)
            return

        if not self.lossy:
            self.send_from_buffer(discarded, buffer)
            return
        if not self._triggers(self.lossy_evaluator, discarded):
            discarded = None
        if self._triggers(self.evaluator, event):
            self.send_from_buffer(discarded, buffer)
        elif discarded is not None:
            self.send_buffer([discarded])

    def flush(self, timeout: float | None = None, *, flush_lossy_buffer: bool = False) -> bool:
        """Send buffered events; lossy buffers only when ``flush_lossy_buffer`` is set."""

        with self.lock:
            buffer = self._buffer
            if buffer is None or len(buffer) == 0:
                return True
            if not self.lossy:
                self.send_from_buffer(None, buffer)
                return True
            if not flush_lossy_buffer:
                return True
            events = buffer.pop_all()
            if self.lossy_evaluator is not None:
                events = [event for event in events if self.lossy_evaluator(event)]
            if events:
                self.send_buffer(events)
            return True

    def send_from_buffer(self, first: LogEvent | None, buffer: CyclicBuffer) -> None:
        events = buffer.pop_all()
        if first is not None:
            events.insert(0, first)
        if events:
            self.send_buffer(events)

    def send_buffer(self, events: Iterable[LogEvent]) -> None:
        batch = list(events)
        for appender in self.appenders:
            try:
                appender.append_many(batch)
            except Exception as exc:  # noqa: BLE001
                self.error_handler.error(f"Failed to forward buffered events to [{getattr(appender, 'name', appender)}]", exc)

    def on_close(self) -> None:
        self.flush(flush_lossy_buffer=True)
        for appender in self.appenders:
            try:
                appender.close()
            except Exception as exc:  # noqa: BLE001
                self.error_handler.error(f"Failed to close appender [{getattr(appender, 'name', appender)}]", exc)

    @staticmethod
    def _triggers(evaluator: Evaluator | None, event: LogEvent) -> bool:
        return evaluator is not None and evaluator(event)


__all__ = ["DEFAULT_BUFFER_SIZE", "BufferingForwardingAppender", "Evaluator", "level_evaluator"]
