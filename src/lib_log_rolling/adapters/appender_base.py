"""Shared appender behaviour: threshold, closed guard and error routing.

Purpose
-------
Every appender must honour the same contract: ``append`` never raises, events
below the threshold are skipped, a closed appender reports misuse instead of
writing, and an appender that logs from inside its own write path does not
recurse.

Contents
--------
* :class:`AppenderSkeleton` – abstract base implementing :class:`AppenderPort`.

System Role
-----------
Base class of the file, rolling, buffering, async and console appenders.
"""

from __future__ import annotations

import io
import os
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import ClassVar

from lib_log_rolling.application.ports.appender import AppenderPort
from lib_log_rolling.application.ports.error_handler import ErrorHandlerPort
from lib_log_rolling.application.ports.layout import LayoutPort
from lib_log_rolling.domain.errors import ErrorCode
from lib_log_rolling.domain.events import LogEvent
from lib_log_rolling.domain.levels import LogLevel

from .error_handler import OnlyOnceErrorHandler


class AppenderSkeleton(AppenderPort, ABC):
    """Template for appenders; subclasses implement :meth:`do_append`.

    Attributes
    ----------
    requires_layout:
        When ``True`` (default) appending without a layout reports
        :attr:`ErrorCode.MISSING_LAYOUT` and drops the event.
    """

    requires_layout: ClassVar[bool] = True

    def __init__(
        self,
        *,
        name: str | None = None,
        layout: LayoutPort | None = None,
        threshold: LogLevel | None = None,
        error_handler: ErrorHandlerPort | None = None,
    ) -> None:
        self.name = name or type(self).__name__
        self.layout = layout
        self.threshold = threshold
        self._error_handler: ErrorHandlerPort = error_handler or OnlyOnceErrorHandler(f"{self.name}: ")
        self.lock = threading.RLock()
        self._closed = False
        self._in_append = False

    @property
    def error_handler(self) -> ErrorHandlerPort:
        return self._error_handler

    @error_handler.setter
    def error_handler(self, value: ErrorHandlerPort | None) -> None:
        with self.lock:
            if value is None:
                self._error_handler.error("Attempted to set an empty error handler; keeping the current one.")
                return
            self._error_handler = value

    @property
    def closed(self) -> bool:
        return self._closed

    def is_as_severe_as_threshold(self, level: LogLevel) -> bool:
        return self.threshold is None or level.is_at_least(self.threshold)

    def activate_options(self) -> None:
        """Validate configuration; subclasses open their resources here."""

    def append(self, event: LogEvent) -> None:
        with self.lock:
            if self._closed:
                self._error_handler.error(f"Attempted to append to closed appender named [{self.name}].")
                return
            if self._in_append:
                return
            self._in_append = True
            try:
                if not self.is_as_severe_as_threshold(event.level):
                    return
                if not self.pre_append_check():
                    return
                self.do_append(event)
            except Exception as exc:  # noqa: BLE001
                self._error_handler.error("Failed in do_append", exc)
            finally:
                self._in_append = False

    def append_many(self, events: Iterable[LogEvent]) -> None:
        with self.lock:
            if self._closed:
                self._error_handler.error(f"Attempted to append to closed appender named [{self.name}].")
                return
            if self._in_append:
                return
            self._in_append = True
            try:
                accepted = [event for event in events if self.is_as_severe_as_threshold(event.level)]
                if accepted and self.pre_append_check():
                    self.do_append_many(accepted)
            except Exception as exc:  # noqa: BLE001
                self._error_handler.error("Failed in append_many", exc)
            finally:
                self._in_append = False

    def pre_append_check(self) -> bool:
        if self.requires_layout and self.layout is None:
            self._error_handler.error(
                f"No layout set for the appender named [{self.name}].", None, ErrorCode.MISSING_LAYOUT
            )
            return False
        return True

    @abstractmethod
    def do_append(self, event: LogEvent) -> None:
        """Write one event; called under :attr:`lock` after all checks passed."""

    def do_append_many(self, events: list[LogEvent]) -> None:
        for event in events:
            self.do_append(event)

    def render(self, event: LogEvent) -> str:
        """Render ``event`` with the layout, appending exception text it ignores."""

        buffer = io.StringIO()
        if self.layout is None:
            buffer.write(event.message)
            return buffer.getvalue()
        self.layout.format(buffer, event)
        if self.layout.ignores_exception and event.exc_info:
            buffer.write(event.exc_info.rstrip("\r\n"))
            buffer.write(os.linesep)
        return buffer.getvalue()

    def flush(self, timeout: float | None = None) -> bool:
        """Flush buffered output; returns ``True`` when everything was written."""

        return True

    def close(self) -> None:
        with self.lock:
            if self._closed:
                return
            self._closed = True
            try:
                self.on_close()
            except Exception as exc:  # noqa: BLE001
                self._error_handler.error(f"Failed to close appender named [{self.name}].", exc, ErrorCode.CLOSE_FAILURE)

    def on_close(self) -> None:
        """Release resources; runs once under :attr:`lock`."""


__all__ = ["AppenderSkeleton"]
