"""Use case turning a caller's log request into appender output.

Purpose
-------
Stamp a :class:`LogEvent` with the configured clock and hand it to every
configured appender in registration order.

Contents
--------
* :func:`create_process_log_event` factory returning the runtime callable.

System Role
-----------
Application-layer orchestrator invoked by
:class:`lib_log_rolling.runtime.LoggingRuntime`. Appenders never raise by
contract; anything that still escapes is logged and reported through the
diagnostic hook so one broken destination cannot silence the others.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from lib_log_rolling.application.ports import AppenderPort, ClockPort
from lib_log_rolling.domain import LogEvent, LogLevel

from ._types import DiagnosticHook, ProcessResult

logger = logging.getLogger(__name__)


def create_process_log_event(
    *,
    appenders: Sequence[AppenderPort],
    clock: ClockPort,
    diagnostic: DiagnosticHook | None = None,
) -> "ProcessPipeline":
    """Build the callable that creates and fans out one event per call.

    Parameters
    ----------
    appenders:
        Destinations receiving every event, in order.
    clock:
        Source of event timestamps; naive values are interpreted as local time.
    diagnostic:
        Optional callback invoked with ``("event_processed" | "appender_error", payload)``.

    Returns
    -------
    ProcessPipeline
        Accepts ``logger_name``, ``level``, ``message`` and optional metadata
        keywords; returns ``{"ok": bool, ...}``.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> class Clock:
    ...     def now(self):
    ...         return datetime(2025, 3, 7, 12, 0, tzinfo=timezone.utc)
    >>> class Collect:
    ...     name = 'collect'
    ...     def __init__(self):
    ...         self.events = []
    ...     def append(self, event):
    ...         self.events.append(event)
    ...     def append_many(self, events):
    ...         self.events.extend(events)
    ...     def close(self):
    ...         pass
    >>> sink = Collect()
    >>> process = create_process_log_event(appenders=[sink], clock=Clock())
    >>> process(logger_name='svc', level=LogLevel.INFO, message='hi')
    {'ok': True, 'delivered': 1}
    >>> sink.events[0].message
    'hi'
    """

    return ProcessPipeline(tuple(appenders), clock, _build_diagnostic_emitter(diagnostic))


class ProcessPipeline:
    """Callable building one event per call; :meth:`dispatch` forwards ready-made events."""

    def __init__(self, appenders: tuple[AppenderPort, ...], clock: ClockPort, emit: DiagnosticHook) -> None:
        self._appenders = appenders
        self._clock = clock
        self._emit = emit

    def __call__(
        self,
        *,
        logger_name: str,
        level: LogLevel,
        message: str,
        exc_info: str | None = None,
        properties: Mapping[str, Any] | None = None,
        thread_name: str | None = None,
        hostname: str | None = None,
        user_name: str | None = None,
        process_id: int | None = None,
    ) -> ProcessResult:
        timestamp = self._clock.now()
        if timestamp.tzinfo is None:
            timestamp = timestamp.astimezone()
        event = LogEvent(
            timestamp=timestamp,
            logger_name=logger_name,
            level=level,
            message=message,
            exc_info=exc_info,
            thread_name=thread_name,
            hostname=hostname,
            user_name=user_name,
            process_id=process_id,
            properties=dict(properties or {}),
        )
        return self.dispatch(event)

    def dispatch(self, event: LogEvent) -> ProcessResult:
        """Hand an already built ``event`` to every appender."""

        failed: list[str] = []
        for appender in self._appenders:
            try:
                appender.append(event)
            except Exception as exc:  # noqa: BLE001
                name = getattr(appender, "name", type(appender).__name__)
                failed.append(name)
                logger.error("Appender %s raised while appending; continuing", name, exc_info=exc)
                self._emit("appender_error", {"appender": name, "logger": event.logger_name, "exception": repr(exc)})
        if failed:
            return {"ok": False, "reason": "adapter_error", "failed": failed}
        self._emit("event_processed", {"logger": event.logger_name, "level": event.level.name})
        return {"ok": True, "delivered": len(self._appenders)}


def _build_diagnostic_emitter(diagnostic: DiagnosticHook | None) -> DiagnosticHook:
    def emit(name: str, payload: dict[str, Any]) -> None:
        if diagnostic is None:
            return
        try:
            diagnostic(name, payload)
        except Exception:  # noqa: BLE001
            logger.exception("Diagnostic hook raised while reporting %s", name)

    return emit


__all__ = ["ProcessPipeline", "create_process_log_event"]
