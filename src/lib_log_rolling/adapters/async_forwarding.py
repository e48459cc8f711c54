"""Asynchronous fan-out wrapper around other appenders.

Purpose
-------
Give every wrapped appender its own :class:`QueueAdapter` so a slow
destination (a rolling file on a busy disk) never blocks the caller or the
other destinations, while each destination still sees events in order.

Contents
--------
* :class:`AsyncForwardingAppender`.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from typing import Any

from lib_log_rolling.application.ports.appender import AppenderPort
from lib_log_rolling.application.ports.error_handler import ErrorHandlerPort
from lib_log_rolling.domain.events import LogEvent
from lib_log_rolling.domain.levels import LogLevel

from .appender_base import AppenderSkeleton
from .queue import QueueAdapter


class AsyncForwardingAppender(AppenderSkeleton):
    """Forward events to ``appenders`` from one worker thread per appender.

    Events are fixed before they are queued. :meth:`close` drains every queue
    within ``stop_timeout`` seconds and then closes the wrapped appenders.
    """

    requires_layout = False

    def __init__(
        self,
        appenders: Sequence[AppenderPort],
        *,
        maxsize: int = 2048,
        drop_policy: str = "block",
        timeout: float | None = 1.0,
        stop_timeout: float | None = 5.0,
        diagnostic: Callable[[str, dict[str, Any]], None] | None = None,
        name: str | None = None,
        threshold: LogLevel | None = None,
        error_handler: ErrorHandlerPort | None = None,
    ) -> None:
        super().__init__(name=name, threshold=threshold, error_handler=error_handler)
        self.appenders = list(appenders)
        self.stop_timeout = stop_timeout
        self.dropped = 0
        self._drop_lock = threading.Lock()
        self._queues = [
            QueueAdapter(
                worker=appender.append,
                maxsize=maxsize,
                drop_policy=drop_policy,
                on_drop=self._record_drop,
                timeout=timeout,
                stop_timeout=stop_timeout,
                diagnostic=diagnostic,
                name=f"{self.name}-{getattr(appender, 'name', index)}",
            )
            for index, appender in enumerate(self.appenders)
        ]

    @property
    def queues(self) -> list[QueueAdapter]:
        return list(self._queues)

    def activate_options(self) -> None:
        super().activate_options()
        for worker in self._queues:
            worker.start()

    def do_append(self, event: LogEvent) -> None:
        fixed = event.fix()
        for worker in self._queues:
            worker.start()
            worker.put(fixed)

    def flush(self, timeout: float | None = None) -> bool:
        """Wait until every queue is idle; ``False`` when ``timeout`` expired first."""

        return all(worker.wait_until_idle(timeout) for worker in self._queues)

    def on_close(self) -> None:
        for worker, appender in zip(self._queues, self.appenders):
            try:
                worker.stop(drain=True, timeout=self.stop_timeout)
            except RuntimeError as exc:
                self.error_handler.error(f"Queue for [{getattr(appender, 'name', appender)}] did not drain in time", exc)
            if worker.worker_failed:
                self.error_handler.error(f"Appender [{getattr(appender, 'name', appender)}] raised from its queue worker")
            try:
                appender.close()
            except Exception as exc:  # noqa: BLE001
                self.error_handler.error(f"Failed to close appender [{getattr(appender, 'name', appender)}]", exc)

    def _record_drop(self, event: LogEvent) -> None:
        with self._drop_lock:
            self.dropped += 1


__all__ = ["AsyncForwardingAppender"]
