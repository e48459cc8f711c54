"""Single-consumer queue worker used for asynchronous fan-out.

Purpose
-------
Move slow I/O (file writes and rollovers) off the caller's thread while
keeping strict per-destination ordering: every queue has exactly one worker
thread, and every wrapped appender gets its own queue.

Contents
--------
* :class:`QueueAdapter` – background worker implementing :class:`QueuePort`.

System Role
-----------
Owned by :class:`lib_log_rolling.adapters.async_forwarding.AsyncForwardingAppender`.
A failing worker callable never kills the thread; failures are logged on the
module logger and surfaced through the diagnostic hook.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable
from typing import Any

from lib_log_rolling.application.ports.queue import QueuePort
from lib_log_rolling.domain.events import LogEvent

LOGGER = logging.getLogger(__name__)

_STOP = object()


class QueueAdapter(QueuePort):
    """Process log events on a dedicated daemon thread.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> from lib_log_rolling.domain.levels import LogLevel
    >>> seen = []
    >>> adapter = QueueAdapter(worker=lambda event: seen.append(event.message))
    >>> adapter.start()
    >>> adapter.put(LogEvent(datetime(2025, 3, 7, tzinfo=timezone.utc), 'svc', LogLevel.INFO, 'queued'))
    True
    >>> adapter.stop(drain=True)
    >>> seen
    ['queued']
    """

    def __init__(
        self,
        *,
        worker: Callable[[LogEvent], None] | None = None,
        maxsize: int = 2048,
        drop_policy: str = "block",
        on_drop: Callable[[LogEvent], None] | None = None,
        timeout: float | None = 1.0,
        stop_timeout: float | None = 5.0,
        diagnostic: Callable[[str, dict[str, Any]], None] | None = None,
        name: str = "lib_log_rolling-queue",
    ) -> None:
        """Configure the queue.

        Parameters
        ----------
        worker:
            Callable run for every event, usually an appender's ``append``.
        maxsize:
            Capacity before back-pressure (``"block"``) or drops (``"drop"``).
        drop_policy:
            ``"block"`` waits up to ``timeout`` seconds for room, ``"drop"``
            rejects immediately. Both report rejected events to ``on_drop``.
        stop_timeout:
            Default drain deadline for :meth:`stop`; ``None`` waits forever.
        """

        policy = drop_policy.strip().lower()
        if policy not in {"block", "drop"}:
            raise ValueError("drop_policy must be 'block' or 'drop'")
        self._worker = worker
        self._queue: queue.Queue[Any] = queue.Queue(maxsize=maxsize)
        self._drop_policy = policy
        self._on_drop = on_drop
        self._timeout = timeout
        self._stop_timeout = stop_timeout
        self._diagnostic = diagnostic
        self._name = name
        self._thread: threading.Thread | None = None
        self._idle = threading.Event()
        self._idle.set()
        self._discard = False
        self._worker_failed = False

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def worker_failed(self) -> bool:
        """``True`` once the worker callable raised; cleared by :meth:`start`."""

        return self._worker_failed

    def start(self) -> None:
        """Start the worker thread unless it is already running."""

        if self.running:
            return
        self._discard = False
        self._worker_failed = False
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

    def put(self, event: LogEvent) -> bool:
        """Enqueue ``event``; returns ``False`` when the drop policy rejected it."""

        try:
            if self._drop_policy == "drop":
                self._queue.put(event, block=False)
            else:
                self._queue.put(event, timeout=self._timeout)
        except queue.Full:
            self._handle_drop(event)
            return False
        self._idle.clear()
        return True

    def wait_until_idle(self, timeout: float | None = None) -> bool:
        """Block until every queued event was processed; ``False`` on timeout."""

        if self._queue.unfinished_tasks == 0:
            return True
        return self._idle.wait(timeout)

    def stop(self, *, drain: bool = True, timeout: float | None = None) -> None:
        """Stop the worker.

        With ``drain`` the worker finishes queued events first, bounded by
        ``timeout`` (or the configured ``stop_timeout``). Events still queued
        after the deadline, or all of them without ``drain``, go to
        ``on_drop``. Raises :class:`RuntimeError` when the thread does not
        exit in time.
        """

        thread = self._thread
        if thread is None:
            return
        limit = timeout if timeout is not None else self._stop_timeout
        deadline = None if limit is None else time.monotonic() + limit

        def remaining() -> float | None:
            return None if deadline is None else max(0.0, deadline - time.monotonic())

        drained = drain and self.wait_until_idle(remaining())
        if not drained:
            self._discard = True
            self._drop_queued()
        self._send_stop(remaining())
        thread.join(remaining())
        if thread.is_alive():
            self._emit("queue_shutdown_timeout", {"timeout": limit, "drained": drained})
            raise RuntimeError("Queue worker failed to stop within the allotted timeout")
        self._thread = None

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                if self._discard:
                    self._handle_drop(item)
                elif self._worker is not None:
                    try:
                        self._worker(item)
                    except Exception as exc:  # noqa: BLE001
                        self._worker_failed = True
                        LOGGER.error("Queue worker raised an exception; continuing", exc_info=exc)
                        self._emit(
                            "queue_worker_error",
                            {"logger": getattr(item, "logger_name", None), "exception": repr(exc)},
                        )
            finally:
                self._queue.task_done()
                if self._queue.unfinished_tasks == 0:
                    self._idle.set()

    def _send_stop(self, timeout: float | None) -> None:
        while True:
            try:
                self._queue.put(_STOP, timeout=timeout)
                return
            except queue.Full:
                self._drop_queued(limit=1)

    def _drop_queued(self, limit: int | None = None) -> None:
        dropped = 0
        while limit is None or dropped < limit:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if isinstance(item, LogEvent):
                self._handle_drop(item)
            self._queue.task_done()
            dropped += 1
        if self._queue.unfinished_tasks == 0:
            self._idle.set()

    def _handle_drop(self, event: LogEvent) -> None:
        if self._on_drop is None:
            return
        try:
            self._on_drop(event)
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Queue drop handler raised an exception; continuing", exc_info=exc)
            self._emit("queue_drop_callback_error", {"logger": event.logger_name, "exception": repr(exc)})

    def _emit(self, name: str, payload: dict[str, Any]) -> None:
        if self._diagnostic is None:
            return
        try:
            self._diagnostic(name, payload)
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Queue diagnostic hook raised while reporting %s", name, exc_info=exc)


__all__ = ["QueueAdapter"]
