"""Fixed-capacity ring buffer of log events.

Purpose
-------
Retain the most recent events in memory so a buffering appender can replay
them later ("dump the last N events when an error arrives").

Contents
--------
* :class:`CyclicBuffer` with append/pop/resize and indexed access.

System Role
-----------
Owned by :class:`lib_log_rolling.adapters.buffering.BufferingForwardingAppender`.
All mutations happen under a single lock; there are no lock-free read paths
because the ring indices are mutable.
"""

from __future__ import annotations

import threading

from .events import LogEvent


class CyclicBuffer:
    """Ring buffer that overwrites its oldest entry once full.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> from lib_log_rolling.domain.levels import LogLevel
    >>> def make(text):
    ...     return LogEvent(datetime(2025, 1, 1, tzinfo=timezone.utc), 'svc', LogLevel.INFO, text)
    >>> buffer = CyclicBuffer(2)
    >>> buffer.append(make('a')) is None
    True
    >>> buffer.append(make('b')) is None
    True
    >>> buffer.append(make('c')).message
    'a'
    >>> [event.message for event in buffer.pop_all()]
    ['b', 'c']
    """

    def __init__(self, max_size: int) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be a positive integer, got {max_size}")
        self._lock = threading.Lock()
        self._max_size = max_size
        self._events: list[LogEvent | None] = [None] * max_size
        self._first = 0
        self._last = 0
        self._num_elems = 0

    def append(self, event: LogEvent) -> LogEvent | None:
        """Insert ``event``; return the evicted event when the buffer was full."""

        with self._lock:
            if self._max_size == 0:
                return event
            discarded = self._events[self._last]
            self._events[self._last] = event
            self._last += 1
            if self._last == self._max_size:
                self._last = 0

            if self._num_elems < self._max_size:
                self._num_elems += 1
                return None

            self._first += 1
            if self._first == self._max_size:
                self._first = 0
            return discarded

    def pop_oldest(self) -> LogEvent | None:
        """Remove and return the oldest event, or ``None`` when empty."""

        with self._lock:
            if self._num_elems == 0:
                return None
            self._num_elems -= 1
            oldest = self._events[self._first]
            self._events[self._first] = None
            self._first += 1
            if self._first == self._max_size:
                self._first = 0
            return oldest

    def pop_all(self) -> list[LogEvent]:
        """Drain the buffer, returning events oldest first."""

        with self._lock:
            drained = self._linearise()
            self._reset()
            return drained

    def clear(self) -> None:
        """Drop every buffered event."""

        with self._lock:
            self._reset()

    def resize(self, new_size: int) -> None:
        """Change the capacity, keeping up to ``new_size`` of the oldest events."""

        if new_size < 0:
            raise ValueError(f"new_size must not be negative, got {new_size}")
        with self._lock:
            if new_size == self._max_size:
                return
            kept = self._linearise()[:new_size]
            self._events = [None] * new_size
            self._events[: len(kept)] = kept
            self._max_size = new_size
            self._first = 0
            self._num_elems = len(kept)
            self._last = 0 if len(kept) == new_size else len(kept)

    def __getitem__(self, index: int) -> LogEvent | None:
        """Return the event at ``index`` (0 = oldest) or ``None`` when out of range."""

        with self._lock:
            if index < 0 or index >= self._num_elems:
                return None
            return self._events[(self._first + index) % self._max_size]

    def __len__(self) -> int:
        with self._lock:
            return self._num_elems

    @property
    def length(self) -> int:
        """Number of events currently buffered."""

        return len(self)

    @property
    def max_size(self) -> int:
        """Return the configured capacity."""

        with self._lock:
            return self._max_size

    @max_size.setter
    def max_size(self, value: int) -> None:
        self.resize(value)

    def _linearise(self) -> list[LogEvent]:
        # caller holds the lock
        if self._num_elems == 0:
            return []
        end = self._first + self._num_elems
        if end <= self._max_size:
            segment = self._events[self._first : end]
        else:
            segment = self._events[self._first :] + self._events[: end - self._max_size]
        return [event for event in segment if event is not None]

    def _reset(self) -> None:
        self._events = [None] * self._max_size
        self._first = 0
        self._last = 0
        self._num_elems = 0


__all__ = ["CyclicBuffer"]
