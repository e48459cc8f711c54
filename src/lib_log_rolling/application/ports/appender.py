"""Port describing an output destination for log events.

Purpose
-------
Give the use cases and wrapper appenders (buffering, async fan-out) one narrow
contract to forward events to, independent of the concrete sink.

Contents
--------
* :class:`AppenderPort` – runtime-checkable protocol.

System Role
-----------
Implemented by every adapter deriving from
:class:`lib_log_rolling.adapters.appender_base.AppenderSkeleton`.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from lib_log_rolling.domain.events import LogEvent


@runtime_checkable
class AppenderPort(Protocol):
    """Accept log events and release resources on close."""

    name: str

    def append(self, event: LogEvent) -> None:
        """Write ``event``; implementations never raise."""

    def append_many(self, events: Iterable[LogEvent]) -> None:
        """Write a batch of events in order."""

    def close(self) -> None:
        """Flush and release the destination; idempotent."""


__all__ = ["AppenderPort"]
