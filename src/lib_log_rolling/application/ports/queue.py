"""Port describing the queue infrastructure for asynchronous fan-out."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lib_log_rolling.domain.events import LogEvent


@runtime_checkable
class QueuePort(Protocol):
    """Bridge between producer threads and a single consumer worker."""

    def start(self) -> None:
        """Start the queue worker."""

    def stop(self, *, drain: bool = True, timeout: float | None = None) -> None:
        """Stop the queue worker, optionally draining queued events."""

    def put(self, event: LogEvent) -> bool:
        """Enqueue ``event`` for asynchronous processing."""


__all__ = ["QueuePort"]
