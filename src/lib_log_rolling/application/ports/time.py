"""Port for the clock consulted by date-based rollover and event stamping."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class ClockPort(Protocol):
    """Provide the current timestamp.

    Local clocks may return naive datetimes; the rolling appender compares
    values from one clock only, so the representation just needs to be
    consistent.
    """

    def now(self) -> datetime: ...


__all__ = ["ClockPort"]
