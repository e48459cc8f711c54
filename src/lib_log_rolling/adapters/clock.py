"""Clock adapters implementing :class:`ClockPort`."""

from __future__ import annotations

from datetime import datetime, timezone

from lib_log_rolling.application.ports.time import ClockPort


class LocalClock(ClockPort):
    """Wall-clock local time (naive); date roll boundaries follow local midnight."""

    def now(self) -> datetime:
        return datetime.now()


class UniversalClock(ClockPort):
    """Timezone-aware UTC time; date roll boundaries follow UTC midnight."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def clock_from_name(name: str) -> ClockPort:
    """Return the clock for ``"local"`` or ``"utc"``."""

    normalized = name.strip().lower()
    if normalized in {"local", "localtime"}:
        return LocalClock()
    if normalized in {"utc", "universal", "universaltime"}:
        return UniversalClock()
    raise ValueError(f"Unsupported clock: {name!r}")


__all__ = ["LocalClock", "UniversalClock", "clock_from_name"]
