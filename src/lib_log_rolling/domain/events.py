"""Domain event describing a single log message.

Purpose
-------
Provide an immutable representation of log events travelling from the
front end to the appenders, including the explicit "fix" step that snapshots
volatile fields before an event is buffered or handed to another thread.

Contents
--------
* :class:`LogEvent` dataclass with helper methods.
* Utility function ``_ensure_aware`` for timestamp validation.

System Role
-----------
Sits in the domain layer; appenders, layouts and buffers only ever read these
objects, so one event can be shared by several appender threads once fixed.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any

from .levels import LogLevel


def _ensure_aware(ts: datetime) -> datetime:
    """Validate that ``ts`` is timezone-aware and normalise to UTC."""
    if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
        raise ValueError("timestamp must be timezone-aware")
    return ts.astimezone(timezone.utc)


@dataclass(slots=True, frozen=True)
class LogEvent:
    """Immutable log event handed to appenders.

    Attributes
    ----------
    timestamp:
        Time of the event in timezone-aware UTC.
    logger_name:
        Logical logger emitting the event.
    level:
        :class:`LogLevel` severity associated with the event.
    message:
        Rendered message passed by the caller.
    exc_info:
        Optional exception text captured when logging failures.
    thread_name, hostname, user_name, process_id:
        Metadata supplied by the front end; the core never resolves them.
    properties:
        Caller-supplied key/value pairs rendered by ``%property``.
    fixed:
        ``True`` once :meth:`fix` has snapshotted the mutable fields.
    """

    timestamp: datetime
    logger_name: str
    level: LogLevel
    message: str
    exc_info: str | None = None
    thread_name: str | None = None
    hostname: str | None = None
    user_name: str | None = None
    process_id: int | None = None
    properties: Mapping[str, Any] = field(default_factory=dict)
    fixed: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", _ensure_aware(self.timestamp))
        if not self.fixed:
            object.__setattr__(self, "properties", dict(self.properties))

    def fix(self) -> "LogEvent":
        """Return a snapshot safe to buffer or hand to another thread.

        Examples
        --------
        >>> from datetime import datetime, timezone
        >>> event = LogEvent(datetime(2025, 1, 1, tzinfo=timezone.utc), 'svc', LogLevel.INFO, 'hi')
        >>> fixed = event.fix()
        >>> fixed.fixed, fixed.fix() is fixed
        (True, True)
        """

        if self.fixed:
            return self
        snapshot = MappingProxyType(dict(self.properties))
        return replace(self, properties=snapshot, fixed=True)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the event to a dictionary with ISO8601 timestamps."""

        data: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "logger_name": self.logger_name,
            "level": self.level.severity,
            "message": self.message,
            "properties": dict(self.properties),
        }
        for key in ("exc_info", "thread_name", "hostname", "user_name", "process_id"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    def to_json(self) -> str:
        """Serialize the event to JSON with sorted keys for deterministic output."""

        return json.dumps(self.to_dict(), sort_keys=True, default=str)

    def replace(self, **changes: Any) -> "LogEvent":
        """Return a copied event with ``changes`` applied."""

        return replace(self, **changes)


__all__ = ["LogEvent"]
