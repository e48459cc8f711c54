"""Port describing how events are rendered into text.

Purpose
-------
Separate formatting from output so any appender can be combined with any
layout.

Contents
--------
* :class:`LayoutPort` – ``format`` plus header/footer and exception flags.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lib_log_rolling.domain.events import LogEvent
from lib_log_rolling.domain.pattern import SupportsWrite


@runtime_checkable
class LayoutPort(Protocol):
    """Render a :class:`LogEvent` to a text sink."""

    header: str | None
    footer: str | None

    @property
    def ignores_exception(self) -> bool:
        """``True`` when :meth:`format` does not render ``exc_info`` itself."""

    def format(self, writer: SupportsWrite, event: LogEvent) -> None:
        """Write the rendered ``event`` into ``writer``."""


__all__ = ["LayoutPort"]
