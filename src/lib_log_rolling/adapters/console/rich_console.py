"""Rich-powered console appender.

Purpose
-------
Render events through the configured layout and print them with Rich, using
one style per level so warnings and errors stand out on a terminal.

Contents
--------
* :data:`_STYLE_MAP` – default level-to-style mapping.
* :class:`RichConsoleAppender`.

System Role
-----------
Human-facing sink next to the rolling file; honours ``force_color`` and
``no_color`` overrides.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping

from rich.console import Console
from rich.text import Text

from lib_log_rolling.application.ports.error_handler import ErrorHandlerPort
from lib_log_rolling.application.ports.layout import LayoutPort
from lib_log_rolling.domain.errors import ErrorCode
from lib_log_rolling.domain.events import LogEvent
from lib_log_rolling.domain.levels import LogLevel

from ..appender_base import AppenderSkeleton

_STYLE_MAP: Mapping[LogLevel, str] = {
    LogLevel.DEBUG: "dim",
    LogLevel.INFO: "cyan",
    LogLevel.WARN: "yellow",
    LogLevel.ERROR: "red",
    LogLevel.FATAL: "bold red",
}


class RichConsoleAppender(AppenderSkeleton):
    """Print rendered events to a Rich console.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> from io import StringIO
    >>> from lib_log_rolling.adapters.pattern import PatternLayout
    >>> console = Console(file=StringIO(), record=True, width=120)
    >>> appender = RichConsoleAppender(console=console, layout=PatternLayout('%-5level %message'))
    >>> appender.append(LogEvent(datetime(2025, 3, 7, tzinfo=timezone.utc), 'svc', LogLevel.WARN, 'careful'))
    >>> console.export_text().strip()
    'WARN  careful'
    """

    def __init__(
        self,
        *,
        console: Console | None = None,
        force_color: bool = False,
        no_color: bool = False,
        styles: MutableMapping[LogLevel | str, str] | None = None,
        name: str | None = None,
        layout: LayoutPort | None = None,
        threshold: LogLevel | None = None,
        error_handler: ErrorHandlerPort | None = None,
    ) -> None:
        super().__init__(name=name, layout=layout, threshold=threshold, error_handler=error_handler)
        self._console = console or Console(stderr=True, force_terminal=force_color or None, no_color=no_color)
        self._no_color = no_color
        merged = dict(_STYLE_MAP)
        for key, value in (styles or {}).items():
            level = LogLevel.from_name(key) if isinstance(key, str) else key
            merged[level] = value
        self._style_map = merged

    @property
    def console(self) -> Console:
        return self._console

    def do_append(self, event: LogEvent) -> None:
        line = self.render(event).rstrip("\r\n")
        style = "" if self._no_color else self._style_map.get(event.level, "")
        try:
            self._console.print(Text(line, style=style), highlight=False, soft_wrap=True)
        except Exception as exc:  # noqa: BLE001
            self.error_handler.error("Failed to write to console.", exc, ErrorCode.WRITE_FAILURE)


__all__ = ["RichConsoleAppender"]
