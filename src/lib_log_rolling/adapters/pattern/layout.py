"""Pattern layout: render log events through a compiled converter chain.

Purpose
-------
Implement :class:`LayoutPort` for format strings like
``"%utcdate{ISO8601} [%-5level] %logger - %message%newline"``.

Contents
--------
* :func:`default_layout_registry` – string converters overlaid with event
  converters.
* :class:`PatternLayout`.

System Role
-----------
Used by every appender in :mod:`lib_log_rolling.adapters`; the layout is
immutable after :meth:`PatternLayout.activate_options` so several appender
threads may share it.
"""

from __future__ import annotations

import io

from lib_log_rolling.application.ports.layout import LayoutPort
from lib_log_rolling.domain.events import LogEvent
from lib_log_rolling.domain.pattern import ConverterFactory, ConverterRegistry, PatternConverter, PatternParser, SupportsWrite

from .event_converters import EVENT_CONVERTERS, ExceptionConverter
from .pattern_string import default_string_registry, report_unknown_directive


def default_layout_registry() -> ConverterRegistry:
    registry = default_string_registry()
    for name, factory in EVENT_CONVERTERS.items():
        registry.register(name, factory)
    return registry


class PatternLayout(LayoutPort):
    """Format events according to a conversion pattern.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> from lib_log_rolling.domain.levels import LogLevel
    >>> layout = PatternLayout('%-5level|%message')
    >>> event = LogEvent(datetime(2025, 3, 7, tzinfo=timezone.utc), 'svc', LogLevel.WARN, 'hi')
    >>> layout.render(event)
    'WARN |hi'
    """

    DEFAULT_CONVERSION_PATTERN = "%message%newline"
    DETAIL_CONVERSION_PATTERN = "%date [%thread] %-5level %logger - %message%newline"

    def __init__(
        self,
        pattern: str | None = None,
        *,
        header: str | None = None,
        footer: str | None = None,
        registry: ConverterRegistry | None = None,
    ) -> None:
        self._registry = (registry or default_layout_registry()).copy()
        self._pattern = pattern or self.DEFAULT_CONVERSION_PATTERN
        self.header = header
        self.footer = footer
        self._head: PatternConverter | None = None
        self._ignores_exception = True
        self.activate_options()

    @property
    def conversion_pattern(self) -> str:
        return self._pattern

    @conversion_pattern.setter
    def conversion_pattern(self, value: str) -> None:
        self._pattern = value
        self.activate_options()

    @property
    def ignores_exception(self) -> bool:
        return self._ignores_exception

    def add_converter(self, name: str, factory: ConverterFactory) -> None:
        self._registry.register(name, factory)
        self.activate_options()

    def activate_options(self) -> None:
        parser = PatternParser(self._pattern, self._registry, on_unknown=report_unknown_directive(self._pattern))
        self._head = parser.parse()
        chain = list(self._head.iter_chain()) if self._head is not None else []
        self._ignores_exception = not any(isinstance(converter, ExceptionConverter) for converter in chain)

    def format(self, writer: SupportsWrite, event: LogEvent) -> None:
        if self._head is not None:
            self._head.format_all(writer, event)

    def render(self, event: LogEvent) -> str:
        buffer = io.StringIO()
        self.format(buffer, event)
        return buffer.getvalue()


__all__ = ["PatternLayout", "default_layout_registry"]
