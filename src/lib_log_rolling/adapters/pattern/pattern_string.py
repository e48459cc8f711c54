"""Pattern strings expanded against the process environment.

Purpose
-------
Let configuration values such as the log file path carry directives:
``"%env{LOG_DIR}/app-%processid.log"``.

Contents
--------
* :func:`default_string_registry` – fresh registry with the string converters.
* :class:`PatternString` – compiled pattern with per-instance converters.
* :func:`report_unknown_directive` – parser callback shared with layouts.
"""

from __future__ import annotations

import io
from collections.abc import Callable, Mapping
from typing import Any

from lib_log_rolling.domain.pattern import ConverterFactory, ConverterRegistry, PatternConverter, PatternParser

from .. import diagnostics
from .string_converters import STRING_CONVERTERS


def default_string_registry() -> ConverterRegistry:
    return ConverterRegistry(STRING_CONVERTERS)


def report_unknown_directive(pattern: str) -> Callable[[str], None]:
    def report(directive: str) -> None:
        diagnostics.warn("Unknown pattern directive %r in %r; emitted as literal text", directive, pattern)

    return report


class PatternString:
    """Compiled pattern rendered without a log event.

    Examples
    --------
    >>> PatternString('%literal{app}-%property{tier}.log', properties={'tier': 'web'}).format()
    'app-web.log'
    """

    def __init__(
        self,
        pattern: str | None = None,
        *,
        properties: Mapping[str, Any] | None = None,
        registry: ConverterRegistry | None = None,
    ) -> None:
        self._registry = (registry or default_string_registry()).copy()
        self.properties: dict[str, Any] = dict(properties or {})
        self._pattern = pattern
        self._head: PatternConverter | None = None
        if pattern is not None:
            self.activate_options()

    @property
    def conversion_pattern(self) -> str | None:
        return self._pattern

    @conversion_pattern.setter
    def conversion_pattern(self, value: str) -> None:
        self._pattern = value
        self.activate_options()

    def add_converter(self, name: str, factory: ConverterFactory) -> None:
        """Register ``factory`` under ``name`` for this instance and recompile."""

        self._registry.register(name, factory)
        if self._pattern is not None:
            self.activate_options()

    def activate_options(self) -> None:
        pattern = self._pattern or ""
        self._head = PatternParser(pattern, self._registry, on_unknown=report_unknown_directive(pattern)).parse()

    def format(self) -> str:
        buffer = io.StringIO()
        self.format_to(buffer)
        return buffer.getvalue()

    def format_to(self, writer: Any) -> None:
        if self._head is not None:
            self._head.format_all(writer, self.properties)


__all__ = ["PatternString", "default_string_registry", "report_unknown_directive"]
