"""Converters that read the process environment rather than a log event.

Purpose
-------
Back the ``%env{HOME}``/``%date{yyyy}``/``%processid`` style directives used in
file name patterns. The ``state`` handed to these converters is the pattern
string's property mapping; only :class:`PropertyConverter` reads it.

Contents
--------
* One converter class per directive.
* :data:`STRING_CONVERTERS` – default registration table.
"""

from __future__ import annotations

import getpass
import os
import secrets
import string
import sys
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from lib_log_rolling.domain.date_format import format_date, resolve_pattern
from lib_log_rolling.domain.pattern import (
    ConverterFactory,
    LiteralConverter,
    NewLineConverter,
    PatternConverter,
    SupportsWrite,
)

from .. import diagnostics

NULL_TEXT = "(null)"


def _current_user() -> str | None:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return None


class AppDomainConverter(PatternConverter):
    """Name of the running program (``argv[0]`` without its directory)."""

    def convert(self, writer: SupportsWrite, state: Any) -> None:
        program = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else ""
        writer.write(program or NULL_TEXT)


class DateConverter(PatternConverter):
    """Current local time rendered with the option's date pattern."""

    date_pattern: str | None = None

    def activate_options(self) -> None:
        self.date_pattern = resolve_pattern(self.option)

    def now(self) -> datetime:
        return datetime.now()

    def convert(self, writer: SupportsWrite, state: Any) -> None:
        writer.write(format_date(self.now(), self.date_pattern or resolve_pattern(self.option)))


class UtcDateConverter(DateConverter):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class EnvironmentConverter(PatternConverter):
    """Value of the environment variable named by the option."""

    def convert(self, writer: SupportsWrite, state: Any) -> None:
        if not self.option:
            return
        value = os.environ.get(self.option)
        if value:
            writer.write(value)


class IdentityConverter(PatternConverter):
    """Login name of the current user."""

    def convert(self, writer: SupportsWrite, state: Any) -> None:
        writer.write(_current_user() or NULL_TEXT)


class UserNameConverter(PatternConverter):
    """``DOMAIN\\user`` when a domain is known, else the login name."""

    def convert(self, writer: SupportsWrite, state: Any) -> None:
        user = _current_user()
        if user is None:
            writer.write(NULL_TEXT)
            return
        domain = os.environ.get("USERDOMAIN")
        writer.write(f"{domain}\\{user}" if domain else user)


class ProcessIdConverter(PatternConverter):
    def convert(self, writer: SupportsWrite, state: Any) -> None:
        writer.write(str(os.getpid()))


class PropertyConverter(PatternConverter):
    """Look up the option key in the pattern string's properties.

    Without an option the whole mapping is written as ``{key=value, ...}``.
    """

    def convert(self, writer: SupportsWrite, state: Any) -> None:
        properties: Mapping[str, Any] = state if isinstance(state, Mapping) else {}
        write_properties(writer, properties, self.option)


class RandomStringConverter(PatternConverter):
    """Random upper-case alphanumeric string; the option sets the length (default 4)."""

    _ALPHABET = string.ascii_uppercase + string.digits
    length = 4

    def activate_options(self) -> None:
        if self.option:
            try:
                length = int(self.option.strip())
            except ValueError:
                diagnostics.warn("RandomStringConverter: could not parse length option %r", self.option)
                return
            if length > 0:
                self.length = length

    def convert(self, writer: SupportsWrite, state: Any) -> None:
        writer.write("".join(secrets.choice(self._ALPHABET) for _ in range(self.length)))


class OptionLiteralConverter(LiteralConverter):
    """``%literal{text}`` emits ``text`` verbatim."""

    def __init__(self) -> None:
        super().__init__("")


def write_properties(writer: SupportsWrite, properties: Mapping[str, Any], key: str | None) -> None:
    if key:
        value = properties.get(key)
        writer.write(NULL_TEXT if value is None else str(value))
        return
    rendered = ", ".join(f"{name}={value}" for name, value in properties.items())
    writer.write("{" + rendered + "}")


STRING_CONVERTERS: dict[str, ConverterFactory] = {
    "appdomain": AppDomainConverter,
    "date": DateConverter,
    "env": EnvironmentConverter,
    "identity": IdentityConverter,
    "literal": OptionLiteralConverter,
    "newline": NewLineConverter,
    "processid": ProcessIdConverter,
    "property": PropertyConverter,
    "random": RandomStringConverter,
    "username": UserNameConverter,
    "utcdate": UtcDateConverter,
}


__all__ = [
    "AppDomainConverter",
    "DateConverter",
    "EnvironmentConverter",
    "IdentityConverter",
    "NULL_TEXT",
    "OptionLiteralConverter",
    "ProcessIdConverter",
    "PropertyConverter",
    "RandomStringConverter",
    "STRING_CONVERTERS",
    "UserNameConverter",
    "UtcDateConverter",
    "write_properties",
]
