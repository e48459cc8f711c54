"""Ordered severities carried by every log event.

Purpose
-------
Offer a domain-specific representation of log severities whose display names
match the classic appender vocabulary (``WARN``, ``FATAL``) while still mapping
onto the stdlib :mod:`logging` constants.

Contents
--------
* :class:`LogLevel` enum with conversion helpers.
* ``_ALIASES`` accepting the stdlib spellings (``WARNING``, ``CRITICAL``).

System Role
-----------
Used by appender thresholds, buffering evaluators and the ``%level`` pattern
converter so that rendering and filtering agree on one ordering.
"""

from __future__ import annotations

import logging
from enum import Enum


class LogLevel(Enum):
    """Enumerated logging levels used throughout the system."""

    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40
    FATAL = 50

    @property
    def severity(self) -> str:
        """Return the lowercase severity name for structured payloads."""

        return self.name.lower()

    def to_python_level(self) -> int:
        """Return the :mod:`logging` constant matching this level."""

        return self.value

    def is_at_least(self, other: "LogLevel") -> bool:
        """Return ``True`` when this level is as severe as ``other``."""

        return self.value >= other.value

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        normalized = name.strip().upper()
        normalized = _ALIASES.get(normalized, normalized)
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown log level: {name!r}") from exc

    @classmethod
    def from_python_level(cls, level: int) -> "LogLevel":
        """Translate a stdlib logging level integer into :class:`LogLevel`.

        Levels between the named members round down (``logging.INFO + 5`` is
        still ``INFO``); anything below ``DEBUG`` becomes ``DEBUG``.
        """
        if level >= logging.CRITICAL:
            return cls.FATAL
        for member in reversed(list(cls)):
            if level >= member.value:
                return member
        return cls.DEBUG

    @classmethod
    def from_numeric(cls, level: int) -> "LogLevel":
        """Return the :class:`LogLevel` corresponding to ``level`` exactly."""
        try:
            return cls(level)
        except ValueError as exc:
            raise ValueError(f"Unsupported log level numeric: {level}") from exc


_ALIASES = {
    "WARNING": "WARN",
    "CRITICAL": "FATAL",
}


__all__ = ["LogLevel"]
