"""Pattern-based rendering: converters, pattern strings and layouts."""

from __future__ import annotations

from .event_converters import EVENT_CONVERTERS
from .layout import PatternLayout, default_layout_registry
from .pattern_string import PatternString, default_string_registry
from .string_converters import STRING_CONVERTERS

__all__ = [
    "EVENT_CONVERTERS",
    "PatternLayout",
    "PatternString",
    "STRING_CONVERTERS",
    "default_layout_registry",
    "default_string_registry",
]
