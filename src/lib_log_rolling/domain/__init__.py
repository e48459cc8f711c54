"""Domain entities and value objects used by the rolling logging core."""

from __future__ import annotations

from .cyclic_buffer import CyclicBuffer
from .date_format import NAMED_PATTERNS, format_date, resolve_pattern
from .errors import ErrorCode
from .events import LogEvent
from .levels import LogLevel
from .pattern import (
    ConverterRegistry,
    FormattingInfo,
    LiteralConverter,
    NewLineConverter,
    PatternConverter,
    PatternParser,
)
from .rolling import RollingStyle, RollPoint, combine_path, compute_check_period, next_check_date, parse_file_size

__all__ = [
    "NAMED_PATTERNS",
    "ConverterRegistry",
    "CyclicBuffer",
    "ErrorCode",
    "FormattingInfo",
    "LiteralConverter",
    "LogEvent",
    "LogLevel",
    "NewLineConverter",
    "PatternConverter",
    "PatternParser",
    "RollPoint",
    "RollingStyle",
    "combine_path",
    "compute_check_period",
    "format_date",
    "next_check_date",
    "parse_file_size",
    "resolve_pattern",
]
