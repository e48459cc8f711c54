"""Pure rollover policy helpers shared by the rolling file appender.

Purpose
-------
Keep the calendar arithmetic, size parsing and file-name composition free of
I/O so they can be tested in isolation and reused by the appender's state
machine.

Contents
--------
* :class:`RollingStyle` – which triggers are active.
* :class:`RollPoint` – granularity of a date pattern.
* :func:`next_check_date` / :func:`compute_check_period` – date boundaries.
* :func:`parse_file_size` – ``"10KB"`` style size strings.
* :func:`combine_path` – suffix insertion with optional extension preservation.

System Role
-----------
Domain layer for :mod:`lib_log_rolling.adapters.rolling_file`.
"""

from __future__ import annotations

import os
import re
from datetime import datetime, timedelta
from enum import Enum

from .date_format import format_date


class RollingStyle(Enum):
    """Triggers enabled on a rolling file appender.

    ``NONE`` performs no rollover while running; the appender rolls an existing
    file out of the way once at start-up instead of appending to it.
    """

    NONE = "none"
    SIZE = "size"
    DATE = "date"
    COMPOSITE = "composite"

    @property
    def rolls_by_date(self) -> bool:
        return self in (RollingStyle.DATE, RollingStyle.COMPOSITE)

    @property
    def rolls_by_size(self) -> bool:
        return self in (RollingStyle.SIZE, RollingStyle.COMPOSITE)

    @classmethod
    def from_name(cls, name: str) -> "RollingStyle":
        normalized = name.strip().lower()
        if normalized == "once":
            return cls.NONE
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Unsupported rolling style: {name!r}")


class RollPoint(Enum):
    """Smallest calendar unit that changes the rendered date pattern."""

    INVALID = -1
    TOP_OF_MINUTE = 0
    TOP_OF_HOUR = 1
    HALF_DAY = 2
    TOP_OF_DAY = 3
    TOP_OF_WEEK = 4
    TOP_OF_MONTH = 5


_EPOCH = datetime(1970, 1, 1)


def next_check_date(current: datetime, roll_point: RollPoint) -> datetime:
    """Return the first instant of the period following ``current``.

    Weeks start on Sunday.

    Examples
    --------
    >>> next_check_date(datetime(2025, 3, 7, 14, 5, 9), RollPoint.TOP_OF_DAY)
    datetime.datetime(2025, 3, 8, 0, 0)
    >>> next_check_date(datetime(2025, 3, 7, 14, 5, 9), RollPoint.HALF_DAY)
    datetime.datetime(2025, 3, 8, 0, 0)
    >>> next_check_date(datetime(2025, 12, 31, 23, 0), RollPoint.TOP_OF_MONTH)
    datetime.datetime(2026, 1, 1, 0, 0)
    """

    if roll_point is RollPoint.TOP_OF_MINUTE:
        return current.replace(second=0, microsecond=0) + timedelta(minutes=1)
    if roll_point is RollPoint.TOP_OF_HOUR:
        return current.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)
    if roll_point is RollPoint.HALF_DAY:
        base = current.replace(minute=0, second=0, microsecond=0)
        if base.hour < 12:
            return base.replace(hour=12)
        return base.replace(hour=0) + timedelta(days=1)
    midnight = current.replace(hour=0, minute=0, second=0, microsecond=0)
    if roll_point is RollPoint.TOP_OF_DAY:
        return midnight + timedelta(days=1)
    if roll_point is RollPoint.TOP_OF_WEEK:
        days_since_sunday = (midnight.weekday() + 1) % 7
        return midnight + timedelta(days=7 - days_since_sunday)
    if roll_point is RollPoint.TOP_OF_MONTH:
        first = midnight.replace(day=1)
        if first.month == 12:
            return first.replace(year=first.year + 1, month=1)
        return first.replace(month=first.month + 1)
    return current


def compute_check_period(date_pattern: str) -> RollPoint:
    """Return the finest :class:`RollPoint` that changes ``date_pattern``'s output.

    Examples
    --------
    >>> compute_check_period('.yyyy-MM-dd')
    <RollPoint.TOP_OF_DAY: 3>
    >>> compute_check_period('.yyyy-MM-dd-HH')
    <RollPoint.TOP_OF_HOUR: 1>
    >>> compute_check_period("'constant'")
    <RollPoint.INVALID: -1>
    """

    reference = format_date(_EPOCH, date_pattern)
    for point in RollPoint:
        if point is RollPoint.INVALID:
            continue
        candidate = format_date(next_check_date(_EPOCH, point), date_pattern)
        if candidate != reference:
            return point
    return RollPoint.INVALID


_SIZE_RE = re.compile(r"^\s*(\d+)\s*(KB|MB|GB)?\s*$", re.IGNORECASE)
_MULTIPLIERS = {None: 1, "KB": 1024, "MB": 1024 * 1024, "GB": 1024 * 1024 * 1024}


def parse_file_size(value: str | int) -> int:
    """Convert ``value`` (bytes or ``"<n>KB|MB|GB"``) to a byte count.

    Examples
    --------
    >>> parse_file_size('10KB')
    10240
    >>> parse_file_size(' 2 mb ')
    2097152
    >>> parse_file_size(512)
    512
    """

    if isinstance(value, int):
        if value <= 0:
            raise ValueError(f"file size must be positive, got {value}")
        return value
    match = _SIZE_RE.match(value)
    if match is None:
        raise ValueError(f"{value!r} is not in the correct file size syntax (e.g. 10MB)")
    number = int(match.group(1))
    unit = match.group(2).upper() if match.group(2) else None
    size = number * _MULTIPLIERS[unit]
    if size <= 0:
        raise ValueError(f"file size must be positive, got {value!r}")
    return size


def combine_path(path: str, suffix: str, *, preserve_extension: bool) -> str:
    """Append ``suffix`` to ``path``, before the extension when requested.

    Examples
    --------
    >>> combine_path('/var/log/app.log', '.1', preserve_extension=False)
    '/var/log/app.log.1'
    >>> combine_path('/var/log/app.log', '.1', preserve_extension=True)
    '/var/log/app.1.log'
    """

    directory, name = os.path.split(path)
    stem, extension = os.path.splitext(name)
    if preserve_extension and extension:
        return os.path.join(directory, stem + suffix + extension)
    return path + suffix


__all__ = [
    "RollPoint",
    "RollingStyle",
    "combine_path",
    "compute_check_period",
    "next_check_date",
    "parse_file_size",
]
