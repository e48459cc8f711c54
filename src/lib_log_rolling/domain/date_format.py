"""Invariant-culture custom date patterns (``yyyy-MM-dd HH:mm:ss,fff``).

Purpose
-------
Date patterns used for file roll suffixes and ``%date{...}`` options follow the
familiar custom format vocabulary (``yyyy``, ``MM``, ``dd``, ``HH``, quoted
literals) rather than :func:`time.strftime` directives. Rendering is locale
independent so file names never change with the host's language settings.

Contents
--------
* :func:`format_date` – render a :class:`datetime` with a custom pattern.
* :data:`NAMED_PATTERNS` – ``ABSOLUTE``, ``DATE`` and ``ISO8601`` shortcuts.
"""

from __future__ import annotations

from datetime import datetime, timedelta

_MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
_DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

NAMED_PATTERNS: dict[str, str] = {
    "ABSOLUTE": "HH:mm:ss,fff",
    "DATE": "dd MMM yyyy HH:mm:ss,fff",
    "ISO8601": "yyyy-MM-dd HH:mm:ss,fff",
}

_SPECIFIERS = frozenset("dfFhHKmMstyz")


def resolve_pattern(option: str | None) -> str:
    """Map a converter option onto a concrete date pattern.

    Examples
    --------
    >>> resolve_pattern(None)
    'yyyy-MM-dd HH:mm:ss,fff'
    >>> resolve_pattern('absolute')
    'HH:mm:ss,fff'
    >>> resolve_pattern('yyyyMMdd')
    'yyyyMMdd'
    """

    if not option:
        return NAMED_PATTERNS["ISO8601"]
    return NAMED_PATTERNS.get(option.strip().upper(), option)


def format_date(moment: datetime, pattern: str) -> str:
    """Render ``moment`` using a custom date ``pattern``.

    Examples
    --------
    >>> format_date(datetime(2025, 3, 7, 14, 5, 9, 123456), 'yyyy-MM-dd HH:mm:ss,fff')
    '2025-03-07 14:05:09,123'
    >>> format_date(datetime(2025, 3, 7), ".yyyy-MM-dd'.log'")
    '.2025-03-07.log'
    >>> format_date(datetime(2025, 3, 7, 9), 'ddd d MMM h tt')
    'Fri 7 Mar 9 AM'
    """

    out: list[str] = []
    index = 0
    length = len(pattern)
    while index < length:
        char = pattern[index]
        if char in ("'", '"'):
            end = pattern.find(char, index + 1)
            if end == -1:
                end = length
            out.append(pattern[index + 1 : end])
            index = end + 1
            continue
        if char == "\\":
            if index + 1 < length:
                out.append(pattern[index + 1])
            index += 2
            continue
        if char == "%" and index + 1 < length and pattern[index + 1] in _SPECIFIERS:
            index += 1
            continue
        if char not in _SPECIFIERS:
            out.append(char)
            index += 1
            continue
        run = 1
        while index + run < length and pattern[index + run] == char:
            run += 1
        out.append(_render_token(moment, char, run))
        index += run
    return "".join(out)


def _render_token(moment: datetime, char: str, run: int) -> str:
    if char == "y":
        if run <= 2:
            value = moment.year % 100
            return f"{value:02d}" if run == 2 else str(value)
        return f"{moment.year:0{run}d}"
    if char == "M":
        if run == 1:
            return str(moment.month)
        if run == 2:
            return f"{moment.month:02d}"
        name = _MONTH_NAMES[moment.month - 1]
        return name[:3] if run == 3 else name
    if char == "d":
        if run == 1:
            return str(moment.day)
        if run == 2:
            return f"{moment.day:02d}"
        name = _DAY_NAMES[moment.weekday()]
        return name[:3] if run == 3 else name
    if char == "H":
        return f"{moment.hour:02d}" if run >= 2 else str(moment.hour)
    if char == "h":
        hour = moment.hour % 12 or 12
        return f"{hour:02d}" if run >= 2 else str(hour)
    if char == "m":
        return f"{moment.minute:02d}" if run >= 2 else str(moment.minute)
    if char == "s":
        return f"{moment.second:02d}" if run >= 2 else str(moment.second)
    if char in ("f", "F"):
        digits = f"{moment.microsecond:06d}0"[: min(run, 7)]
        return digits.rstrip("0") if char == "F" else digits
    if char == "t":
        marker = "AM" if moment.hour < 12 else "PM"
        return marker[0] if run == 1 else marker
    if char in ("z", "K"):
        return _render_offset(moment.utcoffset(), char, run)
    return char * run


def _render_offset(offset: timedelta | None, char: str, run: int) -> str:
    if offset is None:
        return ""
    if char == "K" and offset == timedelta(0):
        return "Z"
    total_minutes = int(offset.total_seconds() // 60)
    sign = "+" if total_minutes >= 0 else "-"
    hours, minutes = divmod(abs(total_minutes), 60)
    if char == "z" and run == 1:
        return f"{sign}{hours}"
    if char == "z" and run == 2:
        return f"{sign}{hours:02d}"
    return f"{sign}{hours:02d}:{minutes:02d}"


__all__ = ["NAMED_PATTERNS", "format_date", "resolve_pattern"]
