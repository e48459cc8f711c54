"""File appender that rotates its output by size and/or date.

Purpose
-------
Keep log files bounded: when the active file grows past ``maximum_file_size``
or the calendar crosses the boundary implied by ``date_pattern``, the active
file is renamed to a backup name and a fresh file is opened. Old backups are
pruned so at most ``max_size_roll_backups`` remain per date bucket.

Contents
--------
* :class:`RollingFileAppender` – the state machine (activation scan, date
  roll, size roll, rename/delete helpers).

System Role
-----------
Extends :class:`lib_log_rolling.adapters.file_appender.FileAppender`. All roll
decisions run inline on the appending thread under the appender's ``RLock``;
rename and delete failures are reported to the error handler and never escape
:meth:`append`.

Naming
------
With ``file="app.log"`` and the defaults (static name, descending count) the
active file is always ``app.log`` and backups are ``app.log.1`` (newest) to
``app.log.N`` (oldest). Date rolls rename ``app.log`` to
``app.log.2025-03-07``; size backups of a past day become
``app.log.2025-03-07.1`` and so on. ``preserve_log_file_name_extension`` moves
every suffix in front of the extension (``app.1.log``).
"""

from __future__ import annotations

import os
import re
import uuid
from datetime import datetime
from pathlib import Path

from lib_log_rolling.application.ports.error_handler import ErrorHandlerPort
from lib_log_rolling.application.ports.layout import LayoutPort
from lib_log_rolling.application.ports.time import ClockPort
from lib_log_rolling.domain.date_format import format_date
from lib_log_rolling.domain.errors import ErrorCode
from lib_log_rolling.domain.levels import LogLevel
from lib_log_rolling.domain.events import LogEvent
from lib_log_rolling.domain.rolling import (
    RollingStyle,
    RollPoint,
    combine_path,
    compute_check_period,
    next_check_date,
    parse_file_size,
)

from . import diagnostics
from .clock import LocalClock
from .file_appender import FileAppender
from .locking import LockingModelBase, LockingStream
from .pattern.pattern_string import PatternString
from .writers import CountingQuietTextWriter

DEFAULT_DATE_PATTERN = ".yyyy-MM-dd"
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024


class RollingFileAppender(FileAppender):
    """Append to a file, rolling it over by size, date, or both.

    Parameters
    ----------
    rolling_style:
        :class:`RollingStyle` or its name (``"size"``, ``"date"``,
        ``"composite"``, ``"none"``/``"once"``).
    date_pattern:
        Custom date pattern whose rendered value changes once per period.
    maximum_file_size:
        Bytes or ``"<n>KB|MB|GB"``; a size roll happens before a write that
        would push a non-empty file past this size.
    max_size_roll_backups:
        Backups kept per date bucket; ``0`` or negative keeps every backup.
    count_direction:
        Negative: ``.1`` is always the newest backup. Zero or positive: the
        newest backup carries the highest number.
    static_log_file_name:
        ``True``: always write to ``file``. ``False``: the active name carries
        the date (and the counter when counting upwards).
    preserve_log_file_name_extension:
        Insert suffixes before the extension.
    clock:
        Source of "now" for date decisions; defaults to :class:`LocalClock`.

    Examples
    --------
    >>> import tempfile, os
    >>> from datetime import datetime, timezone
    >>> from lib_log_rolling.adapters.pattern import PatternLayout
    >>> directory = tempfile.mkdtemp()
    >>> appender = RollingFileAppender(
    ...     file=os.path.join(directory, 'app.log'),
    ...     rolling_style='size',
    ...     maximum_file_size=10,
    ...     layout=PatternLayout('%message%newline{UNIX}'),
    ... )
    >>> appender.activate_options()
    >>> for text in ('first line', 'second line'):
    ...     appender.append(LogEvent(datetime(2025, 3, 7, tzinfo=timezone.utc), 'svc', LogLevel.INFO, text))
    >>> appender.close()
    >>> sorted(os.listdir(directory))
    ['app.log', 'app.log.1']
    """

    def __init__(
        self,
        *,
        file: str | PatternString | None = None,
        append_to_file: bool = True,
        rolling_style: RollingStyle | str = RollingStyle.COMPOSITE,
        date_pattern: str = DEFAULT_DATE_PATTERN,
        maximum_file_size: int | str = DEFAULT_MAX_FILE_SIZE,
        max_size_roll_backups: int = 0,
        count_direction: int = -1,
        static_log_file_name: bool = True,
        preserve_log_file_name_extension: bool = False,
        encoding: str = "utf-8",
        immediate_flush: bool = True,
        locking_model: LockingModelBase | None = None,
        clock: ClockPort | None = None,
        name: str | None = None,
        layout: LayoutPort | None = None,
        threshold: LogLevel | None = None,
        error_handler: ErrorHandlerPort | None = None,
    ) -> None:
        super().__init__(
            file=file,
            append_to_file=append_to_file,
            encoding=encoding,
            immediate_flush=immediate_flush,
            locking_model=locking_model,
            name=name,
            layout=layout,
            threshold=threshold,
            error_handler=error_handler,
        )
        self.rolling_style = rolling_style if isinstance(rolling_style, RollingStyle) else RollingStyle.from_name(rolling_style)
        self.date_pattern = date_pattern
        self.maximum_file_size = maximum_file_size
        self.max_size_roll_backups = max_size_roll_backups
        self.count_direction = count_direction
        self.static_log_file_name = static_log_file_name
        self.preserve_log_file_name_extension = preserve_log_file_name_extension
        self.clock: ClockPort = clock or LocalClock()

        self.roll_point = RollPoint.INVALID
        self.next_check: datetime | None = None
        self.scheduled_filename: str | None = None
        self.cur_size_roll_backups = 0
        self._base_file_name: str | None = None
        self._dated_base_name: str | None = None
        # raised size limit after a failed roll; one retry per maximum_file_size bytes
        self._size_retry_limit: int | None = None

    @property
    def maximum_file_size(self) -> int:
        return self._maximum_file_size

    @maximum_file_size.setter
    def maximum_file_size(self, value: int | str) -> None:
        self._maximum_file_size = parse_file_size(value)

    @property
    def base_file_name(self) -> str | None:
        """Configured (unsuffixed) path the rolled names derive from."""

        return self._base_file_name

    @property
    def count(self) -> int:
        """Bytes written to the active file, as tracked by the counting writer."""

        writer = self._writer
        return writer.count if isinstance(writer, CountingQuietTextWriter) else 0

    def activate_options(self) -> None:
        with self.lock:
            if self.rolling_style is RollingStyle.NONE:
                self.append_to_file = False
            now = self.clock.now()
            if self.rolling_style.rolls_by_date:
                if not self.date_pattern:
                    raise ValueError(f"RollingFileAppender [{self.name}]: date rolling requires a date_pattern")
                self.roll_point = compute_check_period(self.date_pattern)
                if self.roll_point is RollPoint.INVALID:
                    raise ValueError(f"Invalid roll point, unable to parse date pattern [{self.date_pattern}]")
                self.next_check = next_check_date(now, self.roll_point)

            self._base_file_name = self.resolve_file_name()
            if self.rolling_style.rolls_by_date and self.scheduled_filename is None:
                self.scheduled_filename = self._combine(self._base_file_name, format_date(now, self.date_pattern))

            self.existing_init(now)
            diagnostics.debug(
                "RollingFileAppender [%s]: activating on %s (style=%s, backups=%s)",
                self.name,
                self._base_file_name,
                self.rolling_style.value,
                self.cur_size_roll_backups,
            )
            self.open_file(self._base_file_name, self.append_to_file)

    def existing_init(self, now: datetime) -> None:
        """Adopt the state left on disk by a previous run."""

        base = self._require_base_file_name()
        self.cur_size_roll_backups = 0
        self._file_name = base if self.static_log_file_name else self.next_output_file_name(base, now)
        self.determine_cur_size_roll_backups(now)
        self.roll_over_if_date_boundary_crossing(now)

        if self.append_to_file:
            return
        target = self.next_output_file_name(base, now)
        if not os.path.exists(target):
            return
        if not self.static_log_file_name and self.count_direction >= 0:
            self.roll_over_rename_files(target)
            self.cur_size_roll_backups += 1
            return
        self.roll_over_rename_files(target)

    def determine_cur_size_roll_backups(self, now: datetime) -> None:
        """Scan the directory for numbered backups of the current bucket."""

        unnumbered = self._require_base_file_name()
        if not self.static_log_file_name and self.rolling_style.rolls_by_date:
            unnumbered = self._combine(unnumbered, format_date(now, self.date_pattern))
        path = Path(unnumbered)
        directory, file_name = path.parent, path.name
        if not directory.is_dir():
            return

        stem, extension = os.path.splitext(file_name)
        if self.preserve_log_file_name_extension and extension:
            expression = re.escape(stem) + r"\.(\d+)" + re.escape(extension) + "$"
        else:
            expression = re.escape(file_name) + r"\.(\d+)$"
        flags = re.IGNORECASE if os.path.normcase("A") == "a" else 0
        matcher = re.compile("^" + expression, flags)

        date_digits = self._date_suffix_digits(now)
        for entry in directory.iterdir():
            match = matcher.match(entry.name)
            if match is None or len(match.group(1)) == date_digits:
                continue
            backup = int(match.group(1))
            if backup <= self.cur_size_roll_backups:
                continue
            if self.max_size_roll_backups <= 0 or self.count_direction >= 0:
                self.cur_size_roll_backups = backup
            elif backup <= self.max_size_roll_backups:
                self.cur_size_roll_backups = backup
        diagnostics.debug("RollingFileAppender [%s]: found %s existing backups", self.name, self.cur_size_roll_backups)

    def _date_suffix_digits(self, now: datetime) -> int:
        """Length of an all-digit date suffix (``.yyyyMMdd``) that must not be read as a backup index."""

        if not (self.static_log_file_name and self.rolling_style.rolls_by_date):
            return -1
        rendered = format_date(now, self.date_pattern)
        if re.fullmatch(r"\.\d+", rendered) is None:
            return -1
        return len(rendered) - 1

    def roll_over_if_date_boundary_crossing(self, now: datetime) -> None:
        """Roll a static file last written in an earlier period into its dated name."""

        if not (self.static_log_file_name and self.rolling_style.rolls_by_date):
            return
        base = self._require_base_file_name()
        if not os.path.exists(base):
            return
        last_write = datetime.fromtimestamp(os.path.getmtime(base), now.tzinfo)
        last_formatted = format_date(last_write, self.date_pattern)
        if last_formatted == format_date(now, self.date_pattern):
            return
        self.scheduled_filename = self._combine(base, last_formatted)
        diagnostics.debug(
            "RollingFileAppender [%s]: initial roll over to [%s]", self.name, self.scheduled_filename
        )
        self.roll_over_time(now, file_is_open=False)

    def _combine(self, path: str, suffix: str) -> str:
        return combine_path(path, suffix, preserve_extension=self.preserve_log_file_name_extension)

    def next_output_file_name(self, file_name: str, now: datetime | None = None) -> str:
        """Map the base name onto the name of the file to write next."""

        if self.static_log_file_name:
            return file_name
        moment = now if now is not None else self.clock.now()
        dated = file_name
        if self.rolling_style.rolls_by_date:
            dated = self._combine(dated, format_date(moment, self.date_pattern))
        self._dated_base_name = dated
        if self.count_direction >= 0:
            return self._combine(dated, f".{self.cur_size_roll_backups}")
        return dated

    def _numbered_name(self, active: str, index: int) -> str:
        if not self.static_log_file_name and self.count_direction >= 0:
            return self._combine(self._dated_base_name or active, f".{index}")
        return self._combine(active, f".{index}")

    def create_writer(self, stream: LockingStream) -> CountingQuietTextWriter:
        return CountingQuietTextWriter(stream, self.error_handler, encoding=self.encoding)

    def open_file(self, file_name: str, append: bool) -> None:
        with self.lock:
            target = self.next_output_file_name(file_name)
            existing = 0
            if append and os.path.exists(target):
                existing = os.path.getsize(target)
            if not self.static_log_file_name:
                self.scheduled_filename = target
            super().open_file(target, append)
            writer = self._writer
            if isinstance(writer, CountingQuietTextWriter):
                writer.count += existing

    def reopen_file_name(self) -> str | None:
        return self._base_file_name or self._file_name

    def do_append(self, event: LogEvent) -> None:
        text = self.render(event)
        writer = self._writer
        pending = writer.measure(text) if isinstance(writer, CountingQuietTextWriter) else 0
        self.adjust_file_before_append(pending)
        self.write_record(text)

    def do_append_many(self, events: list[LogEvent]) -> None:
        for event in events:
            self.do_append(event)

    def adjust_file_before_append(self, pending: int = 0) -> None:
        """Apply the date trigger, then the size trigger, for a write of ``pending`` bytes."""

        now = self.clock.now()
        if self.rolling_style.rolls_by_date and self.next_check is not None and now >= self.next_check:
            self.next_check = next_check_date(now, self.roll_point)
            self.roll_over_time(now, file_is_open=True)

        if self.rolling_style.rolls_by_size and self._writer is not None:
            count = self.count
            limit = self._size_retry_limit or self.maximum_file_size
            if count > 0 and count + pending > limit:
                self.roll_over_size(now)

    def roll_over_time(self, now: datetime, *, file_is_open: bool) -> None:
        """Move the active file (and its size backups) to the previous period's name."""

        base = self._require_base_file_name()
        moved = True
        if self.static_log_file_name:
            active = self._file_name or base
            current = self._combine(active, format_date(now, self.date_pattern))
            scheduled = self.scheduled_filename
            if scheduled is None or scheduled == current:
                self.error_handler.error(f"Compare {scheduled} : {current} is the same file, skipping roll.")
                return
            if file_is_open:
                self.close_writer()
            moved = self.roll_file(active, scheduled)
            if moved:
                for index in range(1, self.cur_size_roll_backups + 1):
                    self.roll_file(self._combine(active, f".{index}"), self._combine(scheduled, f".{index}"))
            diagnostics.debug("RollingFileAppender [%s]: date roll %s -> %s", self.name, active, scheduled)

        if moved:
            self.cur_size_roll_backups = 0
            self._size_retry_limit = None
        self.scheduled_filename = self._combine(self._file_name or base, format_date(now, self.date_pattern))
        if file_is_open:
            self.safe_open_file(base, not moved)

    def roll_over_size(self, now: datetime) -> None:
        """Rotate numbered backups and start a fresh active file."""

        base = self._require_base_file_name()
        active = self._file_name or base
        self.close_writer()
        diagnostics.debug("RollingFileAppender [%s]: size roll of %s", self.name, active)
        moved = self.roll_over_rename_files(active)
        if moved and not self.static_log_file_name and self.count_direction >= 0:
            self.cur_size_roll_backups += 1
        self.safe_open_file(base, not moved)
        self._size_retry_limit = None if moved else self.count + self.maximum_file_size

    def _require_base_file_name(self) -> str:
        if self._base_file_name is None:
            raise RuntimeError(f"RollingFileAppender [{self.name}] has not been activated")
        return self._base_file_name

    def roll_over_rename_files(self, active: str) -> bool:
        """Shift numbered backups for ``active``; returns ``False`` when it could not be moved.

        The active file is moved before any backup is deleted or shifted, so a
        file that cannot be moved leaves the backups and the counter as they were.
        """

        limit = self.max_size_roll_backups
        if self.count_direction < 0:
            staged = self._stage_active_file(active)
            if staged is None:
                return False
            if 0 < limit <= self.cur_size_roll_backups:
                self.delete_file(self._combine(active, f".{limit}"))
                self.cur_size_roll_backups = limit - 1
            for index in range(self.cur_size_roll_backups, 0, -1):
                self.roll_file(self._combine(active, f".{index}"), self._combine(active, f".{index + 1}"))
            self.cur_size_roll_backups += 1
            self.roll_file(staged, self._combine(active, ".1"))
            return True

        if self.static_log_file_name:
            if not self.roll_file(active, self._combine(active, f".{self.cur_size_roll_backups + 1}")):
                return False
            if 0 < limit <= self.cur_size_roll_backups:
                self.delete_file(self._numbered_name(active, self.cur_size_roll_backups - limit + 1))
            self.cur_size_roll_backups += 1
            return True
        if 0 < limit <= self.cur_size_roll_backups:
            self.delete_file(self._numbered_name(active, self.cur_size_roll_backups - limit))
        return True

    def _stage_active_file(self, active: str) -> str | None:
        """Move ``active`` to a temporary name; ``None`` when the move failed."""

        if not os.path.exists(active):
            return active
        staged = f"{active}.{uuid.uuid4().hex}.RollPending"
        try:
            os.replace(active, staged)
        except OSError as exc:
            self.error_handler.error(
                f"Exception while rolling file [{active}] -> [{self._combine(active, '.1')}]", exc, ErrorCode.GENERIC_FAILURE
            )
            return None
        return staged

    def roll_file(self, source: str, target: str) -> bool:
        """Rename ``source`` to ``target`` replacing ``target``; ``True`` unless the move failed."""

        if not os.path.exists(source):
            diagnostics.debug("Cannot roll file [%s] -> [%s]; source does not exist", source, target)
            return True
        self.delete_file(target)
        try:
            os.replace(source, target)
        except OSError as exc:
            self.error_handler.error(f"Exception while rolling file [{source}] -> [{target}]", exc, ErrorCode.GENERIC_FAILURE)
            return False
        return True

    def delete_file(self, path: str) -> None:
        """Delete ``path`` if present, renaming it aside first so a held handle cannot block the roll."""

        if not os.path.exists(path):
            return
        victim = path
        pending = f"{path}.{uuid.uuid4().hex}.DeletePending"
        try:
            os.replace(path, pending)
            victim = pending
        except OSError as exc:
            diagnostics.debug("Exception while moving file to be deleted [%s] -> [%s]: %s", path, pending, exc)
        try:
            os.remove(victim)
        except OSError as exc:
            if victim == path:
                self.error_handler.error(f"Exception while deleting file [{path}]", exc, ErrorCode.GENERIC_FAILURE)
            else:
                diagnostics.debug("Exception while deleting temporary file [%s]: %s", victim, exc)


__all__ = ["DEFAULT_DATE_PATTERN", "DEFAULT_MAX_FILE_SIZE", "RollingFileAppender"]
