"""Appender writing rendered events to a file.

Purpose
-------
Own the file handle life cycle: resolve the configured path (which may carry
pattern directives), open it through a locking model, write the layout's
header and footer, and reopen after an open failure.

Contents
--------
* :class:`FileAppender`.

System Role
-----------
Base class of :class:`lib_log_rolling.adapters.rolling_file.RollingFileAppender`,
which hooks into :meth:`FileAppender.open_file` and :meth:`FileAppender.do_append`.
"""

from __future__ import annotations

import codecs
import os
from pathlib import Path

from lib_log_rolling.application.ports.error_handler import ErrorHandlerPort
from lib_log_rolling.application.ports.layout import LayoutPort
from lib_log_rolling.domain.errors import ErrorCode
from lib_log_rolling.domain.events import LogEvent
from lib_log_rolling.domain.levels import LogLevel

from . import diagnostics
from .appender_base import AppenderSkeleton
from .locking import ExclusiveLock, LockingModelBase, LockingStream
from .pattern.pattern_string import PatternString
from .writers import QuietTextWriter


class FileAppender(AppenderSkeleton):
    """Write events to ``file``, appending or truncating on activation.

    Parameters
    ----------
    file:
        Target path. Strings containing ``%`` are expanded as a
        :class:`PatternString` (``%env{LOG_DIR}/app.log``).
    append_to_file:
        ``False`` truncates an existing file when it is opened.
    encoding:
        Text encoding of the file.
    immediate_flush:
        Flush after every record so nothing is lost on a crash.
    locking_model:
        :class:`ExclusiveLock` (default), :class:`MinimalLock` or
        :class:`InterProcessLock`.
    """

    def __init__(
        self,
        *,
        file: str | PatternString | None = None,
        append_to_file: bool = True,
        encoding: str = "utf-8",
        immediate_flush: bool = True,
        locking_model: LockingModelBase | None = None,
        name: str | None = None,
        layout: LayoutPort | None = None,
        threshold: LogLevel | None = None,
        error_handler: ErrorHandlerPort | None = None,
    ) -> None:
        super().__init__(name=name, layout=layout, threshold=threshold, error_handler=error_handler)
        self.file = file
        self.append_to_file = append_to_file
        self.encoding = codecs.lookup(encoding).name
        self.immediate_flush = immediate_flush
        self.locking_model = locking_model or ExclusiveLock()
        self._file_name: str | None = None
        self._stream: LockingStream | None = None
        self._writer: QuietTextWriter | None = None

    @property
    def file_name(self) -> str | None:
        """Absolute path of the file currently (or last) opened."""

        return self._file_name

    def resolve_file_name(self) -> str:
        """Expand :attr:`file` to an absolute path."""

        if self.file is None:
            raise ValueError(f"FileAppender [{self.name}]: no file name configured")
        if isinstance(self.file, PatternString):
            raw = self.file.format()
        elif "%" in self.file:
            raw = PatternString(self.file).format()
        else:
            raw = self.file
        raw = raw.strip()
        absolute = os.path.abspath(Path(raw).expanduser())
        # "logs/" and "logs/." name the directory; dynamic names are appended inside it
        if os.path.basename(raw.replace(os.sep, "/")) in ("", "."):
            return os.path.join(absolute, "")
        return absolute

    def activate_options(self) -> None:
        super().activate_options()
        with self.lock:
            file_name = self.resolve_file_name()
            diagnostics.debug("FileAppender [%s]: opening %s (append=%s)", self.name, file_name, self.append_to_file)
            self.open_file(file_name, self.append_to_file)

    def open_file(self, file_name: str, append: bool) -> None:
        """Close any current writer and open ``file_name``; errors propagate."""

        with self.lock:
            self.reset()
            self._file_name = file_name
            self.locking_model.open_file(file_name, append, self.encoding)
            self._stream = LockingStream(self.locking_model, self.encoding)
            self._writer = self.create_writer(self._stream)
            self.write_header()

    def safe_open_file(self, file_name: str, append: bool) -> bool:
        """Open ``file_name`` reporting failures to the error handler instead of raising."""

        try:
            self.open_file(file_name, append)
        except Exception as exc:  # noqa: BLE001
            self.error_handler.error(
                f"OpenFile({file_name},{append}) call failed.", exc, ErrorCode.FILE_OPEN_FAILURE
            )
            return False
        return True

    def create_writer(self, stream: LockingStream) -> QuietTextWriter:
        return QuietTextWriter(stream, self.error_handler)

    def pre_append_check(self) -> bool:
        if not super().pre_append_check():
            return False
        if self._writer is None:
            if self._file_name is None:
                self.error_handler.error(f"No output stream for the appender named [{self.name}].")
                return False
            if not self.safe_open_file(self.reopen_file_name() or self._file_name, True):
                return False
        return True

    def reopen_file_name(self) -> str | None:
        """Name passed to :meth:`open_file` when recovering from an open failure."""

        return self._file_name

    def do_append(self, event: LogEvent) -> None:
        self.write_record(self.render(event))

    def write_record(self, text: str) -> None:
        writer, stream = self._writer, self._stream
        if writer is None or stream is None:
            return
        try:
            locked = stream.acquire_lock()
        except OSError as exc:
            self.error_handler.error(f"Unable to acquire lock on file {self._file_name}.", exc, ErrorCode.FILE_OPEN_FAILURE)
            return
        if not locked:
            self.error_handler.error(f"Unable to acquire lock on file {self._file_name}.", None, ErrorCode.FILE_OPEN_FAILURE)
            return
        try:
            writer.write(text)
            if self.immediate_flush:
                writer.flush()
        finally:
            stream.release_lock()

    def write_header(self) -> None:
        if self.layout is not None and self.layout.header:
            self.write_record(self.layout.header)

    def write_footer(self) -> None:
        if self.layout is not None and self.layout.footer:
            self.write_record(self.layout.footer)

    def close_writer(self) -> None:
        """Write the footer and close the current writer, if any."""

        writer = self._writer
        if writer is None:
            return
        self.write_footer()
        writer.close()
        self._writer = None
        self._stream = None

    def reset(self) -> None:
        self.close_writer()

    def flush(self, timeout: float | None = None) -> bool:
        with self.lock:
            if self._writer is not None:
                self._writer.flush()
        return True

    def on_close(self) -> None:
        self.reset()


__all__ = ["FileAppender"]
