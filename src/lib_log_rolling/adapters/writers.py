"""Text writers that route I/O failures to an error handler.

Purpose
-------
Wrap the appender's output stream so ``write``/``flush``/``close`` never raise
into the caller. The counting variant also tracks how many encoded bytes have
reached the file, which drives size-based rollover.

Contents
--------
* :class:`TextSink` – protocol for the wrapped stream.
* :class:`QuietTextWriter` – swallow-and-report writer.
* :class:`CountingQuietTextWriter` – adds an encoded byte counter.
"""

from __future__ import annotations

import codecs
from typing import Any, Protocol, runtime_checkable

from lib_log_rolling.application.ports.error_handler import ErrorHandlerPort
from lib_log_rolling.domain.errors import ErrorCode


@runtime_checkable
class TextSink(Protocol):
    def write(self, text: str, /) -> Any: ...

    def flush(self) -> None: ...

    def close(self) -> None: ...


class QuietTextWriter:
    """Delegate to ``sink``; report failures instead of raising them.

    Examples
    --------
    >>> import io
    >>> from lib_log_rolling.adapters.error_handler import OnlyOnceErrorHandler
    >>> writer = QuietTextWriter(io.StringIO(), OnlyOnceErrorHandler())
    >>> writer.write('hello')
    >>> writer.sink.getvalue()
    'hello'
    """

    def __init__(self, sink: TextSink, error_handler: ErrorHandlerPort) -> None:
        if error_handler is None:
            raise ValueError("error_handler is required")
        self._sink = sink
        self._error_handler = error_handler
        self._closed = False

    @property
    def sink(self) -> TextSink:
        return self._sink

    @property
    def error_handler(self) -> ErrorHandlerPort:
        return self._error_handler

    @error_handler.setter
    def error_handler(self, value: ErrorHandlerPort) -> None:
        if value is None:
            raise ValueError("error_handler is required")
        self._error_handler = value

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, text: str) -> None:
        self._write_quietly(text)

    def flush(self) -> None:
        if self._closed:
            return
        try:
            self._sink.flush()
        except Exception as exc:  # noqa: BLE001
            self._error_handler.error("Failed to flush writer.", exc, ErrorCode.FLUSH_FAILURE)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._sink.close()
        except Exception as exc:  # noqa: BLE001
            self._error_handler.error("Failed to close writer.", exc, ErrorCode.CLOSE_FAILURE)

    def _write_quietly(self, text: str) -> bool:
        if self._closed:
            self._error_handler.error("Attempted to write to a closed writer.", None, ErrorCode.WRITE_FAILURE)
            return False
        try:
            self._sink.write(text)
        except Exception as exc:  # noqa: BLE001
            self._error_handler.error(f"Failed to write [{text}].", exc, ErrorCode.WRITE_FAILURE)
            return False
        return True


class CountingQuietTextWriter(QuietTextWriter):
    """Quiet writer that counts the encoded size of successful writes.

    Examples
    --------
    >>> import io
    >>> from lib_log_rolling.adapters.error_handler import OnlyOnceErrorHandler
    >>> writer = CountingQuietTextWriter(io.StringIO(), OnlyOnceErrorHandler(), encoding='utf-8')
    >>> writer.write('héllo')
    >>> writer.count
    6
    """

    def __init__(self, sink: TextSink, error_handler: ErrorHandlerPort, *, encoding: str = "utf-8") -> None:
        super().__init__(sink, error_handler)
        self.encoding = codecs.lookup(encoding).name
        self.count = 0

    def measure(self, text: str) -> int:
        """Return the number of bytes ``text`` occupies once encoded."""

        return len(text.encode(self.encoding, errors="replace"))

    def write(self, text: str) -> None:
        if not text:
            return
        if self._write_quietly(text):
            self.count += self.measure(text)


__all__ = ["CountingQuietTextWriter", "QuietTextWriter", "TextSink"]
