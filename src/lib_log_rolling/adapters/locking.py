"""File locking models and the text stream that honours them.

Purpose
-------
Decide how long the appender keeps its file handle open. ``ExclusiveLock``
holds it for the appender's lifetime (fastest); ``MinimalLock`` opens and
closes the file around every record so other processes or tools can move or
read it between writes; ``InterProcessLock`` does the same under a companion
lock file so several processes can share one log.

Contents
--------
* :class:`LockingModelBase` – shared stream creation.
* :class:`ExclusiveLock`, :class:`MinimalLock`, :class:`InterProcessLock` – the models.
* :class:`LockingStream` – text stream encoding into whatever the model hands
  out while the lock is held.
* :func:`locking_model_from_name` – ``"exclusive"``, ``"minimal"`` or ``"interprocess"`` lookup.

System Role
-----------
Owned by :class:`lib_log_rolling.adapters.file_appender.FileAppender`; the
appender's own ``RLock`` serialises threads, the models only govern handles.
"""

from __future__ import annotations

import codecs
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO

from filelock import FileLock

from lib_log_rolling.application.ports.locking import LockingModelPort


class LockingModelBase(LockingModelPort, ABC):
    """Common state for locking models."""

    def __init__(self) -> None:
        self.filename: str | None = None
        self.append = True
        self.encoding = "utf-8"

    @staticmethod
    def create_stream(filename: str, append: bool) -> BinaryIO:
        """Open ``filename`` for binary writing, creating parent directories."""

        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path.open("ab" if append else "wb")  # noqa: SIM115

    @abstractmethod
    def open_file(self, filename: str, append: bool, encoding: str) -> None: ...

    @abstractmethod
    def close_file(self) -> None: ...

    @abstractmethod
    def acquire(self) -> BinaryIO | None: ...

    @abstractmethod
    def release(self) -> None: ...


class ExclusiveLock(LockingModelBase):
    """Keep the file open from :meth:`open_file` until :meth:`close_file`."""

    def __init__(self) -> None:
        super().__init__()
        self._stream: BinaryIO | None = None

    def open_file(self, filename: str, append: bool, encoding: str) -> None:
        self.close_file()
        self.filename, self.append, self.encoding = filename, append, encoding
        self._stream = self.create_stream(filename, append)

    def close_file(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None:
            stream.close()

    def acquire(self) -> BinaryIO | None:
        return self._stream

    def release(self) -> None:
        return None


class MinimalLock(LockingModelBase):
    """Open the file only while a record is being written."""

    def __init__(self) -> None:
        super().__init__()
        self._stream: BinaryIO | None = None

    def open_file(self, filename: str, append: bool, encoding: str) -> None:
        self.close_file()
        self.filename, self.append, self.encoding = filename, append, encoding
        # create/truncate once so activation surfaces permission problems
        self.create_stream(filename, append).close()
        self.append = True

    def close_file(self) -> None:
        self.release()
        self.filename = None

    def acquire(self) -> BinaryIO | None:
        if self._stream is None and self.filename is not None:
            self._stream = self.create_stream(self.filename, self.append)
        return self._stream

    def release(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None:
            stream.close()


class InterProcessLock(LockingModelBase):
    """Serialise writers in several processes through a ``<file>.lock`` companion.

    The file is opened per record like :class:`MinimalLock`, but only while
    the companion lock is held, so records from different processes never
    interleave. Waiting longer than ``timeout`` seconds fails the write.
    """

    def __init__(self, timeout: float = 10.0) -> None:
        super().__init__()
        self.timeout = timeout
        self._mutex: FileLock | None = None
        self._stream: BinaryIO | None = None

    def open_file(self, filename: str, append: bool, encoding: str) -> None:
        self.close_file()
        self.filename, self.append, self.encoding = filename, append, encoding
        Path(filename).parent.mkdir(parents=True, exist_ok=True)
        self._mutex = FileLock(f"{filename}.lock", timeout=self.timeout)
        with self._mutex:
            self.create_stream(filename, append).close()
        self.append = True

    def close_file(self) -> None:
        self.release()
        self.filename = None
        self._mutex = None

    def acquire(self) -> BinaryIO | None:
        mutex = self._mutex
        if self._stream is not None or self.filename is None or mutex is None:
            return self._stream
        mutex.acquire()
        try:
            self._stream = self.create_stream(self.filename, self.append)
        except OSError:
            mutex.release()
            raise
        return self._stream

    def release(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.close()
        finally:
            if self._mutex is not None:
                self._mutex.release()


def locking_model_from_name(name: str) -> LockingModelBase:
    """Return a fresh locking model for ``name``.

    Examples
    --------
    >>> type(locking_model_from_name('minimal')).__name__
    'MinimalLock'
    """

    normalized = name.strip().lower()
    if normalized in {"exclusive", "exclusivelock"}:
        return ExclusiveLock()
    if normalized in {"minimal", "minimallock"}:
        return MinimalLock()
    if normalized in {"interprocess", "interprocesslock"}:
        return InterProcessLock()
    raise ValueError(f"Unsupported locking model: {name!r}")


class LockingStream:
    """Text stream that writes through a locking model.

    Writes outside an explicit :meth:`acquire_lock` / :meth:`release_lock`
    pair take and release the lock themselves.
    """

    def __init__(self, model: LockingModelBase, encoding: str = "utf-8") -> None:
        self._model = model
        self._encoder = codecs.getincrementalencoder(encoding)(errors="replace")
        self._level = 0
        self._stream: BinaryIO | None = None

    @property
    def model(self) -> LockingModelBase:
        return self._model

    def acquire_lock(self) -> bool:
        if self._level == 0:
            stream = self._model.acquire()
            if stream is None:
                return False
            self._stream = stream
        self._level += 1
        return True

    def release_lock(self) -> None:
        if self._level == 0:
            return
        self._level -= 1
        if self._level == 0:
            self._stream = None
            self._model.release()

    def write(self, text: str) -> int:
        if not self.acquire_lock():
            raise OSError(f"Unable to acquire lock on {self._model.filename!r}")
        stream = self._stream
        try:
            if stream is None:
                raise OSError(f"No open stream for {self._model.filename!r}")
            stream.write(self._encoder.encode(text))
            if self._level == 1:
                stream.flush()
            return len(text)
        finally:
            self.release_lock()

    def flush(self) -> None:
        if self._stream is not None:
            self._stream.flush()
            return
        stream = self._model.acquire()
        try:
            if stream is not None:
                stream.flush()
        finally:
            self._model.release()

    def close(self) -> None:
        self._level = 0
        self._stream = None
        self._model.close_file()


__all__ = [
    "ExclusiveLock",
    "InterProcessLock",
    "LockingModelBase",
    "LockingStream",
    "MinimalLock",
    "locking_model_from_name",
]
