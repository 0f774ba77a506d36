"""
Rotating file sink.

``RotatingSink`` owns exactly one active binary handle and swaps it for a
freshly created file on ``rotate()``. One lock guards the handle field and
every write through it; rotation holds that lock only for the pointer swap,
so renaming, creating, and closing files never stall writers.

Rotation protocol:
1. If a file exists at the logical name, ``os.replace`` it to
   ``<name>.<YYYY-MM-DD>``. A second rotation on the same day replaces the
   first archive.
2. Create a new file at the logical name (truncate-or-create).
3. Swap the active handle under the lock.
4. Close the displaced handle.

A failure in step 1 or 2 leaves the active handle untouched. A rename from
step 1 is not undone when step 2 fails. A failure in step 4 is reported
after the new handle is already serving writes.
"""

from __future__ import annotations

import asyncio
import os
import threading
import types
from datetime import date
from pathlib import Path
from typing import IO, Callable, Union

from ..core import diagnostics
from ..core.errors import (
    CloseError,
    CreateError,
    InitError,
    RenameError,
    RotalogError,
    SinkClosedError,
    WriteError,
)
from ..metrics.metrics import RotationMetrics

BytesLike = Union[bytes, bytearray, memoryview]

ARCHIVE_DATE_FORMAT = "%Y-%m-%d"


def archive_path_for(path: Path, day: date) -> Path:
    """Return the archival name of ``path`` for a rotation on ``day``."""
    return path.with_name(f"{path.name}.{day.strftime(ARCHIVE_DATE_FORMAT)}")


def _create(path: Path) -> IO[bytes]:
    # Unbuffered: bytes reach the OS before write() returns
    return open(path, "wb", buffering=0)


class RotatingSink:
    """Thread-safe write destination that can be rotated to a fresh file.

    Args:
        path: Logical name of the log file.
        handle: Optional already-open binary handle to adopt as the first
            active handle (for example a duplicate of stderr). When omitted,
            construction performs an initial rotation.
        encoding: Encoding applied to ``str`` payloads.
        today: Clock used to date archives.
        metrics: Optional collector for write and rotation counters.

    Raises:
        InitError: The initial rotation could not produce a writable file.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        handle: IO[bytes] | None = None,
        *,
        encoding: str = "utf-8",
        today: Callable[[], date] = date.today,
        metrics: RotationMetrics | None = None,
    ) -> None:
        self._path = Path(path)
        self._encoding = encoding
        self._today = today
        self._metrics = metrics
        self._lock = threading.Lock()
        self._handle: IO[bytes] | None = handle
        self._closed = False
        if handle is None:
            try:
                self.rotate()
            except RotalogError as e:
                raise InitError(
                    f"unable to create log file {self._path}",
                    path=self._path,
                    cause=e,
                ) from e

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    def archive_path(self, day: date | None = None) -> Path:
        return archive_path_for(self._path, day if day is not None else self._today())

    def write(self, data: BytesLike | str) -> int:
        """Write ``data`` to the active handle and return the byte count."""
        if isinstance(data, str):
            data = data.encode(self._encoding)
        with self._lock:
            handle = self._handle
            if handle is None:
                raise SinkClosedError("sink is closed", path=self._path)
            try:
                n = handle.write(data)
            except (OSError, ValueError) as e:
                if self._metrics is not None:
                    self._metrics.record_write_error()
                raise WriteError(
                    f"write to {self._path} failed", path=self._path, cause=e
                ) from e
        if n is None:
            # Raw handles return None when nothing could be written
            n = 0
        if self._metrics is not None:
            self._metrics.record_write(n)
        return n

    def flush(self) -> None:
        with self._lock:
            handle = self._handle
            if handle is None:
                return
            try:
                handle.flush()
            except (OSError, ValueError) as e:
                raise WriteError(
                    f"flush of {self._path} failed", path=self._path, cause=e
                ) from e

    def rotate(self) -> None:
        """Archive the current file and switch writers to a fresh one.

        Raises:
            RenameError: The existing file could not be archived.
            CreateError: The new file could not be created.
            CloseError: The displaced handle failed to close. The rotation
                itself has taken effect.
            SinkClosedError: The sink was closed.
        """
        if self._closed:
            raise SinkClosedError("sink is closed", path=self._path)

        archive: Path | None = None
        if self._path.exists():
            archive = self.archive_path()
            try:
                os.replace(self._path, archive)
            except OSError as e:
                self._record_failure("rename")
                raise RenameError(
                    f"unable to archive {self._path} as {archive}",
                    path=self._path,
                    cause=e,
                ) from e

        try:
            new = _create(self._path)
        except OSError as e:
            self._record_failure("create")
            raise CreateError(
                f"unable to create {self._path}", path=self._path, cause=e
            ) from e

        old: IO[bytes] | None = None
        with self._lock:
            closed = self._closed
            if not closed:
                old, self._handle = self._handle, new

        if closed:
            new.close()
            raise SinkClosedError("sink closed during rotation", path=self._path)

        if self._metrics is not None:
            self._metrics.record_rotation()
        diagnostics.debug(
            "sink",
            "rotated",
            path=str(self._path),
            archive=None if archive is None else str(archive),
        )

        if old is not None:
            try:
                old.close()
            except OSError as e:
                self._record_failure("close")
                raise CloseError(
                    f"unable to close previous handle of {self._path}",
                    path=self._path,
                    cause=e,
                ) from e

    def close(self) -> None:
        """Close the active handle; later writes raise ``SinkClosedError``."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            handle, self._handle = self._handle, None
        if handle is not None:
            try:
                handle.close()
            except OSError as e:
                raise CloseError(
                    f"unable to close {self._path}", path=self._path, cause=e
                ) from e

    def _record_failure(self, kind: str) -> None:
        if self._metrics is not None:
            self._metrics.record_rotation_error(kind=kind)

    def __enter__(self) -> RotatingSink:
        return self

    def __exit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc: BaseException | None,
        _tb: types.TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<RotatingSink path={str(self._path)!r} {state}>"


class AsyncRotatingSink:
    """Asyncio facade over a ``RotatingSink``.

    - Runs writes and rotations in a worker thread so file I/O never blocks
      the event loop
    - Errors propagate unchanged
    """

    name = "rotating-file"

    def __init__(self, sink: RotatingSink) -> None:
        self._sink = sink

    @property
    def sink(self) -> RotatingSink:
        return self._sink

    async def start(self) -> None:  # lifecycle placeholder
        return None

    async def stop(self) -> None:
        await asyncio.to_thread(self._sink.close)

    async def write(self, data: BytesLike | str) -> int:
        return await asyncio.to_thread(self._sink.write, data)

    async def rotate(self) -> None:
        await asyncio.to_thread(self._sink.rotate)
