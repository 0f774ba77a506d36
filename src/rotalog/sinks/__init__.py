from __future__ import annotations

from typing import Protocol, Union, runtime_checkable

from .rotating_file import (
    ARCHIVE_DATE_FORMAT,
    AsyncRotatingSink,
    RotatingSink,
    archive_path_for,
)


@runtime_checkable
class WritableSink(Protocol):
    """Writable byte-stream contract.

    Anything implementing ``write`` and ``flush`` can be installed as the
    stream of a ``logging.StreamHandler`` or handed to any other facility
    that writes bytes or text.
    """

    def write(self, data: Union[bytes, str]) -> int:  # noqa: D401
        """Write ``data`` and return the number of bytes written."""
        ...

    def flush(self) -> None: ...


@runtime_checkable
class Rotatable(Protocol):
    """Rotation trigger contract used by the scheduler and signal handler."""

    def rotate(self) -> None: ...


__all__ = [
    "ARCHIVE_DATE_FORMAT",
    "AsyncRotatingSink",
    "Rotatable",
    "RotatingSink",
    "WritableSink",
    "archive_path_for",
]
