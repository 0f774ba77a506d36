"""
Public entrypoints for rotalog.

A thread-safe log file that can be rotated atomically while writers keep
using it, plus the wiring that rotates it at midnight or on a signal.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from ._version import __version__
from .core.errors import (
    CloseError,
    ConfigurationError,
    CreateError,
    InitError,
    RenameError,
    RotalogError,
    SinkClosedError,
    WriteError,
)
from .core.runtime import RotationRuntime, setup_logging
from .core.scheduler import RotationScheduler, fail_fast
from .core.settings import Settings
from .metrics.metrics import RotationMetrics
from .sinks.rotating_file import AsyncRotatingSink, RotatingSink

__all__ = [
    "AsyncRotatingSink",
    "CloseError",
    "ConfigurationError",
    "CreateError",
    "InitError",
    "RenameError",
    "RotalogError",
    "RotatingSink",
    "RotationMetrics",
    "RotationRuntime",
    "RotationScheduler",
    "Settings",
    "SinkClosedError",
    "VERSION",
    "WriteError",
    "__version__",
    "fail_fast",
    "runtime",
    "setup_logging",
]

VERSION = __version__


@contextmanager
def runtime(
    logger: logging.Logger,
    *,
    settings: Settings | None = None,
) -> Iterator[RotationRuntime]:
    """Context manager that wires ``logger`` to a rotating file and tears
    the wiring down on exit.
    """
    rt = setup_logging(settings, logger=logger)
    try:
        yield rt
    finally:
        rt.close()
