"""
Internal structured diagnostics.

Rotation events and non-fatal failures are reported here as one JSON object
per line on stderr. Diagnostics never travel through a RotatingSink: the
sink may be mid-rotation, or be the very thing that failed.

Emission is gated by ``core.internal_logging_enabled``. The setting is read
once and cached in ``_internal_logging_enabled``; tests reset it to ``None``.
"""

from __future__ import annotations

import sys
import threading
import time
from typing import Any

import orjson
from pydantic import ValidationError

_internal_logging_enabled: bool | None = None
_write_lock = threading.Lock()


def _enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        from .settings import Settings

        try:
            _internal_logging_enabled = Settings().core.internal_logging_enabled
        except ValidationError:
            # A broken environment must not take diagnostics down with it
            _internal_logging_enabled = False
    return _internal_logging_enabled


def set_enabled(enabled: bool | None) -> None:
    """Override the cached setting; ``None`` re-reads it on next use."""
    global _internal_logging_enabled
    _internal_logging_enabled = enabled


def emit(level: str, component: str, message: str, **fields: Any) -> None:
    if not _enabled():
        return
    payload: dict[str, Any] = {
        "ts": time.time(),
        "level": level,
        "component": component,
        "message": message,
    }
    payload.update(fields)
    line = orjson.dumps(payload, default=str) + b"\n"
    with _write_lock:
        stream = sys.stderr
        stream.write(line.decode("utf-8"))
        stream.flush()


def debug(component: str, message: str, **fields: Any) -> None:
    emit("DEBUG", component, message, **fields)


def warn(component: str, message: str, **fields: Any) -> None:
    emit("WARN", component, message, **fields)


def error(component: str, message: str, **fields: Any) -> None:
    emit("ERROR", component, message, **fields)
