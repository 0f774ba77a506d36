"""
Rotation metrics for rotalog.

Implements minimal Prometheus-compatible counters for writes and rotations.

Design goals:
- Thread-safe: writers and the rotation thread record concurrently
- Zero global state; each collector owns an isolated registry
- Safe no-op exporter behavior when metrics are disabled by settings
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

from prometheus_client import CollectorRegistry, Counter


@dataclass
class RotationStats:
    """Captured runtime counters for quick assertions in tests."""

    writes: int = 0
    bytes_written: int = 0
    write_errors: int = 0
    rotations: int = 0
    rotation_errors: int = 0


class RotationMetrics:
    """Thread-safe metrics collector for a rotating sink.

    In-memory counters are always maintained; Prometheus exporters are only
    created when enabled.
    """

    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        self._lock = threading.Lock()
        self._state = RotationStats()

        self._c_writes: Any | None = None
        self._c_bytes: Any | None = None
        self._c_write_errors: Any | None = None
        self._c_rotations: Any | None = None
        self._c_rotation_errors: Any | None = None
        self._registry: CollectorRegistry | None = None

        if self._enabled:
            self._registry = CollectorRegistry()
            self._c_writes = Counter(
                "rotalog_writes",
                "Total number of writes accepted by the sink",
                registry=self._registry,
            )
            self._c_bytes = Counter(
                "rotalog_bytes_written",
                "Total number of bytes written through the sink",
                registry=self._registry,
            )
            self._c_write_errors = Counter(
                "rotalog_write_errors",
                "Total number of writes rejected by the active handle",
                registry=self._registry,
            )
            self._c_rotations = Counter(
                "rotalog_rotations",
                "Total number of rotations that installed a new handle",
                registry=self._registry,
            )
            self._c_rotation_errors = Counter(
                "rotalog_rotation_errors",
                "Total number of failed rotation steps",
                ["kind"],
                registry=self._registry,
            )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry | None:
        """Expose the isolated Prometheus registry when enabled."""
        return self._registry

    def record_write(self, nbytes: int) -> None:
        with self._lock:
            self._state.writes += 1
            self._state.bytes_written += nbytes
        if self._c_writes is not None and self._c_bytes is not None:
            self._c_writes.inc()
            self._c_bytes.inc(nbytes)

    def record_write_error(self) -> None:
        with self._lock:
            self._state.write_errors += 1
        if self._c_write_errors is not None:
            self._c_write_errors.inc()

    def record_rotation(self) -> None:
        with self._lock:
            self._state.rotations += 1
        if self._c_rotations is not None:
            self._c_rotations.inc()

    def record_rotation_error(self, *, kind: str) -> None:
        with self._lock:
            self._state.rotation_errors += 1
        if self._c_rotation_errors is not None:
            self._c_rotation_errors.labels(kind=kind).inc()

    def snapshot(self) -> RotationStats:
        with self._lock:
            return RotationStats(
                writes=self._state.writes,
                bytes_written=self._state.bytes_written,
                write_errors=self._state.write_errors,
                rotations=self._state.rotations,
                rotation_errors=self._state.rotation_errors,
            )
