"""
Process wiring for a rotating log file.

``setup_logging`` builds a RotatingSink from settings, installs it as the
stream of a ``logging.StreamHandler`` on the logger the caller passes in,
and starts the scheduled and signal-driven rotation triggers. There is no
module-level sink: the returned ``RotationRuntime`` owns every piece and
tears them down in reverse order.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import IO, Any, Callable

from ..metrics.metrics import RotationMetrics
from ..sinks.rotating_file import RotatingSink
from . import diagnostics
from .errors import ConfigurationError, RotalogError
from .scheduler import RotationScheduler
from .settings import Settings
from .signals import install_rotation_signal, restore_signal

_STDERR_FD = 2


def _adopt_stderr() -> IO[bytes]:
    # Duplicate the descriptor so retiring it on rotation leaves stderr open
    return os.fdopen(os.dup(_STDERR_FD), "wb", buffering=0)


class RotationRuntime:
    """Live wiring returned by ``setup_logging``."""

    def __init__(
        self,
        *,
        sink: RotatingSink,
        logger: logging.Logger,
        handler: logging.Handler,
        scheduler: RotationScheduler | None,
        metrics: RotationMetrics,
        signame: str | None = None,
        previous_signal_handler: Any = None,
    ) -> None:
        self.sink = sink
        self.logger = logger
        self.handler = handler
        self.scheduler = scheduler
        self.metrics = metrics
        self._signame = signame
        self._previous_signal_handler = previous_signal_handler
        self._closed = False

    def rotate(self) -> None:
        """Rotate now, on the calling thread. Errors propagate."""
        self.sink.rotate()

    def request_rotation(self) -> bool:
        """Queue a rotation on the scheduler's rotation thread."""
        if self.scheduler is None:
            raise ConfigurationError("no rotation scheduler is running")
        return self.scheduler.trigger()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._signame is not None:
            restore_signal(self._signame, self._previous_signal_handler)
        if self.scheduler is not None:
            self.scheduler.stop()
        self.logger.removeHandler(self.handler)
        self.handler.close()
        self.sink.close()


def setup_logging(
    settings: Settings | None = None,
    *,
    logger: logging.Logger,
    on_rotate_error: Callable[[RotalogError], None] | None = None,
    handle: IO[bytes] | None = None,
) -> RotationRuntime:
    """Route ``logger`` into a rotating file and start its triggers.

    Args:
        settings: Configuration; read from the environment when omitted.
        logger: The stdlib logger that receives the sink's handler.
        on_rotate_error: Called when a scheduled or signalled rotation
            fails. The default terminates the process.
        handle: Explicit first handle, overriding ``rotation.adopt_stderr``.

    Raises:
        ConfigurationError: No ``rotation.path`` configured.
        InitError: The log file could not be created.
    """
    cfg = settings or Settings()
    rot = cfg.rotation
    if rot.path is None:
        raise ConfigurationError("rotation.path is required")

    metrics = RotationMetrics(enabled=cfg.core.enable_metrics)
    if handle is None and rot.adopt_stderr:
        handle = _adopt_stderr()
    sink = RotatingSink(rot.path, handle, encoding=rot.encoding, metrics=metrics)

    handler = logging.StreamHandler(sink)  # type: ignore[arg-type]
    logger.addHandler(handler)

    scheduler: RotationScheduler | None = None
    signame: str | None = None
    previous: Any = None
    try:
        if rot.schedule_enabled or rot.signal is not None:
            scheduler = RotationScheduler(
                sink,
                cron=rot.schedule,
                timezone=rot.timezone,
                on_error=on_rotate_error,
            )
            scheduler.start(schedule=rot.schedule_enabled)
        if rot.signal is not None and scheduler is not None:
            if threading.current_thread() is threading.main_thread():
                previous = install_rotation_signal(scheduler, rot.signal)
                signame = rot.signal
            else:
                diagnostics.warn(
                    "runtime",
                    "rotation signal skipped outside the main thread",
                    signal=rot.signal,
                )
    except BaseException:
        if scheduler is not None:
            scheduler.stop()
        logger.removeHandler(handler)
        sink.close()
        raise

    return RotationRuntime(
        sink=sink,
        logger=logger,
        handler=handler,
        scheduler=scheduler,
        metrics=metrics,
        signame=signame,
        previous_signal_handler=previous,
    )
