"""
Scheduled and on-demand rotation triggers.

The cron job and any manual trigger only post a request into a single-slot
queue; one dedicated thread takes requests off the queue and performs the
rotation. Timer callbacks and signal handlers therefore never do file I/O,
and scheduled rotations never run concurrently with each other. A request
posted while another is already pending is coalesced into it.
"""

from __future__ import annotations

import os
import queue
import sys
import threading
from datetime import datetime
from typing import TYPE_CHECKING, Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from . import diagnostics
from .errors import CloseError, RotalogError
from .settings import DEFAULT_SCHEDULE

if TYPE_CHECKING:
    from ..sinks import Rotatable

_ROTATE = object()
_STOP = object()

_JOB_ID = "rotalog-rotate"


def fail_fast(exc: RotalogError) -> None:
    """Report a failed rotation and terminate the process.

    Logging cannot continue once rotation has failed: the previous file may
    already be archived with nothing recreated in its place.
    """
    diagnostics.error(
        "scheduler",
        "rotation failed; terminating",
        error=type(exc).__name__,
        detail=str(exc),
        error_id=exc.context.error_id,
    )
    sys.stderr.write(f"rotalog: unable to rotate log: {exc}\n")
    sys.stderr.flush()
    os._exit(1)


class RotationScheduler:
    """Rotate a sink on a cron schedule and on request.

    Args:
        sink: Anything with a ``rotate()`` method, normally a RotatingSink.
        cron: Crontab expression; defaults to every day at midnight.
        timezone: Timezone for the cron expression; local time when None.
        on_error: Called on the rotation thread with any rotation error other
            than ``CloseError``. Defaults to ``fail_fast``.
    """

    def __init__(
        self,
        sink: Rotatable,
        *,
        cron: str = DEFAULT_SCHEDULE,
        timezone: str | None = None,
        on_error: Callable[[RotalogError], None] | None = None,
    ) -> None:
        self._sink = sink
        self._trigger = CronTrigger.from_crontab(cron, timezone=timezone)
        self._on_error = on_error or fail_fast
        self._requests: queue.Queue[object] = queue.Queue(maxsize=1)
        # SimpleQueue.put is reentrant, so signal handlers may post here
        self._signalled: queue.SimpleQueue[object] = queue.SimpleQueue()
        kwargs = {} if timezone is None else {"timezone": timezone}
        self._scheduler = BackgroundScheduler(**kwargs)
        self._thread: threading.Thread | None = None
        self._relay: threading.Thread | None = None
        self._stopping = False

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def next_fire_time(self) -> datetime | None:
        job = self._scheduler.get_job(_JOB_ID)
        if job is None:
            return None
        # Jobs added before the scheduler starts have no run time yet
        return getattr(job, "next_run_time", None)

    def start(self, *, schedule: bool = True) -> None:
        """Start the rotation thread and, unless disabled, the cron job."""
        if self._thread is not None:
            raise RuntimeError("scheduler already started")
        self._thread = threading.Thread(
            target=self._run, name="rotalog-rotation", daemon=True
        )
        self._thread.start()
        self._relay = threading.Thread(
            target=self._relay_signals, name="rotalog-signal-relay", daemon=True
        )
        self._relay.start()
        if schedule:
            self._scheduler.add_job(
                self.trigger,
                self._trigger,
                id=_JOB_ID,
                max_instances=1,
                coalesce=True,
            )
            self._scheduler.start()
        diagnostics.debug(
            "scheduler",
            "started",
            next_fire_time=self.next_fire_time,
        )

    def trigger(self) -> bool:
        """Request a rotation without blocking.

        Returns False when the request was coalesced into one already
        pending, or when the scheduler is stopping.
        """
        if self._stopping:
            return False
        try:
            self._requests.put_nowait(_ROTATE)
        except queue.Full:
            diagnostics.debug("scheduler", "rotation already pending")
            return False
        return True

    def trigger_from_signal(self) -> None:
        """Request a rotation from a signal handler.

        Takes no locks: the request is handed to a relay thread, which
        forwards it through ``trigger``. Safe to call while the interrupted
        thread is itself inside ``trigger`` or ``stop``.
        """
        self._signalled.put(_ROTATE)

    def stop(self, timeout: float | None = None) -> None:
        """Stop the cron job, finish any pending rotation, join the thread."""
        if self._stopping:
            return
        self._stopping = True
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        relay = self._relay
        if relay is not None:
            self._signalled.put(_STOP)
            relay.join(timeout)
        thread = self._thread
        if thread is None:
            return
        while thread.is_alive():
            try:
                self._requests.put(_STOP, timeout=0.1)
                break
            except queue.Full:
                continue
        thread.join(timeout)
        diagnostics.debug("scheduler", "stopped")

    def _relay_signals(self) -> None:
        while self._signalled.get() is not _STOP:
            self.trigger()

    def _run(self) -> None:
        while True:
            item = self._requests.get()
            if item is _STOP:
                return
            try:
                self._sink.rotate()
            except CloseError as e:
                diagnostics.warn(
                    "scheduler",
                    "previous log handle failed to close",
                    detail=str(e),
                    error_id=e.context.error_id,
                )
            except RotalogError as e:
                self._on_error(e)

    def __repr__(self) -> str:
        return f"<RotationScheduler running={self.running}>"
