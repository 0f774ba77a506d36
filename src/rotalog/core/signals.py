"""Signal-driven rotation requests.

The handler takes no locks: it hands the request to the scheduler's relay
thread, which posts it into the single-slot queue. The rotation itself
happens on the scheduler's rotation thread.
"""

from __future__ import annotations

import signal
import threading
from typing import TYPE_CHECKING, Any

from . import diagnostics
from .errors import ConfigurationError

if TYPE_CHECKING:
    from types import FrameType

    from .scheduler import RotationScheduler


def resolve_signal(name: str) -> signal.Signals:
    """Map ``"SIGHUP"`` or ``"hup"`` to the platform's signal number."""
    key = name.strip().upper()
    if not key.startswith("SIG"):
        key = f"SIG{key}"
    signum = getattr(signal, key, None)
    if not isinstance(signum, signal.Signals):
        raise ConfigurationError(f"unknown signal: {name}")
    return signum


def install_rotation_signal(
    scheduler: RotationScheduler,
    signame: str = "SIGHUP",
) -> Any:
    """Request a rotation whenever ``signame`` is delivered.

    Returns the previously installed handler so it can be restored with
    ``restore_signal``.

    Raises:
        ConfigurationError: Unknown signal, or not called from the main
            thread.
    """
    signum = resolve_signal(signame)
    if threading.current_thread() is not threading.main_thread():
        raise ConfigurationError(
            "rotation signal can only be installed from the main thread"
        )

    def _handler(_signum: int, _frame: FrameType | None) -> None:
        scheduler.trigger_from_signal()

    previous = signal.signal(signum, _handler)
    diagnostics.debug("signals", "rotation signal installed", signal=signum.name)
    return previous


def restore_signal(signame: str, previous: Any) -> None:
    signum = resolve_signal(signame)
    signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
