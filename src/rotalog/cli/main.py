"""
Command-line interface for rotalog.

``rotalog rotate PATH`` rotates a log file once, the way the midnight job
would. ``rotalog tee PATH`` copies stdin into a rotating file, rotating on
the cron schedule and whenever the configured signal arrives.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import BinaryIO, Sequence

from pydantic import ValidationError

from .._version import __version__
from ..core.errors import RotalogError
from ..core.scheduler import RotationScheduler
from ..core.settings import RotationSettings, Settings
from ..core.signals import install_rotation_signal, restore_signal
from ..metrics.metrics import RotationMetrics
from ..sinks.rotating_file import RotatingSink


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rotalog",
        description="Rotate log files atomically under concurrent writers.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    rotate = sub.add_parser("rotate", help="archive PATH under today's date")
    rotate.add_argument("path", type=Path)

    tee = sub.add_parser("tee", help="copy stdin into a rotating file")
    tee.add_argument("path", type=Path)
    tee.add_argument("--cron", help="crontab expression for scheduled rotation")
    tee.add_argument("--timezone", help="timezone for the cron expression")
    tee.add_argument(
        "--no-schedule",
        action="store_true",
        help="rotate only on signal",
    )
    tee.add_argument("--signal", help="signal that requests a rotation")
    tee.add_argument(
        "--no-signal",
        action="store_true",
        help="do not install a rotation signal handler",
    )
    return parser


def _rotate_once(path: Path) -> int:
    existed = path.exists()
    sink = RotatingSink(path)
    archive = sink.archive_path()
    sink.close()
    if existed:
        print(f"{path} -> {archive}")
    else:
        print(f"{path} created")
    return 0


def _rotation_settings(args: argparse.Namespace) -> RotationSettings:
    base = Settings().rotation.model_dump()
    base["path"] = args.path
    base["adopt_stderr"] = False
    if args.cron:
        base["schedule"] = args.cron
    if args.timezone:
        base["timezone"] = args.timezone
    if args.no_schedule:
        base["schedule_enabled"] = False
    if args.signal:
        base["signal"] = args.signal
    if args.no_signal:
        base["signal"] = None
    return RotationSettings(**base)


def _tee(args: argparse.Namespace, stdin: BinaryIO) -> int:
    path: Path = args.path
    rot = _rotation_settings(args)
    metrics = RotationMetrics(enabled=Settings().core.enable_metrics)
    sink = RotatingSink(path, encoding=rot.encoding, metrics=metrics)
    scheduler: RotationScheduler | None = None
    installed = False
    previous = None
    try:
        scheduler = RotationScheduler(
            sink, cron=rot.schedule, timezone=rot.timezone
        )
        scheduler.start(schedule=rot.schedule_enabled)
        if rot.signal is not None:
            previous = install_rotation_signal(scheduler, rot.signal)
            installed = True
        for line in stdin:
            sink.write(line)
    finally:
        if installed and rot.signal is not None:
            restore_signal(rot.signal, previous)
        if scheduler is not None:
            scheduler.stop()
        sink.close()
    return 0


def main(argv: Sequence[str] | None = None, *, stdin: BinaryIO | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    try:
        if args.command == "rotate":
            return _rotate_once(args.path)
        return _tee(args, stdin if stdin is not None else sys.stdin.buffer)
    except (RotalogError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cli_main() -> int:
    return main()


if __name__ == "__main__":
    sys.exit(cli_main())
