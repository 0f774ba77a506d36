"""
Unit tests for CLI functionality.
"""

from __future__ import annotations

import io
from datetime import date
from pathlib import Path
from unittest.mock import patch

import pytest

from rotalog.cli.main import build_parser, cli_main, main
from rotalog.core.errors import ConfigurationError
from rotalog.sinks.rotating_file import RotatingSink


class TestRotateCommand:
    def test_archives_existing_file(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "app.log"
        path.write_bytes(b"yesterday")

        assert main(["rotate", str(path)]) == 0

        archive = tmp_path / f"app.log.{date.today().isoformat()}"
        assert archive.read_bytes() == b"yesterday"
        assert path.read_bytes() == b""
        assert str(archive) in capsys.readouterr().out

    def test_creates_missing_file(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "app.log"
        assert main(["rotate", str(path)]) == 0
        assert path.exists()
        assert "created" in capsys.readouterr().out

    def test_failure_exits_one(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "missing" / "app.log"
        assert main(["rotate", str(path)]) == 1
        assert capsys.readouterr().err.startswith("Error: unable to create log file")


class TestTeeCommand:
    def test_copies_stdin(self, tmp_path: Path) -> None:
        path = tmp_path / "app.log"
        stdin = io.BytesIO(b"one\ntwo\n")

        rc = main(["tee", str(path), "--no-schedule", "--no-signal"], stdin=stdin)

        assert rc == 0
        assert path.read_bytes() == b"one\ntwo\n"

    def test_schedule_and_signal_wiring(self, tmp_path: Path) -> None:
        path = tmp_path / "app.log"
        with patch("rotalog.cli.main.install_rotation_signal") as install, patch(
            "rotalog.cli.main.restore_signal"
        ) as restore:
            rc = main(
                ["tee", str(path), "--cron", "0 4 * * *", "--signal", "usr1"],
                stdin=io.BytesIO(b"x\n"),
            )
        assert rc == 0
        assert install.call_args.args[1] == "SIGUSR1"
        restore.assert_called_once()

    def test_invalid_cron_exits_one(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        rc = main(
            ["tee", str(tmp_path / "a.log"), "--cron", "bogus"],
            stdin=io.BytesIO(b""),
        )
        assert rc == 1
        assert capsys.readouterr().err.startswith("Error:")

    def test_unknown_timezone_exits_one(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        rc = main(
            ["tee", str(tmp_path / "a.log"), "--timezone", "Bogus/Zone", "--no-signal"],
            stdin=io.BytesIO(b""),
        )
        assert rc == 1
        assert "unknown timezone" in capsys.readouterr().err

    def test_sink_closed_when_scheduler_setup_fails(self, tmp_path: Path) -> None:
        close = RotatingSink.close
        with patch(
            "rotalog.cli.main.RotationScheduler",
            side_effect=ConfigurationError("no scheduler"),
        ), patch.object(
            RotatingSink, "close", autospec=True, side_effect=close
        ) as closed:
            rc = main(
                ["tee", str(tmp_path / "a.log"), "--no-signal"],
                stdin=io.BytesIO(b""),
            )
        assert rc == 1
        closed.assert_called_once()


def test_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_cli_main_delegates() -> None:
    with patch("rotalog.cli.main.main", return_value=0) as mock_main:
        assert cli_main() == 0
        mock_main.assert_called_once_with()
