"""Settings defaults, environment loading, and validation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from rotalog.core.settings import (
    DEFAULT_SCHEDULE,
    CoreSettings,
    RotationSettings,
    Settings,
)


def test_defaults() -> None:
    settings = Settings()
    assert settings.core == CoreSettings()
    rot = settings.rotation
    assert rot.path is None
    assert rot.adopt_stderr is True
    assert rot.schedule == DEFAULT_SCHEDULE == "0 0 * * *"
    assert rot.schedule_enabled is True
    assert rot.signal == "SIGHUP"
    assert rot.encoding == "utf-8"


def test_env_nested_values(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ROTALOG_ROTATION__PATH", str(tmp_path / "app.log"))
    monkeypatch.setenv("ROTALOG_ROTATION__SCHEDULE", "30 2 * * *")
    monkeypatch.setenv("ROTALOG_ROTATION__ADOPT_STDERR", "false")
    monkeypatch.setenv("ROTALOG_CORE__ENABLE_METRICS", "true")

    settings = Settings()

    assert settings.rotation.path == tmp_path / "app.log"
    assert settings.rotation.schedule == "30 2 * * *"
    assert settings.rotation.adopt_stderr is False
    assert settings.core.enable_metrics is True


def test_invalid_crontab_rejected() -> None:
    with pytest.raises(ValidationError):
        RotationSettings(schedule="not a cron")


@pytest.mark.parametrize("value", ["hup", "SIGHUP", " sigusr1 "])
def test_signal_names_normalised(value: str) -> None:
    assert RotationSettings(signal=value).signal.startswith("SIG")


def test_empty_signal_disables() -> None:
    assert RotationSettings(signal="").signal is None
    assert RotationSettings(signal=None).signal is None


def test_unknown_signal_rejected() -> None:
    with pytest.raises(ValidationError):
        RotationSettings(signal="SIGNOPE")


def test_unknown_timezone_rejected() -> None:
    with pytest.raises(ValidationError, match="unknown timezone"):
        RotationSettings(timezone="Bogus/Zone")


def test_timezone_accepted_and_blank_means_local() -> None:
    assert RotationSettings(timezone=" UTC ").timezone == "UTC"
    assert RotationSettings(timezone="").timezone is None


def test_unknown_timezone_from_env_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROTALOG_ROTATION__TIMEZONE", "Mars/Olympus_Mons")
    with pytest.raises(ValidationError):
        Settings()


def test_unknown_encoding_rejected() -> None:
    with pytest.raises(ValidationError):
        RotationSettings(encoding="no-such-codec")


def test_to_json_omits_unset_path() -> None:
    data = json.loads(Settings().to_json())
    assert "path" not in data["rotation"]
    assert data["schema_version"] == "1.0"


def test_to_dict_is_json_friendly(tmp_path: Path) -> None:
    settings = Settings(rotation=RotationSettings(path=tmp_path / "a.log"))
    assert settings.to_dict()["rotation"]["path"] == str(tmp_path / "a.log")  # type: ignore[index]
