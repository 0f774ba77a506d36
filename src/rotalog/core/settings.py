"""
Configuration models for rotalog using Pydantic v2 Settings.

Values come from keyword arguments or ``ROTALOG_``-prefixed environment
variables, with ``__`` separating nested groups, e.g.
``ROTALOG_ROTATION__PATH=/var/log/app.log``.
"""

from __future__ import annotations

import signal
from pathlib import Path

from apscheduler.triggers.cron import CronTrigger
from apscheduler.util import astimezone
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (  # type: ignore[import-not-found]
    BaseSettings,
    SettingsConfigDict,
)

LATEST_CONFIG_SCHEMA_VERSION = "1.0"

DEFAULT_SCHEDULE = "0 0 * * *"


class CoreSettings(BaseModel):
    """Ambient behavior shared by every rotalog component."""

    internal_logging_enabled: bool = Field(
        default=False,
        description=("Emit structured diagnostics for rotations and internal errors"),
    )
    enable_metrics: bool = Field(
        default=False,
        description=("Enable Prometheus-compatible metrics"),
    )


class RotationSettings(BaseModel):
    """Where the sink writes and what triggers its rotation."""

    path: Path | None = Field(
        default=None,
        description="Logical name of the log file; archives are written beside it",
    )
    adopt_stderr: bool = Field(
        default=True,
        description=(
            "Write to a duplicate of stderr until the first rotation instead of "
            "creating the file at startup"
        ),
    )
    encoding: str = Field(
        default="utf-8",
        description="Encoding applied to text written through the sink",
    )
    schedule_enabled: bool = Field(
        default=True,
        description="Rotate on the cron schedule",
    )
    schedule: str = Field(
        default=DEFAULT_SCHEDULE,
        description="Crontab expression for scheduled rotation",
    )
    timezone: str | None = Field(
        default=None,
        description="Timezone for the schedule; local time when unset",
    )
    signal: str | None = Field(
        default="SIGHUP",
        description="OS signal that requests a rotation; disabled when unset",
    )

    @field_validator("schedule")
    @classmethod
    def _ensure_valid_crontab(cls, value: str) -> str:
        value = value.strip()
        CronTrigger.from_crontab(value)
        return value

    @field_validator("timezone")
    @classmethod
    def _ensure_known_timezone(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        value = value.strip()
        try:
            astimezone(value)
        except (KeyError, ValueError) as e:
            raise ValueError(f"unknown timezone: {value}") from e
        return value

    @field_validator("signal")
    @classmethod
    def _ensure_known_signal(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        name = value.strip().upper()
        if not name.startswith("SIG"):
            name = f"SIG{name}"
        if not isinstance(getattr(signal, name, None), signal.Signals):
            raise ValueError(f"unknown signal: {value}")
        return name

    @field_validator("encoding")
    @classmethod
    def _ensure_known_encoding(cls, value: str) -> str:
        import codecs

        try:
            codecs.lookup(value)
        except LookupError as e:
            raise ValueError(f"unknown encoding: {value}") from e
        return value


class Settings(BaseSettings):
    """Top-level configuration model with versioning."""

    schema_version: str = Field(default=LATEST_CONFIG_SCHEMA_VERSION)

    core: CoreSettings = Field(default_factory=CoreSettings)
    rotation: RotationSettings = Field(default_factory=RotationSettings)

    model_config = SettingsConfigDict(
        env_prefix="ROTALOG_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)

    def to_dict(self) -> dict[str, object]:
        return self.model_dump(mode="json", exclude_none=True)
