"""
Error hierarchy for rotalog.

Every failure surfaced by the sink, the scheduler, or the wiring is a
``RotalogError`` subclass so callers can distinguish a failed first rotation
from a failed archive rename or a leaked handle, and decide what is fatal.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    INIT = "init"
    RENAME = "rename"
    CREATE = "create"
    CLOSE = "close"
    WRITE = "write"
    STATE = "state"
    CONFIG = "config"


class ErrorContext(BaseModel):
    """Metadata attached to every rotalog error."""

    error_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    category: ErrorCategory
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    path: str | None = None


def create_error_context(
    category: ErrorCategory,
    severity: ErrorSeverity = ErrorSeverity.MEDIUM,
    *,
    path: object | None = None,
) -> ErrorContext:
    return ErrorContext(
        category=category,
        severity=severity,
        path=None if path is None else str(path),
    )


class RotalogError(Exception):
    """Base error carrying a message, a context, and the original cause."""

    category: ErrorCategory = ErrorCategory.STATE
    severity: ErrorSeverity = ErrorSeverity.MEDIUM

    def __init__(
        self,
        message: str,
        *,
        path: object | None = None,
        cause: BaseException | None = None,
        error_context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.context = error_context or create_error_context(
            self.category, self.severity, path=path
        )

    @property
    def path(self) -> str | None:
        return self.context.path

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class InitError(RotalogError):
    """The first active handle could not be established."""

    category = ErrorCategory.INIT
    severity = ErrorSeverity.CRITICAL


class RenameError(RotalogError):
    """The existing file could not be moved to its archival name."""

    category = ErrorCategory.RENAME
    severity = ErrorSeverity.HIGH


class CreateError(RotalogError):
    """A fresh file could not be created at the logical name."""

    category = ErrorCategory.CREATE
    severity = ErrorSeverity.HIGH


class CloseError(RotalogError):
    """The displaced handle failed to close; the new handle is active."""

    category = ErrorCategory.CLOSE
    severity = ErrorSeverity.LOW


class WriteError(RotalogError):
    """The active handle rejected a write or flush."""

    category = ErrorCategory.WRITE
    severity = ErrorSeverity.MEDIUM


class SinkClosedError(RotalogError):
    """The sink was closed and accepts no further writes or rotations."""

    category = ErrorCategory.STATE
    severity = ErrorSeverity.MEDIUM


class ConfigurationError(RotalogError):
    category = ErrorCategory.CONFIG
    severity = ErrorSeverity.HIGH


__all__ = [
    "CloseError",
    "ConfigurationError",
    "CreateError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorSeverity",
    "InitError",
    "RenameError",
    "RotalogError",
    "SinkClosedError",
    "WriteError",
    "create_error_context",
]
