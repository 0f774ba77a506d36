"""Core building blocks: errors, settings, diagnostics, triggers."""

from .errors import (
    CloseError,
    ConfigurationError,
    CreateError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    InitError,
    RenameError,
    RotalogError,
    SinkClosedError,
    WriteError,
    create_error_context,
)

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
