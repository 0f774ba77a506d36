"""
Root pytest configuration.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from datetime import date, timedelta

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "critical: Tests that must never fail - core functionality",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests wiring several components together",
    )
    config.addinivalue_line(
        "markers",
        "slow: Tests that take >1 second",
    )
    config.addinivalue_line(
        "markers",
        "property: Property-based tests (may be slow)",
    )


@pytest.fixture(autouse=True)
def reset_diagnostics_cache() -> Generator[None, None, None]:
    """Reset the diagnostics module cache before and after each test.

    The diagnostics module caches `internal_logging_enabled` at first
    access, so tests that toggle it must not leak into each other.
    """
    import rotalog.core.diagnostics as diag

    diag._internal_logging_enabled = None
    yield
    diag._internal_logging_enabled = None


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop ROTALOG_* variables from the developer's shell."""
    for key in list(os.environ):
        if key.upper().startswith("ROTALOG_"):
            monkeypatch.delenv(key, raising=False)


class SteppingClock:
    """Date source that a test can pin or advance."""

    def __init__(self, start: date) -> None:
        self.current = start

    def __call__(self) -> date:
        return self.current

    def advance(self, days: int = 1) -> None:
        self.current = self.current + timedelta(days=days)


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock(date(2024, 3, 15))
