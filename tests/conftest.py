"""Shared fixtures for unit and integration tests."""

from __future__ import annotations

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog():
    """CLI tests reconfigure structlog onto the runner's stderr; undo it after each test."""
    yield
    structlog.reset_defaults()
