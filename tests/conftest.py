"""Pytest fixtures for AgentMind tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from agentmind.learning.store import InstinctStore


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None, None, None]:
    """Reset logging and CLI state before and after each test.

    This ensures test isolation for logging configuration.
    """
    import agentmind.cli.helpers as cli_helpers

    cli_helpers.reset_cli_state()
    structlog.reset_defaults()

    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level
    for handler in original_handlers:
        root_logger.removeHandler(handler)

    yield

    cli_helpers.reset_cli_state()
    structlog.reset_defaults()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in original_handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(original_level)


@pytest.fixture
def store_root(tmp_path: Path) -> Path:
    """Empty root directory for one store."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def store(store_root: Path) -> InstinctStore:
    """Store bound to a fresh temporary root."""
    return InstinctStore(store_root)
