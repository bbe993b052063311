"""Shared utilities for AgentMind CLI commands.

Holds the module-level state set by the global options (root directory,
logging settings) and the factories commands use to reach the store.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

import typer
from pydantic import ValidationError
from rich.console import Console

from agentmind.core.config import AgentMindConfig
from agentmind.core.logging import configure_logging
from agentmind.learning.analyzer import InstinctAnalyzer
from agentmind.learning.store import InstinctStore

ROOT_ENVVAR = "AGENTMIND_ROOT"


# =============================================================================
# Root directory
# =============================================================================


_root: Path | None = None


def set_root(path: Path | None) -> None:
    global _root
    _root = path


def get_root() -> Path:
    """Root from --root, else $AGENTMIND_ROOT, else the current directory."""
    if _root is not None:
        return _root
    env_root = os.environ.get(ROOT_ENVVAR)
    return Path(env_root) if env_root else Path.cwd()


def load_config(console: Console) -> AgentMindConfig:
    """Load the root's configuration, exiting with a message if it is invalid."""
    try:
        return AgentMindConfig.load(get_root())
    except (OSError, ValueError, ValidationError) as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(1) from None


def get_store(console: Console) -> InstinctStore:
    return InstinctStore(get_root(), load_config(console))


def get_analyzer(console: Console) -> InstinctAnalyzer:
    return InstinctAnalyzer(get_store(console))


# =============================================================================
# Logging configuration
# =============================================================================


@dataclass
class CliLoggingConfig:
    """Logging settings collected from the global options."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None
    file: Path | None = None
    format: Literal["json", "console", "both"] | None = None
    configured: bool = False


_log_config = CliLoggingConfig()


def set_log_level(level: str) -> None:
    _log_config.level = level.upper()  # type: ignore[assignment]


def set_log_file(path: Path | None) -> None:
    _log_config.file = path


def set_log_format(fmt: str) -> None:
    _log_config.format = fmt  # type: ignore[assignment]


def configure_global_logging(console: Console) -> None:
    """Configure logging once, CLI options taking precedence over agentmind.yaml.

    Raises:
        typer.Exit: If the logging configuration is invalid.
    """
    if _log_config.configured:
        return

    settings = load_config(console).logging
    try:
        configure_logging(
            level=_log_config.level or settings.level,
            format=_log_config.format or settings.format,
            file_path=_log_config.file or settings.file_path,
            max_file_size_mb=settings.max_file_size_mb,
            backup_count=settings.backup_count,
        )
        _log_config.configured = True
    except (ValueError, AttributeError) as e:
        console.print(f"[red]Logging configuration error:[/red] {e}")
        raise typer.Exit(1) from None


def reset_cli_state() -> None:
    """Reset module state (used by tests)."""
    global _log_config
    _log_config = CliLoggingConfig()
    set_root(None)
