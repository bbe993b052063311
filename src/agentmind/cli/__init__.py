"""AgentMind CLI.

The CLI is built with Typer and organized into command modules. Global
options (root directory, logging) are handled by the app callback, which
runs before any command.

Package structure:
    cli/
    ├── __init__.py           # App assembly and global options
    ├── helpers.py            # Shared state and store factories
    ├── output.py             # Rich formatting
    └── commands/
        ├── status.py         # status
        ├── instincts.py      # list, pending, search, evolve-candidates
        ├── analysis.py       # analyze, feedback, decay
        ├── transfer.py       # export, import
        └── context.py        # context
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from agentmind import __version__

from . import helpers as helpers
from .commands import (
    analyze,
    context,
    decay,
    evolve_candidates,
    export,
    feedback,
    import_instincts,
    list_instincts,
    pending,
    search,
    status,
)
from .helpers import (
    ROOT_ENVVAR,
    configure_global_logging,
    set_log_file,
    set_log_format,
    set_log_level,
    set_root,
)
from .output import console

# =============================================================================
# Typer app definition
# =============================================================================

app = typer.Typer(
    name="agentmind",
    help="Learn reusable instincts from agent observations",
    add_completion=False,
)


# =============================================================================
# Global option callbacks
# =============================================================================


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"AgentMind v{__version__}")
        raise typer.Exit()


def root_callback(value: Path | None) -> Path | None:
    if value:
        set_root(value)
    return value


def log_level_callback(value: str | None) -> str | None:
    if value:
        set_log_level(value)
    return value


def log_file_callback(value: Path | None) -> Path | None:
    if value:
        set_log_file(value)
    return value


def log_format_callback(value: str | None) -> str | None:
    if value:
        set_log_format(value)
    return value


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    root: Annotated[
        Path | None,
        typer.Option(
            "--root",
            "-r",
            callback=root_callback,
            help="Project root holding agentmind.yaml and the data directory",
            envvar=ROOT_ENVVAR,
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            "-L",
            callback=log_level_callback,
            help="Logging level (DEBUG, INFO, WARNING, ERROR)",
            envvar="AGENTMIND_LOG_LEVEL",
        ),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            callback=log_file_callback,
            help="Path for log file output",
            envvar="AGENTMIND_LOG_FILE",
        ),
    ] = None,
    log_format: Annotated[
        str | None,
        typer.Option(
            "--log-format",
            callback=log_format_callback,
            help="Log format: json, console, or both",
            envvar="AGENTMIND_LOG_FORMAT",
        ),
    ] = None,
) -> None:
    """AgentMind - learn reusable instincts from agent observations."""
    configure_global_logging(console)


# =============================================================================
# Command registration
# =============================================================================

# Overview and browsing
app.command()(status)
app.command(name="list")(list_instincts)
app.command()(pending)
app.command()(search)
app.command(name="evolve-candidates")(evolve_candidates)

# Analysis and lifecycle
app.command()(analyze)
app.command()(feedback)
app.command()(decay)

# Transfer
app.command()(export)
app.command(name="import")(import_instincts)

# Prompt injection
app.command()(context)


__all__ = [
    "app",
    "main",
    "console",
]
