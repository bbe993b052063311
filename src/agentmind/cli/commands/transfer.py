"""Export and import of instincts between stores."""

from __future__ import annotations

import json as json_lib
from pathlib import Path

import typer

from agentmind.core.errors import ImportFormatError
from agentmind.learning.store import load_import_file

from ..helpers import get_store
from ..output import console


def export(
    path: Path | None = typer.Argument(
        None,
        help="File to write (prints to stdout when omitted)",
    ),
) -> None:
    """Export instincts, patterns and strategies as JSON."""
    data = json_lib.dumps(get_store(console).export_data(), indent=2)

    if path is None:
        console.print(data, soft_wrap=True, highlight=False, markup=False, emoji=False)
        return

    try:
        path.write_text(data + "\n", encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Could not write {path}:[/red] {e}")
        raise typer.Exit(1) from None
    console.print(f"Exported to [cyan]{path}[/cyan]")


def import_instincts(
    path: Path = typer.Argument(..., help="Export file to import"),
) -> None:
    """Import instincts from an export file, skipping ids already stored."""
    store = get_store(console)
    try:
        result = store.import_instincts(load_import_file(path))
    except ImportFormatError as e:
        console.print(f"[red]Import failed:[/red] {e}")
        raise typer.Exit(1) from None

    console.print(
        f"Imported [green]{result.imported}[/green] instinct(s), "
        f"skipped [yellow]{result.skipped}[/yellow] duplicate(s)"
    )
