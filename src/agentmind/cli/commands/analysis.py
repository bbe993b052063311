"""Analysis and confidence lifecycle commands.

Commands:
- analyze: Mine one day's observations into instincts
- feedback: Approve or reject an instinct
- decay: Run the frequency decay sweep
"""

from __future__ import annotations

from datetime import date

import typer

from agentmind.core.errors import InstinctNotFoundError
from agentmind.learning.confidence import format_confidence

from ..helpers import get_analyzer
from ..output import console


def analyze(
    session: str = typer.Option(
        ...,
        "--session",
        "-s",
        help="Session id to record the analysis under",
    ),
    day: str | None = typer.Option(
        None,
        "--date",
        help="Observation partition to analyze (YYYY-MM-DD, default today UTC)",
    ),
    final: bool = typer.Option(
        False,
        "--final",
        help="Mark this as the last analysis of the session",
    ),
) -> None:
    """Run the detectors over one day's observations and merge the results.

    Examples:
        agentmind analyze --session s-42
        agentmind analyze --session s-42 --date 2026-01-15 --final
    """
    if day is not None:
        try:
            date.fromisoformat(day)
        except ValueError:
            console.print(f"[red]Invalid date:[/red] {day} (expected YYYY-MM-DD)")
            raise typer.Exit(1) from None

    analyzer = get_analyzer(console)
    observations = analyzer.store.get_observations(day)
    if not observations:
        console.print("[yellow]No observations found for that day.[/yellow]")

    result = analyzer.analyze(observations, session_id=session, is_final=final)

    console.print(
        f"Analyzed [bold]{len(observations)}[/bold] observation(s): "
        f"{len(result.sequences)} sequence(s), {len(result.corrections)} correction(s), "
        f"{len(result.errors)} error pattern(s)"
    )
    console.print(
        f"[green]{len(result.created_ids)} new[/green], "
        f"[cyan]{len(result.updated_ids)} updated[/cyan] instinct(s)"
    )


def feedback(
    instinct_id: str = typer.Argument(..., help="Instinct id"),
    approve: bool = typer.Option(
        ...,
        "--approve/--reject",
        help="Approve or reject the instinct",
    ),
    strength: float | None = typer.Option(
        None,
        "--strength",
        min=0.1,
        max=0.5,
        help="Adjustment strength (default from config)",
    ),
) -> None:
    """Record human feedback on an instinct."""
    analyzer = get_analyzer(console)
    try:
        instinct = analyzer.record_feedback(instinct_id, approve, strength=strength)
    except InstinctNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from None

    verb = "Approved" if approve else "Rejected"
    console.print(f"{verb} [cyan]{instinct.id}[/cyan]")
    console.print(format_confidence(instinct.confidence), markup=False, highlight=False)


def decay() -> None:
    """Decay the frequency of instincts not seen recently."""
    analyzer = get_analyzer(console)
    changed = analyzer.apply_decay()
    console.print(f"Decayed {changed} instinct(s)")
