"""Instinct listing and search commands.

Commands:
- list: Filtered table of instincts (JSON with --json)
- pending: Tentative instincts awaiting review
- search: Keyword match over trigger, action, domain and tags
- evolve-candidates: Domains with enough strong instincts to form a Pattern
"""

from __future__ import annotations

import json as json_lib

import typer
from rich.markup import escape

from agentmind.learning.confidence import format_confidence
from agentmind.learning.models import InstinctStatus

from ..helpers import get_store
from ..output import console, create_instinct_table, format_percent


def list_instincts(
    status_filter: InstinctStatus = typer.Option(
        InstinctStatus.ACTIVE,
        "--status",
        "-s",
        help="Status to list",
    ),
    domain: str | None = typer.Option(
        None,
        "--domain",
        "-d",
        help="Filter by domain",
    ),
    min_confidence: float | None = typer.Option(
        None,
        "--min-confidence",
        "-c",
        min=0.0,
        max=1.0,
        help="Minimum composite confidence",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON for machine parsing",
    ),
) -> None:
    """List instincts, highest confidence first.

    Examples:
        agentmind list
        agentmind list --status tentative --domain error_handling
        agentmind list --min-confidence 0.6 --json
    """
    store = get_store(console)
    instincts = store.get_instincts(
        status=status_filter, domain=domain, min_confidence=min_confidence
    )

    if json_output:
        payload = [i.model_dump(mode="json", exclude_none=True) for i in instincts]
        console.print(
            json_lib.dumps(payload, indent=2),
            soft_wrap=True,
            highlight=False,
            markup=False,
            emoji=False,
        )
        return

    if not instincts:
        console.print(f"[dim]No {status_filter.value} instincts found.[/dim]")
        return

    title = f"{status_filter.value.title()} Instincts"
    console.print(create_instinct_table(instincts, title=title))
    console.print(f"\n[dim]Showing {len(instincts)} instinct(s)[/dim]")


def pending() -> None:
    """Show tentative instincts with their full confidence breakdown."""
    store = get_store(console)
    instincts = store.get_instincts(status=InstinctStatus.TENTATIVE)

    if not instincts:
        console.print("[dim]No pending instincts.[/dim]")
        return

    console.print(f"[bold]Pending instincts ({len(instincts)})[/bold]\n")
    for instinct in instincts:
        console.print(f"[cyan]{instinct.id}[/cyan] [dim]({escape(instinct.domain)})[/dim]")
        console.print(f"  When: {escape(instinct.trigger)}")
        console.print(f"  Then: {escape(instinct.action)}")
        console.print(
            f"  {format_confidence(instinct.confidence)}", markup=False, highlight=False
        )
        console.print(f"  Evidence: {instinct.evidence_count}\n")


def search(
    keyword: str = typer.Argument(..., help="Keyword to search for (case-insensitive)"),
) -> None:
    """Search instincts by trigger, action, domain or tag."""
    store = get_store(console)
    needle = keyword.lower()

    matches = [
        i
        for i in store.get_instincts()
        if needle in i.trigger.lower()
        or needle in i.action.lower()
        or needle in i.domain.lower()
        or any(needle in tag.lower() for tag in i.tags or [])
    ]

    if not matches:
        console.print(f"[dim]No instincts match '{escape(keyword)}'.[/dim]")
        return

    title = f"Instincts matching '{escape(keyword)}'"
    console.print(create_instinct_table(matches, title=title))


def evolve_candidates(
    min_confidence: float = typer.Option(
        0.5,
        "--min-confidence",
        "-c",
        min=0.0,
        max=1.0,
        help="Minimum composite confidence for an instinct to count",
    ),
    min_group: int = typer.Option(
        3,
        "--min-group",
        "-g",
        min=1,
        help="Minimum instincts per domain",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON for machine parsing",
    ),
) -> None:
    """Show domains with enough strong active instincts to form a Pattern.

    Examples:
        agentmind evolve-candidates
        agentmind evolve-candidates --min-confidence 0.6 --min-group 2
    """
    store = get_store(console)
    candidates = store.evolution_candidates(min_confidence=min_confidence, min_group=min_group)

    if json_output:
        payload = [
            {
                "domain": c.domain,
                "avg_confidence": c.avg_confidence,
                "instinct_ids": [i.id for i in c.instincts],
            }
            for c in candidates
        ]
        console.print(
            json_lib.dumps(payload, indent=2),
            soft_wrap=True,
            highlight=False,
            markup=False,
            emoji=False,
        )
        return

    if not candidates:
        console.print(
            f"[dim]No evolution candidates yet. Need {min_group}+ active instincts "
            f"in the same domain with confidence >= {format_percent(min_confidence)}.[/dim]"
        )
        return

    console.print("[bold]Evolution Candidates[/bold]\n")
    for candidate in candidates:
        console.print(
            f"[cyan]{escape(candidate.domain)}[/cyan] "
            f"({len(candidate.instincts)} instincts, "
            f"avg conf: {format_percent(candidate.avg_confidence)})"
        )
        for instinct in candidate.instincts:
            console.print(
                f"  - [{format_percent(instinct.confidence.composite)}] "
                f"{instinct.trigger}: {instinct.action}",
                markup=False,
                highlight=False,
            )
        console.print()
