"""Store overview command."""

from __future__ import annotations

import typer
from rich.panel import Panel
from rich.table import Table

from agentmind.learning.models import InstinctStatus

from ..helpers import get_store
from ..output import colored_confidence, console, create_instinct_table


def status(
    domain: str | None = typer.Option(
        None,
        "--domain",
        "-d",
        help="Only show top instincts from this domain",
    ),
) -> None:
    """Show instinct counts, domains, top instincts and recent sessions.

    Examples:
        agentmind status
        agentmind status --domain workflow
    """
    store = get_store(console)
    stats = store.get_stats()

    summary = (
        f"Instincts: [bold]{stats.total_instincts}[/bold] "
        f"([green]{stats.active_instincts} active[/green], "
        f"[yellow]{stats.tentative_instincts} tentative[/yellow], "
        f"[dim]{stats.deprecated_instincts} deprecated[/dim])\n"
        f"Average confidence: {colored_confidence(stats.avg_confidence)}\n"
        f"Sessions analyzed: {stats.total_sessions}  "
        f"Observations: {stats.total_observations}"
    )
    console.print(Panel(summary, title="AgentMind Status", border_style="blue"))

    if stats.domains:
        domain_table = Table(title="Domains", show_header=True, header_style="bold")
        domain_table.add_column("Domain", style="cyan")
        domain_table.add_column("Instincts", justify="right")
        for name, count in sorted(stats.domains.items(), key=lambda d: d[1], reverse=True):
            domain_table.add_row(name, str(count))
        console.print(domain_table)

    top = store.get_instincts(status=InstinctStatus.ACTIVE, domain=domain)[:5]
    if top:
        console.print(create_instinct_table(top, title="Top Active Instincts"))
    else:
        console.print("[dim]No active instincts yet.[/dim]")

    sessions = store.get_sessions(limit=5)
    if sessions:
        session_table = Table(title="Recent Sessions", show_header=True, header_style="bold")
        session_table.add_column("Session", style="cyan")
        session_table.add_column("When")
        session_table.add_column("Observations", justify="right")
        session_table.add_column("Patterns", justify="right")
        session_table.add_column("Final")
        for summary_row in sessions:
            session_table.add_row(
                summary_row.session_id,
                summary_row.timestamp.strftime("%Y-%m-%d %H:%M"),
                str(summary_row.observation_count),
                str(summary_row.patterns_detected),
                "yes" if summary_row.is_final else "",
            )
        console.print(session_table)
