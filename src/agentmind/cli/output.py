"""Rich output formatting for the AgentMind CLI."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from agentmind.learning.confidence import ConfidenceTier, get_tier
from agentmind.learning.models import Instinct, InstinctStatus

console = Console()

TIER_COLORS: dict[ConfidenceTier, str] = {
    ConfidenceTier.CORE: "bold green",
    ConfidenceTier.STRONG: "green",
    ConfidenceTier.MODERATE: "yellow",
    ConfidenceTier.TENTATIVE: "dim yellow",
    ConfidenceTier.DEPRECATED: "red",
}

STATUS_COLORS: dict[InstinctStatus, str] = {
    InstinctStatus.ACTIVE: "green",
    InstinctStatus.TENTATIVE: "yellow",
    InstinctStatus.DEPRECATED: "dim",
}


def truncate(text: str, width: int = 40) -> str:
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def format_percent(value: float) -> str:
    return f"{value * 100:.0f}%"


def colored_confidence(composite: float) -> str:
    color = TIER_COLORS[get_tier(composite)]
    return f"[{color}]{format_percent(composite)}[/{color}]"


def create_instinct_table(instincts: Sequence[Instinct], title: str | None = None) -> Table:
    """Table of instincts: short id, trigger, action, confidence, domain, status."""
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Trigger")
    table.add_column("Action")
    table.add_column("Confidence", justify="right")
    table.add_column("Domain")
    table.add_column("Status")

    for instinct in instincts:
        status_color = STATUS_COLORS[instinct.status]
        table.add_row(
            instinct.id[-8:],
            escape(truncate(instinct.trigger)),
            escape(truncate(instinct.action)),
            colored_confidence(instinct.confidence.composite),
            escape(instinct.domain),
            f"[{status_color}]{instinct.status.value}[/{status_color}]",
        )
    return table
