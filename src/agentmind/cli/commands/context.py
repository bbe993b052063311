"""Learned-context output for prompt injection."""

from __future__ import annotations

import typer

from agentmind.learning.context import generate_context, generate_guide

from ..helpers import get_store
from ..output import console


def context(
    guide: bool = typer.Option(
        False,
        "--guide",
        "-g",
        help="Print strategies and patterns instead of instinct preferences",
    ),
) -> None:
    """Print the learned context for injection into a system prompt."""
    store = get_store(console)
    text = generate_guide(store) if guide else generate_context(store)
    if not text:
        console.print("[dim]Nothing learned yet.[/dim]")
        return
    console.print(text, markup=False, emoji=False, highlight=False, soft_wrap=True)
