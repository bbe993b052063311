"""Learned-context text for injection into an agent's system prompt.

Two renderings over the store:
- generate_context(): active instincts grouped by confidence band
- generate_guide(): evolved strategies and patterns, falling back to the
  strongest instincts when nothing has evolved yet

Both stay within a character budget so the injected text stays small.
"""

from __future__ import annotations

from agentmind.learning.models import InstinctStatus
from agentmind.learning.store import InstinctStore

MAX_CONTEXT_CHARS = 2000
TRUNCATE_AT = 1900

CONTEXT_MIN_CONFIDENCE = 0.4
GUIDE_FALLBACK_MIN_CONFIDENCE = 0.6


def _within_budget(output: str, pointer: str) -> str:
    if len(output) > MAX_CONTEXT_CHARS:
        return output[:TRUNCATE_AT] + f"\n...({pointer})\n"
    return output


def generate_context(store: InstinctStore) -> str:
    """Render active instincts as strong preferences, patterns, and suggestions.

    Returns:
        The context text, or an empty string when nothing qualifies.
    """
    instincts = store.get_instincts(
        status=InstinctStatus.ACTIVE,
        min_confidence=CONTEXT_MIN_CONFIDENCE,
    )
    if not instincts:
        return ""

    strong = [i for i in instincts if i.confidence.composite >= 0.8]
    moderate = [i for i in instincts if 0.6 <= i.confidence.composite < 0.8]
    tentative = [i for i in instincts if 0.4 <= i.confidence.composite < 0.6]

    sections: list[str] = []
    if strong:
        lines = [f"- {i.trigger}: {i.action}" for i in strong[:10]]
        sections.append("### Strong Preferences (apply these):\n" + "\n".join(lines))
    if moderate:
        lines = [f"- {i.trigger}: {i.action}" for i in moderate[:8]]
        sections.append("### Patterns (prefer these when applicable):\n" + "\n".join(lines))
    if tentative:
        lines = [f"- Consider: {i.action}" for i in tentative[:5]]
        sections.append("### Suggestions (consider these):\n" + "\n".join(lines))

    output = "".join(section + "\n\n" for section in sections)
    return _within_budget(output, "additional patterns available via `agentmind list`")


def generate_guide(store: InstinctStore) -> str:
    """Render higher-level guidance from strategies and patterns.

    Returns:
        The guide text, or an empty string when there is nothing to say.
    """
    aggregate = store.load_store()

    if not aggregate.strategies and not aggregate.patterns:
        top = store.get_instincts(
            status=InstinctStatus.ACTIVE,
            min_confidence=GUIDE_FALLBACK_MIN_CONFIDENCE,
        )
        if not top:
            return ""
        return "### Established Patterns:\n" + "".join(f"- {i.action}\n" for i in top[:5])

    output = ""

    if aggregate.strategies:
        output += "### Guiding Principles:\n"
        strategies = sorted(
            aggregate.strategies, key=lambda s: s.confidence.composite, reverse=True
        )
        for strategy in strategies[:5]:
            output += f"- **{strategy.name}**: {strategy.principle}\n"
            if strategy.transferable_contexts:
                output += f"  Applies to: {', '.join(strategy.transferable_contexts)}\n"
        output += "\n"

    if aggregate.patterns:
        by_id = {i.id: i for i in aggregate.instincts}
        output += "### Workflow Patterns:\n"
        patterns = sorted(
            aggregate.patterns, key=lambda p: p.confidence.composite, reverse=True
        )
        for pattern in patterns[:5]:
            output += f"- **{pattern.name}** ({pattern.type.value}):\n"
            members = [by_id[i] for i in pattern.instinct_ids if i in by_id]
            for instinct in members[:3]:
                output += f"  - {instinct.action}\n"
        output += "\n"

    domains = sorted(store.get_stats().domains.items(), key=lambda d: d[1], reverse=True)
    if domains:
        listed = ", ".join(f"{domain} ({count})" for domain, count in domains[:3])
        output += f"### Active Domains: {listed}\n"

    return _within_budget(output, "use `agentmind status` for full details")
