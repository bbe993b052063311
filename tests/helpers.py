"""Observation builders shared by the test modules."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from agentmind.learning.models import Observation, ObservationLayer

BASE_TIME = datetime(2026, 1, 15, 9, 0, 0, tzinfo=UTC)


def tool_use(tool: str, session: str = "s1", minute: int = 0, phase: str = "pre") -> Observation:
    """Execution observation for one tool invocation."""
    return Observation(
        layer=ObservationLayer.EXECUTION,
        session_id=session,
        timestamp=BASE_TIME + timedelta(minutes=minute),
        event="tool_use",
        data={"tool_name": tool, "phase": phase},
    )


def correction(kind: str, session: str = "s1", minute: int = 0) -> Observation:
    """Intent observation carrying a user correction."""
    return Observation(
        layer=ObservationLayer.INTENT,
        session_id=session,
        timestamp=BASE_TIME + timedelta(minutes=minute),
        event="user_prompt",
        data={"has_correction": True, "correction_type": kind},
    )


def failure(tool: str, error: str, session: str = "s1", minute: int = 0) -> Observation:
    """Evaluation observation for a failed tool call."""
    return Observation(
        layer=ObservationLayer.EVALUATION,
        session_id=session,
        timestamp=BASE_TIME + timedelta(minutes=minute),
        event="tool_failure",
        data={"tool_name": tool, "error_type": error},
    )


def repeated_workflow(
    tools: list[str], repeats: int, session: str = "s1"
) -> list[Observation]:
    """The same tool run ``repeats`` times back to back, one minute apart."""
    observations = []
    minute = 0
    for _ in range(repeats):
        for tool in tools:
            observations.append(tool_use(tool, session=session, minute=minute))
            minute += 1
    return observations
