"""Turn detector output into proto-instincts.

Each detected pattern maps onto one tentative InstinctCandidate with a
fixed text template and a capped initial frequency score. Effectiveness
and human approval start neutral (0.5) until the instinct is applied or
reviewed.

Tags carry the detected pattern's key, so a later analysis finds the same
instinct again after its counts change.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import datetime

from agentmind.learning.confidence import initial_confidence
from agentmind.learning.detectors import CorrectionPattern, ErrorPattern, SequencePattern
from agentmind.learning.models import (
    Instinct,
    InstinctCandidate,
    InstinctSource,
    InstinctStatus,
)
from agentmind.utils.time import utc_now

SEQUENCE_SEPARATOR = " → "

# Initial frequency = min(count / divisor, cap)
SEQUENCE_FREQUENCY = (10, 0.6)
CORRECTION_FREQUENCY = (6, 0.5)
ERROR_FREQUENCY = (8, 0.4)


def _initial_frequency(count: int, scale: tuple[int, float]) -> float:
    divisor, cap = scale
    return min(count / divisor, cap)


def candidate_from_sequence(pattern: SequencePattern) -> InstinctCandidate:
    """Workflow instinct from a repeated tool sequence."""
    return InstinctCandidate(
        trigger=f"When performing a {pattern.sequence[0].lower()} operation",
        action=f"Follow the workflow: {SEQUENCE_SEPARATOR.join(pattern.sequence)}",
        domain="workflow",
        status=InstinctStatus.TENTATIVE,
        confidence=initial_confidence(_initial_frequency(pattern.count, SEQUENCE_FREQUENCY)),
        evidence_count=pattern.count,
        source=InstinctSource.SEQUENCE_DETECTION,
        tags=list(pattern.sequence),
    )


def candidate_from_correction(pattern: CorrectionPattern) -> InstinctCandidate:
    """Preference instinct from repeated user corrections."""
    correction = pattern.correction_type.replace("_", " ")
    return InstinctCandidate(
        trigger=f"When user provides {correction} feedback",
        action=(
            f"Adjust approach: user has corrected this {pattern.count} time(s) "
            f"across {len(pattern.sessions)} session(s)"
        ),
        domain="preference",
        status=InstinctStatus.TENTATIVE,
        confidence=initial_confidence(_initial_frequency(pattern.count, CORRECTION_FREQUENCY)),
        evidence_count=pattern.count,
        source=InstinctSource.CORRECTION_DETECTION,
        tags=[pattern.correction_type],
    )


def candidate_from_error(pattern: ErrorPattern) -> InstinctCandidate:
    """Error-handling instinct from a recurring tool failure."""
    return InstinctCandidate(
        trigger=f"When using {pattern.tool_name}",
        action=f"Be cautious of {pattern.error_type} errors (occurred {pattern.count} times)",
        domain="error-handling",
        status=InstinctStatus.TENTATIVE,
        confidence=initial_confidence(_initial_frequency(pattern.count, ERROR_FREQUENCY)),
        evidence_count=pattern.count,
        source=InstinctSource.ERROR_RESOLUTION,
        tags=[pattern.tool_name, pattern.error_type],
    )


def generate_candidates(
    sequences: Sequence[SequencePattern],
    corrections: Sequence[CorrectionPattern],
    errors: Sequence[ErrorPattern],
) -> list[InstinctCandidate]:
    """Generate instinct candidates from the three detectors' output.

    Candidates come out in input order: sequences, then corrections, then
    error patterns.
    """
    candidates: list[InstinctCandidate] = []
    candidates.extend(candidate_from_sequence(s) for s in sequences)
    candidates.extend(candidate_from_correction(c) for c in corrections)
    candidates.extend(candidate_from_error(e) for e in errors)
    return candidates


def new_instinct_id() -> str:
    """Fresh instinct id of the form ``inst_<12 hex>``."""
    return f"inst_{uuid.uuid4().hex[:12]}"


def materialize(
    candidate: InstinctCandidate,
    instinct_id: str | None = None,
    now: datetime | None = None,
) -> Instinct:
    """Give a candidate an identity and timestamps."""
    now = now or utc_now()
    return Instinct(
        **candidate.model_dump(),
        id=instinct_id or new_instinct_id(),
        created_at=now,
        last_seen=now,
    )
