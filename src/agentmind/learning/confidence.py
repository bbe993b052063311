"""Three-dimensional confidence scoring for instincts.

Every instinct carries a CompositeConfidence built from three dimensions:
- frequency: how often the behaviour has been observed (log curve)
- effectiveness: how well it works when applied (Wilson lower bound)
- human: explicit approval from the user (additive feedback)

The composite is a weighted blend of the three:

    composite = frequency × 0.35 + effectiveness × 0.40 + human × 0.25

discounted by 10% when any single dimension is below 0.2, and rounded to
two decimals. The composite maps onto a tier that decides how strongly an
instinct is surfaced.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

FREQUENCY_WEIGHT = 0.35
EFFECTIVENESS_WEIGHT = 0.40
HUMAN_WEIGHT = 0.25

LOW_DIMENSION_THRESHOLD = 0.2
LOW_DIMENSION_PENALTY = 0.9

NEUTRAL_SCORE = 0.5
DEFAULT_Z = 1.96
DEFAULT_FEEDBACK_STRENGTH = 0.3
DEFAULT_DECAY_RATE = 0.02

# Frequency saturates at 100 observations
FREQUENCY_SATURATION = 100

BAR_WIDTH = 10


def round_score(value: float) -> float:
    """Round half up to two decimals."""
    return math.floor(value * 100 + 0.5) / 100


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


class ConfidenceTier(str, Enum):
    """Confidence band driving how strongly an instinct is surfaced."""

    CORE = "core"
    """>= 0.8: apply automatically."""

    STRONG = "strong"
    """>= 0.6: suggest strongly."""

    MODERATE = "moderate"
    """>= 0.4: mention when the context matches."""

    TENTATIVE = "tentative"
    """>= 0.2: only if specifically asked."""

    DEPRECATED = "deprecated"
    """< 0.2: scheduled for removal."""


TIER_DESCRIPTIONS: dict[ConfidenceTier, str] = {
    ConfidenceTier.CORE: "Auto-apply (very high confidence)",
    ConfidenceTier.STRONG: "Suggest strongly when relevant",
    ConfidenceTier.MODERATE: "Mention when context matches",
    ConfidenceTier.TENTATIVE: "Only if specifically asked",
    ConfidenceTier.DEPRECATED: "Scheduled for removal",
}


def calculate_composite(frequency: float, effectiveness: float, human: float) -> float:
    """Blend the three dimensions into one composite score.

    Args:
        frequency: Frequency score (0.0-1.0).
        effectiveness: Effectiveness score (0.0-1.0).
        human: Human approval score (0.0-1.0).

    Returns:
        Composite score from 0.0 to 1.0, rounded to two decimals.
    """
    raw = (
        frequency * FREQUENCY_WEIGHT
        + effectiveness * EFFECTIVENESS_WEIGHT
        + human * HUMAN_WEIGHT
    )
    if min(frequency, effectiveness, human) < LOW_DIMENSION_THRESHOLD:
        raw *= LOW_DIMENSION_PENALTY
    return _clamp(round_score(raw))


class CompositeConfidence(BaseModel):
    """Immutable confidence value with a composite derived from its dimensions.

    ``composite`` is recomputed on every construction and validation, so a
    value read from disk with a stale composite comes back corrected. Use
    ``with_dimensions`` to change a dimension.
    """

    model_config = ConfigDict(frozen=True)

    frequency: float = Field(ge=0.0, le=1.0)
    effectiveness: float = Field(ge=0.0, le=1.0)
    human: float = Field(ge=0.0, le=1.0)
    composite: float = Field(default=0.0, ge=0.0, le=1.0)

    @model_validator(mode="before")
    @classmethod
    def _derive_composite(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        try:
            composite = calculate_composite(
                float(data["frequency"]),
                float(data["effectiveness"]),
                float(data["human"]),
            )
        except (KeyError, TypeError, ValueError):
            # Field validation reports the missing or malformed dimension
            return data
        return {**data, "composite": composite}

    @classmethod
    def from_dimensions(
        cls,
        frequency: float,
        effectiveness: float = NEUTRAL_SCORE,
        human: float = NEUTRAL_SCORE,
    ) -> CompositeConfidence:
        """Build a confidence value from its three dimensions."""
        return cls(frequency=frequency, effectiveness=effectiveness, human=human)

    def with_dimensions(self, **changes: float) -> CompositeConfidence:
        """Return a copy with some dimensions replaced and composite recomputed."""
        data = {
            "frequency": self.frequency,
            "effectiveness": self.effectiveness,
            "human": self.human,
        }
        unknown = set(changes) - set(data)
        if unknown:
            raise ValueError(f"Unknown confidence dimension(s): {sorted(unknown)}")
        data.update(changes)
        return CompositeConfidence.model_validate(data)

    @property
    def tier(self) -> ConfidenceTier:
        return get_tier(self.composite)


def initial_confidence(frequency: float) -> CompositeConfidence:
    """Confidence for a fresh candidate: neutral effectiveness and human scores."""
    return CompositeConfidence.from_dimensions(_clamp(frequency))


def get_tier(composite: float) -> ConfidenceTier:
    """Map a composite score onto its tier. Lower band edges are inclusive."""
    if composite >= 0.8:
        return ConfidenceTier.CORE
    if composite >= 0.6:
        return ConfidenceTier.STRONG
    if composite >= 0.4:
        return ConfidenceTier.MODERATE
    if composite >= 0.2:
        return ConfidenceTier.TENTATIVE
    return ConfidenceTier.DEPRECATED


def get_tier_description(tier: ConfidenceTier) -> str:
    """Human-readable application policy for a tier."""
    return TIER_DESCRIPTIONS[tier]


def calculate_frequency_score(observation_count: int) -> float:
    """Score how often a behaviour has been observed.

    Formula: min(1.0, log10(n + 1) / log10(101))

    Early observations count for more than later ones:
    - 1 observation: 0.15
    - 10 observations: 0.52
    - 50 observations: 0.85
    - 100+ observations: 1.0

    Args:
        observation_count: Number of observations (<= 0 scores 0).

    Returns:
        Frequency score from 0.0 to 1.0, rounded to two decimals.
    """
    if observation_count <= 0:
        return 0.0
    score = math.log10(observation_count + 1) / math.log10(FREQUENCY_SATURATION + 1)
    return round_score(min(score, 1.0))


def calculate_effectiveness_score(
    successes: int,
    total: int,
    z: float = DEFAULT_Z,
) -> float:
    """Score effectiveness as the Wilson interval lower bound.

    The lower bound is conservative for small samples: two successes out of
    two scores well below two hundred out of two hundred.

    Args:
        successes: Number of successful applications.
        total: Total number of applications.
        z: Z-score for the confidence level (1.96 = ~95%).

    Returns:
        Effectiveness score from 0.0 to 1.0, or 0.5 when total is 0.
    """
    if total <= 0:
        return NEUTRAL_SCORE

    phat = successes / total
    z2 = z * z
    denominator = 1 + z2 / total
    center = phat + z2 / (2 * total)
    spread = z * math.sqrt((phat * (1 - phat) + z2 / (4 * total)) / total)

    lower_bound = (center - spread) / denominator
    return round_score(_clamp(lower_bound))


def update_human_score(
    current: float,
    approved: bool,
    strength: float = DEFAULT_FEEDBACK_STRENGTH,
) -> float:
    """Move the human score up on approval, down on rejection.

    Repeated feedback in one direction saturates at 0 or 1.
    """
    adjustment = strength if approved else -strength
    return round_score(_clamp(current + adjustment))


def apply_decay(
    confidence: CompositeConfidence,
    weeks: float,
    decay_rate: float = DEFAULT_DECAY_RATE,
) -> CompositeConfidence:
    """Decay the frequency dimension for an instinct that has not been seen.

    Formula: frequency × (1 - decay_rate) ^ weeks

    Effectiveness and human approval record verified quality rather than
    recency and are left untouched. The composite is recomputed.

    Args:
        confidence: Current confidence.
        weeks: Weeks since the instinct was last observed (<= 0 is a no-op).
        decay_rate: Fraction of frequency lost per week.

    Returns:
        The decayed confidence (the same object when weeks <= 0).
    """
    if weeks <= 0:
        return confidence
    factor = (1.0 - decay_rate) ** weeks
    return confidence.with_dimensions(frequency=_clamp(confidence.frequency * factor))


def _percent(value: float) -> str:
    return f"{value * 100:.0f}"


def format_confidence(confidence: CompositeConfidence) -> str:
    """Render a confidence value as a one-line bar with tier and dimensions.

    Example: ``████░░░░░░ 43% [moderate] (F:30 E:50 H:50)``
    """
    filled = max(0, min(BAR_WIDTH, round(confidence.composite * BAR_WIDTH)))
    bar = "█" * filled + "░" * (BAR_WIDTH - filled)
    tier = get_tier(confidence.composite)
    return (
        f"{bar} {_percent(confidence.composite)}% [{tier.value}] "
        f"(F:{_percent(confidence.frequency)} "
        f"E:{_percent(confidence.effectiveness)} "
        f"H:{_percent(confidence.human)})"
    )
