"""Data models for observations, instincts, and the evolution hierarchy.

These pydantic models define the persisted shapes:
- Observation: one line of the day-partitioned observation log
- Instinct: a scored, triggerable behavioural rule
- Pattern / Strategy / ExpertSystem: evolution levels 1-3, referencing
  lower levels by id only
- InstinctsStore: the single aggregate written as one JSON document
- SessionSummary: one line of the session log per analysis run
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, Field

from agentmind.learning.confidence import CompositeConfidence
from agentmind.utils.time import ensure_utc, utc_now

STORE_VERSION = "0.1.0"


# Naive timestamps are read as UTC so every stored moment stays comparable
UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class ObservationLayer(str, Enum):
    """Which part of the agent loop an observation was captured from."""

    INTENT = "intent"
    DECISION = "decision"
    EXECUTION = "execution"
    EVALUATION = "evaluation"


class InstinctStatus(str, Enum):
    """Lifecycle status of an instinct."""

    ACTIVE = "active"
    TENTATIVE = "tentative"
    DEPRECATED = "deprecated"


class InstinctSource(str, Enum):
    """Where an instinct came from."""

    SEQUENCE_DETECTION = "sequence_detection"
    CORRECTION_DETECTION = "correction_detection"
    ERROR_RESOLUTION = "error_resolution"
    PREFERENCE_DETECTION = "preference_detection"
    HUMAN_CREATED = "human_created"
    EVOLVED = "evolved"
    IMPORTED = "imported"


class ClusterType(str, Enum):
    """How the instincts grouped into a pattern relate to each other."""

    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"
    CONDITIONAL = "conditional"


class Observation(BaseModel):
    """A single immutable behavioural observation.

    ``data`` is layer-specific:
    - intent: has_correction, correction_type
    - execution: tool_name, phase ("pre" or "post")
    - evaluation: tool_name, error_type
    """

    layer: ObservationLayer
    session_id: str
    timestamp: UtcDatetime = Field(default_factory=utc_now)
    event: str
    data: dict[str, Any] = Field(default_factory=dict)


class InstinctCandidate(BaseModel):
    """A proto-instinct produced by the candidate generator.

    Carries everything an Instinct has except identity and timestamps.
    """

    trigger: str
    """When to apply this instinct."""

    action: str
    """What to do."""

    domain: str
    """Category, e.g. workflow, preference, error-handling."""

    status: InstinctStatus = InstinctStatus.TENTATIVE
    confidence: CompositeConfidence
    evidence_count: int = Field(default=0, ge=0)
    source: InstinctSource
    application_count: int = Field(default=0, ge=0)
    success_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    tags: list[str] | None = None
    evolution_parent: str | None = None


class Instinct(InstinctCandidate):
    """A persisted instinct. Identity is ``id``."""

    id: str
    created_at: UtcDatetime = Field(default_factory=utc_now)
    last_seen: UtcDatetime = Field(default_factory=utc_now)
    last_applied: UtcDatetime | None = None
    last_verified: UtcDatetime | None = None
    last_decayed: UtcDatetime | None = None


class Pattern(BaseModel):
    """Evolution level 1: a cohesive group of instincts."""

    id: str
    name: str
    type: ClusterType
    level: Literal[1] = 1
    instinct_ids: list[str] = Field(default_factory=list)
    cohesion: float = Field(ge=0.0, le=1.0)
    domain: str
    confidence: CompositeConfidence
    created_at: UtcDatetime = Field(default_factory=utc_now)


class Strategy(BaseModel):
    """Evolution level 2: an abstract principle distilled from a pattern."""

    id: str
    name: str
    principle: str
    level: Literal[2] = 2
    source_pattern_id: str
    transferable_contexts: list[str] = Field(default_factory=list)
    domain: str
    confidence: CompositeConfidence
    created_at: UtcDatetime = Field(default_factory=utc_now)


class ExpertSystem(BaseModel):
    """Evolution level 3: domain-wide aggregation of lower levels."""

    id: str
    name: str
    level: Literal[3] = 3
    domain: str
    strategy_ids: list[str] = Field(default_factory=list)
    pattern_ids: list[str] = Field(default_factory=list)
    instinct_ids: list[str] = Field(default_factory=list)
    total_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    system_prompt: str = ""
    created_at: UtcDatetime = Field(default_factory=utc_now)


class StoreMetadata(BaseModel):
    """Version stamp and running totals for the aggregate."""

    version: str = STORE_VERSION
    last_analysis: UtcDatetime = Field(default_factory=utc_now)
    total_sessions_analyzed: int = Field(default=0, ge=0)
    total_observations: int = Field(default=0, ge=0)
    created_at: UtcDatetime = Field(default_factory=utc_now)


class InstinctsStore(BaseModel):
    """The persisted aggregate, always read and written as one unit."""

    instincts: list[Instinct] = Field(default_factory=list)
    patterns: list[Pattern] = Field(default_factory=list)
    strategies: list[Strategy] = Field(default_factory=list)
    experts: list[ExpertSystem] = Field(default_factory=list)
    metadata: StoreMetadata = Field(default_factory=StoreMetadata)

    @classmethod
    def empty(cls, now: datetime | None = None) -> InstinctsStore:
        """A freshly initialized aggregate stamped with ``now``."""
        now = now or utc_now()
        return cls(metadata=StoreMetadata(last_analysis=now, created_at=now))

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize for disk, omitting absent optional fields."""
        return self.model_dump(mode="json", exclude_none=True)


class SessionSummary(BaseModel):
    """Counts from one analysis run. Appended to the session log, never edited."""

    session_id: str
    timestamp: UtcDatetime = Field(default_factory=utc_now)
    observation_count: int = Field(default=0, ge=0)
    patterns_detected: int = Field(default=0, ge=0)
    corrections: int = Field(default=0, ge=0)
    errors: int = Field(default=0, ge=0)
    is_final: bool = False


class StoreStats(BaseModel):
    """Statistics recomputed from the aggregate on every request."""

    total_instincts: int = 0
    active_instincts: int = 0
    tentative_instincts: int = 0
    deprecated_instincts: int = 0
    avg_confidence: float = 0.0
    domains: dict[str, int] = Field(default_factory=dict)
    total_sessions: int = 0
    total_observations: int = 0


class EvolutionCandidate(BaseModel):
    """A same-domain cluster of strong active instincts, ready to become a Pattern."""

    domain: str
    instincts: list[Instinct]
    avg_confidence: float


class ImportResult(BaseModel):
    """Outcome of importing instincts: inserted vs. skipped duplicates."""

    imported: int = 0
    skipped: int = 0
