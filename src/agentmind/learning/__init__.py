"""Learning core: detectors, candidate generation, confidence, and the store."""

from agentmind.learning.analyzer import AnalysisResult, InstinctAnalyzer
from agentmind.learning.candidates import generate_candidates, materialize
from agentmind.learning.confidence import (
    CompositeConfidence,
    ConfidenceTier,
    apply_decay,
    calculate_composite,
    calculate_effectiveness_score,
    calculate_frequency_score,
    format_confidence,
    get_tier,
    update_human_score,
)
from agentmind.learning.context import generate_context, generate_guide
from agentmind.learning.detectors import (
    CorrectionPattern,
    ErrorPattern,
    SequencePattern,
    detect_corrections,
    detect_error_patterns,
    detect_sequences,
)
from agentmind.learning.models import (
    EvolutionCandidate,
    ExpertSystem,
    Instinct,
    InstinctCandidate,
    InstinctsStore,
    InstinctSource,
    InstinctStatus,
    Observation,
    ObservationLayer,
    Pattern,
    SessionSummary,
    StoreStats,
    Strategy,
)
from agentmind.learning.store import InstinctStore

__all__ = [
    # Models
    "Observation",
    "ObservationLayer",
    "Instinct",
    "InstinctCandidate",
    "InstinctSource",
    "InstinctStatus",
    "Pattern",
    "Strategy",
    "ExpertSystem",
    "EvolutionCandidate",
    "InstinctsStore",
    "SessionSummary",
    "StoreStats",
    # Confidence
    "CompositeConfidence",
    "ConfidenceTier",
    "calculate_composite",
    "get_tier",
    "calculate_frequency_score",
    "calculate_effectiveness_score",
    "update_human_score",
    "apply_decay",
    "format_confidence",
    # Detection
    "SequencePattern",
    "CorrectionPattern",
    "ErrorPattern",
    "detect_sequences",
    "detect_corrections",
    "detect_error_patterns",
    "generate_candidates",
    "materialize",
    # Store and analysis
    "InstinctStore",
    "InstinctAnalyzer",
    "AnalysisResult",
    # Context
    "generate_context",
    "generate_guide",
]
