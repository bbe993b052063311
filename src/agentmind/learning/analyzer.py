"""Analysis runs and the confidence lifecycle of stored instincts.

InstinctAnalyzer ties the pieces together:
- analyze(): detectors -> candidate generator -> merge into the store,
  plus a session summary and metadata totals
- record_feedback() / record_application(): move the human and
  effectiveness dimensions
- apply_decay(): weekly frequency decay for instincts not seen recently

Each mutation goes through the store's full read-modify-write.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from agentmind.core.config import AgentMindConfig
from agentmind.core.errors import InstinctNotFoundError
from agentmind.core.logging import AnalysisContext, get_logger, with_context
from agentmind.learning.candidates import generate_candidates, materialize
from agentmind.learning.confidence import (
    apply_decay,
    calculate_effectiveness_score,
    update_human_score,
)
from agentmind.learning.detectors import (
    CorrectionPattern,
    ErrorPattern,
    SequencePattern,
    detect_corrections,
    detect_error_patterns,
    detect_sequences,
)
from agentmind.learning.models import (
    Instinct,
    InstinctCandidate,
    InstinctsStore,
    InstinctStatus,
    Observation,
    SessionSummary,
)
from agentmind.learning.store import InstinctStore
from agentmind.utils.time import ensure_utc, utc_now, weeks_between

_logger = get_logger("learning.analyzer")


@dataclass
class AnalysisResult:
    """What one analysis run detected and changed."""

    sequences: list[SequencePattern] = field(default_factory=list)
    corrections: list[CorrectionPattern] = field(default_factory=list)
    errors: list[ErrorPattern] = field(default_factory=list)
    created_ids: list[str] = field(default_factory=list)
    updated_ids: list[str] = field(default_factory=list)
    summary: SessionSummary | None = None

    @property
    def patterns_detected(self) -> int:
        return len(self.sequences) + len(self.corrections) + len(self.errors)


def _identity(instinct: InstinctCandidate) -> tuple[str, str, str, tuple[str, ...]]:
    # Action text embeds live counts, so it is not part of the identity
    return (
        instinct.source.value,
        instinct.domain,
        instinct.trigger,
        tuple(instinct.tags or ()),
    )


class InstinctAnalyzer:
    """Runs analyses against one InstinctStore and maintains confidence."""

    def __init__(self, store: InstinctStore, config: AgentMindConfig | None = None) -> None:
        """Initialize the analyzer.

        Args:
            store: Store to read from and persist into.
            config: Configuration. Defaults to the store's configuration.
        """
        self.store = store
        self.config = config or store.config

    # ─── Analysis ─────────────────────────────────────────────────────

    def analyze(
        self,
        observations: Sequence[Observation],
        session_id: str,
        is_final: bool = False,
        now: datetime | None = None,
    ) -> AnalysisResult:
        """Mine an observation batch into instincts and persist them.

        A candidate whose trigger, action and domain match a stored instinct
        updates that instinct: evidence accumulates, last_seen is refreshed,
        and frequency rises to the candidate's if higher. Other candidates
        become new tentative instincts.

        Args:
            observations: The batch to analyze.
            session_id: Session the batch belongs to (for the session log).
            is_final: Whether this is the last analysis of the session.
            now: Clock override.

        Returns:
            Detector output, created and updated instinct ids, and the
            appended SessionSummary.
        """
        now = ensure_utc(now or utc_now())
        detection = self.config.detection

        with with_context(AnalysisContext(session_id=session_id, component="analyzer")):
            result = AnalysisResult(
                sequences=detect_sequences(
                    observations,
                    min_count=detection.min_sequence_count,
                    ngram_size=detection.ngram_size,
                ),
                corrections=detect_corrections(observations),
                errors=detect_error_patterns(observations),
            )
            candidates = generate_candidates(
                result.sequences, result.corrections, result.errors
            )

            if candidates:
                self.store.mutate(
                    lambda store: self._merge_candidates(store, candidates, result, now)
                )

            result.summary = SessionSummary(
                session_id=session_id,
                timestamp=now,
                observation_count=len(observations),
                patterns_detected=result.patterns_detected,
                corrections=sum(c.count for c in result.corrections),
                errors=sum(e.count for e in result.errors),
                is_final=is_final,
            )
            self.store.append_session(result.summary)
            self.store.record_analysis(len(observations), now=now)

            _logger.info(
                "analysis_completed",
                observations=len(observations),
                patterns=result.patterns_detected,
                created=len(result.created_ids),
                updated=len(result.updated_ids),
            )
        return result

    def _merge_candidates(
        self,
        store: InstinctsStore,
        candidates: list[InstinctCandidate],
        result: AnalysisResult,
        now: datetime,
    ) -> bool:
        by_identity = {_identity(i): i for i in store.instincts}

        for candidate in candidates:
            existing = by_identity.get(_identity(candidate))
            if existing is None:
                instinct = materialize(candidate, now=now)
                store.instincts.append(instinct)
                by_identity[_identity(instinct)] = instinct
                result.created_ids.append(instinct.id)
                continue

            existing.action = candidate.action
            existing.evidence_count += candidate.evidence_count
            existing.last_seen = now
            if candidate.confidence.frequency > existing.confidence.frequency:
                existing.confidence = existing.confidence.with_dimensions(
                    frequency=candidate.confidence.frequency
                )
            result.updated_ids.append(existing.id)

        return True

    # ─── Lifecycle ────────────────────────────────────────────────────

    def _update_instinct(
        self, instinct_id: str, change: Callable[[Instinct], None]
    ) -> Instinct:
        updated: list[Instinct] = []

        def apply(store: InstinctsStore) -> bool:
            for instinct in store.instincts:
                if instinct.id == instinct_id:
                    change(instinct)
                    updated.append(instinct)
                    return True
            return False

        if not self.store.mutate(apply):
            raise InstinctNotFoundError(instinct_id)
        return updated[0]

    def record_feedback(
        self,
        instinct_id: str,
        approved: bool,
        strength: float | None = None,
        now: datetime | None = None,
    ) -> Instinct:
        """Apply a human approval or rejection to an instinct.

        Raises:
            InstinctNotFoundError: If no instinct has ``instinct_id``.
        """
        strength = strength if strength is not None else self.config.confidence.feedback_strength

        def change(instinct: Instinct) -> None:
            human = update_human_score(instinct.confidence.human, approved, strength)
            instinct.confidence = instinct.confidence.with_dimensions(human=human)
            instinct.last_verified = ensure_utc(now or utc_now())

        instinct = self._update_instinct(instinct_id, change)
        _logger.debug(
            "feedback_recorded",
            instinct_id=instinct_id,
            approved=approved,
            human=instinct.confidence.human,
        )
        return instinct

    def record_application(
        self,
        instinct_id: str,
        success: bool,
        now: datetime | None = None,
    ) -> Instinct:
        """Record one application of an instinct and rescore effectiveness.

        Raises:
            InstinctNotFoundError: If no instinct has ``instinct_id``.
        """
        z = self.config.confidence.wilson_z

        def change(instinct: Instinct) -> None:
            successes = round(instinct.success_rate * instinct.application_count)
            successes += 1 if success else 0
            instinct.application_count += 1
            instinct.success_rate = successes / instinct.application_count
            instinct.confidence = instinct.confidence.with_dimensions(
                effectiveness=calculate_effectiveness_score(
                    successes, instinct.application_count, z
                )
            )
            instinct.last_applied = ensure_utc(now or utc_now())

        return self._update_instinct(instinct_id, change)

    def set_status(self, instinct_id: str, status: InstinctStatus) -> Instinct:
        """Promote or demote an instinct.

        Raises:
            InstinctNotFoundError: If no instinct has ``instinct_id``.
        """

        def change(instinct: Instinct) -> None:
            instinct.status = status

        return self._update_instinct(instinct_id, change)

    def apply_decay(self, now: datetime | None = None) -> int:
        """Decay the frequency of every instinct by the weeks since it was last seen.

        Elapsed time is measured from the last decay sweep (or from
        last_seen if the instinct was never decayed, or was seen since), so
        repeated sweeps never decay the same interval twice.

        Returns:
            Number of instincts whose confidence changed.
        """
        now = ensure_utc(now or utc_now())
        decay_rate = self.config.confidence.decay_rate
        changed: list[str] = []

        def sweep(store: InstinctsStore) -> bool:
            swept = False
            for instinct in store.instincts:
                anchor = instinct.last_seen
                if instinct.last_decayed is not None and instinct.last_decayed > anchor:
                    anchor = instinct.last_decayed
                weeks = weeks_between(anchor, now)
                if weeks <= 0:
                    continue
                decayed = apply_decay(instinct.confidence, weeks, decay_rate)
                instinct.last_decayed = now
                swept = True
                if decayed != instinct.confidence:
                    instinct.confidence = decayed
                    changed.append(instinct.id)
            return swept

        self.store.mutate(sweep)
        _logger.info("decay_applied", changed=len(changed), decay_rate=decay_rate)
        return len(changed)
