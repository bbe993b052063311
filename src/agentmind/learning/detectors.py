"""Pattern detectors over a batch of observations.

Three independent, stateless detectors:
- detect_sequences: repeated n-grams of tool invocations
- detect_corrections: user corrections grouped by correction type
- detect_error_patterns: recurring (tool, error type) failures

Grouping uses plain dicts, which keep insertion order, and sorting is
stable, so entries with equal counts come out in first-seen order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from agentmind.core.logging import get_logger
from agentmind.learning.models import Observation, ObservationLayer

_logger = get_logger("learning.detectors")

DEFAULT_MIN_COUNT = 3
DEFAULT_NGRAM_SIZE = 3

# Single failures are noise; a pattern needs at least this many
MIN_ERROR_COUNT = 2

TOOL_FAILURE_EVENT = "tool_failure"
PRE_PHASE = "pre"
UNKNOWN = "unknown"


@dataclass
class SequencePattern:
    """A repeated fixed-length run of tool invocations."""

    sequence: list[str]
    count: int
    contexts: list[str] = field(default_factory=list)
    """Session ids the sequence was observed in."""


@dataclass
class CorrectionPattern:
    """User corrections of one type."""

    correction_type: str
    count: int
    sessions: list[str] = field(default_factory=list)


@dataclass
class ErrorPattern:
    """Recurring failures of one tool with one error type."""

    tool_name: str
    error_type: str
    count: int
    sessions: list[str] = field(default_factory=list)


@dataclass
class _Tally:
    count: int = 0
    sessions: dict[str, None] = field(default_factory=dict)

    def add(self, *session_ids: str) -> None:
        self.count += 1
        for session_id in session_ids:
            self.sessions.setdefault(session_id, None)


def _time_ordered(observations: Iterable[Observation]) -> list[Observation]:
    # Stable: observations sharing a timestamp keep their log order
    return sorted(observations, key=lambda o: o.timestamp)


def detect_sequences(
    observations: Iterable[Observation],
    min_count: int = DEFAULT_MIN_COUNT,
    ngram_size: int = DEFAULT_NGRAM_SIZE,
) -> list[SequencePattern]:
    """Detect repeated tool-use sequences (n-grams).

    Only pre-phase execution observations take part. A window of
    ``ngram_size`` slides one step at a time over the time-ordered tool
    invocations; each window counts once towards its sequence, and every
    session it touches is added to that sequence's contexts.

    Args:
        observations: Observation batch in any order.
        min_count: Minimum occurrences for a sequence to be reported.
        ngram_size: Number of tool invocations per sequence.

    Returns:
        Sequences seen at least ``min_count`` times, most frequent first.

    Raises:
        ValueError: If min_count or ngram_size is below 1.
    """
    if min_count < 1:
        raise ValueError(f"min_count must be >= 1, got {min_count}")
    if ngram_size < 1:
        raise ValueError(f"ngram_size must be >= 1, got {ngram_size}")

    tool_events = [
        (str(o.data.get("tool_name", UNKNOWN)), o.session_id)
        for o in _time_ordered(observations)
        if o.layer == ObservationLayer.EXECUTION and o.data.get("phase") == PRE_PHASE
    ]

    ngrams: dict[tuple[str, ...], _Tally] = {}
    for start in range(len(tool_events) - ngram_size + 1):
        window = tool_events[start : start + ngram_size]
        key = tuple(tool for tool, _ in window)
        ngrams.setdefault(key, _Tally()).add(*(session for _, session in window))

    patterns = [
        SequencePattern(sequence=list(key), count=tally.count, contexts=list(tally.sessions))
        for key, tally in ngrams.items()
        if tally.count >= min_count
    ]
    patterns.sort(key=lambda p: p.count, reverse=True)

    _logger.debug(
        "sequences_detected",
        tool_events=len(tool_events),
        distinct_ngrams=len(ngrams),
        reported=len(patterns),
    )
    return patterns


def detect_corrections(observations: Iterable[Observation]) -> list[CorrectionPattern]:
    """Detect user correction signals from intent observations.

    Every correction type is reported, even a single occurrence.

    Returns:
        Correction patterns, most frequent first.
    """
    by_type: dict[str, _Tally] = {}
    for o in observations:
        if o.layer != ObservationLayer.INTENT or o.data.get("has_correction") is not True:
            continue
        correction_type = str(o.data.get("correction_type", UNKNOWN))
        by_type.setdefault(correction_type, _Tally()).add(o.session_id)

    patterns = [
        CorrectionPattern(
            correction_type=correction_type,
            count=tally.count,
            sessions=list(tally.sessions),
        )
        for correction_type, tally in by_type.items()
    ]
    patterns.sort(key=lambda p: p.count, reverse=True)

    _logger.debug("corrections_detected", reported=len(patterns))
    return patterns


def detect_error_patterns(observations: Iterable[Observation]) -> list[ErrorPattern]:
    """Detect recurring tool failures from evaluation observations.

    Failures are grouped by (tool_name, error_type); groups with fewer than
    two failures are dropped.

    Returns:
        Error patterns, most frequent first.
    """
    by_key: dict[tuple[str, str], _Tally] = {}
    for o in observations:
        if o.layer != ObservationLayer.EVALUATION or o.event != TOOL_FAILURE_EVENT:
            continue
        key = (
            str(o.data.get("tool_name", UNKNOWN)),
            str(o.data.get("error_type", UNKNOWN)),
        )
        by_key.setdefault(key, _Tally()).add(o.session_id)

    patterns = [
        ErrorPattern(
            tool_name=tool_name,
            error_type=error_type,
            count=tally.count,
            sessions=list(tally.sessions),
        )
        for (tool_name, error_type), tally in by_key.items()
        if tally.count >= MIN_ERROR_COUNT
    ]
    patterns.sort(key=lambda p: p.count, reverse=True)

    _logger.debug("error_patterns_detected", groups=len(by_key), reported=len(patterns))
    return patterns
