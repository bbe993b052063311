"""Time utilities for AgentMind.

All timestamps are timezone-aware UTC. Observation logs are partitioned by
the UTC calendar date of the write.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


def ensure_utc(moment: datetime) -> datetime:
    """Attach UTC to a naive datetime; aware datetimes pass through."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


def partition_key(moment: datetime | None = None) -> str:
    """Return the ``YYYY-MM-DD`` partition name for a moment (default now)."""
    moment = ensure_utc(moment or utc_now())
    return moment.astimezone(UTC).date().isoformat()


def weeks_between(earlier: datetime, later: datetime) -> float:
    """Return elapsed weeks from ``earlier`` to ``later`` (negative if reversed)."""
    delta = ensure_utc(later) - ensure_utc(earlier)
    return delta.total_seconds() / (7 * 24 * 3600)
