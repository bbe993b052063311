"""Shared utilities for AgentMind."""

from agentmind.utils.time import ensure_utc, partition_key, utc_now, weeks_between

__all__ = ["ensure_utc", "partition_key", "utc_now", "weeks_between"]
