"""Core infrastructure: configuration, logging, and error types."""

from agentmind.core.config import (
    AgentMindConfig,
    ConfidenceConfig,
    DetectionConfig,
    LogConfig,
)
from agentmind.core.errors import AgentMindError, ImportFormatError, InstinctNotFoundError
from agentmind.core.logging import configure_logging, get_logger

__all__ = [
    "AgentMindConfig",
    "AgentMindError",
    "ConfidenceConfig",
    "DetectionConfig",
    "ImportFormatError",
    "InstinctNotFoundError",
    "LogConfig",
    "configure_logging",
    "get_logger",
]
