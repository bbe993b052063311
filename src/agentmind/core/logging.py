"""Structured logging infrastructure for AgentMind.

Provides structured logging using structlog with AgentMind-specific context
such as the session being analyzed and the component emitting the event.
Supports console output, JSON output to a rotating file, or both.

Example usage:
    from agentmind.core.logging import get_logger, configure_logging

    # Configure once at startup
    configure_logging(level="DEBUG", format="console")

    # Get a component-specific logger
    logger = get_logger("learning.store")

    # Log with key/value context
    logger.info("instinct_upserted", instinct_id="inst_abc")

    # Correlate everything logged during one analysis run
    from agentmind.core.logging import AnalysisContext, with_context

    with with_context(AnalysisContext(session_id="sess-1")):
        logger.info("analysis_started")  # Includes session_id, run_id
"""

from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Literal

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Field name fragments whose values are never written to logs
SENSITIVE_PATTERNS = frozenset({
    "api_key",
    "apikey",
    "token",
    "secret",
    "password",
    "credential",
    "authorization",
})


@dataclass(frozen=True)
class AnalysisContext:
    """Immutable context for correlating log entries across one analysis run.

    Attributes:
        session_id: The host session whose observations are being mined.
        run_id: Unique id for this analysis run.
        component: Component name for the current operation.
    """

    session_id: str
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    component: str = "unknown"

    def with_component(self, component: str) -> AnalysisContext:
        """Create a new context with the specified component."""
        return AnalysisContext(
            session_id=self.session_id,
            run_id=self.run_id,
            component=component,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging."""
        return {
            "session_id": self.session_id,
            "run_id": self.run_id,
            "component": self.component,
        }


_current_context: ContextVar[AnalysisContext | None] = ContextVar(
    "agentmind_context", default=None
)


def get_current_context() -> AnalysisContext | None:
    """Get the current AnalysisContext if set."""
    return _current_context.get()


@contextmanager
def with_context(ctx: AnalysisContext) -> Iterator[AnalysisContext]:
    """Set the AnalysisContext for the duration of a block.

    All log calls within the block include the context fields when the
    context processor is active.

    Args:
        ctx: The AnalysisContext to use for the block.

    Yields:
        The AnalysisContext that was set.
    """
    token = _current_context.set(ctx)
    try:
        yield ctx
    finally:
        _current_context.reset(token)


def _sanitize_value(key: str, value: Any) -> Any:
    """Return "[REDACTED]" for values stored under sensitive keys."""
    key_lower = key.lower()
    for pattern in SENSITIVE_PATTERNS:
        if pattern in key_lower:
            return "[REDACTED]"
    return value


def _sanitize_event_dict(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that redacts sensitive fields, one level deep."""
    sanitized: EventDict = {}
    for key, value in event_dict.items():
        if isinstance(value, dict):
            sanitized[key] = {k: _sanitize_value(k, v) for k, v in value.items()}
        else:
            sanitized[key] = _sanitize_value(key, value)
    return sanitized


def _add_timestamp(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that adds an ISO8601 UTC timestamp."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def _add_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that adds AnalysisContext fields.

    Explicitly bound fields take precedence over context fields.
    """
    ctx = get_current_context()
    if ctx is not None:
        for key, value in ctx.to_dict().items():
            event_dict.setdefault(key, value)
    return event_dict


class AgentMindLogger:
    """Component logger wrapper around structlog.

    The underlying structlog logger is fetched on every call, so loggers
    created at module import time still respect configuration applied
    later via configure_logging().
    """

    def __init__(self, component: str, **initial_context: Any) -> None:
        self._component = component
        self._context: dict[str, Any] = {"component": component, **initial_context}

    def _get_logger(self) -> structlog.stdlib.BoundLogger:
        logger: structlog.stdlib.BoundLogger = structlog.get_logger().bind(**self._context)
        return logger

    def bind(self, **context: Any) -> AgentMindLogger:
        """Create a new logger with additional bound context."""
        return AgentMindLogger(self._component, **{**self._context, **context})

    def debug(self, event: str, **kw: Any) -> None:
        self._get_logger().debug(event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._get_logger().info(event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._get_logger().warning(event, **kw)

    def exception(self, event: str, **kw: Any) -> None:
        """Log an exception with traceback. Call from an exception handler."""
        self._get_logger().exception(event, **kw)


def _build_processors(
    renderer: Processor,
    include_timestamps: bool,
    include_context: bool,
) -> list[Processor]:
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        _sanitize_event_dict,
    ]
    if include_context:
        processors.append(_add_context)
    if include_timestamps:
        processors.append(_add_timestamp)
    processors.extend([
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ])
    return processors


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO",
    format: Literal["json", "console", "both"] = "console",  # noqa: A002
    file_path: Path | None = None,
    max_file_size_mb: int = 10,
    backup_count: int = 3,
    include_timestamps: bool = True,
    include_context: bool = True,
) -> None:
    """Configure AgentMind structured logging.

    Args:
        level: Minimum log level to capture.
        format: "json" for structured, "console" for human-readable,
            "both" for console to stderr and JSON to file (requires file_path).
        file_path: Optional file path for log output.
        max_file_size_mb: Maximum log file size before rotation (MB).
        backup_count: Number of rotated log files to keep.
        include_timestamps: Whether to include ISO8601 timestamps.
        include_context: Whether to include AnalysisContext fields.

    Raises:
        ValueError: If format="both" but file_path is not provided.
    """
    if format == "both" and file_path is None:
        raise ValueError("file_path is required when format='both'")

    log_level = getattr(logging, level)
    handlers: list[logging.Handler] = []

    if format in ("console", "both"):
        handlers.append(logging.StreamHandler(sys.stderr))

    if format in ("json", "both"):
        if file_path:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(
                RotatingFileHandler(
                    file_path,
                    maxBytes=max_file_size_mb * 1024 * 1024,
                    backupCount=backup_count,
                    encoding="utf-8",
                )
            )
        else:
            handlers.append(logging.StreamHandler(sys.stdout))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        handler.setLevel(log_level)
        root_logger.addHandler(handler)

    renderer: Processor
    if format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=_build_processors(renderer, include_timestamps, include_context),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(component: str, **initial_context: Any) -> AgentMindLogger:
    """Get a logger bound to a component name.

    Example:
        logger = get_logger("learning.detectors")
        logger.debug("sequences_detected", count=3)
    """
    return AgentMindLogger(component, **initial_context)


__all__ = [
    "SENSITIVE_PATTERNS",
    "AgentMindLogger",
    "AnalysisContext",
    "configure_logging",
    "get_current_context",
    "get_logger",
    "with_context",
]
