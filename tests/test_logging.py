"""Tests for agentmind.core.logging."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from agentmind.core.logging import (
    AnalysisContext,
    configure_logging,
    get_current_context,
    get_logger,
    with_context,
)


class TestConfigureLogging:
    def test_both_requires_file_path(self):
        with pytest.raises(ValueError, match="file_path is required"):
            configure_logging(format="both")

    def test_console_handler_installed(self):
        configure_logging(level="DEBUG", format="console")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_reconfigure_replaces_handlers(self, tmp_path: Path):
        configure_logging(format="console")
        configure_logging(format="both", file_path=tmp_path / "agentmind.log")

        assert len(logging.getLogger().handlers) == 2

    def test_json_file_output(self, tmp_path: Path):
        log_file = tmp_path / "logs" / "agentmind.log"
        configure_logging(level="INFO", format="json", file_path=log_file)

        get_logger("learning.store").info("store_saved", instincts=3)
        for handler in logging.getLogger().handlers:
            handler.flush()

        entry = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
        assert entry["event"] == "store_saved"
        assert entry["instincts"] == 3
        assert entry["component"] == "learning.store"
        assert entry["level"] == "info"
        assert "timestamp" in entry

    def test_sensitive_values_redacted(self, tmp_path: Path):
        log_file = tmp_path / "agentmind.log"
        configure_logging(level="INFO", format="json", file_path=log_file)

        get_logger("cli").info("config_loaded", api_key="sk-123", extra={"auth_token": "t"})
        for handler in logging.getLogger().handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "sk-123" not in text
        entry = json.loads(text.strip().splitlines()[-1])
        assert entry["api_key"] == "[REDACTED]"
        assert entry["extra"]["auth_token"] == "[REDACTED]"

    def test_level_filters_events(self, tmp_path: Path):
        log_file = tmp_path / "agentmind.log"
        configure_logging(level="WARNING", format="json", file_path=log_file)

        get_logger("learning.store").info("not_written")
        get_logger("learning.store").warning("written")
        for handler in logging.getLogger().handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "not_written" not in text
        assert "written" in text


class TestAnalysisContext:
    def test_context_scoped_to_block(self):
        ctx = AnalysisContext(session_id="sess-1", component="analyzer")

        assert get_current_context() is None
        with with_context(ctx) as active:
            assert get_current_context() is active
        assert get_current_context() is None

    def test_with_component_keeps_run(self):
        ctx = AnalysisContext(session_id="sess-1")
        derived = ctx.with_component("store")

        assert derived.run_id == ctx.run_id
        assert derived.to_dict() == {
            "session_id": "sess-1",
            "run_id": ctx.run_id,
            "component": "store",
        }

    def test_context_fields_logged(self, tmp_path: Path):
        log_file = tmp_path / "agentmind.log"
        configure_logging(level="INFO", format="json", file_path=log_file)

        with with_context(AnalysisContext(session_id="sess-9")):
            get_logger("learning.analyzer").info("analysis_completed")
        for handler in logging.getLogger().handlers:
            handler.flush()

        entry = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
        assert entry["session_id"] == "sess-9"
        # The logger's own component wins over the context default
        assert entry["component"] == "learning.analyzer"


class TestAgentMindLogger:
    def test_bind_adds_context(self):
        logger = get_logger("learning.store").bind(path="/tmp/x")

        with capture_logs() as logs:
            logger.debug("store_loaded")

        assert logs == [
            {
                "event": "store_loaded",
                "log_level": "debug",
                "component": "learning.store",
                "path": "/tmp/x",
            }
        ]

    def test_logger_created_before_configuration(self, tmp_path: Path):
        logger = get_logger("early")
        log_file = tmp_path / "agentmind.log"
        configure_logging(level="INFO", format="json", file_path=log_file)

        logger.info("late_event")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "late_event" in log_file.read_text(encoding="utf-8")
