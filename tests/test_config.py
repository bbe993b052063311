"""Tests for agentmind.core.config."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from agentmind.core.config import (
    CONFIG_FILE_NAME,
    AgentMindConfig,
    ConfidenceConfig,
    DetectionConfig,
    LogConfig,
)


class TestDefaults:
    def test_defaults(self):
        config = AgentMindConfig()

        assert config.data_dir_name == "data"
        assert config.detection.min_sequence_count == 3
        assert config.detection.ngram_size == 3
        assert config.confidence.decay_rate == 0.02
        assert config.confidence.feedback_strength == 0.3
        assert config.confidence.wilson_z == 1.96
        assert config.logging.level == "WARNING"
        assert config.logging.format == "console"


class TestValidation:
    @pytest.mark.parametrize("field", ["min_sequence_count", "ngram_size"])
    def test_detection_minimum(self, field: str):
        with pytest.raises(ValidationError):
            DetectionConfig(**{field: 0})

    @pytest.mark.parametrize("strength", [0.05, 0.6])
    def test_feedback_strength_range(self, strength: float):
        with pytest.raises(ValidationError):
            ConfidenceConfig(feedback_strength=strength)

    def test_decay_rate_below_one(self):
        with pytest.raises(ValidationError):
            ConfidenceConfig(decay_rate=1.0)

    def test_both_format_requires_file(self):
        with pytest.raises(ValidationError, match="file_path is required"):
            LogConfig(format="both")

    def test_both_format_with_file(self, tmp_path: Path):
        config = LogConfig(format="both", file_path=tmp_path / "agentmind.log")
        assert config.file_path == tmp_path / "agentmind.log"

    def test_unknown_level_rejected(self):
        with pytest.raises(ValidationError):
            LogConfig(level="TRACE")  # type: ignore[arg-type]


class TestLoad:
    def test_missing_file_gives_defaults(self, tmp_path: Path):
        assert AgentMindConfig.load(tmp_path) == AgentMindConfig()

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        (tmp_path / CONFIG_FILE_NAME).write_text("", encoding="utf-8")
        assert AgentMindConfig.load(tmp_path) == AgentMindConfig()

    def test_partial_override(self, tmp_path: Path):
        (tmp_path / CONFIG_FILE_NAME).write_text(
            "detection:\n"
            "  min_sequence_count: 4\n"
            "confidence:\n"
            "  decay_rate: 0.05\n"
            "logging:\n"
            "  level: DEBUG\n",
            encoding="utf-8",
        )
        config = AgentMindConfig.load(tmp_path)

        assert config.detection.min_sequence_count == 4
        assert config.detection.ngram_size == 3
        assert config.confidence.decay_rate == 0.05
        assert config.confidence.feedback_strength == 0.3
        assert config.logging.level == "DEBUG"

    def test_invalid_values_raise(self, tmp_path: Path):
        (tmp_path / CONFIG_FILE_NAME).write_text(
            "detection:\n  ngram_size: 0\n", encoding="utf-8"
        )
        with pytest.raises(ValidationError):
            AgentMindConfig.load(tmp_path)
