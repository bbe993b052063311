"""Configuration models for AgentMind.

Pydantic models for the detection thresholds, confidence tuning, and
logging. An optional ``agentmind.yaml`` at the root directory overrides the
defaults; every section and field is optional.

Example YAML:
    detection:
      min_sequence_count: 4
      ngram_size: 2
    confidence:
      decay_rate: 0.05
    logging:
      level: DEBUG
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, model_validator

CONFIG_FILE_NAME = "agentmind.yaml"


class DetectionConfig(BaseModel):
    """Thresholds for the sequence detector."""

    min_sequence_count: int = Field(
        default=3,
        ge=1,
        description="Minimum occurrences before a tool sequence is reported",
    )
    ngram_size: int = Field(
        default=3,
        ge=1,
        description="Number of consecutive tool invocations in one sequence",
    )


class ConfidenceConfig(BaseModel):
    """Tuning for confidence decay and feedback updates.

    The composite weights and the degradation penalty are fixed constants
    of the confidence engine and are not configurable.
    """

    decay_rate: float = Field(
        default=0.02,
        ge=0.0,
        lt=1.0,
        description="Fraction of the frequency score lost per week without observation",
    )
    feedback_strength: float = Field(
        default=0.3,
        ge=0.1,
        le=0.5,
        description="Adjustment applied to the human score per approval or rejection",
    )
    wilson_z: float = Field(
        default=1.96,
        gt=0.0,
        description="Z-score for the Wilson lower bound (1.96 = ~95%%)",
    )


class LogConfig(BaseModel):
    """Configuration for structured logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Minimum log level to capture",
    )
    format: Literal["json", "console", "both"] = Field(
        default="console",
        description="json for structured, console for human-readable, "
        "both for console to stderr and JSON to file",
    )
    file_path: Path | None = Field(
        default=None,
        description="Path for log file output (required if format='both')",
    )
    max_file_size_mb: int = Field(default=10, gt=0, le=1000)
    backup_count: int = Field(default=3, ge=0, le=100)

    @model_validator(mode="after")
    def _check_file_path_required(self) -> LogConfig:
        if self.format == "both" and self.file_path is None:
            raise ValueError(f"file_path is required when format='{self.format}'")
        return self


class AgentMindConfig(BaseModel):
    """Top-level configuration bound to one root directory."""

    data_dir_name: str = Field(
        default="data",
        min_length=1,
        description="Directory under the root holding the store and logs",
    )
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    confidence: ConfidenceConfig = Field(default_factory=ConfidenceConfig)
    logging: LogConfig = Field(default_factory=LogConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> AgentMindConfig:
        """Load configuration from a YAML file. An empty file means defaults."""
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})

    @classmethod
    def load(cls, root: Path) -> AgentMindConfig:
        """Load ``<root>/agentmind.yaml`` if present, else the defaults."""
        path = Path(root) / CONFIG_FILE_NAME
        if not path.exists():
            return cls()
        return cls.from_yaml(path)
