"""Tests for the AgentMind CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from agentmind import __version__
from agentmind.cli import app
from agentmind.learning.confidence import CompositeConfidence
from agentmind.learning.models import Instinct, InstinctSource, InstinctStatus
from agentmind.learning.store import InstinctStore
from tests.helpers import BASE_TIME, correction, failure, repeated_workflow

runner = CliRunner()


def seed(
    root: Path,
    instinct_id: str = "inst_0123456789ab",
    status: InstinctStatus = InstinctStatus.ACTIVE,
    confidence: CompositeConfidence | None = None,
    **overrides,
) -> Instinct:
    fields = {
        "id": instinct_id,
        "trigger": "When running the test suite",
        "action": "Use pytest -x",
        "domain": "testing",
        "status": status,
        "confidence": confidence or CompositeConfidence.from_dimensions(1.0, 1.0, 1.0),
        "source": InstinctSource.HUMAN_CREATED,
        "tags": ["pytest"],
    }
    fields.update(overrides)
    instinct = Instinct(**fields)
    InstinctStore(root).upsert_instinct(instinct)
    return instinct


def invoke(root: Path, *args: str):
    return runner.invoke(app, ["--root", str(root), *args])


class TestGlobalOptions:
    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"AgentMind v{__version__}" in result.output

    def test_root_from_environment(self, store_root: Path):
        seed(store_root)
        result = runner.invoke(app, ["list"], env={"AGENTMIND_ROOT": str(store_root)})

        assert result.exit_code == 0
        assert "Use pytest -x" in result.output

    def test_invalid_config(self, store_root: Path):
        (store_root / "agentmind.yaml").write_text(
            "detection:\n  ngram_size: 0\n", encoding="utf-8"
        )
        result = invoke(store_root, "status")

        assert result.exit_code == 1
        assert "Error loading config" in result.output

    def test_both_log_format_without_file(self, store_root: Path):
        result = invoke(store_root, "--log-format", "both", "status")

        assert result.exit_code == 1
        assert "Logging configuration error" in result.output

    def test_log_file_option(self, store_root: Path, tmp_path: Path):
        log_file = tmp_path / "agentmind.log"
        result = invoke(
            store_root, "--log-format", "json", "--log-file", str(log_file), "decay"
        )

        assert result.exit_code == 0
        assert log_file.exists()


class TestStatus:
    def test_empty(self, store_root: Path):
        result = invoke(store_root, "status")

        assert result.exit_code == 0
        assert "AgentMind Status" in result.output
        assert "No active instincts yet." in result.output

    def test_with_instincts(self, store_root: Path):
        seed(store_root)
        result = invoke(store_root, "status")

        assert result.exit_code == 0
        assert "Top Active Instincts" in result.output
        assert "testing" in result.output


class TestListing:
    def test_list_empty(self, store_root: Path):
        result = invoke(store_root, "list")

        assert result.exit_code == 0
        assert "No active instincts found." in result.output

    def test_list_json(self, store_root: Path):
        seed(store_root)
        seed(store_root, "inst_tentative01", status=InstinctStatus.TENTATIVE)
        result = invoke(store_root, "list", "--json")

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert [item["id"] for item in payload] == ["inst_0123456789ab"]
        assert "last_applied" not in payload[0]

    def test_list_status_filter(self, store_root: Path):
        seed(store_root, status=InstinctStatus.DEPRECATED)
        result = invoke(store_root, "list", "--status", "deprecated", "--json")

        assert result.exit_code == 0
        assert len(json.loads(result.output)) == 1

    def test_list_min_confidence(self, store_root: Path):
        seed(store_root, confidence=CompositeConfidence.from_dimensions(0.3))
        result = invoke(store_root, "list", "--min-confidence", "0.5", "--json")

        assert json.loads(result.output) == []

    def test_pending(self, store_root: Path):
        seed(
            store_root,
            status=InstinctStatus.TENTATIVE,
            confidence=CompositeConfidence.from_dimensions(0.3),
        )
        result = invoke(store_root, "pending")

        assert result.exit_code == 0
        assert "inst_0123456789ab" in result.output
        assert "43% [moderate] (F:30 E:50 H:50)" in result.output

    def test_pending_empty(self, store_root: Path):
        result = invoke(store_root, "pending")
        assert "No pending instincts." in result.output

    @pytest.mark.parametrize("keyword", ["PYTEST", "suite", "testing"])
    def test_search_matches(self, store_root: Path, keyword: str):
        seed(store_root)
        result = invoke(store_root, "search", keyword)

        assert result.exit_code == 0
        assert "Instincts matching" in result.output

    def test_search_no_match(self, store_root: Path):
        seed(store_root)
        result = invoke(store_root, "search", "docker")

        assert "No instincts match 'docker'." in result.output

    def test_evolve_candidates(self, store_root: Path):
        for n in range(3):
            seed(store_root, f"inst_workflow{n}", domain="workflow")
        result = invoke(store_root, "evolve-candidates")

        assert result.exit_code == 0
        assert "workflow (3 instincts, avg conf: 100%)" in result.output
        assert "  - [100%] When running the test suite: Use pytest -x" in result.output

    def test_evolve_candidates_group_too_small(self, store_root: Path):
        seed(store_root, "inst_a")
        seed(store_root, "inst_b")
        result = invoke(store_root, "evolve-candidates")

        assert result.exit_code == 0
        assert "No evolution candidates yet." in result.output

    def test_evolve_candidates_json_with_options(self, store_root: Path):
        seed(store_root, "inst_a")
        seed(store_root, "inst_b", confidence=CompositeConfidence.from_dimensions(0.5))
        seed(store_root, "inst_c", confidence=CompositeConfidence.from_dimensions(0.4))
        result = invoke(
            store_root, "evolve-candidates", "--min-confidence", "0.5", "--min-group", "2", "--json"
        )

        assert result.exit_code == 0
        assert json.loads(result.output) == [
            {
                "domain": "testing",
                "avg_confidence": 0.75,
                "instinct_ids": ["inst_a", "inst_b"],
            }
        ]


class TestAnalysisCommands:
    def test_analyze_day(self, store_root: Path):
        store = InstinctStore(store_root)
        observations = [
            *repeated_workflow(["Grep", "Read", "Edit"], 4),
            correction("retry", minute=30),
            failure("Bash", "timeout", minute=31),
            failure("Bash", "timeout", minute=32),
        ]
        for observation in observations:
            store.append_observation(observation, now=BASE_TIME)

        result = invoke(store_root, "analyze", "--session", "s1", "--date", "2026-01-15")

        assert result.exit_code == 0, result.output
        assert "Analyzed 15 observation(s)" in result.output
        assert "5 new" in result.output
        assert len(store.get_instincts(status=InstinctStatus.TENTATIVE)) == 5
        assert store.get_sessions()[0].session_id == "s1"

    def test_analyze_invalid_date(self, store_root: Path):
        result = invoke(store_root, "analyze", "--session", "s1", "--date", "15/01/2026")

        assert result.exit_code == 1
        assert "Invalid date" in result.output

    def test_analyze_requires_session(self, store_root: Path):
        result = invoke(store_root, "analyze")
        assert result.exit_code == 2

    def test_feedback_approve(self, store_root: Path):
        seed(store_root, confidence=CompositeConfidence.from_dimensions(0.3))
        result = invoke(store_root, "feedback", "inst_0123456789ab", "--approve")

        assert result.exit_code == 0
        assert "Approved" in result.output
        human = InstinctStore(store_root).get_instinct("inst_0123456789ab").confidence.human
        assert human == pytest.approx(0.8)

    def test_feedback_reject_with_strength(self, store_root: Path):
        seed(store_root, confidence=CompositeConfidence.from_dimensions(0.3))
        result = invoke(
            store_root, "feedback", "inst_0123456789ab", "--reject", "--strength", "0.2"
        )

        assert result.exit_code == 0
        human = InstinctStore(store_root).get_instinct("inst_0123456789ab").confidence.human
        assert human == pytest.approx(0.3)

    def test_feedback_unknown_id(self, store_root: Path):
        result = invoke(store_root, "feedback", "inst_missing", "--approve")

        assert result.exit_code == 1
        assert "No instinct with id 'inst_missing'" in result.output

    def test_feedback_requires_direction(self, store_root: Path):
        seed(store_root)
        result = invoke(store_root, "feedback", "inst_0123456789ab")
        assert result.exit_code == 2

    def test_decay(self, store_root: Path):
        result = invoke(store_root, "decay")

        assert result.exit_code == 0
        assert "Decayed 0 instinct(s)" in result.output


class TestTransferCommands:
    def test_export_to_stdout(self, store_root: Path):
        seed(store_root)
        result = invoke(store_root, "export")

        assert result.exit_code == 0
        assert json.loads(result.output)["instincts"][0]["id"] == "inst_0123456789ab"

    def test_export_then_import(self, store_root: Path, tmp_path: Path):
        seed(store_root)
        export_file = tmp_path / "export.json"
        other_root = tmp_path / "other"

        exported = invoke(store_root, "export", str(export_file))
        imported = invoke(other_root, "import", str(export_file))
        again = invoke(other_root, "import", str(export_file))

        assert exported.exit_code == 0
        assert imported.exit_code == 0
        assert "Imported 1 instinct(s), skipped 0 duplicate(s)" in imported.output
        assert "Imported 0 instinct(s), skipped 1 duplicate(s)" in again.output
        instinct = InstinctStore(other_root).get_instinct("inst_0123456789ab")
        assert instinct.source == InstinctSource.IMPORTED

    def test_import_invalid_file(self, store_root: Path, tmp_path: Path):
        bad = tmp_path / "bad.json"
        bad.write_text('{"patterns": []}', encoding="utf-8")
        result = invoke(store_root, "import", str(bad))

        assert result.exit_code == 1
        assert "Import failed" in result.output


class TestContextCommand:
    def test_nothing_learned(self, store_root: Path):
        result = invoke(store_root, "context")

        assert result.exit_code == 0
        assert "Nothing learned yet." in result.output

    def test_context(self, store_root: Path):
        seed(store_root)
        result = invoke(store_root, "context")

        assert "### Strong Preferences (apply these):" in result.output
        assert "- When running the test suite: Use pytest -x" in result.output

    def test_guide(self, store_root: Path):
        seed(store_root)
        result = invoke(store_root, "context", "--guide")

        assert "### Established Patterns:" in result.output
        assert "- Use pytest -x" in result.output
