"""Tests for CLI commands."""

import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from flowplan.cli import app

runner = CliRunner()

CHAIN_YAML = """
project_start: 2025-01-01
tasks:
  - id: "1"
    title: Research
    estimated_duration: 120
  - id: "2"
    title: Draft
    dependencies: ["1"]
    estimated_duration: 240
  - id: "3"
    title: Review
    dependencies: ["2"]
    estimated_duration: 60
"""

CYCLE_YAML = """
tasks:
  - id: A
    dependencies: [B]
  - id: B
    dependencies: [A]
"""


@pytest.fixture
def chain_file(tmp_path: Path) -> Path:
    path = tmp_path / "tasks.yaml"
    path.write_text(CHAIN_YAML, encoding="utf-8")
    return path


@pytest.fixture
def cycle_file(tmp_path: Path) -> Path:
    path = tmp_path / "cycle.yaml"
    path.write_text(CYCLE_YAML, encoding="utf-8")
    return path


class TestScheduleCommand:
    """Test the schedule command."""

    def test_text_output(self, chain_file: Path) -> None:
        result = runner.invoke(app, ["schedule", str(chain_file)])

        assert result.exit_code == 0
        assert "Schedule Results" in result.stdout
        assert "Draft (2) [critical]" in result.stdout
        assert "Start: 2025-01-02" in result.stdout
        assert "Critical path: 1 -> 2 -> 3" in result.stdout
        assert "Estimated total project duration: 1 working days" in result.stdout

    def test_json_output(self, chain_file: Path) -> None:
        result = runner.invoke(app, ["schedule", str(chain_file), "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["critical_path"] == ["1", "2", "3"]
        assert data["tasks"][2]["start_date"] == "2025-01-03"
        assert data["tasks"][2]["due_date"] == "2025-01-03"

    def test_start_date_option_overrides_file(self, chain_file: Path) -> None:
        result = runner.invoke(
            app, ["schedule", str(chain_file), "--format", "json", "--start-date", "2025-03-03"]
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["tasks"][0]["start_date"] == "2025-03-03"

    def test_yaml_output_file(self, chain_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "schedule.yaml"
        result = runner.invoke(
            app, ["schedule", str(chain_file), "--format", "yaml", "--output", str(output)]
        )

        assert result.exit_code == 0
        assert f"Schedule written to {output}" in result.stdout
        data = yaml.safe_load(output.read_text(encoding="utf-8"))
        assert data["tasks"][1]["start_date"] == "2025-01-02"

    def test_text_output_file(self, chain_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "schedule.txt"
        result = runner.invoke(app, ["schedule", str(chain_file), "--output", str(output)])

        assert result.exit_code == 0
        assert f"Schedule written to {output}" in result.stdout
        text = output.read_text(encoding="utf-8")
        assert text.startswith("Schedule Results\n")
        assert "Critical path: 1 -> 2 -> 3" in text
        assert "{" not in text

    def test_verbosity_above_debug_rejected(self, chain_file: Path) -> None:
        result = runner.invoke(app, ["-v", "4", "schedule", str(chain_file)])
        assert result.exit_code != 0

    def test_cycle_reported_as_warning(self, cycle_file: Path) -> None:
        result = runner.invoke(app, ["schedule", str(cycle_file), "--start-date", "2025-01-01"])

        assert result.exit_code == 0
        assert "Circular dependency detected: A → B → A" in result.output

    def test_invalid_start_date(self, chain_file: Path) -> None:
        result = runner.invoke(app, ["schedule", str(chain_file), "--start-date", "01/01/2025"])

        assert result.exit_code == 1
        assert "Invalid start date" in result.output

    def test_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["schedule", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_config_option(self, chain_file: Path, tmp_path: Path) -> None:
        config = tmp_path / "custom.yaml"
        config.write_text("engine:\n  dependency_buffer_days: 0\n", encoding="utf-8")

        result = runner.invoke(
            app, ["--config", str(config), "schedule", str(chain_file), "--format", "json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [t["start_date"] for t in data["tasks"]] == ["2025-01-01"] * 3

    def test_verbose_trace(self, chain_file: Path) -> None:
        result = runner.invoke(app, ["-v", "1", "schedule", str(chain_file)])

        assert result.exit_code == 0
        assert "Task 2: 240 min = 1 day(s), 2025-01-02 to 2025-01-02" in result.output


class TestValidateCommand:
    """Test the validate command."""

    def test_acyclic(self, chain_file: Path) -> None:
        result = runner.invoke(app, ["validate", str(chain_file)])

        assert result.exit_code == 0
        assert "OK: 3 tasks, no circular dependencies" in result.stdout
        assert "Order: 1, 2, 3" in result.stdout

    def test_cycle(self, cycle_file: Path) -> None:
        result = runner.invoke(app, ["validate", str(cycle_file)])

        assert result.exit_code == 1
        assert "Circular dependency detected: A -> B -> A" in result.output

    def test_unknown_dependency(self, tmp_path: Path) -> None:
        path = tmp_path / "tasks.yaml"
        path.write_text("tasks:\n  - id: a\n    dependencies: [ghost]\n", encoding="utf-8")

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 0
        assert "task a depends on unknown task ghost" in result.output


class TestCriticalPathCommand:
    """Test the critical-path command."""

    def test_table(self, chain_file: Path) -> None:
        result = runner.invoke(app, ["critical-path", str(chain_file)])

        assert result.exit_code == 0
        assert "Critical path: 1 -> 2 -> 3" in result.stdout
        assert "Total duration: 420 min" in result.stdout

    def test_cycle(self, cycle_file: Path) -> None:
        result = runner.invoke(app, ["critical-path", str(cycle_file)])

        assert result.exit_code == 1
        assert "circular dependencies" in result.output


class TestBaselineCommands:
    """Test the baseline and compare commands."""

    def test_baseline_then_compare(self, chain_file: Path, tmp_path: Path) -> None:
        baseline_path = tmp_path / "baseline.yaml"
        result = runner.invoke(
            app,
            ["baseline", str(chain_file), "--output", str(baseline_path), "--name", "Kickoff"],
        )
        assert result.exit_code == 0
        assert baseline_path.exists()

        # Same plan two days later: every task slips by two days
        result = runner.invoke(
            app, ["compare", str(chain_file), str(baseline_path), "--start-date", "2025-01-03"]
        )

        assert result.exit_code == 0
        assert "Comparison against 'Kickoff'" in result.stdout
        assert "+2d delayed" in result.stdout
        assert "Delayed tasks: 3 / 3" in result.stdout
        assert "Total delay: 6 days" in result.stdout

    def test_baseline_refuses_cycle(self, cycle_file: Path, tmp_path: Path) -> None:
        baseline_path = tmp_path / "baseline.yaml"
        result = runner.invoke(
            app,
            ["baseline", str(cycle_file), "--output", str(baseline_path), "-s", "2025-01-01"],
        )

        assert result.exit_code == 1
        assert not baseline_path.exists()

    def test_compare_bad_baseline(self, chain_file: Path, tmp_path: Path) -> None:
        baseline_path = tmp_path / "baseline.yaml"
        baseline_path.write_text("version: 42\n", encoding="utf-8")

        result = runner.invoke(app, ["compare", str(chain_file), str(baseline_path)])

        assert result.exit_code == 1
        assert "Could not read baseline" in result.output
