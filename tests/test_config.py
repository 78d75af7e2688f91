"""Tests for engine configuration."""

from pathlib import Path

import pytest

from flowplan.config import (
    CONFIG_FILENAME,
    EngineConfig,
    MissingDependencyMode,
    discover_config,
    load_config,
)
from flowplan.exceptions import ParseError


def test_defaults() -> None:
    config = EngineConfig()

    assert config.minutes_per_working_day == 480
    assert config.default_duration_minutes == 60
    assert config.dependency_buffer_days == 1
    assert config.minimum_task_days == 1
    assert config.missing_dependencies == MissingDependencyMode.WARN
    assert not config.unify_default_duration


def test_duration_policies() -> None:
    split = EngineConfig()
    assert split.scheduling_minutes(None) == 60
    assert split.analysis_minutes(None) == 0
    assert split.analysis_minutes(0) == 0
    assert split.analysis_minutes(30) == 30

    unified = EngineConfig(unify_default_duration=True)
    assert unified.analysis_minutes(None) == 60


def test_load_config(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "engine:\n  dependency_buffer_days: 0\n  missing_dependencies: error\n",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.dependency_buffer_days == 0
    assert config.missing_dependencies == MissingDependencyMode.ERROR


def test_load_config_top_level(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("minutes_per_working_day: 450\n", encoding="utf-8")

    assert load_config(path).minutes_per_working_day == 450


def test_load_empty_config(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(path) == EngineConfig()


def test_invalid_config(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("engine:\n  minutes_per_working_day: 0\n", encoding="utf-8")

    with pytest.raises(ParseError, match="Invalid config"):
        load_config(path)


def test_missing_config(tmp_path: Path) -> None:
    with pytest.raises(ParseError, match="not found"):
        load_config(tmp_path / "nope.yaml")


def test_discover_next_to_task_file(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("dependency_buffer_days: 2\n", encoding="utf-8")

    config = discover_config(tmp_path / "tasks.yaml")

    assert config.dependency_buffer_days == 2


def test_discover_explicit_path_wins(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("dependency_buffer_days: 2\n", encoding="utf-8")
    explicit = tmp_path / "other.yaml"
    explicit.write_text("dependency_buffer_days: 3\n", encoding="utf-8")

    config = discover_config(tmp_path / "tasks.yaml", explicit)

    assert config.dependency_buffer_days == 3


def test_discover_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert discover_config(tmp_path / "sub" / "tasks.yaml") == EngineConfig()
