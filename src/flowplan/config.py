"""Engine configuration loaded from flowplan_config.yaml."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError

CONFIG_FILENAME = "flowplan_config.yaml"


class MissingDependencyMode(str, Enum):
    """What to do with a dependency ID that matches no task."""

    WARN = "warn"  # Skip it, log it, report it in the result warnings
    ERROR = "error"  # Raise MissingReferenceError


class EngineConfig(BaseModel):
    """Constants and policy switches for the planning engine."""

    minutes_per_working_day: int = Field(default=8 * 60, gt=0)
    default_duration_minutes: int = Field(default=60, gt=0)
    dependency_buffer_days: int = Field(default=1, ge=0)
    # Tasks always occupy at least this many calendar days
    minimum_task_days: int = Field(default=1, ge=1)
    missing_dependencies: MissingDependencyMode = MissingDependencyMode.WARN
    # False: critical path analysis counts a missing duration as 0 minutes while the
    # scheduler uses default_duration_minutes. True: both use the default.
    unify_default_duration: bool = False

    def scheduling_minutes(self, estimated_duration: int | None) -> int:
        """Duration the scheduler uses for a task."""
        return estimated_duration or self.default_duration_minutes

    def analysis_minutes(self, estimated_duration: int | None) -> int:
        """Duration the critical path analysis uses for a task."""
        if estimated_duration:
            return estimated_duration
        return self.default_duration_minutes if self.unify_default_duration else 0


def load_config(path: Path | str) -> EngineConfig:
    """Load engine configuration from a YAML file.

    The engine settings may sit at the top level or under an ``engine`` key.

    Raises:
        ParseError: If the file is missing, unreadable or fails validation
    """
    path = Path(path)
    if not path.exists():
        raise ParseError(f"Config file not found: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse config YAML: {e}") from e

    if data is None:
        return EngineConfig()
    if not isinstance(data, dict):
        raise ParseError("Config YAML must contain a dictionary at the root level")

    section = data.get("engine", data)
    try:
        return EngineConfig.model_validate(section)
    except PydanticValidationError as e:
        raise ParseError(f"Invalid config in {path}: {e}") from e


def discover_config(
    tasks_path: Path | str | None = None,
    config_path: Path | None = None,
) -> EngineConfig:
    """Find and load configuration, falling back to defaults.

    Search order:
    1. Explicit config_path argument
    2. Task file directory / flowplan_config.yaml
    3. Current directory / flowplan_config.yaml
    """
    if config_path is not None:
        return load_config(config_path)

    if tasks_path is not None:
        dir_config = Path(tasks_path).parent / CONFIG_FILENAME
        if dir_config.exists():
            return load_config(dir_config)

    cwd_config = Path(CONFIG_FILENAME)
    if cwd_config.exists():
        return load_config(cwd_config)

    return EngineConfig()
