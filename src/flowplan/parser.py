"""YAML parser for flowplan task files."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError
from .models import PlannerTask
from .schemas import TaskFileSchema, TaskSchema


@dataclass
class TaskFile:
    """Tasks loaded from a file, with the project start date if the file sets one."""

    tasks: list[PlannerTask]
    project_start: date | None = None


def schema_to_task(schema: TaskSchema) -> PlannerTask:
    """Convert a validated schema entry to a PlannerTask."""
    return PlannerTask(
        id=str(schema.id),
        title=schema.title,
        dependencies=list(schema.dependencies),
        estimated_duration=schema.estimated_duration,
        start_date=schema.start_date,
        due_date=schema.due_date,
        impact=schema.impact,
        effort=schema.effort,
        calculated_priority=schema.calculated_priority,
        extra=dict(schema.model_extra or {}),
    )


def parse_tasks(data: Any) -> TaskFile:
    """Validate already-loaded task data.

    Accepts either a mapping with a ``tasks`` key or a bare list of tasks.
    """
    if isinstance(data, list):
        data = {"tasks": data}
    if not isinstance(data, dict):
        raise ParseError("Task data must be a mapping with a 'tasks' key or a list of tasks")

    try:
        schema = TaskFileSchema.model_validate(data)
    except PydanticValidationError as e:
        raise ParseError(f"Invalid task data: {e}") from e

    return TaskFile(
        tasks=[schema_to_task(entry) for entry in schema.tasks],
        project_start=schema.project_start,
    )


def load_tasks(path: Path | str) -> TaskFile:
    """Parse a YAML (or JSON) task file."""
    path = Path(path)
    if not path.exists():
        raise ParseError(f"File not found: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse YAML: {e}") from e

    if data is None:
        return TaskFile(tasks=[])

    return parse_tasks(data)
