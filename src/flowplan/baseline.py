"""Baseline snapshots and deviation comparison.

A baseline freezes the dates of a schedule result so that a later result can
be compared against it task by task.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, cast

import yaml

from .models import PlannerTask, format_date

if TYPE_CHECKING:
    from .engine.core import ScheduleResult

BASELINE_FILE_VERSION = 1


class DeviationStatus(str, Enum):
    """How a task's due date compares to its baseline."""

    ON_TRACK = "on_track"
    DELAYED = "delayed"
    AHEAD = "ahead"


@dataclass
class BaselineTask:
    """Frozen dates for a single task."""

    title: str
    start_date: date | None
    due_date: date | None


@dataclass
class Baseline:
    """A named snapshot of scheduled tasks."""

    version: int
    name: str
    tasks: dict[str, BaselineTask]  # task_id -> frozen dates
    created: date | None = None


@dataclass
class TaskDeviation:
    """Current versus baseline dates for one task."""

    id: str
    title: str
    start_date: date | None
    due_date: date | None
    baseline_start: date | None
    baseline_end: date | None
    delay_days: int
    status: DeviationStatus

    def to_dict(self) -> dict[str, Any]:
        """Serialize with ISO date strings."""
        return {
            "id": self.id,
            "title": self.title,
            "start_date": format_date(self.start_date),
            "due_date": format_date(self.due_date),
            "baseline_start": format_date(self.baseline_start),
            "baseline_end": format_date(self.baseline_end),
            "delay_days": self.delay_days,
            "status": self.status.value,
        }


@dataclass
class BaselineComparison:
    """Per-task deviations plus project totals."""

    rows: list[TaskDeviation] = field(default_factory=list)

    @property
    def total_delay_days(self) -> int:
        """Sum of positive delays."""
        return sum(row.delay_days for row in self.rows if row.delay_days > 0)

    @property
    def delayed_count(self) -> int:
        """Number of tasks due later than in the baseline."""
        return sum(1 for row in self.rows if row.status == DeviationStatus.DELAYED)


def create_baseline(
    tasks: Sequence[PlannerTask],
    name: str,
    created: date | None = None,
) -> Baseline:
    """Snapshot the dates of a list of (scheduled) tasks."""
    return Baseline(
        version=BASELINE_FILE_VERSION,
        name=name,
        created=created,
        tasks={
            task.id: BaselineTask(
                title=task.title,
                start_date=task.start_date,
                due_date=task.due_date,
            )
            for task in tasks
        },
    )


def write_baseline_file(
    path: Path,
    result: ScheduleResult,
    name: str,
    created: date | None = None,
) -> Baseline:
    """Freeze a schedule result to a baseline file.

    Args:
        path: Path to write the baseline file
        result: Schedule result whose task dates are frozen
        name: Version name for the baseline
        created: Optional creation date recorded in the file

    Returns:
        The Baseline that was written
    """
    baseline = create_baseline(result.tasks, name, created)

    tasks_data: dict[str, dict[str, Any]] = {}
    for task_id, frozen in baseline.tasks.items():
        tasks_data[task_id] = {
            "title": frozen.title,
            "start_date": format_date(frozen.start_date),
            "due_date": format_date(frozen.due_date),
        }

    output: dict[str, Any] = {
        "version": BASELINE_FILE_VERSION,
        "name": name,
        "created": format_date(created),
        "tasks": tasks_data,
    }

    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(output, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    return baseline


def _parse_optional_date(task_id: str, value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as e:
        raise ValueError(f"Invalid date in baseline for '{task_id}': {e}") from e


def read_baseline_file(path: Path) -> Baseline:
    """Load a baseline file.

    Raises:
        ValueError: If the file format is invalid or the version is unsupported
    """
    with path.open(encoding="utf-8") as f:
        raw_data: Any = yaml.safe_load(f)

    if not isinstance(raw_data, dict):
        raise ValueError(f"Invalid baseline file format: expected dict, got {type(raw_data)}")

    data = cast(dict[str, Any], raw_data)

    version = data.get("version")
    if version is None:
        raise ValueError("Baseline file missing 'version' field")
    if not isinstance(version, int):
        raise ValueError(f"Baseline file version must be int, got {type(version)}")
    if version != BASELINE_FILE_VERSION:
        raise ValueError(
            f"Unsupported baseline file version {version}, expected {BASELINE_FILE_VERSION}"
        )

    raw_tasks = data.get("tasks") or {}
    if not isinstance(raw_tasks, dict):
        raise ValueError("Baseline file 'tasks' field must be a dict")

    tasks: dict[str, BaselineTask] = {}
    for task_id, task_data in cast(dict[Any, Any], raw_tasks).items():
        if not isinstance(task_data, dict):
            raise ValueError(f"Baseline data for '{task_id}' must be a dict")
        entry = cast(dict[str, Any], task_data)
        key = str(task_id)
        tasks[key] = BaselineTask(
            title=str(entry.get("title") or ""),
            start_date=_parse_optional_date(key, entry.get("start_date")),
            due_date=_parse_optional_date(key, entry.get("due_date")),
        )

    return Baseline(
        version=version,
        name=str(data.get("name") or ""),
        created=_parse_optional_date("created", data.get("created")),
        tasks=tasks,
    )


def compare_to_baseline(tasks: Sequence[PlannerTask], baseline: Baseline) -> BaselineComparison:
    """Compare current task dates against a baseline.

    delay_days is the current due date minus the baseline due date. Tasks
    missing from the baseline, or without due dates on either side, count as
    on track with zero delay.
    """
    rows: list[TaskDeviation] = []
    for task in tasks:
        frozen = baseline.tasks.get(task.id)
        baseline_start = frozen.start_date if frozen else None
        baseline_end = frozen.due_date if frozen else None

        delay_days = 0
        status = DeviationStatus.ON_TRACK
        if baseline_end is not None and task.due_date is not None:
            delay_days = (task.due_date - baseline_end).days
            if delay_days > 0:
                status = DeviationStatus.DELAYED
            elif delay_days < 0:
                status = DeviationStatus.AHEAD

        rows.append(
            TaskDeviation(
                id=task.id,
                title=task.title,
                start_date=task.start_date,
                due_date=task.due_date,
                baseline_start=baseline_start,
                baseline_end=baseline_end,
                delay_days=delay_days,
                status=status,
            )
        )

    return BaselineComparison(rows=rows)
