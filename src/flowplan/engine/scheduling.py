"""Calendar scheduling of an acyclic task set."""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

from flowplan.config import EngineConfig
from flowplan.logger import get_logger
from flowplan.models import PlannerTask, parse_date

from .core import AcyclicTaskSet, ScheduleRun

logger = get_logger()


def normalize_start_date(value: date | datetime | str) -> date:
    """Reduce a project start to a calendar date.

    Aware datetimes are converted to UTC before the time of day is dropped,
    so a start given in any timezone lands on the same UTC day.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError("Project start date is required")
    return parsed


def working_days(minutes: int, config: EngineConfig | None = None) -> int:
    """Convert minutes of work to whole working days, rounding up.

    Any remainder costs a full extra day; the result is never below
    config.minimum_task_days.
    """
    config = config or EngineConfig()
    days = math.ceil(minutes / config.minutes_per_working_day)
    return max(days, config.minimum_task_days)


def schedule_tasks(
    task_set: AcyclicTaskSet,
    project_start: date | datetime | str,
    config: EngineConfig | None = None,
) -> ScheduleRun:
    """Assign start and due dates to every task.

    Tasks are processed in topological order. A task without dependencies
    starts on the project start; otherwise it starts the buffer day(s) after
    its latest dependency is due. A manual start_date wins only when it is
    not earlier than that candidate. The due date is the last day the task
    occupies, so a one-day task starts and is due on the same date.

    Returns:
        ScheduleRun with dated copies of the tasks (input order) and the
        decision log. Input tasks are not modified.
    """
    config = config or EngineConfig()
    start = normalize_start_date(project_start)
    graph = task_set.graph
    buffer = timedelta(days=config.dependency_buffer_days)

    logs: list[str] = []

    def record(message: str, *, change: bool = False) -> None:
        logs.append(message)
        if change:
            logger.changes(message)
        else:
            logger.checks(message)

    record(f"Project start: {start.isoformat()}")

    dates: dict[int, tuple[date, date]] = {}
    for node in task_set.order:
        task = graph.tasks[node]
        deps = graph.dependencies[node]

        if deps:
            latest_dep_end = max(dates[dep][1] for dep in deps)
            candidate = latest_dep_end + buffer
            record(
                f"Task {task.id}: dependencies due by {latest_dep_end.isoformat()}, "
                f"candidate start {candidate.isoformat()}"
            )
        else:
            candidate = start
            record(f"Task {task.id}: no dependencies, candidate start {candidate.isoformat()}")

        task_start = candidate
        if task.start_date is not None:
            manual_start = normalize_start_date(task.start_date)
            if manual_start >= candidate:
                task_start = manual_start
                record(
                    f"Task {task.id}: keeping manual start {manual_start.isoformat()} "
                    f"(candidate {candidate.isoformat()})",
                    change=True,
                )
            else:
                record(
                    f"Task {task.id}: manual start {manual_start.isoformat()} is before "
                    f"candidate {candidate.isoformat()}, using candidate",
                    change=True,
                )

        minutes = config.scheduling_minutes(task.estimated_duration)
        days = working_days(minutes, config)
        due = task_start + timedelta(days=days - 1)
        dates[node] = (task_start, due)
        record(
            f"Task {task.id}: {minutes} min = {days} day(s), "
            f"{task_start.isoformat()} to {due.isoformat()}",
            change=True,
        )

    scheduled: list[PlannerTask] = []
    for node, task in enumerate(graph.tasks):
        task_start, due = dates[node]
        scheduled.append(
            replace(
                task,
                dependencies=list(task.dependencies),
                start_date=task_start,
                due_date=due,
                extra=dict(task.extra),
            )
        )

    return ScheduleRun(tasks=scheduled, logs=logs)
