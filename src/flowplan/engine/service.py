"""High-level planning engine."""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import date, datetime

from flowplan.config import EngineConfig
from flowplan.exceptions import CircularDependencyError
from flowplan.logger import changes_enabled, get_logger
from flowplan.models import PlannerTask

from .core import CriticalPathResult, ScheduleResult
from .critical_path import analyze_critical_path
from .graph import topological_sort
from .scheduling import schedule_tasks

logger = get_logger()

CYCLE_SEPARATOR = " → "


class PlanningEngine:
    """Entry point for the host application.

    Runs the pipeline validate -> schedule -> critical path -> assemble
    result. Holds only its configuration, so one instance can serve any
    number of independent calls.
    """

    def __init__(self, config: EngineConfig | None = None):
        """Initialize the engine.

        Args:
            config: Optional engine configuration (defaults apply otherwise)
        """
        self.config = config or EngineConfig()

    def detect_cycles(self, tasks: Sequence[PlannerTask]) -> tuple[bool, list[str]]:
        """Return (has_cycle, cycle) for a task list."""
        result = topological_sort(tasks, self.config.missing_dependencies)
        return result.has_cycle, result.cycle

    def topological_sort(self, tasks: Sequence[PlannerTask]) -> list[PlannerTask]:
        """Order tasks so every dependency comes before its dependents.

        Raises:
            CircularDependencyError: If the tasks contain a cycle
        """
        result = topological_sort(tasks, self.config.missing_dependencies)
        if result.has_cycle:
            raise CircularDependencyError(
                f"Cannot sort tasks with circular dependencies: {' -> '.join(result.cycle)}"
            )
        return result.sorted

    def calculate_critical_path(self, tasks: Sequence[PlannerTask]) -> CriticalPathResult:
        """Run the critical path analysis on a task list.

        Raises:
            CircularDependencyError: If the tasks contain a cycle
        """
        result = topological_sort(tasks, self.config.missing_dependencies)
        if result.task_set is None:
            raise CircularDependencyError(
                f"Cannot analyze tasks with circular dependencies: {' -> '.join(result.cycle)}"
            )
        return analyze_critical_path(result.task_set, self.config)

    def calculate_schedule(
        self,
        tasks: Sequence[PlannerTask],
        project_start: date | datetime | str,
    ) -> ScheduleResult:
        """Schedule the tasks and analyze the critical path.

        A dependency cycle aborts the run: the input tasks come back
        unchanged with an empty critical path and a warning naming the cycle.

        Args:
            tasks: Tasks to plan
            project_start: Project start date; time of day is ignored

        Returns:
            ScheduleResult with dated tasks, critical path, warnings and suggestions
        """
        tasks = list(tasks)
        warnings: list[str] = []
        suggestions: list[str] = []

        sort_result = topological_sort(tasks, self.config.missing_dependencies)
        if sort_result.task_set is None:
            cycle_text = CYCLE_SEPARATOR.join(sort_result.cycle)
            if changes_enabled():
                logger.changes(f"Scheduling aborted, circular dependency: {cycle_text}")
            warnings.append(f"Circular dependency detected: {cycle_text}")
            return ScheduleResult(
                tasks=tasks,
                warnings=warnings,
                has_cycle=True,
                cycle=sort_result.cycle,
            )
        task_set = sort_result.task_set

        missing_duration = [task for task in tasks if not task.has_duration]
        if missing_duration:
            warnings.append(
                f"{len(missing_duration)} tasks have no duration estimate "
                f"(defaulting to {self.config.default_duration_minutes} minutes)"
            )

        for task_id, dep_id in sort_result.missing_references:
            warnings.append(f"Task {task_id} depends on unknown task {dep_id} (ignored)")

        run = schedule_tasks(task_set, project_start, self.config)

        # Analyzed on the original tasks, independently of the calendar dates
        cpm = analyze_critical_path(task_set, self.config)

        if cpm.critical_path:
            suggestions.append(
                f"The critical path includes {len(cpm.critical_path)} tasks. "
                "Focus on these to shorten the project."
            )

        duration_days = math.ceil(cpm.total_duration / self.config.minutes_per_working_day)
        suggestions.append(f"Estimated total project duration: {duration_days} working days")

        return ScheduleResult(
            tasks=run.tasks,
            critical_path=cpm.critical_path,
            warnings=warnings,
            suggestions=suggestions,
            debug_logs=run.logs,
            task_times=cpm.task_times,
            total_duration_minutes=cpm.total_duration,
        )


def calculate_schedule(
    tasks: Sequence[PlannerTask],
    project_start: date | datetime | str,
    config: EngineConfig | None = None,
) -> ScheduleResult:
    """Convenience wrapper around PlanningEngine.calculate_schedule()."""
    return PlanningEngine(config).calculate_schedule(tasks, project_start)
