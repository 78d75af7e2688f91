"""Core dataclasses for the planning engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from flowplan.models import PlannerTask

    from .graph import DependencyGraph


def _default_str_list() -> list[str]:
    return []


def _default_reference_list() -> list[tuple[str, str]]:
    return []


@dataclass(frozen=True)
class AcyclicTaskSet:
    """Tasks whose dependency graph is known to be acyclic.

    Only produced by topological_sort(); the scheduler and the critical path
    analyzer accept nothing else, so they never see a cyclic graph.
    """

    graph: DependencyGraph
    order: tuple[int, ...]  # Task indices, every dependency before its dependents

    @property
    def tasks(self) -> list[PlannerTask]:
        """Tasks in original input order."""
        return list(self.graph.tasks)

    @property
    def sorted_tasks(self) -> list[PlannerTask]:
        """Tasks in topological order."""
        return [self.graph.tasks[i] for i in self.order]


@dataclass
class SortResult:
    """Outcome of dependency validation.

    On a cycle, ``sorted`` is the original input list and ``cycle`` holds the
    witness path, starting and ending at the repeated ID.
    """

    has_cycle: bool
    sorted: list[PlannerTask]
    cycle: list[str] = field(default_factory=_default_str_list)
    task_set: AcyclicTaskSet | None = None
    # (task_id, unknown dependency id)
    missing_references: list[tuple[str, str]] = field(default_factory=_default_reference_list)


@dataclass
class TaskTimes:
    """CPM values for one task, in minutes from the project's zero point."""

    earliest_start: int = 0
    earliest_finish: int = 0
    latest_start: int = 0
    latest_finish: int = 0
    slack: int = 0


@dataclass
class CriticalPathResult:
    """Result of the critical path analysis."""

    critical_path: list[str]
    task_times: dict[str, TaskTimes]
    total_duration: int  # Minutes


@dataclass
class ScheduleRun:
    """Scheduler output: dated task copies plus one log line per decision."""

    tasks: list[PlannerTask]
    logs: list[str] = field(default_factory=_default_str_list)


@dataclass
class ScheduleResult:
    """Complete result of a planning run."""

    tasks: list[PlannerTask]
    critical_path: list[str] = field(default_factory=_default_str_list)
    warnings: list[str] = field(default_factory=_default_str_list)
    suggestions: list[str] = field(default_factory=_default_str_list)
    debug_logs: list[str] = field(default_factory=_default_str_list)
    task_times: dict[str, TaskTimes] = field(default_factory=dict)
    total_duration_minutes: int = 0
    has_cycle: bool = False
    cycle: list[str] = field(default_factory=_default_str_list)

    @property
    def scheduled(self) -> bool:
        """False when scheduling was aborted because of a cycle."""
        return not self.has_cycle

    def task_by_id(self, task_id: str) -> PlannerTask | None:
        """Look up a result task by ID."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the host application's wire shape."""
        return {
            "tasks": [task.to_dict() for task in self.tasks],
            "critical_path": list(self.critical_path),
            "warnings": list(self.warnings),
            "suggestions": list(self.suggestions),
            "debug_logs": list(self.debug_logs),
        }
