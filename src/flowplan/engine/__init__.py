"""Engine package - dependency validation, calendar scheduling and CPM.

Main entry points:
- PlanningEngine: validate -> schedule -> critical path -> warnings/suggestions
- topological_sort: cycle detection and ordering, yields an AcyclicTaskSet
- schedule_tasks: calendar dates for an AcyclicTaskSet
- analyze_critical_path: forward/backward passes and slack for an AcyclicTaskSet
"""

from .core import (
    AcyclicTaskSet,
    CriticalPathResult,
    ScheduleResult,
    ScheduleRun,
    SortResult,
    TaskTimes,
)
from .critical_path import analyze_critical_path, calculate_critical_path
from .graph import DependencyGraph, detect_cycles, topological_sort
from .scheduling import normalize_start_date, schedule_tasks, working_days
from .service import PlanningEngine, calculate_schedule

__all__ = [
    # Core dataclasses
    "AcyclicTaskSet",
    "CriticalPathResult",
    "ScheduleResult",
    "ScheduleRun",
    "SortResult",
    "TaskTimes",
    # Graph validation
    "DependencyGraph",
    "detect_cycles",
    "topological_sort",
    # Critical path
    "analyze_critical_path",
    "calculate_critical_path",
    # Scheduling
    "normalize_start_date",
    "schedule_tasks",
    "working_days",
    # Facade
    "PlanningEngine",
    "calculate_schedule",
]
