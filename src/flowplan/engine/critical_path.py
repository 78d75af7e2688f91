"""Critical Path Method: forward/backward passes, slack and the critical path."""

from __future__ import annotations

from collections.abc import Sequence

from flowplan.config import EngineConfig
from flowplan.exceptions import CircularDependencyError
from flowplan.logger import debug_enabled, get_logger
from flowplan.models import PlannerTask

from .core import AcyclicTaskSet, CriticalPathResult, TaskTimes
from .graph import topological_sort

logger = get_logger()


def analyze_critical_path(
    task_set: AcyclicTaskSet,
    config: EngineConfig | None = None,
) -> CriticalPathResult:
    """Compute earliest/latest times and slack for every task.

    Times are minute offsets from an arbitrary zero, not calendar dates. A
    task without an estimate counts as 0 minutes unless
    config.unify_default_duration is set.

    The critical path is every task with zero slack, ordered by earliest
    start and then by input position.
    """
    config = config or EngineConfig()
    graph = task_set.graph
    count = len(graph)
    if count == 0:
        return CriticalPathResult(critical_path=[], task_times={}, total_duration=0)

    durations = [config.analysis_minutes(task.estimated_duration) for task in graph.tasks]
    times = [TaskTimes() for _ in range(count)]

    # Forward pass: dependencies come first in topological order
    for node in task_set.order:
        earliest_start = 0
        for dep in graph.dependencies[node]:
            earliest_start = max(earliest_start, times[dep].earliest_finish)
        times[node].earliest_start = earliest_start
        times[node].earliest_finish = earliest_start + durations[node]

    total_duration = max(t.earliest_finish for t in times)
    logger.debug(f"  CPM forward pass done, project duration {total_duration} min")

    # Backward pass: dependents come first in reverse topological order
    for node in reversed(task_set.order):
        dependents = graph.dependents[node]
        if dependents:
            latest_finish = min(times[d].latest_start for d in dependents)
        else:
            latest_finish = total_duration
        t = times[node]
        t.latest_finish = latest_finish
        t.latest_start = latest_finish - durations[node]
        t.slack = t.latest_start - t.earliest_start
        if debug_enabled():
            logger.debug(
                f"    {graph.task_id(node)}: ES={t.earliest_start} EF={t.earliest_finish} "
                f"LS={t.latest_start} LF={t.latest_finish} slack={t.slack}"
            )

    critical = sorted(
        (node for node in range(count) if times[node].slack == 0),
        key=lambda node: (times[node].earliest_start, node),
    )

    return CriticalPathResult(
        critical_path=[graph.task_id(node) for node in critical],
        task_times={graph.task_id(node): times[node] for node in range(count)},
        total_duration=total_duration,
    )


def calculate_critical_path(
    tasks: Sequence[PlannerTask],
    config: EngineConfig | None = None,
) -> CriticalPathResult:
    """Validate a task list and run the critical path analysis on it.

    Raises:
        CircularDependencyError: If the tasks contain a dependency cycle
    """
    config = config or EngineConfig()
    result = topological_sort(tasks, config.missing_dependencies)
    if result.task_set is None:
        raise CircularDependencyError(
            f"Cannot analyze tasks with circular dependencies: {' -> '.join(result.cycle)}"
        )
    return analyze_critical_path(result.task_set, config)
