"""Dependency graph construction, cycle detection and topological ordering."""

from __future__ import annotations

from collections.abc import Sequence

from flowplan.config import MissingDependencyMode
from flowplan.exceptions import MissingReferenceError, ValidationError
from flowplan.logger import checks_enabled, debug_enabled, get_logger
from flowplan.models import PlannerTask

from .core import AcyclicTaskSet, SortResult

logger = get_logger()


class DependencyGraph:
    """Explicit adjacency structure over a task list.

    Tasks are addressed by their position in the input list. Each task's
    dependency IDs are resolved to indices once, so the traversals never go
    back to ID lookups.
    """

    def __init__(
        self,
        tasks: Sequence[PlannerTask],
        missing: MissingDependencyMode = MissingDependencyMode.WARN,
    ):
        """Build the graph.

        Args:
            tasks: Tasks in input order
            missing: How to treat dependency IDs that match no task

        Raises:
            ValidationError: If a task is not a PlannerTask, an ID is duplicated or
                a duration is negative
            MissingReferenceError: If missing is ERROR and a dependency is unknown
        """
        self.tasks: tuple[PlannerTask, ...] = tuple(tasks)
        self.index: dict[str, int] = {}
        for position, task in enumerate(self.tasks):
            if not isinstance(task, PlannerTask):
                raise ValidationError(
                    f"Expected PlannerTask at position {position}, got {type(task).__name__}"
                )
            if task.id in self.index:
                raise ValidationError(f"Duplicate task id: {task.id}")
            if task.estimated_duration is not None and task.estimated_duration < 0:
                raise ValidationError(
                    f"Task {task.id} has a negative duration: {task.estimated_duration}"
                )
            self.index[task.id] = position

        self.dependencies: list[list[int]] = []
        self.dependents: list[list[int]] = [[] for _ in self.tasks]
        self.missing_references: list[tuple[str, str]] = []

        for position, task in enumerate(self.tasks):
            resolved: list[int] = []
            for dep_id in task.dependencies:
                dep_index = self.index.get(dep_id)
                if dep_index is None:
                    if missing == MissingDependencyMode.ERROR:
                        raise MissingReferenceError(
                            f"Task {task.id} depends on unknown task: {dep_id}"
                        )
                    if checks_enabled():
                        logger.checks(f"  Task {task.id}: ignoring unknown dependency {dep_id}")
                    self.missing_references.append((task.id, dep_id))
                    continue
                if dep_index in resolved:
                    continue
                resolved.append(dep_index)
                self.dependents[dep_index].append(position)
            self.dependencies.append(resolved)

    def __len__(self) -> int:
        return len(self.tasks)

    def task_id(self, position: int) -> str:
        """ID of the task at a position."""
        return self.tasks[position].id

    def find_order(self) -> tuple[list[int], list[str]]:
        """Depth-first search for a topological order.

        Roots are taken in input order and dependencies in listed order. A
        task is emitted once all of its dependencies have been emitted. The
        search uses an explicit stack, so long chains do not recurse.

        Returns:
            Tuple of (order, cycle). On a cycle, order is incomplete and cycle
            is the path from the first occurrence of the repeated task back to
            it, e.g. ["A", "B", "A"]. Otherwise cycle is empty.
        """
        visited: set[int] = set()
        on_stack: set[int] = set()
        order: list[int] = []

        for root in range(len(self.tasks)):
            if root in visited:
                continue

            visited.add(root)
            on_stack.add(root)
            path: list[int] = [root]
            # Frames of (task index, next dependency position)
            stack: list[tuple[int, int]] = [(root, 0)]

            while stack:
                node, next_dep = stack[-1]
                deps = self.dependencies[node]

                if next_dep < len(deps):
                    stack[-1] = (node, next_dep + 1)
                    dep = deps[next_dep]
                    if dep in on_stack:
                        cycle = path[path.index(dep) :] + [dep]
                        return order, [self.task_id(i) for i in cycle]
                    if dep in visited:
                        continue
                    visited.add(dep)
                    on_stack.add(dep)
                    path.append(dep)
                    stack.append((dep, 0))
                    continue

                stack.pop()
                path.pop()
                on_stack.discard(node)
                order.append(node)
                if debug_enabled():
                    logger.debug(f"    topo: {self.task_id(node)} at position {len(order) - 1}")

        return order, []


def topological_sort(
    tasks: Sequence[PlannerTask],
    missing: MissingDependencyMode = MissingDependencyMode.WARN,
) -> SortResult:
    """Validate the dependency relation and order the tasks.

    Cycles are reported in the result, never raised.

    Args:
        tasks: Tasks to order
        missing: How to treat dependency IDs that match no task

    Returns:
        SortResult; task_set is set only when the graph is acyclic
    """
    graph = DependencyGraph(tasks, missing)
    order, cycle = graph.find_order()

    if cycle:
        logger.checks(f"Cycle detected: {' -> '.join(cycle)}")
        return SortResult(
            has_cycle=True,
            sorted=list(graph.tasks),
            cycle=cycle,
            missing_references=list(graph.missing_references),
        )

    task_set = AcyclicTaskSet(graph=graph, order=tuple(order))
    return SortResult(
        has_cycle=False,
        sorted=task_set.sorted_tasks,
        task_set=task_set,
        missing_references=list(graph.missing_references),
    )


def detect_cycles(
    tasks: Sequence[PlannerTask],
    missing: MissingDependencyMode = MissingDependencyMode.WARN,
) -> tuple[bool, list[str]]:
    """Return (has_cycle, cycle) for a task list."""
    result = topological_sort(tasks, missing)
    return result.has_cycle, result.cycle
