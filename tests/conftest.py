"""Pytest configuration and fixtures for flowplan tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date

import pytest

from flowplan.engine import PlanningEngine
from flowplan.logger import reset_logger
from flowplan.models import PlannerTask

PROJECT_START = date(2025, 1, 1)


def make_task(
    task_id: str,
    *deps: str,
    duration: int | None = 60,
    start: date | None = None,
    title: str | None = None,
) -> PlannerTask:
    """Create a PlannerTask with terse arguments.

    Example:
        make_task("b", "a", duration=240)  # b depends on a, 4 hours of work
    """
    return PlannerTask(
        id=task_id,
        title=title if title is not None else f"Task {task_id}",
        dependencies=list(deps),
        estimated_duration=duration,
        start_date=start,
    )


@pytest.fixture
def engine() -> PlanningEngine:
    """Planning engine with default configuration."""
    return PlanningEngine()


@pytest.fixture
def linear_chain() -> list[PlannerTask]:
    """Three tasks in a chain: 1 -> 2 -> 3."""
    return [
        make_task("1", duration=120),
        make_task("2", "1", duration=240),
        make_task("3", "2", duration=60),
    ]


@pytest.fixture(autouse=True)
def clean_logger() -> Iterator[None]:
    """Keep logger configuration from leaking between tests."""
    yield
    reset_logger()
