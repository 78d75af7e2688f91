"""flowplan - dependency-aware project scheduling with critical path analysis."""

from .baseline import Baseline, BaselineComparison, compare_to_baseline
from .config import EngineConfig, MissingDependencyMode
from .engine import PlanningEngine, ScheduleResult, calculate_schedule
from .exceptions import (
    CircularDependencyError,
    FlowplanError,
    MissingReferenceError,
    ParseError,
    ValidationError,
)
from .models import PlannerTask

__version__ = "0.1.0"

__all__ = [
    "Baseline",
    "BaselineComparison",
    "CircularDependencyError",
    "EngineConfig",
    "FlowplanError",
    "MissingDependencyMode",
    "MissingReferenceError",
    "ParseError",
    "PlannerTask",
    "PlanningEngine",
    "ScheduleResult",
    "ValidationError",
    "calculate_schedule",
    "compare_to_baseline",
]
