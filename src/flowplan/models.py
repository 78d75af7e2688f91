"""Data models for flowplan."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

PRIORITY_LEVELS = ("P1", "P2", "P3", "P4")

# Keys of a task record that map onto PlannerTask fields; anything else lands in extra
TASK_FIELDS = (
    "id",
    "title",
    "dependencies",
    "estimated_duration",
    "start_date",
    "due_date",
    "impact",
    "effort",
    "calculated_priority",
)


def parse_date(value: str | date | None) -> date | None:
    """Parse an ISO date string or date object.

    Datetime strings are accepted too; the time component is dropped.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError as e:
        raise ValueError(f"Invalid date: {value!r}") from e


def format_date(value: date | None) -> str | None:
    """Format a date as YYYY-MM-DD, passing None through."""
    return value.isoformat() if value is not None else None


@dataclass
class PlannerTask:
    """A task as supplied by the host application.

    Only ``id``, ``dependencies``, ``estimated_duration`` and ``start_date`` are
    read by the engine. ``due_date`` is engine output and is overwritten when
    the task is scheduled. The remaining fields are carried through untouched.
    """

    id: str
    title: str = ""
    dependencies: list[str] = field(default_factory=list)
    estimated_duration: int | None = None  # Minutes of work
    start_date: date | None = None  # Manual start override
    due_date: date | None = None
    impact: int | None = None
    effort: int | None = None
    calculated_priority: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def has_duration(self) -> bool:
        """True if the task carries a usable duration estimate."""
        return bool(self.estimated_duration)

    @property
    def label(self) -> str:
        """Human-readable name for messages."""
        return self.title or self.id

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlannerTask:
        """Build a task from a plain mapping (e.g. a JSON record)."""
        if "id" not in data:
            raise ValueError("Task record is missing 'id'")

        deps_raw = data.get("dependencies") or []
        if isinstance(deps_raw, str):
            deps_raw = [deps_raw]

        duration = data.get("estimated_duration")
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            dependencies=[str(dep) for dep in deps_raw],
            estimated_duration=int(duration) if duration is not None else None,
            start_date=parse_date(data.get("start_date")),
            due_date=parse_date(data.get("due_date")),
            impact=data.get("impact"),
            effort=data.get("effort"),
            calculated_priority=data.get("calculated_priority"),
            extra={k: v for k, v in data.items() if k not in TASK_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain mapping with ISO date strings."""
        result: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "dependencies": list(self.dependencies),
            "estimated_duration": self.estimated_duration,
            "start_date": format_date(self.start_date),
            "due_date": format_date(self.due_date),
        }
        for key in ("impact", "effort", "calculated_priority"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        result.update(self.extra)
        return result
