"""Pydantic schemas for task file validation."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .models import PRIORITY_LEVELS, parse_date


class TaskSchema(BaseModel):
    """Schema for a single task entry."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None  # Optional when tasks are given as an id -> body mapping
    title: str = ""
    dependencies: list[str] = Field(default_factory=list)
    estimated_duration: int | None = Field(default=None, ge=0)
    start_date: date | None = None
    due_date: date | None = None
    impact: int | None = None
    effort: int | None = None
    calculated_priority: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Allow numeric IDs in YAML."""
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("dependencies", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Accept a single dependency or a list, coercing IDs to strings."""
        if v is None:
            return []
        if isinstance(v, (str, int)):
            return [str(v)]
        if isinstance(v, list):
            return [str(item) for item in v]  # type: ignore[misc]
        raise ValueError("dependencies must be a string or list of strings")

    @field_validator("start_date", "due_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> date | None:
        """Accept ISO strings, including datetime strings."""
        return parse_date(v)

    @field_validator("calculated_priority")
    @classmethod
    def check_priority(cls, v: str | None) -> str | None:
        """Restrict priority labels to P1-P4."""
        if v is not None and v not in PRIORITY_LEVELS:
            raise ValueError(f"calculated_priority must be one of {', '.join(PRIORITY_LEVELS)}")
        return v


class TaskFileSchema(BaseModel):
    """Schema for a complete task file."""

    project_start: date | None = None
    tasks: list[TaskSchema] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def tasks_from_mapping(cls, data: Any) -> Any:
        """Allow ``tasks`` to be a mapping of task ID to task body."""
        if isinstance(data, dict) and isinstance(data.get("tasks"), dict):
            entries: list[dict[str, Any]] = []
            for task_id, body in data["tasks"].items():  # type: ignore[union-attr]
                if body is not None and not isinstance(body, dict):
                    raise ValueError(f"Task '{task_id}' must be a mapping")
                entry: dict[str, Any] = dict(body or {})  # type: ignore[arg-type]
                entry["id"] = str(task_id)
                entries.append(entry)
            return {**data, "tasks": entries}  # type: ignore[dict-item]
        return data

    @field_validator("project_start", mode="before")
    @classmethod
    def parse_start(cls, v: Any) -> date | None:
        """Accept ISO strings, including datetime strings."""
        return parse_date(v)

    @model_validator(mode="after")
    def check_ids(self) -> TaskFileSchema:
        """Every task needs an ID."""
        for index, task in enumerate(self.tasks):
            if not task.id:
                raise ValueError(f"Task #{index + 1} is missing 'id'")
        return self
