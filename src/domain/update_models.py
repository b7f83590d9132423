"""Update models for database operations.

Partial updates distinguish a field that was sent (even as an empty string or
null) from a field that was left out. ``TaskUpdate`` is the request body;
``TaskPatch`` is what the service layer consumes, with every updatable field
either ``Present(value)`` or ``ABSENT``.
"""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.core.config import constants
from src.domain.task import TaskPriority


T = TypeVar("T")


class _Absent:
    """Marker for a field that is not part of an update."""

    _instance: "_Absent | None" = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


@dataclass(frozen=True)
class Present(Generic[T]):
    """A field explicitly set to ``value`` (which may itself be empty or None)."""

    value: T


@dataclass(frozen=True)
class TaskPatch:
    """Field-level changes to apply to a task. Never touches status or position."""

    title: Present[str] | _Absent = ABSENT
    description: Present[str] | _Absent = ABSENT
    priority: Present[TaskPriority] | _Absent = ABSENT
    deadline: Present[datetime | None] | _Absent = ABSENT

    def changes(self) -> dict[str, Any]:
        """Return column -> value for every present field."""
        result: dict[str, Any] = {}
        for field in fields(self):
            update = getattr(self, field.name)
            if isinstance(update, Present):
                result[field.name] = update.value
        return result


class TaskUpdate(BaseModel):
    """Request body for a partial task update."""

    model_config = ConfigDict(extra="forbid")

    task_id: int = Field(..., description="ID of the task to update")
    title: str = Field(default=None, min_length=1, max_length=constants.TITLE_MAX_LENGTH)  # type: ignore[assignment]
    description: str = Field(default=None)  # type: ignore[assignment]
    priority: TaskPriority = Field(default=None)  # type: ignore[assignment]
    deadline: datetime | None = Field(default=None)

    @model_validator(mode="after")
    def require_one_change(self) -> "TaskUpdate":
        """Reject bodies that carry nothing besides the task id."""
        if not self.model_fields_set - {"task_id"}:
            msg = "At least one field besides task_id is required"
            raise ValueError(msg)
        return self

    def to_patch(self) -> TaskPatch:
        """Convert the request body into an explicit TaskPatch."""
        sent = self.model_fields_set
        return TaskPatch(
            title=Present(self.title) if "title" in sent else ABSENT,
            description=Present(self.description) if "description" in sent else ABSENT,
            priority=Present(self.priority) if "priority" in sent else ABSENT,
            deadline=Present(self.deadline) if "deadline" in sent else ABSENT,
        )
