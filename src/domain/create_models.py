"""Pydantic models for creating records in database."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.core.config import constants
from src.domain.task import TaskPriority, TaskStatus


class TaskCreate(BaseModel):
    """Pydantic model for creating a task record."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=constants.TITLE_MAX_LENGTH, description="Task title")
    description: str = Field(default="", description="Detailed task description (may be empty)")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority (1-3)")
    status: TaskStatus = Field(default=TaskStatus.TODO, description="Initial board column (0-2)")
    deadline: datetime | None = Field(default=None, description="Optional ISO-8601 deadline")
