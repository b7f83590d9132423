"""Task domain models and enums."""

from datetime import datetime
from enum import IntEnum

from pydantic import BaseModel, Field


class TaskStatus(IntEnum):
    """Board column a task belongs to."""

    TODO = 0
    IN_PROGRESS = 1
    DONE = 2


class TaskPriority(IntEnum):
    """Task priority level."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3


class Task(BaseModel):
    """Task data transfer object."""

    task_id: int = Field(..., description="Unique task ID from database")
    title: str = Field(..., description="Task title")
    description: str = Field(default="", description="Detailed task description")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    status: TaskStatus = Field(default=TaskStatus.TODO, description="Board column")
    order_index: int = Field(..., ge=0, description="Zero-based position within the status column")
    deadline: datetime | None = Field(default=None, description="Optional deadline")
    create_time: datetime = Field(..., description="Creation timestamp (UTC)")

