"""Request and response bodies for the task board HTTP API."""

from pydantic import BaseModel, ConfigDict, Field

from src.domain.task import TaskStatus


class ReorderRequest(BaseModel):
    """Move a task to a column and position (drag and drop)."""

    model_config = ConfigDict(extra="forbid")

    taskId: int = Field(..., description="ID of the dragged task")  # noqa: N815
    newStatus: TaskStatus = Field(..., description="Destination column (0-2)")  # noqa: N815
    newIndex: int = Field(..., ge=0, description="Target position in the destination column")  # noqa: N815


class TaskDeleteRequest(BaseModel):
    """Delete a task by ID."""

    model_config = ConfigDict(extra="forbid")

    task_id: int


class TaskListRequest(BaseModel):
    """Search, filter and paginate tasks."""

    model_config = ConfigDict(extra="forbid")

    search: str = Field(default="", description="Substring matched against title and description")
    page: int = Field(default=1, ge=1, description="1-based page number")
    status: TaskStatus | None = Field(default=None, description="Restrict to one column")


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class TaskCreatedResponse(BaseModel):
    """Acknowledgement for a created task."""

    task_id: int
    message: str
    order_index: int
