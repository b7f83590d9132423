"""Pydantic models for service layer return types.

These models provide type safety at service boundaries, converting database
rows into typed objects with validation.
"""

from pydantic import BaseModel

from src.domain.task import Task, TaskStatus


class TaskPage(BaseModel):
    """One page of a filtered task listing."""

    tasks: list[Task]
    total: int
    page: int
    limit: int


class GroupPositions(BaseModel):
    """Stored positions of one status column, in ascending order."""

    status: TaskStatus
    positions: list[int]

    @property
    def is_dense(self) -> bool:
        return self.positions == list(range(len(self.positions)))
