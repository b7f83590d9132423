"""Domain models and DTOs."""

from src.domain.create_models import TaskCreate
from src.domain.task import Task, TaskPriority, TaskStatus
from src.domain.update_models import ABSENT, Present, TaskPatch, TaskUpdate


__all__ = [
    "ABSENT",
    "Present",
    "Task",
    "TaskCreate",
    "TaskPatch",
    "TaskPriority",
    "TaskStatus",
    "TaskUpdate",
]
