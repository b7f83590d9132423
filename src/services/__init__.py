from src.services import (
    reorder_service,
    task_service,
)


__all__ = [
    "reorder_service",
    "task_service",
]
