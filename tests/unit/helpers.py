"""Shared helpers for seeding and inspecting the task store in tests."""

from src.core.db_client import TaskStore
from src.domain.create_models import TaskCreate
from src.domain.task import Task, TaskStatus
from src.services import task_service


async def seed(store: TaskStore, status: TaskStatus, titles: list[str]) -> list[Task]:
    """Create tasks in a column, in order."""
    return [await task_service.create_task(store, TaskCreate(title=title, status=status)) for title in titles]


async def column(store: TaskStore, status: TaskStatus) -> list[tuple[str, int]]:
    """Return (title, position) pairs of a column in position order."""
    async with store.transaction("read column", write=False) as txn:
        return [(task.title, task.order_index) for task in await txn.list_by_status(status)]


async def snapshot(store: TaskStore) -> dict[int, tuple[TaskStatus, int]]:
    """Map every task ID to its stored (status, position)."""
    result: dict[int, tuple[TaskStatus, int]] = {}
    async with store.transaction("snapshot", write=False) as txn:
        for status in TaskStatus:
            for task in await txn.list_by_status(status):
                assert task.task_id not in result, f"task {task.task_id} appears in two columns"
                result[task.task_id] = (task.status, task.order_index)
    return result


async def assert_dense(store: TaskStore) -> None:
    """Assert every column holds exactly positions 0..k-1."""
    for group in await task_service.check_positions(store):
        assert group.positions == list(range(len(group.positions))), f"{group.status.name}: {group.positions}"
