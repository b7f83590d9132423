"""Task service for CRUD operations on the board."""

import logging

from src.core.config import settings
from src.core.db_client import TaskStore
from src.core.errors import InvalidInputError
from src.core.logging import span
from src.domain.create_models import TaskCreate
from src.domain.task import Task, TaskStatus
from src.domain.update_models import TaskPatch
from src.models.service_models import GroupPositions, TaskPage
from src.services.reorder_service import renumber_group


logger = logging.getLogger(__name__)


async def create_task(store: TaskStore, data: TaskCreate) -> Task:
    """Create a task appended to the end of its column.

    Args:
        store: Task store handle
        data: Validated task fields

    Returns:
        The stored task, including its assigned ID and position

    Raises:
        TransientStoreError: If the store operation fails
    """
    with span("task_service.create_task", status=int(data.status)):
        async with store.transaction("create task") as txn:
            max_position = await txn.max_position(data.status)
            order_index = 0 if max_position is None else max_position + 1
            task = await txn.insert(data, order_index=order_index)

        logger.info(
            "Created task",
            extra={"task_id": task.task_id, "status": int(task.status), "order_index": task.order_index},
        )
        return task


async def get_task(store: TaskStore, task_id: int) -> Task:
    """Fetch one task, raising TaskNotFoundError if it does not exist."""
    async with store.transaction("get task", write=False) as txn:
        return await txn.get(task_id)


async def update_task(store: TaskStore, task_id: int, patch: TaskPatch) -> Task:
    """Apply field-level changes to a task.

    Status and position are not updatable here; use the reorder service.

    Raises:
        InvalidInputError: If the patch carries no fields
        TaskNotFoundError: If the task does not exist
        TransientStoreError: If the store operation fails
    """
    changes = patch.changes()
    if not changes:
        raise InvalidInputError("At least one field besides task_id is required")

    with span("task_service.update_task", task_id=task_id):
        async with store.transaction("update task") as txn:
            await txn.update_fields(task_id, changes)
            task = await txn.get(task_id)

        logger.info("Updated task", extra={"task_id": task_id, "fields": sorted(changes)})
        return task


async def delete_task(store: TaskStore, task_id: int) -> None:
    """Delete a task and close the gap it leaves in its column.

    The delete and the renumber commit together.

    Raises:
        TaskNotFoundError: If the task does not exist
        TransientStoreError: If the store operation fails
    """
    with span("task_service.delete_task", task_id=task_id):
        async with store.transaction("delete task") as txn:
            task = await txn.get(task_id)
            await txn.delete(task_id)
            updates = await renumber_group(txn, task.status)

        logger.info(
            "Deleted task",
            extra={"task_id": task_id, "status": int(task.status), "renumbered": len(updates)},
        )


async def list_tasks(
    store: TaskStore,
    *,
    search: str = "",
    status: TaskStatus | None = None,
    page: int = 1,
) -> TaskPage:
    """List tasks with optional substring search, column filter and pagination."""
    if page < 1:
        raise InvalidInputError(f"page must be greater than or equal to 1, got {page}")
    limit = settings.list_page_size
    offset = (page - 1) * limit

    async with store.transaction("list tasks", write=False) as txn:
        tasks = await txn.search(search=search, status=status, limit=limit, offset=offset)
        total = await txn.count(search=search, status=status)

    return TaskPage(tasks=tasks, total=total, page=page, limit=limit)


async def check_positions(store: TaskStore) -> list[GroupPositions]:
    """Report the stored positions of every column."""
    async with store.transaction("check positions", write=False) as txn:
        return [
            GroupPositions(status=status, positions=[task.order_index for task in await txn.list_by_status(status)])
            for status in TaskStatus
        ]


async def repair_positions(store: TaskStore) -> int:
    """Renumber every column densely, returning the number of rows rewritten.

    Databases written before deletes renumbered their column can hold gaps.
    """
    with span("task_service.repair_positions"):
        rewritten = 0
        async with store.transaction("repair positions") as txn:
            for status in TaskStatus:
                rewritten += len(await renumber_group(txn, status))

        logger.info("Repaired task positions", extra={"rows_written": rewritten})
        return rewritten
