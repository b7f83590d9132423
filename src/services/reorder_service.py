"""Reorder engine for drag-and-drop moves between and within board columns.

Every column keeps its positions dense (0..n-1). A move detaches the task
from its source column, closes the gap there, inserts the task into the
destination column at the requested index and renumbers that column, all in
one store transaction. Only rows whose (status, position) actually change are
written.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from src.core.db_client import StoreTransaction, TaskStore
from src.core.errors import InvalidInputError
from src.core.logging import span
from src.domain.task import Task, TaskStatus


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PositionUpdate:
    """One row write produced by a renumber."""

    task_id: int
    status: TaskStatus
    position: int
    status_changed: bool = False


def plan_group_order(current_ids: Sequence[int], moved_id: int, new_index: int) -> list[int]:
    """Return a column's task ids after placing ``moved_id`` at ``new_index``.

    ``moved_id`` is removed from ``current_ids`` first if present, and
    ``new_index`` is clamped to the end of the remaining sequence.
    """
    if new_index < 0:
        msg = f"new_index must be non-negative, got {new_index}"
        raise ValueError(msg)
    remaining = [task_id for task_id in current_ids if task_id != moved_id]
    index = min(new_index, len(remaining))
    return [*remaining[:index], moved_id, *remaining[index:]]


def diff_positions(
    order: Sequence[int],
    stored: dict[int, Task],
    status: TaskStatus,
) -> list[PositionUpdate]:
    """Compare a planned column order with stored rows and return the writes needed."""
    updates: list[PositionUpdate] = []
    for position, task_id in enumerate(order):
        task = stored[task_id]
        status_changed = task.status != status
        if status_changed or task.order_index != position:
            updates.append(
                PositionUpdate(task_id=task_id, status=status, position=position, status_changed=status_changed)
            )
    return updates


async def _apply(txn: StoreTransaction, updates: Sequence[PositionUpdate]) -> None:
    for update in updates:
        if update.status_changed:
            await txn.set_status_and_position(update.task_id, update.status, update.position)
        else:
            await txn.set_position(update.task_id, update.position)


async def renumber_group(
    txn: StoreTransaction,
    status: TaskStatus,
    *,
    exclude_id: int | None = None,
) -> list[PositionUpdate]:
    """Rewrite a column's positions to 0..m-1 in their current order.

    Must run inside a write transaction. ``exclude_id`` leaves one task out of
    the sequence (the task being moved away).
    """
    tasks = [task for task in await txn.list_by_status(status) if task.task_id != exclude_id]
    order = [task.task_id for task in tasks]
    updates = diff_positions(order, {task.task_id: task for task in tasks}, status)
    await _apply(txn, updates)
    return updates


async def reorder_task(
    store: TaskStore,
    *,
    task_id: int,
    new_status: TaskStatus | int,
    new_index: int,
) -> list[PositionUpdate]:
    """Move a task to ``new_status`` at ``new_index`` keeping both columns dense.

    Indexes past the end of the destination column are clamped so the task is
    appended last. Moving a task onto its current position writes nothing.

    Args:
        store: Task store handle
        task_id: ID of the task being moved
        new_status: Destination column
        new_index: Zero-based target position in the destination column

    Returns:
        The row writes that were committed

    Raises:
        InvalidInputError: If new_status or new_index is out of range
        TaskNotFoundError: If the task does not exist
        TransientStoreError: If the transaction could not complete
    """
    try:
        destination_status = TaskStatus(new_status)
    except ValueError as e:
        raise InvalidInputError(f"Invalid status: {new_status}") from e
    if new_index < 0:
        raise InvalidInputError(f"newIndex must be greater than or equal to 0, got {new_index}")

    with span("reorder_service.reorder_task", task_id=task_id, new_status=int(destination_status)):
        async with store.transaction("reorder task") as txn:
            task = await txn.get(task_id)

            source_updates: list[PositionUpdate] = []
            if task.status != destination_status:
                source_updates = await renumber_group(txn, task.status, exclude_id=task_id)

            destination = [t for t in await txn.list_by_status(destination_status) if t.task_id != task_id]
            order = plan_group_order([t.task_id for t in destination], task_id, new_index)
            stored = {t.task_id: t for t in destination}
            stored[task_id] = task
            destination_updates = diff_positions(order, stored, destination_status)
            await _apply(txn, destination_updates)

        logger.info(
            "Reordered task",
            extra={
                "task_id": task_id,
                "old_status": int(task.status),
                "old_position": task.order_index,
                "new_status": int(destination_status),
                "new_position": order.index(task_id),
                "rows_written": len(source_updates) + len(destination_updates),
            },
        )
        return [*source_updates, *destination_updates]
