"""SQLite task store with scoped transactions."""

import asyncio
import logging
import sqlite3
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from enum import IntEnum
from pathlib import Path
from typing import Any

import aiosqlite

from src.core.errors import TaskNotFoundError, TransientStoreError, classify_store_error
from src.core.schema import init_db
from src.domain.create_models import TaskCreate
from src.domain.task import Task, TaskStatus


logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"

_UPDATABLE_COLUMNS = frozenset({"title", "description", "priority", "deadline"})


def _to_db_value(value: object) -> object:
    """Convert Python values to what the tasks table stores."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, IntEnum):
        return int(value)
    return value


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _build_where(*, search: str, status: TaskStatus | None) -> tuple[str, list[object]]:
    """Build the WHERE clause shared by listing and counting."""
    clauses: list[str] = []
    params: list[object] = []

    if status is not None:
        clauses.append("status = ?")
        params.append(int(status))
    if search:
        pattern = f"%{escape_like(search)}%"
        clauses.append("(title LIKE ? ESCAPE '\\' OR description LIKE ? ESCAPE '\\')")
        params.extend([pattern, pattern])

    if not clauses:
        return "", params
    return "WHERE " + " AND ".join(clauses), params


def _row_to_task(row: aiosqlite.Row) -> Task:
    return Task.model_validate(dict(row))


class StoreTransaction:
    """Operations available inside one store transaction.

    Obtained from ``TaskStore.transaction()``; nothing written here is visible
    to other transactions until the scope exits cleanly.
    """

    def __init__(self, conn: aiosqlite.Connection, *, operation: str) -> None:
        self._conn = conn
        self._operation = operation

    async def _execute(self, sql: str, params: Sequence[object] = ()) -> aiosqlite.Cursor:
        try:
            return await self._conn.execute(sql, [_to_db_value(p) for p in params])
        except sqlite3.Error as e:
            logger.error("store_query_failed", extra={"operation": self._operation, "error": str(e)})
            raise classify_store_error(e, operation=self._operation) from e

    async def _fetchall(self, sql: str, params: Sequence[object] = ()) -> list[aiosqlite.Row]:
        cursor = await self._execute(sql, params)
        return list(await cursor.fetchall())

    async def get(self, task_id: int) -> Task:
        """Fetch a task by ID, raising TaskNotFoundError if it does not exist."""
        rows = await self._fetchall("SELECT * FROM tasks WHERE task_id = ?", (task_id,))
        if not rows:
            raise TaskNotFoundError(task_id)
        return _row_to_task(rows[0])

    async def list_by_status(self, status: TaskStatus) -> list[Task]:
        """Return every task in a column ordered by position ascending."""
        rows = await self._fetchall(
            "SELECT * FROM tasks WHERE status = ? ORDER BY order_index ASC, task_id ASC",
            (status,),
        )
        return [_row_to_task(row) for row in rows]

    async def max_position(self, status: TaskStatus) -> int | None:
        """Return the highest position in a column, or None when it is empty."""
        rows = await self._fetchall("SELECT MAX(order_index) AS max_order FROM tasks WHERE status = ?", (status,))
        return rows[0]["max_order"]

    async def set_position(self, task_id: int, position: int) -> None:
        await self._execute("UPDATE tasks SET order_index = ? WHERE task_id = ?", (position, task_id))

    async def set_status_and_position(self, task_id: int, status: TaskStatus, position: int) -> None:
        await self._execute(
            "UPDATE tasks SET status = ?, order_index = ? WHERE task_id = ?",
            (status, position, task_id),
        )

    async def insert(self, data: TaskCreate, *, order_index: int) -> Task:
        """Insert a task at the given position and return the stored row."""
        cursor = await self._execute(
            "INSERT INTO tasks (title, description, priority, status, deadline, order_index, create_time) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                data.title,
                data.description,
                data.priority,
                data.status,
                data.deadline,
                order_index,
                datetime.now(UTC),
            ),
        )
        task_id = cursor.lastrowid
        if task_id is None:
            msg = "Insert did not return a task ID"
            raise TransientStoreError(f"Failed to {self._operation}.", detail=msg)
        return await self.get(task_id)

    async def update_fields(self, task_id: int, changes: dict[str, Any]) -> None:
        """Update plain columns of one task, raising TaskNotFoundError if it does not exist."""
        unknown = set(changes) - _UPDATABLE_COLUMNS
        if unknown:
            msg = f"Columns cannot be updated directly: {', '.join(sorted(unknown))}"
            raise ValueError(msg)
        if not changes:
            msg = "Empty update payload"
            raise ValueError(msg)

        set_clause = ", ".join(f"{column} = ?" for column in changes)
        cursor = await self._execute(
            f"UPDATE tasks SET {set_clause} WHERE task_id = ?",  # noqa: S608 - columns are whitelisted
            [*changes.values(), task_id],
        )
        if cursor.rowcount == 0:
            raise TaskNotFoundError(task_id)

    async def delete(self, task_id: int) -> None:
        """Delete a task row, raising TaskNotFoundError if it does not exist."""
        cursor = await self._execute("DELETE FROM tasks WHERE task_id = ?", (task_id,))
        if cursor.rowcount == 0:
            raise TaskNotFoundError(task_id)

    async def search(
        self,
        *,
        search: str = "",
        status: TaskStatus | None = None,
        limit: int,
        offset: int = 0,
    ) -> list[Task]:
        """List tasks matching an optional substring and column filter."""
        where_clause, params = _build_where(search=search, status=status)
        rows = await self._fetchall(
            f"SELECT * FROM tasks {where_clause} "  # noqa: S608 - clause is built from fixed fragments
            "ORDER BY order_index ASC, create_time DESC, task_id ASC LIMIT ? OFFSET ?",
            [*params, limit, offset],
        )
        return [_row_to_task(row) for row in rows]

    async def count(self, *, search: str = "", status: TaskStatus | None = None) -> int:
        """Count tasks matching the same filters as search()."""
        where_clause, params = _build_where(search=search, status=status)
        rows = await self._fetchall(f"SELECT COUNT(*) AS total FROM tasks {where_clause}", params)  # noqa: S608
        return rows[0]["total"]


class TaskStore:
    """Handle to the task database.

    Owns a single aiosqlite connection in autocommit mode. Transactions on the
    handle are serialized by an asyncio lock, and write transactions start with
    ``BEGIN IMMEDIATE`` so other processes sharing the file are locked out
    until commit.
    """

    def __init__(self, conn: aiosqlite.Connection, *, db_path: str, timeout: float) -> None:
        self._conn: aiosqlite.Connection | None = conn
        self._lock = asyncio.Lock()
        self.db_path = db_path
        self.timeout = timeout

    @classmethod
    async def open(cls, db_path: str | Path, *, timeout: float = 5.0) -> "TaskStore":
        """Open (creating if needed) the database and ensure the schema exists."""
        if str(db_path) == MEMORY_DB:
            path_str = MEMORY_DB
        else:
            path = Path(db_path).resolve()
            path.parent.mkdir(parents=True, exist_ok=True)
            path_str = str(path)

        conn: aiosqlite.Connection | None = None
        try:
            conn = await aiosqlite.connect(path_str, timeout=timeout, isolation_level=None)
            conn.row_factory = aiosqlite.Row
            await conn.execute("PRAGMA journal_mode = WAL")
            await init_db(conn)
        except sqlite3.Error as e:
            logger.error("store_open_failed", extra={"db_path": path_str, "error": str(e)})
            if conn is not None:
                await conn.close()
            raise classify_store_error(e, operation="open task store") from e

        logger.info("Opened task store", extra={"db_path": path_str})
        return cls(conn, db_path=path_str, timeout=timeout)

    async def close(self) -> None:
        """Close the underlying connection. Safe to call twice."""
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        await conn.close()
        logger.info("Closed task store", extra={"db_path": self.db_path})

    def _require_connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise TransientStoreError("Task store is unavailable.", detail="connection closed")
        return self._conn

    async def _rollback(self, conn: aiosqlite.Connection, *, operation: str) -> None:
        try:
            await conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            # SQLite may already have rolled back on its own (e.g. after SQLITE_FULL)
            logger.warning("store_rollback_failed", extra={"operation": operation, "error": str(e)})
        else:
            logger.info("store_transaction_rolled_back", extra={"operation": operation})

    @asynccontextmanager
    async def transaction(self, operation: str, *, write: bool = True) -> AsyncIterator[StoreTransaction]:
        """Run a block of store operations atomically.

        Commits when the block exits normally and rolls back on every other
        exit path, including cancellation.

        Args:
            operation: Short description used in logs and error messages
            write: Take the database write lock up front (``BEGIN IMMEDIATE``)

        Raises:
            TransientStoreError: If the lock cannot be acquired within the
                store timeout or the database fails
        """
        conn = self._require_connection()

        try:
            async with asyncio.timeout(self.timeout):
                await self._lock.acquire()
        except TimeoutError as e:
            logger.warning("store_lock_timeout", extra={"operation": operation, "timeout": self.timeout})
            raise classify_store_error(e, operation=operation) from e

        try:
            try:
                await conn.execute("BEGIN IMMEDIATE" if write else "BEGIN")
            except sqlite3.Error as e:
                logger.error("store_begin_failed", extra={"operation": operation, "error": str(e)})
                raise classify_store_error(e, operation=operation) from e

            try:
                yield StoreTransaction(conn, operation=operation)
            except BaseException:
                await self._rollback(conn, operation=operation)
                raise

            try:
                await conn.execute("COMMIT")
            except sqlite3.Error as e:
                logger.error("store_commit_failed", extra={"operation": operation, "error": str(e)})
                await self._rollback(conn, operation=operation)
                raise classify_store_error(e, operation=operation) from e
        finally:
            self._lock.release()
