"""SQLite schema management (code-first approach)."""

import logging

import aiosqlite


logger = logging.getLogger(__name__)


TASKS_TABLE = "tasks"

_CREATE_TASKS = """
CREATE TABLE IF NOT EXISTS tasks (
    task_id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    priority INTEGER NOT NULL DEFAULT 2 CHECK (priority BETWEEN 1 AND 3),
    status INTEGER NOT NULL DEFAULT 0 CHECK (status BETWEEN 0 AND 2),
    order_index INTEGER NOT NULL DEFAULT 0 CHECK (order_index >= 0),
    deadline TEXT,
    create_time TEXT NOT NULL
)
"""

# Columns added after the first release; (name, declaration)
_ADDED_COLUMNS: list[tuple[str, str]] = [
    ("deadline", "TEXT"),
    ("order_index", "INTEGER NOT NULL DEFAULT 0"),
]

_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_status_order ON tasks (status, order_index)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_create_time ON tasks (create_time)",
]


async def _migrate_columns(conn: aiosqlite.Connection) -> None:
    """Add columns missing from databases created by older versions."""
    cursor = await conn.execute(f"PRAGMA table_info({TASKS_TABLE})")
    existing = {row[1] for row in await cursor.fetchall()}

    for name, declaration in _ADDED_COLUMNS:
        if name in existing:
            continue
        await conn.execute(f"ALTER TABLE {TASKS_TABLE} ADD COLUMN {name} {declaration}")
        logger.info("schema_migration", extra={"table": TASKS_TABLE, "added_column": name})


async def init_db(conn: aiosqlite.Connection) -> None:
    """Create the tasks table and its indexes if they do not exist.

    The connection is expected to be in autocommit mode; the statements run in
    their own transaction.
    """
    await conn.execute("BEGIN IMMEDIATE")
    try:
        await conn.execute(_CREATE_TASKS)
        await _migrate_columns(conn)
        for statement in _INDEXES:
            await conn.execute(statement)
    except Exception:
        await conn.execute("ROLLBACK")
        raise
    await conn.execute("COMMIT")
    logger.info("Database schema initialized", extra={"table": TASKS_TABLE})
