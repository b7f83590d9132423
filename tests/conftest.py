"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.core.config import Settings
from src.core.db_client import TaskStore
from src.main import create_app


@pytest.fixture
async def store(tmp_path: Path) -> AsyncIterator[TaskStore]:
    """Provides a TaskStore backed by a fresh SQLite file."""
    task_store = await TaskStore.open(tmp_path / "tasks.db", timeout=2.0)
    yield task_store
    await task_store.close()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing at a temporary database."""
    return Settings(
        sqlite_db_path=str(tmp_path / "api.db"),
        store_timeout_seconds=2.0,
        list_page_size=5,
        logfire_token=None,
    )


@pytest.fixture
def client(test_settings: Settings) -> Iterator[TestClient]:
    """TestClient running the full application lifespan against a temporary database."""
    with TestClient(create_app(test_settings)) as test_client:
        yield test_client
