"""Tests for configuration validation."""

import pytest
from pydantic import ValidationError

from src.core.config import Settings


def test_defaults() -> None:
    """Test settings defaults match the documented values."""
    settings = Settings(_env_file=None)

    assert settings.sqlite_db_path == "./data/taskboard.db"
    assert settings.store_timeout_seconds == 5.0
    assert settings.list_page_size == 5
    assert settings.server_port == 3001
    assert settings.cors_allow_origins == ["*"]
    assert settings.environment == "development"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test values are read from environment variables case-insensitively."""
    monkeypatch.setenv("SQLITE_DB_PATH", "/tmp/board.db")
    monkeypatch.setenv("LIST_PAGE_SIZE", "20")
    monkeypatch.setenv("ENVIRONMENT", "Production")

    settings = Settings(_env_file=None)

    assert settings.sqlite_db_path == "/tmp/board.db"
    assert settings.list_page_size == 20
    assert settings.environment == "Production"


def test_page_size_must_be_positive() -> None:
    """Test a zero page size is rejected at load time."""
    with pytest.raises(ValidationError, match="list_page_size"):
        Settings(_env_file=None, list_page_size=0)


def test_store_timeout_must_be_positive() -> None:
    with pytest.raises(ValidationError, match="store_timeout_seconds"):
        Settings(_env_file=None, store_timeout_seconds=0)
