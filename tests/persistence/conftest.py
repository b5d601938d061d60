"""Test configuration and fixtures for persistence layer tests."""

from typing import AsyncGenerator

import pytest_asyncio

from watcher_report.persistence.database import DatabaseConfig
from watcher_report.persistence.history import SQLHistoryStore


@pytest_asyncio.fixture(scope="function")
async def test_db_config() -> AsyncGenerator[DatabaseConfig, None]:
    """Create test database configuration with in-memory SQLite."""
    # Use in-memory SQLite for fast tests
    config = DatabaseConfig(
        url="sqlite+aiosqlite:///:memory:",
        echo=False
    )

    await config.create_tables()

    yield config

    # Cleanup
    await config.close()


@pytest_asyncio.fixture
async def history_store(test_db_config: DatabaseConfig) -> SQLHistoryStore:
    """Create SQL history store on the test database."""
    return SQLHistoryStore(test_db_config)
