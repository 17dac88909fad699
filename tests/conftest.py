"""Shared pytest fixtures for all tests."""

import sqlite3
import pytest
from pathlib import Path

from config import Config, get_migrations_dir
from db.snapshots import CATEGORIES_KEY, TRANSACTIONS_KEY, SnapshotRepository
from services.base import Services
from tests.helpers import run_migrations


@pytest.fixture
def test_db():
    """Create an in-memory SQLite database for testing.

    Yields:
        sqlite3.Connection: Connection to in-memory database.
    """
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def test_config(tmp_path):
    """Create a test configuration pointing to a temporary directory.

    Default categories are not seeded, so every store starts empty.
    """
    return Config(
        base_dir=tmp_path / "gagyebu",
        db_data_dir=tmp_path / "gagyebu" / "db",
        db_filename="test.db",
        log_level="DEBUG",
        log_dir=tmp_path / "gagyebu" / "logs",
        export_dir=tmp_path / "gagyebu" / "exports",
        seed_default_categories=False,
    )


class _TestConnectionContext:
    """Context manager for test database connections."""

    def __init__(self, conn):
        self.conn = conn

    def __enter__(self):
        return self.conn

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Don't close the connection - let the fixture handle it
        pass


class TestDatabaseManager:
    """Test database manager that uses an in-memory connection."""

    def __init__(self, conn):
        self.conn = conn

    def connect(self):
        return _TestConnectionContext(self.conn)

    def get_db_path(self):
        return Path(":memory:")

    def get_migrations_dir(self):
        return get_migrations_dir()


@pytest.fixture
def db_manager_with_schema(test_db):
    """Create a database manager over an in-memory database with all migrations applied."""
    run_migrations(test_db, get_migrations_dir())
    return TestDatabaseManager(test_db)


@pytest.fixture
def category_repository(db_manager_with_schema):
    return SnapshotRepository(db_manager_with_schema, CATEGORIES_KEY)


@pytest.fixture
def transaction_repository(db_manager_with_schema):
    return SnapshotRepository(db_manager_with_schema, TRANSACTIONS_KEY)


@pytest.fixture
def services(test_config, db_manager_with_schema):
    """Create a Services container backed by the in-memory test database."""
    return Services(test_config, db_manager=db_manager_with_schema)
