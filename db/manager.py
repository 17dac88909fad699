"""SQLite access for the snapshot database: connections, schema and inspection."""

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import List

from config import Config, get_migrations_dir
from db.schema import (
    apply_pending_migrations,
    get_applied_migrations,
    get_available_migrations,
    init_schema_migrations_table,
)


@dataclass
class SnapshotInfo:
    key: str
    size: int
    updated_at: str


@dataclass
class MigrationStatus:
    applied: List[str]
    pending: List[str]


class DatabaseManager:
    """Opens connections to the ledger database and keeps its schema current.

    Args:
        config: Application configuration; ``config.db_path`` is the database file.
    """

    def __init__(self, config: Config):
        self.config = config

    @contextmanager
    def connect(self):
        """Open a connection, creating the data directory on first use.

        Yields:
            sqlite3.Connection: Closed again when the block exits.
        """
        db_path = self.config.db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(db_path)
        try:
            yield conn
        finally:
            conn.close()

    def ensure_schema(self) -> List[str]:
        """Apply any pending migrations.

        Returns:
            Names of the migration files applied by this call.
        """
        with self.connect() as conn:
            return apply_pending_migrations(conn, self.get_migrations_dir())

    def migration_status(self) -> MigrationStatus:
        """Split the available migrations into applied and pending, in order."""
        available = get_available_migrations(self.get_migrations_dir())
        with self.connect() as conn:
            init_schema_migrations_table(conn)
            applied = get_applied_migrations(conn)
        return MigrationStatus(
            applied=[m for m in available if m in applied],
            pending=[m for m in available if m not in applied],
        )

    def list_snapshots(self) -> List[SnapshotInfo]:
        """Describe the stored snapshots, or an empty list before the first migration."""
        with self.connect() as conn:
            try:
                rows = conn.execute(
                    "SELECT key, length(payload), updated_at FROM snapshots ORDER BY key"
                ).fetchall()
            except sqlite3.OperationalError:
                # snapshots table not created yet
                return []
        return [SnapshotInfo(key=key, size=size, updated_at=updated_at) for key, size, updated_at in rows]

    def get_db_path(self) -> Path:
        return self.config.db_path

    def get_migrations_dir(self) -> Path:
        return get_migrations_dir()
