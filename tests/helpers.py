"""Helper utilities for tests."""

from datetime import date
from pathlib import Path
import sqlite3

from db.schema import apply_pending_migrations
from errors import PersistenceError
from models.category import Kind
from models.transaction import Transaction


def run_migrations(conn: sqlite3.Connection, migrations_dir: Path) -> None:
    """Run all SQL migrations in order.

    Args:
        conn: SQLite connection to run migrations against.
        migrations_dir: Path to directory containing .sql migration files.
    """
    apply_pending_migrations(conn, migrations_dir)


def make_transaction(
    level1="식비",
    level2="외식",
    level3="점심",
    amount=12000,
    kind=Kind.EXPENSE,
    on=date(2024, 1, 10),
    memo=None,
) -> Transaction:
    """Build a transaction with sensible defaults for tests."""
    return Transaction.create(
        date=on,
        kind=kind,
        level1=level1,
        level2=level2,
        level3=level3,
        amount=amount,
        memo=memo,
    )


class FailingRepository:
    """Repository whose writes always fail, for write-through error tests."""

    def __init__(self, records=None):
        self.records = records or []

    def exists(self):
        return bool(self.records)

    def load(self):
        return list(self.records)

    def save(self, records):
        raise PersistenceError("disk full")

    def delete(self):
        raise PersistenceError("disk full")
