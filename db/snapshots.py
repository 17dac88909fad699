"""Whole-collection snapshot storage.

Each collection (categories, transactions) is stored as a single JSON array
under its own key in the ``snapshots`` table and overwritten on every save.
"""

import json
import sqlite3
from typing import List

from errors import PersistenceError

CATEGORIES_KEY = "categories"
TRANSACTIONS_KEY = "transactions"


class SnapshotRepository:
    """Loads and saves one named snapshot.

    Args:
        db_manager: Database manager providing ``connect()``.
        key: Snapshot key, e.g. "categories".
    """

    def __init__(self, db_manager, key: str):
        self.db_manager = db_manager
        self.key = key

    def load(self) -> List[dict]:
        """Read the stored records.

        Returns:
            The stored list of records, or an empty list if nothing is stored.

        Raises:
            PersistenceError: If the database cannot be read or the payload is
                not a JSON array.
        """
        try:
            with self.db_manager.connect() as conn:
                row = conn.execute(
                    "SELECT payload FROM snapshots WHERE key = ?", (self.key,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Unable to read snapshot '{self.key}': {exc}") from exc

        if row is None:
            return []

        try:
            payload = json.loads(row[0])
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupted JSON in snapshot '{self.key}'") from exc

        if not isinstance(payload, list):
            raise PersistenceError(f"Expected list payload in snapshot '{self.key}'")
        return payload

    def exists(self) -> bool:
        try:
            with self.db_manager.connect() as conn:
                row = conn.execute(
                    "SELECT 1 FROM snapshots WHERE key = ?", (self.key,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Unable to read snapshot '{self.key}': {exc}") from exc
        return row is not None

    def save(self, records: List[dict]) -> None:
        """Overwrite the snapshot with ``records``.

        Raises:
            PersistenceError: If the records cannot be serialized or written.
        """
        try:
            payload = json.dumps(list(records), ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"Unable to serialize snapshot '{self.key}'") from exc

        try:
            with self.db_manager.connect() as conn:
                conn.execute(
                    """
                    INSERT INTO snapshots (key, payload, updated_at)
                    VALUES (?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(key) DO UPDATE SET
                        payload = excluded.payload,
                        updated_at = excluded.updated_at
                    """,
                    (self.key, payload),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Unable to write snapshot '{self.key}': {exc}") from exc

    def delete(self) -> None:
        """Remove the snapshot entirely."""
        try:
            with self.db_manager.connect() as conn:
                conn.execute("DELETE FROM snapshots WHERE key = ?", (self.key,))
                conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Unable to delete snapshot '{self.key}': {exc}") from exc
