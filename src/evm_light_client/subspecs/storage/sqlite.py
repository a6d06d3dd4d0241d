"""
SQLite key/value store.

Keeps every key in a single table of a single database file. Each write runs
in its own transaction, which makes every `put` atomic.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from .namespaces import KV


class SQLiteKeyValueStore:
    """SQLite implementation of the KeyValueStore protocol."""

    def __init__(self, path: Path | str) -> None:
        """
        Open the database, creating the file and table on first use.

        Args:
            path: Database file, or ":memory:" for a throwaway database.
        """
        self.path = str(path)
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        with self._conn:
            self._conn.execute(KV.CREATE_TABLE)

    def get(self, key: str) -> bytes | None:
        row = self._conn.execute(
            f"SELECT value FROM {KV.TABLE_NAME} WHERE key = ?", (key,)
        ).fetchone()
        return None if row is None else bytes(row[0])

    def put(self, key: str, value: bytes) -> None:
        with self._conn:
            self._conn.execute(
                f"INSERT OR REPLACE INTO {KV.TABLE_NAME} (key, value) VALUES (?, ?)",
                (key, bytes(value)),
            )

    def delete(self, key: str) -> None:
        with self._conn:
            self._conn.execute(f"DELETE FROM {KV.TABLE_NAME} WHERE key = ?", (key,))

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> SQLiteKeyValueStore:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
