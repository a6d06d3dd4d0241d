"""
Storage namespace definitions.

Defines the table schema and the keys under which the persisted light
client store lives.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class KeyValueNamespace:
    """
    Namespace for the SQLite key/value table.

    Values are opaque bytes; the persistence adapter stores SSZ records.
    """

    TABLE_NAME: str = "kv"
    """Table name for key/value storage."""

    CREATE_TABLE: str = """
        CREATE TABLE IF NOT EXISTS kv (
            key TEXT PRIMARY KEY,
            value BLOB NOT NULL
        )
    """
    """SQL to create the key/value table."""


@dataclass(frozen=True, slots=True)
class StoreNamespace:
    """
    Keys of the persisted light client store.

    The record is written to one of two generation keys, then the head key is
    switched to point at it. A crash between the two writes leaves the head
    on the previous, complete record.
    """

    KEY_HEAD: str = "light_client/head"
    """Key holding the name of the current generation key."""

    KEY_GENERATION_A: str = "light_client/store/a"
    """First generation slot."""

    KEY_GENERATION_B: str = "light_client/store/b"
    """Second generation slot."""

    def other_generation(self, key: str | None) -> str:
        """The generation key to write next, given the current one."""
        return self.KEY_GENERATION_B if key == self.KEY_GENERATION_A else self.KEY_GENERATION_A


# Singleton instances for convenient access
KV = KeyValueNamespace()
STORE = StoreNamespace()
