"""
Storage module for durable light client state.

Provides a key/value abstraction with memory, SQLite and file backends, and
the adapter that persists the light client store through it.
"""

from .database import KeyValueStore
from .files import FileKeyValueStore
from .memory import MemoryKeyValueStore
from .namespaces import KeyValueNamespace, StoreNamespace
from .persistence import FORMAT_VERSION, PersistedStore, PersistenceAdapter
from .sqlite import SQLiteKeyValueStore

__all__ = [
    "FORMAT_VERSION",
    "FileKeyValueStore",
    "KeyValueNamespace",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "PersistedStore",
    "PersistenceAdapter",
    "SQLiteKeyValueStore",
    "StoreNamespace",
]
