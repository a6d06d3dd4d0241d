"""
Abstract key/value interface for durable light client storage.

Defines the Protocol that every storage provider must follow.
Uses structural subtyping for flexibility.
"""

from __future__ import annotations

from typing import Protocol


class KeyValueStore(Protocol):
    """
    Protocol for a durable byte-oriented key/value store.

    The persistence adapter only needs whole-value reads and writes. Each
    `put` must be durable and atomic on its own: after a crash a key holds
    either its previous value or its new one, never a mix.

    Providers may raise any exception on failure; the persistence adapter
    reports it as `IOFailure`.
    """

    def get(self, key: str) -> bytes | None:
        """
        Retrieve the value stored under `key`.

        Returns:
            The stored bytes, or None if the key is absent.
        """
        ...

    def put(self, key: str, value: bytes) -> None:
        """
        Store `value` under `key`, replacing any previous value.

        Args:
            key: Storage key.
            value: Bytes to store.
        """
        ...

    def delete(self, key: str) -> None:
        """Remove `key` if present."""
        ...
