"""In-memory key/value store, for tests and ephemeral clients."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class MemoryKeyValueStore:
    """Dictionary-backed implementation of the KeyValueStore protocol."""

    _data: dict[str, bytes] = field(default_factory=dict)
    """Stored values by key."""

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def put(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        """All stored keys, in insertion order."""
        return list(self._data)
