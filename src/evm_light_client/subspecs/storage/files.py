"""
Directory-backed key/value store.

One file per key. A write goes to a temporary file in the same directory,
is flushed to disk, and is then renamed over the target, so a reader sees
either the old file or the new one.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


class FileKeyValueStore:
    """Filesystem implementation of the KeyValueStore protocol."""

    def __init__(self, directory: Path | str) -> None:
        """
        Use `directory` for storage, creating it if needed.

        Args:
            directory: Directory holding one file per key.
        """
        self._directory = Path(directory)
        self._directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        # Keys are namespaced with slashes; flatten them into file names.
        return self._directory / key.replace("/", "__")

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def put(self, key: str, value: bytes) -> None:
        path = self._path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=".tmp-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
