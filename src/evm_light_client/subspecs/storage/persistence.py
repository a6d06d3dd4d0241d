"""
Persistence adapter for the light client store.

The store is written as one versioned SSZ record:

    PersistedStore{format_version, store_root, store}

`store_root` is the hash tree root of `store`, recomputed on every restore.
Any change to the record, down to a single flipped byte, either breaks
decoding or changes the root, so tampering and bit rot are detected rather
than trusted.

Writes are atomic even on providers that only make single keys atomic: the
record goes to the generation key not currently in use, and only then is
the head key switched to it.
"""

from __future__ import annotations

import logging

from evm_light_client.errors import CorruptPersistedState, IOFailure, LightClientError, UnknownFork
from evm_light_client.subspecs.chain.config import ChainConfig
from evm_light_client.subspecs.lightclient.store import LightClientStore
from evm_light_client.subspecs.lightclient.validation import verify_update_proofs_and_signature
from evm_light_client.subspecs.ssz.hash import hash_tree_root
from evm_light_client.types import Bytes32, Container, SSZError, Uint32

from .database import KeyValueStore
from .namespaces import STORE

logger = logging.getLogger(__name__)

FORMAT_VERSION = Uint32(1)
"""Version of the persisted record layout."""


class PersistedStore(Container):
    """The record written to durable storage."""

    format_version: Uint32
    """Layout version; records of any other version are refused."""

    store_root: Bytes32
    """Hash tree root of `store`."""

    store: LightClientStore
    """The light client store."""


class PersistenceAdapter:
    """Writes and restores a light client store through a key/value provider."""

    def __init__(self, kv: KeyValueStore) -> None:
        """
        Args:
            kv: The durable key/value provider.
        """
        self._kv = kv

    def _get(self, key: str) -> bytes | None:
        try:
            return self._kv.get(key)
        except Exception as e:
            raise IOFailure(f"Failed to read {key!r}: {e}") from e

    def _put(self, key: str, value: bytes) -> None:
        try:
            self._kv.put(key, value)
        except Exception as e:
            raise IOFailure(f"Failed to write {key!r}: {e}") from e

    def _head(self) -> str | None:
        raw = self._get(STORE.KEY_HEAD)
        if raw is None:
            return None
        key = raw.decode("utf-8", errors="replace")
        if key not in (STORE.KEY_GENERATION_A, STORE.KEY_GENERATION_B):
            raise CorruptPersistedState(f"Head points at unknown key {key!r}")
        return key

    def save(self, store: LightClientStore) -> None:
        """
        Persist `store` atomically.

        Raises:
            IOFailure: If the provider fails.
        """
        record = PersistedStore(
            format_version=FORMAT_VERSION,
            store_root=hash_tree_root(store),
            store=store,
        )
        try:
            current = self._head()
        except CorruptPersistedState:
            # A damaged head is overwritten by this write.
            current = None
        target = STORE.other_generation(current)

        self._put(target, record.encode_bytes())
        self._put(STORE.KEY_HEAD, target.encode("utf-8"))
        logger.info(
            "Persisted light client store at finalized slot %s to %s",
            store.finalized_header.slot,
            target,
        )

    def load(self, config: ChainConfig) -> LightClientStore | None:
        """
        Restore the persisted store, re-validating everything it claims.

        Returns:
            The store, or None if nothing was ever persisted.

        Raises:
            CorruptPersistedState: If the record fails decoding, version,
                checksum, invariant or committee proof checks, or if its
                pending best update no longer verifies.
            IOFailure: If the provider fails.
        """
        key = self._head()
        if key is None:
            return None
        data = self._get(key)
        if data is None:
            raise CorruptPersistedState(f"Head points at missing record {key!r}")

        try:
            record = PersistedStore.decode_bytes(data)
        except (SSZError, ValueError, TypeError, IndexError) as e:
            raise self._corrupt(f"Record does not decode: {e}") from e

        if record.format_version != FORMAT_VERSION:
            raise self._corrupt(
                f"Unsupported format version {record.format_version} (expected {FORMAT_VERSION})"
            )

        store = record.store
        if hash_tree_root(store) != record.store_root:
            raise self._corrupt("Store root does not match the recorded checksum")

        try:
            store.check_invariants(config)
            store.verify_committee_proofs(config)
        except (ValueError, UnknownFork) as e:
            raise self._corrupt(f"Store failed re-validation: {e}") from e

        if store.best_valid_update.selected_type is not None:
            try:
                verify_update_proofs_and_signature(config, store, store.best_valid_update.value)
            except LightClientError as e:
                raise self._corrupt(f"Pending best update failed re-validation: {e}") from e

        logger.info("Restored light client store at finalized slot %s", store.finalized_header.slot)
        return store

    @staticmethod
    def _corrupt(message: str) -> CorruptPersistedState:
        logger.error("Persisted light client store is corrupt: %s", message)
        return CorruptPersistedState(message)
