"""
Light client orchestrator.

Wires the store logic to its collaborators: the upstream node, the header
cache, durable storage and the clock.

Concurrency
-----------
Writers (`init`, `restore`, `update*`, `force_update`) are serialized by one
asyncio lock around the read-modify-write of the store. The store itself is
immutable: a writer builds a new one and swaps the reference. Readers
(`fetch_*`, `persist`) take a snapshot of the reference and never block on
the lock, so they always see one consistent store.

Upstream calls are made outside the lock and bounded by a timeout. A
timeout is `UpstreamUnavailable`, never a verification failure.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from evm_light_client.errors import (
    InvalidSlot,
    LightClientError,
    NotInitialized,
    Stale,
    UnverifiedSlot,
)
from evm_light_client.subspecs import metrics
from evm_light_client.subspecs.chain.clock import (
    SlotClock,
    compute_start_slot_at_period,
    compute_sync_committee_period_at_slot,
)
from evm_light_client.subspecs.chain.config import ChainConfig
from evm_light_client.subspecs.containers import (
    BeaconBlock,
    BeaconBlockHeader,
    LightClientBootstrap,
    LightClientUpdate,
    Slot,
    SyncCommitteePeriod,
)
from evm_light_client.subspecs.lightclient import (
    LightClientStore,
    UpdateOutcome,
    force_update,
    initialize_light_client_store,
    process_light_client_update,
)
from evm_light_client.subspecs.storage import PersistenceAdapter
from evm_light_client.subspecs.sync import (
    REQUEST_TIMEOUT,
    BlockAuthenticator,
    HeaderCache,
    UpdateSource,
    with_timeout,
)
from evm_light_client.types import Bytes32, SSZOverflowError, Uint64

logger = logging.getLogger(__name__)

MAX_SYNC_PERIODS = 8
"""Maximum number of periods one `sync` step catches up on."""

_OUTCOME_RANK: dict[UpdateOutcome, int] = {
    UpdateOutcome.ACCEPTED_NO_CHANGE: 0,
    UpdateOutcome.ADVANCED_OPTIMISTIC: 1,
    UpdateOutcome.ADVANCED_FINALIZED: 2,
}


def _to_uint64(value: int, what: str) -> Uint64:
    """Check a caller-supplied number against the 64-bit range."""
    try:
        return Uint64(value)
    except SSZOverflowError as e:
        raise InvalidSlot(f"{what} {value} does not fit in 64 bits") from e


@dataclass(slots=True)
class LightClient:
    """
    A light client instance with its own store.

    Several instances (one per chain, or per test) can live side by side.
    """

    config: ChainConfig
    """Chain parameters."""

    upstream: UpdateSource
    """Untrusted source of updates, bootstraps and blocks."""

    persistence: PersistenceAdapter
    """Durable storage for the store."""

    clock: SlotClock
    """Wall clock, for the current slot."""

    timeout: float = REQUEST_TIMEOUT
    """Per-request upstream timeout in seconds."""

    cache: HeaderCache = field(default_factory=HeaderCache)
    """Trusted headers and blocks."""

    _store: LightClientStore | None = None
    """Current store, replaced wholesale by writers."""

    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    """Serializes writers."""

    _authenticator: BlockAuthenticator = field(init=False)
    """Header and block fetcher bound to the upstream and the cache."""

    def __post_init__(self) -> None:
        """Bind the block authenticator to the shared cache."""
        self._authenticator = BlockAuthenticator(
            upstream=self.upstream, cache=self.cache, timeout=self.timeout
        )

    @property
    def is_initialized(self) -> bool:
        return self._store is not None

    @property
    def store(self) -> LightClientStore:
        """
        Snapshot of the current store.

        Raises:
            NotInitialized: If neither `init` nor `restore` has succeeded.
        """
        if self._store is None:
            raise NotInitialized("Light client store is not initialized")
        return self._store

    def _install(self, store: LightClientStore) -> None:
        """Swap in a new store and record its finalized header as trusted."""
        self._store = store
        self.cache.add_header(store.finalized_header)
        metrics.finalized_slot.set(float(store.finalized_header.slot))
        metrics.optimistic_slot.set(float(store.optimistic_header.slot))

    # -------------------------------------------------------------------------
    # Initialization
    # -------------------------------------------------------------------------

    async def init(
        self, bootstrap: LightClientBootstrap, trusted_block_root: Bytes32 | None = None
    ) -> None:
        """
        Install a store built from `bootstrap`, replacing any existing one.

        Raises:
            InvalidBootstrap: If the bootstrap does not verify.
        """
        store = initialize_light_client_store(self.config, bootstrap, trusted_block_root)
        async with self._lock:
            self.cache.clear()
            self._install(store)

    async def init_from_checkpoint(self, block_root: Bytes32) -> None:
        """
        Fetch the bootstrap of a trusted block root and install it.

        Raises:
            UpstreamUnavailable: If the bootstrap cannot be fetched.
            InvalidBootstrap: If it does not match `block_root` or does not verify.
        """
        bootstrap = await with_timeout(
            self.upstream.get_bootstrap(block_root), self.timeout, "bootstrap"
        )
        await self.init(bootstrap, trusted_block_root=block_root)

    async def restore(self) -> bool:
        """
        Install the persisted store, if any.

        Returns:
            True if a store was restored, False if nothing was persisted.

        Raises:
            CorruptPersistedState: If the persisted store fails re-validation.
            IOFailure: If the storage provider fails.
        """
        async with self._lock:
            store = self.persistence.load(self.config)
            if store is None:
                return False
            self.cache.clear()
            self._install(store)
            return True

    # -------------------------------------------------------------------------
    # Updates
    # -------------------------------------------------------------------------

    async def update(self, update: LightClientUpdate) -> UpdateOutcome:
        """
        Validate `update` and apply it to the store.

        Raises:
            NotInitialized: If no store is installed.
            UpdateError: If the update is rejected; the store is unchanged.
        """
        async with self._lock:
            store = self.store
            try:
                with metrics.update_processing_time.time():
                    new_store, outcome = process_light_client_update(
                        self.config, store, update, self.clock.current_slot()
                    )
            except LightClientError as e:
                metrics.updates_rejected.labels(reason=type(e).__name__).inc()
                raise
            self._install(new_store)

        metrics.updates_accepted.labels(outcome=outcome.name).inc()
        return outcome

    async def update_for_period(self, period: int) -> UpdateOutcome:
        """Fetch the update of sync committee `period` and apply it."""
        checked = SyncCommitteePeriod(_to_uint64(period, "Period"))
        compute_start_slot_at_period(self.config, checked)
        update = await with_timeout(
            self.upstream.get_update_for_period(checked), self.timeout, f"update for period {period}"
        )
        return await self.update(update)

    async def update_for_slot(self, slot: int) -> UpdateOutcome:
        """Fetch the update of the period containing `slot` and apply it."""
        checked = Slot(_to_uint64(slot, "Slot"))
        update = await with_timeout(
            self.upstream.get_update_for_slot(checked), self.timeout, f"update for slot {slot}"
        )
        return await self.update(update)

    async def update_for_block_number(self, block_number: int) -> UpdateOutcome:
        """Fetch the update of the period containing execution block `block_number` and apply it."""
        checked = int(_to_uint64(block_number, "Block number"))
        update = await with_timeout(
            self.upstream.get_update_for_block_number(checked),
            self.timeout,
            f"update for block number {block_number}",
        )
        return await self.update(update)

    async def force_update(self) -> UpdateOutcome:
        """Promote the best pending update if finality has stalled long enough."""
        async with self._lock:
            new_store, outcome = force_update(self.config, self.store, self.clock.current_slot())
            if new_store is not self._store:
                self._install(new_store)
        return outcome

    async def sync(self) -> UpdateOutcome:
        """
        Run one periodic sync step.

        Fetches the updates from the finalized period up to the clock's period,
        then tries a force update. Returns the furthest-reaching outcome.

        `Stale` updates are expected and skipped. Every other failure is
        raised, after a warning for those that may indicate an attack.
        """
        store = self.store
        first = int(store.finalized_period(self.config))
        last = int(compute_sync_committee_period_at_slot(self.config, self.clock.current_slot()))
        best = UpdateOutcome.ACCEPTED_NO_CHANGE

        for period in range(first, min(last, first + MAX_SYNC_PERIODS - 1) + 1):
            try:
                outcome = await self.update_for_period(period)
            except Stale as e:
                logger.debug("Skipping stale update for period %d: %s", period, e)
                continue
            except LightClientError as e:
                if e.security_relevant:
                    logger.warning(
                        "Rejected update for period %d: %s: %s", period, type(e).__name__, e
                    )
                raise
            if _OUTCOME_RANK[outcome] > _OUTCOME_RANK[best]:
                best = outcome

        forced = await self.force_update()
        if _OUTCOME_RANK[forced] > _OUTCOME_RANK[best]:
            best = forced
        return best

    # -------------------------------------------------------------------------
    # Fetches
    # -------------------------------------------------------------------------

    def _finalized_slot_for(self, slot: int) -> tuple[Slot, Slot]:
        """Check `slot` against the finalized header of the current snapshot."""
        checked = Slot(_to_uint64(slot, "Slot"))
        store = self.store
        finalized_slot = store.finalized_header.slot
        if checked > finalized_slot:
            raise UnverifiedSlot(f"Slot {slot} is after the finalized slot {finalized_slot}")
        # The finalized header anchors every authentication, even after eviction.
        self.cache.add_header(store.finalized_header)
        return checked, finalized_slot

    async def fetch_header_from_slot(self, slot: int) -> BeaconBlockHeader:
        """
        Return the finalized-chain header at `slot`.

        Raises:
            UnverifiedSlot: If the slot is not finalized, or its header fails
                authentication.
            NotCached: If the slot is empty or too far from a trusted header.
            UpstreamUnavailable: If the upstream fails.
        """
        checked, finalized_slot = self._finalized_slot_for(slot)
        return await self._authenticator.fetch_header(checked, finalized_slot)

    async def fetch_block_from_slot(self, slot: int) -> BeaconBlock:
        """
        Return the finalized-chain block at `slot`.

        Raises:
            UnverifiedSlot: If the slot is not finalized, or the block fails
                authentication.
            NotCached: If the slot is empty or too far from a trusted header.
            UpstreamUnavailable: If the upstream fails.
        """
        checked, finalized_slot = self._finalized_slot_for(slot)
        return await self._authenticator.fetch_block(checked, finalized_slot)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def persist(self) -> None:
        """
        Write the current store to durable storage.

        Raises:
            NotInitialized: If no store is installed.
            IOFailure: If the storage provider fails.
        """
        self.persistence.save(self.store)

    # -------------------------------------------------------------------------
    # Operation registry
    # -------------------------------------------------------------------------

    def operations(self) -> dict[str, Callable[..., Awaitable[Any]]]:
        """Map every exposed operation name to its handler."""
        return {
            "light-client-init": self.init,
            "light-client-update": self.update,
            "light-client-update-for-block-number": self.update_for_block_number,
            "light-client-update-for-period": self.update_for_period,
            "light-client-update-for-slot": self.update_for_slot,
            "light-client-fetch-header-from-slot": self.fetch_header_from_slot,
            "light-client-fetch-block-from-slot": self.fetch_block_from_slot,
            "light-client-persist": self.persist,
        }
