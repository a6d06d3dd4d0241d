"""Tests for the light client orchestrator."""

from __future__ import annotations

import logging

import pytest

from evm_light_client.errors import (
    CorruptPersistedState,
    InvalidBootstrap,
    InvalidSignature,
    InvalidSlot,
    NotCached,
    NotInitialized,
    Stale,
    UnverifiedSlot,
    UpstreamUnavailable,
)
from evm_light_client.subspecs.chain import ChainConfig, SlotClock
from evm_light_client.subspecs.containers import (
    BeaconBlock,
    LightClientBootstrap,
    Slot,
    SyncCommittee,
)
from evm_light_client.subspecs.lightclient import UpdateOutcome
from evm_light_client.subspecs.metrics import REGISTRY
from evm_light_client.subspecs.node import LightClient
from evm_light_client.subspecs.storage import MemoryKeyValueStore, PersistenceAdapter
from tests.evm_light_client.helpers import (
    NEXT_COMMITTEE_OFFSET,
    MockUpdateSource,
    committee_state,
    make_block,
    make_bytes32,
    make_chain,
    make_update,
    run_async,
    time_at_slot,
)

CHAIN_SLOTS = [96, 97, 99, 100]
"""Finalized chain below the bootstrap; slot 98 is empty."""


class Clock:
    """Settable time source."""

    def __init__(self, slot: int) -> None:
        self.now = time_at_slot(slot)

    def set_slot(self, slot: int) -> None:
        self.now = time_at_slot(slot)

    def __call__(self) -> float:
        return self.now


def make_client(
    config: ChainConfig,
    upstream: MockUpdateSource,
    kv: MemoryKeyValueStore | None = None,
    clock: Clock | None = None,
    timeout: float = 1.0,
) -> LightClient:
    return LightClient(
        config=config,
        upstream=upstream,
        persistence=PersistenceAdapter(kv if kv is not None else MemoryKeyValueStore()),
        clock=SlotClock(config, time_fn=clock if clock is not None else Clock(1000)),
        timeout=timeout,
    )


@pytest.fixture
def chain(config: ChainConfig, committee: SyncCommittee) -> list[BeaconBlock]:
    """Linked blocks whose tip commits to the bootstrap committee."""
    tree, _ = committee_state(config, CHAIN_SLOTS[-1], committee)
    return make_chain(CHAIN_SLOTS, tip_state_root=tree.root)


@pytest.fixture
def chain_bootstrap(
    config: ChainConfig, committee: SyncCommittee, chain: list[BeaconBlock]
) -> LightClientBootstrap:
    """Bootstrap at the tip of `chain`."""
    tree, gindex = committee_state(config, CHAIN_SLOTS[-1], committee)
    return LightClientBootstrap(
        header=chain[-1].header(),
        current_sync_committee=committee,
        current_sync_committee_branch=tree.branch(gindex),
    )


@pytest.fixture
def upstream(chain: list[BeaconBlock]) -> MockUpdateSource:
    """Upstream serving the finalized chain."""
    source = MockUpdateSource()
    source.add_blocks(chain)
    return source


class TestInitialization:
    """Tests for installing a store."""

    def test_not_initialized(self, config: ChainConfig, upstream: MockUpdateSource) -> None:
        """Every store operation needs a store."""
        client = make_client(config, upstream)
        assert not client.is_initialized
        with pytest.raises(NotInitialized):
            _ = client.store
        with pytest.raises(NotInitialized):
            run_async(client.update(make_update(config, 150)))
        with pytest.raises(NotInitialized):
            run_async(client.fetch_header_from_slot(10))
        with pytest.raises(NotInitialized):
            run_async(client.persist())

    def test_init(
        self, config: ChainConfig, upstream: MockUpdateSource, bootstrap: LightClientBootstrap
    ) -> None:
        """A bootstrap installs a store and publishes its slots."""
        client = make_client(config, upstream)
        run_async(client.init(bootstrap))
        assert client.is_initialized
        assert client.store.finalized_header == bootstrap.header
        assert REGISTRY.get_sample_value("light_client_finalized_slot") == 100

    def test_init_from_checkpoint(
        self, config: ChainConfig, upstream: MockUpdateSource, bootstrap: LightClientBootstrap
    ) -> None:
        """The bootstrap of a trusted root is fetched and checked."""
        root = upstream.add_bootstrap(bootstrap)
        client = make_client(config, upstream)
        run_async(client.init_from_checkpoint(root))
        assert client.store.finalized_header == bootstrap.header

    def test_checkpoint_mismatch(
        self, config: ChainConfig, upstream: MockUpdateSource, bootstrap: LightClientBootstrap
    ) -> None:
        """A bootstrap served under another root is rejected."""
        upstream.bootstraps[make_bytes32(5)] = bootstrap
        client = make_client(config, upstream)
        with pytest.raises(InvalidBootstrap):
            run_async(client.init_from_checkpoint(make_bytes32(5)))
        assert not client.is_initialized


class TestUpdates:
    """Tests for the update operations."""

    @pytest.fixture
    def client(
        self, config: ChainConfig, upstream: MockUpdateSource, bootstrap: LightClientBootstrap
    ) -> LightClient:
        """Client bootstrapped at slot 100."""
        client = make_client(config, upstream)
        run_async(client.init(bootstrap))
        return client

    def test_update(self, config: ChainConfig, client: LightClient) -> None:
        """An update is validated and applied, then a replay is stale."""
        update = make_update(config, 150, participants=range(26))
        assert run_async(client.update(update)) == UpdateOutcome.ADVANCED_OPTIMISTIC
        assert client.store.optimistic_header.slot == 150

        before = REGISTRY.get_sample_value(
            "light_client_updates_rejected_total", {"reason": "Stale"}
        ) or 0.0
        with pytest.raises(Stale):
            run_async(client.update(update))
        assert (
            REGISTRY.get_sample_value("light_client_updates_rejected_total", {"reason": "Stale"})
            == before + 1
        )

    def test_update_for_period(
        self, config: ChainConfig, client: LightClient, upstream: MockUpdateSource
    ) -> None:
        """The update of a period is fetched and applied."""
        upstream.updates[0] = make_update(config, 150)
        assert run_async(client.update_for_period(0)) == UpdateOutcome.ADVANCED_OPTIMISTIC
        assert "update:period:0" in upstream.requests

    def test_update_for_slot(
        self, config: ChainConfig, client: LightClient, upstream: MockUpdateSource
    ) -> None:
        """A slot selects the update of its period."""
        upstream.updates[0] = make_update(config, 200, finalized_slot=180)
        assert run_async(client.update_for_slot(250)) == UpdateOutcome.ADVANCED_FINALIZED
        assert client.store.finalized_header.slot == 180

    def test_update_for_block_number(
        self, config: ChainConfig, client: LightClient, upstream: MockUpdateSource
    ) -> None:
        """An execution block number selects the update of its period."""
        upstream.updates[0] = make_update(config, 150)
        upstream.block_numbers[777] = 150
        assert run_async(client.update_for_block_number(777)) == UpdateOutcome.ADVANCED_OPTIMISTIC

    @pytest.mark.parametrize(
        "operation, value",
        [
            ("update_for_slot", 2**64),
            ("update_for_period", 2**64),
            ("update_for_period", 2**63),
            ("update_for_block_number", 2**64),
            ("update_for_slot", -1),
        ],
    )
    def test_out_of_range(
        self, client: LightClient, upstream: MockUpdateSource, operation: str, value: int
    ) -> None:
        """Numbers outside the 64-bit slot range are refused before any request."""
        with pytest.raises(InvalidSlot):
            run_async(getattr(client, operation)(value))
        assert upstream.requests == []

    def test_upstream_timeout(
        self, config: ChainConfig, upstream: MockUpdateSource, bootstrap: LightClientBootstrap
    ) -> None:
        """A slow upstream is unavailable, not invalid."""
        client = make_client(config, upstream, timeout=0.01)
        run_async(client.init(bootstrap))
        upstream.updates[0] = make_update(config, 150)
        upstream.delay = 0.5
        with pytest.raises(UpstreamUnavailable):
            run_async(client.update_for_period(0))
        assert client.store.optimistic_header.slot == 100

    def test_force_update(
        self, config: ChainConfig, upstream: MockUpdateSource, bootstrap: LightClientBootstrap
    ) -> None:
        """The pending update is finalized once the timeout passes."""
        clock = Clock(200)
        client = make_client(config, upstream, clock=clock)

        async def scenario() -> tuple[UpdateOutcome, UpdateOutcome]:
            await client.init(bootstrap)
            await client.update(make_update(config, 150))
            early = await client.force_update()
            clock.set_slot(100 + 257)
            return early, await client.force_update()

        early, late = run_async(scenario())
        assert early == UpdateOutcome.ACCEPTED_NO_CHANGE
        assert late == UpdateOutcome.ADVANCED_FINALIZED
        assert client.store.finalized_header.slot == 150


class TestSync:
    """Tests for the periodic sync step."""

    def test_catches_up_and_rotates(
        self,
        config: ChainConfig,
        upstream: MockUpdateSource,
        bootstrap: LightClientBootstrap,
        next_committee: SyncCommittee,
    ) -> None:
        """Updates of every period up to the clock are applied in order."""
        upstream.updates[0] = make_update(
            config, 200, finalized_slot=180, next_committee=next_committee
        )
        upstream.updates[1] = make_update(
            config, 300, finalized_slot=260, signer_offset=NEXT_COMMITTEE_OFFSET
        )
        client = make_client(config, upstream, clock=Clock(400))
        run_async(client.init(bootstrap))

        assert run_async(client.sync()) == UpdateOutcome.ADVANCED_FINALIZED
        assert client.store.finalized_header.slot == 260
        assert client.store.current_sync_committee == next_committee

    def test_stale_is_skipped(
        self, config: ChainConfig, upstream: MockUpdateSource, bootstrap: LightClientBootstrap
    ) -> None:
        """A second sync with nothing new reports no change."""
        upstream.updates[0] = make_update(config, 150)
        client = make_client(config, upstream, clock=Clock(200))
        run_async(client.init(bootstrap))
        assert run_async(client.sync()) == UpdateOutcome.ADVANCED_OPTIMISTIC
        assert run_async(client.sync()) == UpdateOutcome.ACCEPTED_NO_CHANGE

    def test_attack_is_raised_and_logged(
        self,
        config: ChainConfig,
        upstream: MockUpdateSource,
        bootstrap: LightClientBootstrap,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """A forged update surfaces with a warning."""
        upstream.updates[0] = make_update(config, 150, signer_offset=NEXT_COMMITTEE_OFFSET)
        client = make_client(config, upstream, clock=Clock(200))
        run_async(client.init(bootstrap))
        with caplog.at_level(logging.WARNING), pytest.raises(InvalidSignature):
            run_async(client.sync())
        assert any("InvalidSignature" in r.getMessage() for r in caplog.records)

    def test_upstream_failure(
        self, config: ChainConfig, upstream: MockUpdateSource, bootstrap: LightClientBootstrap
    ) -> None:
        """Upstream trouble is raised for the caller to retry."""
        client = make_client(config, upstream, clock=Clock(200))
        run_async(client.init(bootstrap))
        upstream.should_fail = True
        with pytest.raises(UpstreamUnavailable):
            run_async(client.sync())


class TestFetch:
    """Tests for serving finalized headers and blocks."""

    @pytest.fixture
    def client(
        self,
        config: ChainConfig,
        upstream: MockUpdateSource,
        chain_bootstrap: LightClientBootstrap,
    ) -> LightClient:
        """Client finalized at the tip of the chain."""
        client = make_client(config, upstream)
        run_async(client.init(chain_bootstrap))
        return client

    def test_finalized_header_from_cache(
        self, client: LightClient, upstream: MockUpdateSource, chain: list[BeaconBlock]
    ) -> None:
        """The finalized header is served without a request."""
        assert run_async(client.fetch_header_from_slot(100)) == chain[-1].header()
        assert upstream.requests == []

    def test_backfilled_header(
        self, client: LightClient, upstream: MockUpdateSource, chain: list[BeaconBlock]
    ) -> None:
        """Older headers are authenticated through parent links, then cached."""
        assert run_async(client.fetch_header_from_slot(97)) == chain[1].header()
        requests = len(upstream.requests)
        assert run_async(client.fetch_header_from_slot(97)) == chain[1].header()
        assert len(upstream.requests) == requests

    def test_header_walk_fetches_no_block(
        self, client: LightClient, upstream: MockUpdateSource, chain: list[BeaconBlock]
    ) -> None:
        """Headers are authenticated from the header endpoint alone."""
        assert run_async(client.fetch_header_from_slot(96)) == chain[0].header()
        assert upstream.requests
        assert not any(request.startswith("block:") for request in upstream.requests)

    def test_block(self, client: LightClient, chain: list[BeaconBlock]) -> None:
        """Full blocks are authenticated too."""
        assert run_async(client.fetch_block_from_slot(100)) == chain[-1]
        assert run_async(client.fetch_block_from_slot(96)) == chain[0]

    def test_empty_slot(self, client: LightClient) -> None:
        """An empty finalized slot has nothing to serve."""
        with pytest.raises(NotCached):
            run_async(client.fetch_header_from_slot(98))

    def test_above_finalized(self, client: LightClient) -> None:
        """Slots after the finalized header are not trusted."""
        with pytest.raises(UnverifiedSlot):
            run_async(client.fetch_header_from_slot(101))
        with pytest.raises(UnverifiedSlot):
            run_async(client.fetch_block_from_slot(101))

    def test_out_of_range(self, client: LightClient) -> None:
        """A slot beyond 64 bits is invalid."""
        with pytest.raises(InvalidSlot):
            run_async(client.fetch_header_from_slot(2**64))

    def test_forged_block(self, client: LightClient, upstream: MockUpdateSource) -> None:
        """A block off the finalized chain is rejected."""
        upstream.add_blocks([make_block(99, make_bytes32(3))])
        with pytest.raises(UnverifiedSlot):
            run_async(client.fetch_block_from_slot(97))


class TestPersistence:
    """Tests for persist and restore."""

    def test_persist_and_restore(
        self, config: ChainConfig, upstream: MockUpdateSource, bootstrap: LightClientBootstrap
    ) -> None:
        """A second client restores what the first persisted."""
        kv = MemoryKeyValueStore()
        first = make_client(config, upstream, kv=kv)
        run_async(first.init(bootstrap))
        run_async(first.update(make_update(config, 150)))
        run_async(first.persist())

        second = make_client(config, upstream, kv=kv)
        assert run_async(second.restore())
        assert second.store == first.store

    def test_restore_nothing(self, config: ChainConfig, upstream: MockUpdateSource) -> None:
        """Restoring from empty storage leaves the client uninitialized."""
        client = make_client(config, upstream)
        assert not run_async(client.restore())
        assert not client.is_initialized

    def test_restore_corrupt(self, config: ChainConfig, upstream: MockUpdateSource) -> None:
        """A corrupt record is refused."""
        kv = MemoryKeyValueStore()
        kv.put("light_client/head", b"light_client/store/a")
        kv.put("light_client/store/a", b"\x01\x02\x03")
        client = make_client(config, upstream, kv=kv)
        with pytest.raises(CorruptPersistedState):
            run_async(client.restore())
        assert not client.is_initialized


class TestOperations:
    """Tests for the operation registry."""

    def test_names(self, config: ChainConfig, upstream: MockUpdateSource) -> None:
        """Every operation is exposed under its name."""
        assert set(make_client(config, upstream).operations()) == {
            "light-client-init",
            "light-client-update",
            "light-client-update-for-block-number",
            "light-client-update-for-period",
            "light-client-update-for-slot",
            "light-client-fetch-header-from-slot",
            "light-client-fetch-block-from-slot",
            "light-client-persist",
        }

    def test_dispatch(
        self, config: ChainConfig, upstream: MockUpdateSource, bootstrap: LightClientBootstrap
    ) -> None:
        """Handlers are the bound client methods."""
        client = make_client(config, upstream)
        ops = client.operations()
        run_async(ops["light-client-init"](bootstrap))
        assert run_async(ops["light-client-update"](make_update(config, 150))) == (
            UpdateOutcome.ADVANCED_OPTIMISTIC
        )
        run_async(ops["light-client-persist"]())
        assert client.persistence.load(config) == client.store
