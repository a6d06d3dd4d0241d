"""Tests for applying updates to the store."""

from __future__ import annotations

import pytest

from evm_light_client.errors import InvalidCommitteeProof, InvalidSignature, Stale
from evm_light_client.subspecs.chain import ChainConfig
from evm_light_client.subspecs.containers import Slot, SyncCommittee
from evm_light_client.subspecs.lightclient import (
    LightClientStore,
    UpdateOutcome,
    force_update,
    is_better_update,
    process_light_client_update,
)
from evm_light_client.subspecs.ssz import hash_tree_root
from tests.evm_light_client.helpers import (
    NEXT_COMMITTEE_OFFSET,
    make_committee,
    make_update,
)

NOW = Slot(1000)
"""A current slot well past every update in this module."""


@pytest.fixture
def store_with_next(
    config: ChainConfig, store: LightClientStore, next_committee: SyncCommittee
) -> LightClientStore:
    """Finalized at 180 with the period 1 committee known."""
    update = make_update(config, 200, finalized_slot=180, next_committee=next_committee)
    new_store, outcome = process_light_client_update(config, store, update, NOW)
    assert outcome == UpdateOutcome.ADVANCED_FINALIZED
    return new_store


class TestOptimistic:
    """Tests for updates without finality."""

    def test_advance_then_stale(self, config: ChainConfig, store: LightClientStore) -> None:
        """A newer header advances; an older one afterwards is stale."""
        update = make_update(config, 150, participants=range(26))
        store, outcome = process_light_client_update(config, store, update, NOW)
        assert outcome == UpdateOutcome.ADVANCED_OPTIMISTIC
        assert store.optimistic_header.slot == 150
        assert store.finalized_header.slot == 100
        assert store.best_valid_update.value == update

        with pytest.raises(Stale):
            process_light_client_update(config, store, make_update(config, 140), NOW)

    def test_rejection_leaves_store(self, config: ChainConfig, store: LightClientStore) -> None:
        """A rejected update changes nothing."""
        before = hash_tree_root(store)
        with pytest.raises(InvalidSignature):
            process_light_client_update(
                config, store, make_update(config, 150, signer_offset=NEXT_COMMITTEE_OFFSET), NOW
            )
        assert hash_tree_root(store) == before


class TestBestValidUpdate:
    """Tests for tracking the best pending update."""

    def test_more_participants_wins(self, config: ChainConfig, store: LightClientStore) -> None:
        """Fewer signers on a newer header do not replace the best update."""
        first = make_update(config, 150, participants=range(26))
        store, _ = process_light_client_update(config, store, first, NOW)
        second = make_update(config, 160, participants=range(24))
        store, _ = process_light_client_update(config, store, second, NOW)
        assert store.best_valid_update.value == first
        assert store.optimistic_header.slot == 160

    def test_is_better_update(self, config: ChainConfig) -> None:
        """Participation first, then the newer attested header."""
        a = make_update(config, 150, participants=range(26))
        b = make_update(config, 160, participants=range(26))
        c = make_update(config, 170, participants=range(24))
        assert is_better_update(b, a)
        assert not is_better_update(a, b)
        assert is_better_update(a, c)
        assert not is_better_update(c, a)


class TestFinality:
    """Tests for finality advances and committee rotation."""

    def test_finality_advance(self, config: ChainConfig, store: LightClientStore) -> None:
        """A proven finalized header moves finality and clears the pending update."""
        store, _ = process_light_client_update(config, store, make_update(config, 150), NOW)
        update = make_update(config, 200, finalized_slot=180)
        store, outcome = process_light_client_update(config, store, update, NOW)
        assert outcome == UpdateOutcome.ADVANCED_FINALIZED
        assert store.finalized_header == update.finalized_header
        assert store.optimistic_header == update.attested_header
        assert store.best_valid_update.selected_type is None

    def test_finality_only_update(self, config: ChainConfig, store: LightClientStore) -> None:
        """A branch proving only the finalized root still counts as finality."""
        update = make_update(config, 200, finalized_slot=180)
        assert not update.finality_branch.is_empty()
        assert update.has_finalized_header
        assert not update.has_next_sync_committee
        _, outcome = process_light_client_update(config, store, update, NOW)
        assert outcome == UpdateOutcome.ADVANCED_FINALIZED

    def test_next_committee_only_update(
        self, config: ChainConfig, store: LightClientStore, next_committee: SyncCommittee
    ) -> None:
        """A branch proving only the next committee installs it without finality."""
        update = make_update(config, 150, next_committee=next_committee)
        assert update.has_next_sync_committee
        assert not update.has_finalized_header
        new_store, outcome = process_light_client_update(config, store, update, NOW)
        assert outcome == UpdateOutcome.ADVANCED_OPTIMISTIC
        assert new_store.next_sync_committee.value == next_committee

    def test_learns_next_committee(
        self, config: ChainConfig, store_with_next: LightClientStore, next_committee: SyncCommittee
    ) -> None:
        """A proven next committee of the finalized period is installed."""
        assert store_with_next.has_next_sync_committee
        assert store_with_next.next_sync_committee.value == next_committee
        store_with_next.check_invariants(config)
        store_with_next.verify_committee_proofs(config)

    def test_conflicting_next_committee(
        self, config: ChainConfig, store_with_next: LightClientStore
    ) -> None:
        """A second, different next committee for the same period is rejected."""
        update = make_update(
            config, 220, next_committee=make_committee(2 * NEXT_COMMITTEE_OFFSET)
        )
        with pytest.raises(InvalidCommitteeProof):
            process_light_client_update(config, store_with_next, update, NOW)

    def test_rotation(
        self,
        config: ChainConfig,
        store_with_next: LightClientStore,
        next_committee: SyncCommittee,
    ) -> None:
        """Finality entering period 1 promotes the next committee."""
        update = make_update(
            config, 300, finalized_slot=260, signer_offset=NEXT_COMMITTEE_OFFSET
        )
        store, outcome = process_light_client_update(config, store_with_next, update, NOW)
        assert outcome == UpdateOutcome.ADVANCED_FINALIZED
        assert store.finalized_period(config) == 1
        assert store.current_sync_committee == next_committee
        assert not store.has_next_sync_committee
        store.check_invariants(config)
        store.verify_committee_proofs(config)

    def test_finality_never_rolls_back(
        self, config: ChainConfig, store_with_next: LightClientStore
    ) -> None:
        """An older finalized header is stale even with a valid proof."""
        update = make_update(config, 190, finalized_slot=150)
        with pytest.raises(Stale):
            process_light_client_update(config, store_with_next, update, NOW)
        assert store_with_next.finalized_header.slot == 180


class TestForceUpdate:
    """Tests for forcing finality after a timeout."""

    @pytest.fixture
    def pending(self, config: ChainConfig, store: LightClientStore) -> LightClientStore:
        """Store at finalized 100 with a pending optimistic update at 150."""
        new_store, _ = process_light_client_update(config, store, make_update(config, 150), NOW)
        return new_store

    def test_nothing_pending(self, config: ChainConfig, store: LightClientStore) -> None:
        """Without a pending update nothing changes."""
        new_store, outcome = force_update(config, store, Slot(10_000))
        assert outcome == UpdateOutcome.ACCEPTED_NO_CHANGE
        assert new_store is store

    def test_before_timeout(self, config: ChainConfig, pending: LightClientStore) -> None:
        """One period after finality is not yet enough."""
        new_store, outcome = force_update(config, pending, Slot(100 + 256))
        assert outcome == UpdateOutcome.ACCEPTED_NO_CHANGE
        assert new_store is pending

    def test_after_timeout(self, config: ChainConfig, pending: LightClientStore) -> None:
        """The attested header of the pending update becomes finalized."""
        new_store, outcome = force_update(config, pending, Slot(100 + 257))
        assert outcome == UpdateOutcome.ADVANCED_FINALIZED
        assert new_store.finalized_header.slot == 150
        assert new_store.optimistic_header.slot == 150
        assert new_store.best_valid_update.selected_type is None
        new_store.check_invariants(config)
