"""Tests for store initialization."""

from __future__ import annotations

import pytest

from evm_light_client.errors import InvalidBootstrap
from evm_light_client.subspecs.chain import (
    ALTAIR_FORK_SPEC,
    ELECTRA_FORK_SPEC,
    ChainConfig,
    ForkParameter,
)
from evm_light_client.subspecs.containers import (
    Epoch,
    LightClientBootstrap,
    MerkleBranch,
    SyncCommittee,
)
from evm_light_client.subspecs.lightclient import initialize_light_client_store
from evm_light_client.subspecs.ssz import hash_tree_root
from evm_light_client.types import Bytes4
from tests.evm_light_client.helpers import (
    NEXT_COMMITTEE_OFFSET,
    make_bootstrap,
    make_bytes32,
    make_committee,
    make_config,
)


class TestInitialize:
    """Tests for initialization from a valid bootstrap."""

    def test_headers_and_committees(
        self, config: ChainConfig, bootstrap: LightClientBootstrap, committee: SyncCommittee
    ) -> None:
        """Both headers are the bootstrap header; no next committee is known."""
        store = initialize_light_client_store(config, bootstrap)
        assert store.finalized_header == bootstrap.header
        assert store.optimistic_header == bootstrap.header
        assert store.current_sync_committee == committee
        assert not store.has_next_sync_committee
        assert store.best_valid_update.selected_type is None
        store.check_invariants(config)
        store.verify_committee_proofs(config)

    def test_trusted_root(self, config: ChainConfig, bootstrap: LightClientBootstrap) -> None:
        """A matching trusted root is accepted."""
        store = initialize_light_client_store(
            config, bootstrap, trusted_block_root=hash_tree_root(bootstrap.header)
        )
        assert store.finalized_header == bootstrap.header

    def test_electra_layout(self) -> None:
        """Electra proves the committee at its own generalized index."""
        electra = make_config(
            forks=(ForkParameter(version=Bytes4("0x05000000"), epoch=Epoch(0), spec=ELECTRA_FORK_SPEC),)
        )
        store = initialize_light_client_store(electra, make_bootstrap(electra, 100))
        assert store.current_sync_committee == make_committee(0)


class TestRejection:
    """Tests for bootstraps that must be rejected."""

    def test_wrong_trusted_root(self, config: ChainConfig, bootstrap: LightClientBootstrap) -> None:
        """The header must be the one the caller trusts."""
        with pytest.raises(InvalidBootstrap):
            initialize_light_client_store(config, bootstrap, trusted_block_root=make_bytes32(1))

    def test_wrong_committee(self, config: ChainConfig, bootstrap: LightClientBootstrap) -> None:
        """A committee the state root does not commit to is rejected."""
        forged = bootstrap.replace(current_sync_committee=make_committee(NEXT_COMMITTEE_OFFSET))
        with pytest.raises(InvalidBootstrap):
            initialize_light_client_store(config, forged)

    def test_tampered_branch(self, config: ChainConfig, bootstrap: LightClientBootstrap) -> None:
        """Flipping one branch node breaks the proof."""
        nodes = list(bootstrap.current_sync_committee_branch.data)
        nodes[0] = make_bytes32(7)
        forged = bootstrap.replace(
            current_sync_committee_branch=MerkleBranch(data=nodes)
        )
        with pytest.raises(InvalidBootstrap):
            initialize_light_client_store(config, forged)

    def test_wrong_fork_layout(self, bootstrap: LightClientBootstrap) -> None:
        """An Altair proof does not verify at the Electra index."""
        electra = make_config(
            forks=(ForkParameter(version=Bytes4("0x05000000"), epoch=Epoch(0), spec=ELECTRA_FORK_SPEC),)
        )
        with pytest.raises(InvalidBootstrap):
            initialize_light_client_store(electra, bootstrap)

    def test_before_first_fork(self, bootstrap: LightClientBootstrap) -> None:
        """A header before the first fork has no known state layout."""
        late = make_config(
            forks=(ForkParameter(version=Bytes4("0x01000000"), epoch=Epoch(20), spec=ALTAIR_FORK_SPEC),)
        )
        with pytest.raises(InvalidBootstrap):
            initialize_light_client_store(late, bootstrap)
