"""
Shared pytest fixtures for all light client tests.

Provides the test chain, its committees and a bootstrapped store.
"""

from __future__ import annotations

import pytest

from evm_light_client.subspecs.chain.config import ChainConfig
from evm_light_client.subspecs.containers import LightClientBootstrap, SyncCommittee
from evm_light_client.subspecs.lightclient import LightClientStore, initialize_light_client_store
from tests.evm_light_client.helpers import (
    NEXT_COMMITTEE_OFFSET,
    make_bootstrap,
    make_committee,
    make_config,
)

BOOTSTRAP_SLOT = 100
"""Slot of the bootstrap header used by the shared fixtures."""


@pytest.fixture
def config() -> ChainConfig:
    """The test chain configuration."""
    return make_config()


@pytest.fixture
def committee() -> SyncCommittee:
    """Committee of the bootstrap period."""
    return make_committee(0)


@pytest.fixture
def next_committee() -> SyncCommittee:
    """Committee of the period after the bootstrap period."""
    return make_committee(NEXT_COMMITTEE_OFFSET)


@pytest.fixture
def bootstrap(config: ChainConfig, committee: SyncCommittee) -> LightClientBootstrap:
    """Bootstrap at slot 100 for the period 0 committee."""
    return make_bootstrap(config, BOOTSTRAP_SLOT, committee)


@pytest.fixture
def store(config: ChainConfig, bootstrap: LightClientBootstrap) -> LightClientStore:
    """Store initialized from the bootstrap fixture."""
    return initialize_light_client_store(config, bootstrap)
