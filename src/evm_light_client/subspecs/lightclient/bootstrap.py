"""
Store initialization from a trusted bootstrap.

A bootstrap is the one piece of trust a light client accepts from outside:
a header obtained out-of-band (for example a weak subjectivity checkpoint)
and the committee its state commits to. Everything after it is verified.
"""

from __future__ import annotations

import logging

from evm_light_client.errors import InvalidBootstrap, UnknownFork
from evm_light_client.subspecs.chain.config import ChainConfig
from evm_light_client.subspecs.containers import LightClientBootstrap
from evm_light_client.subspecs.ssz import hash_tree_root
from evm_light_client.types import Boolean, Bytes32

from .store import (
    CommitteeProof,
    LightClientStore,
    OptionalCommitteeProof,
    OptionalLightClientUpdate,
    OptionalSyncCommittee,
)

logger = logging.getLogger(__name__)


def initialize_light_client_store(
    config: ChainConfig,
    bootstrap: LightClientBootstrap,
    trusted_block_root: Bytes32 | None = None,
) -> LightClientStore:
    """
    Build a store from `bootstrap`.

    Both headers of the new store are the bootstrap header and no next
    committee is known yet.

    Args:
        config: Chain parameters.
        bootstrap: The header and its current sync committee with proof.
        trusted_block_root: If given, the bootstrap header must have this root.

    Raises:
        InvalidBootstrap: If the header is not the trusted one, or the committee
            is not proven by the header's state root.
    """
    header = bootstrap.header
    header_root = hash_tree_root(header)
    if trusted_block_root is not None and header_root != trusted_block_root:
        raise InvalidBootstrap(
            f"Bootstrap header root 0x{header_root.hex()} does not match "
            f"trusted root 0x{trusted_block_root.hex()}"
        )

    proof = CommitteeProof(
        header=header,
        branch=bootstrap.current_sync_committee_branch,
        is_next=Boolean(False),
    )
    try:
        valid = proof.verify(config, bootstrap.current_sync_committee)
    except UnknownFork as e:
        raise InvalidBootstrap(f"Bootstrap header at slot {header.slot}: {e}") from e
    if not valid:
        raise InvalidBootstrap(
            f"Current sync committee is not proven by the state root of slot {header.slot}"
        )

    logger.info("Initialized light client store at slot %s (root 0x%s)", header.slot, header_root.hex())
    return LightClientStore(
        finalized_header=header,
        optimistic_header=header,
        current_sync_committee=bootstrap.current_sync_committee,
        current_sync_committee_proof=proof,
        next_sync_committee=OptionalSyncCommittee(),
        next_sync_committee_proof=OptionalCommitteeProof(),
        best_valid_update=OptionalLightClientUpdate(),
    )
