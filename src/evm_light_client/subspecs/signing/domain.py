"""
Signing domains and signing roots.

A signature never covers an object directly. It covers the object's root
mixed with a domain, and the domain commits to the domain type, the active
fork version and the chain's genesis validators root. A signature made on
one chain, or under one fork, therefore never verifies on another.
"""

from __future__ import annotations

from evm_light_client.subspecs.chain.clock import compute_epoch_at_slot
from evm_light_client.subspecs.chain.config import DOMAIN_SYNC_COMMITTEE, ChainConfig
from evm_light_client.subspecs.chain.forks import compute_fork_version
from evm_light_client.subspecs.containers.signing import ForkData, SigningData
from evm_light_client.subspecs.containers.slot import Slot
from evm_light_client.subspecs.ssz.hash import hash_tree_root
from evm_light_client.types import Bytes4, Bytes32, SSZType


def compute_fork_data_root(current_version: Bytes4, genesis_validators_root: Bytes32) -> Bytes32:
    """Root of the `ForkData` binding a fork version to one chain."""
    return hash_tree_root(
        ForkData(current_version=current_version, genesis_validators_root=genesis_validators_root)
    )


def compute_domain(
    domain_type: Bytes4, fork_version: Bytes4, genesis_validators_root: Bytes32
) -> Bytes32:
    """The domain type followed by the first 28 bytes of the fork data root."""
    fork_data_root = compute_fork_data_root(fork_version, genesis_validators_root)
    return Bytes32(bytes(domain_type) + bytes(fork_data_root)[:28])


def compute_signing_root(ssz_object: SSZType, domain: Bytes32) -> Bytes32:
    """Root of the `SigningData` pairing the object's root with `domain`."""
    return hash_tree_root(SigningData(object_root=hash_tree_root(ssz_object), domain=domain))


def compute_sync_committee_domain(config: ChainConfig, signature_slot: Slot) -> Bytes32:
    """
    Domain under which a sync aggregate produced at `signature_slot` was signed.

    Committee members sign the block of the previous slot, so the fork is
    selected from the epoch of `signature_slot - 1` (clamped at slot 0).

    Raises:
        UnknownFork: If that epoch precedes the first scheduled fork.
    """
    signed_slot = Slot(max(int(signature_slot), 1) - 1)
    fork_version = compute_fork_version(config, compute_epoch_at_slot(config, signed_slot))
    return compute_domain(DOMAIN_SYNC_COMMITTEE, fork_version, config.genesis_validators_root)
