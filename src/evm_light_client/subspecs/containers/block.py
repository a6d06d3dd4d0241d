"""
Beacon block containers for every fork the light client follows.

A header commits to its block through `body_root`, the hash tree root of the
fork's full body. Reproducing that root requires the exact body schema of the
fork, so each fork from Altair on has its own body and block class. Blocks
arrive SSZ encoded and the fork name reported by the node selects the type.
"""

from __future__ import annotations

from evm_light_client.config import MAX_BLOB_COMMITMENTS_PER_BLOCK
from evm_light_client.subspecs.ssz.hash import hash_tree_root
from evm_light_client.types import Bytes32, Bytes48, Bytes96, Container, SSZList

from .execution import (
    CapellaExecutionPayload,
    DenebExecutionPayload,
    ExecutionPayload,
    ExecutionRequests,
)
from .header import BeaconBlockHeader
from .operations import (
    Attestations,
    AttesterSlashings,
    BLSToExecutionChanges,
    Deposits,
    ElectraAttestations,
    ElectraAttesterSlashings,
    Eth1Data,
    ProposerSlashings,
    VoluntaryExits,
)
from .slot import Slot, ValidatorIndex
from .sync_committee import SyncAggregate


class BlobKzgCommitments(SSZList[Bytes48]):
    ELEMENT_TYPE = Bytes48
    LIMIT = MAX_BLOB_COMMITMENTS_PER_BLOCK


class AltairBeaconBlockBody(Container):
    randao_reveal: Bytes96
    eth1_data: Eth1Data
    graffiti: Bytes32
    proposer_slashings: ProposerSlashings
    attester_slashings: AttesterSlashings
    attestations: Attestations
    deposits: Deposits
    voluntary_exits: VoluntaryExits
    sync_aggregate: SyncAggregate


class BellatrixBeaconBlockBody(AltairBeaconBlockBody):
    execution_payload: ExecutionPayload


class CapellaBeaconBlockBody(Container):
    randao_reveal: Bytes96
    eth1_data: Eth1Data
    graffiti: Bytes32
    proposer_slashings: ProposerSlashings
    attester_slashings: AttesterSlashings
    attestations: Attestations
    deposits: Deposits
    voluntary_exits: VoluntaryExits
    sync_aggregate: SyncAggregate
    execution_payload: CapellaExecutionPayload
    bls_to_execution_changes: BLSToExecutionChanges


class DenebBeaconBlockBody(Container):
    randao_reveal: Bytes96
    eth1_data: Eth1Data
    graffiti: Bytes32
    proposer_slashings: ProposerSlashings
    attester_slashings: AttesterSlashings
    attestations: Attestations
    deposits: Deposits
    voluntary_exits: VoluntaryExits
    sync_aggregate: SyncAggregate
    execution_payload: DenebExecutionPayload
    bls_to_execution_changes: BLSToExecutionChanges
    blob_kzg_commitments: BlobKzgCommitments


class ElectraBeaconBlockBody(Container):
    """Electra body: multi-committee attestations and execution layer requests."""

    randao_reveal: Bytes96
    eth1_data: Eth1Data
    graffiti: Bytes32
    proposer_slashings: ProposerSlashings
    attester_slashings: ElectraAttesterSlashings
    attestations: ElectraAttestations
    deposits: Deposits
    voluntary_exits: VoluntaryExits
    sync_aggregate: SyncAggregate
    execution_payload: DenebExecutionPayload
    bls_to_execution_changes: BLSToExecutionChanges
    blob_kzg_commitments: BlobKzgCommitments
    execution_requests: ExecutionRequests


class BeaconBlock(Container):
    """
    Header fields shared by the blocks of every fork.

    Fork subclasses append the `body` field, keeping it last as in the
    consensus schema.
    """

    slot: Slot
    """The slot in which the block was proposed."""

    proposer_index: ValidatorIndex
    """The index of the validator that proposed the block."""

    parent_root: Bytes32
    """The hash tree root of the parent block's header."""

    state_root: Bytes32
    """The hash tree root of the post-state of the block."""

    def header(self) -> BeaconBlockHeader:
        """Return the header committing to this block, whose root identifies the block."""
        return BeaconBlockHeader(
            slot=self.slot,
            proposer_index=self.proposer_index,
            parent_root=self.parent_root,
            state_root=self.state_root,
            body_root=hash_tree_root(self.body),  # type: ignore[attr-defined]
        )

    @property
    def execution_block_number(self) -> int:
        """Number of the execution block carried by this block, 0 before the merge."""
        payload = getattr(self.body, "execution_payload", None)  # type: ignore[attr-defined]
        return 0 if payload is None else int(payload.block_number)

    @property
    def execution_block_hash(self) -> Bytes32:
        """Hash of the execution block carried by this block, zero before the merge."""
        payload = getattr(self.body, "execution_payload", None)  # type: ignore[attr-defined]
        return Bytes32.zero() if payload is None else payload.block_hash


class AltairBeaconBlock(BeaconBlock):
    body: AltairBeaconBlockBody


class BellatrixBeaconBlock(BeaconBlock):
    body: BellatrixBeaconBlockBody


class CapellaBeaconBlock(BeaconBlock):
    body: CapellaBeaconBlockBody


class DenebBeaconBlock(BeaconBlock):
    body: DenebBeaconBlockBody


class ElectraBeaconBlock(BeaconBlock):
    body: ElectraBeaconBlockBody


class SignedAltairBeaconBlock(Container):
    message: AltairBeaconBlock
    signature: Bytes96


class SignedBellatrixBeaconBlock(Container):
    message: BellatrixBeaconBlock
    signature: Bytes96


class SignedCapellaBeaconBlock(Container):
    message: CapellaBeaconBlock
    signature: Bytes96


class SignedDenebBeaconBlock(Container):
    message: DenebBeaconBlock
    signature: Bytes96


class SignedElectraBeaconBlock(Container):
    message: ElectraBeaconBlock
    signature: Bytes96


SIGNED_BLOCK_TYPES: dict[str, type[Container]] = {
    "altair": SignedAltairBeaconBlock,
    "bellatrix": SignedBellatrixBeaconBlock,
    "capella": SignedCapellaBeaconBlock,
    "deneb": SignedDenebBeaconBlock,
    "electra": SignedElectraBeaconBlock,
    # Fulu changed no block container.
    "fulu": SignedElectraBeaconBlock,
}
"""Signed block type by the fork name a node reports in `Eth-Consensus-Version`."""
