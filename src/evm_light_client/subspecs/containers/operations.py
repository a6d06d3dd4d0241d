"""
Consensus operations carried in block bodies.

The light client never processes these: it only needs their exact SSZ
shape, because the body root a header commits to covers every one of them.
Electra widened attestations to span every committee of a slot, so it gets
its own attestation and attester slashing types.
"""

from __future__ import annotations

from typing import Final

from evm_light_client.config import MAX_COMMITTEES_PER_SLOT
from evm_light_client.types import (
    BaseBitlist,
    BaseBitvector,
    Bytes20,
    Bytes32,
    Bytes48,
    Bytes96,
    Container,
    SSZList,
    SSZVector,
    Uint64,
)

from .header import BeaconBlockHeader
from .slot import Epoch, Slot, ValidatorIndex

MAX_VALIDATORS_PER_COMMITTEE: Final[int] = 2048
"""Largest beacon committee."""

DEPOSIT_CONTRACT_TREE_DEPTH: Final[int] = 32
"""Depth of the deposit contract Merkle tree."""

MAX_PROPOSER_SLASHINGS: Final[int] = 16
MAX_ATTESTER_SLASHINGS: Final[int] = 2
MAX_ATTESTATIONS: Final[int] = 128
MAX_DEPOSITS: Final[int] = 16
MAX_VOLUNTARY_EXITS: Final[int] = 16
MAX_BLS_TO_EXECUTION_CHANGES: Final[int] = 16
MAX_ATTESTER_SLASHINGS_ELECTRA: Final[int] = 1
MAX_ATTESTATIONS_ELECTRA: Final[int] = 8


class Eth1Data(Container):
    """The proposer's vote on the deposit contract state."""

    deposit_root: Bytes32
    deposit_count: Uint64
    block_hash: Bytes32


class Checkpoint(Container):
    """An epoch boundary block."""

    epoch: Epoch
    root: Bytes32


class AttestationData(Container):
    """What an attester votes for."""

    slot: Slot
    index: Uint64
    beacon_block_root: Bytes32
    source: Checkpoint
    target: Checkpoint


# -----------------------------------------------------------------------------
# Slashings
# -----------------------------------------------------------------------------


class SignedBeaconBlockHeader(Container):
    """A header with its proposer signature."""

    message: BeaconBlockHeader
    signature: Bytes96


class ProposerSlashing(Container):
    """Two conflicting headers signed by the same proposer."""

    signed_header_1: SignedBeaconBlockHeader
    signed_header_2: SignedBeaconBlockHeader


class AttestingIndices(SSZList[ValidatorIndex]):
    """Validators behind an indexed attestation, before Electra."""

    ELEMENT_TYPE = ValidatorIndex
    LIMIT = MAX_VALIDATORS_PER_COMMITTEE


class IndexedAttestation(Container):
    """An attestation with its attesters listed by index."""

    attesting_indices: AttestingIndices
    data: AttestationData
    signature: Bytes96


class AttesterSlashing(Container):
    """Two conflicting attestations sharing attesters."""

    attestation_1: IndexedAttestation
    attestation_2: IndexedAttestation


class ElectraAttestingIndices(SSZList[ValidatorIndex]):
    """Validators behind an indexed attestation, across every committee of a slot."""

    ELEMENT_TYPE = ValidatorIndex
    LIMIT = MAX_VALIDATORS_PER_COMMITTEE * MAX_COMMITTEES_PER_SLOT


class ElectraIndexedAttestation(Container):
    """An Electra attestation with its attesters listed by index."""

    attesting_indices: ElectraAttestingIndices
    data: AttestationData
    signature: Bytes96


class ElectraAttesterSlashing(Container):
    """Two conflicting Electra attestations sharing attesters."""

    attestation_1: ElectraIndexedAttestation
    attestation_2: ElectraIndexedAttestation


# -----------------------------------------------------------------------------
# Attestations
# -----------------------------------------------------------------------------


class AggregationBits(BaseBitlist):
    """Which members of one committee attested."""

    LIMIT = MAX_VALIDATORS_PER_COMMITTEE


class Attestation(Container):
    """An aggregate attestation of one committee."""

    aggregation_bits: AggregationBits
    data: AttestationData
    signature: Bytes96


class ElectraAggregationBits(BaseBitlist):
    """Which members of the included committees attested, committee after committee."""

    LIMIT = MAX_VALIDATORS_PER_COMMITTEE * MAX_COMMITTEES_PER_SLOT


class CommitteeBits(BaseBitvector):
    """Which committees of the slot an Electra attestation includes."""

    LENGTH = MAX_COMMITTEES_PER_SLOT


class ElectraAttestation(Container):
    """An aggregate attestation spanning several committees of a slot."""

    aggregation_bits: ElectraAggregationBits
    data: AttestationData
    signature: Bytes96
    committee_bits: CommitteeBits


# -----------------------------------------------------------------------------
# Deposits, exits and credential changes
# -----------------------------------------------------------------------------


class DepositProof(SSZVector[Bytes32]):
    """Branch of a deposit in the deposit contract tree, plus the length mix-in."""

    ELEMENT_TYPE = Bytes32
    LENGTH = DEPOSIT_CONTRACT_TREE_DEPTH + 1


class DepositData(Container):
    """A deposit as logged by the deposit contract."""

    pubkey: Bytes48
    withdrawal_credentials: Bytes32
    amount: Uint64
    signature: Bytes96


class Deposit(Container):
    """A deposit with its inclusion proof."""

    proof: DepositProof
    data: DepositData


class VoluntaryExit(Container):
    """A validator's request to leave."""

    epoch: Epoch
    validator_index: ValidatorIndex


class SignedVoluntaryExit(Container):
    """A voluntary exit with the validator's signature."""

    message: VoluntaryExit
    signature: Bytes96


class BLSToExecutionChange(Container):
    """Switch of a validator's withdrawal credentials to an execution address."""

    validator_index: ValidatorIndex
    from_bls_pubkey: Bytes48
    to_execution_address: Bytes20


class SignedBLSToExecutionChange(Container):
    """A credential change with the withdrawal key's signature."""

    message: BLSToExecutionChange
    signature: Bytes96


# -----------------------------------------------------------------------------
# Body lists
# -----------------------------------------------------------------------------


class ProposerSlashings(SSZList[ProposerSlashing]):
    ELEMENT_TYPE = ProposerSlashing
    LIMIT = MAX_PROPOSER_SLASHINGS


class AttesterSlashings(SSZList[AttesterSlashing]):
    ELEMENT_TYPE = AttesterSlashing
    LIMIT = MAX_ATTESTER_SLASHINGS


class ElectraAttesterSlashings(SSZList[ElectraAttesterSlashing]):
    ELEMENT_TYPE = ElectraAttesterSlashing
    LIMIT = MAX_ATTESTER_SLASHINGS_ELECTRA


class Attestations(SSZList[Attestation]):
    ELEMENT_TYPE = Attestation
    LIMIT = MAX_ATTESTATIONS


class ElectraAttestations(SSZList[ElectraAttestation]):
    ELEMENT_TYPE = ElectraAttestation
    LIMIT = MAX_ATTESTATIONS_ELECTRA


class Deposits(SSZList[Deposit]):
    ELEMENT_TYPE = Deposit
    LIMIT = MAX_DEPOSITS


class VoluntaryExits(SSZList[SignedVoluntaryExit]):
    ELEMENT_TYPE = SignedVoluntaryExit
    LIMIT = MAX_VOLUNTARY_EXITS


class BLSToExecutionChanges(SSZList[SignedBLSToExecutionChange]):
    ELEMENT_TYPE = SignedBLSToExecutionChange
    LIMIT = MAX_BLS_TO_EXECUTION_CHANGES
