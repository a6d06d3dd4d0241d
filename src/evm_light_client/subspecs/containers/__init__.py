"""The container types of the light client protocol."""

from .block import (
    SIGNED_BLOCK_TYPES,
    AltairBeaconBlock,
    BeaconBlock,
    BellatrixBeaconBlock,
    CapellaBeaconBlock,
    DenebBeaconBlock,
    ElectraBeaconBlock,
    SignedDenebBeaconBlock,
)
from .execution import DenebExecutionPayload, ExecutionPayload
from .header import BeaconBlockHeader
from .light_client import (
    MAX_BRANCH_DEPTH,
    LightClientBootstrap,
    LightClientUpdate,
    MerkleBranch,
    empty_sync_committee,
)
from .signing import ForkData, SigningData
from .slot import Epoch, Slot, SyncCommitteePeriod, ValidatorIndex
from .sync_committee import (
    BLSPubkey,
    BLSSignature,
    SyncAggregate,
    SyncCommittee,
    SyncCommitteeBits,
    SyncCommitteePubkeys,
)

__all__ = [
    "BLSPubkey",
    "BLSSignature",
    "AltairBeaconBlock",
    "BeaconBlock",
    "BellatrixBeaconBlock",
    "CapellaBeaconBlock",
    "DenebBeaconBlock",
    "DenebExecutionPayload",
    "ElectraBeaconBlock",
    "ExecutionPayload",
    "SIGNED_BLOCK_TYPES",
    "SignedDenebBeaconBlock",
    "BeaconBlockHeader",
    "Epoch",
    "ForkData",
    "LightClientBootstrap",
    "LightClientUpdate",
    "MAX_BRANCH_DEPTH",
    "MerkleBranch",
    "SigningData",
    "Slot",
    "SyncAggregate",
    "SyncCommittee",
    "SyncCommitteeBits",
    "SyncCommitteePeriod",
    "SyncCommitteePubkeys",
    "ValidatorIndex",
    "empty_sync_committee",
]
