"""Sync committee containers."""

from __future__ import annotations

from evm_light_client.config import SYNC_COMMITTEE_SIZE
from evm_light_client.types import BaseBitvector, Bytes48, Bytes96, Container, SSZVector

BLSPubkey = Bytes48
"""A compressed BLS12-381 G1 public key."""

BLSSignature = Bytes96
"""A compressed BLS12-381 G2 signature."""


class SyncCommitteePubkeys(SSZVector[Bytes48]):
    """The ordered public keys of the committee members."""

    ELEMENT_TYPE = Bytes48
    LENGTH = SYNC_COMMITTEE_SIZE


class SyncCommitteeBits(BaseBitvector):
    """Participation bitfield: bit i is set when member i signed."""

    LENGTH = SYNC_COMMITTEE_SIZE


class SyncCommittee(Container):
    """
    The validators that sign light client headers for one period.

    A committee is valid for exactly one sync committee period and is
    identified by its hash tree root, which is what Merkle proofs commit to.
    """

    pubkeys: SyncCommitteePubkeys
    """Member public keys in committee order."""

    aggregate_pubkey: Bytes48
    """Sum of all member public keys."""


class SyncAggregate(Container):
    """Which committee members signed, and their combined signature."""

    sync_committee_bits: SyncCommitteeBits
    """Participation bitfield."""

    sync_committee_signature: Bytes96
    """Aggregate BLS signature of the participating members."""

    def num_participants(self) -> int:
        """Number of members whose bit is set."""
        return self.sync_committee_bits.count()
