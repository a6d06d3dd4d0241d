"""
Light client protocol messages.

Updates follow the Beacon API convention for optional parts: the next sync
committee and the finalized header are always present on the wire, and an
empty or all-zero branch marks them as absent.
"""

from __future__ import annotations

from typing import Final

from evm_light_client.types import Bytes32, Bytes48, Container, SSZList

from .header import BeaconBlockHeader
from .slot import Slot
from .sync_committee import SyncAggregate, SyncCommittee, SyncCommitteePubkeys

MAX_BRANCH_DEPTH: Final[int] = 8
"""Deepest branch any supported fork uses (Electra finality proofs are 7 deep)."""


class MerkleBranch(SSZList[Bytes32]):
    """Sibling hashes linking a leaf to a state root, deepest first."""

    ELEMENT_TYPE = Bytes32
    LIMIT = MAX_BRANCH_DEPTH

    def is_empty(self) -> bool:
        """True when the branch carries no proof (no entries, or only zero hashes)."""
        return all(node == Bytes32.zero() for node in self.data)


def empty_sync_committee() -> SyncCommittee:
    """The all-zero committee, used where the protocol encodes an absent committee."""
    return SyncCommittee(
        pubkeys=SyncCommitteePubkeys(data=[Bytes48.zero()] * SyncCommitteePubkeys.LENGTH),
        aggregate_pubkey=Bytes48.zero(),
    )


class LightClientBootstrap(Container):
    """A trusted header and the committee proven against its state, used to seed the store."""

    header: BeaconBlockHeader
    """The trusted header, usually a recent finalized checkpoint block."""

    current_sync_committee: SyncCommittee
    """The committee active in the header's period."""

    current_sync_committee_branch: MerkleBranch
    """Proof of the committee against `header.state_root`."""


class LightClientUpdate(Container):
    """An attested header, optional finality and committee proofs, and the committee signature."""

    attested_header: BeaconBlockHeader
    """The header the sync committee signed."""

    next_sync_committee: SyncCommittee
    """The committee of the next period, proven against the attested state."""

    next_sync_committee_branch: MerkleBranch
    """Proof of `next_sync_committee`; empty when the update carries no committee."""

    finalized_header: BeaconBlockHeader
    """The finalized header recorded in the attested state."""

    finality_branch: MerkleBranch
    """Proof of `finalized_header`; empty when the update carries no finality."""

    sync_aggregate: SyncAggregate
    """Participation bits and aggregate signature."""

    signature_slot: Slot
    """Slot at which the aggregate signature was produced."""

    @property
    def has_next_sync_committee(self) -> bool:
        return not self.next_sync_committee_branch.is_empty()

    @property
    def has_finalized_header(self) -> bool:
        return not self.finality_branch.is_empty()
