"""
Light client store.

The store is the light client's entire view of the chain: two headers and
at most two committees. It is an SSZ container so that it can be persisted
verbatim and checksummed by its hash tree root.
"""

from __future__ import annotations

from evm_light_client.subspecs.chain.clock import (
    compute_epoch_at_slot,
    compute_sync_committee_period_at_slot,
)
from evm_light_client.subspecs.chain.config import ChainConfig
from evm_light_client.subspecs.chain.forks import compute_fork_spec
from evm_light_client.subspecs.containers import (
    BeaconBlockHeader,
    LightClientUpdate,
    MerkleBranch,
    SyncCommittee,
    SyncCommitteePeriod,
)
from evm_light_client.subspecs.ssz import hash_tree_root, is_valid_merkle_branch
from evm_light_client.types import Boolean, Container, SSZUnion


class CommitteeProof(Container):
    """
    Where a stored committee came from.

    The header's state root commits to the committee at the current or the
    next committee index of the header's fork. Keeping the proof lets a
    restored store re-check every committee it trusts.
    """

    header: BeaconBlockHeader
    """Header whose state root the branch proves against."""

    branch: MerkleBranch
    """Branch from the committee root to `header.state_root`."""

    is_next: Boolean
    """True when the committee is the header state's next committee."""

    def valid_period(self, config: ChainConfig) -> SyncCommitteePeriod:
        """The period in which the proven committee signs."""
        period = compute_sync_committee_period_at_slot(config, self.header.slot)
        return SyncCommitteePeriod(int(period) + int(bool(self.is_next)))

    def verify(self, config: ChainConfig, committee: SyncCommittee) -> bool:
        """
        Check `committee` against the header's state root.

        Raises:
            UnknownFork: If the header predates the first scheduled fork.
        """
        spec = compute_fork_spec(config, compute_epoch_at_slot(config, self.header.slot))
        gindex = (
            spec.next_sync_committee_gindex if self.is_next else spec.current_sync_committee_gindex
        )
        return is_valid_merkle_branch(
            hash_tree_root(committee), self.branch, gindex, self.header.state_root
        )


class OptionalSyncCommittee(SSZUnion):
    """A sync committee, or nothing."""

    OPTIONS = (None, SyncCommittee)


class OptionalCommitteeProof(SSZUnion):
    """A committee proof, or nothing."""

    OPTIONS = (None, CommitteeProof)


class OptionalLightClientUpdate(SSZUnion):
    """A light client update, or nothing."""

    OPTIONS = (None, LightClientUpdate)


class LightClientStore(Container):
    """
    The sole source of truth of a light client.

    Invariants:

    - `finalized_header.slot <= optimistic_header.slot`.
    - `current_sync_committee` signs in `period(finalized_header.slot)`.
    - `next_sync_committee`, when present, signs in the following period.
    - A committee is present exactly when its proof is.

    The store is never edited in place. Every accepted update produces a new
    store with `replace`, so a reader holding the old one keeps a consistent
    snapshot.
    """

    finalized_header: BeaconBlockHeader
    """Latest header known to be finalized."""

    optimistic_header: BeaconBlockHeader
    """Latest header signed by a supermajority of the committee."""

    current_sync_committee: SyncCommittee
    """Committee signing in the finalized header's period."""

    current_sync_committee_proof: CommitteeProof
    """Proof of `current_sync_committee`."""

    next_sync_committee: OptionalSyncCommittee
    """Committee signing in the following period, once learned."""

    next_sync_committee_proof: OptionalCommitteeProof
    """Proof of `next_sync_committee`."""

    best_valid_update: OptionalLightClientUpdate
    """Best accepted update since the last finality advance, kept for force updates."""

    def finalized_period(self, config: ChainConfig) -> SyncCommitteePeriod:
        """Sync committee period of the finalized header."""
        return compute_sync_committee_period_at_slot(config, self.finalized_header.slot)

    @property
    def has_next_sync_committee(self) -> bool:
        return self.next_sync_committee.selected_type is not None

    def check_invariants(self, config: ChainConfig) -> None:
        """
        Check header ordering and committee periods.

        Raises:
            ValueError: Describing the first violated invariant.
        """
        if self.finalized_header.slot > self.optimistic_header.slot:
            raise ValueError(
                f"Finalized slot {self.finalized_header.slot} is ahead of "
                f"optimistic slot {self.optimistic_header.slot}"
            )

        period = self.finalized_period(config)
        if self.current_sync_committee_proof.valid_period(config) != period:
            raise ValueError(f"Current sync committee is not valid for period {period}")

        if self.has_next_sync_committee != (self.next_sync_committee_proof.selected_type is not None):
            raise ValueError("Next sync committee and its proof must be present together")
        if self.has_next_sync_committee:
            proof: CommitteeProof = self.next_sync_committee_proof.value
            if proof.valid_period(config) != int(period) + 1:
                raise ValueError(f"Next sync committee is not valid for period {int(period) + 1}")

    def verify_committee_proofs(self, config: ChainConfig) -> None:
        """
        Re-check every stored committee against its proof.

        Raises:
            ValueError: If a committee does not match its proof.
            UnknownFork: If a proof header predates the first scheduled fork.
        """
        if not self.current_sync_committee_proof.verify(config, self.current_sync_committee):
            raise ValueError("Current sync committee does not match its proof")
        if self.has_next_sync_committee:
            proof: CommitteeProof = self.next_sync_committee_proof.value
            if not proof.verify(config, self.next_sync_committee.value):
                raise ValueError("Next sync committee does not match its proof")
