"""
Update validation.

Validation is a pure function of the store and the update: it either raises
or returns an `UpdateDecision` describing what applying the update would
change. It never touches the store, so a rejected update leaves the store
exactly as it was.

The checks run in a fixed order:

1. Structure: `finalized <= attested < signature_slot <= current_slot`.
2. Finality proof: a present finalized header must be proven by the
   attested state root.
3. Committee: the committee of the signature slot's period must be known,
   and a claimed next committee must be proven by the attested state root.
4. Signature: enough members of that committee must have signed the
   attested header under the fork's sync committee domain.
5. Consistency: a proven next committee must match the one already held.
6. Freshness: the update must carry a newer attested header or a strictly
   newer finalized header.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from evm_light_client.errors import (
    InvalidCommitteeProof,
    InvalidFinalityProof,
    MalformedUpdate,
    MissingCommitteeForPeriod,
    Stale,
)
from evm_light_client.subspecs.chain.clock import (
    compute_epoch_at_slot,
    compute_sync_committee_period_at_slot,
)
from evm_light_client.subspecs.chain.config import ChainConfig
from evm_light_client.subspecs.chain.forks import compute_fork_spec
from evm_light_client.subspecs.containers import LightClientUpdate, Slot, SyncCommittee
from evm_light_client.subspecs.signing import (
    compute_signing_root,
    compute_sync_committee_domain,
    verify_sync_aggregate,
)
from evm_light_client.subspecs.ssz import hash_tree_root, is_valid_merkle_branch

from .store import LightClientStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UpdateDecision:
    """A validated update and the store changes it entails."""

    update: LightClientUpdate
    """The update, exactly as validated."""

    participants: int
    """Number of committee members that signed."""

    advances_optimistic: bool
    """The attested header is newer than the store's optimistic header."""

    advances_finalized: bool
    """The update carries a finalized header newer than the store's."""


def _select_committee(
    config: ChainConfig, store: LightClientStore, signature_slot: Slot
) -> SyncCommittee:
    """Committee expected to sign at `signature_slot`."""
    store_period = store.finalized_period(config)
    signature_period = compute_sync_committee_period_at_slot(config, signature_slot)

    if signature_period == store_period:
        return store.current_sync_committee
    if signature_period == int(store_period) + 1:
        if not store.has_next_sync_committee:
            raise MissingCommitteeForPeriod(
                f"Update signed in period {signature_period}, "
                f"but the committee for that period is not known yet"
            )
        return store.next_sync_committee.value
    raise MissingCommitteeForPeriod(
        f"Update signed in period {signature_period}; store only covers "
        f"periods {store_period} and {int(store_period) + 1}"
    )


def verify_update_proofs_and_signature(
    config: ChainConfig, store: LightClientStore, update: LightClientUpdate
) -> None:
    """
    Check the proofs and the committee signature of `update`.

    These checks depend only on the update and on the committees of `store`,
    so they also re-verify an update stored earlier, such as a persisted
    best pending update.

    Raises:
        UnknownFork: If the attested header predates the first fork.
        InvalidFinalityProof: If the finalized header is not proven.
        MissingCommitteeForPeriod: If the signing committee is not known.
        InvalidCommitteeProof: If the next committee is not proven.
        InsufficientParticipation: If too few members signed.
        InvalidSignature: If the aggregate signature does not verify.
    """
    attested = update.attested_header
    spec = compute_fork_spec(config, compute_epoch_at_slot(config, attested.slot))

    # Finality proof.
    if update.has_finalized_header and not is_valid_merkle_branch(
        hash_tree_root(update.finalized_header),
        update.finality_branch,
        spec.finalized_root_gindex,
        attested.state_root,
    ):
        raise InvalidFinalityProof(
            f"Finalized header at slot {update.finalized_header.slot} is not proven "
            f"by the state of attested slot {attested.slot}"
        )

    # Committee.
    committee = _select_committee(config, store, update.signature_slot)

    if update.has_next_sync_committee and not is_valid_merkle_branch(
        hash_tree_root(update.next_sync_committee),
        update.next_sync_committee_branch,
        spec.next_sync_committee_gindex,
        attested.state_root,
    ):
        raise InvalidCommitteeProof(
            f"Next sync committee is not proven by the state of attested slot {attested.slot}"
        )

    # Signature.
    domain = compute_sync_committee_domain(config, update.signature_slot)
    verify_sync_aggregate(
        update.sync_aggregate,
        compute_signing_root(attested, domain),
        committee,
        config.signature_threshold,
        config.min_sync_committee_participants,
    )


def validate_light_client_update(
    config: ChainConfig,
    store: LightClientStore,
    update: LightClientUpdate,
    current_slot: Slot,
) -> UpdateDecision:
    """
    Validate `update` against `store`.

    Raises:
        MalformedUpdate: If the slots of the update are inconsistent.
        UnknownFork: If the attested header predates the first fork.
        InvalidFinalityProof: If the finalized header is not proven.
        MissingCommitteeForPeriod: If the signing committee is not known.
        InvalidCommitteeProof: If the next committee is not proven, or
            contradicts the next committee the store already holds.
        InsufficientParticipation: If too few members signed.
        InvalidSignature: If the aggregate signature does not verify.
        Stale: If the update carries nothing new.
    """
    attested = update.attested_header
    signature_slot = update.signature_slot

    # Structure.
    if not signature_slot > attested.slot:
        raise MalformedUpdate(
            f"Signature slot {signature_slot} must be after attested slot {attested.slot}"
        )
    if signature_slot > current_slot:
        raise MalformedUpdate(
            f"Signature slot {signature_slot} is in the future (current slot {current_slot})"
        )
    if update.has_finalized_header and update.finalized_header.slot > attested.slot:
        raise MalformedUpdate(
            f"Finalized slot {update.finalized_header.slot} is after attested slot {attested.slot}"
        )

    verify_update_proofs_and_signature(config, store, update)

    # A proven next committee must still agree with the one already held.
    attested_period = compute_sync_committee_period_at_slot(config, attested.slot)
    if (
        update.has_next_sync_committee
        and store.has_next_sync_committee
        and attested_period == store.finalized_period(config)
        and update.next_sync_committee != store.next_sync_committee.value
    ):
        raise InvalidCommitteeProof(
            f"Next sync committee for period {int(attested_period) + 1} "
            f"contradicts the one already known"
        )

    # Freshness.
    advances_optimistic = attested.slot > store.optimistic_header.slot
    advances_finalized = (
        update.has_finalized_header
        and update.finalized_header.slot > store.finalized_header.slot
    )
    if not (advances_optimistic or advances_finalized):
        raise Stale(
            f"Attested slot {attested.slot} is not after optimistic slot "
            f"{store.optimistic_header.slot} and finality does not improve"
        )

    return UpdateDecision(
        update=update,
        participants=update.sync_aggregate.num_participants(),
        advances_optimistic=advances_optimistic,
        advances_finalized=advances_finalized,
    )
