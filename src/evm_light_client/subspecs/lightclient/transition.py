"""
The single point where the light client store changes.

`apply_light_client_update` turns a validated decision into a new store.
`force_update` promotes the best pending update when finality has stalled
for a whole sync committee period, so a light client is not stuck forever
on a chain that temporarily stops finalizing.
"""

from __future__ import annotations

import logging

from evm_light_client.errors import MissingCommitteeForPeriod
from evm_light_client.subspecs.chain.clock import compute_sync_committee_period_at_slot
from evm_light_client.subspecs.chain.config import ChainConfig
from evm_light_client.subspecs.containers import LightClientUpdate, Slot
from evm_light_client.types import Boolean

from .states import UpdateOutcome
from .store import (
    CommitteeProof,
    LightClientStore,
    OptionalCommitteeProof,
    OptionalLightClientUpdate,
    OptionalSyncCommittee,
)
from .validation import UpdateDecision, validate_light_client_update

logger = logging.getLogger(__name__)


def is_better_update(new_update: LightClientUpdate, old_update: LightClientUpdate) -> bool:
    """More signers wins; on a tie the newer attested header wins."""
    new_participants = new_update.sync_aggregate.num_participants()
    old_participants = old_update.sync_aggregate.num_participants()
    if new_participants != old_participants:
        return new_participants > old_participants
    return new_update.attested_header.slot > old_update.attested_header.slot


def apply_light_client_update(
    config: ChainConfig, store: LightClientStore, decision: UpdateDecision
) -> tuple[LightClientStore, UpdateOutcome]:
    """
    Apply a validated update and return the new store with the outcome.

    Raises:
        MissingCommitteeForPeriod: If finality enters the next period while
            the next committee is unknown.
    """
    update = decision.update
    store_period = store.finalized_period(config)

    finalized_header = store.finalized_header
    current_committee = store.current_sync_committee
    current_proof = store.current_sync_committee_proof
    next_committee = store.next_sync_committee
    next_proof = store.next_sync_committee_proof
    best_valid_update = store.best_valid_update

    if decision.advances_finalized:
        finalized_header = update.finalized_header
        finalized_period = compute_sync_committee_period_at_slot(config, finalized_header.slot)
        if finalized_period != store_period:
            if not store.has_next_sync_committee:
                raise MissingCommitteeForPeriod(
                    f"Finality entered period {finalized_period} without its committee"
                )
            current_committee = next_committee.value
            current_proof = next_proof.value
            next_committee = OptionalSyncCommittee()
            next_proof = OptionalCommitteeProof()
            logger.info("Rotated sync committees into period %s", finalized_period)
        best_valid_update = OptionalLightClientUpdate()
    elif best_valid_update.selected_type is None or is_better_update(
        update, best_valid_update.value
    ):
        best_valid_update = OptionalLightClientUpdate.some(update)

    # A committee for the period after the new finalized one, proven by a
    # state in the finalized period, is installed once.
    if (
        next_committee.selected_type is None
        and update.has_next_sync_committee
        and compute_sync_committee_period_at_slot(config, update.attested_header.slot)
        == compute_sync_committee_period_at_slot(config, finalized_header.slot)
    ):
        next_committee = OptionalSyncCommittee.some(update.next_sync_committee)
        next_proof = OptionalCommitteeProof.some(
            CommitteeProof(
                header=update.attested_header,
                branch=update.next_sync_committee_branch,
                is_next=Boolean(True),
            )
        )
        logger.info(
            "Learned next sync committee from attested slot %s", update.attested_header.slot
        )

    optimistic_header = (
        update.attested_header if decision.advances_optimistic else store.optimistic_header
    )

    new_store = store.replace(
        finalized_header=finalized_header,
        optimistic_header=optimistic_header,
        current_sync_committee=current_committee,
        current_sync_committee_proof=current_proof,
        next_sync_committee=next_committee,
        next_sync_committee_proof=next_proof,
        best_valid_update=best_valid_update,
    )
    new_store.check_invariants(config)

    if decision.advances_finalized:
        logger.info("Finalized header advanced to slot %s", finalized_header.slot)
        return new_store, UpdateOutcome.ADVANCED_FINALIZED
    if decision.advances_optimistic:
        logger.info("Optimistic header advanced to slot %s", optimistic_header.slot)
        return new_store, UpdateOutcome.ADVANCED_OPTIMISTIC
    return new_store, UpdateOutcome.ACCEPTED_NO_CHANGE


def process_light_client_update(
    config: ChainConfig,
    store: LightClientStore,
    update: LightClientUpdate,
    current_slot: Slot,
) -> tuple[LightClientStore, UpdateOutcome]:
    """Validate `update` and apply it."""
    decision = validate_light_client_update(config, store, update, current_slot)
    return apply_light_client_update(config, store, decision)


def force_update(
    config: ChainConfig, store: LightClientStore, current_slot: Slot
) -> tuple[LightClientStore, UpdateOutcome]:
    """
    Promote the best pending update once finality has stalled.

    After `update_timeout` slots without a finality advance, the attested
    header of the best pending update is treated as finalized. That update
    was fully validated when it was accepted, and again when a persisted store
    was loaded. Finality has not moved since, so the committee context it was
    checked against still holds.
    """
    if store.best_valid_update.selected_type is None:
        return store, UpdateOutcome.ACCEPTED_NO_CHANGE
    if int(current_slot) <= int(store.finalized_header.slot) + int(config.update_timeout):
        return store, UpdateOutcome.ACCEPTED_NO_CHANGE

    update: LightClientUpdate = store.best_valid_update.value
    if update.finalized_header.slot <= store.finalized_header.slot or not update.has_finalized_header:
        update = update.replace(finalized_header=update.attested_header)

    logger.warning(
        "Forcing finality to attested slot %s after %s slots without finality",
        update.finalized_header.slot,
        int(current_slot) - int(store.finalized_header.slot),
    )
    decision = UpdateDecision(
        update=update,
        participants=update.sync_aggregate.num_participants(),
        advances_optimistic=update.attested_header.slot > store.optimistic_header.slot,
        advances_finalized=update.finalized_header.slot > store.finalized_header.slot,
    )
    return apply_light_client_update(config, store, decision)
