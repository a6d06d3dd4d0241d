"""
Sync committee signature verification.

Two checks guard every header the light client accepts:

1. Participation: enough committee members must have signed. This is
   checked first because it is free, while a pairing check is not.
2. Signature: the aggregate BLS signature must verify against the public
   keys of exactly the members whose participation bit is set.

The verifier is pure. It never reads or writes the store.
"""

from __future__ import annotations

import logging

from py_ecc.bls import G2ProofOfPossession as bls

from evm_light_client.errors import InsufficientParticipation, InvalidSignature
from evm_light_client.subspecs.chain.config import Fraction
from evm_light_client.subspecs.containers.sync_committee import SyncAggregate, SyncCommittee
from evm_light_client.types import Bytes32

logger = logging.getLogger(__name__)


def has_sufficient_participation(
    participants: int, committee_size: int, threshold: Fraction, min_participants: int
) -> bool:
    """
    Whether `participants` signers meet the threshold.

    The fraction is compared by cross-multiplication, so no rounding is ever
    involved: 342 of 512 meets 2/3, 341 does not.
    """
    if participants < min_participants:
        return False
    return participants * threshold.denominator >= committee_size * threshold.numerator


def verify_sync_aggregate(
    sync_aggregate: SyncAggregate,
    signing_root: Bytes32,
    committee: SyncCommittee,
    threshold: Fraction,
    min_participants: int = 1,
) -> None:
    """
    Verify a sync aggregate against `committee`.

    Raises:
        InsufficientParticipation: If too few members signed.
        InvalidSignature: If the signature does not verify, or the key or
            signature bytes are not valid curve points.
    """
    bits = sync_aggregate.sync_committee_bits
    participants = bits.count()
    committee_size = len(committee.pubkeys)
    if not has_sufficient_participation(participants, committee_size, threshold, min_participants):
        raise InsufficientParticipation(
            f"{participants} of {committee_size} members signed, "
            f"threshold is {threshold.numerator}/{threshold.denominator} "
            f"and at least {min_participants}"
        )

    pubkeys = [bytes(committee.pubkeys[i]) for i in bits.set_indices()]
    signature = bytes(sync_aggregate.sync_committee_signature)

    # py_ecc reports most malformed input as False, but point decoding can
    # still raise for some byte patterns.
    try:
        valid = bls.FastAggregateVerify(pubkeys, bytes(signing_root), signature)
    except (ValueError, TypeError, AssertionError) as e:
        raise InvalidSignature(f"Malformed key or signature: {e}") from e
    if not valid:
        raise InvalidSignature(
            f"Aggregate signature of {participants} members does not verify "
            f"over signing root 0x{signing_root.hex()}"
        )
    logger.debug("Verified sync aggregate with %d of %d participants", participants, committee_size)
