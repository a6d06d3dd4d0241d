"""Specifications for chain parameters, time and the fork schedule."""

from .clock import (
    SlotClock,
    compute_epoch_at_slot,
    compute_start_slot_at_epoch,
    compute_start_slot_at_period,
    compute_sync_committee_period,
    compute_sync_committee_period_at_slot,
    slot_to_timestamp,
    timestamp_to_slot,
)
from .config import (
    ALTAIR_FORK_SPEC,
    DOMAIN_SYNC_COMMITTEE,
    ELECTRA_FORK_SPEC,
    ChainConfig,
    ForkParameter,
    ForkSpec,
    Fraction,
)
from .forks import compute_fork_parameter, compute_fork_spec, compute_fork_version

__all__ = [
    "ALTAIR_FORK_SPEC",
    "ChainConfig",
    "DOMAIN_SYNC_COMMITTEE",
    "ELECTRA_FORK_SPEC",
    "ForkParameter",
    "ForkSpec",
    "Fraction",
    "SlotClock",
    "compute_epoch_at_slot",
    "compute_fork_parameter",
    "compute_fork_spec",
    "compute_fork_version",
    "compute_start_slot_at_epoch",
    "compute_start_slot_at_period",
    "compute_sync_committee_period",
    "compute_sync_committee_period_at_slot",
    "slot_to_timestamp",
    "timestamp_to_slot",
]
