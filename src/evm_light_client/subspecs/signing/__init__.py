"""Signing domains, signing roots and sync committee signature checks."""

from .domain import (
    compute_domain,
    compute_fork_data_root,
    compute_signing_root,
    compute_sync_committee_domain,
)
from .verifier import has_sufficient_participation, verify_sync_aggregate

__all__ = [
    "compute_domain",
    "compute_fork_data_root",
    "compute_signing_root",
    "compute_sync_committee_domain",
    "has_sufficient_participation",
    "verify_sync_aggregate",
]
