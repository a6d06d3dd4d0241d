"""
Metrics module for observability.

Provides gauges, counters and histograms tracking light client progress.
Exposes metrics in Prometheus text format.
"""

from .registry import (
    REGISTRY,
    finalized_slot,
    generate_metrics,
    optimistic_slot,
    update_processing_time,
    updates_accepted,
    updates_rejected,
)

__all__ = [
    "REGISTRY",
    "finalized_slot",
    "generate_metrics",
    "optimistic_slot",
    "update_processing_time",
    "updates_accepted",
    "updates_rejected",
]
