"""
Metric registry using prometheus_client.

Provides pre-defined metrics for a light client.
Exposes metrics in Prometheus text format.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Create a dedicated registry for light client metrics.
#
# Using a dedicated registry avoids pollution from default Python process metrics.
REGISTRY = CollectorRegistry()

# -----------------------------------------------------------------------------
# Store
# -----------------------------------------------------------------------------

finalized_slot = Gauge(
    "light_client_finalized_slot",
    "Slot of the finalized header",
    registry=REGISTRY,
)

optimistic_slot = Gauge(
    "light_client_optimistic_slot",
    "Slot of the optimistic header",
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Updates
# -----------------------------------------------------------------------------

updates_accepted = Counter(
    "light_client_updates_accepted_total",
    "Accepted updates by outcome",
    ["outcome"],
    registry=REGISTRY,
)

updates_rejected = Counter(
    "light_client_updates_rejected_total",
    "Rejected updates by error",
    ["reason"],
    registry=REGISTRY,
)

update_processing_time = Histogram(
    "light_client_update_processing_seconds",
    "Update validation and application duration",
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """Render every registered metric in Prometheus text format."""
    return generate_latest(REGISTRY)
