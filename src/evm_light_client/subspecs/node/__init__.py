"""The light client service: one store, its upstream, cache and storage."""

from .client import MAX_SYNC_PERIODS, LightClient

__all__ = [
    "LightClient",
    "MAX_SYNC_PERIODS",
]
