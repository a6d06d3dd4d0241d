"""Upstream access, header caching and block authentication."""

from .backfill import BlockAuthenticator
from .beacon_api import BeaconApiClient
from .config import MAX_BACKFILL_DEPTH, MAX_CACHED_BLOCKS, MAX_CACHED_HEADERS, REQUEST_TIMEOUT
from .header_cache import CachedHeader, HeaderCache
from .upstream import UpdateSource, with_timeout

__all__ = [
    "BeaconApiClient",
    "BlockAuthenticator",
    "CachedHeader",
    "HeaderCache",
    "MAX_BACKFILL_DEPTH",
    "MAX_CACHED_BLOCKS",
    "MAX_CACHED_HEADERS",
    "REQUEST_TIMEOUT",
    "UpdateSource",
    "with_timeout",
]
