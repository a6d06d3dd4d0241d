"""
Sync configuration constants.

Operational limits for serving headers and blocks and for talking to the
upstream node. None of them affects what the light client trusts.
"""

from __future__ import annotations

from typing import Final

REQUEST_TIMEOUT: Final[float] = 10.0
"""Timeout for a single upstream request, in seconds."""

MAX_CACHED_HEADERS: Final[int] = 1024
"""Maximum finalized or authenticated headers held in the cache."""

MAX_CACHED_BLOCKS: Final[int] = 256
"""Maximum authenticated blocks held in the cache."""

MAX_BACKFILL_DEPTH: Final[int] = 64
"""Maximum number of parent links followed to authenticate an uncached block."""
