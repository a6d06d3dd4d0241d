"""
Header and block authentication by parent-root backfill.

A header fetched from upstream is only served once it is linked to a
finalized header by hashes:

1. If the cache holds a trusted header at the slot, that header is served.
2. Otherwise the walk starts at the nearest trusted header above the slot and
   follows `parent_root` links downward, fetching one header per step. Every
   fetched header must hash to the parent root its child committed to.

Empty slots are claims by the upstream too. A slot reported empty is only
accepted as empty once a lower header proves that the chain skipped it.

A block is authenticated through its header: the block is fetched only after
the header at its slot is trusted, and the header rebuilt from the block,
whose `body_root` covers the full fork body, must hash to the same root.

Depth Limiting
--------------
The walk is bounded by MAX_BACKFILL_DEPTH requests. A slot further from any
trusted header is reported as `NotCached` rather than fetched indefinitely.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from evm_light_client.errors import NotCached, UnverifiedSlot, UpstreamUnavailable
from evm_light_client.subspecs.containers import BeaconBlock, BeaconBlockHeader, Slot
from evm_light_client.subspecs.ssz.hash import hash_tree_root

from .config import MAX_BACKFILL_DEPTH, REQUEST_TIMEOUT
from .header_cache import CachedHeader, HeaderCache
from .upstream import UpdateSource, with_timeout

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BlockAuthenticator:
    """Fetches headers and blocks from upstream and authenticates them against cached headers."""

    upstream: UpdateSource
    """Untrusted header and block source."""

    cache: HeaderCache
    """Trusted headers to authenticate against; authenticated data lands here."""

    timeout: float = REQUEST_TIMEOUT
    """Per-request timeout in seconds."""

    max_depth: int = MAX_BACKFILL_DEPTH
    """Maximum number of header requests per authentication."""

    async def _fetch_header(self, slot: Slot) -> BeaconBlockHeader | None:
        return await with_timeout(
            self.upstream.get_header(slot), self.timeout, f"header at slot {slot}"
        )

    async def _fetch_block(self, slot: Slot) -> BeaconBlock | None:
        return await with_timeout(self.upstream.get_block(slot), self.timeout, f"block at slot {slot}")

    async def fetch_header(self, slot: Slot, finalized_slot: Slot) -> BeaconBlockHeader:
        """
        Return the authenticated header at `slot`.

        The caller guarantees `slot <= finalized_slot`.

        Raises:
            UnverifiedSlot: If a fetched header does not match the trusted chain.
            NotCached: If the slot is empty, or no trusted header is close enough.
            UpstreamUnavailable: If the upstream fails or times out.
        """
        return (await self._trusted_header(slot, finalized_slot)).header

    async def fetch_block(self, slot: Slot, finalized_slot: Slot) -> BeaconBlock:
        """
        Return the authenticated block at `slot`.

        Raises:
            UnverifiedSlot: If the block does not hash to the trusted header.
            NotCached: If the slot is empty, or no trusted header is close enough.
            UpstreamUnavailable: If the upstream fails, times out, or withholds
                a block whose header it served.
        """
        cached = self.cache.get_block(slot)
        if cached is not None:
            return cached

        anchor = await self._trusted_header(slot, finalized_slot)
        block = await self._fetch_block(slot)
        if block is None:
            raise UpstreamUnavailable(f"Upstream has no block at slot {slot} despite its header")
        root = hash_tree_root(block.header())
        if root != anchor.root:
            raise UnverifiedSlot(
                f"Block at slot {slot} has root 0x{root.hex()}, "
                f"trusted header has 0x{anchor.root.hex()}"
            )
        self.cache.add_block(block)
        return block

    async def _trusted_header(self, slot: Slot, finalized_slot: Slot) -> CachedHeader:
        cached = self.cache.get_header(slot)
        if cached is not None:
            return cached
        return await self._backfill(slot, finalized_slot)

    async def _backfill(self, slot: Slot, finalized_slot: Slot) -> CachedHeader:
        anchor = self.cache.nearest_header_above(slot, finalized_slot)
        if anchor is None:
            raise NotCached(f"No trusted header above slot {slot} to authenticate against")
        if int(anchor.header.slot) - int(slot) > self.max_depth:
            raise NotCached(
                f"Slot {slot} is {int(anchor.header.slot) - int(slot)} slots below the nearest "
                f"trusted header, beyond the backfill limit of {self.max_depth}"
            )

        logger.debug("Backfilling from slot %s down to slot %s", anchor.header.slot, slot)
        expected_root = anchor.header.parent_root
        current = int(anchor.header.slot) - 1
        requests = 0
        while current >= 0 and requests < self.max_depth:
            header = await self._fetch_header(Slot(current))
            requests += 1
            if header is None:
                current -= 1
                continue

            root = hash_tree_root(header)
            if root != expected_root:
                raise UnverifiedSlot(
                    f"Header at slot {current} has root 0x{root.hex()}, "
                    f"but its child commits to parent 0x{expected_root.hex()}"
                )
            entry = self.cache.add_header(header)

            # The root matched, so the header's own slot is authentic.
            if int(header.slot) == int(slot):
                return entry
            if int(header.slot) < int(slot):
                # The chain skipped the requested slot.
                raise NotCached(f"Slot {slot} is empty")
            expected_root = header.parent_root
            current = min(current, int(header.slot)) - 1

        raise NotCached(f"Could not link slot {slot} to a trusted header")
