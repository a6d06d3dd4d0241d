"""
Header and block cache.

The cache only ever holds data that is already trusted: finalized headers
the store accepted, and blocks or headers authenticated against them. It is
an accelerator, never a source of truth. Every entry can be rebuilt by
re-fetching and re-authenticating, so eviction never affects correctness.

Memory Safety
-------------
Both maps are bounded (`MAX_CACHED_HEADERS`, `MAX_CACHED_BLOCKS`). When a map
is full the least recently used entry is evicted.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field

from evm_light_client.subspecs.containers import BeaconBlock, BeaconBlockHeader, Slot
from evm_light_client.subspecs.ssz.hash import hash_tree_root
from evm_light_client.types import Bytes32

from .config import MAX_CACHED_BLOCKS, MAX_CACHED_HEADERS

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CachedHeader:
    """A trusted header with its root, computed once at insertion."""

    header: BeaconBlockHeader
    """The header."""

    root: Bytes32
    """Hash tree root of the header, which identifies the block."""


@dataclass(slots=True)
class HeaderCache:
    """Slot-indexed LRU maps of trusted headers and blocks."""

    max_headers: int = MAX_CACHED_HEADERS
    """Header capacity."""

    max_blocks: int = MAX_CACHED_BLOCKS
    """Block capacity."""

    _headers: OrderedDict[Slot, CachedHeader] = field(default_factory=OrderedDict)
    """Headers, least recently used first."""

    _blocks: OrderedDict[Slot, BeaconBlock] = field(default_factory=OrderedDict)
    """Blocks, least recently used first."""

    def __len__(self) -> int:
        """Return the number of cached headers."""
        return len(self._headers)

    def __contains__(self, slot: Slot) -> bool:
        """Check if a header is cached for `slot`."""
        return slot in self._headers

    def add_header(self, header: BeaconBlockHeader) -> CachedHeader:
        """Cache a trusted header, evicting the least recently used one if full."""
        slot = header.slot
        if slot in self._headers:
            self._headers.move_to_end(slot)
            return self._headers[slot]

        while len(self._headers) >= self.max_headers:
            evicted, _ = self._headers.popitem(last=False)
            logger.debug("Evicted cached header at slot %s", evicted)

        entry = CachedHeader(header=header, root=hash_tree_root(header))
        self._headers[slot] = entry
        return entry

    def get_header(self, slot: Slot) -> CachedHeader | None:
        """Return the cached header at `slot`, marking it recently used."""
        entry = self._headers.get(slot)
        if entry is not None:
            self._headers.move_to_end(slot)
        return entry

    def add_block(self, block: BeaconBlock) -> None:
        """Cache an authenticated block and its header."""
        slot = block.slot
        if slot in self._blocks:
            self._blocks.move_to_end(slot)
        else:
            while len(self._blocks) >= self.max_blocks:
                evicted, _ = self._blocks.popitem(last=False)
                logger.debug("Evicted cached block at slot %s", evicted)
            self._blocks[slot] = block
        self.add_header(block.header())

    def get_block(self, slot: Slot) -> BeaconBlock | None:
        """Return the cached block at `slot`, marking it recently used."""
        block = self._blocks.get(slot)
        if block is not None:
            self._blocks.move_to_end(slot)
        return block

    def nearest_header_above(self, slot: Slot, limit: Slot) -> CachedHeader | None:
        """
        Return the cached header with the smallest slot in `(slot, limit]`.

        This is the anchor from which an uncached slot can be authenticated by
        walking parent links downward.
        """
        candidates = [s for s in self._headers if slot < s <= limit]
        if not candidates:
            return None
        return self.get_header(min(candidates))

    def clear(self) -> None:
        """Drop every entry, as when the store is replaced."""
        self._headers.clear()
        self._blocks.clear()
