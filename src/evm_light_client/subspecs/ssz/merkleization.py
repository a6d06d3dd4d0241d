"""
Merkleization utilities per SSZ.

Chunks are 32-byte leaves. A list of chunks is padded with zero chunks up to
a power of two (or up to the type's limit) and reduced pairwise with SHA-256.
Zero subtrees are never materialized: the root of a zero subtree of depth `d`
is looked up in a precomputed table.
"""

from __future__ import annotations

import hashlib
from typing import Final, List, Optional, Sequence

from evm_light_client.types.byte_arrays import Bytes32

from .constants import ZERO_HASH


def get_power_of_two_ceil(x: int) -> int:
    """Smallest power of two greater than or equal to x (0 and 1 map to 1)."""
    if x <= 1:
        return 1
    return 1 << (x - 1).bit_length()


def hash_nodes(node_a: Bytes32, node_b: Bytes32) -> Bytes32:
    """Hashes two 32-byte nodes together using SHA-256."""
    return Bytes32(hashlib.sha256(node_a + node_b).digest())


def _build_zero_hashes(depth: int) -> List[Bytes32]:
    hashes = [ZERO_HASH]
    for _ in range(depth):
        hashes.append(hash_nodes(hashes[-1], hashes[-1]))
    return hashes


ZERO_HASHES: Final[List[Bytes32]] = _build_zero_hashes(64)
"""`ZERO_HASHES[d]` is the root of a full zero tree of depth d."""


class Merkle:
    """Static Merkle helpers for SSZ."""

    @staticmethod
    def merkleize(chunks: Sequence[Bytes32], limit: Optional[int] = None) -> Bytes32:
        """
        Compute the Merkle root of `chunks`.

        - If `limit` is None: pad to the next power of two of len(chunks).
        - If `limit` is provided: pad to the next power of two of `limit`.
        - If `limit` < len(chunks): raise ValueError.
        """
        count = len(chunks)
        if limit is not None and limit < count:
            raise ValueError(f"merkleize: {count} chunks exceed limit {limit}")

        width = get_power_of_two_ceil(count if limit is None else limit)
        depth = width.bit_length() - 1
        if count == 0:
            return ZERO_HASHES[depth]

        level: List[Bytes32] = list(chunks)
        for height in range(depth):
            # Odd-sized levels pair their last node with the zero subtree of that height.
            if len(level) % 2:
                level.append(ZERO_HASHES[height])
            level = [hash_nodes(level[i], level[i + 1]) for i in range(0, len(level), 2)]
        return level[0]

    @staticmethod
    def mix_in_length(root: Bytes32, length: int) -> Bytes32:
        """Mix the length (as uint256 little-endian) into a Merkle root."""
        return hash_nodes(root, Bytes32(length.to_bytes(32, "little")))

    @staticmethod
    def mix_in_selector(root: Bytes32, selector: int) -> Bytes32:
        """Mix the union selector (as uint256 little-endian) into a Merkle root."""
        return hash_nodes(root, Bytes32(selector.to_bytes(32, "little")))
