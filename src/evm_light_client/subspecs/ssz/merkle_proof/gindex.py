"""Generalized Index implementation."""

from __future__ import annotations

from typing import List

from pydantic import Field

from evm_light_client.types import StrictBaseModel


class GeneralizedIndex(StrictBaseModel):
    """
    Position of a node in a binary Merkle tree.

    The root is 1 and the children of node `k` are `2k` and `2k + 1`, so the
    bits of the index below its leading one spell the path from the root.
    """

    value: int = Field(..., gt=0, description="The index value, must be a positive integer.")

    def __hash__(self) -> int:
        return hash(self.value)

    @property
    def depth(self) -> int:
        """The depth of the node in the tree (the root has depth 0)."""
        return self.value.bit_length() - 1

    @property
    def subtree_index(self) -> int:
        """Index of the node among the nodes of its depth, counted from the left."""
        return self.value % (1 << self.depth)

    def get_bit(self, position: int) -> bool:
        """Returns the bit at a specific position (from the right)."""
        return (self.value >> position) & 1 == 1

    @property
    def sibling(self) -> GeneralizedIndex:
        return type(self)(value=self.value ^ 1)

    @property
    def parent(self) -> GeneralizedIndex:
        if self.value <= 1:
            raise ValueError("Root node has no parent.")
        return type(self)(value=self.value // 2)

    def get_branch_indices(self) -> List[GeneralizedIndex]:
        """Indices of the sibling nodes on the path to the root, deepest first."""
        indices: List[GeneralizedIndex] = []
        current = self.value
        while current > 1:
            indices.append(type(self)(value=current ^ 1))
            current //= 2
        return indices
