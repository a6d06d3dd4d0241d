"""
Single-leaf Merkle proofs for SSZ.

A light client never holds a beacon state. It holds a state *root* and checks
that a value sits at a known generalized index under it, given the sibling
hashes along the path (the branch).
"""

from __future__ import annotations

from typing import Sequence

from pydantic import Field, model_validator

from evm_light_client.types import StrictBaseModel
from evm_light_client.types.byte_arrays import Bytes32

from ..merkleization import hash_nodes
from .gindex import GeneralizedIndex

Root = Bytes32
"""The type of a Merkle tree root."""


class MerkleProof(StrictBaseModel):
    """A leaf, its generalized index, and the branch that links it to a root."""

    leaf: Bytes32 = Field(..., description="The leaf data being proven.")

    index: GeneralizedIndex = Field(..., description="The generalized index of the leaf.")

    branch: tuple[Bytes32, ...] = Field(..., description="Sibling hashes, deepest first.")

    @model_validator(mode="after")
    def check_branch_length(self) -> MerkleProof:
        """The branch must hold exactly one sibling per level."""
        if len(self.branch) != self.index.depth:
            raise ValueError(
                f"Branch length {len(self.branch)} does not match index depth {self.index.depth}"
            )
        return self

    def calculate_root(self) -> Root:
        """Fold the leaf with the branch, using the index bits to order each pair."""
        node = self.leaf
        for height, sibling in enumerate(self.branch):
            if self.index.get_bit(height):
                node = hash_nodes(sibling, node)
            else:
                node = hash_nodes(node, sibling)
        return node

    def verify(self, root: Root) -> bool:
        """Verifies the Merkle proof against a known root."""
        return self.calculate_root() == root


def is_valid_merkle_branch(
    leaf: Bytes32, branch: Sequence[Bytes32], gindex: int, root: Bytes32
) -> bool:
    """
    Check that `leaf` sits at `gindex` under `root`.

    A branch of the wrong length is simply invalid; it never raises.
    """
    index = GeneralizedIndex(value=int(gindex))
    if len(branch) != index.depth:
        return False
    return MerkleProof(leaf=leaf, index=index, branch=tuple(branch)).verify(root)
