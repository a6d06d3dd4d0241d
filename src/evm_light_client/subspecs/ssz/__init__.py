"""SSZ (Simple Serialize) merkleization and proofs."""

from .constants import ZERO_HASH
from .hash import hash_tree_root
from .merkle_proof import GeneralizedIndex, is_valid_merkle_branch

__all__ = [
    "GeneralizedIndex",
    "hash_tree_root",
    "is_valid_merkle_branch",
    "ZERO_HASH",
]
