"""Generalized indices and single-leaf Merkle branch verification."""

from .gindex import GeneralizedIndex
from .proof import MerkleProof, is_valid_merkle_branch

__all__ = ["GeneralizedIndex", "MerkleProof", "is_valid_merkle_branch"]
