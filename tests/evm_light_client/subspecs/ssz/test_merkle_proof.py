"""Tests for generalized indices and single-leaf branch verification."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from evm_light_client.subspecs.ssz import GeneralizedIndex, is_valid_merkle_branch
from evm_light_client.subspecs.ssz.merkle_proof import MerkleProof
from evm_light_client.types import Bytes32
from tests.evm_light_client.helpers import SparseStateTree, make_bytes32


class TestGeneralizedIndex:
    """Tests for generalized index navigation."""

    @pytest.mark.parametrize("gindex, depth", [(1, 0), (2, 1), (3, 1), (54, 5), (105, 6), (169, 7)])
    def test_depth(self, gindex: int, depth: int) -> None:
        """Depth is the number of bits below the leading one."""
        assert GeneralizedIndex(value=gindex).depth == depth

    def test_sibling_and_parent(self) -> None:
        """Siblings differ in the last bit; the parent drops it."""
        index = GeneralizedIndex(value=54)
        assert index.sibling.value == 55
        assert index.parent.value == 27

    def test_root_has_no_parent(self) -> None:
        """The root is the top of the tree."""
        with pytest.raises(ValueError):
            _ = GeneralizedIndex(value=1).parent

    def test_must_be_positive(self) -> None:
        """Index 0 names no node."""
        with pytest.raises(ValueError):
            GeneralizedIndex(value=0)

    def test_branch_indices(self) -> None:
        """Branch indices are the siblings on the path, deepest first."""
        assert [i.value for i in GeneralizedIndex(value=13).get_branch_indices()] == [12, 7, 2]


class TestBranchVerification:
    """Tests for `is_valid_merkle_branch`."""

    @pytest.mark.parametrize("gindex", [54, 55, 105, 86, 87, 169])
    def test_valid_branch(self, gindex: int) -> None:
        """A branch built from the tree verifies against its root."""
        tree = SparseStateTree({gindex: make_bytes32(gindex)})
        assert is_valid_merkle_branch(make_bytes32(gindex), tree.branch(gindex), gindex, tree.root)

    def test_wrong_leaf(self) -> None:
        """A different leaf does not verify."""
        tree = SparseStateTree({54: make_bytes32(1)})
        assert not is_valid_merkle_branch(make_bytes32(2), tree.branch(54), 54, tree.root)

    def test_wrong_gindex_same_depth(self) -> None:
        """The same branch at the sibling index does not verify."""
        tree = SparseStateTree({54: make_bytes32(1), 55: make_bytes32(2)})
        assert not is_valid_merkle_branch(make_bytes32(1), tree.branch(54), 55, tree.root)

    def test_wrong_length_is_invalid_not_error(self) -> None:
        """A branch of the wrong depth is rejected without raising."""
        tree = SparseStateTree({105: make_bytes32(1)})
        branch = list(tree.branch(105))
        assert not is_valid_merkle_branch(make_bytes32(1), branch[:-1], 105, tree.root)
        assert not is_valid_merkle_branch(make_bytes32(1), branch + [Bytes32.zero()], 105, tree.root)

    def test_proof_requires_matching_length(self) -> None:
        """A proof object refuses a branch of the wrong length."""
        with pytest.raises(ValueError):
            MerkleProof(leaf=Bytes32.zero(), index=GeneralizedIndex(value=4), branch=(Bytes32.zero(),))

    @given(st.integers(min_value=0, max_value=63), st.integers(min_value=0, max_value=31))
    def test_any_flipped_byte_breaks_the_proof(self, position: int, byte: int) -> None:
        """Changing one byte of any sibling invalidates the branch."""
        tree = SparseStateTree({105: make_bytes32(7), 54: make_bytes32(8)})
        branch = list(tree.branch(105))
        level = position % len(branch)
        node = bytearray(branch[level])
        node[byte] ^= 0xFF
        branch[level] = Bytes32(bytes(node))
        assert not is_valid_merkle_branch(make_bytes32(7), branch, 105, tree.root)
