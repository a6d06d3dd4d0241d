"""
SSZ Merkleization entry point (`hash_tree_root`).

`hash_tree_root(value) -> Bytes32` is a singledispatch function with one
specialization per SSZ kind. Headers are identified by this root, committees
are proven against state roots by it, and signatures are computed over it.
"""

from __future__ import annotations

from functools import singledispatch

from evm_light_client.types.bitfields import BaseBitlist, BaseBitvector
from evm_light_client.types.boolean import Boolean
from evm_light_client.types.byte_arrays import BaseByteList, BaseBytes, Bytes32
from evm_light_client.types.collections import SSZList, SSZVector
from evm_light_client.types.container import Container
from evm_light_client.types.uint import BaseUint
from evm_light_client.types.union import SSZUnion

from .constants import BYTES_PER_CHUNK, ZERO_HASH
from .merkleization import Merkle
from .pack import Packer


@singledispatch
def hash_tree_root(value: object) -> Bytes32:
    """
    Compute `hash_tree_root(value)` for SSZ values.

    Raises:
        TypeError: If `value` has no registered specialization.
    """
    raise TypeError(f"hash_tree_root: unsupported value type {type(value).__name__}")


def _is_basic(element_type: type) -> bool:
    return issubclass(element_type, (BaseUint, Boolean))


def _chunk_limit(element_type: type, count: int) -> int:
    """Number of chunks that `count` basic elements of `element_type` occupy."""
    size = element_type.get_byte_length()  # type: ignore[attr-defined]
    return (count * size + BYTES_PER_CHUNK - 1) // BYTES_PER_CHUNK


@hash_tree_root.register
def _htr_uint(value: BaseUint) -> Bytes32:
    return Merkle.merkleize(Packer.pack_bytes(value.encode_bytes()))


@hash_tree_root.register
def _htr_boolean(value: Boolean) -> Bytes32:
    return Merkle.merkleize(Packer.pack_bytes(value.encode_bytes()))


@hash_tree_root.register
def _htr_bytes(value: BaseBytes) -> Bytes32:
    return Merkle.merkleize(Packer.pack_bytes(bytes(value)))


@hash_tree_root.register
def _htr_byte_list(value: BaseByteList) -> Bytes32:
    limit = (type(value).LIMIT + BYTES_PER_CHUNK - 1) // BYTES_PER_CHUNK
    root = Merkle.merkleize(Packer.pack_bytes(value.data), limit=limit)
    return Merkle.mix_in_length(root, len(value.data))


@hash_tree_root.register
def _htr_bitvector(value: BaseBitvector) -> Bytes32:
    limit = (type(value).LENGTH + 255) // 256
    return Merkle.merkleize(Packer.pack_bits([bool(b) for b in value.data]), limit=limit)


@hash_tree_root.register
def _htr_bitlist(value: BaseBitlist) -> Bytes32:
    limit = (type(value).LIMIT + 255) // 256
    root = Merkle.merkleize(Packer.pack_bits([bool(b) for b in value.data]), limit=limit)
    return Merkle.mix_in_length(root, len(value.data))


@hash_tree_root.register
def _htr_vector(value: SSZVector) -> Bytes32:
    element_type = type(value).ELEMENT_TYPE
    if _is_basic(element_type):
        packed = b"".join(e.encode_bytes() for e in value.data)
        limit = _chunk_limit(element_type, type(value).LENGTH)
        return Merkle.merkleize(Packer.pack_bytes(packed), limit=limit)
    return Merkle.merkleize([hash_tree_root(e) for e in value.data], limit=type(value).LENGTH)


@hash_tree_root.register
def _htr_list(value: SSZList) -> Bytes32:
    element_type = type(value).ELEMENT_TYPE
    if _is_basic(element_type):
        packed = b"".join(e.encode_bytes() for e in value.data)
        limit = _chunk_limit(element_type, type(value).LIMIT)
        root = Merkle.merkleize(Packer.pack_bytes(packed), limit=limit)
    else:
        root = Merkle.merkleize([hash_tree_root(e) for e in value.data], limit=type(value).LIMIT)
    return Merkle.mix_in_length(root, len(value.data))


@hash_tree_root.register
def _htr_container(value: Container) -> Bytes32:
    # Declared field order is the merkleization order.
    return Merkle.merkleize([hash_tree_root(getattr(value, name)) for name in type(value).model_fields])


@hash_tree_root.register
def _htr_union(value: SSZUnion) -> Bytes32:
    if value.selected_type is None:
        return Merkle.mix_in_selector(ZERO_HASH, 0)
    return Merkle.mix_in_selector(hash_tree_root(value.value), value.selector)
