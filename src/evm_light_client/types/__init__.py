"""Reusable SSZ type definitions for the light client."""

from .base import StrictBaseModel
from .bitfields import BaseBitlist, BaseBitvector
from .boolean import Boolean
from .byte_arrays import (
    ZERO_HASH,
    BaseByteList,
    BaseBytes,
    Bytes4,
    Bytes20,
    Bytes32,
    Bytes48,
    Bytes96,
    Bytes256,
)
from .collections import SSZList, SSZVector
from .container import Container
from .exceptions import (
    SSZDecodeError,
    SSZError,
    SSZLengthError,
    SSZOverflowError,
    SSZTypeError,
    SSZValueError,
)
from .ssz_base import SSZModel, SSZType
from .uint import BaseUint, Uint32, Uint64, Uint256
from .union import SSZUnion

__all__ = [
    # Core types
    "BaseUint",
    "Uint32",
    "Uint64",
    "Uint256",
    "BaseBytes",
    "BaseByteList",
    "Bytes4",
    "Bytes20",
    "Bytes32",
    "Bytes48",
    "Bytes96",
    "Bytes256",
    "ZERO_HASH",
    "Boolean",
    "BaseBitlist",
    "BaseBitvector",
    "SSZList",
    "SSZVector",
    "SSZUnion",
    "SSZType",
    "SSZModel",
    "Container",
    "StrictBaseModel",
    # Exceptions
    "SSZError",
    "SSZTypeError",
    "SSZValueError",
    "SSZOverflowError",
    "SSZLengthError",
    "SSZDecodeError",
]
