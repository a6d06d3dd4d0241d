"""
Bitvector and bitlist type specification.

A bitvector is a fixed-length, immutable sequence of booleans. The sync
committee participation field is one: bit `i` tells whether committee member
`i` contributed to the aggregate signature. A bitlist holds up to a limit of
bits; attestation aggregation bits are bitlists.

Bits pack little-endian within each byte (bit 0 is the least significant bit
of byte 0). Unused high bits of the last byte must be zero.

Concrete types inherit from the base classes and specify LENGTH or LIMIT:
- class SyncCommitteeBits(BaseBitvector): LENGTH = 512
- class AggregationBits(BaseBitlist): LIMIT = 2048
"""

from __future__ import annotations

from typing import IO, Any, ClassVar, Sequence

from pydantic import Field, field_validator
from typing_extensions import Self

from .boolean import Boolean
from .exceptions import SSZDecodeError, SSZLengthError, SSZTypeError
from .ssz_base import SSZModel, read_exact


class BaseBitvector(SSZModel):
    """Base class for fixed-length bit vectors with exactly LENGTH bits."""

    LENGTH: ClassVar[int]
    """Number of bits in the vector."""

    data: Sequence[Boolean] = Field(default_factory=tuple)
    """The bits, stored as a tuple of Boolean after validation."""

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_and_validate(cls, v: Any) -> tuple[Boolean, ...]:
        """Validate and convert input data to typed tuple of Booleans."""
        if not hasattr(cls, "LENGTH"):
            raise SSZTypeError(f"{cls.__name__} must define LENGTH")
        bits = tuple(Boolean(int(bit)) for bit in v)
        if len(bits) != cls.LENGTH:
            raise SSZLengthError(cls.__name__, expected=cls.LENGTH, actual=len(bits))
        return bits

    @classmethod
    def from_indices(cls, indices: Sequence[int]) -> Self:
        """Build a bitvector with exactly the bits at `indices` set."""
        chosen = set(indices)
        return cls(data=[i in chosen for i in range(cls.LENGTH)])

    def count(self) -> int:
        """Return the number of set bits."""
        return sum(1 for bit in self.data if bit)

    def set_indices(self) -> list[int]:
        """Return the positions of the set bits, in ascending order."""
        return [i for i, bit in enumerate(self.data) if bit]

    @classmethod
    def is_fixed_size(cls) -> bool:
        return True

    @classmethod
    def get_byte_length(cls) -> int:
        return (cls.LENGTH + 7) // 8

    def serialize(self, stream: IO[bytes]) -> int:
        encoded = self.encode_bytes()
        stream.write(encoded)
        return len(encoded)

    @classmethod
    def deserialize(cls, stream: IO[bytes], scope: int) -> Self:
        if scope != cls.get_byte_length():
            raise SSZDecodeError(cls.__name__, f"expected {cls.get_byte_length()} bytes, got {scope}")
        return cls.decode_bytes(read_exact(stream, scope, cls.__name__))

    def encode_bytes(self) -> bytes:
        """Pack bit i into byte i // 8 at position i % 8."""
        byte_array = bytearray(self.get_byte_length())
        for i, bit in enumerate(self.data):
            if bit:
                byte_array[i // 8] |= 1 << (i % 8)
        return bytes(byte_array)

    @classmethod
    def decode_bytes(cls, data: bytes) -> Self:
        expected = cls.get_byte_length()
        if len(data) != expected:
            raise SSZDecodeError(cls.__name__, f"expected {expected} bytes, got {len(data)}")
        if cls.LENGTH % 8 and data[-1] >> (cls.LENGTH % 8):
            raise SSZDecodeError(cls.__name__, "padding bits must be zero")
        return cls(data=[(data[i // 8] >> (i % 8)) & 1 for i in range(cls.LENGTH)])


class BaseBitlist(SSZModel):
    """
    Base class for variable-length bit lists of at most LIMIT bits.

    The encoding appends a single delimiter bit after the last data bit, so
    the length can be recovered from the bytes alone.
    """

    LIMIT: ClassVar[int]
    """Maximum number of bits."""

    data: Sequence[Boolean] = Field(default_factory=tuple)
    """The bits, stored as a tuple of Boolean after validation."""

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_and_validate(cls, v: Any) -> tuple[Boolean, ...]:
        if not hasattr(cls, "LIMIT"):
            raise SSZTypeError(f"{cls.__name__} must define LIMIT")
        bits = tuple(Boolean(int(bit)) for bit in v)
        if len(bits) > cls.LIMIT:
            raise SSZLengthError(cls.__name__, expected=cls.LIMIT, actual=len(bits), is_limit=True)
        return bits

    def count(self) -> int:
        """Return the number of set bits."""
        return sum(1 for bit in self.data if bit)

    @classmethod
    def is_fixed_size(cls) -> bool:
        return False

    @classmethod
    def get_byte_length(cls) -> int:
        raise SSZTypeError(f"{cls.__name__}: variable-size bitlist has no fixed byte length")

    def serialize(self, stream: IO[bytes]) -> int:
        encoded = self.encode_bytes()
        stream.write(encoded)
        return len(encoded)

    @classmethod
    def deserialize(cls, stream: IO[bytes], scope: int) -> Self:
        return cls.decode_bytes(read_exact(stream, scope, cls.__name__))

    def encode_bytes(self) -> bytes:
        """Pack the bits like a bitvector, then set the delimiter bit at position len(bits)."""
        num_bits = len(self.data)
        byte_array = bytearray(num_bits // 8 + 1)
        for i, bit in enumerate(self.data):
            if bit:
                byte_array[i // 8] |= 1 << (i % 8)
        byte_array[num_bits // 8] |= 1 << (num_bits % 8)
        return bytes(byte_array)

    @classmethod
    def decode_bytes(cls, data: bytes) -> Self:
        if not data:
            raise SSZDecodeError(cls.__name__, "empty encoding has no delimiter bit")
        if data[-1] == 0:
            raise SSZDecodeError(cls.__name__, "last byte must hold the delimiter bit")
        num_bits = (len(data) - 1) * 8 + data[-1].bit_length() - 1
        if num_bits > cls.LIMIT:
            raise SSZLengthError(cls.__name__, expected=cls.LIMIT, actual=num_bits, is_limit=True)
        return cls(data=[(data[i // 8] >> (i % 8)) & 1 for i in range(num_bits)])
