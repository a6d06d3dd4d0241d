"""
Byte vector and byte list SSZ types.

Roots, fork versions, BLS public keys and BLS signatures are all byte vectors
whose length is known at the type level. Beacon API payloads carry them as
`0x`-prefixed hex strings, so every type also accepts hex on input and emits
hex when serialized to JSON.

Byte lists hold up to `LIMIT` bytes: execution transactions and the
payload's extra data.
"""

from __future__ import annotations

from typing import IO, Any, ClassVar, Iterable, SupportsIndex

from pydantic import Field, field_validator
from pydantic.annotated_handlers import GetCoreSchemaHandler
from pydantic_core import core_schema
from typing_extensions import Self

from .exceptions import SSZDecodeError, SSZLengthError, SSZTypeError, SSZValueError
from .ssz_base import SSZModel, SSZType, read_exact


def _coerce_to_bytes(value: Any) -> bytes:
    """
    Coerce a variety of inputs to raw bytes.

    Accepts `bytes` / `bytearray`, hex strings with or without a `0x` prefix,
    and iterables of integers in [0, 255].
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return bytes.fromhex(value.removeprefix("0x"))
        except ValueError as e:
            raise SSZValueError(f"Invalid hex string: {value[:20]!r}") from e
    if isinstance(value, Iterable):
        return bytes(bytearray(value))
    raise SSZTypeError(f"Cannot convert {type(value).__name__} to bytes")


class BaseBytes(bytes, SSZType):
    """
    A base class for fixed-length byte types that inherits from `bytes`.

    Subclasses set `LENGTH`, the exact number of bytes an instance holds.
    """

    LENGTH: ClassVar[int]
    """The exact number of bytes (overridden by subclasses)."""

    def __new__(cls, value: Any = b"") -> Self:
        """
        Create and validate a new Bytes instance.

        Raises:
            SSZValueError: If the resulting byte length differs from `LENGTH`.
        """
        if not hasattr(cls, "LENGTH"):
            raise SSZTypeError(f"{cls.__name__} must define LENGTH")

        b = _coerce_to_bytes(value)
        if len(b) != cls.LENGTH:
            raise SSZValueError(f"{cls.__name__} expects exactly {cls.LENGTH} bytes, got {len(b)}")
        return super().__new__(cls, b)

    @classmethod
    def zero(cls) -> Self:
        """Create a new instance filled with zero bytes."""
        return cls(b"\x00" * cls.LENGTH)

    @classmethod
    def is_fixed_size(cls) -> bool:
        return True

    @classmethod
    def get_byte_length(cls) -> int:
        return cls.LENGTH

    def serialize(self, stream: IO[bytes]) -> int:
        stream.write(self)
        return len(self)

    @classmethod
    def deserialize(cls, stream: IO[bytes], scope: int) -> Self:
        if scope != cls.LENGTH:
            raise SSZDecodeError(cls.__name__, f"expected {cls.LENGTH} bytes, got {scope}")
        return cls(read_exact(stream, scope, cls.__name__))

    def encode_bytes(self) -> bytes:
        return bytes(self)

    @classmethod
    def decode_bytes(cls, data: bytes) -> Self:
        if len(data) != cls.LENGTH:
            raise SSZDecodeError(cls.__name__, f"expected {cls.LENGTH} bytes, got {len(data)}")
        return cls(data)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """
        Hook into Pydantic's validation system.

        Instances pass through untouched; raw bytes and hex strings are
        coerced and length checked. JSON output is `0x`-prefixed hex.
        """

        def validate(value: Any) -> BaseBytes:
            if isinstance(value, cls):
                return value
            try:
                return cls(value)
            except (SSZTypeError, SSZValueError) as e:
                raise ValueError(str(e)) from e

        return core_schema.no_info_plain_validator_function(
            validate,
            serialization=core_schema.plain_serializer_function_ser_schema(lambda x: "0x" + x.hex()),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.hex()})"

    def __hash__(self) -> int:
        return hash(bytes(self))

    def hex(self, sep: str | bytes | None = None, bytes_per_sep: SupportsIndex = 1) -> str:
        """Return the hexadecimal string representation of the underlying bytes."""
        return bytes(self).hex() if sep is None else bytes(self).hex(sep, bytes_per_sep)


class Bytes4(BaseBytes):
    """Fixed-size byte array of exactly 4 bytes (fork versions, domain types)."""

    LENGTH = 4


class Bytes20(BaseBytes):
    """Fixed-size byte array of exactly 20 bytes (execution addresses)."""

    LENGTH = 20


class Bytes32(BaseBytes):
    """Fixed-size byte array of exactly 32 bytes (roots and hashes)."""

    LENGTH = 32


class Bytes48(BaseBytes):
    """Fixed-size byte array of exactly 48 bytes (compressed BLS public keys)."""

    LENGTH = 48


class Bytes96(BaseBytes):
    """Fixed-size byte array of exactly 96 bytes (compressed BLS signatures)."""

    LENGTH = 96


class Bytes256(BaseBytes):
    """Fixed-size byte array of exactly 256 bytes (execution logs bloom)."""

    LENGTH = 256


ZERO_HASH: Bytes32 = Bytes32.zero()
"""The all-zero 32-byte root, used as Merkle padding."""


class BaseByteList(SSZModel):
    """
    Base class for variable-length byte lists of at most `LIMIT` bytes.

    The encoding is the raw bytes; the length comes from the enclosing
    offset table.
    """

    LIMIT: ClassVar[int]
    """Maximum number of bytes."""

    data: bytes = Field(default=b"")
    """The raw bytes."""

    @field_validator("data", mode="before")
    @classmethod
    def _validate_byte_list_data(cls, v: Any) -> bytes:
        if not hasattr(cls, "LIMIT"):
            raise SSZTypeError(f"{cls.__name__} must define LIMIT")
        b = _coerce_to_bytes(v)
        if len(b) > cls.LIMIT:
            raise SSZLengthError(cls.__name__, expected=cls.LIMIT, actual=len(b), is_limit=True)
        return b

    @classmethod
    def is_fixed_size(cls) -> bool:
        return False

    @classmethod
    def get_byte_length(cls) -> int:
        raise SSZTypeError(f"{cls.__name__}: variable-size byte list has no fixed byte length")

    def serialize(self, stream: IO[bytes]) -> int:
        stream.write(self.data)
        return len(self.data)

    @classmethod
    def deserialize(cls, stream: IO[bytes], scope: int) -> Self:
        if scope > cls.LIMIT:
            raise SSZLengthError(cls.__name__, expected=cls.LIMIT, actual=scope, is_limit=True)
        return cls(data=read_exact(stream, scope, cls.__name__))

    def encode_bytes(self) -> bytes:
        return self.data

    @classmethod
    def decode_bytes(cls, data: bytes) -> Self:
        if len(data) > cls.LIMIT:
            raise SSZLengthError(cls.__name__, expected=cls.LIMIT, actual=len(data), is_limit=True)
        return cls(data=data)

    def __len__(self) -> int:
        return len(self.data)

    def __bytes__(self) -> bytes:
        return self.data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.data.hex()})"

    def hex(self) -> str:
        """Return the hexadecimal string representation of the underlying bytes."""
        return self.data.hex()
