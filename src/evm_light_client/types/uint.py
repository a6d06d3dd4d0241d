"""Unsigned Integer Type Specification."""

from __future__ import annotations

from typing import IO, Any, ClassVar, SupportsInt

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema
from typing_extensions import Self

from .exceptions import SSZDecodeError, SSZOverflowError, SSZTypeError
from .ssz_base import SSZType, read_exact


class BaseUint(int, SSZType):
    """
    A base class for fixed-width unsigned integers that inherits from `int`.

    Arithmetic results are range checked: an operation that leaves
    `[0, 2**BITS - 1]` raises `SSZOverflowError` instead of wrapping. Operands
    must be the same unsigned type or a plain `int`. Mixing two different
    unsigned types is a `TypeError`, which keeps slots and epochs from being
    combined by accident.
    """

    BITS: ClassVar[int]
    """The number of bits in the integer (overridden by subclasses)."""

    def __new__(cls, value: SupportsInt) -> Self:
        """
        Create and validate a new Uint instance.

        Raises:
            SSZTypeError: If `value` is a bool, a float, or a different unsigned type.
            SSZOverflowError: If `value` is outside the allowed range.
        """
        if isinstance(value, (bool, float)):
            raise SSZTypeError(f"{cls.__name__} cannot be built from {type(value).__name__}")
        int_value = int(value)
        if not 0 <= int_value <= cls.max_value():
            raise SSZOverflowError(int_value, cls.__name__, max_value=cls.max_value())
        return super().__new__(cls, int_value)

    @classmethod
    def max_value(cls) -> int:
        """The largest value representable by the type."""
        return (1 << cls.BITS) - 1

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """Accept ints (and decimal strings, as found in JSON APIs) and build the type."""

        def validate(value: Any) -> BaseUint:
            if isinstance(value, str) and value.isdigit():
                value = int(value)
            if not isinstance(value, int):
                raise ValueError(f"{cls.__name__} expects an integer, got {type(value).__name__}")
            try:
                return cls(value)
            except (SSZOverflowError, SSZTypeError) as e:
                raise ValueError(str(e)) from e

        return core_schema.no_info_plain_validator_function(
            validate,
            serialization=core_schema.plain_serializer_function_ser_schema(int),
        )

    # SSZ encoding: little-endian, BITS // 8 bytes.

    @classmethod
    def is_fixed_size(cls) -> bool:
        return True

    @classmethod
    def get_byte_length(cls) -> int:
        return cls.BITS // 8

    def serialize(self, stream: IO[bytes]) -> int:
        data = self.encode_bytes()
        stream.write(data)
        return len(data)

    @classmethod
    def deserialize(cls, stream: IO[bytes], scope: int) -> Self:
        if scope != cls.get_byte_length():
            raise SSZDecodeError(cls.__name__, f"expected {cls.get_byte_length()} bytes, got {scope}")
        return cls.decode_bytes(read_exact(stream, scope, cls.__name__))

    def encode_bytes(self) -> bytes:
        return int(self).to_bytes(self.get_byte_length(), "little")

    @classmethod
    def decode_bytes(cls, data: bytes) -> Self:
        if len(data) != cls.get_byte_length():
            raise SSZDecodeError(cls.__name__, f"expected {cls.get_byte_length()} bytes, got {len(data)}")
        return cls(int.from_bytes(data, "little"))

    # Arithmetic.

    def _operand(self, other: Any, op_symbol: str) -> int:
        """Return `other` as an int, refusing foreign unsigned types and non-integers."""
        if isinstance(other, bool) or not isinstance(other, int):
            raise TypeError(
                f"Unsupported operand type(s) for {op_symbol}: "
                f"'{type(self).__name__}' and '{type(other).__name__}'"
            )
        if isinstance(other, BaseUint) and not isinstance(other, type(self)):
            if not isinstance(self, type(other)):
                raise TypeError(
                    f"Unsupported operand type(s) for {op_symbol}: "
                    f"'{type(self).__name__}' and '{type(other).__name__}'"
                )
        return int(other)

    def __add__(self, other: Any) -> Self:
        return type(self)(int(self) + self._operand(other, "+"))

    def __radd__(self, other: Any) -> Self:
        return type(self)(self._operand(other, "+") + int(self))

    def __sub__(self, other: Any) -> Self:
        return type(self)(int(self) - self._operand(other, "-"))

    def __rsub__(self, other: Any) -> Self:
        return type(self)(self._operand(other, "-") - int(self))

    def __mul__(self, other: Any) -> Self:
        return type(self)(int(self) * self._operand(other, "*"))

    def __rmul__(self, other: Any) -> Self:
        return type(self)(self._operand(other, "*") * int(self))

    def __floordiv__(self, other: Any) -> Self:
        return type(self)(int(self) // self._operand(other, "//"))

    def __rfloordiv__(self, other: Any) -> Self:
        return type(self)(self._operand(other, "//") // int(self))

    def __mod__(self, other: Any) -> Self:
        return type(self)(int(self) % self._operand(other, "%"))

    def __rmod__(self, other: Any) -> Self:
        return type(self)(self._operand(other, "%") % int(self))

    # Comparisons accept any integer so that `slot >= 0` and friends stay natural.

    def __eq__(self, other: object) -> bool:
        if isinstance(other, int) and not isinstance(other, bool):
            return int(self) == int(other)
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        if isinstance(other, int) and not isinstance(other, bool):
            return int(self) != int(other)
        return NotImplemented

    def __lt__(self, other: Any) -> bool:
        return int(self) < self._operand(other, "<")

    def __le__(self, other: Any) -> bool:
        return int(self) <= self._operand(other, "<=")

    def __gt__(self, other: Any) -> bool:
        return int(self) > self._operand(other, ">")

    def __ge__(self, other: Any) -> bool:
        return int(self) >= self._operand(other, ">=")

    def __hash__(self) -> int:
        return hash(int(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self)})"

    def __str__(self) -> str:
        return str(int(self))


class Uint32(BaseUint):
    """A type representing a 32-bit unsigned integer (uint32)."""

    BITS = 32


class Uint64(BaseUint):
    """A type representing a 64-bit unsigned integer (uint64)."""

    BITS = 64


class Uint256(BaseUint):
    """A type representing a 256-bit unsigned integer (uint256)."""

    BITS = 256
