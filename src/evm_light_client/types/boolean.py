"""Boolean Type Specification."""

from __future__ import annotations

from typing import IO, Any

from pydantic.annotated_handlers import GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema
from typing_extensions import Self

from .exceptions import SSZDecodeError, SSZTypeError, SSZValueError
from .ssz_base import SSZType, read_exact


class Boolean(int, SSZType):
    """
    A strict SSZ boolean backed by `int` (`True` as `1`, `False` as `0`).

    Only `0x00` and `0x01` decode; any other byte is a non-canonical encoding.
    """

    __slots__ = ()

    def __new__(cls, value: bool | int) -> Self:
        """
        Create and validate a new Boolean instance.

        Raises:
            SSZTypeError: If `value` is not a bool or int.
            SSZValueError: If `value` is an integer other than 0 or 1.
        """
        if not isinstance(value, int):
            raise SSZTypeError(f"Expected bool or int, got {type(value).__name__}")
        if int(value) not in (0, 1):
            raise SSZValueError(f"Boolean value must be 0 or 1, not {int(value)}")
        return super().__new__(cls, int(value))

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        """Accept instances of the class or strict Python bools."""
        python_schema = core_schema.chain_schema(
            [
                core_schema.bool_schema(strict=True),
                core_schema.no_info_plain_validator_function(cls),
            ]
        )
        return core_schema.union_schema(
            [core_schema.is_instance_schema(cls), python_schema],
            serialization=core_schema.plain_serializer_function_ser_schema(bool),
        )

    @classmethod
    def is_fixed_size(cls) -> bool:
        return True

    @classmethod
    def get_byte_length(cls) -> int:
        return 1

    def encode_bytes(self) -> bytes:
        return b"\x01" if self else b"\x00"

    @classmethod
    def decode_bytes(cls, data: bytes) -> Self:
        if len(data) != 1:
            raise SSZDecodeError("Boolean", f"expected 1 byte, got {len(data)}")
        if data[0] not in (0, 1):
            raise SSZDecodeError("Boolean", f"byte must be 0x00 or 0x01, got {data[0]:#04x}")
        return cls(data[0])

    def serialize(self, stream: IO[bytes]) -> int:
        stream.write(self.encode_bytes())
        return 1

    @classmethod
    def deserialize(cls, stream: IO[bytes], scope: int) -> Self:
        if scope != 1:
            raise SSZDecodeError("Boolean", f"invalid scope {scope}")
        return cls.decode_bytes(read_exact(stream, 1, "Boolean"))

    def __repr__(self) -> str:
        return f"Boolean({bool(self)})"

    def __str__(self) -> str:
        return str(bool(self))
