"""Vector and List Type Specifications."""

from __future__ import annotations

import io
from typing import IO, Any, ClassVar, Generic, Sequence, Type, TypeVar, cast, overload

from pydantic import Field, field_validator
from typing_extensions import Iterator, Self

from .constants import OFFSET_BYTE_LENGTH
from .exceptions import SSZDecodeError, SSZLengthError, SSZOffsetError, SSZTypeError
from .ssz_base import SSZModel, SSZType, read_exact
from .uint import Uint32

T = TypeVar("T", bound=SSZType)
"""Element type of a collection, so that `vec[0]` is typed as the element class."""


def _coerce_elements(cls: type, element_type: Type[SSZType], values: Any) -> tuple[SSZType, ...]:
    """Convert every input element to `element_type`."""
    if isinstance(values, (str, bytes)) or not hasattr(values, "__iter__"):
        raise SSZTypeError(f"{cls.__name__} expects an iterable, got {type(values).__name__}")
    return tuple(
        item if isinstance(item, element_type) else cast(Any, element_type)(item) for item in values
    )


def _serialize_elements(elements: Sequence[SSZType], stream: IO[bytes], fixed: bool) -> int:
    """Write elements back to back, or as an offset table followed by their data."""
    if fixed:
        return sum(element.serialize(stream) for element in elements)

    variable_data = io.BytesIO()
    offset = len(elements) * OFFSET_BYTE_LENGTH
    for element in elements:
        Uint32(offset).serialize(stream)
        offset += element.serialize(variable_data)
    stream.write(variable_data.getvalue())
    return offset


def _split_variable(type_name: str, data: bytes, count: int | None) -> list[bytes]:
    """
    Split the encoding of variable-size elements into per-element slices.

    `count` is the expected number of elements for vectors, or None for lists
    where the count is implied by the first offset.
    """
    if not data:
        if count:
            raise SSZDecodeError(type_name, "empty encoding for a non-empty vector")
        return []
    if len(data) < OFFSET_BYTE_LENGTH:
        raise SSZDecodeError(type_name, "encoding shorter than one offset")

    first = int(Uint32.decode_bytes(data[:OFFSET_BYTE_LENGTH]))
    if first % OFFSET_BYTE_LENGTH != 0 or first > len(data) or first == 0:
        raise SSZOffsetError(type_name, start=first, end=len(data))
    n = first // OFFSET_BYTE_LENGTH
    if count is not None and n != count:
        raise SSZLengthError(type_name, expected=count, actual=n)

    offsets = [
        int(Uint32.decode_bytes(data[i * OFFSET_BYTE_LENGTH : (i + 1) * OFFSET_BYTE_LENGTH]))
        for i in range(n)
    ] + [len(data)]
    slices = []
    for start, end in zip(offsets, offsets[1:], strict=False):
        if start > end:
            raise SSZOffsetError(type_name, start=start, end=end)
        slices.append(data[start:end])
    return slices


class SSZVector(SSZModel, Generic[T]):
    """
    Fixed-length, immutable SSZ sequence.

    Subclasses must define:
        ELEMENT_TYPE: The SSZ type of each element
        LENGTH: The exact number of elements

    Example:
        class Pubkeys(SSZVector[Bytes48]):
            ELEMENT_TYPE = Bytes48
            LENGTH = 512
    """

    ELEMENT_TYPE: ClassVar[Type[SSZType]]
    """The SSZ type of elements in this vector."""

    LENGTH: ClassVar[int]
    """The exact number of elements (fixed at the type level)."""

    data: Sequence[T] = Field(default_factory=tuple)
    """The elements, stored as a tuple after validation."""

    @field_validator("data", mode="before")
    @classmethod
    def _validate_vector_data(cls, v: Any) -> tuple[SSZType, ...]:
        """Validate and convert input to a typed tuple of exactly LENGTH elements."""
        if not hasattr(cls, "ELEMENT_TYPE") or not hasattr(cls, "LENGTH"):
            raise SSZTypeError(f"{cls.__name__} must define ELEMENT_TYPE and LENGTH")
        typed_values = _coerce_elements(cls, cls.ELEMENT_TYPE, v)
        if len(typed_values) != cls.LENGTH:
            raise SSZLengthError(cls.__name__, expected=cls.LENGTH, actual=len(typed_values))
        return typed_values

    @classmethod
    def is_fixed_size(cls) -> bool:
        """A vector is fixed-size if and only if its elements are fixed-size."""
        return cls.ELEMENT_TYPE.is_fixed_size()

    @classmethod
    def get_byte_length(cls) -> int:
        if not cls.is_fixed_size():
            raise SSZTypeError(f"{cls.__name__}: variable-size vector has no fixed byte length")
        return cls.ELEMENT_TYPE.get_byte_length() * cls.LENGTH

    def serialize(self, stream: IO[bytes]) -> int:
        return _serialize_elements(self.data, stream, self.is_fixed_size())

    @classmethod
    def deserialize(cls, stream: IO[bytes], scope: int) -> Self:
        if cls.is_fixed_size():
            if scope != cls.get_byte_length():
                raise SSZDecodeError(cls.__name__, f"expected {cls.get_byte_length()} bytes, got {scope}")
            size = cls.ELEMENT_TYPE.get_byte_length()
            return cls(data=[cls.ELEMENT_TYPE.deserialize(stream, size) for _ in range(cls.LENGTH)])

        chunks = _split_variable(cls.__name__, read_exact(stream, scope, cls.__name__), cls.LENGTH)
        return cls(data=[cls.ELEMENT_TYPE.decode_bytes(chunk) for chunk in chunks])

    def __iter__(self) -> Iterator[T]:  # type: ignore[override]
        return iter(self.data)

    @overload
    def __getitem__(self, index: int) -> T: ...
    @overload
    def __getitem__(self, index: slice) -> Sequence[T]: ...

    def __getitem__(self, index: int | slice) -> T | Sequence[T]:
        return self.data[index]


class SSZList(SSZModel, Generic[T]):
    """
    Variable-length SSZ sequence with a maximum capacity.

    Subclasses must define:
        ELEMENT_TYPE: The SSZ type of each element
        LIMIT: The maximum number of elements allowed

    The hash tree root mixes in the element count, so two lists with the same
    prefix but different lengths never share a root.
    """

    ELEMENT_TYPE: ClassVar[Type[SSZType]]
    """The SSZ type of elements in this list."""

    LIMIT: ClassVar[int]
    """The maximum number of elements allowed."""

    data: Sequence[T] = Field(default_factory=tuple)
    """The elements, stored as a tuple after validation."""

    @field_validator("data", mode="before")
    @classmethod
    def _validate_list_data(cls, v: Any) -> tuple[SSZType, ...]:
        """Validate and convert input to a tuple of at most LIMIT typed elements."""
        if not hasattr(cls, "ELEMENT_TYPE") or not hasattr(cls, "LIMIT"):
            raise SSZTypeError(f"{cls.__name__} must define ELEMENT_TYPE and LIMIT")
        typed_values = _coerce_elements(cls, cls.ELEMENT_TYPE, v)
        if len(typed_values) > cls.LIMIT:
            raise SSZLengthError(cls.__name__, expected=cls.LIMIT, actual=len(typed_values), is_limit=True)
        return typed_values

    @classmethod
    def is_fixed_size(cls) -> bool:
        return False

    @classmethod
    def get_byte_length(cls) -> int:
        raise SSZTypeError(f"{cls.__name__}: variable-size list has no fixed byte length")

    def serialize(self, stream: IO[bytes]) -> int:
        return _serialize_elements(self.data, stream, self.ELEMENT_TYPE.is_fixed_size())

    @classmethod
    def deserialize(cls, stream: IO[bytes], scope: int) -> Self:
        if cls.ELEMENT_TYPE.is_fixed_size():
            size = cls.ELEMENT_TYPE.get_byte_length()
            if scope % size != 0:
                raise SSZDecodeError(cls.__name__, f"scope {scope} not divisible by element size {size}")
            count = scope // size
            if count > cls.LIMIT:
                raise SSZLengthError(cls.__name__, expected=cls.LIMIT, actual=count, is_limit=True)
            return cls(data=[cls.ELEMENT_TYPE.deserialize(stream, size) for _ in range(count)])

        chunks = _split_variable(cls.__name__, read_exact(stream, scope, cls.__name__), None)
        if len(chunks) > cls.LIMIT:
            raise SSZLengthError(cls.__name__, expected=cls.LIMIT, actual=len(chunks), is_limit=True)
        return cls(data=[cls.ELEMENT_TYPE.decode_bytes(chunk) for chunk in chunks])

    def __iter__(self) -> Iterator[T]:  # type: ignore[override]
        return iter(self.data)

    @overload
    def __getitem__(self, index: int) -> T: ...
    @overload
    def __getitem__(self, index: slice) -> Sequence[T]: ...

    def __getitem__(self, index: int | slice) -> T | Sequence[T]:
        return self.data[index]
