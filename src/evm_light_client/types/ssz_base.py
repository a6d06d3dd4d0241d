"""Base classes and interfaces for all SSZ types."""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from typing import IO, Any

from typing_extensions import Iterator, Self

from .base import StrictBaseModel
from .exceptions import SSZDecodeError


class SSZType(ABC):
    """
    Abstract base class for all SSZ types.

    Scalar types (integers, byte vectors, booleans) subclass this directly next
    to their Python builtin. Composite types use `SSZModel`.
    """

    @classmethod
    @abstractmethod
    def is_fixed_size(cls) -> bool:
        """Return True if every value of the type encodes to the same number of bytes."""

    @classmethod
    @abstractmethod
    def get_byte_length(cls) -> int:
        """
        Return the encoded length of a fixed-size type.

        Raises:
            TypeError: If the type is variable-size.
        """

    @abstractmethod
    def serialize(self, stream: IO[bytes]) -> int:
        """Write the encoding to `stream` and return the number of bytes written."""

    @classmethod
    @abstractmethod
    def deserialize(cls, stream: IO[bytes], scope: int) -> Self:
        """Read a value that occupies exactly `scope` bytes of `stream`."""

    def encode_bytes(self) -> bytes:
        """Serialize the value to a byte string."""
        with io.BytesIO() as stream:
            self.serialize(stream)
            return stream.getvalue()

    @classmethod
    def decode_bytes(cls, data: bytes) -> Self:
        """
        Deserialize a byte string that holds exactly one value.

        Raises:
            SSZDecodeError: If bytes are left over after the value was read.
        """
        with io.BytesIO(data) as stream:
            value = cls.deserialize(stream, len(data))
            if stream.tell() != len(data):
                raise SSZDecodeError(cls.__name__, f"{len(data) - stream.tell()} trailing bytes")
            return value


def read_exact(stream: IO[bytes], size: int, type_name: str) -> bytes:
    """Read exactly `size` bytes or raise `SSZDecodeError`."""
    data = stream.read(size)
    if len(data) != size:
        raise SSZDecodeError(type_name, f"expected {size} bytes, stream ended after {len(data)}")
    return data


class SSZModel(StrictBaseModel, SSZType):
    """
    Base class for SSZ types built on pydantic models.

    Collections store their elements in a `data` field and get natural
    iteration and indexing: `for item in collection`, `collection[i]` and
    `len(collection)`.
    """

    def __len__(self) -> int:
        """Return the number of elements held in `data`."""
        return len(self.data)  # type: ignore[attr-defined]

    def __iter__(self) -> Iterator[Any]:  # type: ignore[override]
        """Iterate over the elements held in `data`."""
        return iter(self.data)  # type: ignore[attr-defined]

    def __getitem__(self, key: Any) -> Any:
        """Index into `data`."""
        return self.data[key]  # type: ignore[attr-defined]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(data={list(self.data)!r})"  # type: ignore[attr-defined]
