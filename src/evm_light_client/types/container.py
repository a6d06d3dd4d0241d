"""
SSZ Container Type: Ordered heterogeneous collections with named fields.

Containers are the structured values of the beacon chain: headers, sync
committees, light client updates and the persisted store are all containers.
"""

from __future__ import annotations

from typing import IO, Type, cast

from typing_extensions import Self

from .base import StrictBaseModel
from .constants import OFFSET_BYTE_LENGTH
from .exceptions import SSZDecodeError, SSZOffsetError
from .ssz_base import SSZType, read_exact
from .uint import Uint32


class Container(StrictBaseModel, SSZType):
    """
    SSZ Container: A strict, ordered collection of heterogeneous named fields.

    Key properties:
    - Fields are serialized in definition order
    - Fixed-size fields are packed directly
    - Variable-size fields use offset pointers
    - Inherits Pydantic validation for type safety

    Example:
        >>> class BeaconBlockHeader(Container):
        ...     slot: Slot
        ...     proposer_index: ValidatorIndex
        ...     parent_root: Bytes32
        ...     state_root: Bytes32
        ...     body_root: Bytes32

    Serialization format:
        [fixed_field_1][offset_1][fixed_field_2]...[variable_data_1]...
    """

    @classmethod
    def _field_types(cls) -> list[tuple[str, Type[SSZType]]]:
        """Return `(name, type)` for every field in declaration order."""
        return [
            (name, cast(Type[SSZType], info.annotation)) for name, info in cls.model_fields.items()
        ]

    @classmethod
    def is_fixed_size(cls) -> bool:
        """A container is fixed-size only when all of its fields are."""
        return all(field_type.is_fixed_size() for _, field_type in cls._field_types())

    @classmethod
    def get_byte_length(cls) -> int:
        """
        Sum the byte lengths of all fields.

        Raises:
            TypeError: If called on a variable-size container.
        """
        if not cls.is_fixed_size():
            raise TypeError(f"{cls.__name__} is variable-size")
        return sum(field_type.get_byte_length() for _, field_type in cls._field_types())

    @classmethod
    def _fixed_part_length(cls) -> int:
        """Length of the fixed part: fixed fields inline, offsets for variable ones."""
        return sum(
            field_type.get_byte_length() if field_type.is_fixed_size() else OFFSET_BYTE_LENGTH
            for _, field_type in cls._field_types()
        )

    def serialize(self, stream: IO[bytes]) -> int:
        """
        Write the fixed part (inline values and offsets) then the variable part.

        Returns:
            Number of bytes written to the stream.
        """
        fixed_parts: list[bytes | None] = []
        variable_data: list[bytes] = []

        for name, field_type in self._field_types():
            value = cast(SSZType, getattr(self, name))
            if field_type.is_fixed_size():
                fixed_parts.append(value.encode_bytes())
            else:
                # Placeholder, replaced by an offset below.
                fixed_parts.append(None)
                variable_data.append(value.encode_bytes())

        offset = self._fixed_part_length()
        var_index = 0
        for part in fixed_parts:
            if part is not None:
                stream.write(part)
            else:
                Uint32(offset).serialize(stream)
                offset += len(variable_data[var_index])
                var_index += 1

        for data in variable_data:
            stream.write(data)

        return offset

    @classmethod
    def deserialize(cls, stream: IO[bytes], scope: int) -> Self:
        """
        Read the fixed part, then slice the variable part using the offsets.

        Offsets must start exactly at the end of the fixed part and never
        decrease, so every value has a single valid encoding.

        Raises:
            SSZDecodeError: If the encoding is truncated or non-canonical.
        """
        data = read_exact(stream, scope, cls.__name__)
        fixed_length = cls._fixed_part_length()
        if scope < fixed_length:
            raise SSZDecodeError(cls.__name__, f"expected at least {fixed_length} bytes, got {scope}")

        fields: dict[str, SSZType] = {}
        var_fields: list[tuple[str, Type[SSZType], int]] = []
        position = 0

        # Phase 1: fixed fields and offsets.
        for name, field_type in cls._field_types():
            if field_type.is_fixed_size():
                size = field_type.get_byte_length()
                fields[name] = field_type.decode_bytes(data[position : position + size])
                position += size
            else:
                offset = int(Uint32.decode_bytes(data[position : position + OFFSET_BYTE_LENGTH]))
                var_fields.append((name, field_type, offset))
                position += OFFSET_BYTE_LENGTH

        # Phase 2: variable fields.
        if not var_fields:
            if scope != fixed_length:
                raise SSZDecodeError(cls.__name__, f"expected {fixed_length} bytes, got {scope}")
        else:
            if var_fields[0][2] != fixed_length:
                raise SSZOffsetError(cls.__name__, start=var_fields[0][2], end=fixed_length)
            boundaries = [offset for _, _, offset in var_fields] + [scope]
            for i, (name, field_type, start) in enumerate(var_fields):
                end = boundaries[i + 1]
                if start > end:
                    raise SSZOffsetError(cls.__name__, start=start, end=end)
                fields[name] = field_type.decode_bytes(data[start:end])

        return cls(**fields)
