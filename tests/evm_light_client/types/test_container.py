"""Tests for SSZ containers and their canonical encoding."""

from __future__ import annotations

import pytest

from evm_light_client.subspecs.containers import BeaconBlockHeader, MerkleBranch
from evm_light_client.types import (
    Boolean,
    Bytes32,
    Container,
    SSZDecodeError,
    Uint32,
)
from tests.evm_light_client.helpers import make_header


class Mixed(Container):
    """A fixed field, a variable field, and a fixed field."""

    first: Uint32
    branch: MerkleBranch
    flag: Boolean


class TestFixedContainer:
    """Tests for containers made only of fixed-size fields."""

    def test_header_is_fixed_size(self) -> None:
        """A header is five fields packed back to back."""
        assert BeaconBlockHeader.is_fixed_size()
        assert BeaconBlockHeader.get_byte_length() == 8 + 8 + 32 * 3

    def test_header_roundtrip(self) -> None:
        """A decoded header equals the original."""
        header = make_header(42)
        assert BeaconBlockHeader.decode_bytes(header.encode_bytes()) == header

    def test_trailing_bytes_rejected(self) -> None:
        """Bytes after the last field are not part of any value."""
        with pytest.raises(SSZDecodeError):
            BeaconBlockHeader.decode_bytes(make_header(1).encode_bytes() + b"\x00")

    def test_truncated_rejected(self) -> None:
        """A short encoding does not decode."""
        with pytest.raises(SSZDecodeError):
            BeaconBlockHeader.decode_bytes(make_header(1).encode_bytes()[:-1])


class TestVariableContainer:
    """Tests for containers with offsets."""

    def _value(self) -> Mixed:
        return Mixed(
            first=Uint32(7),
            branch=MerkleBranch(data=[Bytes32(b"\x01" * 32), Bytes32(b"\x02" * 32)]),
            flag=Boolean(True),
        )

    def test_layout(self) -> None:
        """Fixed fields and the offset come first, list data last."""
        encoded = self._value().encode_bytes()
        assert Uint32.decode_bytes(encoded[0:4]) == 7
        assert Uint32.decode_bytes(encoded[4:8]) == 9
        assert encoded[8] == 1
        assert encoded[9:] == b"\x01" * 32 + b"\x02" * 32

    def test_roundtrip(self) -> None:
        """A decoded container equals the original."""
        value = self._value()
        assert Mixed.decode_bytes(value.encode_bytes()) == value

    def test_first_offset_must_follow_fixed_part(self) -> None:
        """An offset pointing anywhere but the end of the fixed part is rejected."""
        encoded = bytearray(self._value().encode_bytes())
        encoded[4:8] = Uint32(10).encode_bytes()
        with pytest.raises(SSZDecodeError):
            Mixed.decode_bytes(bytes(encoded))

    def test_bad_boolean_byte_rejected(self) -> None:
        """A boolean byte other than 0 or 1 is non-canonical."""
        encoded = bytearray(self._value().encode_bytes())
        encoded[8] = 2
        with pytest.raises(SSZDecodeError):
            Mixed.decode_bytes(bytes(encoded))

    def test_partial_list_element_rejected(self) -> None:
        """List data must be a whole number of elements."""
        with pytest.raises(SSZDecodeError):
            Mixed.decode_bytes(self._value().encode_bytes()[:-1])


class TestReplace:
    """Tests for immutable updates."""

    def test_replace_returns_new_value(self) -> None:
        """`replace` leaves the original untouched."""
        header = make_header(5)
        moved = header.replace(slot=header.slot + 1)
        assert header.slot == 5
        assert moved.slot == 6
        assert moved.state_root == header.state_root

    def test_frozen(self) -> None:
        """Fields cannot be assigned."""
        header = make_header(5)
        with pytest.raises(ValueError):
            header.slot = header.slot + 1  # type: ignore[misc]
