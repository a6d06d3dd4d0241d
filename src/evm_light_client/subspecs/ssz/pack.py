"""Packing helpers that arrange serialized bytes into 32-byte chunks."""

from __future__ import annotations

from typing import List, Sequence

from evm_light_client.types.byte_arrays import Bytes32

from .constants import BITS_PER_BYTE, BYTES_PER_CHUNK


class Packer:
    """Collection of static helpers to pack byte data into 32-byte chunks."""

    @staticmethod
    def pack_bytes(data: bytes) -> List[Bytes32]:
        """Right-pad `data` with zeros to a chunk boundary and split it into chunks."""
        if len(data) % BYTES_PER_CHUNK:
            data += b"\x00" * (BYTES_PER_CHUNK - len(data) % BYTES_PER_CHUNK)
        return [Bytes32(data[i : i + BYTES_PER_CHUNK]) for i in range(0, len(data), BYTES_PER_CHUNK)]

    @staticmethod
    def pack_bits(bits: Sequence[bool]) -> List[Bytes32]:
        """Pack booleans little-endian into bytes, then into chunks (no length delimiter)."""
        packed = bytearray((len(bits) + BITS_PER_BYTE - 1) // BITS_PER_BYTE)
        for i, bit in enumerate(bits):
            if bit:
                packed[i // BITS_PER_BYTE] |= 1 << (i % BITS_PER_BYTE)
        return Packer.pack_bytes(bytes(packed))
