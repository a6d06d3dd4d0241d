"""Constants used throughout the type system."""

from __future__ import annotations

from typing import Final

OFFSET_BYTE_LENGTH: Final = 4
"""The number of bytes used to represent the offset of a variable-sized element."""

BYTES_PER_CHUNK: Final = 32
"""Number of bytes per Merkle chunk."""

BITS_PER_BYTE: Final = 8
"""Number of bits per byte."""
