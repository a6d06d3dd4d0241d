"""Constants defined in the SSZ specification."""

from evm_light_client.types.byte_arrays import ZERO_HASH
from evm_light_client.types.constants import BITS_PER_BYTE, BYTES_PER_CHUNK

__all__ = ["BITS_PER_BYTE", "BYTES_PER_CHUNK", "ZERO_HASH"]
