"""
Global configuration for the light client package.

Several preset values are part of the SSZ schema: the sync committee size
fixes the length of the pubkey vector and of the participation bitfield,
and the block body limits fix the Merkle depth of its lists. They must be
known when the container classes are defined, so the preset is selected
once, at import time, from the `LIGHT_CLIENT_PRESET` environment variable.
"""

import os
from typing import Final

_SUPPORTED_PRESETS: dict[str, dict[str, int]] = {
    "mainnet": {
        "SYNC_COMMITTEE_SIZE": 512,
        "MAX_COMMITTEES_PER_SLOT": 64,
        "MAX_WITHDRAWALS_PER_PAYLOAD": 16,
        "MAX_BLOB_COMMITMENTS_PER_BLOCK": 4096,
        "MAX_DEPOSIT_REQUESTS_PER_PAYLOAD": 8192,
        "MAX_WITHDRAWAL_REQUESTS_PER_PAYLOAD": 16,
    },
    "minimal": {
        "SYNC_COMMITTEE_SIZE": 32,
        "MAX_COMMITTEES_PER_SLOT": 4,
        "MAX_WITHDRAWALS_PER_PAYLOAD": 4,
        "MAX_BLOB_COMMITMENTS_PER_BLOCK": 32,
        "MAX_DEPOSIT_REQUESTS_PER_PAYLOAD": 4,
        "MAX_WITHDRAWAL_REQUESTS_PER_PAYLOAD": 2,
    },
}
"""Supported presets and the schema-affecting values that differ between them."""

LIGHT_CLIENT_PRESET = os.environ.get("LIGHT_CLIENT_PRESET", "mainnet").lower()
"""The preset flag ('mainnet' or 'minimal'). Defaults to 'mainnet'."""

if LIGHT_CLIENT_PRESET not in _SUPPORTED_PRESETS:
    raise ValueError(
        f"Invalid LIGHT_CLIENT_PRESET environment variable: '{LIGHT_CLIENT_PRESET}'. "
        f"Supported values: {sorted(_SUPPORTED_PRESETS)}"
    )

_PRESET = _SUPPORTED_PRESETS[LIGHT_CLIENT_PRESET]

SYNC_COMMITTEE_SIZE: Final[int] = _PRESET["SYNC_COMMITTEE_SIZE"]
"""Number of validators in a sync committee for the active preset."""

MAX_COMMITTEES_PER_SLOT: Final[int] = _PRESET["MAX_COMMITTEES_PER_SLOT"]
"""Upper bound on beacon committees per slot; sizes Electra attestation bitfields."""

MAX_WITHDRAWALS_PER_PAYLOAD: Final[int] = _PRESET["MAX_WITHDRAWALS_PER_PAYLOAD"]
"""Withdrawals an execution payload may carry (Capella and later)."""

MAX_BLOB_COMMITMENTS_PER_BLOCK: Final[int] = _PRESET["MAX_BLOB_COMMITMENTS_PER_BLOCK"]
"""KZG commitments a block body may carry (Deneb and later)."""

MAX_DEPOSIT_REQUESTS_PER_PAYLOAD: Final[int] = _PRESET["MAX_DEPOSIT_REQUESTS_PER_PAYLOAD"]
"""Deposit requests per payload (Electra and later)."""

MAX_WITHDRAWAL_REQUESTS_PER_PAYLOAD: Final[int] = _PRESET["MAX_WITHDRAWAL_REQUESTS_PER_PAYLOAD"]
"""Withdrawal requests per payload (Electra and later)."""
