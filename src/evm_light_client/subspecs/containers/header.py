"""Beacon block header container."""

from __future__ import annotations

from evm_light_client.types import Bytes32, Container

from .slot import Slot, ValidatorIndex


class BeaconBlockHeader(Container):
    """
    The header of a beacon block.

    A light client never sees block bodies during sync; it tracks headers and
    identifies them by their hash tree root. The state root is the anchor for
    every Merkle proof carried by an update.
    """

    slot: Slot
    """The slot in which the block was proposed."""

    proposer_index: ValidatorIndex
    """The index of the validator that proposed the block."""

    parent_root: Bytes32
    """The hash tree root of the parent block's header."""

    state_root: Bytes32
    """The hash tree root of the post-state of the block."""

    body_root: Bytes32
    """The hash tree root of the block body."""

    @classmethod
    def empty(cls) -> BeaconBlockHeader:
        """The all-zero header, used where the protocol encodes an absent header."""
        return cls(
            slot=Slot(0),
            proposer_index=ValidatorIndex(0),
            parent_root=Bytes32.zero(),
            state_root=Bytes32.zero(),
            body_root=Bytes32.zero(),
        )
