"""Slot, epoch and period number types."""

from __future__ import annotations

from evm_light_client.types import Uint64


class Slot(Uint64):
    """A slot number: the fixed-duration time unit in which at most one block is proposed."""


class Epoch(Uint64):
    """An epoch number: a fixed number of consecutive slots."""


class SyncCommitteePeriod(Uint64):
    """A sync committee period: the span of epochs during which one committee signs."""


class ValidatorIndex(Uint64):
    """Index of a validator in the beacon state registry."""
