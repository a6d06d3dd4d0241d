"""
Slot Clock
==========

Time, epoch and period arithmetic for the light client.

Every quantity is a 64-bit unsigned integer on chain. A computation whose
result would leave that range is not clamped or wrapped: it raises
`InvalidSlot`, so a hostile slot number can never alias a valid one.
"""

from __future__ import annotations

from dataclasses import dataclass
from time import time as wall_time
from typing import Callable, TypeVar

from evm_light_client.errors import InvalidSlot
from evm_light_client.subspecs.containers.slot import Epoch, Slot, SyncCommitteePeriod
from evm_light_client.types import SSZOverflowError, Uint64

from .config import ChainConfig

U = TypeVar("U", bound=Uint64)


def _checked(cls: type[U], value: int) -> U:
    """Build `cls(value)`, mapping a 64-bit overflow to `InvalidSlot`."""
    try:
        return cls(value)
    except SSZOverflowError as e:
        raise InvalidSlot(f"{cls.__name__} {value} does not fit in 64 bits") from e


def compute_epoch_at_slot(config: ChainConfig, slot: Slot) -> Epoch:
    """Epoch containing `slot`."""
    return Epoch(int(slot) // int(config.slots_per_epoch))


def compute_start_slot_at_epoch(config: ChainConfig, epoch: Epoch) -> Slot:
    """First slot of `epoch`."""
    return _checked(Slot, int(epoch) * int(config.slots_per_epoch))


def compute_sync_committee_period(config: ChainConfig, epoch: Epoch) -> SyncCommitteePeriod:
    """Sync committee period containing `epoch`."""
    return SyncCommitteePeriod(int(epoch) // int(config.epochs_per_sync_committee_period))


def compute_sync_committee_period_at_slot(config: ChainConfig, slot: Slot) -> SyncCommitteePeriod:
    """Sync committee period containing `slot`."""
    return compute_sync_committee_period(config, compute_epoch_at_slot(config, slot))


def compute_start_slot_at_period(config: ChainConfig, period: SyncCommitteePeriod) -> Slot:
    """First slot of sync committee `period`."""
    return _checked(Slot, int(period) * int(config.slots_per_period))


def slot_to_timestamp(config: ChainConfig, slot: Slot) -> Uint64:
    """Unix timestamp at which `slot` starts."""
    return _checked(Uint64, int(config.genesis_time) + int(slot) * int(config.seconds_per_slot))


def timestamp_to_slot(config: ChainConfig, timestamp: int) -> Slot:
    """Slot in progress at `timestamp`; any time before genesis maps to slot 0."""
    if timestamp < int(config.genesis_time):
        return Slot(0)
    return _checked(Slot, (timestamp - int(config.genesis_time)) // int(config.seconds_per_slot))


@dataclass(frozen=True, slots=True)
class SlotClock:
    """
    Converts wall-clock time to slots.

    All time values are in seconds (Unix timestamps).
    """

    config: ChainConfig
    """Chain parameters supplying genesis time and slot duration."""

    time_fn: Callable[[], float] = wall_time
    """Time source function (injectable for testing)."""

    def current_time(self) -> int:
        """Current wall-clock time in whole seconds."""
        return int(self.time_fn())

    def current_slot(self) -> Slot:
        """Current slot number (0 if before genesis)."""
        return timestamp_to_slot(self.config, self.current_time())

    def current_period(self) -> SyncCommitteePeriod:
        """Sync committee period of the current slot."""
        return compute_sync_committee_period_at_slot(self.config, self.current_slot())
