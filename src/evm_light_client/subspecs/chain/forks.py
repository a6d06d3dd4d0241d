"""Fork schedule lookups."""

from __future__ import annotations

from evm_light_client.errors import UnknownFork
from evm_light_client.subspecs.containers.slot import Epoch
from evm_light_client.types import Bytes4

from .config import ChainConfig, ForkParameter, ForkSpec


def compute_fork_parameter(config: ChainConfig, epoch: Epoch) -> ForkParameter:
    """
    Return the fork active at `epoch`.

    The active fork is the last schedule entry whose activation epoch is at
    or before `epoch`; when two entries share an epoch the later one wins.

    Raises:
        UnknownFork: If `epoch` precedes the first scheduled fork.
    """
    active: ForkParameter | None = None
    for fork in config.forks:
        if int(fork.epoch) > int(epoch):
            break
        active = fork
    if active is None:
        raise UnknownFork(
            f"Epoch {epoch} precedes the first scheduled fork at epoch {config.forks[0].epoch}"
        )
    return active


def compute_fork_version(config: ChainConfig, epoch: Epoch) -> Bytes4:
    """Fork version active at `epoch`."""
    return compute_fork_parameter(config, epoch).version


def compute_fork_spec(config: ChainConfig, epoch: Epoch) -> ForkSpec:
    """Generalized indices of the beacon state at `epoch`."""
    return compute_fork_parameter(config, epoch).spec
