"""
Chain configuration: time parameters, fork schedule and trust threshold.

A light client must reproduce the chain's slot, epoch and period arithmetic
and its fork schedule exactly: a wrong fork version yields a wrong signing
domain, and a wrong generalized index makes every Merkle proof fail.

Configurations load from YAML files using the cross-client UPPERCASE
convention:

    GENESIS_TIME: 1606824023
    SECONDS_PER_SLOT: 12
    SLOTS_PER_EPOCH: 32
    EPOCHS_PER_SYNC_COMMITTEE_PERIOD: 256
    GENESIS_VALIDATORS_ROOT: "0x4b363db9..."
    SIGNATURE_THRESHOLD: {NUMERATOR: 2, DENOMINATOR: 3}
    MIN_SYNC_COMMITTEE_PARTICIPANTS: 1
    FORKS:
    - {VERSION: "0x01000000", EPOCH: 74240, SPEC: altair}
    - {VERSION: "0x05000000", EPOCH: 364032, SPEC: electra}
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator, model_validator
from typing_extensions import Final

from evm_light_client.subspecs.containers.slot import Epoch
from evm_light_client.types import Bytes4, Bytes32, StrictBaseModel, Uint64

# --- Domain Types ---

DOMAIN_SYNC_COMMITTEE: Final = Bytes4(bytes.fromhex("07000000"))
"""Domain type of sync committee signatures."""

# --- Mainnet Parameters ---

MAINNET_GENESIS_TIME: Final = Uint64(1606824023)
"""Unix timestamp of mainnet slot 0."""

MAINNET_GENESIS_VALIDATORS_ROOT: Final = Bytes32(
    "0x4b363db94e286120d76eb905340fdd4e54bfe9f06bf33ff6cf5ad27f511bfe95"
)
"""Root of the mainnet genesis validator registry; binds signatures to mainnet."""

SECONDS_PER_SLOT: Final = Uint64(12)
"""The fixed duration of a single slot in seconds."""

SLOTS_PER_EPOCH: Final = Uint64(32)
"""Number of slots in an epoch."""

EPOCHS_PER_SYNC_COMMITTEE_PERIOD: Final = Uint64(256)
"""Number of epochs a sync committee stays active (about 27 hours on mainnet)."""


def _hex_from_yaml(value: Any, length: int) -> Any:
    """
    Undo YAML's integer parsing of unquoted `0x...` values.

    YAML 1.1 reads `0x01000000` as the integer 16777216.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return "0x" + value.to_bytes(length, "big").hex()
    return value


class Fraction(StrictBaseModel):
    """A ratio of two positive integers, used for the participation threshold."""

    numerator: int = Field(alias="NUMERATOR", ge=0)
    denominator: int = Field(alias="DENOMINATOR", gt=0)

    @model_validator(mode="after")
    def check_proper(self) -> Fraction:
        """A threshold above one could never be met."""
        if self.numerator > self.denominator:
            raise ValueError(f"Fraction {self.numerator}/{self.denominator} is greater than one")
        return self


class ForkSpec(StrictBaseModel):
    """
    Generalized indices of the state fields a light client proves, for one fork.

    They change whenever a fork grows the beacon state past a power of two.
    """

    finalized_root_gindex: int = Field(alias="FINALIZED_ROOT_GINDEX", gt=1)
    """get_generalized_index(BeaconState, 'finalized_checkpoint', 'root')"""

    current_sync_committee_gindex: int = Field(alias="CURRENT_SYNC_COMMITTEE_GINDEX", gt=1)
    """get_generalized_index(BeaconState, 'current_sync_committee')"""

    next_sync_committee_gindex: int = Field(alias="NEXT_SYNC_COMMITTEE_GINDEX", gt=1)
    """get_generalized_index(BeaconState, 'next_sync_committee')"""


ALTAIR_FORK_SPEC: Final = ForkSpec(
    finalized_root_gindex=105,
    current_sync_committee_gindex=54,
    next_sync_committee_gindex=55,
)
"""Indices for Altair through Deneb (a 32-leaf state tree)."""

ELECTRA_FORK_SPEC: Final = ForkSpec(
    finalized_root_gindex=169,
    current_sync_committee_gindex=86,
    next_sync_committee_gindex=87,
)
"""Indices from Electra on (a 64-leaf state tree)."""

FORK_SPECS: Final[dict[str, ForkSpec]] = {
    "altair": ALTAIR_FORK_SPEC,
    "bellatrix": ALTAIR_FORK_SPEC,
    "capella": ALTAIR_FORK_SPEC,
    "deneb": ALTAIR_FORK_SPEC,
    "electra": ELECTRA_FORK_SPEC,
    "fulu": ELECTRA_FORK_SPEC,
}
"""Named index sets, so YAML schedules can say `SPEC: deneb`."""


class ForkParameter(StrictBaseModel):
    """One entry of the fork schedule."""

    version: Bytes4 = Field(alias="VERSION")
    """Fork version mixed into the signing domain."""

    epoch: Epoch = Field(alias="EPOCH")
    """First epoch of the fork."""

    spec: ForkSpec = Field(alias="SPEC")
    """Generalized indices of the fork's beacon state."""

    @field_validator("version", mode="before")
    @classmethod
    def parse_version(cls, v: Any) -> Any:
        return _hex_from_yaml(v, Bytes4.LENGTH)

    @field_validator("spec", mode="before")
    @classmethod
    def resolve_named_spec(cls, v: Any) -> Any:
        """Accept a fork name in place of explicit indices."""
        if isinstance(v, str):
            try:
                return FORK_SPECS[v.lower()]
            except KeyError:
                raise ValueError(f"Unknown fork spec name {v!r}") from None
        return v


class ChainConfig(StrictBaseModel):
    """
    Every chain parameter the light client depends on.

    Field names use UPPERCASE aliases to match cross-client YAML files.
    """

    genesis_time: Uint64 = Field(alias="GENESIS_TIME")
    """Unix timestamp (seconds) at which slot 0 begins."""

    seconds_per_slot: Uint64 = Field(default=SECONDS_PER_SLOT, alias="SECONDS_PER_SLOT")
    """Slot duration in seconds."""

    slots_per_epoch: Uint64 = Field(default=SLOTS_PER_EPOCH, alias="SLOTS_PER_EPOCH")
    """Number of slots in an epoch."""

    epochs_per_sync_committee_period: Uint64 = Field(
        default=EPOCHS_PER_SYNC_COMMITTEE_PERIOD, alias="EPOCHS_PER_SYNC_COMMITTEE_PERIOD"
    )
    """Number of epochs in a sync committee period."""

    genesis_validators_root: Bytes32 = Field(alias="GENESIS_VALIDATORS_ROOT")
    """Identifies the chain inside every signing domain."""

    forks: tuple[ForkParameter, ...] = Field(alias="FORKS")
    """Fork schedule in ascending epoch order; the first entry is the first light-client fork."""

    signature_threshold: Fraction = Field(
        default=Fraction(numerator=2, denominator=3), alias="SIGNATURE_THRESHOLD"
    )
    """Minimum fraction of the committee that must sign an update."""

    min_sync_committee_participants: int = Field(
        default=1, alias="MIN_SYNC_COMMITTEE_PARTICIPANTS", ge=1
    )
    """Absolute minimum number of signers, whatever the fraction says."""

    @field_validator("genesis_validators_root", mode="before")
    @classmethod
    def parse_root(cls, v: Any) -> Any:
        return _hex_from_yaml(v, Bytes32.LENGTH)

    @field_validator("forks", mode="before")
    @classmethod
    def parse_forks(cls, v: Any) -> Any:
        """YAML yields a list; the model stores an immutable tuple."""
        return tuple(v) if isinstance(v, list) else v

    @field_validator("seconds_per_slot", "slots_per_epoch", "epochs_per_sync_committee_period")
    @classmethod
    def check_positive(cls, v: Uint64) -> Uint64:
        if v == 0:
            raise ValueError("time parameters must be positive")
        return v

    @model_validator(mode="after")
    def check_fork_schedule(self) -> ChainConfig:
        """The schedule must be non-empty and ordered by activation epoch."""
        if not self.forks:
            raise ValueError("Fork schedule must contain at least one fork")
        for previous, current in zip(self.forks, self.forks[1:], strict=False):
            if current.epoch < previous.epoch:
                raise ValueError(
                    f"Fork schedule out of order: epoch {current.epoch} follows {previous.epoch}"
                )
        return self

    @property
    def slots_per_period(self) -> Uint64:
        """Number of slots in a sync committee period."""
        return self.slots_per_epoch * self.epochs_per_sync_committee_period

    @property
    def update_timeout(self) -> Uint64:
        """Slots without finality after which the best pending update may be forced."""
        return self.slots_per_period

    @classmethod
    def mainnet(cls) -> ChainConfig:
        """The Ethereum mainnet configuration."""
        return cls(
            genesis_time=MAINNET_GENESIS_TIME,
            genesis_validators_root=MAINNET_GENESIS_VALIDATORS_ROOT,
            forks=(
                ForkParameter(version=Bytes4("0x01000000"), epoch=Epoch(74240), spec=ALTAIR_FORK_SPEC),
                ForkParameter(version=Bytes4("0x02000000"), epoch=Epoch(144896), spec=ALTAIR_FORK_SPEC),
                ForkParameter(version=Bytes4("0x03000000"), epoch=Epoch(194048), spec=ALTAIR_FORK_SPEC),
                ForkParameter(version=Bytes4("0x04000000"), epoch=Epoch(269568), spec=ALTAIR_FORK_SPEC),
                ForkParameter(version=Bytes4("0x05000000"), epoch=Epoch(364032), spec=ELECTRA_FORK_SPEC),
            ),
        )

    @classmethod
    def from_yaml_file(cls, path: Path | str) -> ChainConfig:
        """
        Load configuration from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            yaml.YAMLError: If the file is not valid YAML.
            pydantic.ValidationError: If the data fails validation.
        """
        path = Path(path)
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data)

    @classmethod
    def from_yaml(cls, content: str) -> ChainConfig:
        """Load configuration from a YAML string."""
        return cls.model_validate(yaml.safe_load(content))
