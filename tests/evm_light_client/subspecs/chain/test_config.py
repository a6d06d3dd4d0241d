"""Tests for the chain configuration model."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from evm_light_client.subspecs.chain import (
    ALTAIR_FORK_SPEC,
    ELECTRA_FORK_SPEC,
    ChainConfig,
    ForkParameter,
    Fraction,
)
from evm_light_client.subspecs.containers import Epoch
from evm_light_client.types import Bytes4, Bytes32, Uint64
from tests.evm_light_client.helpers import make_config

CONFIG_YAML = """
GENESIS_TIME: 1606824023
SECONDS_PER_SLOT: 12
SLOTS_PER_EPOCH: 32
EPOCHS_PER_SYNC_COMMITTEE_PERIOD: 256
GENESIS_VALIDATORS_ROOT: "0x4b363db94e286120d76eb905340fdd4e54bfe9f06bf33ff6cf5ad27f511bfe95"
SIGNATURE_THRESHOLD: {NUMERATOR: 3, DENOMINATOR: 4}
MIN_SYNC_COMMITTEE_PARTICIPANTS: 10
FORKS:
- {VERSION: 0x01000000, EPOCH: 74240, SPEC: altair}
- {VERSION: "0x05000000", EPOCH: 364032, SPEC: electra}
"""


class TestDefaults:
    """Tests for default parameters."""

    def test_mainnet(self) -> None:
        """Mainnet has 12 second slots, 32 slot epochs and five light client forks."""
        config = ChainConfig.mainnet()
        assert config.seconds_per_slot == 12
        assert config.slots_per_epoch == 32
        assert config.slots_per_period == 8192
        assert len(config.forks) == 5
        assert config.forks[0].spec == ALTAIR_FORK_SPEC
        assert config.forks[-1].spec == ELECTRA_FORK_SPEC

    def test_default_threshold(self, config: ChainConfig) -> None:
        """Two thirds of the committee and one signer by default."""
        assert config.signature_threshold == Fraction(numerator=2, denominator=3)
        assert config.min_sync_committee_participants == 1

    def test_update_timeout_is_one_period(self, config: ChainConfig) -> None:
        """Finality may be forced after one period without it."""
        assert config.update_timeout == config.slots_per_period == 256


class TestYaml:
    """Tests for YAML loading."""

    def test_from_yaml(self) -> None:
        """UPPERCASE keys map onto the model, unquoted hex included."""
        config = ChainConfig.from_yaml(CONFIG_YAML)
        assert config.genesis_time == 1606824023
        assert config.genesis_validators_root == Bytes32(
            "0x4b363db94e286120d76eb905340fdd4e54bfe9f06bf33ff6cf5ad27f511bfe95"
        )
        assert config.signature_threshold == Fraction(numerator=3, denominator=4)
        assert config.min_sync_committee_participants == 10
        assert config.forks[0].version == Bytes4("0x01000000")
        assert config.forks[0].epoch == 74240
        assert config.forks[1].spec == ELECTRA_FORK_SPEC

    def test_from_yaml_file(self, tmp_path: Path) -> None:
        """Files load the same as strings."""
        path = tmp_path / "config.yaml"
        path.write_text(CONFIG_YAML, encoding="utf-8")
        assert ChainConfig.from_yaml_file(path) == ChainConfig.from_yaml(CONFIG_YAML)

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file is reported as such."""
        with pytest.raises(FileNotFoundError):
            ChainConfig.from_yaml_file(tmp_path / "absent.yaml")

    def test_unknown_spec_name(self) -> None:
        """Fork spec names must be known."""
        with pytest.raises(ValidationError):
            ChainConfig.from_yaml(CONFIG_YAML.replace("SPEC: electra", "SPEC: osaka"))

    def test_unknown_key(self) -> None:
        """Unknown keys are rejected."""
        with pytest.raises(ValidationError):
            ChainConfig.from_yaml(CONFIG_YAML + "\nSHARD_COUNT: 64\n")


class TestValidation:
    """Tests for parameter validation."""

    def test_forks_out_of_order(self) -> None:
        """A schedule must not go back in time."""
        with pytest.raises(ValidationError):
            make_config(
                forks=(
                    ForkParameter(version=Bytes4("0x02000000"), epoch=Epoch(10), spec=ALTAIR_FORK_SPEC),
                    ForkParameter(version=Bytes4("0x01000000"), epoch=Epoch(5), spec=ALTAIR_FORK_SPEC),
                )
            )

    def test_empty_schedule(self) -> None:
        """A schedule must contain at least one fork."""
        with pytest.raises(ValidationError):
            make_config(forks=())

    def test_equal_epochs_allowed(self) -> None:
        """Two forks may activate at the same epoch."""
        config = make_config(
            forks=(
                ForkParameter(version=Bytes4("0x01000000"), epoch=Epoch(0), spec=ALTAIR_FORK_SPEC),
                ForkParameter(version=Bytes4("0x02000000"), epoch=Epoch(0), spec=ALTAIR_FORK_SPEC),
            )
        )
        assert len(config.forks) == 2

    def test_zero_slots_per_epoch(self) -> None:
        """Time parameters must be positive."""
        with pytest.raises(ValidationError):
            make_config(slots_per_epoch=Uint64(0))

    def test_threshold_above_one(self) -> None:
        """A threshold that can never be met is rejected."""
        with pytest.raises(ValidationError):
            Fraction(numerator=4, denominator=3)

    def test_zero_denominator(self) -> None:
        """The denominator must be positive."""
        with pytest.raises(ValidationError):
            Fraction(numerator=0, denominator=0)

    def test_frozen(self, config: ChainConfig) -> None:
        """Configurations cannot be modified."""
        with pytest.raises(ValidationError):
            config.genesis_time = Uint64(0)  # type: ignore[misc]
