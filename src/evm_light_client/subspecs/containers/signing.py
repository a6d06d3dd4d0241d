"""Containers hashed while computing signing domains and signing roots."""

from __future__ import annotations

from evm_light_client.types import Bytes4, Bytes32, Container


class ForkData(Container):
    """Binds a fork version to one chain, identified by its genesis validators root."""

    current_version: Bytes4
    genesis_validators_root: Bytes32


class SigningData(Container):
    """The message a signature actually covers: an object root plus its domain."""

    object_root: Bytes32
    domain: Bytes32
