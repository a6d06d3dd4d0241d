"""
Mock collaborators for testing the sync layer and the service.

Each mock provides a minimal in-memory implementation and records requests.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from evm_light_client.errors import UpstreamUnavailable
from evm_light_client.subspecs.containers import (
    BeaconBlock,
    BeaconBlockHeader,
    LightClientBootstrap,
    LightClientUpdate,
    Slot,
    SyncCommitteePeriod,
)
from evm_light_client.subspecs.ssz.hash import hash_tree_root
from evm_light_client.types import Bytes32

from .builders import TEST_SLOTS_PER_PERIOD


@dataclass
class MockUpdateSource:
    """Upstream serving pre-configured updates, bootstraps, headers and blocks."""

    updates: dict[int, LightClientUpdate] = field(default_factory=dict)
    """Updates by sync committee period."""

    bootstraps: dict[Bytes32, LightClientBootstrap] = field(default_factory=dict)
    """Bootstraps by block root."""

    blocks: dict[int, BeaconBlock] = field(default_factory=dict)
    """Blocks by slot; a missing slot is empty."""

    headers: dict[int, BeaconBlockHeader] = field(default_factory=dict)
    """Headers served instead of the header of the block at the same slot."""

    block_numbers: dict[int, int] = field(default_factory=dict)
    """Slot of each execution block number."""

    requests: list[str] = field(default_factory=list)
    """Log of every request, in order."""

    should_fail: bool = False
    """Raise `UpstreamUnavailable` on every request."""

    delay: float = 0.0
    """Seconds to wait before answering."""

    async def _answer(self, request: str) -> None:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.should_fail:
            raise UpstreamUnavailable(f"Mock upstream failed on {request}")

    def add_bootstrap(self, bootstrap: LightClientBootstrap) -> Bytes32:
        """Serve `bootstrap` under its header root. Returns the root."""
        root = hash_tree_root(bootstrap.header)
        self.bootstraps[root] = bootstrap
        return root

    def add_blocks(self, blocks: list[BeaconBlock]) -> None:
        """Serve `blocks` by slot."""
        for block in blocks:
            self.blocks[int(block.slot)] = block

    async def get_update_for_period(self, period: SyncCommitteePeriod) -> LightClientUpdate:
        await self._answer(f"update:period:{int(period)}")
        if int(period) not in self.updates:
            raise UpstreamUnavailable(f"No update for period {period}")
        return self.updates[int(period)]

    async def get_update_for_slot(self, slot: Slot) -> LightClientUpdate:
        return await self.get_update_for_period(
            SyncCommitteePeriod(int(slot) // TEST_SLOTS_PER_PERIOD)
        )

    async def get_update_for_block_number(self, block_number: int) -> LightClientUpdate:
        if block_number not in self.block_numbers:
            raise UpstreamUnavailable(f"Unknown block number {block_number}")
        return await self.get_update_for_slot(Slot(self.block_numbers[block_number]))

    async def get_bootstrap(self, block_root: Bytes32) -> LightClientBootstrap:
        await self._answer(f"bootstrap:0x{block_root.hex()}")
        if block_root not in self.bootstraps:
            raise UpstreamUnavailable(f"No bootstrap for 0x{block_root.hex()}")
        return self.bootstraps[block_root]

    async def get_header(self, slot: Slot) -> BeaconBlockHeader | None:
        await self._answer(f"header:{int(slot)}")
        if int(slot) in self.headers:
            return self.headers[int(slot)]
        block = self.blocks.get(int(slot))
        return block.header() if block is not None else None

    async def get_block(self, slot: Slot) -> BeaconBlock | None:
        await self._answer(f"block:{int(slot)}")
        return self.blocks.get(int(slot))


@dataclass
class FailingKeyValueStore:
    """Key/value provider whose every call fails like a broken disk."""

    def get(self, key: str) -> bytes | None:
        raise OSError(f"read of {key} failed")

    def put(self, key: str, value: bytes) -> None:
        raise OSError(f"write of {key} failed")

    def delete(self, key: str) -> None:
        raise OSError(f"delete of {key} failed")
