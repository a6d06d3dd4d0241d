"""
Upstream data source interface.

The light client never trusts its upstream: everything it returns is
verified before it changes the store or reaches a caller. The interface is
a Protocol so that any object with matching coroutines can be injected, a
Beacon API client in production and an in-memory fake in tests.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Awaitable, Protocol, TypeVar

from evm_light_client.errors import UpstreamUnavailable

if TYPE_CHECKING:
    from evm_light_client.subspecs.containers import (
        BeaconBlock,
        BeaconBlockHeader,
        LightClientBootstrap,
        LightClientUpdate,
        Slot,
        SyncCommitteePeriod,
    )
    from evm_light_client.types import Bytes32

T = TypeVar("T")


class UpdateSource(Protocol):
    """
    Protocol for the upstream node a light client syncs from.

    Implementations raise `UpstreamUnavailable` for transport failures and
    `MalformedUpdate` for payloads that cannot be parsed.
    """

    # -------------------------------------------------------------------------
    # Updates
    # -------------------------------------------------------------------------

    async def get_update_for_period(self, period: SyncCommitteePeriod) -> LightClientUpdate:
        """
        Retrieve the best update of a sync committee period.

        Args:
            period: The sync committee period.

        Returns:
            The update whose attested header lies in `period`.
        """
        ...

    async def get_update_for_slot(self, slot: Slot) -> LightClientUpdate:
        """
        Retrieve the update of the period containing `slot`.

        Args:
            slot: Any slot of the wanted period.
        """
        ...

    async def get_update_for_block_number(self, block_number: int) -> LightClientUpdate:
        """
        Retrieve the update of the period containing an execution block.

        Args:
            block_number: Execution layer block number.
        """
        ...

    # -------------------------------------------------------------------------
    # Bootstrap and blocks
    # -------------------------------------------------------------------------

    async def get_bootstrap(self, block_root: Bytes32) -> LightClientBootstrap:
        """
        Retrieve the bootstrap for a trusted block root.

        Args:
            block_root: Root of the trusted checkpoint block.
        """
        ...

    async def get_header(self, slot: Slot) -> BeaconBlockHeader | None:
        """
        Retrieve the header of the canonical block at `slot`.

        Returns:
            The header, or None if the slot is empty.
        """
        ...

    async def get_block(self, slot: Slot) -> BeaconBlock | None:
        """
        Retrieve the canonical block at `slot`.

        Returns:
            The block, or None if the slot is empty.
        """
        ...


async def with_timeout(call: Awaitable[T], timeout: float, what: str) -> T:
    """
    Await an upstream call, bounding it by `timeout` seconds.

    Raises:
        UpstreamUnavailable: If the call does not finish in time.
    """
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except TimeoutError as exc:
        raise UpstreamUnavailable(f"Timed out after {timeout}s while fetching {what}") from exc
