"""
Beacon API client for light client data.

Fetches updates, bootstraps, headers and blocks from a beacon node over the
standard REST API. Light client data and headers arrive as JSON and are parsed
into SSZ containers. Blocks arrive SSZ encoded, decoded with the signed block
type of the fork named in the `Eth-Consensus-Version` response header.

Trust model:

- Nothing returned here is trusted. Updates and bootstraps are verified by
  the store logic, blocks are authenticated against finalized headers.
- Transport failures and HTTP errors become `UpstreamUnavailable`, which a
  caller may retry.
- Payloads that do not parse become `MalformedUpdate`: a node serving them
  is either broken or hostile, and retrying will not help.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from evm_light_client.errors import MalformedUpdate, UpstreamUnavailable
from evm_light_client.subspecs.chain.clock import compute_sync_committee_period_at_slot
from evm_light_client.subspecs.chain.config import ChainConfig
from evm_light_client.subspecs.containers import (
    SIGNED_BLOCK_TYPES,
    BeaconBlock,
    BeaconBlockHeader,
    LightClientBootstrap,
    LightClientUpdate,
    MerkleBranch,
    Slot,
    SyncAggregate,
    SyncCommittee,
    SyncCommitteeBits,
    SyncCommitteePeriod,
    SyncCommitteePubkeys,
    ValidatorIndex,
)
from evm_light_client.types import Bytes32, Bytes96, SSZError

from .config import REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

UPDATES_ENDPOINT = "/eth/v1/beacon/light_client/updates"
"""Period updates, queried with `start_period` and `count`."""

BOOTSTRAP_ENDPOINT = "/eth/v1/beacon/light_client/bootstrap/{block_root}"
"""Bootstrap for a block root."""

BLOCK_ENDPOINT = "/eth/v2/beacon/blocks/{block_id}"
"""Block by slot, root, or one of `head`, `finalized`, `genesis`."""

HEADER_ENDPOINT = "/eth/v1/beacon/headers/{block_id}"
"""Header by slot, root, or one of `head`, `finalized`, `genesis`."""

CONSENSUS_VERSION_HEADER = "Eth-Consensus-Version"
"""Response header naming the fork of an SSZ encoded block."""

MAX_BLOCK_NUMBER_REQUESTS = 32
"""Maximum block requests spent locating an execution block number."""


# -----------------------------------------------------------------------------
# JSON parsing
# -----------------------------------------------------------------------------


def _parse_header(obj: dict[str, Any]) -> BeaconBlockHeader:
    # Capella and later wrap the beacon header next to execution data.
    beacon = obj.get("beacon", obj)
    return BeaconBlockHeader(
        slot=Slot(int(beacon["slot"])),
        proposer_index=ValidatorIndex(int(beacon["proposer_index"])),
        parent_root=Bytes32(beacon["parent_root"]),
        state_root=Bytes32(beacon["state_root"]),
        body_root=Bytes32(beacon["body_root"]),
    )


def _parse_branch(items: list[str]) -> MerkleBranch:
    return MerkleBranch(data=[Bytes32(item) for item in items])


def _parse_committee(obj: dict[str, Any]) -> SyncCommittee:
    return SyncCommittee(
        pubkeys=SyncCommitteePubkeys(data=obj["pubkeys"]),
        aggregate_pubkey=obj["aggregate_pubkey"],
    )


def _parse_aggregate(obj: dict[str, Any]) -> SyncAggregate:
    bits = bytes.fromhex(obj["sync_committee_bits"].removeprefix("0x"))
    return SyncAggregate(
        sync_committee_bits=SyncCommitteeBits.decode_bytes(bits),
        sync_committee_signature=Bytes96(obj["sync_committee_signature"]),
    )


def parse_update(obj: dict[str, Any]) -> LightClientUpdate:
    """Parse the `data` object of a light client update response."""
    return LightClientUpdate(
        attested_header=_parse_header(obj["attested_header"]),
        next_sync_committee=_parse_committee(obj["next_sync_committee"]),
        next_sync_committee_branch=_parse_branch(obj["next_sync_committee_branch"]),
        finalized_header=_parse_header(obj["finalized_header"]),
        finality_branch=_parse_branch(obj["finality_branch"]),
        sync_aggregate=_parse_aggregate(obj["sync_aggregate"]),
        signature_slot=Slot(int(obj["signature_slot"])),
    )


def parse_bootstrap(obj: dict[str, Any]) -> LightClientBootstrap:
    """Parse the `data` object of a bootstrap response."""
    return LightClientBootstrap(
        header=_parse_header(obj["header"]),
        current_sync_committee=_parse_committee(obj["current_sync_committee"]),
        current_sync_committee_branch=_parse_branch(obj["current_sync_committee_branch"]),
    )


_PARSE_ERRORS = (KeyError, TypeError, ValueError, AttributeError, SSZError, ValidationError)
"""Everything a malformed payload can raise while being parsed."""


class BeaconApiClient:
    """
    Light client data source backed by a beacon node's REST API.

    Use as an async context manager, or call `aclose` when done:

    ```python
    async with BeaconApiClient("http://localhost:5052", config) as client:
        update = await client.get_update_for_period(SyncCommitteePeriod(1234))
    ```
    """

    def __init__(
        self,
        base_url: str,
        config: ChainConfig,
        *,
        timeout: float = REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Create a client.

        Args:
            base_url: Base URL of the beacon node (e.g. "http://localhost:5052").
            config: Chain parameters, used to map slots to periods.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests inject a mock here).
        """
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> BeaconApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def _get(
        self, path: str, params: dict[str, Any] | None = None, *, accept: str | None = None
    ) -> httpx.Response | None:
        """
        GET `path`, mapping transport and HTTP failures to `UpstreamUnavailable`.

        Returns None for a 404, which the block and header endpoints use for
        empty slots.
        """
        headers = {"Accept": accept} if accept is not None else None
        try:
            response = await self._client.get(path, params=params, headers=headers)
            if response.status_code == httpx.codes.NOT_FOUND:
                return None
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamUnavailable(
                f"HTTP error {exc.response.status_code} from {path}: {exc.response.text[:200]}"
            ) from exc
        except httpx.RequestError as exc:
            raise UpstreamUnavailable(f"Network error while requesting {path}: {exc}") from exc
        return response

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET `path` and decode the JSON body, or return None for a 404."""
        response = await self._get(path, params)
        if response is None:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedUpdate(f"Invalid JSON from {path}: {exc}") from exc

    # -------------------------------------------------------------------------
    # Updates
    # -------------------------------------------------------------------------

    async def get_update_for_period(self, period: SyncCommitteePeriod) -> LightClientUpdate:
        body = await self._get_json(UPDATES_ENDPOINT, {"start_period": int(period), "count": 1})
        if not body:
            raise UpstreamUnavailable(f"No light client update available for period {period}")
        try:
            update = parse_update(body[0]["data"])
        except _PARSE_ERRORS as exc:
            raise MalformedUpdate(f"Malformed update for period {period}: {exc}") from exc
        logger.debug(
            "Fetched update for period %s (attested slot %s)", period, update.attested_header.slot
        )
        return update

    async def get_update_for_slot(self, slot: Slot) -> LightClientUpdate:
        return await self.get_update_for_period(
            compute_sync_committee_period_at_slot(self.config, slot)
        )

    async def get_update_for_block_number(self, block_number: int) -> LightClientUpdate:
        return await self.get_update_for_slot(await self.find_slot_for_block_number(block_number))

    # -------------------------------------------------------------------------
    # Bootstrap, headers and blocks
    # -------------------------------------------------------------------------

    async def get_bootstrap(self, block_root: Bytes32) -> LightClientBootstrap:
        path = BOOTSTRAP_ENDPOINT.format(block_root="0x" + block_root.hex())
        body = await self._get_json(path)
        if body is None:
            raise UpstreamUnavailable(f"No bootstrap available for block 0x{block_root.hex()}")
        try:
            return parse_bootstrap(body["data"])
        except _PARSE_ERRORS as exc:
            raise MalformedUpdate(f"Malformed bootstrap: {exc}") from exc

    async def get_header(self, slot: Slot) -> BeaconBlockHeader | None:
        body = await self._get_json(HEADER_ENDPOINT.format(block_id=int(slot)))
        if body is None:
            return None
        try:
            return _parse_header(body["data"]["header"]["message"])
        except _PARSE_ERRORS as exc:
            raise MalformedUpdate(f"Malformed header at slot {slot}: {exc}") from exc

    async def get_block(self, slot: Slot) -> BeaconBlock | None:
        return await self._get_block(str(int(slot)))

    async def _get_block(self, block_id: str) -> BeaconBlock | None:
        path = BLOCK_ENDPOINT.format(block_id=block_id)
        response = await self._get(path, accept="application/octet-stream")
        if response is None:
            return None

        version = response.headers.get(CONSENSUS_VERSION_HEADER, "").lower()
        signed_type = SIGNED_BLOCK_TYPES.get(version)
        if signed_type is None:
            raise MalformedUpdate(f"Block {block_id} has unsupported fork version {version!r}")
        try:
            signed = signed_type.decode_bytes(response.content)
        except _PARSE_ERRORS as exc:
            raise MalformedUpdate(f"Malformed {version} block {block_id}: {exc}") from exc
        return signed.message  # type: ignore[attr-defined]

    async def find_slot_for_block_number(self, block_number: int) -> Slot:
        """
        Locate the slot whose block carries execution block `block_number`.

        Each slot holds at most one block, so the wanted block is at least
        `head_number - block_number` slots below the head. The search starts
        there and steps down by the remaining distance, skipping empty slots.

        Raises:
            UpstreamUnavailable: If the block is not produced yet, or cannot be
                located within `MAX_BLOCK_NUMBER_REQUESTS` requests.
        """
        head = await self._get_block("head")
        if head is None:
            raise UpstreamUnavailable("Upstream has no head block")
        head_number = head.execution_block_number
        if block_number > head_number:
            raise UpstreamUnavailable(
                f"Execution block {block_number} is beyond the head ({head_number})"
            )

        slot = int(head.slot) - (head_number - block_number)
        for _ in range(MAX_BLOCK_NUMBER_REQUESTS):
            if slot < 0:
                break
            block = await self.get_block(Slot(slot))
            if block is None:
                slot -= 1
                continue
            number = block.execution_block_number
            if number == block_number:
                return block.slot
            if number < block_number:
                break
            slot -= number - block_number

        raise UpstreamUnavailable(f"Could not locate execution block {block_number}")
