"""
Light client CLI entry point.

Run a light client that follows a beacon chain through a beacon node's light
client API and keeps its verified store on disk.

Usage::

    python -m evm_light_client --beacon-url http://localhost:5052 --checkpoint 0x...
    python -m evm_light_client --beacon-url http://localhost:5052 --db ./lc.sqlite
    python -m evm_light_client --config chain.yaml --beacon-url http://localhost:5052

Options:
    --beacon-url   Base URL of the (untrusted) beacon node (required)
    --config       Path to a chain configuration YAML file (default: mainnet)
    --db           Path to the SQLite database holding the store
    --checkpoint   Trusted block root to bootstrap from when nothing is persisted
    --interval     Seconds between sync steps (default: one slot)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from evm_light_client.errors import LightClientError
from evm_light_client.subspecs.chain import ChainConfig, SlotClock
from evm_light_client.subspecs.node import LightClient
from evm_light_client.subspecs.storage import PersistenceAdapter, SQLiteKeyValueStore
from evm_light_client.subspecs.sync import BeaconApiClient
from evm_light_client.types import Bytes32

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path("light_client.sqlite")
"""Where the store is kept when `--db` is not given."""


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging for the process."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


async def run_light_client(
    beacon_url: str,
    config: ChainConfig,
    db_path: Path,
    checkpoint: Bytes32 | None = None,
    interval: float | None = None,
) -> None:
    """
    Restore or bootstrap a store, then sync forever.

    Args:
        beacon_url: Base URL of the beacon node.
        config: Chain parameters.
        db_path: SQLite database for the store.
        checkpoint: Trusted block root, used only when nothing is persisted.
        interval: Seconds between sync steps; defaults to one slot.
    """
    interval = float(config.seconds_per_slot) if interval is None else interval

    with SQLiteKeyValueStore(db_path) as kv:
        async with BeaconApiClient(beacon_url, config) as upstream:
            client = LightClient(
                config=config,
                upstream=upstream,
                persistence=PersistenceAdapter(kv),
                clock=SlotClock(config),
            )

            # A persisted store wins over the checkpoint: it has already
            # advanced past it, and re-bootstrapping would roll it back.
            if await client.restore():
                logger.info(
                    "Restored store at finalized slot %s", client.store.finalized_header.slot
                )
            elif checkpoint is not None:
                logger.info("Bootstrapping from checkpoint 0x%s", checkpoint.hex())
                await client.init_from_checkpoint(checkpoint)
                await client.persist()
            else:
                logger.error("No persisted store in %s and no --checkpoint given", db_path)
                return

            while True:
                try:
                    outcome = await client.sync()
                    await client.persist()
                    logger.info(
                        "Sync step: %s (finalized=%s, optimistic=%s)",
                        outcome.name,
                        client.store.finalized_header.slot,
                        client.store.optimistic_header.slot,
                    )
                except LightClientError as e:
                    if not e.retryable and not e.security_relevant:
                        logger.info("Sync step made no progress: %s", e)
                    elif e.retryable:
                        logger.warning("Upstream trouble, will retry: %s", e)
                    else:
                        logger.error("Sync step rejected: %s: %s", type(e).__name__, e)
                await asyncio.sleep(interval)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="EVM beacon chain light client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--beacon-url",
        required=True,
        help="Base URL of the beacon node (e.g., http://localhost:5052)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to chain configuration YAML file (default: mainnet)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=DEFAULT_DB_PATH,
        help=f"Path to the SQLite database (default: {DEFAULT_DB_PATH})",
    )
    parser.add_argument(
        "--checkpoint",
        type=str,
        default=None,
        help="Trusted block root (0x-prefixed hex) to bootstrap from",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between sync steps (default: one slot)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    setup_logging(args.verbose)

    if args.config is not None:
        logger.info("Loading chain configuration from %s", args.config)
        config = ChainConfig.from_yaml_file(args.config)
    else:
        config = ChainConfig.mainnet()

    checkpoint = Bytes32(args.checkpoint) if args.checkpoint is not None else None

    try:
        asyncio.run(run_light_client(args.beacon_url, config, args.db, checkpoint, args.interval))
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    main()
