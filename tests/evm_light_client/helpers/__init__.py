"""Test helpers for light client unit tests."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import TypeVar

from .builders import (
    GENESIS_TIME,
    GENESIS_VALIDATORS_ROOT,
    NEXT_COMMITTEE_OFFSET,
    TEST_SLOTS_PER_EPOCH,
    TEST_SLOTS_PER_PERIOD,
    SparseStateTree,
    committee_secret_keys,
    committee_state,
    make_block,
    make_block_body,
    make_bootstrap,
    make_bytes32,
    make_chain,
    make_committee,
    make_config,
    make_header,
    make_update,
    sign_header,
    time_at_slot,
)
from .mocks import FailingKeyValueStore, MockUpdateSource

_T = TypeVar("_T")


def run_async(coro: Coroutine[object, object, _T]) -> _T:
    """Run an async coroutine synchronously."""
    return asyncio.run(coro)


__all__ = [
    # Builders
    "SparseStateTree",
    "committee_secret_keys",
    "committee_state",
    "make_block",
    "make_block_body",
    "make_bootstrap",
    "make_bytes32",
    "make_chain",
    "make_committee",
    "make_config",
    "make_header",
    "make_update",
    "sign_header",
    "time_at_slot",
    # Mocks
    "FailingKeyValueStore",
    "MockUpdateSource",
    # Constants
    "GENESIS_TIME",
    "GENESIS_VALIDATORS_ROOT",
    "NEXT_COMMITTEE_OFFSET",
    "TEST_SLOTS_PER_EPOCH",
    "TEST_SLOTS_PER_PERIOD",
    # Async utilities
    "run_async",
]
