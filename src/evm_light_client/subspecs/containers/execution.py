"""
Execution payload containers, from Bellatrix to Electra.

Each fork appends fields to the payload of the previous one, so the payload
classes inherit and the field order matches the consensus schema.
"""

from __future__ import annotations

from typing import Final

from evm_light_client.config import (
    MAX_DEPOSIT_REQUESTS_PER_PAYLOAD,
    MAX_WITHDRAWAL_REQUESTS_PER_PAYLOAD,
    MAX_WITHDRAWALS_PER_PAYLOAD,
)
from evm_light_client.types import (
    BaseByteList,
    Bytes20,
    Bytes32,
    Bytes48,
    Bytes96,
    Bytes256,
    Container,
    SSZList,
    Uint64,
    Uint256,
)

from .slot import ValidatorIndex

MAX_EXTRA_DATA_BYTES: Final[int] = 32
MAX_BYTES_PER_TRANSACTION: Final[int] = 2**30
MAX_TRANSACTIONS_PER_PAYLOAD: Final[int] = 2**20
MAX_CONSOLIDATION_REQUESTS_PER_PAYLOAD: Final[int] = 2


class ExtraData(BaseByteList):
    LIMIT = MAX_EXTRA_DATA_BYTES


class Transaction(BaseByteList):
    """An opaque, RLP or typed-envelope encoded execution transaction."""

    LIMIT = MAX_BYTES_PER_TRANSACTION


class Transactions(SSZList[Transaction]):
    ELEMENT_TYPE = Transaction
    LIMIT = MAX_TRANSACTIONS_PER_PAYLOAD


class Withdrawal(Container):
    """A validator balance withdrawn to the execution layer."""

    index: Uint64
    validator_index: ValidatorIndex
    address: Bytes20
    amount: Uint64


class Withdrawals(SSZList[Withdrawal]):
    ELEMENT_TYPE = Withdrawal
    LIMIT = MAX_WITHDRAWALS_PER_PAYLOAD


class ExecutionPayload(Container):
    """The execution block carried by a Bellatrix beacon block."""

    parent_hash: Bytes32
    fee_recipient: Bytes20
    state_root: Bytes32
    receipts_root: Bytes32
    logs_bloom: Bytes256
    prev_randao: Bytes32
    block_number: Uint64
    """Number of the execution block."""

    gas_limit: Uint64
    gas_used: Uint64
    timestamp: Uint64
    extra_data: ExtraData
    base_fee_per_gas: Uint256
    block_hash: Bytes32
    """Hash of the execution block."""

    transactions: Transactions


class CapellaExecutionPayload(ExecutionPayload):
    """Capella payload: adds withdrawals."""

    withdrawals: Withdrawals


class DenebExecutionPayload(CapellaExecutionPayload):
    """Deneb payload: adds blob gas accounting."""

    blob_gas_used: Uint64
    excess_blob_gas: Uint64


# -----------------------------------------------------------------------------
# Execution layer requests (Electra)
# -----------------------------------------------------------------------------


class DepositRequest(Container):
    pubkey: Bytes48
    withdrawal_credentials: Bytes32
    amount: Uint64
    signature: Bytes96
    index: Uint64


class WithdrawalRequest(Container):
    source_address: Bytes20
    validator_pubkey: Bytes48
    amount: Uint64


class ConsolidationRequest(Container):
    source_address: Bytes20
    source_pubkey: Bytes48
    target_pubkey: Bytes48


class DepositRequests(SSZList[DepositRequest]):
    ELEMENT_TYPE = DepositRequest
    LIMIT = MAX_DEPOSIT_REQUESTS_PER_PAYLOAD


class WithdrawalRequests(SSZList[WithdrawalRequest]):
    ELEMENT_TYPE = WithdrawalRequest
    LIMIT = MAX_WITHDRAWAL_REQUESTS_PER_PAYLOAD


class ConsolidationRequests(SSZList[ConsolidationRequest]):
    ELEMENT_TYPE = ConsolidationRequest
    LIMIT = MAX_CONSOLIDATION_REQUESTS_PER_PAYLOAD


class ExecutionRequests(Container):
    """Requests the execution layer passes to the beacon chain."""

    deposits: DepositRequests
    withdrawals: WithdrawalRequests
    consolidations: ConsolidationRequests
