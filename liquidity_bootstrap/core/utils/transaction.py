import asyncio
import math
from typing import Any

from loguru import logger
from web3 import AsyncWeb3
from web3.exceptions import TransactionNotFound, Web3Exception

from liquidity_bootstrap.core.constants.base import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TRANSACTION_TIMEOUT,
    GAS_BUFFER_MULTIPLIER,
    MAX_BASE_FEE_GROWTH_MULTIPLIER,
    SUGGESTED_GAS_PRICE_MULTIPLIER,
    SUGGESTED_PRIORITY_FEE_MULTIPLIER,
)
from liquidity_bootstrap.core.constants.chains import PRE_EIP_1559_CHAIN_IDS
from liquidity_bootstrap.core.errors import ConfirmationError
from liquidity_bootstrap.core.utils.web3 import get_transaction_chain_id


def _raise_revert_error(
    txn_hash: str,
    receipt: dict[str, Any],
    transaction: dict[str, Any] | None = None,
) -> None:
    gas_used = int(receipt.get("gasUsed") or 0)
    gas_limit = int((transaction or {}).get("gas") or 0)

    oogs = bool(gas_used and gas_limit and gas_used >= gas_limit)
    suffix = (
        f" gasUsed={gas_used} gasLimit={gas_limit}"
        + (" (likely out of gas)" if oogs else "")
        if gas_used or gas_limit
        else ""
    )
    raise ConfirmationError(
        txn_hash,
        receipt,
        message=f"Transaction reverted (status=0): {txn_hash}{suffix}",
    )


def _get_transaction_from_address(transaction: dict) -> str:
    if "from" not in transaction:
        raise ValueError("Transaction does not contain from address")
    return AsyncWeb3.to_checksum_address(transaction["from"])


def normalize_txn_hash(txn_hash: Any) -> str:
    if isinstance(txn_hash, (bytes, bytearray)):
        txn_hash = bytes(txn_hash).hex()
    txn_hash = str(txn_hash)
    if not txn_hash.startswith("0x"):
        txn_hash = f"0x{txn_hash}"
    return txn_hash


def encode_call(
    web3: AsyncWeb3,
    *,
    target: str,
    abi: list[dict[str, Any]],
    fn_name: str,
    args: list[Any],
    from_address: str,
    chain_id: int,
    value: int = 0,
) -> dict[str, Any]:
    try:
        contract = web3.eth.contract(
            address=web3.to_checksum_address(target),
            abi=abi,
        )
        data = contract.encode_abi(fn_name, args)
    except (ValueError, TypeError, Web3Exception) as exc:
        raise ValueError(f"Failed to encode {fn_name}: {exc}") from exc

    return {
        "chainId": int(chain_id),
        "from": AsyncWeb3.to_checksum_address(from_address),
        "to": AsyncWeb3.to_checksum_address(target),
        "data": data,
        "value": int(value),
    }


async def nonce_transaction(web3: AsyncWeb3, transaction: dict) -> dict:
    transaction = transaction.copy()
    from_address = _get_transaction_from_address(transaction)
    transaction["nonce"] = await web3.eth.get_transaction_count(
        from_address, block_identifier="pending"
    )
    return transaction


async def gas_price_transaction(web3: AsyncWeb3, transaction: dict) -> dict:
    transaction = transaction.copy()
    chain_id = get_transaction_chain_id(transaction)

    if chain_id in PRE_EIP_1559_CHAIN_IDS:
        gas_price = await web3.eth.gas_price
        transaction["gasPrice"] = int(gas_price * SUGGESTED_GAS_PRICE_MULTIPLIER)
        return transaction

    latest_block = await web3.eth.get_block("latest")
    base_fee = latest_block["baseFeePerGas"]

    lookback_blocks = 10
    percentile = 80
    fee_history = await web3.eth.fee_history(lookback_blocks, "latest", [percentile])
    historical_priority_fees = [i[0] for i in fee_history["reward"]]
    priority_fee = (
        sum(historical_priority_fees) // len(historical_priority_fees)
        if historical_priority_fees
        else 0
    )

    transaction["maxFeePerGas"] = int(
        base_fee * MAX_BASE_FEE_GROWTH_MULTIPLIER
        + priority_fee * SUGGESTED_PRIORITY_FEE_MULTIPLIER
    )
    transaction["maxPriorityFeePerGas"] = int(
        priority_fee * SUGGESTED_PRIORITY_FEE_MULTIPLIER
    )
    return transaction


async def gas_limit_transaction(web3: AsyncWeb3, transaction: dict) -> dict:
    transaction = transaction.copy()

    # prevents RPCs from taking this as a serious limit
    transaction.pop("gas", None)

    gas_limit = await web3.eth.estimate_gas(transaction, block_identifier="latest")
    # State can move between estimation and inclusion.
    transaction["gas"] = int(math.ceil(gas_limit * GAS_BUFFER_MULTIPLIER))
    return transaction


async def broadcast_transaction(web3: AsyncWeb3, signed_transaction: bytes) -> str:
    tx_hash = await web3.eth.send_raw_transaction(signed_transaction)
    return normalize_txn_hash(tx_hash)


async def _poll_receipt(web3: AsyncWeb3, txn_hash: str, poll_interval: float):
    while True:
        try:
            return await web3.eth.get_transaction_receipt(txn_hash)
        except TransactionNotFound:
            await asyncio.sleep(poll_interval)


async def wait_for_transaction_receipt(
    web3: AsyncWeb3,
    txn_hash: str,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    timeout: float | None = DEFAULT_TRANSACTION_TIMEOUT,
    transaction: dict | None = None,
) -> dict:
    """Block until ``txn_hash`` is mined; ``timeout=None`` waits forever."""
    txn_hash = normalize_txn_hash(txn_hash)
    if timeout is None:
        receipt = dict(await _poll_receipt(web3, txn_hash, poll_interval))
    else:
        receipt = dict(
            await web3.eth.wait_for_transaction_receipt(
                txn_hash, poll_latency=poll_interval, timeout=timeout
            )
        )
    if receipt.get("status") == 0:
        _raise_revert_error(txn_hash, receipt, transaction)
    logger.debug(f"Receipt for {txn_hash} in block {receipt.get('blockNumber')}")
    return receipt
