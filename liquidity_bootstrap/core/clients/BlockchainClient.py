from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from eth_account import Account
from loguru import logger
from web3 import AsyncWeb3
from web3.exceptions import TimeExhausted

from liquidity_bootstrap.core.constants.base import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TRANSACTION_TIMEOUT,
)
from liquidity_bootstrap.core.errors import ConfirmationError, SubmissionError
from liquidity_bootstrap.core.utils.transaction import (
    broadcast_transaction,
    encode_call,
    gas_limit_transaction,
    gas_price_transaction,
    nonce_transaction,
    wait_for_transaction_receipt,
)
from liquidity_bootstrap.core.utils.web3 import get_web3


@dataclass
class TransactionOutcome:
    txn_hash: str
    step: str | None = None
    confirmed: bool = False
    block_number: int | None = None
    receipt: dict[str, Any] = field(default_factory=dict, repr=False)

    def mark_confirmed(
        self, block_number: int | None, receipt: dict[str, Any] | None = None
    ) -> TransactionOutcome:
        if self.confirmed:
            raise RuntimeError(f"Transaction {self.txn_hash} is already confirmed")
        self.confirmed = True
        self.block_number = None if block_number is None else int(block_number)
        self.receipt = dict(receipt or {})
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "step": self.step,
            "txn_hash": self.txn_hash,
            "confirmed": self.confirmed,
            "block_number": self.block_number,
        }


@runtime_checkable
class BlockchainClient(Protocol):
    """What the orchestrator needs from a chain: submit, then wait."""

    @property
    def account(self) -> str: ...

    async def submit_call(
        self,
        *,
        target: str,
        abi: list[dict[str, Any]],
        fn_name: str,
        args: list[Any],
        value: int = 0,
        step: str | None = None,
    ) -> TransactionOutcome: ...

    async def await_confirmation(
        self, outcome: TransactionOutcome
    ) -> TransactionOutcome: ...


class Web3BlockchainClient:
    """Signs locally with a raw private key and talks to a single RPC endpoint."""

    def __init__(
        self,
        *,
        rpc_url: str,
        chain_id: int,
        private_key: str,
        receipt_timeout: float | None = DEFAULT_TRANSACTION_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        web3: AsyncWeb3 | None = None,
    ) -> None:
        key = private_key.strip()
        if not key.startswith("0x"):
            key = f"0x{key}"
        try:
            self._account = Account.from_key(key)
        except Exception as exc:  # noqa: BLE001
            # never echo the key itself
            raise ValueError("Private key is not a valid 32-byte hex string") from exc
        self.chain_id = int(chain_id)
        self.receipt_timeout = receipt_timeout
        self.poll_interval = float(poll_interval)
        self.web3 = web3 or get_web3(rpc_url, self.chain_id)
        self.logger = logger.bind(client=self.__class__.__name__)
        self._pending: dict[str, dict[str, Any]] = {}

    @property
    def account(self) -> str:
        return self._account.address

    async def submit_call(
        self,
        *,
        target: str,
        abi: list[dict[str, Any]],
        fn_name: str,
        args: list[Any],
        value: int = 0,
        step: str | None = None,
    ) -> TransactionOutcome:
        try:
            tx = encode_call(
                self.web3,
                target=target,
                abi=abi,
                fn_name=fn_name,
                args=args,
                from_address=self.account,
                chain_id=self.chain_id,
                value=value,
            )
            tx = await gas_limit_transaction(self.web3, tx)
            tx = await nonce_transaction(self.web3, tx)
            tx = await gas_price_transaction(self.web3, tx)
            signed = self._account.sign_transaction(tx)
            txn_hash = await broadcast_transaction(self.web3, signed.raw_transaction)
        except Exception as exc:  # noqa: BLE001
            raise SubmissionError(
                f"Failed to submit {fn_name} to {target}: {exc}", step=step
            ) from exc

        self._pending[txn_hash] = tx
        self.logger.info(f"Transaction broadcasted: {txn_hash} ({fn_name})")
        return TransactionOutcome(txn_hash=txn_hash, step=step)

    async def await_confirmation(self, outcome: TransactionOutcome) -> TransactionOutcome:
        transaction = self._pending.pop(outcome.txn_hash, None)
        try:
            receipt = await wait_for_transaction_receipt(
                self.web3,
                outcome.txn_hash,
                poll_interval=self.poll_interval,
                timeout=self.receipt_timeout,
                transaction=transaction,
            )
        except ConfirmationError as exc:
            exc.step = outcome.step
            raise
        except TimeExhausted as exc:
            raise ConfirmationError(
                outcome.txn_hash,
                message=(
                    f"Transaction {outcome.txn_hash} not included within "
                    f"{self.receipt_timeout}s"
                ),
                step=outcome.step,
            ) from exc

        return outcome.mark_confirmed(receipt.get("blockNumber"), receipt)

    async def close(self) -> None:
        await self.web3.provider.disconnect()

    async def __aenter__(self) -> Web3BlockchainClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
