from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from eth_account import Account
from web3.exceptions import TimeExhausted

from liquidity_bootstrap.core.clients.BlockchainClient import (
    BlockchainClient,
    TransactionOutcome,
    Web3BlockchainClient,
)
from liquidity_bootstrap.core.constants.chains import CHAIN_ID_SEPOLIA
from liquidity_bootstrap.core.constants.erc20_abi import WETH_ABI
from liquidity_bootstrap.core.errors import ConfirmationError, SubmissionError
from liquidity_bootstrap.testing.fake_chain import FakeChainClient

# Well-known throwaway key from the eth-account docs; never funded.
TEST_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
WETH = "0x7b79995e5f793A07Bc00c21412e50Ecae098E7f9"
MODULE = "liquidity_bootstrap.core.clients.BlockchainClient"


def _client(**kwargs) -> Web3BlockchainClient:
    web3 = MagicMock()
    web3.provider.disconnect = AsyncMock()
    return Web3BlockchainClient(
        rpc_url="http://127.0.0.1:8545",
        chain_id=CHAIN_ID_SEPOLIA,
        private_key=TEST_KEY,
        web3=web3,
        **kwargs,
    )


def _passthrough():
    async def _same(web3, tx):
        return {**tx, "gas": 21_000, "nonce": 0, "maxFeePerGas": 1, "maxPriorityFeePerGas": 1}

    return AsyncMock(side_effect=_same)


class TestTransactionOutcome:
    def test_confirm_once(self):
        outcome = TransactionOutcome(txn_hash="0x01", step="WRAPPING")
        assert not outcome.confirmed
        outcome.mark_confirmed(12, {"status": 1})
        assert outcome.confirmed
        assert outcome.block_number == 12
        assert outcome.to_dict() == {
            "step": "WRAPPING",
            "txn_hash": "0x01",
            "confirmed": True,
            "block_number": 12,
        }

    def test_confirm_twice_raises(self):
        outcome = TransactionOutcome(txn_hash="0x01").mark_confirmed(1)
        with pytest.raises(RuntimeError, match="already confirmed"):
            outcome.mark_confirmed(2)
        assert outcome.block_number == 1


def test_fake_client_satisfies_protocol():
    assert isinstance(FakeChainClient(), BlockchainClient)
    assert isinstance(_client(), BlockchainClient)


class TestConstruction:
    def test_account_from_key(self):
        assert _client().account == Account.from_key(TEST_KEY).address

    def test_key_without_prefix(self):
        client = Web3BlockchainClient(
            rpc_url="http://127.0.0.1:8545",
            chain_id=CHAIN_ID_SEPOLIA,
            private_key=TEST_KEY[2:],
            web3=MagicMock(),
        )
        assert client.account == Account.from_key(TEST_KEY).address


@pytest.mark.asyncio
class TestSubmitCall:
    async def test_submit_returns_unconfirmed_outcome(self):
        client = _client()
        client.web3.eth.send_raw_transaction = AsyncMock(return_value=b"\x12\x34")
        with (
            patch(f"{MODULE}.encode_call", return_value={"from": client.account, "chainId": CHAIN_ID_SEPOLIA, "to": WETH, "data": "0x", "value": 5}) as enc,
            patch(f"{MODULE}.gas_limit_transaction", new=_passthrough()),
            patch(f"{MODULE}.nonce_transaction", new=_passthrough()),
            patch(f"{MODULE}.gas_price_transaction", new=_passthrough()),
        ):
            outcome = await client.submit_call(
                target=WETH,
                abi=WETH_ABI,
                fn_name="deposit",
                args=[],
                value=5,
                step="WRAPPING",
            )

        assert outcome.txn_hash == "0x1234"
        assert outcome.step == "WRAPPING"
        assert outcome.confirmed is False
        assert enc.call_args.kwargs["value"] == 5
        assert enc.call_args.kwargs["from_address"] == client.account
        client.web3.eth.send_raw_transaction.assert_awaited_once()

    async def test_estimate_failure_becomes_submission_error(self):
        client = _client()
        with (
            patch(f"{MODULE}.encode_call", return_value={"from": client.account, "chainId": CHAIN_ID_SEPOLIA}),
            patch(
                f"{MODULE}.gas_limit_transaction",
                new=AsyncMock(side_effect=RuntimeError("execution reverted")),
            ),
        ):
            with pytest.raises(SubmissionError, match="execution reverted") as exc_info:
                await client.submit_call(
                    target=WETH, abi=WETH_ABI, fn_name="deposit", args=[], step="WRAPPING"
                )
        assert exc_info.value.step == "WRAPPING"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    async def test_encode_failure_becomes_submission_error(self):
        client = _client()
        with patch(f"{MODULE}.encode_call", side_effect=ValueError("Failed to encode")):
            with pytest.raises(SubmissionError):
                await client.submit_call(
                    target=WETH, abi=WETH_ABI, fn_name="approve", args=[]
                )


@pytest.mark.asyncio
class TestAwaitConfirmation:
    async def test_confirms_with_block_number(self):
        client = _client()
        outcome = TransactionOutcome(txn_hash="0xabc", step="MINTING")
        with patch(
            f"{MODULE}.wait_for_transaction_receipt",
            new=AsyncMock(return_value={"status": 1, "blockNumber": 77}),
        ) as wait:
            result = await client.await_confirmation(outcome)

        assert result is outcome
        assert outcome.confirmed
        assert outcome.block_number == 77
        assert wait.await_args.kwargs["timeout"] == client.receipt_timeout

    async def test_unbounded_timeout_is_forwarded(self):
        client = _client(receipt_timeout=None)
        with patch(
            f"{MODULE}.wait_for_transaction_receipt",
            new=AsyncMock(return_value={"status": 1, "blockNumber": 1}),
        ) as wait:
            await client.await_confirmation(TransactionOutcome(txn_hash="0xabc"))
        assert wait.await_args.kwargs["timeout"] is None

    async def test_revert_is_tagged_with_step(self):
        client = _client()
        outcome = TransactionOutcome(txn_hash="0xabc", step="INITIALIZING")
        with patch(
            f"{MODULE}.wait_for_transaction_receipt",
            new=AsyncMock(side_effect=ConfirmationError("0xabc", {"status": 0})),
        ):
            with pytest.raises(ConfirmationError) as exc_info:
                await client.await_confirmation(outcome)
        assert exc_info.value.step == "INITIALIZING"
        assert not outcome.confirmed

    async def test_timeout_becomes_confirmation_error(self):
        client = _client(receipt_timeout=3)
        outcome = TransactionOutcome(txn_hash="0xabc", step="MINTING")
        with patch(
            f"{MODULE}.wait_for_transaction_receipt",
            new=AsyncMock(side_effect=TimeExhausted("slow")),
        ):
            with pytest.raises(ConfirmationError, match="not included within 3s") as exc_info:
                await client.await_confirmation(outcome)
        assert exc_info.value.txn_hash == "0xabc"
        assert exc_info.value.step == "MINTING"

    async def test_context_manager_disconnects(self):
        client = _client()
        async with client as c:
            assert c is client
        client.web3.provider.disconnect.assert_awaited_once()


@pytest.mark.parametrize("bad_key", ["0xabc", "not-hex", "0x" + "zz" * 32])
def test_invalid_key_raises_value_error(bad_key):
    with pytest.raises(ValueError, match="not a valid 32-byte hex") as exc_info:
        Web3BlockchainClient(
            rpc_url="http://127.0.0.1:8545",
            chain_id=CHAIN_ID_SEPOLIA,
            private_key=bad_key,
            web3=MagicMock(),
        )
    assert bad_key not in str(exc_info.value)
