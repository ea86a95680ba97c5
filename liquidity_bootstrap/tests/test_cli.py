"""Tests for the liquidity-bootstrap command group."""

from __future__ import annotations

import copy
import json
import sys
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner
from loguru import logger

import liquidity_bootstrap.core.config as config
from liquidity_bootstrap.cli import cli
from liquidity_bootstrap.testing.fake_chain import FakeChainClient

TOKEN = "0x1111111111111111111111111111111111111111"
TEST_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch):
    original = copy.deepcopy(config.CONFIG)
    config.set_config({})
    monkeypatch.setenv("LIQUIDITY_BOOTSTRAP_PRIVATE_KEY", TEST_KEY)
    yield
    config.set_config(original)
    # the group re-points loguru at the runner's stderr
    logger.remove()
    logger.add(sys.stderr)


def _invoke(client: FakeChainClient, args: list[str], **kwargs):
    factory = MagicMock(return_value=client)
    with patch("liquidity_bootstrap.cli._make_client", factory):
        result = CliRunner().invoke(cli, ["--log-level", "ERROR", *args], **kwargs)
    return result, factory


def _payload(output: str) -> dict:
    start = output.index("{\n")
    data, _ = json.JSONDecoder().raw_decode(output[start:])
    return data


def _init_args(*, fee: str = "3000", price: str = "4000") -> list[str]:
    return [
        "init-pool",
        "--token",
        TOKEN,
        "--fee",
        fee,
        "--wrap-amount",
        "0",
        "--token-amount",
        "800",
        "--weth-amount",
        "0.2",
        "--price",
        price,
    ]


def test_init_pool_success():
    client = FakeChainClient()
    result, factory = _invoke(client, _init_args())

    assert result.exit_code == 0, result.output
    payload = _payload(result.output)
    assert payload["ok"] is True
    assert payload["state"] == "DONE"
    assert payload["token0"] == TOKEN
    assert client.fn_names == [
        "createAndInitializePoolIfNecessary",
        "approve",
        "approve",
        "mint",
    ]
    for tx in payload["transactions"]:
        assert tx["explorer_url"] == f"https://sepolia.etherscan.io/tx/{tx['txn_hash']}"
    assert client.closed
    assert factory.call_args.kwargs["private_key"] == TEST_KEY
    assert factory.call_args.kwargs["chain_id"] == 11155111


def test_init_pool_invalid_fee_exits_nonzero_without_transactions():
    client = FakeChainClient()
    result, _ = _invoke(client, _init_args(fee="0"))

    assert result.exit_code == 1
    payload = _payload(result.output)
    assert payload["ok"] is False
    assert payload["failed_step"] == "IDLE"
    assert payload["error"]["type"] == "InvalidFeeTierError"
    assert client.calls == []


def test_init_pool_revert_reports_step():
    client = FakeChainClient(revert={"mint"})
    result, _ = _invoke(client, _init_args())

    assert result.exit_code == 1
    payload = _payload(result.output)
    assert payload["failed_step"] == "MINTING"
    assert len(payload["transactions"]) == 4


def test_add_liquidity_skips_initialize():
    client = FakeChainClient()
    result, _ = _invoke(
        client,
        [
            "add-liquidity",
            "--token",
            TOKEN,
            "--fee",
            "3000",
            "--wrap-amount",
            "0.1",
            "--token-amount",
            "10",
            "--weth-amount",
            "0.1",
        ],
    )

    assert result.exit_code == 0, result.output
    assert client.fn_names == ["deposit", "approve", "approve", "mint"]
    assert "sqrt_price_x96" not in _payload(result.output)


def test_wrap_only():
    client = FakeChainClient()
    result, _ = _invoke(client, ["wrap", "--amount", "0.3"])

    assert result.exit_code == 0, result.output
    assert client.fn_names == ["deposit"]
    assert client.calls[0].value == 3 * 10**17


def test_prompts_for_missing_values(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("LIQUIDITY_BOOTSTRAP_PRIVATE_KEY")
    client = FakeChainClient()
    result, factory = _invoke(client, ["wrap"], input="\n0xabc\n")

    assert result.exit_code == 0, result.output
    # blank answer keeps the default amount
    assert client.calls[0].value == 10**17
    assert factory.call_args.kwargs["private_key"] == "0xabc"


def test_unknown_chain_is_usage_error():
    client = FakeChainClient()
    result, factory = _invoke(client, ["--chain-id", "424242", "wrap", "--amount", "1"])

    assert result.exit_code == 2
    assert "424242" in result.output
    factory.assert_not_called()


def test_invalid_private_key_is_a_clean_usage_error(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("LIQUIDITY_BOOTSTRAP_PRIVATE_KEY", "0xnot-a-key")
    result = CliRunner().invoke(
        cli, ["--log-level", "ERROR", "wrap", "--amount", "0.1"]
    )

    assert result.exit_code == 2
    assert "private key" in result.output.lower()
    assert "0xnot-a-key" not in result.output
    assert not isinstance(result.exception, ValueError)
