from __future__ import annotations

import asyncio
import json
import sys
from typing import Any

import click
from loguru import logger

from liquidity_bootstrap.core.clients.BlockchainClient import Web3BlockchainClient
from liquidity_bootstrap.core.config import (
    ProtocolConfig,
    get_chain_id,
    get_poll_interval,
    get_private_key,
    get_protocol_config,
    get_receipt_timeout,
    get_rpc_url,
    load_config,
)
from liquidity_bootstrap.core.constants.chains import CHAIN_EXPLORER_URLS
from liquidity_bootstrap.core.constants.contracts import DEFAULT_FEE_TIER
from liquidity_bootstrap.orchestrator import (
    BootstrapRequest,
    BootstrapResult,
    LiquidityOrchestrator,
    Mode,
    PoolParameters,
)


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _make_client(
    *, rpc_url: str, chain_id: int, private_key: str
) -> Web3BlockchainClient:
    return Web3BlockchainClient(
        rpc_url=rpc_url,
        chain_id=chain_id,
        private_key=private_key,
        receipt_timeout=get_receipt_timeout(),
        poll_interval=get_poll_interval(),
    )


def _resolve_private_key() -> str:
    key = get_private_key()
    if key:
        return key
    return click.prompt(
        "Private key (0x..., exported from your wallet)", hide_input=True
    ).strip()


async def _execute(
    client: Web3BlockchainClient, request: BootstrapRequest, protocol: ProtocolConfig
) -> BootstrapResult:
    async with client:
        return await LiquidityOrchestrator(client, protocol).run(request)


def _protocol(ctx: click.Context) -> ProtocolConfig:
    try:
        return get_protocol_config(ctx.obj["chain_id"])
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc


def _client(ctx: click.Context, protocol: ProtocolConfig) -> Web3BlockchainClient:
    private_key = _resolve_private_key()
    try:
        return _make_client(
            rpc_url=ctx.obj["rpc_url"],
            chain_id=protocol.chain_id,
            private_key=private_key,
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="private key") from exc


def _run(ctx: click.Context, request: BootstrapRequest) -> None:
    opts = ctx.obj
    protocol = _protocol(ctx)
    client = _client(ctx, protocol)

    logger.info(f"RPC: {opts['rpc_url']}")
    logger.info(f"WETH address: {protocol.weth_address}")
    logger.info(f"NPM address: {protocol.position_manager_address}")

    result = asyncio.run(_execute(client, request, protocol))
    payload = result.to_dict()
    explorer = CHAIN_EXPLORER_URLS.get(protocol.chain_id)
    if explorer:
        for tx in payload["transactions"]:
            tx["explorer_url"] = f"{explorer}tx/{tx['txn_hash']}"
    _echo_json(payload)
    if not result.ok:
        ctx.exit(1)


@click.group(
    name="liquidity-bootstrap",
    help="Wrap ETH, initialize a Uniswap V3 pool and seed full-range liquidity.",
)
@click.option("--config", "config_path", default=None, help="Path to config JSON.")
@click.option("--rpc-url", default=None, help="RPC endpoint (defaults to config).")
@click.option("--chain-id", type=int, default=None, help="Chain id (defaults to config).")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    rpc_url: str | None,
    chain_id: int | None,
    log_level: str,
) -> None:
    logger.remove()
    logger.add(sys.stderr, level=str(log_level).upper())
    if config_path:
        load_config(config_path, require_exists=True)
    ctx.obj = {
        "rpc_url": rpc_url or get_rpc_url(),
        "chain_id": chain_id if chain_id is not None else get_chain_id(),
    }


def _liquidity_options(fn):
    fn = click.option(
        "--weth-amount",
        default="0.2",
        show_default=True,
        prompt="Amount of WETH to deposit as liquidity",
    )(fn)
    fn = click.option(
        "--token-amount",
        default="400",
        show_default=True,
        prompt="Amount of ERC-20 to deposit as liquidity",
    )(fn)
    fn = click.option(
        "--wrap-amount",
        default="0",
        show_default=True,
        prompt="How much ETH to wrap into WETH first? (0 to skip)",
    )(fn)
    fn = click.option(
        "--fee",
        type=int,
        default=DEFAULT_FEE_TIER,
        show_default=True,
        prompt="Fee tier (500 / 3000 / 10000)",
    )(fn)
    fn = click.option(
        "--token",
        required=True,
        prompt="Existing ERC-20 token address (0x...)",
        help="Your ERC-20; paired against the chain's WETH.",
    )(fn)
    return fn


def _pool(ctx: click.Context, token: str, fee: int, price: float | None) -> PoolParameters:
    protocol = _protocol(ctx)
    return PoolParameters(
        token_a=token.strip(),
        token_b=protocol.weth_address,
        fee=fee,
        target_price=price,
    )


@cli.command(name="init-pool", help="Create + initialize the pool, then add first liquidity.")
@_liquidity_options
@click.option(
    "--price",
    type=float,
    default=1.0,
    show_default=True,
    prompt="Target price: how many TOKEN per 1 WETH?",
)
@click.pass_context
def init_pool_cmd(
    ctx: click.Context,
    token: str,
    fee: int,
    wrap_amount: str,
    token_amount: str,
    weth_amount: str,
    price: float,
) -> None:
    request = BootstrapRequest(
        mode=Mode.INITIALIZE_AND_ADD,
        pool=_pool(ctx, token, fee, price),
        token_amount=token_amount,
        weth_amount=weth_amount,
        wrap_amount=wrap_amount,
    )
    _run(ctx, request)


@cli.command(name="add-liquidity", help="Add more liquidity to an existing pool.")
@_liquidity_options
@click.pass_context
def add_liquidity_cmd(
    ctx: click.Context,
    token: str,
    fee: int,
    wrap_amount: str,
    token_amount: str,
    weth_amount: str,
) -> None:
    request = BootstrapRequest(
        mode=Mode.ADD_LIQUIDITY,
        pool=_pool(ctx, token, fee, None),
        token_amount=token_amount,
        weth_amount=weth_amount,
        wrap_amount=wrap_amount,
    )
    _run(ctx, request)


@cli.command(name="wrap", help="Wrap native ETH into WETH only.")
@click.option(
    "--amount",
    default="0.1",
    show_default=True,
    prompt="How much ETH to wrap into WETH?",
)
@click.pass_context
def wrap_cmd(ctx: click.Context, amount: str) -> None:
    _run(ctx, BootstrapRequest(mode=Mode.WRAP_ONLY, wrap_amount=amount))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
