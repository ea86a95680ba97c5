from __future__ import annotations

from eth_utils import to_checksum_address

from liquidity_bootstrap.core.adapters.BaseAdapter import BaseAdapter
from liquidity_bootstrap.core.clients.BlockchainClient import (
    BlockchainClient,
    TransactionOutcome,
)
from liquidity_bootstrap.core.config import ProtocolConfig
from liquidity_bootstrap.core.constants import MAX_UINT256
from liquidity_bootstrap.core.constants.erc20_abi import ERC20_ABI, WETH_ABI
from liquidity_bootstrap.core.constants.uniswap_v3_abi import (
    NONFUNGIBLE_POSITION_MANAGER_ABI,
)
from liquidity_bootstrap.core.utils.uniswap_v3_math import CanonicalPair
from liquidity_bootstrap.core.utils.units import LiquidityAmounts


class UniswapV3Adapter(BaseAdapter):
    """Builds and submits the four calls needed to seed a V3 pool.

    Every method returns as soon as the call is broadcast; waiting for the
    receipt is left to the caller.
    """

    adapter_type = "UNISWAP_V3"

    def __init__(self, client: BlockchainClient, protocol: ProtocolConfig) -> None:
        super().__init__("uniswap_v3_adapter", client)
        self.protocol = protocol
        self.weth_address = to_checksum_address(protocol.weth_address)
        self.npm_address = to_checksum_address(protocol.position_manager_address)

    async def wrap_native(self, amount_wei: int, *, step: str | None = None) -> TransactionOutcome:
        if amount_wei <= 0:
            raise ValueError("wrap amount must be positive")
        return await self._submit(
            target=self.weth_address,
            abi=WETH_ABI,
            fn_name="deposit",
            args=[],
            value=int(amount_wei),
            step=step,
        )

    async def create_and_initialize_pool(
        self,
        pair: CanonicalPair,
        fee: int,
        sqrt_price_x96: int,
        *,
        step: str | None = None,
    ) -> TransactionOutcome:
        return await self._submit(
            target=self.npm_address,
            abi=NONFUNGIBLE_POSITION_MANAGER_ABI,
            fn_name="createAndInitializePoolIfNecessary",
            args=[
                to_checksum_address(pair.token0),
                to_checksum_address(pair.token1),
                int(fee),
                int(sqrt_price_x96),
            ],
            step=step,
        )

    async def approve_max(self, token: str, *, step: str | None = None) -> TransactionOutcome:
        # Issued unconditionally; existing allowance is not read.
        return await self._submit(
            target=to_checksum_address(token),
            abi=ERC20_ABI,
            fn_name="approve",
            args=[self.npm_address, MAX_UINT256],
            step=step,
        )

    async def mint_full_range(
        self,
        pair: CanonicalPair,
        fee: int,
        amounts: LiquidityAmounts,
        *,
        deadline: int,
        step: str | None = None,
    ) -> TransactionOutcome:
        tick_lower, tick_upper = self.protocol.ticks_for_fee(fee)
        params = (
            to_checksum_address(pair.token0),
            to_checksum_address(pair.token1),
            int(fee),
            int(tick_lower),
            int(tick_upper),
            int(amounts.amount0_desired),
            int(amounts.amount1_desired),
            0,
            0,
            to_checksum_address(self.owner),
            int(deadline),
        )
        return await self._submit(
            target=self.npm_address,
            abi=NONFUNGIBLE_POSITION_MANAGER_ABI,
            fn_name="mint",
            args=[params],
            step=step,
        )
