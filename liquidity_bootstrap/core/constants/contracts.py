from liquidity_bootstrap.core.constants.chains import (
    CHAIN_ID_BASE,
    CHAIN_ID_BASE_SEPOLIA,
    CHAIN_ID_ETHEREUM,
    CHAIN_ID_SEPOLIA,
)

WETH: dict[int, str] = {
    CHAIN_ID_ETHEREUM: "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
    CHAIN_ID_SEPOLIA: "0x7b79995e5f793A07Bc00c21412e50Ecae098E7f9",
    CHAIN_ID_BASE: "0x4200000000000000000000000000000000000006",
    CHAIN_ID_BASE_SEPOLIA: "0x4200000000000000000000000000000000000006",
}

UNISWAP_V3_NPM: dict[int, str] = {
    CHAIN_ID_ETHEREUM: "0xC36442b4a4522E871399CD717aBDD847Ab11FE88",
    CHAIN_ID_SEPOLIA: "0x1238536071E1c677A632429e3655c799b22cDA52",
    CHAIN_ID_BASE: "0x03a520b32C04BF3bEEf7BEb72E919cf822Ed34f1",
    CHAIN_ID_BASE_SEPOLIA: "0x27F971cb582BF9E50F397e4d29a5C7A34f11faA2",
}

# fee tier (hundredths of a bip) -> tick spacing
TICK_SPACING: dict[int, int] = {100: 1, 500: 10, 3000: 60, 10000: 200}

DEFAULT_FEE_TIER = 10000

# TickMath.MIN_TICK / MAX_TICK
MIN_TICK = -887272
MAX_TICK = 887272

SQRT_PRICE_SCALE_BITS = 96
