_MINT_PARAMS_COMPONENTS = [
    {"name": "token0", "type": "address"},
    {"name": "token1", "type": "address"},
    {"name": "fee", "type": "uint24"},
    {"name": "tickLower", "type": "int24"},
    {"name": "tickUpper", "type": "int24"},
    {"name": "amount0Desired", "type": "uint256"},
    {"name": "amount1Desired", "type": "uint256"},
    {"name": "amount0Min", "type": "uint256"},
    {"name": "amount1Min", "type": "uint256"},
    {"name": "recipient", "type": "address"},
    {"name": "deadline", "type": "uint256"},
]

NONFUNGIBLE_POSITION_MANAGER_ABI = [
    {
        "type": "function",
        "name": "createAndInitializePoolIfNecessary",
        "stateMutability": "payable",
        "inputs": [
            {"name": "token0", "type": "address"},
            {"name": "token1", "type": "address"},
            {"name": "fee", "type": "uint24"},
            {"name": "sqrtPriceX96", "type": "uint160"},
        ],
        "outputs": [{"name": "pool", "type": "address"}],
    },
    {
        "type": "function",
        "name": "mint",
        "stateMutability": "payable",
        "inputs": [
            {
                "name": "params",
                "type": "tuple",
                "components": _MINT_PARAMS_COMPONENTS,
            }
        ],
        "outputs": [
            {"name": "tokenId", "type": "uint256"},
            {"name": "liquidity", "type": "uint128"},
            {"name": "amount0", "type": "uint256"},
            {"name": "amount1", "type": "uint256"},
        ],
    },
]
