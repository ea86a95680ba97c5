CHAIN_ID_ETHEREUM = 1
CHAIN_ID_SEPOLIA = 11155111
CHAIN_ID_BASE = 8453
CHAIN_ID_BASE_SEPOLIA = 84532
CHAIN_ID_ARBITRUM = 42161
CHAIN_ID_BSC = 56
CHAIN_ID_POLYGON = 137

POA_MIDDLEWARE_CHAIN_IDS: set[int] = {
    CHAIN_ID_BSC,
    CHAIN_ID_POLYGON,
}

PRE_EIP_1559_CHAIN_IDS: set[int] = {
    CHAIN_ID_BSC,
    CHAIN_ID_ARBITRUM,
}

CHAIN_EXPLORER_URLS: dict[int, str] = {
    CHAIN_ID_ETHEREUM: "https://etherscan.io/",
    CHAIN_ID_SEPOLIA: "https://sepolia.etherscan.io/",
    CHAIN_ID_BASE: "https://basescan.org/",
    CHAIN_ID_BASE_SEPOLIA: "https://sepolia.basescan.org/",
    CHAIN_ID_ARBITRUM: "https://arbiscan.io/",
    CHAIN_ID_BSC: "https://bscscan.com/",
    CHAIN_ID_POLYGON: "https://polygonscan.com/",
}
