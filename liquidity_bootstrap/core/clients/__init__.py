from liquidity_bootstrap.core.clients.BlockchainClient import (
    BlockchainClient,
    TransactionOutcome,
    Web3BlockchainClient,
)

__all__ = ["BlockchainClient", "TransactionOutcome", "Web3BlockchainClient"]
