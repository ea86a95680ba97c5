from liquidity_bootstrap.core.adapters.BaseAdapter import BaseAdapter
from liquidity_bootstrap.core.clients.BlockchainClient import (
    BlockchainClient,
    TransactionOutcome,
    Web3BlockchainClient,
)
from liquidity_bootstrap.core.config import ProtocolConfig

__all__ = [
    "BaseAdapter",
    "BlockchainClient",
    "ProtocolConfig",
    "TransactionOutcome",
    "Web3BlockchainClient",
]
