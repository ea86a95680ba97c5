__version__ = "0.1.0"

from liquidity_bootstrap.core import (
    BaseAdapter,
    BlockchainClient,
    ProtocolConfig,
    TransactionOutcome,
    Web3BlockchainClient,
)
from liquidity_bootstrap.orchestrator import (
    BootstrapRequest,
    BootstrapResult,
    LiquidityOrchestrator,
    Mode,
    OrchestratorState,
    PoolParameters,
)

__all__ = [
    "__version__",
    "BaseAdapter",
    "BlockchainClient",
    "BootstrapRequest",
    "BootstrapResult",
    "LiquidityOrchestrator",
    "Mode",
    "OrchestratorState",
    "PoolParameters",
    "ProtocolConfig",
    "TransactionOutcome",
    "Web3BlockchainClient",
]
