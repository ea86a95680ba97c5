from liquidity_bootstrap.orchestrator.models import (
    BootstrapPlan,
    BootstrapRequest,
    BootstrapResult,
    Mode,
    OrchestratorState,
    PoolParameters,
)
from liquidity_bootstrap.orchestrator.orchestrator import LiquidityOrchestrator

__all__ = [
    "BootstrapPlan",
    "BootstrapRequest",
    "BootstrapResult",
    "LiquidityOrchestrator",
    "Mode",
    "OrchestratorState",
    "PoolParameters",
]
