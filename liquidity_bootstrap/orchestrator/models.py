from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum
from typing import Any

from liquidity_bootstrap.core.clients.BlockchainClient import TransactionOutcome
from liquidity_bootstrap.core.utils.uniswap_v3_math import CanonicalPair
from liquidity_bootstrap.core.utils.units import LiquidityAmounts

Amount = str | int | float | Decimal


class Mode(StrEnum):
    INITIALIZE_AND_ADD = "init"
    ADD_LIQUIDITY = "add"
    WRAP_ONLY = "wrap"


class OrchestratorState(StrEnum):
    IDLE = "IDLE"
    WRAPPING = "WRAPPING"
    INITIALIZING = "INITIALIZING"
    APPROVING_TOKEN0 = "APPROVING_TOKEN0"
    APPROVING_TOKEN1 = "APPROVING_TOKEN1"
    MINTING = "MINTING"
    DONE = "DONE"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (OrchestratorState.DONE, OrchestratorState.FAILED)


@dataclass(frozen=True)
class PoolParameters:
    token_a: str  # the custom ERC-20
    fee: int
    token_b: str | None = None  # the wrapped native token; None means protocol WETH
    target_price: float | None = None  # token_a per 1 token_b


@dataclass(frozen=True)
class BootstrapRequest:
    mode: Mode
    pool: PoolParameters | None = None
    token_amount: Amount = "0"
    weth_amount: Amount = "0"
    wrap_amount: Amount = "0"


@dataclass(frozen=True)
class BootstrapPlan:
    """Everything derived from a request before the first transaction."""

    mode: Mode
    wrap_wei: int
    pair: CanonicalPair | None = None
    fee: int | None = None
    sqrt_price_x96: int | None = None
    amounts: LiquidityAmounts | None = None


@dataclass
class BootstrapResult:
    ok: bool
    state: OrchestratorState
    failed_step: OrchestratorState | None = None
    error: Exception | None = None
    outcomes: list[TransactionOutcome] = field(default_factory=list)
    history: list[OrchestratorState] = field(default_factory=list)
    plan: BootstrapPlan | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "ok": self.ok,
            "state": self.state,
            "history": list(self.history),
            "transactions": [o.to_dict() for o in self.outcomes],
        }
        if self.plan is not None and self.plan.pair is not None:
            out["token0"] = self.plan.pair.token0
            out["token1"] = self.plan.pair.token1
            out["fee"] = self.plan.fee
        if self.plan is not None and self.plan.sqrt_price_x96 is not None:
            out["sqrt_price_x96"] = str(self.plan.sqrt_price_x96)
        if not self.ok:
            out["failed_step"] = self.failed_step
            out["error"] = {
                "type": type(self.error).__name__ if self.error else None,
                "message": str(self.error) if self.error else None,
            }
        return out
