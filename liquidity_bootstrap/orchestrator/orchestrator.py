"""Sequenced wrap -> initialize -> approve -> mint state machine.

Each step submits exactly one transaction and waits for it to confirm before
the next step is attempted. Validation happens up front, in IDLE, so a bad
request never reaches the chain. A failure at a chain step halts the run;
steps that already confirmed are left as they are.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

from loguru import logger

from liquidity_bootstrap.adapters.uniswap_v3_adapter.adapter import UniswapV3Adapter
from liquidity_bootstrap.core.clients.BlockchainClient import (
    BlockchainClient,
    TransactionOutcome,
)
from liquidity_bootstrap.core.config import ProtocolConfig
from liquidity_bootstrap.core.errors import (
    ConfirmationError,
    InsufficientInputError,
    InvalidPriceError,
    TransactionError,
    ValidationError,
)
from liquidity_bootstrap.core.utils.uniswap_v3_math import (
    decode_price_sqrt,
    deadline,
    encode_price_sqrt,
    order_tokens,
    pool_price_for_target,
)
from liquidity_bootstrap.core.utils.units import resolve_liquidity_amounts, to_wei_eth
from liquidity_bootstrap.orchestrator.models import (
    BootstrapPlan,
    BootstrapRequest,
    BootstrapResult,
    Mode,
    OrchestratorState,
)

S = OrchestratorState

TRANSITIONS: dict[OrchestratorState, frozenset[OrchestratorState]] = {
    S.IDLE: frozenset({S.WRAPPING, S.INITIALIZING, S.APPROVING_TOKEN0, S.FAILED}),
    S.WRAPPING: frozenset({S.INITIALIZING, S.APPROVING_TOKEN0, S.DONE, S.FAILED}),
    S.INITIALIZING: frozenset({S.APPROVING_TOKEN0, S.FAILED}),
    S.APPROVING_TOKEN0: frozenset({S.APPROVING_TOKEN1, S.FAILED}),
    S.APPROVING_TOKEN1: frozenset({S.MINTING, S.FAILED}),
    S.MINTING: frozenset({S.DONE, S.FAILED}),
    S.DONE: frozenset(),
    S.FAILED: frozenset(),
}

StepHandler = Callable[[BootstrapPlan], Awaitable[TransactionOutcome]]


class LiquidityOrchestrator:
    def __init__(
        self,
        client: BlockchainClient,
        protocol: ProtocolConfig,
        *,
        adapter: UniswapV3Adapter | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.client = client
        self.protocol = protocol
        self.adapter = adapter or UniswapV3Adapter(client, protocol)
        self.clock = clock
        self.state = S.IDLE
        self.history: list[OrchestratorState] = [S.IDLE]
        self.outcomes: list[TransactionOutcome] = []
        self.logger = logger.bind(orchestrator=self.__class__.__name__)
        self._started = False

    def plan(self, request: BootstrapRequest) -> BootstrapPlan:
        """Validate ``request`` and derive every call parameter.

        Raises a :class:`ValidationError` subclass; never touches the chain.
        """
        try:
            mode = Mode(request.mode)
        except ValueError as exc:
            raise ValidationError(f"Unknown mode {request.mode!r}") from exc
        wrap_wei = to_wei_eth(request.wrap_amount or "0")

        if mode is Mode.WRAP_ONLY:
            if wrap_wei == 0:
                raise InsufficientInputError("Wrap-only mode needs a positive wrap amount")
            return BootstrapPlan(mode=mode, wrap_wei=wrap_wei)

        pool = request.pool
        if pool is None:
            raise ValidationError(f"Pool parameters are required in {mode} mode")

        fee = self.protocol.validate_fee(pool.fee)
        wrapped = pool.token_b or self.protocol.weth_address
        # deposit() only ever mints protocol WETH
        if wrapped.strip().lower() != self.protocol.weth_address.lower():
            raise ValidationError(
                f"Quote token {wrapped} is not the configured WETH "
                f"{self.protocol.weth_address}"
            )
        pair = order_tokens(pool.token_a, wrapped)

        sqrt_price_x96 = None
        if mode is Mode.INITIALIZE_AND_ADD:
            if pool.target_price is None:
                raise InvalidPriceError("A target price is required to initialize a pool")
            price = pool_price_for_target(pool.target_price, pair, pool.token_a)
            sqrt_price_x96 = encode_price_sqrt(
                price, scale_bits=self.protocol.sqrt_price_scale_bits
            )

        amounts = resolve_liquidity_amounts(
            pair,
            custom_token=pool.token_a,
            custom_amount=request.token_amount,
            wrapped_token=wrapped,
            wrapped_amount=request.weth_amount,
            decimals=self.protocol.token_decimals,
        )
        return BootstrapPlan(
            mode=mode,
            wrap_wei=wrap_wei,
            pair=pair,
            fee=fee,
            sqrt_price_x96=sqrt_price_x96,
            amounts=amounts,
        )

    def steps(self, plan: BootstrapPlan) -> list[tuple[OrchestratorState, StepHandler]]:
        steps: list[tuple[OrchestratorState, StepHandler]] = []
        if plan.wrap_wei > 0:
            steps.append((S.WRAPPING, self._wrap))
        if plan.mode is Mode.WRAP_ONLY:
            return steps
        if plan.mode is Mode.INITIALIZE_AND_ADD:
            steps.append((S.INITIALIZING, self._initialize))
        steps.append((S.APPROVING_TOKEN0, self._approve_token0))
        steps.append((S.APPROVING_TOKEN1, self._approve_token1))
        steps.append((S.MINTING, self._mint))
        return steps

    async def run(self, request: BootstrapRequest) -> BootstrapResult:
        if self._started:
            raise RuntimeError("A LiquidityOrchestrator runs a single request")
        self._started = True

        try:
            plan = self.plan(request)
        except ValidationError as exc:
            self.logger.error(f"Request rejected before any transaction: {exc}")
            return self._fail(S.IDLE, exc, None)

        self.logger.info(
            f"Starting {plan.mode} run for {self.client.account} "
            f"(chain {self.protocol.chain_id})"
        )
        if plan.mode is Mode.ADD_LIQUIDITY:
            self.logger.info(
                "Skipping pool initialization, assuming pool already exists "
                f"for fee tier {plan.fee}"
            )

        for state, handler in self.steps(plan):
            self._enter(state)
            try:
                outcome = await handler(plan)
                self.outcomes.append(outcome)
                await self.client.await_confirmation(outcome)
                if not outcome.confirmed:
                    raise ConfirmationError(
                        outcome.txn_hash,
                        message=f"Client returned without confirming {outcome.txn_hash}",
                        step=state,
                    )
            except TransactionError as exc:
                if exc.step is None:
                    exc.step = state
                return self._fail(state, exc, plan)
            except Exception:
                self._enter(S.FAILED)
                raise
            self.logger.info(
                f"{state} confirmed: {outcome.txn_hash} (block {outcome.block_number})"
            )

        self._enter(S.DONE)
        self.logger.info(f"Done: {plan.mode} run finished")
        return BootstrapResult(
            ok=True,
            state=S.DONE,
            outcomes=list(self.outcomes),
            history=list(self.history),
            plan=plan,
        )

    def _enter(self, state: OrchestratorState) -> None:
        if state not in TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal transition {self.state} -> {state}")
        self.state = state
        self.history.append(state)

    def _fail(
        self,
        step: OrchestratorState,
        error: Exception,
        plan: BootstrapPlan | None,
    ) -> BootstrapResult:
        self.logger.error(f"{step} failed: {error}")
        self._enter(S.FAILED)
        return BootstrapResult(
            ok=False,
            state=S.FAILED,
            failed_step=step,
            error=error,
            outcomes=list(self.outcomes),
            history=list(self.history),
            plan=plan,
        )

    async def _wrap(self, plan: BootstrapPlan) -> TransactionOutcome:
        self.logger.info(f"Wrapping {plan.wrap_wei} wei into {self.adapter.weth_address}")
        return await self.adapter.wrap_native(plan.wrap_wei, step=S.WRAPPING)

    async def _initialize(self, plan: BootstrapPlan) -> TransactionOutcome:
        applied = decode_price_sqrt(
            plan.sqrt_price_x96, scale_bits=self.protocol.sqrt_price_scale_bits
        )
        self.logger.info(
            f"Initializing pool {plan.pair.token0}/{plan.pair.token1} fee={plan.fee} "
            f"sqrtPriceX96={plan.sqrt_price_x96} (~{applied:.6g} token1 per token0)"
        )
        return await self.adapter.create_and_initialize_pool(
            plan.pair, plan.fee, plan.sqrt_price_x96, step=S.INITIALIZING
        )

    async def _approve_token0(self, plan: BootstrapPlan) -> TransactionOutcome:
        return await self.adapter.approve_max(plan.pair.token0, step=S.APPROVING_TOKEN0)

    async def _approve_token1(self, plan: BootstrapPlan) -> TransactionOutcome:
        return await self.adapter.approve_max(plan.pair.token1, step=S.APPROVING_TOKEN1)

    async def _mint(self, plan: BootstrapPlan) -> TransactionOutcome:
        mint_deadline = deadline(self.protocol.deadline_seconds, now=self.clock())
        self.logger.info(
            f"Minting full-range position amount0={plan.amounts.amount0_desired} "
            f"amount1={plan.amounts.amount1_desired} deadline={mint_deadline}"
        )
        return await self.adapter.mint_full_range(
            plan.pair, plan.fee, plan.amounts, deadline=mint_deadline, step=S.MINTING
        )
