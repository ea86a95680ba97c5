"""Uniswap v3 math helpers used to seed a pool.

Pure functions only: sqrt-price encoding, canonical token ordering and
full-range tick bounds. Nothing in here touches the network.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass

from liquidity_bootstrap.core.constants.base import DEFAULT_DEADLINE_SECONDS
from liquidity_bootstrap.core.constants.contracts import (
    MAX_TICK,
    MIN_TICK,
    SQRT_PRICE_SCALE_BITS,
)
from liquidity_bootstrap.core.errors import DegeneratePairError, InvalidPriceError


@dataclass(frozen=True)
class CanonicalPair:
    token0: str
    token1: str

    def contains(self, token: str) -> bool:
        t = str(token).lower()
        return t in (self.token0.lower(), self.token1.lower())

    def is_token0(self, token: str) -> bool:
        return str(token).lower() == self.token0.lower()


def order_tokens(token_a: str, token_b: str) -> CanonicalPair:
    """Return ``(token0, token1)`` ordered the way the pool factory orders them.

    Comparison is on the lower-cased identifiers; the caller's spelling is kept.
    """
    a = str(token_a).strip()
    b = str(token_b).strip()
    if a.lower() == b.lower():
        raise DegeneratePairError(f"Pool tokens must differ, got {a} twice")
    if a.lower() < b.lower():
        return CanonicalPair(token0=a, token1=b)
    return CanonicalPair(token0=b, token1=a)


def encode_price_sqrt(price: float, *, scale_bits: int = SQRT_PRICE_SCALE_BITS) -> int:
    """``floor(sqrt(price) * 2**scale_bits)`` using float sqrt.

    The truncation is the protocol's own discretization; round trips through
    :func:`decode_price_sqrt` are only equal up to ~2**-scale_bits relative error.
    """
    try:
        p = float(price)
    except (TypeError, ValueError) as exc:
        raise InvalidPriceError(f"Invalid price: {price!r}") from exc
    if not math.isfinite(p) or not p > 0:
        raise InvalidPriceError(f"Price must be a positive finite number, got {price!r}")
    return int(math.floor(math.sqrt(p) * (1 << scale_bits)))


def decode_price_sqrt(
    sqrt_price_x96: int, *, scale_bits: int = SQRT_PRICE_SCALE_BITS
) -> float:
    if sqrt_price_x96 <= 0:
        return 0.0
    return (sqrt_price_x96 / (1 << scale_bits)) ** 2


def pool_price_for_target(
    target_price: float, pair: CanonicalPair, token_a: str
) -> float:
    """Convert "token_a per 1 token_b" into the pool's token1-per-token0 price."""
    try:
        target = float(target_price)
    except (TypeError, ValueError) as exc:
        raise InvalidPriceError(f"Invalid target price: {target_price!r}") from exc
    if not math.isfinite(target) or not target > 0:
        raise InvalidPriceError(
            f"Target price must be a positive finite number, got {target_price!r}"
        )
    if pair.is_token0(token_a):
        return 1 / target
    return target


def full_range_ticks(
    spacing: int, *, min_tick: int = MIN_TICK, max_tick: int = MAX_TICK
) -> tuple[int, int]:
    """Widest ``(tick_lower, tick_upper)`` that is a multiple of ``spacing``.

    For the 0.3% tier (spacing 60) this is ``(-887220, 887220)``.
    """
    if spacing <= 0:
        raise ValueError(f"Tick spacing must be positive, got {spacing}")
    tick_lower = -((-min_tick) // spacing) * spacing
    tick_upper = (max_tick // spacing) * spacing
    return tick_lower, tick_upper


def deadline(seconds: int = DEFAULT_DEADLINE_SECONDS, *, now: float | None = None) -> int:
    return int(time.time() if now is None else now) + seconds
