from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext

from liquidity_bootstrap.core.constants.base import TOKEN_DECIMALS
from liquidity_bootstrap.core.errors import InsufficientInputError, InvalidAmountError
from liquidity_bootstrap.core.utils.uniswap_v3_math import CanonicalPair

# Enough digits for any uint256 plus 18 fractional digits.
AMOUNT_PRECISION = 100


@dataclass(frozen=True)
class LiquidityAmounts:
    amount0_desired: int
    amount1_desired: int


def _to_decimal(value: str | int | float | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return Decimal(value)
    return Decimal(str(value).strip())


def to_base_units(
    amount: str | int | float | Decimal, decimals: int = TOKEN_DECIMALS
) -> int:
    try:
        amt = _to_decimal(amount)
    except InvalidOperation as exc:
        raise InvalidAmountError(f"Invalid token amount: {amount!r}") from exc
    if not amt.is_finite():
        raise InvalidAmountError(f"Invalid token amount: {amount!r}")
    if amt < 0:
        raise InvalidAmountError(f"Amount must be non-negative, got {amount!r}")
    with localcontext() as ctx:
        ctx.prec = AMOUNT_PRECISION
        ctx.rounding = ROUND_DOWN
        try:
            scaled = amt * (Decimal(10) ** int(decimals))
            return int(scaled.to_integral_value(rounding=ROUND_DOWN))
        except ArithmeticError as exc:
            raise InvalidAmountError(f"Token amount out of range: {amount!r}") from exc


def to_wei_eth(amount_eth: str | int | float | Decimal) -> int:
    return to_base_units(amount_eth, TOKEN_DECIMALS)


def resolve_liquidity_amounts(
    pair: CanonicalPair,
    *,
    custom_token: str,
    custom_amount: str | int | float | Decimal,
    wrapped_token: str,
    wrapped_amount: str | int | float | Decimal,
    decimals: int = TOKEN_DECIMALS,
) -> LiquidityAmounts:
    """Place each user amount into the canonical slot of its own token.

    Both tokens are assumed to carry ``decimals`` fractional digits; on-chain
    decimals are not queried.
    """
    for token in (custom_token, wrapped_token):
        if not pair.contains(token):
            raise ValueError(f"Token {token} is not part of pair {pair}")

    custom_raw = to_base_units(custom_amount, decimals)
    wrapped_raw = to_base_units(wrapped_amount, decimals)
    if custom_raw == 0 and wrapped_raw == 0:
        raise InsufficientInputError("At least one liquidity amount must be non-zero")

    if pair.is_token0(custom_token):
        return LiquidityAmounts(amount0_desired=custom_raw, amount1_desired=wrapped_raw)
    return LiquidityAmounts(amount0_desired=wrapped_raw, amount1_desired=custom_raw)
