from __future__ import annotations

import math

import pytest

from liquidity_bootstrap.core.errors import DegeneratePairError, InvalidPriceError
from liquidity_bootstrap.core.utils.uniswap_v3_math import (
    CanonicalPair,
    deadline,
    decode_price_sqrt,
    encode_price_sqrt,
    full_range_ticks,
    order_tokens,
    pool_price_for_target,
)

Q96 = 2**96
TOKEN_LOW = "0x1111111111111111111111111111111111111111"
TOKEN_HIGH = "0x9999999999999999999999999999999999999999"
WETH_SEPOLIA = "0x7b79995e5f793A07Bc00c21412e50Ecae098E7f9"


class TestEncodePriceSqrt:
    def test_unit_price(self):
        assert encode_price_sqrt(1) == Q96

    def test_perfect_square(self):
        assert encode_price_sqrt(4) == 2 * Q96
        assert encode_price_sqrt(0.25) == Q96 // 2

    def test_truncates(self):
        expected = math.floor(math.sqrt(4000) * Q96)
        assert encode_price_sqrt(4000) == expected
        assert isinstance(encode_price_sqrt(4000), int)

    @pytest.mark.parametrize("price", [1e-12, 1 / 4000, 0.5, 1.0001, 4000, 1e12])
    def test_round_trip_is_close(self, price):
        decoded = decode_price_sqrt(encode_price_sqrt(price))
        assert decoded == pytest.approx(price, rel=1e-12)

    @pytest.mark.parametrize("price", [0, -1, -0.0001, float("nan"), float("inf")])
    def test_rejects_non_positive_or_non_finite(self, price):
        with pytest.raises(InvalidPriceError):
            encode_price_sqrt(price)

    def test_rejects_garbage(self):
        with pytest.raises(InvalidPriceError):
            encode_price_sqrt("abc")

    def test_custom_scale(self):
        assert encode_price_sqrt(4, scale_bits=64) == 2 * 2**64

    def test_decode_non_positive(self):
        assert decode_price_sqrt(0) == 0.0


class TestOrderTokens:
    def test_orders_by_lowercase(self):
        pair = order_tokens(TOKEN_HIGH, TOKEN_LOW)
        assert pair == CanonicalPair(token0=TOKEN_LOW, token1=TOKEN_HIGH)

    def test_order_independent(self):
        assert order_tokens(TOKEN_LOW, WETH_SEPOLIA) == order_tokens(
            WETH_SEPOLIA, TOKEN_LOW
        )
        assert order_tokens("0xAbC", "0xabd") == order_tokens("0xabd", "0xAbC")

    def test_case_insensitive_comparison_keeps_spelling(self):
        # "0xB..." < "0xa..." as raw strings, but not once lower-cased.
        pair = order_tokens("0xB000000000000000000000000000000000000000", "0xa0")
        assert pair.token0 == "0xa0"
        assert pair.token1 == "0xB000000000000000000000000000000000000000"

    def test_identical_tokens(self):
        with pytest.raises(DegeneratePairError):
            order_tokens(TOKEN_LOW, TOKEN_LOW)

    def test_identical_tokens_different_case(self):
        with pytest.raises(DegeneratePairError):
            order_tokens(WETH_SEPOLIA, WETH_SEPOLIA.lower())

    def test_pair_membership(self):
        pair = order_tokens(TOKEN_LOW, WETH_SEPOLIA)
        assert pair.is_token0(TOKEN_LOW.upper().replace("0X", "0x"))
        assert pair.contains(WETH_SEPOLIA.lower())
        assert not pair.contains(TOKEN_HIGH)


class TestPoolPriceForTarget:
    def test_custom_token_is_token0_inverts(self):
        pair = order_tokens(TOKEN_LOW, WETH_SEPOLIA)
        assert pool_price_for_target(4000, pair, TOKEN_LOW) == pytest.approx(1 / 4000)

    def test_custom_token_is_token1_keeps(self):
        pair = order_tokens(TOKEN_HIGH, WETH_SEPOLIA)
        assert pool_price_for_target(4000, pair, TOKEN_HIGH) == 4000

    @pytest.mark.parametrize("target", [0, -5, "x", float("nan")])
    def test_invalid_target(self, target):
        pair = order_tokens(TOKEN_HIGH, WETH_SEPOLIA)
        with pytest.raises(InvalidPriceError):
            pool_price_for_target(target, pair, TOKEN_HIGH)


class TestTicks:
    @pytest.mark.parametrize(
        "spacing,expected",
        [
            (1, (-887272, 887272)),
            (10, (-887270, 887270)),
            (60, (-887220, 887220)),
            (200, (-887200, 887200)),
        ],
    )
    def test_full_range_ticks(self, spacing, expected):
        assert full_range_ticks(spacing) == expected

    def test_full_range_ticks_rejects_bad_spacing(self):
        with pytest.raises(ValueError):
            full_range_ticks(0)


def test_deadline_uses_given_clock():
    assert deadline(600, now=1_700_000_000.9) == 1_700_000_600


def test_deadline_defaults_to_wall_clock(monkeypatch):
    monkeypatch.setattr(
        "liquidity_bootstrap.core.utils.uniswap_v3_math.time.time", lambda: 1000.0
    )
    assert deadline() == 1600
