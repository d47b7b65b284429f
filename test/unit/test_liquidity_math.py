"""
Tests for liquidity amount math and unit conversion.
"""

import pytest

from amm_client.errors import MathDomainError, ValidationError
from amm_client.math.liquidity_math import (
    amounts_for_liquidity,
    get_amount0_delta,
    get_amount1_delta,
    liquidity_for_amounts,
    liquidity_multiplier,
    optimal_counter_amount,
    token_distribution,
)
from amm_client.math.tick_math import Q96, sqrt_price_x96_from_tick
from amm_client.math.units import apply_slippage, format_units, parse_units

LIQUIDITY = 10**18


class TestAmountDeltas:
    """Test the single-range amount formulas."""

    def test_bound_order_does_not_matter(self):
        """Test that swapping the sqrt bounds gives the same amounts."""
        a, b = sqrt_price_x96_from_tick(-600), sqrt_price_x96_from_tick(600)
        assert get_amount0_delta(sqrt_ratio_a_x96=a, sqrt_ratio_b_x96=b, liquidity=LIQUIDITY) == get_amount0_delta(
            sqrt_ratio_a_x96=b, sqrt_ratio_b_x96=a, liquidity=LIQUIDITY
        )
        assert get_amount1_delta(sqrt_ratio_a_x96=a, sqrt_ratio_b_x96=b, liquidity=LIQUIDITY) == get_amount1_delta(
            sqrt_ratio_a_x96=b, sqrt_ratio_b_x96=a, liquidity=LIQUIDITY
        )

    def test_round_up_adds_at_most_one(self):
        """Test that rounding up differs from rounding down by at most 1."""
        a, b = sqrt_price_x96_from_tick(-887), sqrt_price_x96_from_tick(1234)
        down = get_amount0_delta(sqrt_ratio_a_x96=a, sqrt_ratio_b_x96=b, liquidity=12345)
        up = get_amount0_delta(sqrt_ratio_a_x96=a, sqrt_ratio_b_x96=b, liquidity=12345, round_up=True)
        assert up - down in (0, 1)

    def test_zero_width_is_zero(self):
        """Test that an empty price interval holds nothing."""
        assert get_amount1_delta(sqrt_ratio_a_x96=Q96, sqrt_ratio_b_x96=Q96, liquidity=LIQUIDITY) == 0


class TestAmountsForLiquidity:
    """Test position composition at the current price."""

    def test_in_range_symmetric(self):
        """Test that a symmetric range at price 1 holds about equal amounts."""
        amount0, amount1 = amounts_for_liquidity(LIQUIDITY, Q96, -600, 600)
        assert amount0 > 0 and amount1 > 0
        assert abs(amount0 - amount1) <= amount0 // 10**9

    def test_below_range_all_token0(self):
        """Test that a price below the range holds only token0."""
        amount0, amount1 = amounts_for_liquidity(LIQUIDITY, sqrt_price_x96_from_tick(-1000), -600, 600)
        assert amount0 > 0
        assert amount1 == 0

    def test_above_range_all_token1(self):
        """Test that a price at or above the upper bound holds only token1."""
        amount0, amount1 = amounts_for_liquidity(LIQUIDITY, sqrt_price_x96_from_tick(600), -600, 600)
        assert amount0 == 0
        assert amount1 > 0

    def test_zero_liquidity(self):
        """Test that zero liquidity holds nothing."""
        assert amounts_for_liquidity(0, Q96, -600, 600) == (0, 0)

    def test_inverted_range_rejected(self):
        """Test that tick_lower >= tick_upper raises."""
        with pytest.raises(MathDomainError):
            amounts_for_liquidity(LIQUIDITY, Q96, 600, 600)


class TestLiquidityForAmounts:
    """Test liquidity sizing from desired amounts."""

    def test_minted_amounts_never_exceed_desired(self):
        """Test that the liquidity from two amounts uses no more than either."""
        amount0, amount1 = 5 * 10**18, 3 * 10**18
        liquidity = liquidity_for_amounts(Q96, -600, 600, amount0, amount1)
        used0, used1 = amounts_for_liquidity(liquidity, Q96, -600, 600)
        assert used0 <= amount0
        assert used1 <= amount1
        # token1 is the limiting side
        assert used1 == pytest.approx(amount1, rel=1e-9)

    def test_single_sided_below_range(self):
        """Test that below the range only amount0 matters."""
        sqrt_price = sqrt_price_x96_from_tick(-1000)
        assert liquidity_for_amounts(sqrt_price, -600, 600, 10**18, 0) == liquidity_for_amounts(
            sqrt_price, -600, 600, 10**18, 10**30
        )

    def test_optimal_counter_amount_in_range(self):
        """Test that the counter amount balances a symmetric range."""
        counter = optimal_counter_amount(10**18, True, Q96, -600, 600)
        assert counter == pytest.approx(10**18, rel=1e-6)

    def test_optimal_counter_amount_out_of_range(self):
        """Test that out of range only one side is needed."""
        below = sqrt_price_x96_from_tick(-1000)
        assert optimal_counter_amount(10**18, True, below, -600, 600) == 10**18
        assert optimal_counter_amount(10**18, False, below, -600, 600) == 0
        assert optimal_counter_amount(0, True, Q96, -600, 600) == 0


class TestRangeHeuristics:
    """Test the display-only range helpers."""

    def test_token_distribution(self):
        """Test the linear token split across a range."""
        assert token_distribution(-700, -600, 600) == (100.0, 0.0)
        assert token_distribution(600, -600, 600) == (0.0, 100.0)
        assert token_distribution(0, -600, 600) == (50.0, 50.0)

    def test_liquidity_multiplier(self):
        """Test capital efficiency bounds."""
        assert liquidity_multiplier(-887272, 887272) == 1.0
        assert liquidity_multiplier(-10, 10) == 1000.0
        assert liquidity_multiplier(10, 10) == 1.0


class TestUnits:
    """Test decimal string <-> raw unit conversion."""

    def test_parse_units(self):
        """Test parsing whole and fractional amounts."""
        assert parse_units("1.5", 18) == 1_500_000_000_000_000_000
        assert parse_units("0.000001", 6) == 1
        assert parse_units("42", 0) == 42
        assert parse_units(" 2 ", 6) == 2_000_000

    def test_parse_units_large_amount_is_exact(self):
        """Test that large amounts do not lose digits."""
        assert parse_units("123456789012345678901234.5", 18) == 123456789012345678901234500000000000000000

    @pytest.mark.parametrize("amount", ["0.0000001", "-1", "abc", "NaN", 1.5])
    def test_parse_units_rejects(self, amount):
        """Test over-precise, negative, malformed and float inputs."""
        with pytest.raises(ValidationError):
            parse_units(amount, 6)

    def test_format_units(self):
        """Test formatting without trailing zeros or exponents."""
        assert format_units(1_500_000_000_000_000_000, 18) == "1.5"
        assert format_units(10**18, 18) == "1"
        assert format_units(0, 18) == "0"
        assert format_units(1, 18) == "0.000000000000000001"
        assert format_units(1_234_500, 6) == "1.2345"

    def test_apply_slippage(self):
        """Test slippage minimums are floored."""
        assert apply_slippage(1000, 0.5) == 995
        assert apply_slippage(1999, 0.5) == 1989
        assert apply_slippage(1000, 0) == 1000
        assert apply_slippage(10**30, "1") == 99 * 10**28

    @pytest.mark.parametrize("slippage", [-0.1, 100, "abc"])
    def test_apply_slippage_rejects(self, slippage):
        """Test out-of-range and malformed tolerances."""
        with pytest.raises(ValidationError):
            apply_slippage(1000, slippage)
