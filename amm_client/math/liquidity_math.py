"""
Concentrated liquidity amount math.

Mirrors the periphery LiquidityAmounts helpers in exact integer
arithmetic. All amounts are raw smallest units.

Key relations for a range [sqrtA, sqrtB] and liquidity L:
- amount0 = L * (sqrtB - sqrtA) / (sqrtA * sqrtB)
- amount1 = L * (sqrtB - sqrtA)
"""

from typing import Tuple

from ..errors import MathDomainError
from .tick_math import MAX_TICK, Q96, sqrt_price_x96_from_tick


def _ordered(a: int, b: int) -> Tuple[int, int]:
    return (a, b) if a <= b else (b, a)


def _check_range(tick_lower: int, tick_upper: int):
    if tick_lower >= tick_upper:
        raise MathDomainError(f"tick_lower {tick_lower} must be below tick_upper {tick_upper}")


def _div(numerator: int, denominator: int, round_up: bool) -> int:
    if round_up:
        return -(-numerator // denominator)
    return numerator // denominator


def get_amount0_delta(
    *,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = False,
) -> int:
    """
    Calculate token0 amount from sqrt price range and liquidity.

    Formula: amount0 = L * (√Pb - √Pa) * Q96 / (√Pa * √Pb)

    Args:
        sqrt_ratio_a_x96: One bound sqrt price in Q96 format
        sqrt_ratio_b_x96: Other bound sqrt price in Q96 format
        liquidity: Liquidity L
        round_up: Round the result up instead of down

    Returns:
        Amount of token0
    """
    sqrt_a, sqrt_b = _ordered(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    if sqrt_a <= 0:
        raise MathDomainError("sqrt ratio must be positive")

    numerator = liquidity * (sqrt_b - sqrt_a) * Q96
    return _div(numerator, sqrt_a * sqrt_b, round_up)


def get_amount1_delta(
    *,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool = False,
) -> int:
    """
    Calculate token1 amount from sqrt price range and liquidity.

    Formula: amount1 = L * (√Pb - √Pa) / Q96
    """
    sqrt_a, sqrt_b = _ordered(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    return _div(liquidity * (sqrt_b - sqrt_a), Q96, round_up)


def amounts_for_liquidity(
    liquidity: int, sqrt_price_x96: int, tick_lower: int, tick_upper: int
) -> Tuple[int, int]:
    """
    Token amounts held by a liquidity position at the current price.

    Below the range the position is all token0, at or above the upper
    bound it is all token1, otherwise it holds both.
    """
    _check_range(tick_lower, tick_upper)
    sqrt_a = sqrt_price_x96_from_tick(tick_lower)
    sqrt_b = sqrt_price_x96_from_tick(tick_upper)

    if liquidity == 0:
        return 0, 0
    if sqrt_price_x96 <= sqrt_a:
        return get_amount0_delta(sqrt_ratio_a_x96=sqrt_a, sqrt_ratio_b_x96=sqrt_b, liquidity=liquidity), 0
    if sqrt_price_x96 < sqrt_b:
        amount0 = get_amount0_delta(
            sqrt_ratio_a_x96=sqrt_price_x96, sqrt_ratio_b_x96=sqrt_b, liquidity=liquidity
        )
        amount1 = get_amount1_delta(
            sqrt_ratio_a_x96=sqrt_a, sqrt_ratio_b_x96=sqrt_price_x96, liquidity=liquidity
        )
        return amount0, amount1
    return 0, get_amount1_delta(sqrt_ratio_a_x96=sqrt_a, sqrt_ratio_b_x96=sqrt_b, liquidity=liquidity)


def _liquidity_for_amount0(sqrt_a: int, sqrt_b: int, amount0: int) -> int:
    return amount0 * sqrt_a * sqrt_b // (Q96 * (sqrt_b - sqrt_a))


def _liquidity_for_amount1(sqrt_a: int, sqrt_b: int, amount1: int) -> int:
    return amount1 * Q96 // (sqrt_b - sqrt_a)


def liquidity_for_amounts(
    sqrt_price_x96: int, tick_lower: int, tick_upper: int, amount0: int, amount1: int
) -> int:
    """
    Maximum liquidity that the given amounts can mint in a range.

    In range, the smaller of the two single-sided liquidities wins.
    """
    _check_range(tick_lower, tick_upper)
    sqrt_a = sqrt_price_x96_from_tick(tick_lower)
    sqrt_b = sqrt_price_x96_from_tick(tick_upper)

    if sqrt_price_x96 <= sqrt_a:
        return _liquidity_for_amount0(sqrt_a, sqrt_b, amount0)
    if sqrt_price_x96 < sqrt_b:
        return min(
            _liquidity_for_amount0(sqrt_price_x96, sqrt_b, amount0),
            _liquidity_for_amount1(sqrt_a, sqrt_price_x96, amount1),
        )
    return _liquidity_for_amount1(sqrt_a, sqrt_b, amount1)


def optimal_counter_amount(
    amount: int, is_token0: bool, sqrt_price_x96: int, tick_lower: int, tick_upper: int
) -> int:
    """
    Amount of the other token that pairs with `amount` in a range.

    Outside the range only one side is needed, so the counter amount is 0
    (or the input itself when it is that side).
    """
    _check_range(tick_lower, tick_upper)
    if amount <= 0:
        return 0
    sqrt_a = sqrt_price_x96_from_tick(tick_lower)
    sqrt_b = sqrt_price_x96_from_tick(tick_upper)

    if sqrt_price_x96 <= sqrt_a:
        return amount if is_token0 else 0
    if sqrt_price_x96 >= sqrt_b:
        return 0 if is_token0 else amount

    if is_token0:
        liquidity = _liquidity_for_amount0(sqrt_price_x96, sqrt_b, amount)
        return get_amount1_delta(
            sqrt_ratio_a_x96=sqrt_a, sqrt_ratio_b_x96=sqrt_price_x96, liquidity=liquidity
        )
    liquidity = _liquidity_for_amount1(sqrt_a, sqrt_price_x96, amount)
    return get_amount0_delta(
        sqrt_ratio_a_x96=sqrt_price_x96, sqrt_ratio_b_x96=sqrt_b, liquidity=liquidity
    )


def token_distribution(current_tick: int, tick_lower: int, tick_upper: int) -> Tuple[float, float]:
    """
    Rough (token0 %, token1 %) split of a range by tick position.

    Linear in ticks, so only indicative.
    """
    _check_range(tick_lower, tick_upper)
    if current_tick < tick_lower:
        return 100.0, 0.0
    if current_tick >= tick_upper:
        return 0.0, 100.0
    token1_percent = (current_tick - tick_lower) / (tick_upper - tick_lower) * 100
    return 100.0 - token1_percent, token1_percent


def liquidity_multiplier(tick_lower: int, tick_upper: int) -> float:
    """Capital efficiency of a range relative to full range, in [1, 1000]."""
    width = tick_upper - tick_lower
    if width <= 0:
        return 1.0
    return max(1.0, min((2 * MAX_TICK) / width, 1000.0))
