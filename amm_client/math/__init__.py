"""
Pure AMM math: tick/price conversions, liquidity amounts and unit scaling.
"""

from .liquidity_math import (
    amounts_for_liquidity,
    get_amount0_delta,
    get_amount1_delta,
    liquidity_for_amounts,
    liquidity_multiplier,
    optimal_counter_amount,
    token_distribution,
)
from .tick_math import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    Q96,
    TickRange,
    adjust_price_for_decimals,
    full_range_ticks,
    is_valid_tick,
    is_valid_tick_spacing,
    nearest_usable_tick,
    price_from_sqrt_price_x96,
    price_from_tick,
    price_range_from_percentage,
    raw_price_from_adjusted,
    sqrt_price_x96_from_price,
    sqrt_price_x96_from_tick,
    tick_from_price,
    tick_from_sqrt_price_x96,
)
from .units import apply_slippage, format_units, parse_units

__all__ = [
    "Q96",
    "MIN_TICK",
    "MAX_TICK",
    "MIN_SQRT_RATIO",
    "MAX_SQRT_RATIO",
    "TickRange",
    "price_from_sqrt_price_x96",
    "sqrt_price_x96_from_price",
    "tick_from_sqrt_price_x96",
    "sqrt_price_x96_from_tick",
    "tick_from_price",
    "price_from_tick",
    "adjust_price_for_decimals",
    "raw_price_from_adjusted",
    "nearest_usable_tick",
    "full_range_ticks",
    "price_range_from_percentage",
    "is_valid_tick",
    "is_valid_tick_spacing",
    "get_amount0_delta",
    "get_amount1_delta",
    "amounts_for_liquidity",
    "liquidity_for_amounts",
    "optimal_counter_amount",
    "token_distribution",
    "liquidity_multiplier",
    "parse_units",
    "format_units",
    "apply_slippage",
]
