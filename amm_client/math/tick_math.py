"""
Conversions between Q96 sqrt prices, ticks and decimal prices.

Key concepts:
- sqrtPriceX96: square root of the raw price in Q96 fixed-point format
- Tick: logarithmic price index where price = 1.0001^tick
- Raw price: token1 smallest units per token0 smallest unit
- Human price: raw price x 10^(decimals0 - decimals1)

Integer math is exact throughout; floats appear only in the final result
of functions that return a float.
"""

import math
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal, InvalidOperation, localcontext
from typing import Tuple, Union

from ..errors import MathDomainError

Q96 = 2**96
Q192 = 2**192

MIN_TICK = -887272
MAX_TICK = 887272
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342

TICK_BASE = 1.0001
_LOG_TICK_BASE = math.log(TICK_BASE)
_LOG_Q96 = 96 * math.log(2)

Number = Union[int, float, str, Decimal]

# Q128 multipliers for sqrt(1.0001^-(2^i)), i = 1..19
_TICK_FACTORS = (
    (0x2, 0xFFF97272373D413259A46990580E213A),
    (0x4, 0xFFF2E50F5F656932EF12357CF3C7FDCC),
    (0x8, 0xFFE5CACA7E10E4E61C3624EAA0941CD0),
    (0x10, 0xFFCB9843D60F6159C9DB58835C926644),
    (0x20, 0xFF973B41FA98C081472E6896DFB254C0),
    (0x40, 0xFF2EA16466C96A3843EC78B326B52861),
    (0x80, 0xFE5DEE046A99A2A811C461F1969C3053),
    (0x100, 0xFCBE86C7900A88AEDCFFC83B479AA3A4),
    (0x200, 0xF987A7253AC413176F2B074CF7815E54),
    (0x400, 0xF3392B0822B70005940C7A398E4B70F3),
    (0x800, 0xE7159475A2C29B7443B29C7FA6E889D9),
    (0x1000, 0xD097F3BDFD2022B8845AD8F792AA5825),
    (0x2000, 0xA9F746462D870FDF8A65DC1F90E061E5),
    (0x4000, 0x70D869A156D2A1B890BB3DF62BAF32F7),
    (0x8000, 0x31BE135F97D08FD981231505542FCFA6),
    (0x10000, 0x9AA508B5B7A84E1C677DE54F3E99BC9),
    (0x20000, 0x5D6AF8DEDB81196699C329225EE604),
    (0x40000, 0x2216E584F5FA1EA926041BEDFE98),
    (0x80000, 0x48A170391F7DC42444E8FA2),
)


@dataclass
class TickRange:
    """
    Tick-aligned price range.

    Attributes:
        min_tick: Lower tick, aligned to the tick spacing
        max_tick: Upper tick, aligned to the tick spacing
        min_price: Raw price at min_tick
        max_price: Raw price at max_tick
    """

    min_tick: int
    max_tick: int
    min_price: float
    max_price: float


def _check_tick(tick: int) -> int:
    if isinstance(tick, bool) or not isinstance(tick, int):
        raise MathDomainError(f"Tick must be an integer, got {tick!r}")
    if tick < MIN_TICK or tick > MAX_TICK:
        raise MathDomainError(f"Tick {tick} outside [{MIN_TICK}, {MAX_TICK}]")
    return tick


def _to_decimal(price: Number) -> Decimal:
    """Validate a price and convert it to Decimal without losing digits."""
    if isinstance(price, bool):
        raise MathDomainError(f"Price must be numeric, got {price!r}")
    try:
        value = price if isinstance(price, Decimal) else Decimal(price)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise MathDomainError(f"Price must be numeric, got {price!r}") from e
    if not value.is_finite():
        raise MathDomainError(f"Price must be finite, got {price!r}")
    if value <= 0:
        raise MathDomainError(f"Price must be positive, got {price!r}")
    return value


def _check_sqrt_price(sqrt_price_x96: int) -> int:
    if isinstance(sqrt_price_x96, bool) or not isinstance(sqrt_price_x96, int):
        raise MathDomainError(f"sqrtPriceX96 must be an integer, got {sqrt_price_x96!r}")
    if sqrt_price_x96 < 0:
        raise MathDomainError(f"sqrtPriceX96 must be non-negative, got {sqrt_price_x96}")
    return sqrt_price_x96


def sqrt_price_x96_from_tick(tick: int) -> int:
    """
    Calculate sqrtPriceX96 at a tick.

    Exact port of the on-chain TickMath table: the ratio is built in Q128
    from per-bit factors, inverted for positive ticks and shifted to Q96
    rounding up.

    Raises:
        MathDomainError: If the tick is outside [MIN_TICK, MAX_TICK]
    """
    _check_tick(tick)
    abs_tick = abs(tick)

    ratio = 0xFFFCB933BD6FAD37AA2D162D1A594001 if abs_tick & 0x1 else 1 << 128
    for bit, factor in _TICK_FACTORS:
        if abs_tick & bit:
            ratio = (ratio * factor) >> 128

    if tick > 0:
        ratio = ((1 << 256) - 1) // ratio

    # Q128 -> Q96, rounding up
    return (ratio >> 32) + (1 if ratio % (1 << 32) else 0)


def tick_from_sqrt_price_x96(sqrt_price_x96: int) -> int:
    """
    Greatest tick whose sqrt ratio is <= sqrt_price_x96.

    A floating-point log gives the estimate, exact integer comparisons
    against the tick table settle the result.

    Raises:
        MathDomainError: If the value is outside [MIN_SQRT_RATIO, MAX_SQRT_RATIO)
    """
    _check_sqrt_price(sqrt_price_x96)
    if sqrt_price_x96 < MIN_SQRT_RATIO or sqrt_price_x96 >= MAX_SQRT_RATIO:
        raise MathDomainError(
            f"sqrtPriceX96 {sqrt_price_x96} outside [{MIN_SQRT_RATIO}, {MAX_SQRT_RATIO})"
        )

    estimate = math.floor(2 * (math.log(sqrt_price_x96) - _LOG_Q96) / _LOG_TICK_BASE)
    tick = max(MIN_TICK, min(MAX_TICK, estimate))

    while tick > MIN_TICK and sqrt_price_x96_from_tick(tick) > sqrt_price_x96:
        tick -= 1
    while tick < MAX_TICK and sqrt_price_x96_from_tick(tick + 1) <= sqrt_price_x96:
        tick += 1
    return tick


def price_from_sqrt_price_x96(sqrt_price_x96: int) -> float:
    """
    Decode a Q96 sqrt price into a raw price (token1 per token0).

    The square and the Q192 shift are exact integer operations; the only
    rounding is the correctly-rounded final int/int division.
    """
    _check_sqrt_price(sqrt_price_x96)
    return (sqrt_price_x96 * sqrt_price_x96) / Q192


def sqrt_price_x96_from_price(price: Number) -> int:
    """
    Encode a raw price as a Q96 sqrt price (floor rounded).

    Raises:
        MathDomainError: If the price is not finite and positive, or if the
            result falls outside the representable sqrt ratio range
    """
    value = _to_decimal(price)
    with localcontext() as ctx:
        ctx.prec = 80
        sqrt_price_x96 = int((value.sqrt() * Q96).to_integral_value(rounding=ROUND_FLOOR))

    if sqrt_price_x96 < MIN_SQRT_RATIO or sqrt_price_x96 >= MAX_SQRT_RATIO:
        raise MathDomainError(f"Price {price!r} is outside the representable range")
    return sqrt_price_x96


def tick_from_price(price: Number) -> int:
    """
    tick = floor(log(price) / log(1.0001)), clamped to the valid tick range.

    Raises:
        MathDomainError: If the price is not finite and positive
    """
    value = _to_decimal(price)
    with localcontext() as ctx:
        ctx.prec = 50
        tick = math.floor(value.ln() / Decimal("1.0001").ln())
    return max(MIN_TICK, min(MAX_TICK, tick))


def price_from_tick(tick: int) -> float:
    """Raw price at a tick: 1.0001^tick."""
    _check_tick(tick)
    return TICK_BASE**tick


def adjust_price_for_decimals(raw_price: float, decimals0: int, decimals1: int) -> float:
    """Raw smallest-unit price to human price: raw x 10^(decimals0 - decimals1)."""
    return raw_price * 10 ** (decimals0 - decimals1)


def raw_price_from_adjusted(price: float, decimals0: int, decimals1: int) -> float:
    """Inverse of adjust_price_for_decimals."""
    return price * 10 ** (decimals1 - decimals0)


def _check_spacing(tick_spacing: int) -> int:
    if isinstance(tick_spacing, bool) or not isinstance(tick_spacing, int) or tick_spacing <= 0:
        raise MathDomainError(f"Tick spacing must be a positive integer, got {tick_spacing!r}")
    return tick_spacing


def full_range_ticks(tick_spacing: int) -> Tuple[int, int]:
    """Lowest and highest ticks usable at a tick spacing."""
    _check_spacing(tick_spacing)
    return -(MAX_TICK // tick_spacing) * tick_spacing, (MAX_TICK // tick_spacing) * tick_spacing


def nearest_usable_tick(tick: int, tick_spacing: int) -> int:
    """
    Round a tick to the nearest multiple of the spacing (halves round up),
    kept within the usable tick range.
    """
    _check_spacing(tick_spacing)
    rounded = ((tick + tick_spacing // 2) // tick_spacing) * tick_spacing
    lowest, highest = full_range_ticks(tick_spacing)
    return max(lowest, min(highest, rounded))


def price_range_from_percentage(
    current_price: float, percentage: float, tick_spacing: int
) -> TickRange:
    """
    Tick-aligned range of +/- percentage around a raw price.

    The lower bound is current / (1 + pct/100) and the upper bound is
    current x (1 + pct/100).
    """
    if percentage <= 0:
        raise MathDomainError(f"Percentage must be positive, got {percentage}")
    multiplier = 1 + percentage / 100

    min_tick = nearest_usable_tick(tick_from_price(current_price / multiplier), tick_spacing)
    max_tick = nearest_usable_tick(tick_from_price(current_price * multiplier), tick_spacing)
    if min_tick == max_tick:
        max_tick = min(max_tick + tick_spacing, full_range_ticks(tick_spacing)[1])

    return TickRange(
        min_tick=min_tick,
        max_tick=max_tick,
        min_price=price_from_tick(min_tick),
        max_price=price_from_tick(max_tick),
    )


def is_valid_tick(tick: int) -> bool:
    return isinstance(tick, int) and not isinstance(tick, bool) and MIN_TICK <= tick <= MAX_TICK


def is_valid_tick_spacing(tick: int, tick_spacing: int) -> bool:
    return tick % _check_spacing(tick_spacing) == 0
