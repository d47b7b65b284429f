"""
Derived position economics.

Pure functions over a position record and a pool snapshot; nothing here
touches the network. APR and share of pool are rough heuristics and are
only exposed through PositionEstimates.
"""

from typing import Optional

from ..errors import ValidationError
from ..math.liquidity_math import amounts_for_liquidity
from ..math.tick_math import adjust_price_for_decimals, price_from_tick
from ..math.units import format_units
from ..pools.types import PoolState
from .types import Position, PositionDetails, PositionEstimates

MAX_ESTIMATED_APR = 1000.0


def is_in_range(current_tick: int, tick_lower: int, tick_upper: int) -> bool:
    """Lower bound inclusive, upper bound exclusive."""
    return tick_lower <= current_tick < tick_upper


def price_bar_position(
    current_tick: int,
    tick_lower: int,
    tick_upper: int,
    current_price: float,
    price_lower: float,
    price_upper: float,
) -> float:
    """
    Position of the current price within the range, 0-100.

    Out of range the bar pins to 0 (below) or 100 (above).
    """
    if current_tick < tick_lower:
        return 0.0
    if current_tick >= tick_upper:
        return 100.0
    width = price_upper - price_lower
    if width <= 0:
        return 0.0
    return max(0.0, min(100.0, (current_price - price_lower) / width * 100))


def has_uncollected_fees(position: Position) -> bool:
    return position.tokens_owed0 > 0 or position.tokens_owed1 > 0


def share_of_pool(position_liquidity: int, pool_liquidity: int, in_range: bool) -> float:
    """
    Position liquidity as a percentage of the pool's in-range liquidity.

    Out-of-range positions contribute nothing to in-range liquidity, so
    their share is 0.
    """
    if not in_range or pool_liquidity <= 0 or position_liquidity <= 0:
        return 0.0
    return min(100.0, position_liquidity / pool_liquidity * 100)


def estimate_apr(
    fee: int,
    share_percent: float,
    position_value: float,
    volume_24h: Optional[float] = None,
) -> float:
    """
    Rough fee APR in percent.

    Assumes the position earns its share of a day's fees
    (volume x fee rate) every day of the year. Volume and position value
    must be in the same unit (token1). Capped to [0, 1000].
    """
    if not volume_24h or volume_24h <= 0 or position_value <= 0 or share_percent <= 0:
        return 0.0
    daily_fees = volume_24h * fee / 1_000_000
    yearly_position_fees = daily_fees * share_percent / 100 * 365
    apr = yearly_position_fees / position_value * 100
    return max(0.0, min(apr, MAX_ESTIMATED_APR))


def derive(position: Position, pool: PoolState, volume_24h: Optional[float] = None) -> PositionDetails:
    """
    Combine a position record with its pool snapshot.

    Args:
        position: Position record
        pool: State of the position's pool
        volume_24h: 24h pool volume in token1 units, if known

    Raises:
        ValidationError: If the pool is not the position's pool
    """
    if (
        position.token0.lower() != pool.token0.address.lower()
        or position.token1.lower() != pool.token1.address.lower()
        or position.fee != pool.fee
    ):
        raise ValidationError(
            f"Pool {pool.address} does not match position {position.token_id}"
        )

    decimals0 = pool.token0.decimals
    decimals1 = pool.token1.decimals
    in_range = is_in_range(pool.tick, position.tick_lower, position.tick_upper)

    raw0, raw1 = amounts_for_liquidity(
        position.liquidity, pool.sqrt_price_x96, position.tick_lower, position.tick_upper
    )
    price_lower = adjust_price_for_decimals(price_from_tick(position.tick_lower), decimals0, decimals1)
    price_upper = adjust_price_for_decimals(price_from_tick(position.tick_upper), decimals0, decimals1)

    share = share_of_pool(position.liquidity, pool.liquidity, in_range)
    position_value = raw0 / 10**decimals0 * pool.price + raw1 / 10**decimals1

    return PositionDetails(
        position=position,
        token0=pool.token0,
        token1=pool.token1,
        pool_address=pool.address,
        in_range=in_range,
        amount0=format_units(raw0, decimals0),
        amount1=format_units(raw1, decimals1),
        price_range_lower=price_lower,
        price_range_upper=price_upper,
        current_price=pool.price,
        price_bar_position=price_bar_position(
            pool.tick, position.tick_lower, position.tick_upper, pool.price, price_lower, price_upper
        ),
        has_uncollected_fees=has_uncollected_fees(position),
        fees_owed0=format_units(position.tokens_owed0, decimals0),
        fees_owed1=format_units(position.tokens_owed1, decimals1),
        estimates=PositionEstimates(
            estimated_apr=estimate_apr(pool.fee, share, position_value, volume_24h),
            share_of_pool=share,
        ),
    )
