"""
Liquidity positions: records, derived economics and management.
"""

from .economics import (
    derive,
    estimate_apr,
    has_uncollected_fees,
    is_in_range,
    price_bar_position,
    share_of_pool,
)
from .service import PositionService
from .types import IncreaseLiquidityParams, Position, PositionDetails, PositionEstimates

__all__ = [
    "derive",
    "estimate_apr",
    "has_uncollected_fees",
    "is_in_range",
    "price_bar_position",
    "share_of_pool",
    "PositionService",
    "IncreaseLiquidityParams",
    "Position",
    "PositionDetails",
    "PositionEstimates",
]
