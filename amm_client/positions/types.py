"""
Liquidity position records and derived views.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from ..types import Token, ZERO_ADDRESS


@dataclass(frozen=True)
class Position:
    """
    Position record as stored by the position manager.

    Attributes:
        token_id: Position NFT id
        token0: Pool token0 address
        token1: Pool token1 address
        fee: Pool fee tier
        tick_lower: Lower tick of the range (inclusive)
        tick_upper: Upper tick of the range (exclusive)
        liquidity: Position liquidity
        tokens_owed0: Uncollected token0, raw units
        tokens_owed1: Uncollected token1, raw units
    """

    token_id: int
    token0: str
    token1: str
    fee: int
    tick_lower: int
    tick_upper: int
    liquidity: int
    tokens_owed0: int = 0
    tokens_owed1: int = 0
    nonce: int = 0
    operator: str = ZERO_ADDRESS

    @classmethod
    def from_tuple(cls, token_id: int, values: Sequence[Any]) -> "Position":
        """Decode the 12-field positions() return value."""
        (
            nonce,
            operator,
            token0,
            token1,
            fee,
            tick_lower,
            tick_upper,
            liquidity,
            _fee_growth_inside0,
            _fee_growth_inside1,
            tokens_owed0,
            tokens_owed1,
        ) = values
        return cls(
            token_id=int(token_id),
            token0=token0,
            token1=token1,
            fee=int(fee),
            tick_lower=int(tick_lower),
            tick_upper=int(tick_upper),
            liquidity=int(liquidity),
            tokens_owed0=int(tokens_owed0),
            tokens_owed1=int(tokens_owed1),
            nonce=int(nonce),
            operator=operator,
        )


@dataclass(frozen=True)
class PositionEstimates:
    """
    Heuristic economics for display only. Neither value is read from chain.

    Attributes:
        estimated_apr: Rough annualized fee yield in percent, capped at 1000
        share_of_pool: Position liquidity over in-range pool liquidity, percent
    """

    estimated_apr: float
    share_of_pool: float
    is_heuristic: bool = True


@dataclass
class PositionDetails:
    """
    Position plus values derived from the current pool state.

    Attributes:
        position: Raw position record
        token0: Token0 display record
        token1: Token1 display record
        pool_address: Pool the position belongs to
        in_range: Whether the current tick is inside [tick_lower, tick_upper)
        amount0: Token0 held at the current price, decimal string
        amount1: Token1 held at the current price, decimal string
        price_range_lower: Human price at tick_lower
        price_range_upper: Human price at tick_upper
        current_price: Current human pool price
        price_bar_position: Where the current price sits in the range, 0-100
        has_uncollected_fees: Whether either owed amount is positive
        fees_owed0: Uncollected token0, decimal string
        fees_owed1: Uncollected token1, decimal string
        estimates: Heuristic APR and share of pool
    """

    position: Position
    token0: Token
    token1: Token
    pool_address: str
    in_range: bool
    amount0: str
    amount1: str
    price_range_lower: float
    price_range_upper: float
    current_price: float
    price_bar_position: float
    has_uncollected_fees: bool
    fees_owed0: str
    fees_owed1: str
    estimates: PositionEstimates = field(default_factory=lambda: PositionEstimates(0.0, 0.0))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token_id": self.position.token_id,
            "token0": self.token0.symbol,
            "token1": self.token1.symbol,
            "fee": self.position.fee,
            "tick_lower": self.position.tick_lower,
            "tick_upper": self.position.tick_upper,
            "liquidity": str(self.position.liquidity),
            "pool_address": self.pool_address,
            "in_range": self.in_range,
            "amount0": self.amount0,
            "amount1": self.amount1,
            "price_range_lower": self.price_range_lower,
            "price_range_upper": self.price_range_upper,
            "current_price": self.current_price,
            "price_bar_position": self.price_bar_position,
            "has_uncollected_fees": self.has_uncollected_fees,
            "fees_owed0": self.fees_owed0,
            "fees_owed1": self.fees_owed1,
            "estimates": {
                "estimated_apr": self.estimates.estimated_apr,
                "share_of_pool": self.estimates.share_of_pool,
                "is_heuristic": self.estimates.is_heuristic,
            },
        }


@dataclass
class IncreaseLiquidityParams:
    """
    Add tokens to an existing position.

    Attributes:
        token_id: Position NFT id
        amount0_desired: Token0 amount, decimal string
        amount1_desired: Token1 amount, decimal string
        amount0_min: Minimum token0 actually added, decimal string
        amount1_min: Minimum token1 actually added, decimal string
        deadline_minutes: Deadline offset; None uses the configured default
    """

    token_id: int
    amount0_desired: str
    amount1_desired: str
    amount0_min: str = "0"
    amount1_min: str = "0"
    deadline_minutes: Optional[int] = None
