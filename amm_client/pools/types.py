"""
Pool identity and state snapshots.
"""

from dataclasses import dataclass
from typing import Any, Dict, Sequence

from ..math.tick_math import price_from_sqrt_price_x96
from ..types import Token


@dataclass(frozen=True)
class PoolKey:
    """
    Unordered token pair plus fee tier, normalized to lowercase and sorted
    so both orderings of a pair map to the same key.

    Attributes:
        token0: Lower of the two addresses (lowercase)
        token1: Higher of the two addresses (lowercase)
        fee: Fee tier
    """

    token0: str
    token1: str
    fee: int

    @classmethod
    def of(cls, token_a: str, token_b: str, fee: int) -> "PoolKey":
        a, b = token_a.lower(), token_b.lower()
        if int(a, 16) > int(b, 16):
            a, b = b, a
        return cls(token0=a, token1=b, fee=fee)

    def __str__(self) -> str:
        return f"{self.token0}-{self.token1}-{self.fee}"


@dataclass(frozen=True)
class Slot0:
    """Decoded pool slot0."""

    sqrt_price_x96: int
    tick: int
    observation_index: int
    observation_cardinality: int
    observation_cardinality_next: int
    fee_protocol: int
    unlocked: bool

    @classmethod
    def from_tuple(cls, values: Sequence[Any]) -> "Slot0":
        return cls(
            sqrt_price_x96=int(values[0]),
            tick=int(values[1]),
            observation_index=int(values[2]),
            observation_cardinality=int(values[3]),
            observation_cardinality_next=int(values[4]),
            fee_protocol=int(values[5]),
            unlocked=bool(values[6]),
        )

    @property
    def initialized(self) -> bool:
        return self.sqrt_price_x96 > 0


@dataclass
class PoolState:
    """
    Snapshot of a pool's on-chain state.

    Attributes:
        address: Pool contract address
        token0: Pool token0 (lower address)
        token1: Pool token1 (higher address)
        fee: Fee tier
        tick: Current tick
        sqrt_price_x96: Current Q96 sqrt price
        price: Human price of token0 in token1, decimals applied
        liquidity: In-range liquidity
        tick_spacing: Tick spacing reported by the pool
    """

    address: str
    token0: Token
    token1: Token
    fee: int
    tick: int
    sqrt_price_x96: int
    price: float
    liquidity: int
    tick_spacing: int

    @property
    def key(self) -> PoolKey:
        return PoolKey.of(self.token0.address, self.token1.address, self.fee)

    @property
    def raw_price(self) -> float:
        """token1 smallest units per token0 smallest unit."""
        return price_from_sqrt_price_x96(self.sqrt_price_x96)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view; wide integers are emitted as strings."""
        return {
            "address": self.address,
            "token0": {"address": self.token0.address, "symbol": self.token0.symbol, "decimals": self.token0.decimals},
            "token1": {"address": self.token1.address, "symbol": self.token1.symbol, "decimals": self.token1.decimals},
            "fee": self.fee,
            "tick": self.tick,
            "sqrt_price_x96": str(self.sqrt_price_x96),
            "price": self.price,
            "liquidity": str(self.liquidity),
            "tick_spacing": self.tick_spacing,
        }
