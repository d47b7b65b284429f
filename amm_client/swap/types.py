"""
Swap quote and execution data types.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class SwapQuote:
    """
    Quote for an exact-input swap.

    Attributes:
        amount_out: Expected output, decimal string
        price_impact: Price impact in percent
        minimum_received: Output floor under the slippage tolerance, decimal string
        amount_out_raw: Expected output in smallest units
        strategy: Name of the quoting strategy that answered
        price_impact_is_estimate: True when price_impact is a placeholder
            rather than derived from the post-swap price
        fee: Fee tier quoted against
    """

    amount_out: str
    price_impact: float
    minimum_received: str
    amount_out_raw: int = 0
    strategy: str = ""
    price_impact_is_estimate: bool = False
    fee: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount_out": self.amount_out,
            "price_impact": self.price_impact,
            "price_impact_is_estimate": self.price_impact_is_estimate,
            "minimum_received": self.minimum_received,
            "amount_out_raw": str(self.amount_out_raw),
            "strategy": self.strategy,
            "fee": self.fee,
        }


@dataclass(frozen=True)
class QuoteRequest:
    """Resolved quote inputs handed to strategies."""

    token_in: str
    token_out: str
    amount_in: int
    fee: int


@dataclass
class QuoteResult:
    """
    Tagged outcome of one quoting strategy.

    Attributes:
        strategy: Strategy name
        success: Whether the strategy produced a quote
        amount_out: Output in smallest units (success only)
        sqrt_price_after: Pool sqrt price after the swap, if the strategy reports it
        error: Failure description (failure only)
    """

    strategy: str
    success: bool
    amount_out: int = 0
    sqrt_price_after: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, strategy: str, amount_out: int, sqrt_price_after: Optional[int] = None) -> "QuoteResult":
        return cls(strategy=strategy, success=True, amount_out=amount_out, sqrt_price_after=sqrt_price_after)

    @classmethod
    def failed(cls, strategy: str, error: str) -> "QuoteResult":
        return cls(strategy=strategy, success=False, error=error)


@dataclass
class SwapParams:
    """
    Exact-input swap request.

    Attributes:
        token_in: Input token symbol or address (native allowed)
        token_out: Output token symbol or address
        amount_in: Input amount as a decimal string
        slippage: Tolerance in percent; None uses the configured default
        deadline_minutes: Deadline offset; None uses the configured default
        recipient: Output recipient; None sends to the connected account
        fee: Fee tier; None uses the configured default
    """

    token_in: str
    token_out: str
    amount_in: str
    slippage: Optional[float] = None
    deadline_minutes: Optional[int] = None
    recipient: Optional[str] = None
    fee: Optional[int] = None


@dataclass(frozen=True)
class SwapPlan:
    """Execution parameters shared by all swap routes."""

    token_in: str
    token_out: str
    amount_in: int
    amount_out_min: int
    fee: int
    recipient: str
    deadline: int
    path: List[str]
