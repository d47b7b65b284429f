"""
Swap quoting and execution.
"""

from .execution import ExactInputSingleRoute, PathSwapRoute, SwapExecutor, SwapRoute
from .quoting import (
    PLACEHOLDER_PRICE_IMPACT,
    QuoteEngine,
    QuoteStrategy,
    QuoterV2Strategy,
    RouterPathStrategy,
    price_impact_percent,
)
from .types import QuoteRequest, QuoteResult, SwapParams, SwapPlan, SwapQuote

__all__ = [
    "QuoteEngine",
    "QuoteStrategy",
    "QuoterV2Strategy",
    "RouterPathStrategy",
    "PLACEHOLDER_PRICE_IMPACT",
    "price_impact_percent",
    "SwapExecutor",
    "SwapRoute",
    "ExactInputSingleRoute",
    "PathSwapRoute",
    "QuoteRequest",
    "QuoteResult",
    "SwapParams",
    "SwapPlan",
    "SwapQuote",
]
