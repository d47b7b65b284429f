"""
Swap quoting as an ordered list of strategies.

Strategies return tagged QuoteResult values instead of raising; the engine
walks the list and takes the first success. Which strategies run, and in
what order, is plain data passed to QuoteEngine.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..config.tokens import TokenRegistry, validate_address
from ..contracts.capabilities import ReadCapability
from ..errors import QuoteError, ValidationError
from ..math.tick_math import price_from_sqrt_price_x96
from ..math.units import apply_slippage, format_units, parse_units
from .types import QuoteRequest, QuoteResult, SwapQuote

logger = logging.getLogger(__name__)

# Reported when the quote carries no post-swap price to measure against
PLACEHOLDER_PRICE_IMPACT = 0.1


class QuoteStrategy(ABC):
    """One way of pricing an exact-input swap."""

    name: str = "strategy"

    @abstractmethod
    async def quote(self, request: QuoteRequest) -> QuoteResult:
        """Price the request; failures are returned, not raised."""
        pass


class QuoterV2Strategy(QuoteStrategy):
    """Single-hop quote from the QuoterV2 contract at the request's fee tier."""

    name = "quoter_v2"

    def __init__(self, reader: ReadCapability, quoter: str):
        self.reader = reader
        self.quoter = quoter

    async def quote(self, request: QuoteRequest) -> QuoteResult:
        params = (request.token_in, request.token_out, request.amount_in, request.fee, 0)
        try:
            amount_out, sqrt_price_after, _ticks_crossed, _gas = await self.reader.read(
                self.quoter, "quoteExactInputSingle", [params]
            )
        except Exception as e:
            return QuoteResult.failed(self.name, str(e))
        return QuoteResult.ok(self.name, int(amount_out), int(sqrt_price_after))


class RouterPathStrategy(QuoteStrategy):
    """
    getAmountsOut on the path-based router.

    Tries the direct path first, then a two-hop path through `via` when
    one is configured.
    """

    name = "router_path"

    def __init__(self, reader: ReadCapability, router: str, via: Optional[str] = None):
        self.reader = reader
        self.router = router
        self.via = via

    def paths(self, request: QuoteRequest) -> List[List[str]]:
        paths = [[request.token_in, request.token_out]]
        if self.via and self.via.lower() not in (request.token_in.lower(), request.token_out.lower()):
            paths.append([request.token_in, self.via, request.token_out])
        return paths

    async def quote(self, request: QuoteRequest) -> QuoteResult:
        errors = []
        for path in self.paths(request):
            try:
                amounts = await self.reader.read(self.router, "getAmountsOut", [request.amount_in, path])
            except Exception as e:
                errors.append(f"{len(path) - 1}-hop: {e}")
                continue
            if amounts and amounts[-1] > 0:
                return QuoteResult.ok(self.name, int(amounts[-1]))
            errors.append(f"{len(path) - 1}-hop: no output")
        return QuoteResult.failed(self.name, "; ".join(errors))


def price_impact_percent(sqrt_price_before: int, sqrt_price_after: int) -> float:
    """Relative move of the pool price caused by the swap, in percent."""
    before = price_from_sqrt_price_x96(sqrt_price_before)
    after = price_from_sqrt_price_x96(sqrt_price_after)
    return abs(after - before) / before * 100


class QuoteEngine:
    """
    Produces SwapQuote values for trade intents.

    Args:
        registry: Token list used for symbol, native and decimals resolution
        strategies: Quoting strategies in priority order
        directory: Pool directory for measuring price impact (optional)
        default_fee: Fee tier quoted when the caller gives none
        default_slippage: Slippage tolerance (percent) when the caller gives none
    """

    def __init__(
        self,
        registry: TokenRegistry,
        strategies: Sequence[QuoteStrategy],
        directory=None,
        default_fee: int = 500,
        default_slippage: float = 0.5,
    ):
        if not strategies:
            raise ValueError("At least one quoting strategy is required")
        self.registry = registry
        self.strategies = list(strategies)
        self.directory = directory
        self.default_fee = default_fee
        self.default_slippage = default_slippage

    def resolve_pair(self, token_in: str, token_out: str):
        return self.registry.resolve(token_in), self.registry.resolve(token_out)

    async def get_quote(
        self,
        token_in: str,
        token_out: str,
        amount_in: str,
        slippage: Optional[float] = None,
        fee: Optional[int] = None,
    ) -> SwapQuote:
        """
        Quote an exact-input swap.

        Raises:
            ValidationError: Malformed address, amount or fee tier
            QuoteError: Every strategy failed
        """
        address_in, address_out = self.resolve_pair(token_in, token_out)
        slippage = self.default_slippage if slippage is None else slippage
        fee = self.default_fee if fee is None else fee

        if address_in.lower() == address_out.lower():
            return SwapQuote(
                amount_out=amount_in,
                price_impact=0.0,
                minimum_received=amount_in,
                amount_out_raw=parse_units(amount_in, self.registry.decimals_of(address_in)),
                strategy="identity",
                fee=None,
            )

        validate_address(address_in, "tokenIn address")
        validate_address(address_out, "tokenOut address")
        self.registry.get_fee_tier(fee)

        amount_in_raw = parse_units(amount_in, self.registry.decimals_of(address_in))
        if amount_in_raw <= 0:
            raise ValidationError(f"Amount must be positive, got {amount_in!r}")

        request = QuoteRequest(token_in=address_in, token_out=address_out, amount_in=amount_in_raw, fee=fee)
        failures: List[QuoteResult] = []
        for strategy in self.strategies:
            result = await strategy.quote(request)
            if result.success:
                break
            logger.warning(f"⚠️ {result.strategy} quote failed: {result.error}")
            failures.append(result)
        else:
            summary = "; ".join(f"{r.strategy}: {r.error}" for r in failures)
            raise QuoteError(f"All quoting strategies failed ({summary})", failures)

        decimals_out = self.registry.decimals_of(address_out)
        impact, is_estimate = await self._price_impact(request, result)
        return SwapQuote(
            amount_out=format_units(result.amount_out, decimals_out),
            price_impact=impact,
            minimum_received=format_units(apply_slippage(result.amount_out, slippage), decimals_out),
            amount_out_raw=result.amount_out,
            strategy=result.strategy,
            price_impact_is_estimate=is_estimate,
            fee=fee,
        )

    async def _price_impact(self, request: QuoteRequest, result: QuoteResult):
        """(impact percent, is_estimate) for a successful quote."""
        if result.sqrt_price_after and self.directory is not None:
            pool = await self.directory.get_pool_details(request.token_in, request.token_out, request.fee)
            if pool is not None and pool.sqrt_price_x96 > 0:
                return price_impact_percent(pool.sqrt_price_x96, result.sqrt_price_after), False
        return PLACEHOLDER_PRICE_IMPACT, True
