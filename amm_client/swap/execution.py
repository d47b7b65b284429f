"""
Slippage-bounded swap execution.

A swap is a sequence of separate transactions (optional wrap, optional
approval, the swap itself). Each step checks on-chain state first, so a
flow interrupted between steps can simply be run again.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence

from ..config.tokens import TokenRegistry, validate_address
from ..contracts.capabilities import ReadCapability
from ..contracts.transactions import TransactionSender, TxStep
from ..errors import ConfigError, TransactionError, ValidationError
from ..math.units import apply_slippage, format_units, parse_units
from ..types import ZERO_ADDRESS
from .quoting import QuoteEngine
from .types import SwapParams, SwapPlan

logger = logging.getLogger(__name__)

WRAP = "wrap"
UNWRAP = "unwrap"


class SwapRoute(ABC):
    """One contract path for submitting a swap."""

    name: str = "route"

    @property
    @abstractmethod
    def spender(self) -> str:
        """Contract that pulls the input token."""
        pass

    @abstractmethod
    async def submit(self, sender: TransactionSender, plan: SwapPlan) -> str:
        """Submit the swap and return the transaction hash."""
        pass


class ExactInputSingleRoute(SwapRoute):
    """exactInputSingle on the V3 swap router."""

    name = "exact_input_single"

    def __init__(self, swap_router: str):
        self.swap_router = swap_router

    @property
    def spender(self) -> str:
        return self.swap_router

    async def submit(self, sender: TransactionSender, plan: SwapPlan) -> str:
        params = (
            plan.token_in,
            plan.token_out,
            plan.fee,
            plan.recipient,
            plan.deadline,
            plan.amount_in,
            plan.amount_out_min,
            0,
        )
        return await sender.submit(TxStep.SWAP, self.swap_router, "exactInputSingle", [params])


class PathSwapRoute(SwapRoute):
    """swapExactTokensForTokens on the path-based router."""

    name = "swap_exact_tokens_for_tokens"

    def __init__(self, router: str):
        self.router = router

    @property
    def spender(self) -> str:
        return self.router

    async def submit(self, sender: TransactionSender, plan: SwapPlan) -> str:
        return await sender.submit(
            TxStep.SWAP,
            self.router,
            "swapExactTokensForTokens",
            [plan.amount_in, plan.amount_out_min, plan.path, plan.recipient, plan.deadline],
        )


class SwapExecutor:
    """
    Turns swap intents into transactions.

    Args:
        engine: Quote engine used for the fresh quote before each swap
        sender: Transaction sender (write capability + receipt waits)
        reader: Read capability for balances
        registry: Token list
        wrapped_native: Wrapped native token address
        routes: Swap routes in priority order
        default_slippage: Tolerance in percent when the caller gives none
        deadline_minutes: Deadline offset when the caller gives none
        clock: Wall clock for deadlines (seconds)
    """

    def __init__(
        self,
        engine: QuoteEngine,
        sender: Optional[TransactionSender],
        reader: ReadCapability,
        registry: TokenRegistry,
        wrapped_native: str,
        routes: Sequence[SwapRoute],
        default_slippage: float = 0.5,
        deadline_minutes: int = 20,
        clock: Callable[[], float] = time.time,
    ):
        if not routes:
            raise ValueError("At least one swap route is required")
        self.engine = engine
        self.sender = sender
        self.reader = reader
        self.registry = registry
        self.wrapped_native = wrapped_native
        self.routes = list(routes)
        self.default_slippage = default_slippage
        self.deadline_minutes = deadline_minutes
        self._clock = clock

    def _require_sender(self) -> TransactionSender:
        if self.sender is None:
            raise ConfigError("Swaps require a write capability")
        return self.sender

    def wrap_unwrap_operation(self, token_in: str, token_out: str) -> Optional[str]:
        """'wrap' for native -> wrapped, 'unwrap' for wrapped -> native, else None."""
        wrapped = self.wrapped_native.lower()
        if self.registry.is_native(token_in) and self.registry.resolve(token_out).lower() == wrapped:
            if not self.registry.is_native(token_out):
                return WRAP
        if self.registry.is_native(token_out) and self.registry.resolve(token_in).lower() == wrapped:
            if not self.registry.is_native(token_in):
                return UNWRAP
        return None

    def _deadline(self, minutes: Optional[int]) -> int:
        minutes = self.deadline_minutes if minutes is None else minutes
        return int(self._clock()) + minutes * 60

    async def execute_swap(self, params: SwapParams) -> str:
        """
        Execute an exact-input swap and wait for it to be mined.

        Returns:
            Swap transaction hash

        Raises:
            ValidationError: Bad inputs (before any transaction)
            QuoteError: No quote could be obtained
            TransactionError: A step failed, reverted or timed out
        """
        sender = self._require_sender()
        operation = self.wrap_unwrap_operation(params.token_in, params.token_out)
        if operation == WRAP:
            return await self.wrap_native(params.amount_in)
        if operation == UNWRAP:
            return await self.unwrap_native(params.amount_in)

        slippage = self.default_slippage if params.slippage is None else params.slippage
        quote = await self.engine.get_quote(
            params.token_in, params.token_out, params.amount_in, slippage=slippage, fee=params.fee
        )
        if quote.fee is None:
            raise ValidationError("Input and output resolve to the same token")

        token_in, token_out = self.engine.resolve_pair(params.token_in, params.token_out)
        amount_in = parse_units(params.amount_in, self.registry.decimals_of(token_in))
        recipient = validate_address(params.recipient or sender.account, "recipient")

        plan = SwapPlan(
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            amount_out_min=apply_slippage(quote.amount_out_raw, slippage),
            fee=quote.fee,
            recipient=recipient,
            deadline=self._deadline(params.deadline_minutes),
            path=[token_in, token_out],
        )
        logger.info(
            f"🔄 Swapping {params.amount_in} {params.token_in} -> {params.token_out} "
            f"(quote {quote.amount_out}, min {plan.amount_out_min} raw)"
        )

        if self.registry.is_native(params.token_in):
            await sender.wrap_native(self.wrapped_native, amount_in)

        tx_hash = await self._submit_first_working_route(plan)
        await sender.wait(TxStep.SWAP, tx_hash)
        return tx_hash

    async def _submit_first_working_route(self, plan: SwapPlan) -> str:
        errors: List[str] = []
        last_error: Optional[TransactionError] = None
        for route in self.routes:
            try:
                await self.sender.ensure_allowance(plan.token_in, route.spender, plan.amount_in)
                tx_hash = await route.submit(self.sender, plan)
            except TransactionError as e:
                logger.warning(f"⚠️ Swap route {route.name} failed: {e}")
                errors.append(f"{route.name}: {e}")
                last_error = e
                continue
            logger.info(f"📤 Swap submitted via {route.name}: {tx_hash}")
            return tx_hash

        raise TransactionError(TxStep.SWAP.value, "; ".join(errors)) from last_error

    async def get_token_balance(self, token: str, owner: Optional[str] = None) -> str:
        """Balance of a token (or the native asset) as a decimal string."""
        owner = validate_address(owner or self._require_sender().account, "owner")
        if self.registry.is_native(token):
            balance = await self.reader.get_balance(owner)
            return format_units(balance, self.registry.decimals_of(ZERO_ADDRESS))

        address = validate_address(self.registry.resolve(token), "token address")
        balance = await self.reader.read(address, "balanceOf", [owner])
        return format_units(int(balance), self.registry.decimals_of(address))

    async def wrap_native(self, amount: str) -> str:
        """Wrap native asset; returns the deposit transaction hash."""
        raw = parse_units(amount, self.registry.decimals_of(self.wrapped_native))
        if raw <= 0:
            raise ValidationError(f"Amount must be positive, got {amount!r}")
        return await self._require_sender().wrap_native(self.wrapped_native, raw)

    async def unwrap_native(self, amount: str) -> str:
        """Unwrap to native asset; returns the withdraw transaction hash."""
        raw = parse_units(amount, self.registry.decimals_of(self.wrapped_native))
        if raw <= 0:
            raise ValidationError(f"Amount must be positive, got {amount!r}")
        return await self._require_sender().unwrap_native(self.wrapped_native, raw)
