"""
Liquidity provisioning: pool status checks and minting new positions.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..config.tokens import TokenRegistry, validate_address
from ..contracts.transactions import TransactionSender, TxStep
from ..errors import ConfigError, ValidationError
from ..math.liquidity_math import amounts_for_liquidity, liquidity_for_amounts
from ..math.tick_math import full_range_ticks, is_valid_tick, is_valid_tick_spacing
from ..math.units import apply_slippage, parse_units
from ..pools.directory import PoolDirectory

logger = logging.getLogger(__name__)


@dataclass
class PoolInfo:
    """
    Pool status for a pair and fee tier.

    Attributes:
        exists: Whether the factory knows the pool
        initialized: Whether the pool has a starting price
        address: Pool address when it exists
        token0: Sorted token0 address
        token1: Sorted token1 address
        fee: Fee tier
        liquidity: In-range liquidity (0 when unknown)
        price: Human price of token0 in token1, when initialized
    """

    exists: bool
    initialized: bool
    address: Optional[str]
    token0: str
    token1: str
    fee: int
    liquidity: int = 0
    price: Optional[float] = None


@dataclass
class AddLiquidityParams:
    """
    Mint a new position.

    Attributes:
        token_a: First token symbol or address (native allowed)
        token_b: Second token symbol or address (native allowed)
        amount_a: Desired amount of token_a, decimal string
        amount_b: Desired amount of token_b, decimal string
        fee: Fee tier; None uses the configured default
        tick_lower: Lower tick; None together with tick_upper means full range
        tick_upper: Upper tick
        initial_price: Price of token_a in token_b used if the pool must be
            created or initialized; defaults to amount_b / amount_a
        slippage: Tolerance (percent) for the amount minimums
        recipient: Position owner; None means the connected account
        deadline_minutes: Deadline offset
    """

    token_a: str
    token_b: str
    amount_a: str
    amount_b: str
    fee: Optional[int] = None
    tick_lower: Optional[int] = None
    tick_upper: Optional[int] = None
    initial_price: Optional[float] = None
    slippage: Optional[float] = None
    recipient: Optional[str] = None
    deadline_minutes: Optional[int] = None


class LiquidityService:
    """
    Creates positions, creating and initializing the pool first when needed.

    Args:
        directory: Pool directory (also handles pool creation)
        sender: Transaction sender
        registry: Token list
        position_manager: Position manager contract address
        wrapped_native: Wrapped native token address
        default_fee: Fee tier when the caller gives none
        default_slippage: Tolerance in percent when the caller gives none
        deadline_minutes: Default deadline offset
        clock: Wall clock for deadlines (seconds)
    """

    def __init__(
        self,
        directory: PoolDirectory,
        sender: Optional[TransactionSender],
        registry: TokenRegistry,
        position_manager: str,
        wrapped_native: str,
        default_fee: int = 500,
        default_slippage: float = 0.5,
        deadline_minutes: int = 20,
        clock: Callable[[], float] = time.time,
    ):
        self.directory = directory
        self.sender = sender
        self.registry = registry
        self.position_manager = position_manager
        self.wrapped_native = wrapped_native
        self.default_fee = default_fee
        self.default_slippage = default_slippage
        self.deadline_minutes = deadline_minutes
        self._clock = clock

    def _deadline(self, minutes: Optional[int]) -> int:
        minutes = self.deadline_minutes if minutes is None else minutes
        return int(self._clock()) + minutes * 60

    async def get_pool_info(self, token_a: str, token_b: str, fee: Optional[int] = None) -> PoolInfo:
        fee = self.default_fee if fee is None else fee
        address_a = validate_address(self.registry.resolve(token_a), "token address")
        address_b = validate_address(self.registry.resolve(token_b), "token address")
        token0, token1 = sorted((address_a, address_b), key=lambda a: int(a, 16))

        address = await self.directory.get_pool_address(token0, token1, fee)
        if address is None:
            return PoolInfo(exists=False, initialized=False, address=None, token0=token0, token1=token1, fee=fee)

        state = await self.directory.get_pool_details(token0, token1, fee)
        if state is None or state.sqrt_price_x96 == 0:
            return PoolInfo(exists=True, initialized=False, address=address, token0=token0, token1=token1, fee=fee)

        return PoolInfo(
            exists=True,
            initialized=True,
            address=address,
            token0=token0,
            token1=token1,
            fee=fee,
            liquidity=state.liquidity,
            price=state.price,
        )

    def _ticks(self, params: AddLiquidityParams, tick_spacing: int):
        if params.tick_lower is None and params.tick_upper is None:
            return full_range_ticks(tick_spacing)
        lower, upper = params.tick_lower, params.tick_upper
        if lower is None or upper is None:
            raise ValidationError("Provide both tick_lower and tick_upper, or neither")
        if not is_valid_tick(lower) or not is_valid_tick(upper) or lower >= upper:
            raise ValidationError(f"Invalid tick range [{lower}, {upper})")
        if not is_valid_tick_spacing(lower, tick_spacing) or not is_valid_tick_spacing(upper, tick_spacing):
            raise ValidationError(f"Ticks must be multiples of the tick spacing {tick_spacing}")
        return lower, upper

    async def add_liquidity(self, params: AddLiquidityParams) -> str:
        """
        Mint a position, creating or initializing the pool if needed.

        Native-asset inputs are wrapped first; each token is approved for
        the position manager only when its allowance is too low.

        Returns:
            The mint transaction hash
        """
        if self.sender is None:
            raise ConfigError("Adding liquidity requires a write capability")
        sender = self.sender

        fee = self.default_fee if params.fee is None else params.fee
        tier = self.registry.get_fee_tier(fee)
        slippage = self.default_slippage if params.slippage is None else params.slippage

        address_a = validate_address(self.registry.resolve(params.token_a), "token address")
        address_b = validate_address(self.registry.resolve(params.token_b), "token address")
        if address_a.lower() == address_b.lower():
            raise ValidationError("Cannot add liquidity for a token paired with itself")
        native_a = self.registry.is_native(params.token_a)
        native_b = self.registry.is_native(params.token_b)
        amount_a = parse_units(params.amount_a, self.registry.decimals_of(address_a))
        amount_b = parse_units(params.amount_b, self.registry.decimals_of(address_b))
        if amount_a == 0 and amount_b == 0:
            raise ValidationError("At least one amount must be positive")

        initial_price = params.initial_price
        if initial_price is None and amount_a > 0 and amount_b > 0:
            initial_price = float(params.amount_b) / float(params.amount_a)

        tick_lower, tick_upper = self._ticks(params, tier.tick_spacing)
        recipient = validate_address(params.recipient or sender.account, "recipient")

        # Canonical order: token0 has the lower address
        if int(address_a, 16) > int(address_b, 16):
            address_a, address_b = address_b, address_a
            amount_a, amount_b = amount_b, amount_a
            native_a, native_b = native_b, native_a
            if initial_price:
                initial_price = 1 / initial_price

        info = await self.get_pool_info(address_a, address_b, fee)
        if not info.initialized:
            if not initial_price:
                raise ValidationError("An initial price is required to create or initialize the pool")
            await self.directory.create_pool_if_needed(address_a, address_b, fee, initial_price)

        amount0_min, amount1_min = await self._minimums(
            address_a, address_b, fee, tick_lower, tick_upper, amount_a, amount_b, slippage
        )

        if native_a:
            await sender.wrap_native(self.wrapped_native, amount_a)
        if native_b:
            await sender.wrap_native(self.wrapped_native, amount_b)

        await sender.ensure_allowance(address_a, self.position_manager, amount_a)
        await sender.ensure_allowance(address_b, self.position_manager, amount_b)

        mint = (
            address_a,
            address_b,
            fee,
            tick_lower,
            tick_upper,
            amount_a,
            amount_b,
            amount0_min,
            amount1_min,
            recipient,
            self._deadline(params.deadline_minutes),
        )
        tx_hash = await sender.send(TxStep.MINT, self.position_manager, "mint", [mint])
        self.directory.invalidate(address_a, address_b, fee)
        logger.info(f"✅ Minted position in {address_a}/{address_b} fee {fee}: {tx_hash}")
        return tx_hash

    async def _minimums(
        self,
        token0: str,
        token1: str,
        fee: int,
        tick_lower: int,
        tick_upper: int,
        amount0: int,
        amount1: int,
        slippage: float,
    ):
        """
        Amount minimums from the expected deposit at the current price.

        Falls back to (0, 0) when the pool state is unavailable.
        """
        self.directory.invalidate(token0, token1, fee)
        state = await self.directory.get_pool_details(token0, token1, fee)
        if state is None or state.sqrt_price_x96 == 0:
            logger.warning("⚠️ Pool state unavailable, minting without amount minimums")
            return 0, 0

        liquidity = liquidity_for_amounts(state.sqrt_price_x96, tick_lower, tick_upper, amount0, amount1)
        expected0, expected1 = amounts_for_liquidity(liquidity, state.sqrt_price_x96, tick_lower, tick_upper)
        return apply_slippage(expected0, slippage), apply_slippage(expected1, slippage)
