"""
Position reads and management through the position manager contract.
"""

import logging
import time
from typing import Callable, List, Optional

from ..config.tokens import TokenRegistry, validate_address
from ..contracts.capabilities import ReadCapability
from ..contracts.functions import MAX_UINT128
from ..contracts.transactions import TransactionSender, TxStep
from ..errors import ConfigError, ContractCallError, RpcError, ValidationError
from ..math.units import parse_units
from ..pools.directory import PoolDirectory
from .economics import derive
from .types import IncreaseLiquidityParams, Position, PositionDetails

logger = logging.getLogger(__name__)


class PositionService:
    """
    Reads positions and submits liquidity changes for them.

    Args:
        reader: Read capability
        registry: Token list
        directory: Pool directory for pool snapshots
        position_manager: Position manager contract address
        sender: Transaction sender; only needed for state-changing calls
        deadline_minutes: Default deadline offset
        clock: Wall clock for deadlines (seconds)
    """

    def __init__(
        self,
        reader: ReadCapability,
        registry: TokenRegistry,
        directory: PoolDirectory,
        position_manager: str,
        sender: Optional[TransactionSender] = None,
        deadline_minutes: int = 20,
        clock: Callable[[], float] = time.time,
    ):
        self.reader = reader
        self.registry = registry
        self.directory = directory
        self.position_manager = position_manager
        self.sender = sender
        self.deadline_minutes = deadline_minutes
        self._clock = clock

    def _require_sender(self) -> TransactionSender:
        if self.sender is None:
            raise ConfigError("Position management requires a write capability")
        return self.sender

    def _deadline(self, minutes: Optional[int]) -> int:
        minutes = self.deadline_minutes if minutes is None else minutes
        return int(self._clock()) + minutes * 60

    async def get_position(self, token_id: int) -> Position:
        values = await self.reader.read(self.position_manager, "positions", [int(token_id)])
        return Position.from_tuple(token_id, values)

    async def get_positions(self, owner: str) -> List[Position]:
        """
        All positions owned by an address.

        A position whose record cannot be read is skipped with a warning.
        """
        owner = validate_address(owner, "owner")
        count = await self.reader.read(self.position_manager, "balanceOf", [owner])

        positions = []
        for index in range(int(count)):
            try:
                token_id = await self.reader.read(
                    self.position_manager, "tokenOfOwnerByIndex", [owner, index]
                )
                positions.append(await self.get_position(token_id))
            except (ContractCallError, RpcError) as e:
                logger.warning(f"⚠️ Could not read position #{index} of {owner}: {e}")

        logger.info(f"📊 Found {len(positions)} positions for {owner}")
        return positions

    async def get_position_details(
        self, token_id: int, volume_24h: Optional[float] = None
    ) -> Optional[PositionDetails]:
        """Position with derived economics, or None when its pool state is unavailable."""
        position = await self.get_position(token_id)
        pool = await self.directory.get_pool_details(position.token0, position.token1, position.fee)
        if pool is None:
            logger.warning(f"⚠️ No pool state for position {token_id}")
            return None
        return derive(position, pool, volume_24h)

    async def increase_liquidity(self, params: IncreaseLiquidityParams) -> str:
        """
        Add liquidity to an existing position; approvals are submitted only
        when the current allowance is too low.
        """
        sender = self._require_sender()
        position = await self.get_position(params.token_id)

        decimals0 = self.registry.decimals_of(position.token0)
        decimals1 = self.registry.decimals_of(position.token1)
        amount0 = parse_units(params.amount0_desired, decimals0)
        amount1 = parse_units(params.amount1_desired, decimals1)
        amount0_min = parse_units(params.amount0_min, decimals0)
        amount1_min = parse_units(params.amount1_min, decimals1)
        if amount0 == 0 and amount1 == 0:
            raise ValidationError("At least one amount must be positive")
        if amount0_min > amount0 or amount1_min > amount1:
            raise ValidationError("Minimum amounts cannot exceed desired amounts")

        await sender.ensure_allowance(position.token0, self.position_manager, amount0)
        await sender.ensure_allowance(position.token1, self.position_manager, amount1)

        increase = (
            position.token_id,
            amount0,
            amount1,
            amount0_min,
            amount1_min,
            self._deadline(params.deadline_minutes),
        )
        tx_hash = await sender.send(
            TxStep.INCREASE_LIQUIDITY, self.position_manager, "increaseLiquidity", [increase]
        )
        self.directory.invalidate(position.token0, position.token1, position.fee)
        return tx_hash

    async def remove_liquidity(
        self,
        token_id: int,
        liquidity: Optional[int] = None,
        amount0_min: str = "0",
        amount1_min: str = "0",
        recipient: Optional[str] = None,
        deadline_minutes: Optional[int] = None,
    ) -> str:
        """
        Decrease liquidity, then collect everything owed.

        Args:
            token_id: Position NFT id
            liquidity: Liquidity to remove; None removes all of it

        Returns:
            The collect transaction hash
        """
        sender = self._require_sender()
        position = await self.get_position(token_id)
        liquidity = position.liquidity if liquidity is None else int(liquidity)
        if liquidity <= 0 or liquidity > position.liquidity:
            raise ValidationError(
                f"Liquidity to remove must be in (0, {position.liquidity}], got {liquidity}"
            )

        decrease = (
            position.token_id,
            liquidity,
            parse_units(amount0_min, self.registry.decimals_of(position.token0)),
            parse_units(amount1_min, self.registry.decimals_of(position.token1)),
            self._deadline(deadline_minutes),
        )
        await sender.send(TxStep.DECREASE_LIQUIDITY, self.position_manager, "decreaseLiquidity", [decrease])
        tx_hash = await self.collect_fees(token_id, recipient)
        self.directory.invalidate(position.token0, position.token1, position.fee)
        return tx_hash

    async def collect_fees(
        self,
        token_id: int,
        recipient: Optional[str] = None,
        amount0_max: int = MAX_UINT128,
        amount1_max: int = MAX_UINT128,
    ) -> str:
        """Collect owed tokens (all of them by default)."""
        sender = self._require_sender()
        recipient = validate_address(recipient or sender.account, "recipient")
        collect = (int(token_id), recipient, amount0_max, amount1_max)
        return await sender.send(TxStep.COLLECT, self.position_manager, "collect", [collect])

    async def burn_position(self, token_id: int) -> str:
        """
        Burn an emptied position NFT.

        Raises:
            ValidationError: If the position still holds liquidity or owed tokens
        """
        sender = self._require_sender()
        position = await self.get_position(token_id)
        if position.liquidity > 0 or position.tokens_owed0 > 0 or position.tokens_owed1 > 0:
            raise ValidationError(
                f"Position {token_id} still has liquidity or uncollected tokens"
            )
        return await sender.send(TxStep.BURN, self.position_manager, "burn", [int(token_id)])
