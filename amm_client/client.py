"""
Wiring of the client services.

AmmClient builds every service from configuration plus injected read and
write capabilities. Nothing here is global; tests and applications build
as many clients as they need.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional

from .batchers.base import BatchConfig
from .config.chains import ChainConfig
from .config.contracts import ContractAddresses
from .config.manager import ConfigManager
from .config.tokens import TokenRegistry
from .contracts.capabilities import ReadCapability, WriteCapability
from .contracts.transactions import TransactionSender
from .contracts.web3_client import Web3ReadClient, Web3WriteClient, build_web3
from .liquidity.service import LiquidityService
from .pools.cache import PoolStateCache
from .pools.directory import PoolDirectory
from .positions.service import PositionService
from .swap.execution import ExactInputSingleRoute, PathSwapRoute, SwapExecutor
from .swap.quoting import QuoteEngine, QuoterV2Strategy, RouterPathStrategy

logger = logging.getLogger(__name__)


class AmmClient:
    """
    Entry point bundling the pool directory, quoting, swaps, positions and
    liquidity services.

    Attributes:
        pools: PoolDirectory
        quotes: QuoteEngine
        swaps: SwapExecutor
        positions: PositionService
        liquidity: LiquidityService
    """

    def __init__(
        self,
        reader: ReadCapability,
        registry: TokenRegistry,
        addresses: ContractAddresses,
        settings: Optional[ChainConfig] = None,
        writer: Optional[WriteCapability] = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        settings = settings or ChainConfig()
        self.reader = reader
        self.writer = writer
        self.registry = registry
        self.addresses = addresses
        self.settings = settings
        # Web3 handle owned by this client (set by from_config), closed by disconnect
        self._web3 = None

        self.sender = (
            TransactionSender(reader, writer, receipt_timeout=settings.TX_RECEIPT_TIMEOUT)
            if writer is not None
            else None
        )

        self.pools = PoolDirectory(
            reader,
            registry,
            addresses.factory,
            sender=self.sender,
            cache=PoolStateCache(ttl=settings.POOL_CACHE_TTL, clock=clock),
            discovery_batch=BatchConfig(settings.DISCOVERY_BATCH_SIZE, settings.DISCOVERY_BATCH_DELAY),
            detail_batch=BatchConfig(settings.DETAIL_BATCH_SIZE, settings.DETAIL_BATCH_DELAY),
            sleep=sleep,
        )

        self.quotes = QuoteEngine(
            registry,
            [
                QuoterV2Strategy(reader, addresses.quoter),
                RouterPathStrategy(reader, addresses.router, via=addresses.wrapped_native),
            ],
            directory=self.pools,
            default_fee=settings.DEFAULT_SWAP_FEE,
            default_slippage=settings.DEFAULT_SLIPPAGE,
        )

        self.swaps = SwapExecutor(
            self.quotes,
            self.sender,
            reader,
            registry,
            addresses.wrapped_native,
            [ExactInputSingleRoute(addresses.swap_router), PathSwapRoute(addresses.router)],
            default_slippage=settings.DEFAULT_SLIPPAGE,
            deadline_minutes=settings.DEFAULT_DEADLINE_MINUTES,
            clock=wall_clock,
        )

        self.positions = PositionService(
            reader,
            registry,
            self.pools,
            addresses.position_manager,
            sender=self.sender,
            deadline_minutes=settings.DEFAULT_DEADLINE_MINUTES,
            clock=wall_clock,
        )

        self.liquidity = LiquidityService(
            self.pools,
            self.sender,
            registry,
            addresses.position_manager,
            addresses.wrapped_native,
            default_fee=settings.DEFAULT_SWAP_FEE,
            default_slippage=settings.DEFAULT_SLIPPAGE,
            deadline_minutes=settings.DEFAULT_DEADLINE_MINUTES,
            clock=wall_clock,
        )

    @classmethod
    def from_config(
        cls,
        config: ConfigManager,
        reader: Optional[ReadCapability] = None,
        writer: Optional[WriteCapability] = None,
        account: Optional[str] = None,
    ) -> "AmmClient":
        """
        Build a client from configuration.

        Without an explicit reader, a web3 client for the configured RPC URL
        is used. With an `account` and no writer, transactions are sent from
        that node-managed account.
        """
        web3 = None
        if reader is None or (writer is None and account):
            web3 = build_web3(config.chain.RPC_URL)
        if reader is None:
            reader = Web3ReadClient(web3)
        if writer is None and account:
            writer = Web3WriteClient(web3, account)

        logger.info(
            f"🚀 AMM client for {config.chain.CHAIN_NAME} (chain {config.chain.CHAIN_ID})"
            f"{' read-only' if writer is None else ''}"
        )
        client = cls(
            reader,
            config.registry,
            config.contract_addresses(),
            settings=config.chain,
            writer=writer,
        )
        client._web3 = web3
        return client

    async def disconnect(self):
        """Close the HTTP session of a web3 handle built by from_config."""
        if self._web3 is None:
            return
        web3, self._web3 = self._web3, None
        await web3.provider.disconnect()
        logger.debug("RPC provider disconnected")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
