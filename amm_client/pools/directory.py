"""
Pool discovery, state caching and pool creation.

The factory is the discovery authority. Lookups go through a TTL cache
that also remembers pools known not to exist. A factory answer of the
zero address or a reverting state read is a definite negative and is
cached; a transport failure says nothing about the pool and is not.
"""

import asyncio
import logging
import math
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from eth_utils import to_checksum_address

from ..batchers.base import BatchConfig, BatchRunner
from ..config.tokens import TokenRegistry, validate_address
from ..contracts.capabilities import ReadCapability
from ..contracts.transactions import TransactionSender, TxStep
from ..errors import (
    ConfigError,
    ContractCallError,
    ErrorHandler,
    MathDomainError,
    PoolCreationError,
    PoolExistsError,
    RpcError,
)
from ..math.tick_math import (
    adjust_price_for_decimals,
    price_from_sqrt_price_x96,
    raw_price_from_adjusted,
    sqrt_price_x96_from_price,
)
from ..types import is_zero_address
from .cache import PoolStateCache
from .types import PoolKey, PoolState, Slot0

logger = logging.getLogger(__name__)


class PoolDirectory:
    """
    Finds pools for (token pair, fee tier) keys and caches their state.

    Args:
        reader: Read capability
        registry: Token list and fee tiers
        factory: Factory contract address
        sender: Transaction sender, required only for pool creation
        cache: Pool state cache (30s TTL by default)
        discovery_batch: Batch bound and pause for existence checks
        detail_batch: Batch bound and pause for state reads
        sleep: Pause used between batches
    """

    def __init__(
        self,
        reader: ReadCapability,
        registry: TokenRegistry,
        factory: str,
        sender: Optional[TransactionSender] = None,
        cache: Optional[PoolStateCache] = None,
        discovery_batch: Optional[BatchConfig] = None,
        detail_batch: Optional[BatchConfig] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.reader = reader
        self.registry = registry
        self.factory = to_checksum_address(factory)
        self.sender = sender
        self.cache = cache if cache is not None else PoolStateCache()
        self.discovery_batch = discovery_batch or BatchConfig(batch_size=50, delay=0.03)
        self.detail_batch = detail_batch or BatchConfig(batch_size=5, delay=0.1)
        self._sleep = sleep
        self.error_handler = ErrorHandler(logger)

    def _key(self, token_a: str, token_b: str, fee: int) -> PoolKey:
        """Resolve and validate inputs into a pool key, before any network call."""
        address_a = validate_address(self.registry.resolve(token_a), "token address")
        address_b = validate_address(self.registry.resolve(token_b), "token address")
        self.registry.get_fee_tier(fee)
        return PoolKey.of(address_a, address_b, fee)

    async def _resolve_address(self, key: PoolKey) -> Optional[str]:
        """
        Factory lookup for a key.

        Returns None for the zero address. Transport and revert errors
        propagate so callers can tell them apart.
        """
        address = await self.reader.read(
            self.factory,
            "getPool",
            [to_checksum_address(key.token0), to_checksum_address(key.token1), key.fee],
        )
        if is_zero_address(address):
            return None
        return to_checksum_address(address)

    async def _address_or_none(self, key: PoolKey) -> Optional[str]:
        try:
            return await self._resolve_address(key)
        except (RpcError, ContractCallError) as e:
            self.error_handler.log_error(e, {"operation": "getPool", "pool_key": str(key)})
            return None

    async def _fetch_state(self, address: str) -> PoolState:
        """Read slot0, liquidity, tokens, fee and tick spacing concurrently."""
        slot0_raw, liquidity, token0, token1, fee, tick_spacing = await asyncio.gather(
            self.reader.read(address, "slot0"),
            self.reader.read(address, "liquidity"),
            self.reader.read(address, "token0"),
            self.reader.read(address, "token1"),
            self.reader.read(address, "fee"),
            self.reader.read(address, "tickSpacing"),
        )
        slot0 = Slot0.from_tuple(slot0_raw)
        token0_info = self.registry.get_or_unknown(token0)
        token1_info = self.registry.get_or_unknown(token1)

        price = adjust_price_for_decimals(
            price_from_sqrt_price_x96(slot0.sqrt_price_x96),
            token0_info.decimals,
            token1_info.decimals,
        )
        return PoolState(
            address=to_checksum_address(address),
            token0=token0_info,
            token1=token1_info,
            fee=int(fee),
            tick=slot0.tick,
            sqrt_price_x96=slot0.sqrt_price_x96,
            price=price,
            liquidity=int(liquidity),
            tick_spacing=int(tick_spacing),
        )

    async def get_pool_address(self, token_a: str, token_b: str, fee: int) -> Optional[str]:
        """
        Pool address for a pair and fee tier.

        Returns None when the pool does not exist and also when the lookup
        itself failed (logged).
        """
        key = self._key(token_a, token_b, fee)
        return await self._address_or_none(key)

    async def pool_exists(self, token_a: str, token_b: str, fee: int) -> bool:
        return await self.get_pool_address(token_a, token_b, fee) is not None

    async def get_pool_details(self, token_a: str, token_b: str, fee: int) -> Optional[PoolState]:
        """
        Cached pool state for a pair and fee tier.

        Concurrent calls for the same key may each hit the network; reads
        are idempotent so the last writer wins.
        """
        key = self._key(token_a, token_b, fee)
        cache_key = str(key)

        entry = self.cache.lookup(cache_key)
        if entry is not None:
            return entry.value

        try:
            address = await self._resolve_address(key)
            state = await self._fetch_state(address) if address else None
        except ContractCallError as e:
            self.error_handler.log_error(e, {"operation": "get_pool_details", "pool_key": cache_key})
            self.cache.put(cache_key, None)
            return None
        except RpcError as e:
            self.error_handler.log_error(e, {"operation": "get_pool_details", "pool_key": cache_key})
            return None

        self.cache.put(cache_key, state)
        return state

    async def get_pool_by_address(self, address: str) -> Optional[PoolState]:
        """Uncached state read for a known pool address."""
        validate_address(address, "pool address")
        try:
            return await self._fetch_state(address)
        except (ContractCallError, RpcError) as e:
            self.error_handler.log_error(e, {"operation": "get_pool_by_address", "pool": address})
            return None

    def _candidate_keys(self) -> List[PoolKey]:
        """Upper-triangular token x token x fee matrix over pool tokens."""
        tokens = self.registry.pool_tokens()
        keys = []
        for i, token_a in enumerate(tokens):
            for token_b in tokens[i + 1:]:
                for tier in self.registry.fee_tiers:
                    keys.append(PoolKey.of(token_a.address, token_b.address, tier.fee))
        return keys

    async def _details_for(self, key: PoolKey, address: str) -> PoolState:
        cache_key = str(key)
        entry = self.cache.lookup(cache_key)
        if entry is not None and entry.value is not None:
            return entry.value
        state = await self._fetch_state(address)
        self.cache.put(cache_key, state)
        return state

    async def get_all_pools(self) -> List[PoolState]:
        """
        Enumerate every configured pair and fee tier and return the pools
        that exist.

        Existence checks run in wide batches; state reads run in narrow
        batches and only for pools the factory confirmed. A pool whose
        state read fails is left out and the rest continue.
        """
        keys = self._candidate_keys()
        logger.info(f"🔍 Checking {len(keys)} pair/fee combinations for pools")

        discovery = BatchRunner(self.discovery_batch, sleep=self._sleep, name="pool discovery")
        found = await discovery.run([
            (lambda k=key: self._address_or_none(k)) for key in keys
        ])

        existing: List[Tuple[PoolKey, str]] = [
            (keys[result.index], result.value)
            for result in found
            if result.success and result.value
        ]
        logger.info(f"📊 Found {len(existing)} existing pools")

        details = BatchRunner(self.detail_batch, sleep=self._sleep, name="pool details")
        fetched = await details.run([
            (lambda k=key, a=address: self._details_for(k, a)) for key, address in existing
        ])

        pools = []
        for result in fetched:
            key, address = existing[result.index]
            if result.success:
                pools.append(result.value)
            else:
                logger.warning(f"⚠️ Skipping pool {address} ({key}): {result.error}")

        logger.info(f"✅ Loaded {len(pools)}/{len(existing)} pools")
        return pools

    def _require_sender(self) -> TransactionSender:
        if self.sender is None:
            raise ConfigError("Pool creation requires a write capability")
        return self.sender

    def _initial_sqrt_price(self, token0: str, token1: str, initial_price: float) -> int:
        """
        Q96 starting price for a pool from a human price of token0 in token1.

        The price is converted to smallest units and inverted when the
        canonical (sorted) order puts token1 first.
        """
        if not isinstance(initial_price, (int, float)) or not math.isfinite(initial_price) or initial_price <= 0:
            raise MathDomainError(f"Initial price must be finite and positive, got {initial_price!r}")
        decimals0 = self.registry.decimals_of(token0)
        decimals1 = self.registry.decimals_of(token1)
        raw = raw_price_from_adjusted(initial_price, decimals0, decimals1)
        if int(token0, 16) > int(token1, 16):
            raw = 1 / raw
        return sqrt_price_x96_from_price(raw)

    async def _initialize(self, key: PoolKey, address: str, sqrt_price_x96: int):
        sender = self._require_sender()
        await sender.send(TxStep.INITIALIZE, address, "initialize", [sqrt_price_x96])
        self.cache.invalidate(str(key))
        logger.info(f"🚀 Initialized pool {address} at sqrtPriceX96={sqrt_price_x96}")

    async def create_pool(self, token0: str, token1: str, fee: int, initial_price: float) -> str:
        """
        Create and initialize a pool.

        Raises:
            PoolExistsError: If the pool already exists
            PoolCreationError: If the factory reports no pool after creation
            TransactionError: If a transaction fails or times out
        """
        sender = self._require_sender()
        key = self._key(token0, token1, fee)
        address0 = self.registry.resolve(token0)
        address1 = self.registry.resolve(token1)
        sqrt_price_x96 = self._initial_sqrt_price(address0, address1, initial_price)

        if await self.pool_exists(address0, address1, fee):
            raise PoolExistsError(f"Pool already exists for {key}")

        await sender.send(
            TxStep.CREATE_POOL,
            self.factory,
            "createPool",
            [to_checksum_address(key.token0), to_checksum_address(key.token1), fee],
        )

        try:
            address = await self._resolve_address(key)
        except (RpcError, ContractCallError) as e:
            raise PoolCreationError(f"Could not resolve pool address for {key}: {e}") from e
        if address is None:
            raise PoolCreationError(f"Factory returned no pool for {key} after creation")

        logger.info(f"🏗️ Created pool {address} for {key}")
        await self._initialize(key, address, sqrt_price_x96)
        return address

    async def _is_initialized(self, address: str) -> bool:
        try:
            slot0 = Slot0.from_tuple(await self.reader.read(address, "slot0"))
        except (ContractCallError, RpcError) as e:
            logger.debug(f"slot0 probe failed for {address}: {e}")
            return False
        return slot0.initialized

    async def create_pool_if_needed(
        self, token0: str, token1: str, fee: int, initial_price: float
    ) -> str:
        """
        Return a usable pool address, creating or initializing as needed.

        An existing pool whose slot0 probe fails (or reports no price) gets
        initialized; a missing pool is created.
        """
        key = self._key(token0, token1, fee)
        address0 = self.registry.resolve(token0)
        address1 = self.registry.resolve(token1)

        address = await self._address_or_none(key)
        if address is None:
            return await self.create_pool(address0, address1, fee, initial_price)

        if not await self._is_initialized(address):
            sqrt_price_x96 = self._initial_sqrt_price(address0, address1, initial_price)
            await self._initialize(key, address, sqrt_price_x96)
        return address

    def invalidate(self, token_a: str, token_b: str, fee: int):
        self.cache.invalidate(str(self._key(token_a, token_b, fee)))

    def clear_cache(self):
        self.cache.clear()
