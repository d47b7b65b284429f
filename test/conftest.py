"""
Shared fixtures: in-memory read/write capabilities, a manual clock and a
small token registry.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple
from unittest.mock import AsyncMock

import pytest
from eth_utils import to_checksum_address

from amm_client.batchers.base import BatchConfig
from amm_client.config.contracts import ContractAddresses
from amm_client.config.tokens import FEE_TIERS, TokenRegistry
from amm_client.contracts.capabilities import TransactionReceipt
from amm_client.contracts.transactions import TransactionSender
from amm_client.errors import ContractCallError
from amm_client.math.tick_math import Q96
from amm_client.pools.cache import PoolStateCache
from amm_client.pools.directory import PoolDirectory
from amm_client.pools.types import PoolKey
from amm_client.types import ZERO_ADDRESS, Token

# Sorted by address: FRESH < TEST < WBCX
WBCX = to_checksum_address("0xb6ab8eb821618033f5fe3763ddb7290cdee10c24")
TEST = to_checksum_address("0x4e3e6b7862a6deda1049a9be69f4e4042491760f")
FRESH = to_checksum_address("0x207851f88bc4a597f79557ffb15b456d28489a74")

FACTORY = "0x" + "1" * 40
QUOTER = "0x" + "2" * 40
SWAP_ROUTER = "0x" + "3" * 40
ROUTER = "0x" + "4" * 40
POSITION_MANAGER = "0x" + "5" * 40

ACCOUNT = "0x" + "12" * 20

_MISSING = object()


class FakeReader:
    """
    ReadCapability double.

    Handlers are keyed by (lowercase address or "*", method). A handler is
    returned as-is, raised if it is an exception, or called with the call
    args if it is callable. Factory getPool lookups fall back to the pools
    registered with add_pool.
    """

    def __init__(self):
        self.handlers: Dict[Tuple[str, str], Any] = {}
        self.calls: List[Tuple[str, str, list]] = []
        self.pools: Dict[PoolKey, str] = {}
        self.balances: Dict[str, int] = {}
        self.receipt_status: Dict[str, int] = {}
        self.receipt_errors: Dict[str, Exception] = {}
        self.receipt_waits: List[Tuple[str, float]] = []

    def on(self, method: str, result: Any, address: str = "*") -> "FakeReader":
        self.handlers[(address.lower() if address != "*" else "*", method)] = result
        return self

    def add_pool(
        self,
        address: str,
        token_a: str,
        token_b: str,
        fee: int,
        sqrt_price_x96: int = Q96,
        tick: int = 0,
        liquidity: int = 10**18,
        tick_spacing: int = 10,
    ) -> PoolKey:
        """Register a pool with the factory and answer its state reads."""
        key = PoolKey.of(token_a, token_b, fee)
        self.pools[key] = address
        self.on("slot0", (sqrt_price_x96, tick, 0, 1, 1, 0, True), address)
        self.on("liquidity", liquidity, address)
        self.on("token0", key.token0, address)
        self.on("token1", key.token1, address)
        self.on("fee", fee, address)
        self.on("tickSpacing", tick_spacing, address)
        return key

    def calls_to(self, method: str) -> List[Tuple[str, str, list]]:
        return [call for call in self.calls if call[1] == method]

    async def read(self, address: str, method: str, args=()) -> Any:
        args = list(args)
        self.calls.append((address, method, args))

        handler = self.handlers.get((address.lower(), method), _MISSING)
        if handler is _MISSING:
            handler = self.handlers.get(("*", method), _MISSING)
        if handler is _MISSING and method == "getPool":
            return self.pools.get(PoolKey.of(args[0], args[1], args[2]), ZERO_ADDRESS)
        if handler is _MISSING:
            raise ContractCallError(f"execution reverted: no {method} on {address}")

        if isinstance(handler, BaseException):
            raise handler
        if callable(handler):
            result = handler(*args)
            if isinstance(result, BaseException):
                raise result
            return result
        return handler

    async def get_balance(self, address: str) -> int:
        return self.balances.get(address.lower(), 0)

    async def wait_for_receipt(self, tx_hash: str, timeout: float) -> TransactionReceipt:
        self.receipt_waits.append((tx_hash, timeout))
        if tx_hash in self.receipt_errors:
            raise self.receipt_errors[tx_hash]
        return TransactionReceipt(tx_hash=tx_hash, status=self.receipt_status.get(tx_hash, 1), block_number=1)


@dataclass
class WriteCall:
    address: str
    method: str
    args: list
    value: int


class FakeWriter:
    """
    WriteCapability double recording every submitted transaction.

    `failures` maps a method to the exception its submission raises;
    `hooks` maps a method to a callback run with the call args after a
    successful submission.
    """

    def __init__(self, account: str = ACCOUNT):
        self._account = account
        self.calls: List[WriteCall] = []
        self.attempts: List[WriteCall] = []
        self.failures: Dict[str, Exception] = {}
        self.hooks: Dict[str, Callable[..., Any]] = {}

    @property
    def account(self) -> str:
        return self._account

    def methods(self) -> List[str]:
        return [call.method for call in self.calls]

    def calls_to(self, method: str) -> List[WriteCall]:
        return [call for call in self.calls if call.method == method]

    async def write(self, address: str, method: str, args=(), value: int = 0) -> str:
        call = WriteCall(address=address, method=method, args=list(args), value=value)
        self.attempts.append(call)
        if method in self.failures:
            raise self.failures[method]
        self.calls.append(call)
        if method in self.hooks:
            self.hooks[method](*call.args)
        return f"0x{len(self.attempts):064x}"


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def tokens() -> List[Token]:
    return [
        Token(address=ZERO_ADDRESS, symbol="BCX", name="BlockX"),
        Token(address=WBCX, symbol="WBCX", name="Wrapped BCX"),
        Token(address=TEST, symbol="TEST", name="Test Token"),
        Token(address=FRESH, symbol="FRESH", name="Fresh Token", decimals=6),
    ]


@pytest.fixture
def registry(tokens) -> TokenRegistry:
    return TokenRegistry(tokens, FEE_TIERS, WBCX)


@pytest.fixture
def addresses() -> ContractAddresses:
    return ContractAddresses(
        factory=FACTORY,
        quoter=QUOTER,
        swap_router=SWAP_ROUTER,
        router=ROUTER,
        position_manager=POSITION_MANAGER,
        wrapped_native=WBCX,
    )


@pytest.fixture
def reader() -> FakeReader:
    return FakeReader()


@pytest.fixture
def writer() -> FakeWriter:
    return FakeWriter()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def no_sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def sender(reader, writer) -> TransactionSender:
    return TransactionSender(reader, writer, receipt_timeout=5.0)


@pytest.fixture
def directory(reader, registry, sender, clock, no_sleep) -> PoolDirectory:
    return PoolDirectory(
        reader,
        registry,
        FACTORY,
        sender=sender,
        cache=PoolStateCache(ttl=30.0, clock=clock),
        discovery_batch=BatchConfig(batch_size=50, delay=0.03),
        detail_batch=BatchConfig(batch_size=5, delay=0.1),
        sleep=no_sleep,
    )
