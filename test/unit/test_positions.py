"""
Tests for position economics and the position service.
"""

import pytest

from amm_client.contracts.functions import MAX_UINT128
from amm_client.errors import ConfigError, RpcError, ValidationError
from amm_client.math.tick_math import Q96
from amm_client.pools.types import PoolState
from amm_client.positions.economics import (
    MAX_ESTIMATED_APR,
    derive,
    estimate_apr,
    has_uncollected_fees,
    is_in_range,
    price_bar_position,
    share_of_pool,
)
from amm_client.positions.service import PositionService
from amm_client.positions.types import IncreaseLiquidityParams, Position

from conftest import ACCOUNT, POSITION_MANAGER, TEST, WBCX, FakeClock

ONE = 10**18
NOW = 1_000
POOL = "0x" + "6" * 40


def position_tuple(token0=TEST, token1=WBCX, fee=500, tick_lower=-600, tick_upper=600,
                   liquidity=ONE, owed0=0, owed1=0):
    return (0, "0x" + "0" * 40, token0, token1, fee, tick_lower, tick_upper, liquidity, 0, 0, owed0, owed1)


class TestRangeChecks:
    """Test in-range and price bar rules."""

    @pytest.mark.parametrize(
        "tick, expected",
        [(-1, False), (0, True), (50, True), (99, True), (100, False)],
    )
    def test_lower_inclusive_upper_exclusive(self, tick, expected):
        """Test the range [0, 100) at its edges."""
        assert is_in_range(tick, 0, 100) is expected

    def test_price_bar_out_of_range(self):
        """Test that the bar pins to 0 below and 100 at or above the range."""
        assert price_bar_position(-1, 0, 100, 0.5, 1.0, 2.0) == 0.0
        assert price_bar_position(100, 0, 100, 3.0, 1.0, 2.0) == 100.0

    def test_price_bar_in_range(self):
        """Test linear interpolation inside the range."""
        assert price_bar_position(50, 0, 100, 1.5, 1.0, 2.0) == 50.0
        assert price_bar_position(50, 0, 100, 0.9, 1.0, 2.0) == 0.0

    def test_uncollected_fees(self):
        """Test the owed-tokens flag."""
        assert not has_uncollected_fees(Position.from_tuple(1, position_tuple()))
        assert has_uncollected_fees(Position.from_tuple(1, position_tuple(owed1=1)))


class TestEstimates:
    """Test heuristic share of pool and APR."""

    def test_share_of_pool(self):
        """Test share as a percentage of in-range liquidity."""
        assert share_of_pool(ONE, 4 * ONE, True) == 25.0
        assert share_of_pool(ONE, 4 * ONE, False) == 0.0
        assert share_of_pool(ONE, 0, True) == 0.0
        assert share_of_pool(5 * ONE, ONE, True) == 100.0

    def test_estimate_apr(self):
        """Test APR from a day's fee share annualized."""
        # 1000 volume x 0.05% = 0.5 fees/day, 10% share = 0.05/day
        assert estimate_apr(500, 10.0, 100.0, 1000.0) == pytest.approx(18.25)

    def test_estimate_apr_bounds(self):
        """Test that APR is 0 without volume and capped at the maximum."""
        assert estimate_apr(500, 10.0, 100.0, None) == 0.0
        assert estimate_apr(500, 10.0, 0.0, 1000.0) == 0.0
        assert estimate_apr(10000, 100.0, 1.0, 1e9) == MAX_ESTIMATED_APR


class TestDerive:
    """Test combining a position with its pool snapshot."""

    def setup_method(self):
        self.position = Position.from_tuple(7, position_tuple(owed1=5))

    def _pool(self, registry, tick=0, sqrt_price_x96=Q96):
        return PoolState(
            address=POOL,
            token0=registry.by_address(TEST),
            token1=registry.by_address(WBCX),
            fee=500,
            tick=tick,
            sqrt_price_x96=sqrt_price_x96,
            price=1.0,
            liquidity=4 * ONE,
            tick_spacing=10,
        )

    def test_in_range_position(self, registry):
        """Test derived values for an in-range position."""
        details = derive(self.position, self._pool(registry), volume_24h=1000.0)

        assert details.in_range
        assert details.token0.symbol == "TEST"
        assert 0 < details.price_bar_position < 100
        assert details.price_range_lower < 1.0 < details.price_range_upper
        assert float(details.amount0) == pytest.approx(float(details.amount1), rel=1e-6)
        assert details.has_uncollected_fees
        assert details.fees_owed1 == "0.000000000000000005"
        assert details.estimates.share_of_pool == 25.0
        assert details.estimates.estimated_apr > 0
        assert details.estimates.is_heuristic

    def test_out_of_range_position(self, registry):
        """Test that an out-of-range position has no share and pins the bar."""
        details = derive(self.position, self._pool(registry, tick=600, sqrt_price_x96=Q96 * 2))

        assert not details.in_range
        assert details.price_bar_position == 100.0
        assert details.amount0 == "0"
        assert details.estimates.share_of_pool == 0.0
        assert details.estimates.estimated_apr == 0.0

    def test_pool_mismatch(self, registry):
        """Test that the wrong pool is rejected."""
        position = Position.from_tuple(7, position_tuple(fee=2500))
        with pytest.raises(ValidationError):
            derive(position, self._pool(registry))

    def test_to_dict(self, registry):
        """Test the serializable view."""
        data = derive(self.position, self._pool(registry)).to_dict()
        assert data["token_id"] == 7
        assert data["liquidity"] == str(ONE)
        assert data["estimates"]["is_heuristic"] is True


class TestPositionService:
    """Test position reads and management."""

    @pytest.fixture(autouse=True)
    def setup_service(self, reader, writer, registry, directory, sender):
        self.reader = reader
        self.writer = writer
        self.registry = registry
        self.directory = directory
        self.service = PositionService(
            reader, registry, directory, POSITION_MANAGER, sender=sender, clock=FakeClock(now=NOW)
        )
        reader.on("positions", position_tuple(), POSITION_MANAGER)
        reader.on("allowance", 10 * ONE)

    @pytest.mark.asyncio
    async def test_get_positions_skips_unreadable(self):
        """Test enumeration by owner index with one failing record."""
        token_ids = [11, 12, 13]
        self.reader.on("balanceOf", 3, POSITION_MANAGER)
        self.reader.on("tokenOfOwnerByIndex", lambda owner, index: token_ids[index], POSITION_MANAGER)
        self.reader.on(
            "positions",
            lambda token_id: RpcError("timeout") if token_id == 12 else position_tuple(),
            POSITION_MANAGER,
        )

        positions = await self.service.get_positions(ACCOUNT)

        assert [p.token_id for p in positions] == [11, 13]
        assert positions[0].liquidity == ONE

    @pytest.mark.asyncio
    async def test_get_positions_validates_owner(self):
        """Test that a malformed owner raises before any read."""
        with pytest.raises(ValidationError):
            await self.service.get_positions("not-an-address")
        assert self.reader.calls == []

    @pytest.mark.asyncio
    async def test_position_details(self):
        """Test position details with pool state."""
        self.reader.add_pool(POOL, TEST, WBCX, 500)

        details = await self.service.get_position_details(7)

        assert details.pool_address == POOL
        assert details.in_range

    @pytest.mark.asyncio
    async def test_position_details_without_pool(self):
        """Test that missing pool state yields None."""
        assert await self.service.get_position_details(7) is None

    @pytest.mark.asyncio
    async def test_increase_liquidity_approves_only_short_token(self):
        """Test that only the token with a low allowance is approved."""
        self.reader.on("allowance", 0, WBCX)

        await self.service.increase_liquidity(IncreaseLiquidityParams(7, "1", "1"))

        assert self.writer.methods() == ["approve", "increaseLiquidity"]
        assert self.writer.calls[0].address == WBCX
        assert self.writer.calls[0].args == [POSITION_MANAGER, ONE]
        assert self.writer.calls[1].args == [(7, ONE, ONE, 0, 0, NOW + 20 * 60)]

    @pytest.mark.asyncio
    async def test_increase_liquidity_invalidates_pool_cache(self):
        """Test that the pool snapshot is refreshed after a liquidity change."""
        self.reader.add_pool(POOL, TEST, WBCX, 500)
        await self.directory.get_pool_details(TEST, WBCX, 500)

        await self.service.increase_liquidity(IncreaseLiquidityParams(7, "1", "0"))
        await self.directory.get_pool_details(TEST, WBCX, 500)

        assert len(self.reader.calls_to("slot0")) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [
        IncreaseLiquidityParams(7, "0", "0"),
        IncreaseLiquidityParams(7, "1", "1", amount0_min="2"),
    ])
    async def test_increase_liquidity_validation(self, params):
        """Test rejected amounts."""
        with pytest.raises(ValidationError):
            await self.service.increase_liquidity(params)
        assert self.writer.attempts == []

    @pytest.mark.asyncio
    async def test_remove_all_liquidity_then_collect(self):
        """Test decrease followed by collecting everything owed."""
        result = await self.service.remove_liquidity(7)

        assert self.writer.methods() == ["decreaseLiquidity", "collect"]
        assert self.writer.calls[0].args == [(7, ONE, 0, 0, NOW + 20 * 60)]
        assert self.writer.calls[1].args == [(7, ACCOUNT, MAX_UINT128, MAX_UINT128)]
        assert result == f"0x{2:064x}"

    @pytest.mark.asyncio
    async def test_remove_more_than_held(self):
        """Test that removing more liquidity than the position has raises."""
        with pytest.raises(ValidationError):
            await self.service.remove_liquidity(7, liquidity=ONE + 1)
        assert self.writer.attempts == []

    @pytest.mark.asyncio
    async def test_collect_to_recipient(self):
        """Test collecting to another address."""
        recipient = "0x" + "9" * 40
        await self.service.collect_fees(7, recipient=recipient)
        assert self.writer.calls[0].args[0][1] == recipient

    @pytest.mark.asyncio
    async def test_burn_requires_empty_position(self):
        """Test that a position with liquidity cannot be burned."""
        with pytest.raises(ValidationError):
            await self.service.burn_position(7)

        self.reader.on("positions", position_tuple(liquidity=0), POSITION_MANAGER)
        await self.service.burn_position(7)
        assert self.writer.methods() == ["burn"]
        assert self.writer.calls[0].args == [7]

    @pytest.mark.asyncio
    async def test_read_only_service(self, reader, registry, directory):
        """Test that management calls need a write capability."""
        service = PositionService(reader, registry, directory, POSITION_MANAGER)
        with pytest.raises(ConfigError):
            await service.collect_fees(7)
