"""
Tests for the pool state cache and the batch runner.
"""

from unittest.mock import AsyncMock, call

import pytest

from amm_client.batchers.base import BatchConfig, BatchRunner
from amm_client.pools.cache import PoolStateCache

from conftest import FakeClock


class TestPoolStateCache:
    """Test TTL behaviour with a manual clock."""

    def setup_method(self):
        self.clock = FakeClock(now=100.0)
        self.cache = PoolStateCache(ttl=30.0, clock=self.clock)

    def test_fresh_entry_is_returned(self):
        """Test that an entry younger than the TTL is a hit."""
        self.cache.put("k", "state")
        self.clock.advance(29.999)
        entry = self.cache.lookup("k")
        assert entry is not None
        assert entry.value == "state"
        assert entry.inserted_at == 100.0

    def test_entry_at_ttl_is_expired(self):
        """Test that an entry exactly TTL old is a miss and is dropped."""
        self.cache.put("k", "state")
        self.clock.advance(30.0)
        assert self.cache.lookup("k") is None
        assert len(self.cache) == 0

    def test_negative_entry_is_a_hit(self):
        """Test that a cached None is distinguishable from a miss."""
        self.cache.put("missing", None)
        entry = self.cache.lookup("missing")
        assert entry is not None
        assert entry.value is None
        assert "missing" in self.cache

    def test_invalidate_and_clear(self):
        """Test explicit removal."""
        self.cache.put("a", 1)
        self.cache.put("b", 2)
        self.cache.invalidate("a")
        self.cache.invalidate("not-there")
        assert "a" not in self.cache
        assert "b" in self.cache
        self.cache.clear()
        assert len(self.cache) == 0

    def test_purge_expired(self):
        """Test that only stale entries are purged."""
        self.cache.put("old", 1)
        self.clock.advance(20)
        self.cache.put("new", 2)
        self.clock.advance(15)
        assert self.cache.purge_expired() == 1
        assert "new" in self.cache

    def test_rejects_non_positive_ttl(self):
        """Test TTL validation."""
        with pytest.raises(ValueError):
            PoolStateCache(ttl=0)


class TestBatchRunner:
    """Test batched execution with pauses between batches."""

    def setup_method(self):
        self.sleep = AsyncMock()

    @staticmethod
    def _factory(value):
        async def operation():
            if isinstance(value, Exception):
                raise value
            return value
        return lambda: operation()

    @pytest.mark.asyncio
    async def test_results_keep_input_order(self):
        """Test that results are indexed in input order across batches."""
        runner = BatchRunner(BatchConfig(batch_size=2, delay=0.1), sleep=self.sleep)
        results = await runner.run([self._factory(i) for i in range(5)])

        assert [r.index for r in results] == [0, 1, 2, 3, 4]
        assert [r.value for r in results] == [0, 1, 2, 3, 4]
        assert all(r.success for r in results)

    @pytest.mark.asyncio
    async def test_pause_only_between_batches(self):
        """Test that 5 items in batches of 2 pause twice, never before the first."""
        runner = BatchRunner(BatchConfig(batch_size=2, delay=0.1), sleep=self.sleep)
        await runner.run([self._factory(i) for i in range(5)])
        assert self.sleep.await_args_list == [call(0.1), call(0.1)]

    @pytest.mark.asyncio
    async def test_single_batch_never_pauses(self):
        """Test that one batch runs without any pause."""
        runner = BatchRunner(BatchConfig(batch_size=50, delay=0.03), sleep=self.sleep)
        await runner.run([self._factory(i) for i in range(3)])
        self.sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failures_are_isolated(self):
        """Test that a failing item does not abort the others."""
        runner = BatchRunner(BatchConfig(batch_size=2, delay=0), sleep=self.sleep)
        error = RuntimeError("boom")
        results = await runner.run([self._factory(1), self._factory(error), self._factory(3)])

        assert [r.success for r in results] == [True, False, True]
        assert results[1].error is error
        assert results[2].value == 3

    @pytest.mark.asyncio
    async def test_empty_input(self):
        """Test that no factories yields no results."""
        runner = BatchRunner(sleep=self.sleep)
        assert await runner.run([]) == []

    def test_config_validation(self):
        """Test batch configuration bounds."""
        with pytest.raises(ValueError):
            BatchConfig(batch_size=0)
        with pytest.raises(ValueError):
            BatchConfig(delay=-1)
