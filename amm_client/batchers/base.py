"""
Bounded-concurrency batch runner for RPC reads.

Operations are supplied as zero-argument factories so the coroutine for an
item is only created when its batch starts. Each batch runs concurrently
with asyncio.gather, and a fixed pause separates consecutive batches to keep
load on the RPC endpoint bounded.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass
class BatchResult(Generic[T]):
    """Outcome of one batched operation."""

    index: int
    success: bool
    value: Optional[T] = None
    error: Optional[BaseException] = None


@dataclass
class BatchConfig:
    """Configuration for batch operations."""

    batch_size: int = 50
    delay: float = 0.03

    def __post_init__(self):
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {self.batch_size}")
        if self.delay < 0:
            raise ValueError(f"delay must be non-negative, got {self.delay}")


class BatchRunner:
    """
    Runs operation factories in fixed-size concurrent batches.

    A failing operation is reported in its BatchResult and never aborts the
    rest of the batch or the batches after it.
    """

    def __init__(
        self,
        config: Optional[BatchConfig] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        name: str = "batch",
    ):
        self.config = config or BatchConfig()
        self.name = name
        self._sleep = sleep
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def _chunk(self, items: Sequence[Any]) -> List[Sequence[Any]]:
        """Split items into chunks based on batch_size."""
        size = self.config.batch_size
        return [items[i : i + size] for i in range(0, len(items), size)]

    async def run(self, factories: Sequence[Callable[[], Awaitable[T]]]) -> List[BatchResult[T]]:
        """
        Execute all factories, batch by batch.

        Args:
            factories: Zero-argument callables returning awaitables

        Returns:
            One BatchResult per factory, in input order
        """
        results: List[BatchResult[T]] = []
        chunks = self._chunk(list(factories))

        for batch_number, chunk in enumerate(chunks):
            if batch_number > 0 and self.config.delay > 0:
                await self._sleep(self.config.delay)

            offset = len(results)
            outcomes = await asyncio.gather(
                *(factory() for factory in chunk), return_exceptions=True
            )

            failed = 0
            for i, outcome in enumerate(outcomes):
                if isinstance(outcome, BaseException):
                    failed += 1
                    results.append(BatchResult(index=offset + i, success=False, error=outcome))
                else:
                    results.append(BatchResult(index=offset + i, success=True, value=outcome))

            self.logger.debug(
                f"{self.name} batch {batch_number + 1}/{len(chunks)}: "
                f"{len(chunk) - failed} ok, {failed} failed"
            )

        return results
