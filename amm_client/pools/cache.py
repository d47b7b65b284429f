"""
TTL cache for pool state lookups.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .types import PoolState

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """
    Cached lookup result.

    Attributes:
        value: Pool state, or None for a pool known not to exist
        inserted_at: Clock reading at insertion
    """

    value: Optional[PoolState]
    inserted_at: float


class PoolStateCache:
    """
    Mapping from canonical pool key to (state or negative result, insertion time).

    Readers check the entry's age on every lookup, so an entry at or past
    the TTL is treated as absent even before it is removed.
    """

    def __init__(self, ttl: float = 30.0, clock: Callable[[], float] = time.monotonic):
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def lookup(self, key: str) -> Optional[CacheEntry]:
        """Fresh entry for key, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.inserted_at >= self.ttl:
            del self._entries[key]
            return None
        return entry

    def put(self, key: str, value: Optional[PoolState]):
        self._entries[key] = CacheEntry(value=value, inserted_at=self._clock())

    def invalidate(self, key: str):
        self._entries.pop(key, None)

    def clear(self):
        self._entries.clear()

    def purge_expired(self) -> int:
        """Drop expired entries; returns how many were removed."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if now - e.inserted_at >= self.ttl]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Purged {len(expired)} expired pool cache entries")
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.lookup(key) is not None
