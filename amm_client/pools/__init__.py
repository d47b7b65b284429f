"""
Pool discovery and state caching.
"""

from .cache import CacheEntry, PoolStateCache
from .directory import PoolDirectory
from .types import PoolKey, PoolState, Slot0

__all__ = ["CacheEntry", "PoolStateCache", "PoolDirectory", "PoolKey", "PoolState", "Slot0"]
