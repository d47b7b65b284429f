"""
Batch execution helpers for bounding RPC load.
"""

from .base import BatchConfig, BatchResult, BatchRunner

__all__ = ["BatchConfig", "BatchResult", "BatchRunner"]
