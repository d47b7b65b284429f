"""
Liquidity provisioning.
"""

from .service import AddLiquidityParams, LiquidityService, PoolInfo

__all__ = ["AddLiquidityParams", "LiquidityService", "PoolInfo"]
