"""
Chain and RPC-policy configuration.
"""

from dataclasses import dataclass
from typing import Dict

from .base import BaseConfig


@dataclass
class ChainConfig(BaseConfig):
    """Settings for the target EVM chain and the client's RPC load policy."""

    CHAIN_NAME: str = BaseConfig.get_env("CHAIN_NAME", "blockx")
    CHAIN_ID: int = BaseConfig.get_env_int("CHAIN_ID", 19191)
    RPC_URL: str = BaseConfig.get_env("BLOCKX_RPC_URL", "https://web3.blockxnet.com")
    EXPLORER_URL: str = BaseConfig.get_env(
        "BLOCKX_EXPLORER_URL", "https://explorer.blockxnet.com"
    )

    NATIVE_SYMBOL: str = "BCX"
    NATIVE_NAME: str = "BlockX"
    NATIVE_DECIMALS: int = 18

    # Transaction settings
    TX_RECEIPT_TIMEOUT: float = BaseConfig.get_env_float("TX_RECEIPT_TIMEOUT", 120.0)
    DEFAULT_SLIPPAGE: float = BaseConfig.get_env_float("DEFAULT_SLIPPAGE", 0.5)
    DEFAULT_DEADLINE_MINUTES: int = BaseConfig.get_env_int("DEFAULT_DEADLINE_MINUTES", 20)
    DEFAULT_SWAP_FEE: int = BaseConfig.get_env_int("DEFAULT_SWAP_FEE", 500)  # 0.05%

    # Pool cache
    POOL_CACHE_TTL: float = BaseConfig.get_env_float("POOL_CACHE_TTL", 30.0)

    # Pool enumeration batching (existence checks are cheap, detail reads are not)
    DISCOVERY_BATCH_SIZE: int = BaseConfig.get_env_int("DISCOVERY_BATCH_SIZE", 50)
    DISCOVERY_BATCH_DELAY: float = BaseConfig.get_env_float("DISCOVERY_BATCH_DELAY", 0.03)
    DETAIL_BATCH_SIZE: int = BaseConfig.get_env_int("DETAIL_BATCH_SIZE", 5)
    DETAIL_BATCH_DELAY: float = BaseConfig.get_env_float("DETAIL_BATCH_DELAY", 0.1)

    def get_chain_config(self) -> Dict:
        """Get configuration for the target chain."""
        return {
            "name": self.CHAIN_NAME,
            "chain_id": self.CHAIN_ID,
            "rpc_url": self.RPC_URL,
            "explorer_url": self.EXPLORER_URL,
            "native_token": self.NATIVE_SYMBOL,
        }

    def get_explorer_tx_url(self, tx_hash: str) -> str:
        """Explorer link for a transaction."""
        return f"{self.EXPLORER_URL.rstrip('/')}/tx/{tx_hash}"
