"""
Configuration management for the AMM client.

Configuration is read from environment variables (and a .env file). There
is no global instance; build one with load_config() and hand it to the
client.

Example:
    from amm_client.config import load_config

    config = load_config()

    # Chain settings
    rpc_url = config.chain.RPC_URL

    # Contract addresses
    addresses = config.contract_addresses()

    # Token lookup
    wbcx = config.registry.by_symbol("WBCX")
"""

from ..errors import ConfigError
from .base import BaseConfig
from .chains import ChainConfig
from .contracts import ContractAddresses, ContractConfig
from .manager import ConfigManager, load_config
from .tokens import FEE_TIERS, TokenConfig, TokenRegistry, validate_address

__all__ = [
    "BaseConfig",
    "ConfigError",
    "ChainConfig",
    "ContractAddresses",
    "ContractConfig",
    "TokenConfig",
    "TokenRegistry",
    "FEE_TIERS",
    "validate_address",
    "ConfigManager",
    "load_config",
]
