"""
Configuration manager for the AMM client.

This module combines the configuration classes into a single interface.
There is no process-wide instance: every call to load_config() builds a
fresh manager that is passed explicitly to whatever needs it.
"""

import logging
from typing import Any, Dict, Optional

from ..errors import ConfigError
from .base import BaseConfig
from .chains import ChainConfig
from .contracts import ContractAddresses, ContractConfig
from .tokens import TokenConfig, TokenRegistry

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Centralized configuration manager that combines all configuration classes.

    This class provides easy access to all configuration settings and ensures
    that configurations are properly initialized and validated.
    """

    def __init__(self, environment: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            environment: Override the environment (local, dev, staging, production, test)
        """
        self._environment = environment
        self._base_config = None
        self._chain_config = None
        self._contract_config = None
        self._token_config = None
        self._registry = None
        self._initialize_configs()

    def _initialize_configs(self):
        """Initialize all configuration objects."""
        try:
            self._base_config = BaseConfig()
            if self._environment:
                self._base_config.ENVIRONMENT = self._environment
                self._base_config._validate_config()

            self._chain_config = ChainConfig()
            self._contract_config = ContractConfig()
            self._token_config = TokenConfig()
            self._registry = self._token_config.registry()

            logger.info(f"Configuration initialized for environment: {self.environment}")

        except ConfigError:
            raise
        except Exception as e:
            logger.error(f"Failed to initialize configuration: {e}")
            raise ConfigError(f"Configuration initialization failed: {e}") from e

    @property
    def environment(self) -> str:
        """Get current environment."""
        return self._base_config.ENVIRONMENT

    @property
    def base(self) -> BaseConfig:
        """Get base configuration."""
        return self._base_config

    @property
    def chain(self) -> ChainConfig:
        """Get chain configuration."""
        return self._chain_config

    @property
    def contracts(self) -> ContractConfig:
        """Get contract address configuration."""
        return self._contract_config

    @property
    def tokens(self) -> TokenConfig:
        """Get token list configuration."""
        return self._token_config

    @property
    def registry(self) -> TokenRegistry:
        """Token and fee tier lookup built from the token configuration."""
        return self._registry

    def contract_addresses(self) -> ContractAddresses:
        """Validated contract addresses (raises ConfigError if incomplete)."""
        return self.contracts.addresses()

    def validate_configuration(self) -> bool:
        """
        Validate all configuration settings.

        Returns:
            True if all configurations are valid

        Raises:
            ConfigError: If any configuration is invalid
        """
        if not self.chain.RPC_URL:
            raise ConfigError("RPC URL not configured")
        if self.chain.POOL_CACHE_TTL <= 0:
            raise ConfigError(f"POOL_CACHE_TTL must be positive, got {self.chain.POOL_CACHE_TTL}")
        for name in ("DISCOVERY_BATCH_SIZE", "DETAIL_BATCH_SIZE"):
            if getattr(self.chain, name) < 1:
                raise ConfigError(f"{name} must be at least 1")
        if not 0 <= self.chain.DEFAULT_SLIPPAGE < 100:
            raise ConfigError(f"DEFAULT_SLIPPAGE must be in [0, 100), got {self.chain.DEFAULT_SLIPPAGE}")
        self.registry.get_fee_tier(self.chain.DEFAULT_SWAP_FEE)
        self.contract_addresses()

        logger.info("Configuration validation successful")
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Get all configuration as a dictionary (for debugging)."""
        return {
            "environment": self.environment,
            "chain": self.chain.get_chain_config(),
            "contracts": self.contracts.as_mapping(),
            "tokens": [t.symbol for t in self.tokens.tokens],
            "fee_tiers": [tier.fee for tier in self.tokens.fee_tiers],
        }


def load_config(environment: Optional[str] = None) -> ConfigManager:
    """
    Build a new configuration manager.

    Args:
        environment: Optional environment override

    Returns:
        A freshly initialized ConfigManager
    """
    return ConfigManager(environment)
