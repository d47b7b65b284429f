"""
Protocol contract addresses for the AMM deployment.
"""

import logging
from dataclasses import dataclass, fields
from typing import Dict

from eth_utils import is_address, to_checksum_address

from ..errors import ConfigError
from .base import BaseConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractAddresses:
    """
    Resolved contract addresses handed to services.

    Attributes:
        factory: Pool factory (discovery authority)
        quoter: QuoterV2 contract used for primary quotes
        swap_router: V3 swap router (primary swap route)
        router: Path-based router (fallback quotes and swaps)
        position_manager: Non-fungible position manager
        wrapped_native: Wrapped native asset (deposit/withdraw)
    """

    factory: str
    quoter: str
    swap_router: str
    router: str
    position_manager: str
    wrapped_native: str

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not value or not is_address(value.lower()):
                raise ConfigError(f"Contract address '{f.name}' is invalid: {value!r}")
            object.__setattr__(self, f.name, to_checksum_address(value))


@dataclass
class ContractConfig(BaseConfig):
    """Contract addresses loaded from the environment."""

    FACTORY_ADDRESS: str = BaseConfig.get_env("FACTORY_ADDRESS", "")
    QUOTER_V2_ADDRESS: str = BaseConfig.get_env("QUOTER_V2_ADDRESS", "")
    SWAP_ROUTER_ADDRESS: str = BaseConfig.get_env("SWAP_ROUTER_ADDRESS", "")
    ROUTER_ADDRESS: str = BaseConfig.get_env("ROUTER_ADDRESS", "")
    POSITION_MANAGER_ADDRESS: str = BaseConfig.get_env("POSITION_MANAGER_ADDRESS", "")
    WRAPPED_NATIVE_ADDRESS: str = BaseConfig.get_env(
        "WBCX_ADDRESS", "0xb6AB8EB821618033F5FE3763dDb7290cDEE10c24"
    )

    def as_mapping(self) -> Dict[str, str]:
        """Raw addresses keyed by ContractAddresses field name."""
        return {
            "factory": self.FACTORY_ADDRESS,
            "quoter": self.QUOTER_V2_ADDRESS,
            "swap_router": self.SWAP_ROUTER_ADDRESS,
            "router": self.ROUTER_ADDRESS,
            "position_manager": self.POSITION_MANAGER_ADDRESS,
            "wrapped_native": self.WRAPPED_NATIVE_ADDRESS,
        }

    def missing(self) -> list:
        """Names of contracts without a configured address."""
        return [name for name, value in self.as_mapping().items() if not value]

    def addresses(self) -> ContractAddresses:
        """
        Build validated contract addresses.

        Raises:
            ConfigError: If any address is missing or malformed
        """
        missing = self.missing()
        if missing:
            raise ConfigError(f"Contract addresses not configured: {', '.join(missing)}")
        return ContractAddresses(**self.as_mapping())
