"""
Client core for a concentrated-liquidity AMM on an EVM chain.

Example:
    from amm_client import AmmClient, load_config

    client = AmmClient.from_config(load_config())
    quote = await client.quotes.get_quote("WBCX", "TEST", "1.5")
"""

from .client import AmmClient
from .config import load_config
from .errors import (
    AmmClientError,
    ConfigError,
    ContractCallError,
    MathDomainError,
    PoolCreationError,
    PoolExistsError,
    QuoteError,
    RpcError,
    TransactionError,
    TransactionTimeoutError,
    ValidationError,
)
from .types import FeeTier, Token

__all__ = [
    "AmmClient",
    "load_config",
    "Token",
    "FeeTier",
    "AmmClientError",
    "ConfigError",
    "ContractCallError",
    "MathDomainError",
    "PoolCreationError",
    "PoolExistsError",
    "QuoteError",
    "RpcError",
    "TransactionError",
    "TransactionTimeoutError",
    "ValidationError",
]
