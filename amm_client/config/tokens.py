"""
Token list and fee tier configuration.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from eth_utils import is_address, to_checksum_address

from ..errors import ConfigError, ValidationError
from ..types import FeeTier, Token, ZERO_ADDRESS, is_zero_address
from .base import BaseConfig

logger = logging.getLogger(__name__)


FEE_TIERS: List[FeeTier] = [
    FeeTier(fee=100, tick_spacing=1, label="0.01%", description="Best for very stable pairs"),
    FeeTier(fee=500, tick_spacing=10, label="0.05%", description="Best for stable pairs"),
    FeeTier(fee=2500, tick_spacing=50, label="0.25%", description="Best for most pairs"),
    FeeTier(fee=10000, tick_spacing=200, label="1%", description="Best for exotic pairs"),
]


@dataclass
class TokenConfig(BaseConfig):
    """Static token list for the deployment."""

    WRAPPED_NATIVE_ADDRESS: str = BaseConfig.get_env(
        "WBCX_ADDRESS", "0xb6AB8EB821618033F5FE3763dDb7290cDEE10c24"
    )
    TEST_TOKEN_ADDRESS: str = BaseConfig.get_env(
        "TEST_TOKEN_ADDRESS", "0x4e3e6B7862a6DEda1049A9bE69f4E4042491760f"
    )
    FRESH_TOKEN_ADDRESS: str = BaseConfig.get_env(
        "FRESH_TOKEN_ADDRESS", "0x207851F88bc4a597F79557ffb15B456D28489a74"
    )
    # Fee tiers offered for discovery and quoting; empty means all of FEE_TIERS
    ENABLED_FEE_TIERS: Tuple[str, ...] = tuple(BaseConfig.get_env_list("ENABLED_FEE_TIERS"))

    @property
    def tokens(self) -> List[Token]:
        """Configured tokens, native asset first."""
        return [
            Token(address=ZERO_ADDRESS, symbol="BCX", name="BlockX"),
            Token(address=self.WRAPPED_NATIVE_ADDRESS, symbol="WBCX", name="Wrapped BCX"),
            Token(address=self.TEST_TOKEN_ADDRESS, symbol="TEST", name="Test Token"),
            Token(address=self.FRESH_TOKEN_ADDRESS, symbol="FRESH", name="Fresh Token"),
        ]

    @property
    def fee_tiers(self) -> List[FeeTier]:
        """
        Supported fee tiers, narrowed by ENABLED_FEE_TIERS when set.

        Raises:
            ConfigError: If an enabled tier is not a known fee tier
        """
        if not self.ENABLED_FEE_TIERS:
            return list(FEE_TIERS)
        known = {str(tier.fee): tier for tier in FEE_TIERS}
        unknown = [fee for fee in self.ENABLED_FEE_TIERS if fee not in known]
        if unknown:
            raise ConfigError(f"Unknown fee tiers in ENABLED_FEE_TIERS: {', '.join(unknown)}")
        return [tier for tier in FEE_TIERS if str(tier.fee) in self.ENABLED_FEE_TIERS]

    def registry(self) -> "TokenRegistry":
        return TokenRegistry(self.tokens, self.fee_tiers, self.WRAPPED_NATIVE_ADDRESS)


class TokenRegistry:
    """
    Lookup over the static token list and fee tiers.

    The native asset (zero address or its symbol) resolves to the wrapped
    token wherever a contract address is required.
    """

    def __init__(self, tokens: List[Token], fee_tiers: List[FeeTier], wrapped_native: str):
        self.tokens = list(tokens)
        self.fee_tiers = list(fee_tiers)
        self.wrapped_native = to_checksum_address(wrapped_native)

        self._by_address: Dict[str, Token] = {t.key: t for t in self.tokens}
        self._by_symbol: Dict[str, Token] = {t.symbol.upper(): t for t in self.tokens}
        self._fee_tiers: Dict[int, FeeTier] = {tier.fee: tier for tier in self.fee_tiers}

    def by_address(self, address: str) -> Optional[Token]:
        return self._by_address.get(address.lower()) if address else None

    def by_symbol(self, symbol: str) -> Optional[Token]:
        return self._by_symbol.get(symbol.upper()) if symbol else None

    def get_or_unknown(self, address: str) -> Token:
        """Token for display, with a placeholder for addresses not in the list."""
        token = self.by_address(address)
        if token is not None:
            return token
        return Token(address=address, symbol="UNKNOWN", name="Unknown Token")

    def is_native(self, token: str) -> bool:
        """Whether a symbol or address denotes the chain's native asset."""
        if not token:
            return False
        native = self._native_token()
        if native is not None and token.upper() == native.symbol.upper():
            return True
        return token.startswith("0x") and is_zero_address(token)

    def resolve(self, token: str) -> str:
        """
        Resolve a symbol or address to the contract address used on-chain.

        Native asset resolves to the wrapped token. Unknown symbols pass
        through unchanged and fail address validation downstream.
        """
        if self.is_native(token):
            return self.wrapped_native
        by_symbol = self.by_symbol(token)
        if by_symbol is not None:
            return by_symbol.address
        return token

    def pool_tokens(self) -> List[Token]:
        """Tokens that can be pool members (native asset excluded)."""
        return [t for t in self.tokens if not t.is_native]

    def get_fee_tier(self, fee: int) -> FeeTier:
        """
        Look up a supported fee tier.

        Raises:
            ValidationError: If the fee is not a supported tier
        """
        tier = self._fee_tiers.get(fee)
        if tier is None:
            supported = ", ".join(str(f) for f in self._fee_tiers)
            raise ValidationError(f"Unsupported fee tier {fee} (supported: {supported})")
        return tier

    def decimals_of(self, address: str, default: int = 18) -> int:
        token = self.by_address(address)
        return token.decimals if token is not None else default

    def _native_token(self) -> Optional[Token]:
        for token in self.tokens:
            if token.is_native:
                return token
        return None


def validate_address(address: str, name: str = "address") -> str:
    """
    Check a 20-byte hex address.

    Raises:
        ValidationError: If the address is malformed
    """
    if not isinstance(address, str) or not address.startswith("0x") or not is_address(address.lower()):
        raise ValidationError(f"Invalid {name}: {address!r}")
    return address
