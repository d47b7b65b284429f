"""
Static configuration types shared across the client.

Token and FeeTier are loaded once from configuration and never change at
runtime.
"""

from dataclasses import dataclass
from typing import Optional

from eth_utils import to_checksum_address

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def is_zero_address(address: Optional[str]) -> bool:
    """True for None, empty strings and the all-zero address."""
    if not address:
        return True
    try:
        return int(address, 16) == 0
    except ValueError:
        return False


@dataclass(frozen=True)
class Token:
    """
    Token identity record.

    Attributes:
        address: Token contract address (checksum form)
        symbol: Ticker symbol
        name: Display name
        decimals: Decimal precision of the smallest unit
        logo_uri: Optional logo reference
    """

    address: str
    symbol: str
    name: str
    decimals: int = 18
    logo_uri: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "address", to_checksum_address(self.address))

    @property
    def key(self) -> str:
        """Case-insensitive lookup key."""
        return self.address.lower()

    @property
    def is_native(self) -> bool:
        """The chain's native asset is represented by the zero address."""
        return is_zero_address(self.address)


@dataclass(frozen=True)
class FeeTier:
    """
    Supported pool fee tier.

    Attributes:
        fee: Fee in hundredths of a basis point (500 = 0.05%)
        tick_spacing: Tick spacing of pools at this fee
        label: Human-readable fee, e.g. "0.05%"
        description: Short usage hint
    """

    fee: int
    tick_spacing: int
    label: str
    description: str = ""

    @property
    def fee_fraction(self) -> float:
        """Fee as a fraction of the traded amount."""
        return self.fee / 1_000_000
