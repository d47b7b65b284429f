"""
Read and write capabilities the client core depends on.

The core never builds these itself; callers inject an implementation
(Web3ReadClient / Web3WriteClient, or a test double).
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence, runtime_checkable


@dataclass(frozen=True)
class TransactionReceipt:
    """
    Mined transaction outcome.

    Attributes:
        tx_hash: Transaction hash (0x-prefixed hex)
        status: 1 for success, 0 for revert
        block_number: Block the transaction was included in
    """

    tx_hash: str
    status: int
    block_number: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.status == 1


@runtime_checkable
class ReadCapability(Protocol):
    """Contract state reads and receipt waits."""

    async def read(self, address: str, method: str, args: Sequence[Any] = ()) -> Any:
        """Call a view method and return its decoded output."""
        ...

    async def get_balance(self, address: str) -> int:
        """Native balance in raw units."""
        ...

    async def wait_for_receipt(self, tx_hash: str, timeout: float) -> TransactionReceipt:
        """Suspend until the transaction is mined or the timeout elapses."""
        ...


@runtime_checkable
class WriteCapability(Protocol):
    """State-changing contract calls submitted by a connected account."""

    @property
    def account(self) -> str:
        """Address transactions are sent from."""
        ...

    async def write(self, address: str, method: str, args: Sequence[Any] = (), value: int = 0) -> str:
        """Submit a transaction and return its hash."""
        ...
