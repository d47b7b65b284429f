"""
Transaction submission helpers shared by the swap, pool and position flows.

Every state-changing step goes through TransactionSender so failures carry
the step name, and every step waits for its receipt before the next one
starts.
"""

import logging
from enum import Enum
from typing import Any, Optional, Sequence

from ..errors import TransactionError, ValidationError
from .capabilities import ReadCapability, TransactionReceipt, WriteCapability

logger = logging.getLogger(__name__)

DEFAULT_RECEIPT_TIMEOUT = 120.0


class TxStep(str, Enum):
    """Named steps of multi-transaction flows."""

    APPROVE = "approve"
    WRAP = "wrap"
    UNWRAP = "unwrap"
    CREATE_POOL = "create_pool"
    INITIALIZE = "initialize"
    SWAP = "swap"
    MINT = "mint"
    INCREASE_LIQUIDITY = "increase_liquidity"
    DECREASE_LIQUIDITY = "decrease_liquidity"
    COLLECT = "collect"
    BURN = "burn"


class TransactionSender:
    """Submits transactions through the write capability and waits on them."""

    def __init__(
        self,
        reader: ReadCapability,
        writer: WriteCapability,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    ):
        self.reader = reader
        self.writer = writer
        self.receipt_timeout = receipt_timeout

    @property
    def account(self) -> str:
        return self.writer.account

    async def submit(
        self, step: TxStep, address: str, method: str, args: Sequence[Any] = (), value: int = 0
    ) -> str:
        """Submit without waiting; returns the transaction hash."""
        try:
            tx_hash = await self.writer.write(address, method, args, value=value)
        except (ValidationError, TransactionError):
            raise
        except Exception as e:
            raise TransactionError(step.value, str(e)) from e
        logger.info(f"📤 {step.value}: submitted {method} to {address} ({tx_hash})")
        return tx_hash

    async def wait(self, step: TxStep, tx_hash: str) -> TransactionReceipt:
        """
        Wait for a receipt and require success.

        Raises:
            TransactionError: On a reverted receipt, a timeout or a failed lookup
        """
        try:
            receipt = await self.reader.wait_for_receipt(tx_hash, self.receipt_timeout)
        except Exception as e:
            raise TransactionError(step.value, str(e), tx_hash) from e

        if not receipt.succeeded:
            raise TransactionError(step.value, "transaction reverted", tx_hash)
        logger.info(f"✅ {step.value}: confirmed {tx_hash}")
        return receipt

    async def send(
        self, step: TxStep, address: str, method: str, args: Sequence[Any] = (), value: int = 0
    ) -> str:
        """Submit and wait; returns the transaction hash."""
        tx_hash = await self.submit(step, address, method, args, value=value)
        await self.wait(step, tx_hash)
        return tx_hash

    async def ensure_allowance(self, token: str, spender: str, amount: int) -> Optional[str]:
        """
        Approve `spender` for exactly `amount` of `token` if the current
        allowance is lower.

        Returns:
            The approval transaction hash, or None when no approval was needed
        """
        if amount <= 0:
            return None
        try:
            allowance = await self.reader.read(token, "allowance", [self.account, spender])
        except ValidationError:
            raise
        except Exception as e:
            raise TransactionError(TxStep.APPROVE.value, f"allowance check failed: {e}") from e

        if allowance >= amount:
            logger.debug(f"Allowance {allowance} of {token} for {spender} covers {amount}")
            return None

        return await self.send(TxStep.APPROVE, token, "approve", [spender, amount])

    async def wrap_native(self, wrapped_native: str, amount: int) -> str:
        """Deposit native asset into the wrapped token contract."""
        return await self.send(TxStep.WRAP, wrapped_native, "deposit", [], value=amount)

    async def unwrap_native(self, wrapped_native: str, amount: int) -> str:
        """Withdraw native asset from the wrapped token contract."""
        return await self.send(TxStep.UNWRAP, wrapped_native, "withdraw", [amount])
