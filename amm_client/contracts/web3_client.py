"""
web3.py implementations of the read and write capabilities.
"""

import logging
from typing import Any, Sequence

from eth_utils import to_checksum_address
from hexbytes import HexBytes
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import ContractLogicError, TimeExhausted

from ..errors import (
    AmmClientError,
    ContractCallError,
    RpcError,
    TransactionTimeoutError,
    ValidationError,
)
from .capabilities import TransactionReceipt
from .functions import get_function

logger = logging.getLogger(__name__)


def build_web3(rpc_url: str) -> AsyncWeb3:
    """AsyncWeb3 over HTTP for an RPC endpoint."""
    return AsyncWeb3(AsyncHTTPProvider(rpc_url))


class Web3ReadClient:
    """
    ReadCapability backed by eth_call.

    Reverts and undecodable output raise ContractCallError; anything else
    the transport throws is wrapped in RpcError.
    """

    def __init__(self, web3: AsyncWeb3):
        self.web3 = web3

    @classmethod
    def from_rpc(cls, rpc_url: str) -> "Web3ReadClient":
        return cls(build_web3(rpc_url))

    async def read(self, address: str, method: str, args: Sequence[Any] = ()) -> Any:
        function = get_function(method)
        call_data = function.encode_call(args)
        target = to_checksum_address(address)

        try:
            raw = await self.web3.eth.call({"to": target, "data": HexBytes(call_data)})
        except ContractLogicError as e:
            raise ContractCallError(f"{method} reverted on {target}: {e}") from e
        except AmmClientError:
            raise
        except Exception as e:
            raise RpcError(f"{method} call to {target} failed: {e}") from e

        return function.decode_output(raw)

    async def get_balance(self, address: str) -> int:
        try:
            return int(await self.web3.eth.get_balance(to_checksum_address(address)))
        except Exception as e:
            raise RpcError(f"Balance lookup for {address} failed: {e}") from e

    async def wait_for_receipt(self, tx_hash: str, timeout: float) -> TransactionReceipt:
        try:
            receipt = await self.web3.eth.wait_for_transaction_receipt(
                HexBytes(tx_hash), timeout=timeout
            )
        except TimeExhausted as e:
            raise TransactionTimeoutError(tx_hash, timeout) from e
        except Exception as e:
            raise RpcError(f"Receipt lookup for {tx_hash} failed: {e}") from e

        return TransactionReceipt(
            tx_hash=tx_hash,
            status=int(receipt["status"]),
            block_number=receipt.get("blockNumber"),
        )


class Web3WriteClient:
    """
    WriteCapability that submits transactions from an account the node
    manages (eth_sendTransaction). Signing stays outside the client.
    """

    def __init__(self, web3: AsyncWeb3, account: str):
        self.web3 = web3
        self._account = to_checksum_address(account)

    @property
    def account(self) -> str:
        return self._account

    async def write(self, address: str, method: str, args: Sequence[Any] = (), value: int = 0) -> str:
        function = get_function(method)
        if value and not function.payable:
            raise ValidationError(f"{method} is not payable")
        call_data = function.encode_call(args)
        target = to_checksum_address(address)

        transaction = {
            "from": self._account,
            "to": target,
            "data": HexBytes(call_data),
            "value": int(value),
        }
        try:
            tx_hash = await self.web3.eth.send_transaction(transaction)
        except ContractLogicError as e:
            raise ContractCallError(f"{method} on {target} would revert: {e}") from e
        except Exception as e:
            raise RpcError(f"Submitting {method} to {target} failed: {e}") from e

        tx_hash = Web3.to_hex(tx_hash)
        logger.debug(f"Submitted {method} to {target}: {tx_hash}")
        return tx_hash
