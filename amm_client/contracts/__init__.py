"""
Contract access: capabilities, the ABI table and web3 adapters.
"""

from .capabilities import ReadCapability, TransactionReceipt, WriteCapability
from .functions import FUNCTIONS, MAX_UINT128, ContractFunction, get_function
from .transactions import TransactionSender, TxStep
from .web3_client import Web3ReadClient, Web3WriteClient, build_web3

__all__ = [
    "ReadCapability",
    "WriteCapability",
    "TransactionReceipt",
    "ContractFunction",
    "FUNCTIONS",
    "MAX_UINT128",
    "get_function",
    "TransactionSender",
    "TxStep",
    "Web3ReadClient",
    "Web3WriteClient",
    "build_web3",
]
