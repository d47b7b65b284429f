"""
ABI table for the contracts the client talks to.

Each entry maps a method name to its input and output ABI types. Calls are
encoded with eth_abi and addressed by their 4-byte selector, so the
capabilities only need (address, method, args).
"""

from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from ..errors import ContractCallError, ValidationError

MAX_UINT128 = 2**128 - 1
MAX_UINT256 = 2**256 - 1


@dataclass(frozen=True)
class ContractFunction:
    """
    One contract method.

    Attributes:
        name: Method name
        inputs: ABI types of the positional arguments
        outputs: ABI types of the return values
        payable: Whether the method accepts native value
    """

    name: str
    inputs: Tuple[str, ...]
    outputs: Tuple[str, ...] = ()
    payable: bool = False

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    def encode_call(self, args: Sequence[Any]) -> bytes:
        """Selector followed by the ABI-encoded arguments."""
        if len(args) != len(self.inputs):
            raise ValidationError(
                f"{self.name} expects {len(self.inputs)} arguments, got {len(args)}"
            )
        normalized = [_normalize(abi_type, arg) for abi_type, arg in zip(self.inputs, args)]
        return self.selector + encode(list(self.inputs), normalized)

    def decode_output(self, data: bytes) -> Any:
        """
        Decode return data: None for no outputs, the value itself for one
        output, a tuple otherwise.
        """
        if not self.outputs:
            return None
        try:
            values = decode(list(self.outputs), bytes(data))
        except Exception as e:
            raise ContractCallError(f"Could not decode {self.name} output: {e}") from e
        return values[0] if len(values) == 1 else tuple(values)


def _normalize(abi_type: str, value: Any) -> Any:
    if abi_type == "address":
        return to_checksum_address(value)
    if abi_type == "address[]":
        return [to_checksum_address(v) for v in value]
    if abi_type.startswith("(") and abi_type.endswith(")"):
        members = abi_type[1:-1].split(",")
        if len(members) != len(value):
            raise ValidationError(f"Expected {len(members)} tuple members, got {len(value)}")
        return tuple(_normalize(member, v) for member, v in zip(members, value))
    return value


def _functions(*entries: ContractFunction) -> Dict[str, ContractFunction]:
    return {f.name: f for f in entries}


_SLOT0_OUTPUTS = ("uint160", "int24", "uint16", "uint16", "uint16", "uint8", "bool")

# (nonce, operator, token0, token1, fee, tickLower, tickUpper, liquidity,
#  feeGrowthInside0LastX128, feeGrowthInside1LastX128, tokensOwed0, tokensOwed1)
_POSITION_OUTPUTS = (
    "uint96", "address", "address", "address", "uint24", "int24", "int24",
    "uint128", "uint256", "uint256", "uint128", "uint128",
)

# (tokenIn, tokenOut, amountIn, fee, sqrtPriceLimitX96)
_QUOTE_EXACT_INPUT_SINGLE_PARAMS = "(address,address,uint256,uint24,uint160)"

# (tokenIn, tokenOut, fee, recipient, deadline, amountIn, amountOutMinimum, sqrtPriceLimitX96)
_EXACT_INPUT_SINGLE_PARAMS = "(address,address,uint24,address,uint256,uint256,uint256,uint160)"

# (token0, token1, fee, tickLower, tickUpper, amount0Desired, amount1Desired,
#  amount0Min, amount1Min, recipient, deadline)
_MINT_PARAMS = "(address,address,uint24,int24,int24,uint256,uint256,uint256,uint256,address,uint256)"

# (tokenId, amount0Desired, amount1Desired, amount0Min, amount1Min, deadline)
_INCREASE_LIQUIDITY_PARAMS = "(uint256,uint256,uint256,uint256,uint256,uint256)"

# (tokenId, liquidity, amount0Min, amount1Min, deadline)
_DECREASE_LIQUIDITY_PARAMS = "(uint256,uint128,uint256,uint256,uint256)"

# (tokenId, recipient, amount0Max, amount1Max)
_COLLECT_PARAMS = "(uint256,address,uint128,uint128)"


FUNCTIONS: Dict[str, ContractFunction] = _functions(
    # Factory
    ContractFunction("getPool", ("address", "address", "uint24"), ("address",)),
    ContractFunction("createPool", ("address", "address", "uint24"), ("address",)),
    # Pool
    ContractFunction("initialize", ("uint160",)),
    ContractFunction("slot0", (), _SLOT0_OUTPUTS),
    ContractFunction("liquidity", (), ("uint128",)),
    ContractFunction("token0", (), ("address",)),
    ContractFunction("token1", (), ("address",)),
    ContractFunction("fee", (), ("uint24",)),
    ContractFunction("tickSpacing", (), ("int24",)),
    # QuoterV2
    ContractFunction(
        "quoteExactInputSingle",
        (_QUOTE_EXACT_INPUT_SINGLE_PARAMS,),
        ("uint256", "uint160", "uint32", "uint256"),
    ),
    # Path router
    ContractFunction("getAmountsOut", ("uint256", "address[]"), ("uint256[]",)),
    ContractFunction(
        "swapExactTokensForTokens",
        ("uint256", "uint256", "address[]", "address", "uint256"),
        ("uint256[]",),
    ),
    # Swap router
    ContractFunction("exactInputSingle", (_EXACT_INPUT_SINGLE_PARAMS,), ("uint256",), payable=True),
    # ERC20
    ContractFunction("allowance", ("address", "address"), ("uint256",)),
    ContractFunction("approve", ("address", "uint256"), ("bool",)),
    ContractFunction("balanceOf", ("address",), ("uint256",)),
    ContractFunction("decimals", (), ("uint8",)),
    ContractFunction("symbol", (), ("string",)),
    # Wrapped native
    ContractFunction("deposit", (), payable=True),
    ContractFunction("withdraw", ("uint256",)),
    # Position manager
    ContractFunction("tokenOfOwnerByIndex", ("address", "uint256"), ("uint256",)),
    ContractFunction("positions", ("uint256",), _POSITION_OUTPUTS),
    ContractFunction(
        "mint", (_MINT_PARAMS,), ("uint256", "uint128", "uint256", "uint256"), payable=True
    ),
    ContractFunction(
        "increaseLiquidity", (_INCREASE_LIQUIDITY_PARAMS,), ("uint128", "uint256", "uint256"),
        payable=True,
    ),
    ContractFunction("decreaseLiquidity", (_DECREASE_LIQUIDITY_PARAMS,), ("uint256", "uint256"), payable=True),
    ContractFunction("collect", (_COLLECT_PARAMS,), ("uint256", "uint256"), payable=True),
    ContractFunction("burn", ("uint256",), payable=True),
)


def get_function(method: str) -> ContractFunction:
    """
    Look up a method in the ABI table.

    Raises:
        ValidationError: For unknown methods
    """
    try:
        return FUNCTIONS[method]
    except KeyError:
        raise ValidationError(f"Unknown contract method: {method}") from None
