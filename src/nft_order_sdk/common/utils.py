"""Shared helpers: on-chain sentinels, timestamps, salts and call encoding."""

import secrets
import time
from dataclasses import dataclass
from typing import Any, List, Sequence, Union

from eth_abi import encode
from eth_utils import keccak

# Zero address, the "unset" sentinel for address fields
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Zero bytes32, the "unset" sentinel for hash fields (conduit key, zone hash, signature)
HASH_ZERO = "0x" + "00" * 32

MAX_UINT256 = 2**256 - 1

BPS_DENOMINATOR = 10000


def get_current_timestamp(delta: int = 0) -> int:
    """Current unix time in seconds, shifted by ``delta`` seconds."""
    return int(time.time()) + delta


def get_random_bytes(num_bytes: int = 32) -> int:
    """Cryptographically random integer of ``num_bytes`` bytes, used for salts."""
    return int.from_bytes(secrets.token_bytes(num_bytes), "big")


def bn(value: Union[int, str]) -> int:
    """Normalize an int, decimal string or 0x-hex string to an int.

    Raises:
        ValueError: If the value is negative or cannot be parsed
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value}")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str) and value.lower().startswith("0x"):
        result = int(value, 16)
    elif isinstance(value, str):
        result = int(value, 10)
    else:
        raise ValueError(f"Invalid numeric value: {value!r}")

    if result < 0:
        raise ValueError(f"Invalid numeric value: {value}. Must be non-negative")
    return result


def lc(value: str) -> str:
    return value.lower()


def to_bytes32_hex(value: Union[int, str, bytes]) -> str:
    """Render an int, hex string or bytes as a 0x-prefixed 32 byte hex string."""
    if isinstance(value, bytes):
        return "0x" + value.rjust(32, b"\x00").hex()
    return "0x" + bn(value).to_bytes(32, "big").hex()


def hex_to_bytes(value: str) -> bytes:
    return bytes.fromhex(value[2:] if value.startswith("0x") else value)


def calculate_fee(price: int, fee_bps: int) -> int:
    """Fee amount from a price and basis points (e.g. 250 = 2.5%)."""
    return (price * fee_bps) // BPS_DENOMINATOR


def function_selector(signature: str) -> bytes:
    """4-byte selector of a Solidity function signature like ``transfer(address,uint256)``."""
    return keccak(text=parse_signature(signature).canonical)[:4]


@dataclass(frozen=True)
class FunctionSignature:
    """A parsed ``name(inputs) returns (outputs)`` signature."""

    name: str
    inputs: List[str]
    outputs: List[str]

    @property
    def canonical(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"


def split_types(types: str) -> List[str]:
    """Split a comma separated ABI type list, keeping tuple types whole."""
    parts = []
    depth = start = 0
    for i, char in enumerate(types):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == "," and depth == 0:
            parts.append(types[start:i].strip())
            start = i + 1
    if types[start:].strip():
        parts.append(types[start:].strip())
    return parts


def parse_signature(signature: str) -> FunctionSignature:
    """Parse a function signature, optionally followed by ``returns (types)``.

    Tuple arguments are written in their canonical form, e.g.
    ``cancel((address,uint256)[])``.
    """
    head, _, returns = signature.partition(" returns ")
    head = head.strip()
    name = head[: head.index("(")]
    inputs = split_types(head[head.index("(") + 1 : head.rindex(")")])

    outputs: List[str] = []
    returns = returns.strip()
    if returns:
        outputs = split_types(returns[returns.index("(") + 1 : returns.rindex(")")])

    return FunctionSignature(name=name, inputs=inputs, outputs=outputs)


def encode_function_call(signature: str, args: Sequence[Any]) -> bytes:
    """ABI-encode a function call (selector followed by the encoded arguments)."""
    return function_selector(signature) + encode(parse_signature(signature).inputs, list(args))
