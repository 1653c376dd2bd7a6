"""Protocol independent building blocks.

Key components:
- On-chain sentinels and encoding helpers
- Token-list commitments (merkle roots and inclusion proofs)
- The ChainProvider protocol and token helpers built on it
- The SDK error taxonomy
"""

from .addresses import SUPPORTED_CHAINS, WETH, ensure_supported_chain
from .errors import (
    SdkError,
    UnsupportedChainError,
    InvalidOrderError,
    InvalidOfferError,
    InvalidConsiderationError,
    InvalidItemError,
    InvalidSignatureError,
    InvalidParamsError,
    UnknownBuilderError,
    FillabilityError,
    TransactionError,
)
from .helpers import Erc20, Erc721, Erc1155, Weth
from .merkle import MerkleTree, generate_merkle_tree, get_merkle_root, verify_merkle_proof
from .provider import ChainProvider, Web3Provider, get_current_chain_timestamp
from .utils import (
    ZERO_ADDRESS,
    HASH_ZERO,
    MAX_UINT256,
    bn,
    lc,
    calculate_fee,
    get_current_timestamp,
    get_random_bytes,
    encode_function_call,
    function_selector,
    parse_signature,
)

__all__ = [
    # Addresses
    "SUPPORTED_CHAINS",
    "WETH",
    "ensure_supported_chain",
    # Errors
    "SdkError",
    "UnsupportedChainError",
    "InvalidOrderError",
    "InvalidOfferError",
    "InvalidConsiderationError",
    "InvalidItemError",
    "InvalidSignatureError",
    "InvalidParamsError",
    "UnknownBuilderError",
    "FillabilityError",
    "TransactionError",
    # Helpers
    "Erc20",
    "Erc721",
    "Erc1155",
    "Weth",
    # Merkle
    "MerkleTree",
    "generate_merkle_tree",
    "get_merkle_root",
    "verify_merkle_proof",
    # Provider
    "ChainProvider",
    "Web3Provider",
    "get_current_chain_timestamp",
    # Utils
    "ZERO_ADDRESS",
    "HASH_ZERO",
    "MAX_UINT256",
    "bn",
    "lc",
    "calculate_fee",
    "get_current_timestamp",
    "get_random_bytes",
    "encode_function_call",
    "function_selector",
    "parse_signature",
]
