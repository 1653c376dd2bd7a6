"""NFT order SDK.

Build, sign, validate and match NFT trade orders on the Seaport and
Wyvern v2.3 exchanges.

Sub-packages:
- ``common``: sentinels, token-list commitments, chain provider protocol, errors
- ``seaport``: item/consideration based orders signed as EIP-712 typed data
- ``wyvern_v23``: proxy-registry based orders signed as personal messages
"""

from . import common, seaport, wyvern_v23
from .common import (
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
    ChainProvider,
    Web3Provider,
    Erc721,
    Erc1155,
    Weth,
    WETH,
    ZERO_ADDRESS,
    HASH_ZERO,
    generate_merkle_tree,
    verify_merkle_proof,
)
from .config import (
    SdkConfig,
    ResolvedSdkConfig,
    config_from_env,
    configure_logging,
    resolve_config,
)

__version__ = "0.1.0"

__all__ = [
    # Sub-packages
    "common",
    "seaport",
    "wyvern_v23",
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
    # Chain access
    "ChainProvider",
    "Web3Provider",
    "Erc721",
    "Erc1155",
    "Weth",
    "WETH",
    "ZERO_ADDRESS",
    "HASH_ZERO",
    "generate_merkle_tree",
    "verify_merkle_proof",
    # Config
    "SdkConfig",
    "ResolvedSdkConfig",
    "config_from_env",
    "configure_logging",
    "resolve_config",
]
