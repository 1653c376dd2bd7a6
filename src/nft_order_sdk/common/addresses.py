"""Protocol independent contract addresses."""

from .errors import UnsupportedChainError

# Mainnet and Rinkeby
SUPPORTED_CHAINS = (1, 4)

WETH = {
    1: "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
    4: "0xc778417E063141139Fce010982780140Aa0cD5Ab",
}


def ensure_supported_chain(chain_id: int) -> int:
    """Return ``chain_id`` unchanged, or raise for chains the SDK has no addresses for.

    Raises:
        UnsupportedChainError: If chain_id is not mainnet (1) or rinkeby (4)
    """
    if chain_id not in SUPPORTED_CHAINS:
        raise UnsupportedChainError(chain_id)
    return chain_id
