"""Wyvern user proxy registry.

Every Wyvern seller owns a proxy contract that executes the order calldata,
so NFTs are approved to the seller's proxy rather than to the exchange.
"""

import logging

from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address

from ..common.addresses import ensure_supported_chain
from ..common.provider import ChainProvider
from .addresses import PROXY_REGISTRY

logger = logging.getLogger(__name__)


class ProxyRegistry:
    def __init__(self, provider: ChainProvider, chain_id: int):
        self.provider = provider
        self.chain_id = ensure_supported_chain(chain_id)
        self.address = PROXY_REGISTRY[chain_id]

    async def register_proxy(self, signer: LocalAccount):
        logger.info("Registering Wyvern proxy for %s", signer.address)
        return await self.provider.send_transaction(signer, self.address, "registerProxy()", [])

    async def get_proxy(self, owner: str) -> str:
        """Proxy of ``owner``, the zero address if none is registered."""
        proxy = await self.provider.call(
            self.address, "proxies(address) returns (address)", [to_checksum_address(owner)]
        )
        return to_checksum_address(proxy)
