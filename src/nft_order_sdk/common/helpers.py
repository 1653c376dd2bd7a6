"""Thin wrappers over the token contracts an order lifecycle touches."""

import logging

from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address

from .addresses import WETH, ensure_supported_chain
from .provider import ChainProvider
from .utils import MAX_UINT256

logger = logging.getLogger(__name__)


class Erc20:
    """ERC20 balance and allowance helper."""

    def __init__(self, provider: ChainProvider, contract: str):
        self.provider = provider
        self.contract = to_checksum_address(contract)

    async def approve(self, signer: LocalAccount, spender: str, amount: int = MAX_UINT256):
        logger.debug("Approving %s on %s for %s", spender, self.contract, signer.address)
        return await self.provider.send_transaction(
            signer, self.contract, "approve(address,uint256)", [to_checksum_address(spender), amount]
        )

    async def get_balance(self, owner: str) -> int:
        return await self.provider.call(
            self.contract,
            "balanceOf(address) returns (uint256)",
            [to_checksum_address(owner)],
        )

    async def get_allowance(self, owner: str, spender: str) -> int:
        return await self.provider.call(
            self.contract,
            "allowance(address,address) returns (uint256)",
            [to_checksum_address(owner), to_checksum_address(spender)],
        )


class Weth(Erc20):
    """Wrapped ether of the given chain."""

    def __init__(self, provider: ChainProvider, chain_id: int):
        super().__init__(provider, WETH[ensure_supported_chain(chain_id)])
        self.chain_id = chain_id

    async def deposit(self, signer: LocalAccount, amount: int):
        logger.debug("Wrapping %d wei for %s", amount, signer.address)
        return await self.provider.send_transaction(
            signer, self.contract, "deposit()", [], value=amount
        )


class Erc721:
    def __init__(self, provider: ChainProvider, contract: str):
        self.provider = provider
        self.contract = to_checksum_address(contract)

    async def approve(self, signer: LocalAccount, operator: str):
        """Approve ``operator`` for every token of ``signer`` (setApprovalForAll)."""
        return await self.provider.send_transaction(
            signer,
            self.contract,
            "setApprovalForAll(address,bool)",
            [to_checksum_address(operator), True],
        )

    async def is_approved(self, owner: str, operator: str) -> bool:
        return await self.provider.call(
            self.contract,
            "isApprovedForAll(address,address) returns (bool)",
            [to_checksum_address(owner), to_checksum_address(operator)],
        )

    async def get_owner(self, token_id: int) -> str:
        owner = await self.provider.call(
            self.contract, "ownerOf(uint256) returns (address)", [token_id]
        )
        return to_checksum_address(owner)


class Erc1155:
    def __init__(self, provider: ChainProvider, contract: str):
        self.provider = provider
        self.contract = to_checksum_address(contract)

    async def approve(self, signer: LocalAccount, operator: str):
        return await self.provider.send_transaction(
            signer,
            self.contract,
            "setApprovalForAll(address,bool)",
            [to_checksum_address(operator), True],
        )

    async def is_approved(self, owner: str, operator: str) -> bool:
        return await self.provider.call(
            self.contract,
            "isApprovedForAll(address,address) returns (bool)",
            [to_checksum_address(owner), to_checksum_address(operator)],
        )

    async def get_balance(self, owner: str, token_id: int) -> int:
        return await self.provider.call(
            self.contract,
            "balanceOf(address,uint256) returns (uint256)",
            [to_checksum_address(owner), token_id],
        )
