"""End to end: a Wyvern v2.3 bid on a list of 1000 tokens, filled with the last one."""

import pytest
from eth_abi import encode
from eth_utils import keccak

from nft_order_sdk.common import WETH, Erc721, Weth
from nft_order_sdk.wyvern_v23 import (
    Addresses,
    Erc721TokenListBuilder,
    Exchange,
    ProxyRegistry,
    TokenListBuildParams,
)

from mock_chain import NFT_ADDRESS


def expected_transfer_call(seller, buyer, contract, token_id, token_ids):
    """matchERC721UsingCriteria call with the proof computed level by level."""
    level = [keccak(encode(["uint256"], [i])) for i in token_ids]
    position, proof = token_ids.index(token_id), []
    while len(level) > 1:
        if len(level) % 2:
            level = level + [level[-1]]
        proof.append(level[position ^ 1])
        level = [keccak(b"".join(sorted(level[i : i + 2]))) for i in range(0, len(level), 2)]
        position //= 2

    selector = keccak(
        text="matchERC721UsingCriteria(address,address,address,uint256,bytes32,bytes32[])"
    )[:4]
    return selector + encode(
        ["address", "address", "address", "uint256", "bytes32", "bytes32[]"],
        [seller, buyer, contract, token_id, level[0], proof],
    )


class TestTokenListErc721:
    """Build and fill a token list bid."""

    @pytest.mark.asyncio
    async def test_build_and_fill_buy_order(self, chain, alice, bob, carol):
        """Test that the seller receives the price minus the fee and the buyer the token."""
        buyer, seller, fee_recipient = alice, bob, carol

        price = 10**18
        fee = 250
        bought_token_ids = list(range(1000))
        sold_token_id = 999

        weth = Weth(chain, chain.chain_id)

        # Mint weth to buyer
        await weth.deposit(buyer, price)

        # Approve the token transfer proxy for the buyer
        await weth.approve(buyer, Addresses.TOKEN_TRANSFER_PROXY[chain.chain_id])

        # Approve the token transfer proxy for the seller
        await weth.approve(seller, Addresses.TOKEN_TRANSFER_PROXY[chain.chain_id])

        # Mint erc721 to seller
        await chain.send_transaction(seller, NFT_ADDRESS, "mint(uint256)", [sold_token_id])

        # Register user proxy for the seller
        proxy_registry = ProxyRegistry(chain, chain.chain_id)
        await proxy_registry.register_proxy(seller)
        proxy = await proxy_registry.get_proxy(seller.address)

        # Approve the user proxy
        nft = Erc721(chain, NFT_ADDRESS)
        await nft.approve(seller, proxy)

        exchange = Exchange(chain.chain_id)
        builder = Erc721TokenListBuilder(chain.chain_id)

        # Build buy order
        buy_order = builder.build(
            TokenListBuildParams(
                maker=buyer.address,
                contract=NFT_ADDRESS,
                token_ids=bought_token_ids,
                side="buy",
                price=price,
                payment_token=WETH[chain.chain_id],
                fee=fee,
                fee_recipient=fee_recipient.address,
                listing_time=await chain.get_block_timestamp(),
                nonce=await exchange.get_nonce(chain, buyer.address),
            )
        )

        buy_order.check_validity()

        # Sign the order
        buy_order.sign(buyer)

        # Create matching sell order
        sell_order = buy_order.build_matching(
            seller.address,
            token_id=sold_token_id,
            token_ids=bought_token_ids,
            nonce=await exchange.get_nonce(chain, seller.address),
        )
        sell_order.params.listing_time = await chain.get_block_timestamp()

        await buy_order.check_fillability(chain)

        assert await weth.get_balance(buyer.address) == price
        assert await weth.get_balance(seller.address) == 0
        assert await weth.get_balance(fee_recipient.address) == 0
        assert await nft.get_owner(sold_token_id) == seller.address

        # Match orders
        await exchange.match(chain, seller, buy_order, sell_order)

        assert await weth.get_balance(buyer.address) == 0
        assert await weth.get_balance(seller.address) == price - price * fee // 10000
        assert await weth.get_balance(fee_recipient.address) == price * fee // 10000
        assert await nft.get_owner(sold_token_id) == buyer.address

        # The proxy executed the bid with the seller, token and proof filled in
        wyvern_exchange = chain.at(Addresses.EXCHANGE[chain.chain_id])
        assert wyvern_exchange.executed_calldata == expected_transfer_call(
            seller.address, buyer.address, NFT_ADDRESS, sold_token_id, bought_token_ids
        )
