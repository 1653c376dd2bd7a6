"""Token List Bid Example.

This example builds and signs a Wyvern v2.3 bid on any token of a
collection subset, then derives the sell order a holder would submit to
fill it with one of their tokens. The same bid is also built as a Seaport
order for comparison.

With NFT_SDK_RPC_URL set, nonces are read from the chain and the bid is
checked for fillability. Nothing is sent on-chain.

Prerequisites:
1. pip install nft-order-sdk[examples]
2. Set environment variables:
   - BUYER_PRIVATE_KEY, SELLER_ADDRESS, NFT_CONTRACT, FEE_RECIPIENT
   - optionally NFT_SDK_RPC_URL, NFT_SDK_CHAIN_ID, NFT_SDK_START_TIME_OFFSET,
     NFT_SDK_LOG_LEVEL

Usage:
    python token_list_bid.py
"""

import asyncio
import logging
import os

from dotenv import load_dotenv

load_dotenv()


async def main():
    # Import here to show what's needed
    from eth_account import Account

    from nft_order_sdk import (
        WETH,
        FillabilityError,
        Web3Provider,
        config_from_env,
        configure_logging,
        seaport,
        wyvern_v23,
    )

    # Validate required env vars
    required = ["BUYER_PRIVATE_KEY", "SELLER_ADDRESS", "NFT_CONTRACT", "FEE_RECIPIENT"]
    missing = [var for var in required if not os.environ.get(var)]
    if missing:
        print(f"Missing required environment variables: {', '.join(missing)}")
        return

    config = config_from_env()
    logging.basicConfig(format="%(asctime)s %(name)s %(levelname)s %(message)s")
    configure_logging(config)

    buyer = Account.from_key(os.environ["BUYER_PRIVATE_KEY"])
    seller = os.environ["SELLER_ADDRESS"]
    contract = os.environ["NFT_CONTRACT"]
    fee_recipient = os.environ["FEE_RECIPIENT"]

    price = 10**18  # 1 WETH
    token_ids = list(range(1000))
    sold_token_id = 999

    provider = Web3Provider.from_rpc_url(config.rpc_url) if config.rpc_url else None
    wyvern_exchange = wyvern_v23.Exchange(config.chain_id)
    seaport_exchange = seaport.Exchange(config.chain_id)

    print("=" * 60)
    print("  TOKEN LIST BID")
    print("=" * 60)
    print(f"    Chain:  {config.chain_id}")
    print(f"    Buyer:  {buyer.address}")
    print(f"    RPC:    {config.rpc_url or '(offline)'}")

    # Build and sign the Wyvern bid
    print("\n[1] Building Wyvern v2.3 bid on 1000 tokens...")
    builder = wyvern_v23.Erc721TokenListBuilder(
        config.chain_id, start_time_offset=config.start_time_offset
    )
    buy_order = builder.build(
        wyvern_v23.TokenListBuildParams(
            maker=buyer.address,
            contract=contract,
            side="buy",
            price=price,
            payment_token=WETH[config.chain_id],
            fee=250,  # 2.5%
            fee_recipient=fee_recipient,
            nonce=await wyvern_exchange.get_nonce(provider, buyer.address) if provider else 0,
            token_ids=token_ids,
        )
    )
    buy_order.check_validity()
    buy_order.sign(buyer)
    info = buy_order.get_info()
    print(f"    Hash:        {buy_order.hash()}")
    print(f"    Merkle root: {info.merkle_root} (depth {info.merkle_depth})")

    if provider:
        try:
            await buy_order.check_fillability(provider)
            print("    Fillable:    yes")
        except FillabilityError as e:
            print(f"    Fillable:    no ({e.reason})")

    # Derive the seller's side
    print(f"\n[2] Building the matching sell order for token #{sold_token_id}...")
    sell_order = buy_order.build_matching(
        seller,
        token_id=sold_token_id,
        token_ids=token_ids,
        nonce=await wyvern_exchange.get_nonce(provider, seller) if provider else 0,
    )
    sell_order.check_validity()
    print(f"    Hash:        {sell_order.hash()}")
    print(f"    Seller:      {sell_order.params.maker}")

    # Same bid on Seaport
    print("\n[3] Building the same bid as a Seaport order...")
    seaport_builder = seaport.TokenListBuilder(
        config.chain_id, start_time_offset=config.start_time_offset
    )
    seaport_order = seaport_builder.build(
        seaport.TokenListBuildParams(
            offerer=buyer.address,
            side="buy",
            token_kind="erc721",
            contract=contract,
            price=price,
            payment_token=WETH[config.chain_id],
            counter=await seaport_exchange.get_counter(provider, buyer.address) if provider else 0,
            fees=[seaport.Fee(recipient=fee_recipient, amount=price * 250 // 10000)],
            token_ids=token_ids,
        )
    )
    seaport_order.check_validity()
    seaport_order.sign(buyer)
    match_params = seaport_order.build_matching(token_id=sold_token_id, token_ids=token_ids)
    print(f"    Hash:        {seaport_order.hash()}")
    print(f"    Proof size:  {len(match_params.criteria_resolvers[0].criteria_proof)}")

    print("\n" + "=" * 60)
    print("  The seller submits with:")
    print("  - wyvern_v23.Exchange.match(provider, seller, buy_order, sell_order)")
    print("  - seaport.Exchange.fill_order(provider, seller, seaport_order, match_params)")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
