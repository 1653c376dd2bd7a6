"""Seaport orders.

Key components:
- Order types (offer / consideration items, criteria resolvers)
- Builders for single token and token list orders, dispatched by kind tag
- EIP-712 order hashing and signing
- Exchange calls for counters, fills and cancellations

Example usage:
    ```python
    from nft_order_sdk.seaport import Exchange, TokenListBuilder, TokenListBuildParams

    builder = TokenListBuilder(chain_id=1)
    order = builder.build(TokenListBuildParams(
        offerer=buyer.address,
        side="buy",
        token_kind="erc721",
        contract="0x...",
        price=10**18,
        payment_token=WETH[1],
        counter=await Exchange(1).get_counter(provider, buyer.address),
        token_ids=[1, 2, 3],
    ))
    order.check_validity()
    order.sign(buyer)

    match_params = order.build_matching(token_id=2, token_ids=[1, 2, 3])
    await Exchange(1).fill_order(provider, seller, order, match_params)
    ```
"""

from . import addresses as Addresses
from .builders import (
    BUILDERS,
    BaseBuilder,
    BaseBuildParams,
    BaseOrderInfo,
    SingleTokenBuilder,
    SingleTokenBuildParams,
    TokenListBuilder,
    TokenListBuildParams,
    detect_kind,
    get_builder,
)
from .exchange import Exchange
from .order import Order
from .types import (
    ConsiderationItem,
    CriteriaResolver,
    Fee,
    ItemType,
    MatchParams,
    OfferItem,
    OrderComponents,
    OrderType,
    Side,
)

__all__ = [
    "Addresses",
    # Types
    "ConsiderationItem",
    "CriteriaResolver",
    "Fee",
    "ItemType",
    "MatchParams",
    "OfferItem",
    "OrderComponents",
    "OrderType",
    "Side",
    # Builders
    "BUILDERS",
    "BaseBuilder",
    "BaseBuildParams",
    "BaseOrderInfo",
    "SingleTokenBuilder",
    "SingleTokenBuildParams",
    "TokenListBuilder",
    "TokenListBuildParams",
    "detect_kind",
    "get_builder",
    # Orders
    "Order",
    "Exchange",
]
