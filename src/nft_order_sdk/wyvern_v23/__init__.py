"""Wyvern v2.3 orders.

Key components:
- Order types and packed order hashing
- ERC721 builders (single token, token list), dispatched by kind tag
- Exchange calls (nonces, atomic matches, cancellations) and match checks
- The user proxy registry

Example usage:
    ```python
    from nft_order_sdk.wyvern_v23 import Erc721TokenListBuilder, Exchange, TokenListBuildParams

    exchange = Exchange(chain_id=1)
    buy_order = Erc721TokenListBuilder(1).build(TokenListBuildParams(
        maker=buyer.address,
        contract="0x...",
        side="buy",
        price=10**18,
        payment_token=WETH[1],
        fee=250,  # 2.5%
        fee_recipient="0x...",
        nonce=await exchange.get_nonce(provider, buyer.address),
        token_ids=list(range(1000)),
    ))
    buy_order.check_validity()
    buy_order.sign(buyer)

    sell_order = buy_order.build_matching(
        seller.address,
        token_id=999,
        token_ids=list(range(1000)),
        nonce=await exchange.get_nonce(provider, seller.address),
    )
    await exchange.match(provider, seller, buy_order, sell_order)
    ```
"""

from . import addresses as Addresses
from .builders import (
    BUILDERS,
    BaseBuilder,
    BaseBuildParams,
    Erc721SingleTokenBuilder,
    Erc721TokenListBuilder,
    OrderInfo,
    SingleTokenBuildParams,
    TokenListBuildParams,
    detect_kind,
    get_builder,
)
from .exchange import (
    Exchange,
    calculate_final_price,
    guarded_array_replace,
    orders_can_match,
)
from .helpers import ProxyRegistry
from .order import Order
from .types import FeeMethod, HowToCall, OrderParams, OrderSaleKind, OrderSide

__all__ = [
    "Addresses",
    # Types
    "FeeMethod",
    "HowToCall",
    "OrderParams",
    "OrderSaleKind",
    "OrderSide",
    # Builders
    "BUILDERS",
    "BaseBuilder",
    "BaseBuildParams",
    "Erc721SingleTokenBuilder",
    "Erc721TokenListBuilder",
    "OrderInfo",
    "SingleTokenBuildParams",
    "TokenListBuildParams",
    "detect_kind",
    "get_builder",
    # Orders
    "Order",
    "Exchange",
    "ProxyRegistry",
    "calculate_final_price",
    "guarded_array_replace",
    "orders_can_match",
]
