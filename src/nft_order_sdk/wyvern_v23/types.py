"""Wyvern v2.3 order types."""

from dataclasses import dataclass
from enum import IntEnum

from ..common.utils import HASH_ZERO


class OrderSide(IntEnum):
    BUY = 0
    SELL = 1


class OrderSaleKind(IntEnum):
    FIXED_PRICE = 0
    DUTCH_AUCTION = 1


class HowToCall(IntEnum):
    CALL = 0
    DELEGATE_CALL = 1


class FeeMethod(IntEnum):
    PROTOCOL_FEE = 0
    SPLIT_FEE = 1


@dataclass
class OrderParams:
    """Every field of a Wyvern v2.3 order.

    ``calldata``, ``replacement_pattern`` and ``static_extradata`` are
    0x-prefixed hex strings. ``calldata`` is what the maker's proxy executes
    against ``target`` once the order is matched, and ``replacement_pattern``
    marks the calldata bytes the counter order may overwrite.
    """

    exchange: str
    maker: str
    taker: str
    maker_relayer_fee: int
    taker_relayer_fee: int
    maker_protocol_fee: int
    taker_protocol_fee: int
    fee_recipient: str
    fee_method: FeeMethod
    side: OrderSide
    sale_kind: OrderSaleKind
    target: str
    how_to_call: HowToCall
    calldata: str
    replacement_pattern: str
    static_target: str
    static_extradata: str
    payment_token: str
    base_price: int
    extra: int
    listing_time: int
    expiration_time: int
    salt: int
    nonce: int
    v: int = 0
    r: str = HASH_ZERO
    s: str = HASH_ZERO
