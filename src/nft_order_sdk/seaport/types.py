"""Seaport order types.

User-facing shapes of Seaport orders and of the data needed to fill them.
Amounts and identifiers are plain ints; addresses and bytes32 values are
0x-prefixed hex strings.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Literal, Optional

from ..common.utils import HASH_ZERO, ZERO_ADDRESS


class ItemType(IntEnum):
    NATIVE = 0
    ERC20 = 1
    ERC721 = 2
    ERC1155 = 3
    ERC721_WITH_CRITERIA = 4
    ERC1155_WITH_CRITERIA = 5


class OrderType(IntEnum):
    FULL_OPEN = 0
    PARTIAL_OPEN = 1
    FULL_RESTRICTED = 2
    PARTIAL_RESTRICTED = 3


class Side(IntEnum):
    """Which list of an order a criteria resolver points into."""

    OFFER = 0
    CONSIDERATION = 1


TradeSide = Literal["buy", "sell"]
TokenKind = Literal["erc721", "erc1155"]


@dataclass
class OfferItem:
    item_type: ItemType
    token: str
    identifier_or_criteria: int
    start_amount: int
    end_amount: int


@dataclass
class ConsiderationItem(OfferItem):
    recipient: str = ZERO_ADDRESS


@dataclass
class Fee:
    """An additive fee line paid out of the order's price."""

    recipient: str
    amount: int


@dataclass
class OrderComponents:
    """Parameters of a Seaport order, as hashed and signed."""

    offerer: str
    zone: str
    offer: List[OfferItem]
    consideration: List[ConsiderationItem]
    order_type: OrderType
    start_time: int
    end_time: int
    zone_hash: str
    salt: int
    conduit_key: str
    counter: int
    signature: str = HASH_ZERO
    """EIP-712 signature, HASH_ZERO while unsigned."""


@dataclass
class CriteriaResolver:
    """Opens a criteria item of an order for one specific token id."""

    order_index: int
    side: Side
    index: int
    identifier: int
    criteria_proof: List[str] = field(default_factory=list)


@dataclass
class MatchParams:
    """Taker-side data needed to fill an order."""

    amount: Optional[int] = None
    """Quantity to fill for partially fillable orders."""

    criteria_resolvers: Optional[List[CriteriaResolver]] = None


# EIP-712 types for Seaport orders
ORDER_EIP712_TYPES = {
    "OrderComponents": [
        {"name": "offerer", "type": "address"},
        {"name": "zone", "type": "address"},
        {"name": "offer", "type": "OfferItem[]"},
        {"name": "consideration", "type": "ConsiderationItem[]"},
        {"name": "orderType", "type": "uint8"},
        {"name": "startTime", "type": "uint256"},
        {"name": "endTime", "type": "uint256"},
        {"name": "zoneHash", "type": "bytes32"},
        {"name": "salt", "type": "uint256"},
        {"name": "conduitKey", "type": "bytes32"},
        {"name": "counter", "type": "uint256"},
    ],
    "OfferItem": [
        {"name": "itemType", "type": "uint8"},
        {"name": "token", "type": "address"},
        {"name": "identifierOrCriteria", "type": "uint256"},
        {"name": "startAmount", "type": "uint256"},
        {"name": "endAmount", "type": "uint256"},
    ],
    "ConsiderationItem": [
        {"name": "itemType", "type": "uint8"},
        {"name": "token", "type": "address"},
        {"name": "identifierOrCriteria", "type": "uint256"},
        {"name": "startAmount", "type": "uint256"},
        {"name": "endAmount", "type": "uint256"},
        {"name": "recipient", "type": "address"},
    ],
}
