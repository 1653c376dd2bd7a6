"""Base builder shared by every Seaport order shape.

A builder turns user intent (``BaseBuildParams``) into a Seaport ``Order``,
reads an existing order back into a canonical ``BaseOrderInfo`` and derives
the taker-side ``MatchParams`` needed to fill it. Concrete builders register
under a ``kind`` tag which orders carry for dispatch.
"""

import dataclasses
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ...common.addresses import ensure_supported_chain
from ...common.errors import (
    InvalidConsiderationError,
    InvalidItemError,
    InvalidOfferError,
    InvalidOrderError,
    InvalidParamsError,
)
from ...common.utils import (
    HASH_ZERO,
    ZERO_ADDRESS,
    get_current_timestamp,
    get_random_bytes,
)
from ..order import Order
from ..types import (
    ConsiderationItem,
    Fee,
    ItemType,
    MatchParams,
    OrderType,
    TokenKind,
    TradeSide,
)

logger = logging.getLogger(__name__)

# Default start time is 5 minutes in the past to absorb clock skew when the
# order's validity is checked on-chain
DEFAULT_START_TIME_OFFSET = 5 * 60


@dataclass
class BaseBuildParams:
    """User intent for one side of a trade."""

    offerer: str
    side: TradeSide
    token_kind: TokenKind
    contract: str
    price: int
    """Total price in the payment token's smallest unit, fees included."""

    payment_token: str
    """ERC20 address, or ZERO_ADDRESS for the native currency (sell side only)."""

    counter: int
    """Offerer's current Seaport counter."""

    fees: List[Fee] = field(default_factory=list)
    """Fee lines paid out of the price, kept in the given order."""

    amount: Optional[int] = None
    """Quantity of the NFT leg (erc1155 only, defaults to 1)."""

    end_price: Optional[int] = None
    """Price at end_time for dutch auctions. Defaults to price."""

    order_type: Optional[OrderType] = None
    zone: Optional[str] = None
    zone_hash: Optional[str] = None
    conduit_key: Optional[str] = None
    salt: Optional[int] = None
    start_time: Optional[int] = None
    end_time: Optional[int] = None
    signature: Optional[str] = None


@dataclass
class BaseOrderInfo:
    """Canonical view of a built order."""

    token_kind: TokenKind
    side: TradeSide
    contract: str
    amount: int
    payment_token: str
    price: int
    fees: List[Fee]
    token_id: Optional[int] = None
    """Set for orders on a single token."""

    merkle_root: Optional[str] = None
    """Set for orders on a committed token list."""

    end_price: Optional[int] = None
    is_dynamic: bool = False
    """True when the price moves between start and end time (dutch auctions)."""


class BaseBuilder(ABC):
    """Shared validation and defaulting for Seaport builders."""

    kind: str = ""

    def __init__(self, chain_id: int, start_time_offset: int = DEFAULT_START_TIME_OFFSET):
        """Initialize the builder.

        Args:
            chain_id: Chain the orders are built for (1 or 4)
            start_time_offset: Seconds subtracted from now for defaulted start times

        Raises:
            UnsupportedChainError: If the chain is not supported
        """
        self.chain_id = ensure_supported_chain(chain_id)
        self.start_time_offset = start_time_offset

    def default_initialize(self, params: BaseBuildParams) -> BaseBuildParams:
        """Return a copy of ``params`` with every optional field populated.

        Unset values become the on-chain sentinels: an end time of 0, zero
        conduit key and zone hash, the zero address as zone and a zero
        signature. The salt is random.
        """
        if params.order_type is not None:
            order_type = params.order_type
        elif params.token_kind == "erc1155":
            order_type = OrderType.PARTIAL_OPEN
        else:
            order_type = OrderType.FULL_OPEN

        return dataclasses.replace(
            params,
            fees=list(params.fees),
            amount=params.amount if params.amount is not None else 1,
            end_price=params.end_price if params.end_price is not None else params.price,
            order_type=order_type,
            start_time=(
                params.start_time
                if params.start_time is not None
                else get_current_timestamp(-self.start_time_offset)
            ),
            end_time=params.end_time if params.end_time is not None else 0,
            conduit_key=params.conduit_key or HASH_ZERO,
            zone=params.zone or ZERO_ADDRESS,
            zone_hash=params.zone_hash or HASH_ZERO,
            salt=params.salt if params.salt is not None else get_random_bytes(),
            signature=params.signature or HASH_ZERO,
        )

    def get_base_info(self, order: Order) -> Tuple[TradeSide, bool]:
        """Classify an order's side and whether its price is dynamic.

        Returns:
            Tuple of (side, is_dynamic)

        Raises:
            InvalidOfferError: If the offer does not hold exactly one item
            InvalidConsiderationError: If the consideration is empty
            InvalidItemError: If the offered item is not an NFT or an ERC20
        """
        # Offer should always consist of a single item
        if len(order.params.offer) != 1:
            raise InvalidOfferError("Invalid offer")
        # Must have at least one consideration
        if len(order.params.consideration) < 1:
            raise InvalidConsiderationError("Invalid consideration")

        offer_item = order.params.offer[0]
        if offer_item.item_type in (ItemType.ERC721, ItemType.ERC1155):
            side: TradeSide = "sell"
        elif offer_item.item_type == ItemType.ERC20:
            side = "buy"
        else:
            raise InvalidItemError("Invalid item")

        # A dynamic order has at least one item with different start/end amounts
        is_dynamic = any(
            item.start_amount != item.end_amount
            for item in [*order.params.offer, *order.params.consideration]
        )

        return side, is_dynamic

    def is_valid(self, order: Order) -> bool:
        """Check that rebuilding the order from its own info reproduces its hash."""
        try:
            info = self.get_info(order)
            if info is None:
                return False
            copy_order = self.build(self.params_from_info(order, info))
        except (InvalidOrderError, InvalidParamsError) as exc:
            logger.debug("Not a valid %s order: %s", self.kind, exc)
            return False

        return copy_order.hash() == order.hash()

    def base_params_from_info(self, order: Order, info: BaseOrderInfo) -> Dict[str, Any]:
        """Build parameters shared by every builder, taken from an existing order."""
        params = order.params
        return {
            "offerer": params.offerer,
            "side": info.side,
            "token_kind": info.token_kind,
            "contract": info.contract,
            "price": info.price,
            "payment_token": info.payment_token,
            "counter": params.counter,
            "fees": info.fees,
            "amount": info.amount,
            "end_price": info.end_price,
            "order_type": params.order_type,
            "zone": params.zone,
            "zone_hash": params.zone_hash,
            "conduit_key": params.conduit_key,
            "salt": params.salt,
            "start_time": params.start_time,
            "end_time": params.end_time,
            "signature": params.signature,
        }

    # Encoding helpers

    @staticmethod
    def payment_item_type(payment_token: str) -> ItemType:
        return ItemType.NATIVE if int(payment_token, 16) == 0 else ItemType.ERC20

    @staticmethod
    def check_fees(params: BaseBuildParams) -> int:
        """Return the total fee amount, making sure it fits in the price."""
        total = sum(fee.amount for fee in params.fees)
        if total > params.price:
            raise InvalidParamsError(f"Fees ({total}) exceed the price ({params.price})")
        return total

    def fee_items(self, params: BaseBuildParams) -> List[ConsiderationItem]:
        """Consideration items paying each fee, scaled down over a dutch auction."""
        item_type = self.payment_item_type(params.payment_token)
        return [
            ConsiderationItem(
                item_type=item_type,
                token=params.payment_token,
                identifier_or_criteria=0,
                start_amount=fee.amount,
                end_amount=fee.amount * params.end_price // params.price if params.price else 0,
                recipient=fee.recipient,
            )
            for fee in params.fees
        ]

    @staticmethod
    def fees_from_items(items: List[ConsiderationItem]) -> List[Fee]:
        return [Fee(recipient=item.recipient, amount=item.start_amount) for item in items]

    @abstractmethod
    def get_info(self, order: Order) -> Optional[BaseOrderInfo]:
        """Canonical info of ``order``, or None if it is not of this builder's shape."""

    @abstractmethod
    def params_from_info(self, order: Order, info: BaseOrderInfo) -> BaseBuildParams:
        """Build parameters that reproduce ``order``."""

    @abstractmethod
    def build(self, params: BaseBuildParams) -> Order:
        """Build an unsigned order."""

    @abstractmethod
    def build_matching(self, order: Order, **data: Any) -> MatchParams:
        """Taker-side data needed to fill ``order``."""
