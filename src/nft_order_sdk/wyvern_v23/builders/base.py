"""Base builder shared by Wyvern v2.3 order shapes.

Wyvern orders describe the trade as a call the seller's proxy executes
(``target`` + ``calldata``). Builders differ in the call they encode. The
fee handling, defaulting and the derivation of a counter order are shared.
"""

import dataclasses
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple

from eth_utils import to_checksum_address

from ...common.addresses import ensure_supported_chain
from ...common.errors import InvalidOrderError, InvalidParamsError
from ...common.utils import (
    BPS_DENOMINATOR,
    HASH_ZERO,
    ZERO_ADDRESS,
    get_current_timestamp,
    get_random_bytes,
)
from ..addresses import EXCHANGE
from ..order import Order
from ..types import FeeMethod, HowToCall, OrderParams, OrderSaleKind, OrderSide

logger = logging.getLogger(__name__)

DEFAULT_START_TIME_OFFSET = 5 * 60

TradeSide = Literal["buy", "sell"]


@dataclass
class BaseBuildParams:
    """User intent for one side of a Wyvern trade."""

    maker: str
    contract: str
    side: TradeSide
    price: int
    payment_token: str
    fee: int
    """Relayer fee in basis points, paid by the seller."""

    fee_recipient: str
    nonce: int
    """Maker's current exchange nonce."""

    listing_time: Optional[int] = None
    expiration_time: Optional[int] = None
    """0 means the order never expires."""

    salt: Optional[int] = None
    taker: str = ZERO_ADDRESS


@dataclass
class OrderInfo:
    """Canonical view of a built Wyvern order."""

    side: TradeSide
    contract: str
    price: int
    payment_token: str
    fee: int
    fee_recipient: str
    token_id: Optional[int] = None
    merkle_root: Optional[str] = None
    merkle_depth: Optional[int] = None
    merkle_proof: Optional[List[str]] = None
    """Inclusion proof carried by a sell order on a token list bid."""


def replacement_mask(length: int, ranges: Iterable[Tuple[int, int]]) -> str:
    """Replacement pattern of ``length`` bytes with 0xff over each [start, end) range."""
    mask = bytearray(length)
    for start, end in ranges:
        mask[start:end] = b"\xff" * (end - start)
    return "0x" + mask.hex()


class BaseBuilder(ABC):
    """Shared defaulting, fee encoding and counter order derivation."""

    kind: str = ""

    def __init__(self, chain_id: int, start_time_offset: int = DEFAULT_START_TIME_OFFSET):
        self.chain_id = ensure_supported_chain(chain_id)
        self.start_time_offset = start_time_offset

    def default_initialize(self, params: BaseBuildParams) -> BaseBuildParams:
        """Return a copy of ``params`` with listing time, expiration and salt set."""
        return dataclasses.replace(
            params,
            listing_time=(
                params.listing_time
                if params.listing_time is not None
                else get_current_timestamp(-self.start_time_offset)
            ),
            expiration_time=params.expiration_time if params.expiration_time is not None else 0,
            salt=params.salt if params.salt is not None else get_random_bytes(),
        )

    def build_order(
        self,
        params: BaseBuildParams,
        target: str,
        how_to_call: HowToCall,
        calldata: str,
        replacement_pattern: str,
    ) -> Order:
        """Assemble an order around the call the seller's proxy will execute.

        The order carrying the fee recipient charges the relayer fee to the
        seller: as maker fee on sell orders, as taker fee on buy orders.
        """
        if params.side not in ("buy", "sell"):
            raise InvalidParamsError(f"Invalid side: {params.side}")
        if not 0 <= params.fee <= BPS_DENOMINATOR:
            raise InvalidParamsError(f"Invalid fee: {params.fee}")

        params = self.default_initialize(params)
        is_sell = params.side == "sell"

        return Order(
            self.chain_id,
            OrderParams(
                exchange=EXCHANGE[self.chain_id],
                maker=to_checksum_address(params.maker),
                taker=to_checksum_address(params.taker),
                maker_relayer_fee=params.fee if is_sell else 0,
                taker_relayer_fee=0 if is_sell else params.fee,
                maker_protocol_fee=0,
                taker_protocol_fee=0,
                fee_recipient=to_checksum_address(params.fee_recipient),
                fee_method=FeeMethod.SPLIT_FEE,
                side=OrderSide.SELL if is_sell else OrderSide.BUY,
                sale_kind=OrderSaleKind.FIXED_PRICE,
                target=to_checksum_address(target),
                how_to_call=how_to_call,
                calldata=calldata,
                replacement_pattern=replacement_pattern,
                static_target=ZERO_ADDRESS,
                static_extradata="0x",
                payment_token=to_checksum_address(params.payment_token),
                base_price=params.price,
                extra=0,
                listing_time=params.listing_time,
                expiration_time=params.expiration_time,
                salt=params.salt,
                nonce=params.nonce,
            ),
            kind=self.kind,
        )

    def build_counter_order(
        self,
        order: Order,
        taker: str,
        calldata: str,
        replacement_pattern: str,
        nonce: int = 0,
        listing_time: Optional[int] = None,
    ) -> Order:
        """Mirror ``order`` for ``taker``: opposite side, no fee recipient of its own.

        The counter order is submitted by its own maker and needs no signature.
        """
        p = order.params
        return Order(
            self.chain_id,
            dataclasses.replace(
                p,
                maker=to_checksum_address(taker),
                taker=p.maker,
                maker_relayer_fee=0,
                fee_recipient=ZERO_ADDRESS,
                side=OrderSide.BUY if p.side == OrderSide.SELL else OrderSide.SELL,
                calldata=calldata,
                replacement_pattern=replacement_pattern,
                static_target=ZERO_ADDRESS,
                static_extradata="0x",
                listing_time=(
                    listing_time
                    if listing_time is not None
                    else get_current_timestamp(-self.start_time_offset)
                ),
                expiration_time=0,
                salt=get_random_bytes(),
                nonce=nonce,
                v=0,
                r=HASH_ZERO,
                s=HASH_ZERO,
            ),
            kind=order.kind,
        )

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

    def base_params_from_info(self, order: Order, info: OrderInfo) -> Dict[str, Any]:
        p = order.params
        return {
            "maker": p.maker,
            "contract": info.contract,
            "side": info.side,
            "price": info.price,
            "payment_token": info.payment_token,
            "fee": info.fee,
            "fee_recipient": info.fee_recipient,
            "nonce": p.nonce,
            "listing_time": p.listing_time,
            "expiration_time": p.expiration_time,
            "salt": p.salt,
            "taker": p.taker,
        }

    @staticmethod
    def base_info(order: Order) -> Dict[str, Any]:
        """Side, price and fee fields every builder reads the same way."""
        p = order.params
        is_sell = p.side == OrderSide.SELL
        return {
            "side": "sell" if is_sell else "buy",
            "price": p.base_price,
            "payment_token": p.payment_token,
            "fee": p.maker_relayer_fee if is_sell else p.taker_relayer_fee,
            "fee_recipient": p.fee_recipient,
        }

    @abstractmethod
    def get_info(self, order: Order) -> Optional[OrderInfo]:
        """Canonical info of ``order``, or None if it is not of this builder's shape."""

    @abstractmethod
    def params_from_info(self, order: Order, info: OrderInfo) -> BaseBuildParams:
        """Build parameters that reproduce ``order``."""

    @abstractmethod
    def build(self, params: BaseBuildParams) -> Order:
        """Build an unsigned order."""

    @abstractmethod
    def build_matching(self, order: Order, taker: str, **data: Any) -> Order:
        """Counter order ``taker`` submits to settle ``order``."""
