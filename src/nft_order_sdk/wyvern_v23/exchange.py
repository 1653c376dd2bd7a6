"""Wyvern v2.3 exchange calls and off-chain match checks."""

import logging
from typing import TYPE_CHECKING, Any, Dict, List

from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address

from ..common.addresses import ensure_supported_chain
from ..common.errors import InvalidOrderError, InvalidParamsError
from ..common.provider import ChainProvider
from ..common.utils import HASH_ZERO, ZERO_ADDRESS, hex_to_bytes
from .addresses import EXCHANGE
from .types import OrderSaleKind, OrderSide

if TYPE_CHECKING:
    from .order import Order

logger = logging.getLogger(__name__)

ATOMIC_MATCH = (
    "atomicMatch_(address[14],uint256[18],uint8[8],bytes,bytes,bytes,bytes,bytes,bytes,"
    "uint8[2],bytes32[5])"
)
CANCEL_ORDER = (
    "cancelOrder_(address[7],uint256[9],uint8,uint8,uint8,uint8,bytes,bytes,bytes,"
    "uint8,bytes32,bytes32)"
)


def guarded_array_replace(array: bytes, desired: bytes, mask: bytes) -> bytes:
    """Overwrite the bytes of ``array`` selected by ``mask`` with those of ``desired``.

    Raises:
        InvalidOrderError: If the three arrays differ in length
    """
    if not len(array) == len(desired) == len(mask):
        raise InvalidOrderError("Calldata and replacement pattern lengths differ")
    return bytes((a & ~m & 0xFF) | (d & m) for a, d, m in zip(array, desired, mask))


def can_settle_order(listing_time: int, expiration_time: int, timestamp: int) -> bool:
    return listing_time < timestamp and (expiration_time == 0 or timestamp < expiration_time)


def calculate_final_price(order: "Order", timestamp: int) -> int:
    """Current price of an order, decaying (sells) or rising (buys) over a dutch auction."""
    p = order.params
    if p.sale_kind == OrderSaleKind.FIXED_PRICE:
        return p.base_price

    diff = p.extra * (timestamp - p.listing_time) // (p.expiration_time - p.listing_time)
    return p.base_price - diff if p.side == OrderSide.SELL else p.base_price + diff


def orders_can_match(buy: "Order", sell: "Order", timestamp: int) -> bool:
    """Off-chain rendition of the exchange's match preconditions."""
    b, s = buy.params, sell.params

    def same(x: str, y: str) -> bool:
        return x.lower() == y.lower()

    if not (b.side == OrderSide.BUY and s.side == OrderSide.SELL):
        return False
    if b.fee_method != s.fee_method or not same(b.payment_token, s.payment_token):
        return False
    if not (same(s.taker, ZERO_ADDRESS) or same(s.taker, b.maker)):
        return False
    if not (same(b.taker, ZERO_ADDRESS) or same(b.taker, s.maker)):
        return False
    # Exactly one of the two orders carries the fees
    if same(s.fee_recipient, ZERO_ADDRESS) == same(b.fee_recipient, ZERO_ADDRESS):
        return False
    if not same(b.target, s.target) or b.how_to_call != s.how_to_call:
        return False
    if not can_settle_order(b.listing_time, b.expiration_time, timestamp):
        return False
    if not can_settle_order(s.listing_time, s.expiration_time, timestamp):
        return False

    try:
        buy_calldata = guarded_array_replace(
            hex_to_bytes(b.calldata), hex_to_bytes(s.calldata), hex_to_bytes(b.replacement_pattern)
        )
        sell_calldata = guarded_array_replace(
            hex_to_bytes(s.calldata), hex_to_bytes(b.calldata), hex_to_bytes(s.replacement_pattern)
        )
    except InvalidOrderError:
        return False
    if buy_calldata != sell_calldata:
        return False

    return calculate_final_price(buy, timestamp) >= calculate_final_price(sell, timestamp)


class Exchange:
    """Wyvern v2.3 exchange of a chain."""

    def __init__(self, chain_id: int):
        self.chain_id = ensure_supported_chain(chain_id)
        self.address = EXCHANGE[chain_id]

    async def get_nonce(self, provider: ChainProvider, user: str) -> int:
        return await provider.call(
            self.address, "nonces(address) returns (uint256)", [to_checksum_address(user)]
        )

    async def match(
        self,
        provider: ChainProvider,
        signer: LocalAccount,
        buy_order: "Order",
        sell_order: "Order",
    ) -> Dict[str, Any]:
        """Settle a buy order against a sell order.

        The order whose maker is ``signer`` needs no signature, the other one
        must be signed by its maker.

        Returns:
            Transaction receipt

        Raises:
            InvalidSignatureError: If the counterparty's order is not properly signed
            InvalidOrderError: If the orders cannot be matched right now
        """
        for order in (buy_order, sell_order):
            if order.params.maker.lower() != signer.address.lower():
                order.check_signature()

        # The match is mined at the earliest in the next block
        timestamp = await provider.get_block_timestamp() + 1
        if not orders_can_match(buy_order, sell_order, timestamp):
            raise InvalidOrderError("Orders cannot be matched")

        value = 0
        if (
            int(buy_order.params.payment_token, 16) == 0
            and buy_order.params.maker.lower() == signer.address.lower()
        ):
            value = calculate_final_price(buy_order, timestamp)

        logger.info(
            "Matching buy %s with sell %s as %s",
            buy_order.hash(),
            sell_order.hash(),
            signer.address,
        )
        return await provider.send_transaction(
            signer, self.address, ATOMIC_MATCH, self.atomic_match_args(buy_order, sell_order), value
        )

    async def cancel_order(
        self, provider: ChainProvider, maker: LocalAccount, order: "Order"
    ) -> Dict[str, Any]:
        """Cancel ``order`` on-chain.

        Raises:
            InvalidParamsError: If ``maker`` is not the order's maker
        """
        if maker.address.lower() != order.params.maker.lower():
            raise InvalidParamsError("Only the maker can cancel the order")

        p = order.params
        logger.info("Cancelling order %s", order.hash())
        return await provider.send_transaction(
            maker,
            self.address,
            CANCEL_ORDER,
            [
                self._addresses(order),
                self._uints(order),
                int(p.fee_method),
                int(p.side),
                int(p.sale_kind),
                int(p.how_to_call),
                hex_to_bytes(p.calldata),
                hex_to_bytes(p.replacement_pattern),
                hex_to_bytes(p.static_extradata),
                p.v,
                hex_to_bytes(p.r),
                hex_to_bytes(p.s),
            ],
        )

    async def increment_nonce(self, provider: ChainProvider, maker: LocalAccount) -> Dict[str, Any]:
        """Invalidate every order of ``maker`` signed with the current nonce."""
        return await provider.send_transaction(maker, self.address, "incrementNonce()", [])

    @staticmethod
    def _addresses(order: "Order") -> List[str]:
        p = order.params
        return [
            to_checksum_address(address)
            for address in (
                p.exchange,
                p.maker,
                p.taker,
                p.fee_recipient,
                p.target,
                p.static_target,
                p.payment_token,
            )
        ]

    @staticmethod
    def _uints(order: "Order") -> List[int]:
        p = order.params
        return [
            p.maker_relayer_fee,
            p.taker_relayer_fee,
            p.maker_protocol_fee,
            p.taker_protocol_fee,
            p.base_price,
            p.extra,
            p.listing_time,
            p.expiration_time,
            p.salt,
        ]

    @classmethod
    def atomic_match_args(cls, buy: "Order", sell: "Order") -> List[Any]:
        """Arguments of ``atomicMatch_`` in their ABI layout."""
        b, s = buy.params, sell.params
        return [
            cls._addresses(buy) + cls._addresses(sell),
            cls._uints(buy) + cls._uints(sell),
            [
                int(b.fee_method),
                int(b.side),
                int(b.sale_kind),
                int(b.how_to_call),
                int(s.fee_method),
                int(s.side),
                int(s.sale_kind),
                int(s.how_to_call),
            ],
            hex_to_bytes(b.calldata),
            hex_to_bytes(s.calldata),
            hex_to_bytes(b.replacement_pattern),
            hex_to_bytes(s.replacement_pattern),
            hex_to_bytes(b.static_extradata),
            hex_to_bytes(s.static_extradata),
            [b.v, s.v],
            [
                hex_to_bytes(b.r),
                hex_to_bytes(b.s),
                hex_to_bytes(s.r),
                hex_to_bytes(s.s),
                hex_to_bytes(HASH_ZERO),  # metadata
            ],
        ]
