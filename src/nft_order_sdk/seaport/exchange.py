"""Seaport exchange calls: counters, fills and cancellations."""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address

from ..common.addresses import ensure_supported_chain
from ..common.errors import InvalidParamsError
from ..common.provider import ChainProvider
from ..common.utils import HASH_ZERO, ZERO_ADDRESS, hex_to_bytes
from .addresses import EXCHANGE
from .types import ItemType, MatchParams

if TYPE_CHECKING:
    from .order import Order

logger = logging.getLogger(__name__)

FULFILL_ADVANCED_ORDER = (
    "fulfillAdvancedOrder("
    "((address,address,(uint8,address,uint256,uint256,uint256)[],"
    "(uint8,address,uint256,uint256,uint256,address)[],"
    "uint8,uint256,uint256,bytes32,uint256,bytes32,uint256),uint120,uint120,bytes,bytes),"
    "(uint256,uint8,uint256,uint256,bytes32[])[],bytes32,address)"
)

CANCEL = (
    "cancel((address,address,(uint8,address,uint256,uint256,uint256)[],"
    "(uint8,address,uint256,uint256,uint256,address)[],"
    "uint8,uint256,uint256,bytes32,uint256,bytes32,uint256)[])"
)


class Exchange:
    """Seaport exchange of a chain."""

    def __init__(self, chain_id: int):
        self.chain_id = ensure_supported_chain(chain_id)
        self.address = EXCHANGE[chain_id]

    async def get_counter(self, provider: ChainProvider, user: str) -> int:
        return await provider.call(
            self.address, "getCounter(address) returns (uint256)", [to_checksum_address(user)]
        )

    async def fill_order(
        self,
        provider: ChainProvider,
        taker: LocalAccount,
        order: "Order",
        match_params: Optional[MatchParams] = None,
        recipient: Optional[str] = None,
        conduit_key: str = HASH_ZERO,
    ) -> Dict[str, Any]:
        """Fill ``order`` as ``taker`` through ``fulfillAdvancedOrder``.

        Orders paid in the native currency send the price along as value.

        Args:
            provider: Chain provider
            taker: Account filling the order
            order: Signed order to fill
            match_params: Output of ``order.build_matching``
            recipient: Receiver of the offered items (default: taker)
            conduit_key: Taker's conduit key (default: approvals on the exchange)

        Returns:
            Transaction receipt
        """
        match_params = match_params or MatchParams()
        # Partial fills are expressed as a fraction of the NFT leg
        if match_params.amount is not None:
            numerator, denominator = match_params.amount, order.get_info().amount
        else:
            numerator, denominator = 1, 1

        value = sum(
            item.start_amount
            for item in order.params.consideration
            if item.item_type == ItemType.NATIVE
        )
        resolvers = [
            (
                resolver.order_index,
                int(resolver.side),
                resolver.index,
                resolver.identifier,
                [hex_to_bytes(node) for node in resolver.criteria_proof],
            )
            for resolver in match_params.criteria_resolvers or []
        ]

        logger.info("Filling order %s as %s", order.hash(), taker.address)
        return await provider.send_transaction(
            taker,
            self.address,
            FULFILL_ADVANCED_ORDER,
            [
                (
                    self.order_parameters(order),
                    numerator,
                    denominator,
                    hex_to_bytes(order.params.signature),
                    b"",
                ),
                resolvers,
                hex_to_bytes(conduit_key),
                to_checksum_address(recipient) if recipient else ZERO_ADDRESS,
            ],
            value=value,
        )

    async def cancel_order(
        self, provider: ChainProvider, maker: LocalAccount, order: "Order"
    ) -> Dict[str, Any]:
        """Cancel ``order`` on-chain.

        Raises:
            InvalidParamsError: If ``maker`` is not the order's offerer
        """
        if maker.address.lower() != order.params.offerer.lower():
            raise InvalidParamsError("Only the offerer can cancel the order")

        logger.info("Cancelling order %s", order.hash())
        return await provider.send_transaction(
            maker, self.address, CANCEL, [[self.order_parameters(order, with_counter=True)]]
        )

    @staticmethod
    def order_parameters(order: "Order", with_counter: bool = False) -> Tuple:
        """ABI tuple of the order.

        Fills take ``OrderParameters``, which end with the number of original
        consideration items. Cancellations take ``OrderComponents``, which end
        with the counter.
        """
        params = order.params
        offer: List[Tuple] = [
            (
                int(item.item_type),
                to_checksum_address(item.token),
                item.identifier_or_criteria,
                item.start_amount,
                item.end_amount,
            )
            for item in params.offer
        ]
        consideration: List[Tuple] = [
            (
                int(item.item_type),
                to_checksum_address(item.token),
                item.identifier_or_criteria,
                item.start_amount,
                item.end_amount,
                to_checksum_address(item.recipient),
            )
            for item in params.consideration
        ]
        return (
            to_checksum_address(params.offerer),
            to_checksum_address(params.zone),
            offer,
            consideration,
            int(params.order_type),
            params.start_time,
            params.end_time,
            hex_to_bytes(params.zone_hash),
            params.salt,
            hex_to_bytes(params.conduit_key),
            params.counter if with_counter else len(consideration),
        )
