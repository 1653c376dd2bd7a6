"""Buy orders on any token out of a committed list of token ids."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from eth_utils import to_checksum_address

from ...common.errors import InvalidOrderError, InvalidParamsError
from ...common.merkle import generate_merkle_tree
from ...common.utils import bn, to_bytes32_hex
from ..order import Order
from ..types import (
    ConsiderationItem,
    CriteriaResolver,
    ItemType,
    MatchParams,
    OfferItem,
    OrderComponents,
    Side,
)
from .base import BaseBuilder, BaseBuildParams, BaseOrderInfo

logger = logging.getLogger(__name__)

CRITERIA_ITEM_TYPES = {
    "erc721": ItemType.ERC721_WITH_CRITERIA,
    "erc1155": ItemType.ERC1155_WITH_CRITERIA,
}


@dataclass
class TokenListBuildParams(BaseBuildParams):
    token_ids: List[int] = field(default_factory=list)
    merkle_root: Optional[str] = None
    """Precomputed commitment, used instead of token_ids when given."""


class TokenListBuilder(BaseBuilder):
    """Offers that accept any token from a list.

    The list is committed to with a merkle root placed in the criteria of the
    NFT consideration item. Whoever fills the order picks a token and proves
    its inclusion through a criteria resolver.
    """

    kind = "token-list"

    def get_info(self, order: Order) -> Optional[BaseOrderInfo]:
        side, is_dynamic = self.get_base_info(order)
        if side != "buy":
            return None

        params = order.params
        payment = params.offer[0]
        nft = params.consideration[0]
        if nft.item_type == ItemType.ERC721_WITH_CRITERIA:
            token_kind = "erc721"
        elif nft.item_type == ItemType.ERC1155_WITH_CRITERIA:
            token_kind = "erc1155"
        else:
            return None
        if nft.recipient.lower() != params.offerer.lower():
            return None

        fee_items = params.consideration[1:]
        if any(
            item.item_type != ItemType.ERC20 or item.token.lower() != payment.token.lower()
            for item in fee_items
        ):
            return None

        return BaseOrderInfo(
            token_kind=token_kind,
            side=side,
            contract=nft.token,
            merkle_root=to_bytes32_hex(nft.identifier_or_criteria),
            amount=nft.start_amount,
            payment_token=payment.token,
            price=payment.start_amount,
            end_price=payment.end_amount,
            fees=self.fees_from_items(fee_items),
            is_dynamic=is_dynamic,
        )

    def params_from_info(self, order: Order, info: BaseOrderInfo) -> TokenListBuildParams:
        return TokenListBuildParams(
            **self.base_params_from_info(order, info), merkle_root=info.merkle_root
        )

    def build(self, params: TokenListBuildParams) -> Order:
        """Build an unsigned buy order on any token of ``params.token_ids``.

        Raises:
            InvalidParamsError: For sell orders, an empty token list or invalid fees
        """
        if params.side != "buy":
            raise InvalidParamsError("Token list orders can only be bids")

        params = self.default_initialize(params)
        self.check_fees(params)
        if self.payment_item_type(params.payment_token) != ItemType.ERC20:
            raise InvalidParamsError("Buy orders must be paid in an ERC20 token")

        merkle_root = params.merkle_root or generate_merkle_tree(params.token_ids).root
        offerer = to_checksum_address(params.offerer)

        logger.debug(
            "Built %s order on %s with merkle root %s", self.kind, params.contract, merkle_root
        )

        return Order(
            self.chain_id,
            OrderComponents(
                offerer=offerer,
                zone=params.zone,
                offer=[
                    OfferItem(
                        item_type=ItemType.ERC20,
                        token=params.payment_token,
                        identifier_or_criteria=0,
                        start_amount=params.price,
                        end_amount=params.end_price,
                    )
                ],
                consideration=[
                    ConsiderationItem(
                        item_type=CRITERIA_ITEM_TYPES[params.token_kind],
                        token=params.contract,
                        identifier_or_criteria=bn(merkle_root),
                        start_amount=params.amount,
                        end_amount=params.amount,
                        recipient=offerer,
                    ),
                    *self.fee_items(params),
                ],
                order_type=params.order_type,
                start_time=params.start_time,
                end_time=params.end_time,
                zone_hash=params.zone_hash,
                salt=params.salt,
                conduit_key=params.conduit_key,
                counter=params.counter,
                signature=params.signature,
            ),
            kind=self.kind,
        )

    def build_matching(
        self,
        order: Order,
        token_id: Optional[int] = None,
        token_ids: Optional[List[int]] = None,
        amount: Optional[int] = None,
        **data,
    ) -> MatchParams:
        """Criteria resolver proving ``token_id`` is part of the committed list.

        Args:
            order: Token list order to fill
            token_id: Token the taker sells into the order
            token_ids: Full list the order was built over
            amount: Optional fill amount for erc1155 orders

        Raises:
            InvalidOrderError: If the order is not a token list order
            InvalidParamsError: If the list does not match the order's root or
                does not contain the token
        """
        info = self.get_info(order)
        if info is None:
            raise InvalidOrderError("Not a token list order")
        if token_id is None or not token_ids:
            raise InvalidParamsError("Matching requires token_id and token_ids")

        tree = generate_merkle_tree(token_ids)
        if tree.root != info.merkle_root:
            raise InvalidParamsError("Token list does not match the order's merkle root")

        return MatchParams(
            amount=amount,
            criteria_resolvers=[
                CriteriaResolver(
                    order_index=0,
                    side=Side.CONSIDERATION,
                    index=0,
                    identifier=bn(token_id),
                    criteria_proof=tree.get_proof(token_id),
                )
            ],
        )
