"""Orders on one specific token."""

import logging
from dataclasses import dataclass
from typing import Optional

from eth_utils import to_checksum_address

from ...common.errors import InvalidParamsError
from ...common.utils import bn
from ..order import Order
from ..types import ConsiderationItem, ItemType, MatchParams, OfferItem, OrderComponents
from .base import BaseBuilder, BaseBuildParams, BaseOrderInfo

logger = logging.getLogger(__name__)

NFT_ITEM_TYPES = {"erc721": ItemType.ERC721, "erc1155": ItemType.ERC1155}


@dataclass
class SingleTokenBuildParams(BaseBuildParams):
    token_id: Optional[int] = None


class SingleTokenBuilder(BaseBuilder):
    """Listings and offers on a single token id.

    Sell orders offer the NFT and ask for the price split between the offerer
    and the fee recipients. Buy orders offer the full price in an ERC20 and
    ask for the NFT, with the fees paid out of the offered amount.
    """

    kind = "single-token"

    def get_info(self, order: Order) -> Optional[BaseOrderInfo]:
        side, is_dynamic = self.get_base_info(order)
        params = order.params
        offerer = params.offerer.lower()

        if side == "sell":
            nft = params.offer[0]
            payment = params.consideration[0]
            if payment.item_type not in (ItemType.NATIVE, ItemType.ERC20):
                return None
            if payment.recipient.lower() != offerer:
                return None
            fee_items = params.consideration[1:]
            if any(
                item.item_type != payment.item_type or item.token.lower() != payment.token.lower()
                for item in fee_items
            ):
                return None

            price = sum(item.start_amount for item in params.consideration)
            end_price = sum(item.end_amount for item in params.consideration)
            payment_token = payment.token
        else:
            payment = params.offer[0]
            nft = params.consideration[0]
            if nft.recipient.lower() != offerer:
                return None
            fee_items = params.consideration[1:]
            if any(
                item.item_type != ItemType.ERC20 or item.token.lower() != payment.token.lower()
                for item in fee_items
            ):
                return None

            price = payment.start_amount
            end_price = payment.end_amount
            payment_token = payment.token

        if nft.item_type == ItemType.ERC721:
            token_kind = "erc721"
        elif nft.item_type == ItemType.ERC1155:
            token_kind = "erc1155"
        else:
            return None

        return BaseOrderInfo(
            token_kind=token_kind,
            side=side,
            contract=nft.token,
            token_id=nft.identifier_or_criteria,
            amount=nft.start_amount,
            payment_token=payment_token,
            price=price,
            end_price=end_price,
            fees=self.fees_from_items(fee_items),
            is_dynamic=is_dynamic,
        )

    def params_from_info(self, order: Order, info: BaseOrderInfo) -> SingleTokenBuildParams:
        return SingleTokenBuildParams(
            **self.base_params_from_info(order, info), token_id=info.token_id
        )

    def build(self, params: SingleTokenBuildParams) -> Order:
        """Build an unsigned order on ``params.token_id``.

        Raises:
            InvalidParamsError: If the token id is missing, an erc721 amount is
                not 1, fees exceed the price or a buy order pays in the native currency
        """
        if params.token_id is None:
            raise InvalidParamsError("Missing token_id")

        params = self.default_initialize(params)
        total_fees = self.check_fees(params)
        if params.token_kind == "erc721" and params.amount != 1:
            raise InvalidParamsError("erc721 orders must have an amount of 1")

        token_id = bn(params.token_id)
        nft_type = NFT_ITEM_TYPES[params.token_kind]
        offerer = to_checksum_address(params.offerer)

        if params.side == "sell":
            payment_type = self.payment_item_type(params.payment_token)
            fee_items = self.fee_items(params)
            offer = [
                OfferItem(
                    item_type=nft_type,
                    token=params.contract,
                    identifier_or_criteria=token_id,
                    start_amount=params.amount,
                    end_amount=params.amount,
                )
            ]
            consideration = [
                ConsiderationItem(
                    item_type=payment_type,
                    token=params.payment_token,
                    identifier_or_criteria=0,
                    start_amount=params.price - total_fees,
                    end_amount=params.end_price - sum(item.end_amount for item in fee_items),
                    recipient=offerer,
                ),
                *fee_items,
            ]
        elif params.side == "buy":
            if self.payment_item_type(params.payment_token) != ItemType.ERC20:
                raise InvalidParamsError("Buy orders must be paid in an ERC20 token")
            offer = [
                OfferItem(
                    item_type=ItemType.ERC20,
                    token=params.payment_token,
                    identifier_or_criteria=0,
                    start_amount=params.price,
                    end_amount=params.end_price,
                )
            ]
            consideration = [
                ConsiderationItem(
                    item_type=nft_type,
                    token=params.contract,
                    identifier_or_criteria=token_id,
                    start_amount=params.amount,
                    end_amount=params.amount,
                    recipient=offerer,
                ),
                *self.fee_items(params),
            ]
        else:
            raise InvalidParamsError(f"Invalid side: {params.side}")

        logger.debug("Built %s %s order on %s #%d", self.kind, params.side, params.contract, token_id)

        return Order(
            self.chain_id,
            OrderComponents(
                offerer=offerer,
                zone=params.zone,
                offer=offer,
                consideration=consideration,
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

    def build_matching(self, order: Order, amount: Optional[int] = None, **data) -> MatchParams:
        """Single token orders need no criteria, only an optional fill amount."""
        return MatchParams(amount=amount)
