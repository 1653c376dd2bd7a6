"""Seaport orders: EIP-712 hashing, signing and validity checks."""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from eth_account import Account
from eth_account.messages import SignableMessage, encode_typed_data
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address

from ..common.addresses import ensure_supported_chain
from ..common.errors import FillabilityError, InvalidOrderError, InvalidSignatureError
from ..common.helpers import Erc20, Erc721, Erc1155
from ..common.provider import ChainProvider
from ..common.utils import HASH_ZERO, hex_to_bytes
from .addresses import CONDUIT_CONTROLLER, EXCHANGE
from .types import ORDER_EIP712_TYPES, MatchParams, OrderComponents

if TYPE_CHECKING:
    from .builders import BaseBuilder, BaseOrderInfo

logger = logging.getLogger(__name__)

EIP712_DOMAIN_TYPE = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]


class Order:
    """A Seaport order together with the chain it lives on.

    Args:
        chain_id: Chain id (1 or 4)
        params: Order components
        kind: Builder kind tag, detected from the components when omitted
    """

    def __init__(self, chain_id: int, params: OrderComponents, kind: Optional[str] = None):
        self.chain_id = ensure_supported_chain(chain_id)
        self.params = params
        self.kind = kind

    @property
    def exchange(self) -> str:
        return EXCHANGE[self.chain_id]

    def eip712_domain(self) -> Dict[str, Any]:
        return {
            "name": "Seaport",
            "version": "1.1",
            "chainId": self.chain_id,
            "verifyingContract": to_checksum_address(self.exchange),
        }

    def to_message(self) -> Dict[str, Any]:
        """Order components in their EIP-712 message form."""
        params = self.params
        return {
            "offerer": to_checksum_address(params.offerer),
            "zone": to_checksum_address(params.zone),
            "offer": [
                {
                    "itemType": int(item.item_type),
                    "token": to_checksum_address(item.token),
                    "identifierOrCriteria": item.identifier_or_criteria,
                    "startAmount": item.start_amount,
                    "endAmount": item.end_amount,
                }
                for item in params.offer
            ],
            "consideration": [
                {
                    "itemType": int(item.item_type),
                    "token": to_checksum_address(item.token),
                    "identifierOrCriteria": item.identifier_or_criteria,
                    "startAmount": item.start_amount,
                    "endAmount": item.end_amount,
                    "recipient": to_checksum_address(item.recipient),
                }
                for item in params.consideration
            ],
            "orderType": int(params.order_type),
            "startTime": params.start_time,
            "endTime": params.end_time,
            "zoneHash": params.zone_hash,
            "salt": params.salt,
            "conduitKey": params.conduit_key,
            "counter": params.counter,
        }

    def signable_message(self) -> SignableMessage:
        return encode_typed_data(
            full_message={
                "types": {"EIP712Domain": EIP712_DOMAIN_TYPE, **ORDER_EIP712_TYPES},
                "primaryType": "OrderComponents",
                "domain": self.eip712_domain(),
                "message": self.to_message(),
            }
        )

    def hash(self) -> str:
        """Seaport order hash (EIP-712 struct hash of the order components)."""
        return "0x" + bytes(self.signable_message().body).hex()

    def sign(self, signer: LocalAccount) -> str:
        """Sign the order with EIP-712 and store the signature.

        Returns:
            The signature as 0x-prefixed hex
        """
        signed_message = signer.sign_typed_data(
            domain_data=self.eip712_domain(),
            message_types=ORDER_EIP712_TYPES,
            message_data=self.to_message(),
        )
        self.params.signature = "0x" + bytes(signed_message.signature).hex()
        logger.debug("Signed order %s as %s", self.hash(), signer.address)
        return self.params.signature

    def check_signature(self) -> None:
        """Make sure the order is signed by its offerer.

        Raises:
            InvalidSignatureError: If unsigned or signed by anyone else
        """
        signature = self.params.signature
        if not signature or signature == HASH_ZERO:
            raise InvalidSignatureError("Order is not signed")

        try:
            recovered = Account.recover_message(
                self.signable_message(), signature=hex_to_bytes(signature)
            )
        except Exception as exc:
            raise InvalidSignatureError(f"Invalid signature: {exc}") from exc

        if recovered.lower() != self.params.offerer.lower():
            raise InvalidSignatureError("Signature does not match the offerer")

    def _get_builder(self) -> "BaseBuilder":
        from .builders import detect_kind, get_builder

        if self.kind is None:
            self.kind = detect_kind(self)
        return get_builder(self.kind, self.chain_id)

    def get_info(self) -> Optional["BaseOrderInfo"]:
        return self._get_builder().get_info(self)

    def check_validity(self) -> None:
        """Raise if the order is not well formed for its kind.

        Raises:
            InvalidOrderError: If the order cannot be rebuilt from its own info
        """
        if not self._get_builder().is_valid(self):
            raise InvalidOrderError("Invalid order")

    def build_matching(self, **data: Any) -> MatchParams:
        return self._get_builder().build_matching(self, **data)

    async def _get_operator(self, provider: ChainProvider) -> str:
        """Address that transfers the offerer's items: the exchange or a conduit."""
        if int(self.params.conduit_key, 16) == 0:
            return self.exchange

        conduit, exists = await provider.call(
            CONDUIT_CONTROLLER[self.chain_id],
            "getConduit(bytes32) returns (address,bool)",
            [hex_to_bytes(self.params.conduit_key)],
        )
        if not exists:
            raise FillabilityError("invalid-conduit", "Conduit key does not map to a conduit")
        return conduit

    async def check_fillability(self, provider: ChainProvider) -> None:
        """Check on-chain that the order can currently be filled.

        Raises:
            FillabilityError: With the first failing reason
        """
        from .exchange import Exchange

        try:
            await self._check_fillability(provider, Exchange(self.chain_id))
        except FillabilityError as exc:
            logger.warning("Order %s is not fillable: %s", self.hash(), exc.reason)
            raise

    async def _check_fillability(self, provider: ChainProvider, exchange: Any) -> None:
        params = self.params

        counter = await exchange.get_counter(provider, params.offerer)
        if counter != params.counter:
            raise FillabilityError("invalid-nonce", "Order counter is outdated")

        _, is_cancelled, total_filled, total_size = await provider.call(
            self.exchange,
            "getOrderStatus(bytes32) returns (bool,bool,uint256,uint256)",
            [hex_to_bytes(self.hash())],
        )
        if is_cancelled:
            raise FillabilityError("cancelled")
        if total_size > 0 and total_filled >= total_size:
            raise FillabilityError("filled")

        # An end time of 0 is the unset sentinel and never expires here
        if params.end_time and params.end_time <= await provider.get_block_timestamp():
            raise FillabilityError("expired")

        info = self.get_info()
        if info is None:
            raise InvalidOrderError("Unrecognized order")
        operator = await self._get_operator(provider)

        if info.side == "buy":
            erc20 = Erc20(provider, info.payment_token)
            if await erc20.get_balance(params.offerer) < info.price:
                raise FillabilityError("no-balance")
            if await erc20.get_allowance(params.offerer, operator) < info.price:
                raise FillabilityError("no-approval")
        elif info.token_kind == "erc721":
            erc721 = Erc721(provider, info.contract)
            if (await erc721.get_owner(info.token_id)).lower() != params.offerer.lower():
                raise FillabilityError("no-balance")
            if not await erc721.is_approved(params.offerer, operator):
                raise FillabilityError("no-approval")
        else:
            erc1155 = Erc1155(provider, info.contract)
            if await erc1155.get_balance(params.offerer, info.token_id) < info.amount:
                raise FillabilityError("no-balance")
            if not await erc1155.is_approved(params.offerer, operator):
                raise FillabilityError("no-approval")
