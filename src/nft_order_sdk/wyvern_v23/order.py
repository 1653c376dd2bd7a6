"""Wyvern v2.3 orders: hashing, signing and validity checks."""

import logging
from typing import TYPE_CHECKING, Any, Optional

from eth_abi.packed import encode_packed
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from eth_utils import keccak, to_checksum_address

from ..common.addresses import ensure_supported_chain
from ..common.errors import FillabilityError, InvalidOrderError, InvalidSignatureError
from ..common.helpers import Erc20, Erc721
from ..common.provider import ChainProvider
from ..common.utils import HASH_ZERO, ZERO_ADDRESS, hex_to_bytes, to_bytes32_hex
from .addresses import TOKEN_TRANSFER_PROXY
from .types import OrderParams, OrderSide

if TYPE_CHECKING:
    from .builders import BaseBuilder, OrderInfo

logger = logging.getLogger(__name__)

# Field layout of ExchangeCore.hashOrder
ORDER_HASH_TYPES = [
    "address",  # exchange
    "address",  # maker
    "address",  # taker
    "uint256",  # makerRelayerFee
    "uint256",  # takerRelayerFee
    "uint256",  # makerProtocolFee
    "uint256",  # takerProtocolFee
    "address",  # feeRecipient
    "uint8",  # feeMethod
    "uint8",  # side
    "uint8",  # saleKind
    "address",  # target
    "uint8",  # howToCall
    "bytes",  # calldata
    "bytes",  # replacementPattern
    "address",  # staticTarget
    "bytes",  # staticExtradata
    "address",  # paymentToken
    "uint256",  # basePrice
    "uint256",  # extra
    "uint256",  # listingTime
    "uint256",  # expirationTime
    "uint256",  # salt
    "uint256",  # nonce
]


class Order:
    """A Wyvern v2.3 order together with the chain it lives on.

    Args:
        chain_id: Chain id (1 or 4)
        params: Order fields
        kind: Builder kind tag, detected from the fields when omitted
    """

    def __init__(self, chain_id: int, params: OrderParams, kind: Optional[str] = None):
        self.chain_id = ensure_supported_chain(chain_id)
        self.params = params
        self.kind = kind

    def hash(self) -> str:
        """Order hash as computed by the exchange."""
        p = self.params
        packed = encode_packed(
            ORDER_HASH_TYPES,
            [
                to_checksum_address(p.exchange),
                to_checksum_address(p.maker),
                to_checksum_address(p.taker),
                p.maker_relayer_fee,
                p.taker_relayer_fee,
                p.maker_protocol_fee,
                p.taker_protocol_fee,
                to_checksum_address(p.fee_recipient),
                int(p.fee_method),
                int(p.side),
                int(p.sale_kind),
                to_checksum_address(p.target),
                int(p.how_to_call),
                hex_to_bytes(p.calldata),
                hex_to_bytes(p.replacement_pattern),
                to_checksum_address(p.static_target),
                hex_to_bytes(p.static_extradata),
                to_checksum_address(p.payment_token),
                p.base_price,
                p.extra,
                p.listing_time,
                p.expiration_time,
                p.salt,
                p.nonce,
            ],
        )
        return "0x" + keccak(packed).hex()

    def prefix_hash(self) -> str:
        """Hash the maker signs ("\\x19Ethereum Signed Message:\\n32" + order hash).

        The exchange also keys cancellations and fills by this hash.
        """
        return "0x" + keccak(b"\x19Ethereum Signed Message:\n32" + hex_to_bytes(self.hash())).hex()

    def sign(self, signer: LocalAccount) -> None:
        """Sign the order hash as a personal message and store v, r and s."""
        signed = signer.sign_message(encode_defunct(primitive=hex_to_bytes(self.hash())))
        self.params.v = signed.v
        self.params.r = to_bytes32_hex(signed.r)
        self.params.s = to_bytes32_hex(signed.s)
        logger.debug("Signed order %s as %s", self.hash(), signer.address)

    def check_signature(self) -> None:
        """Make sure the order is signed by its maker.

        Raises:
            InvalidSignatureError: If unsigned or signed by anyone else
        """
        if self.params.v == 0 and self.params.r == HASH_ZERO and self.params.s == HASH_ZERO:
            raise InvalidSignatureError("Order is not signed")

        try:
            recovered = Account.recover_message(
                encode_defunct(primitive=hex_to_bytes(self.hash())),
                vrs=(self.params.v, int(self.params.r, 16), int(self.params.s, 16)),
            )
        except Exception as exc:
            raise InvalidSignatureError(f"Invalid signature: {exc}") from exc

        if recovered.lower() != self.params.maker.lower():
            raise InvalidSignatureError("Signature does not match the maker")

    def _get_builder(self) -> "BaseBuilder":
        from .builders import detect_kind, get_builder

        if self.kind is None:
            self.kind = detect_kind(self)
        return get_builder(self.kind, self.chain_id)

    def get_info(self) -> Optional["OrderInfo"]:
        return self._get_builder().get_info(self)

    def check_validity(self) -> None:
        """Raise if the order is not well formed for its kind.

        Raises:
            InvalidOrderError: If the order cannot be rebuilt from its own info
        """
        if not self._get_builder().is_valid(self):
            raise InvalidOrderError("Invalid order")

    def build_matching(self, taker: str, **data: Any) -> "Order":
        """Counter order that ``taker`` submits to settle this order."""
        return self._get_builder().build_matching(self, taker, **data)

    async def check_fillability(self, provider: ChainProvider) -> None:
        """Check on-chain that the order can currently be filled.

        Raises:
            FillabilityError: With the first failing reason
        """
        try:
            await self._check_fillability(provider)
        except FillabilityError as exc:
            logger.warning("Order %s is not fillable: %s", self.hash(), exc.reason)
            raise

    async def _check_fillability(self, provider: ChainProvider) -> None:
        from .exchange import Exchange
        from .helpers import ProxyRegistry

        params = self.params
        exchange = Exchange(self.chain_id)

        if await exchange.get_nonce(provider, params.maker) != params.nonce:
            raise FillabilityError("invalid-nonce", "Order nonce is outdated")

        if await provider.call(
            exchange.address,
            "cancelledOrFinalized(bytes32) returns (bool)",
            [hex_to_bytes(self.prefix_hash())],
        ):
            raise FillabilityError("cancelled", "Order is cancelled or already filled")

        if params.expiration_time and params.expiration_time <= await provider.get_block_timestamp():
            raise FillabilityError("expired")

        if params.side == OrderSide.BUY:
            payment_token = Erc20(provider, params.payment_token)
            if await payment_token.get_balance(params.maker) < params.base_price:
                raise FillabilityError("no-balance")
            allowance = await payment_token.get_allowance(
                params.maker, TOKEN_TRANSFER_PROXY[self.chain_id]
            )
            if allowance < params.base_price:
                raise FillabilityError("no-approval")
            return

        info = self.get_info()
        if info is None or info.token_id is None:
            raise InvalidOrderError("Unrecognized order")

        proxy = await ProxyRegistry(provider, self.chain_id).get_proxy(params.maker)
        if proxy.lower() == ZERO_ADDRESS:
            raise FillabilityError("no-proxy")

        nft = Erc721(provider, info.contract)
        if (await nft.get_owner(info.token_id)).lower() != params.maker.lower():
            raise FillabilityError("no-balance")
        if not await nft.is_approved(params.maker, proxy):
            raise FillabilityError("no-approval")
