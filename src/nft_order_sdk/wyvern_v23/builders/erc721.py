"""ERC721 builders: single token and token list orders."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_utils import to_checksum_address

from ...common.errors import InvalidOrderError, InvalidParamsError
from ...common.merkle import generate_merkle_tree, verify_merkle_proof
from ...common.utils import ZERO_ADDRESS, encode_function_call, function_selector, hex_to_bytes
from ..addresses import MERKLE_VALIDATOR
from ..order import Order
from ..types import HowToCall
from .base import BaseBuilder, BaseBuildParams, OrderInfo, replacement_mask

logger = logging.getLogger(__name__)

TRANSFER_FROM = "transferFrom(address,address,uint256)"
MATCH_ERC721_USING_CRITERIA = (
    "matchERC721UsingCriteria(address,address,address,uint256,bytes32,bytes32[])"
)

# Byte ranges of the ABI-encoded arguments (after the 4 byte selector)
FROM_RANGE = (4, 36)
TO_RANGE = (36, 68)
CRITERIA_TOKEN_ID_RANGE = (100, 132)
CRITERIA_PROOF_START = 228


def _is_zero(address: str) -> bool:
    return address.lower() == ZERO_ADDRESS


def _same(a: str, b: str) -> bool:
    return a.lower() == b.lower()


@dataclass
class SingleTokenBuildParams(BaseBuildParams):
    token_id: Optional[int] = None


class Erc721SingleTokenBuilder(BaseBuilder):
    """Orders on one ERC721 token, transferred by a plain ``transferFrom``.

    Each side leaves the counterparty's address blank (and replaceable) in
    the transfer calldata.
    """

    kind = "erc721-single-token"

    def get_info(self, order: Order) -> Optional[OrderInfo]:
        p = order.params
        if p.how_to_call != HowToCall.CALL:
            return None

        data = hex_to_bytes(p.calldata)
        if len(data) != 100 or data[:4] != function_selector(TRANSFER_FROM):
            return None
        try:
            from_, to, token_id = decode(["address", "address", "uint256"], data[4:])
        except DecodingError:
            return None

        base = self.base_info(order)
        if base["side"] == "sell" and not (_same(from_, p.maker) and _is_zero(to)):
            return None
        if base["side"] == "buy" and not (_is_zero(from_) and _same(to, p.maker)):
            return None

        return OrderInfo(contract=p.target, token_id=token_id, **base)

    def params_from_info(self, order: Order, info: OrderInfo) -> SingleTokenBuildParams:
        return SingleTokenBuildParams(
            **self.base_params_from_info(order, info), token_id=info.token_id
        )

    def build(self, params: SingleTokenBuildParams) -> Order:
        if params.token_id is None:
            raise InvalidParamsError("Missing token_id")

        maker = to_checksum_address(params.maker)
        if params.side == "sell":
            calldata = encode_function_call(TRANSFER_FROM, [maker, ZERO_ADDRESS, params.token_id])
            pattern = replacement_mask(len(calldata), [TO_RANGE])
        else:
            calldata = encode_function_call(TRANSFER_FROM, [ZERO_ADDRESS, maker, params.token_id])
            pattern = replacement_mask(len(calldata), [FROM_RANGE])

        logger.debug(
            "Built %s %s order on %s #%d", self.kind, params.side, params.contract, params.token_id
        )
        return self.build_order(
            params, params.contract, HowToCall.CALL, "0x" + calldata.hex(), pattern
        )

    def build_matching(
        self,
        order: Order,
        taker: str,
        nonce: int = 0,
        listing_time: Optional[int] = None,
        **data,
    ) -> Order:
        """Counter order for ``taker``: a buy for a listing, a sell for a bid.

        Raises:
            InvalidOrderError: If the order is not a single token order
        """
        info = self.get_info(order)
        if info is None:
            raise InvalidOrderError("Not a single token order")

        taker = to_checksum_address(taker)
        if info.side == "sell":
            calldata = encode_function_call(TRANSFER_FROM, [ZERO_ADDRESS, taker, info.token_id])
            pattern = replacement_mask(len(calldata), [FROM_RANGE])
        else:
            calldata = encode_function_call(TRANSFER_FROM, [taker, ZERO_ADDRESS, info.token_id])
            pattern = replacement_mask(len(calldata), [TO_RANGE])

        return self.build_counter_order(
            order, taker, "0x" + calldata.hex(), pattern, nonce=nonce, listing_time=listing_time
        )


@dataclass
class TokenListBuildParams(BaseBuildParams):
    token_ids: List[int] = field(default_factory=list)
    merkle_root: Optional[str] = None
    """Precomputed commitment, used with merkle_depth instead of token_ids."""

    merkle_depth: Optional[int] = None


class Erc721TokenListBuilder(BaseBuilder):
    """Bids on any token of a committed list.

    The seller's proxy delegatecalls the merkle validator, which checks the
    inclusion proof before transferring the token. The bid fixes the merkle
    root and leaves the seller, the token id and the proof replaceable.
    """

    kind = "erc721-token-list"

    def get_info(self, order: Order) -> Optional[OrderInfo]:
        """Info of a bid, or of the sell order filling one.

        A sell order names the token it sells and carries the proof for it.
        """
        p = order.params
        if not _same(p.target, MERKLE_VALIDATOR[self.chain_id]):
            return None
        if p.how_to_call != HowToCall.DELEGATE_CALL:
            return None

        data = hex_to_bytes(p.calldata)
        if data[:4] != function_selector(MATCH_ERC721_USING_CRITERIA):
            return None
        try:
            from_, to, token, token_id, root, proof = decode(
                ["address", "address", "address", "uint256", "bytes32", "bytes32[]"], data[4:]
            )
        except DecodingError:
            return None

        base = self.base_info(order)
        merkle_root = "0x" + root.hex()
        if base["side"] == "sell":
            if not (_same(from_, p.maker) and _is_zero(to)):
                return None
            merkle_proof = ["0x" + node.hex() for node in proof]
            if not verify_merkle_proof(merkle_root, token_id, merkle_proof):
                return None
            return OrderInfo(
                contract=to_checksum_address(token),
                token_id=token_id,
                merkle_root=merkle_root,
                merkle_depth=len(proof),
                merkle_proof=merkle_proof,
                **base,
            )

        if not (_is_zero(from_) and _same(to, p.maker)) or token_id != 0:
            return None
        if any(node != b"\x00" * 32 for node in proof):
            return None

        return OrderInfo(
            contract=to_checksum_address(token),
            merkle_root=merkle_root,
            merkle_depth=len(proof),
            **base,
        )

    def is_valid(self, order: Order) -> bool:
        """Rebuild bids from their info. Compare sell orders with the shape ``build_matching`` gives.

        A sell order cannot be rebuilt without the bid it fills.
        """
        info = self.get_info(order)
        if info is None or info.side == "buy":
            return super().is_valid(order)

        p = order.params
        calldata = self._sell_calldata(
            p.maker, info.contract, info.token_id, info.merkle_root, info.merkle_proof
        )
        return (
            hex_to_bytes(p.calldata) == calldata
            and hex_to_bytes(p.replacement_pattern)
            == hex_to_bytes(replacement_mask(len(calldata), [TO_RANGE]))
            and _is_zero(p.static_target)
            and hex_to_bytes(p.static_extradata) == b""
        )

    def params_from_info(self, order: Order, info: OrderInfo) -> TokenListBuildParams:
        return TokenListBuildParams(
            **self.base_params_from_info(order, info),
            merkle_root=info.merkle_root,
            merkle_depth=info.merkle_depth,
        )

    def build(self, params: TokenListBuildParams) -> Order:
        """Build an unsigned bid on any token of ``params.token_ids``.

        Raises:
            InvalidParamsError: For sell orders or an empty token list
        """
        if params.side != "buy":
            raise InvalidParamsError("Token list orders can only be bids")

        if params.merkle_root is not None:
            if params.merkle_depth is None:
                raise InvalidParamsError("merkle_depth is required with merkle_root")
            root, depth = params.merkle_root, params.merkle_depth
        else:
            tree = generate_merkle_tree(params.token_ids)
            root, depth = tree.root, tree.depth

        calldata = encode_function_call(
            MATCH_ERC721_USING_CRITERIA,
            [
                ZERO_ADDRESS,
                to_checksum_address(params.maker),
                to_checksum_address(params.contract),
                0,
                hex_to_bytes(root),
                [b"\x00" * 32] * depth,
            ],
        )
        pattern = replacement_mask(
            len(calldata),
            [
                FROM_RANGE,
                CRITERIA_TOKEN_ID_RANGE,
                (CRITERIA_PROOF_START, CRITERIA_PROOF_START + 32 * depth),
            ],
        )

        logger.debug("Built %s order on %s with merkle root %s", self.kind, params.contract, root)
        return self.build_order(
            params,
            MERKLE_VALIDATOR[self.chain_id],
            HowToCall.DELEGATE_CALL,
            "0x" + calldata.hex(),
            pattern,
        )

    def build_matching(
        self,
        order: Order,
        taker: str,
        token_id: Optional[int] = None,
        token_ids: Optional[List[int]] = None,
        nonce: int = 0,
        listing_time: Optional[int] = None,
        **data,
    ) -> Order:
        """Sell order for ``taker`` proving ``token_id`` belongs to the bid's list.

        Args:
            order: Token list bid
            taker: Seller address
            token_id: Token being sold
            token_ids: Full list the bid was built over
            nonce: Seller's exchange nonce
            listing_time: Listing time of the sell order (default: now minus the offset)

        Raises:
            InvalidOrderError: If the order is not a token list bid
            InvalidParamsError: If the list does not match the bid or lacks the token
        """
        info = self.get_info(order)
        if info is None or info.side != "buy":
            raise InvalidOrderError("Not a token list bid")
        if token_id is None or not token_ids:
            raise InvalidParamsError("Matching requires token_id and token_ids")

        tree = generate_merkle_tree(token_ids)
        if tree.root != info.merkle_root or tree.depth != info.merkle_depth:
            raise InvalidParamsError("Token list does not match the order's merkle root")

        taker = to_checksum_address(taker)
        calldata = self._sell_calldata(
            taker, info.contract, token_id, info.merkle_root, tree.get_proof(token_id)
        )
        pattern = replacement_mask(len(calldata), [TO_RANGE])

        return self.build_counter_order(
            order, taker, "0x" + calldata.hex(), pattern, nonce=nonce, listing_time=listing_time
        )

    @staticmethod
    def _sell_calldata(
        seller: str, contract: str, token_id: int, merkle_root: str, proof: List[str]
    ) -> bytes:
        return encode_function_call(
            MATCH_ERC721_USING_CRITERIA,
            [
                to_checksum_address(seller),
                ZERO_ADDRESS,
                to_checksum_address(contract),
                token_id,
                hex_to_bytes(merkle_root),
                [hex_to_bytes(node) for node in proof],
            ],
        )
