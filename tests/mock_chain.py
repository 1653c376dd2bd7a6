"""In-memory chain for exercising order lifecycles in tests.

``MockChain`` implements the ``ChainProvider`` protocol by dispatching the
function name of each call to a Python object deployed at the target
address. Transactions advance the block timestamp by one second.
"""

from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Sequence, Set

from eth_abi import decode, encode
from eth_abi.packed import encode_packed
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import keccak, to_checksum_address

from nft_order_sdk.common.addresses import WETH
from nft_order_sdk.common.utils import ZERO_ADDRESS, get_current_timestamp
from nft_order_sdk.seaport import (
    Addresses as SeaportAddresses,
    ConsiderationItem,
    ItemType,
    OfferItem,
    Order as SeaportOrder,
    OrderComponents,
    OrderType,
)
from nft_order_sdk.wyvern_v23 import Addresses as WyvernAddresses
from nft_order_sdk.wyvern_v23.builders.erc721 import MATCH_ERC721_USING_CRITERIA, TRANSFER_FROM


class Revert(Exception):
    """A mock contract call reverted."""


@dataclass
class Tx:
    sender: str
    value: int = 0


def _key(address: str) -> str:
    return address.lower()


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise Revert(message)


def _hex(value) -> str:
    return ("0x" + value.hex() if isinstance(value, bytes) else value).lower()


class MockChain:
    def __init__(self, chain_id: int = 1, timestamp: Optional[int] = None):
        self.chain_id = chain_id
        self.timestamp = timestamp if timestamp is not None else get_current_timestamp()
        self.contracts: Dict[str, Any] = {}
        self.transactions: List[Dict[str, Any]] = []

    def deploy(self, address: str, contract: Any) -> Any:
        contract.chain = self
        contract.address = to_checksum_address(address)
        self.contracts[_key(address)] = contract
        return contract

    def at(self, address: str) -> Any:
        contract = self.contracts.get(_key(address))
        _require(contract is not None, f"No contract at {address}")
        return contract

    async def get_block_timestamp(self) -> int:
        return self.timestamp

    async def call(self, to: str, signature: str, args: Sequence[Any]) -> Any:
        return getattr(self.at(to), signature.split("(")[0])(*args)

    async def send_transaction(self, signer, to, signature, args, value=0) -> Dict[str, Any]:
        method = signature.split("(")[0]
        # Each transaction is mined in a new block
        self.timestamp += 1
        getattr(self.at(to), method)(Tx(signer.address, value), *args)

        receipt = {
            "status": 1,
            "from": signer.address,
            "to": to_checksum_address(to),
            "method": method,
            "args": list(args),
            "value": value,
        }
        self.transactions.append(receipt)
        return receipt


class MockWeth:
    def __init__(self):
        self.balances: Dict[str, int] = {}
        self.allowances: Dict[str, Dict[str, int]] = {}

    def deposit(self, tx: Tx):
        self.balances[_key(tx.sender)] = self.balances.get(_key(tx.sender), 0) + tx.value

    def approve(self, tx: Tx, spender: str, amount: int):
        self.allowances.setdefault(_key(tx.sender), {})[_key(spender)] = amount

    def balanceOf(self, owner: str) -> int:
        return self.balances.get(_key(owner), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get(_key(owner), {}).get(_key(spender), 0)

    def transfer_from(self, operator: str, src: str, dst: str, amount: int):
        if _key(operator) != _key(src):
            _require(self.allowance(src, operator) >= amount, "Insufficient allowance")
            self.allowances[_key(src)][_key(operator)] -= amount
        _require(self.balanceOf(src) >= amount, "Insufficient balance")
        self.balances[_key(src)] = self.balanceOf(src) - amount
        self.balances[_key(dst)] = self.balanceOf(dst) + amount


class MockErc721:
    def __init__(self):
        self.owners: Dict[int, str] = {}
        self.operators: Dict[str, Set[str]] = {}

    def mint(self, tx: Tx, token_id: int):
        _require(token_id not in self.owners, "Already minted")
        self.owners[token_id] = to_checksum_address(tx.sender)

    def ownerOf(self, token_id: int) -> str:
        _require(token_id in self.owners, "Nonexistent token")
        return self.owners[token_id]

    def setApprovalForAll(self, tx: Tx, operator: str, approved: bool):
        operators = self.operators.setdefault(_key(tx.sender), set())
        if approved:
            operators.add(_key(operator))
        else:
            operators.discard(_key(operator))

    def isApprovedForAll(self, owner: str, operator: str) -> bool:
        return _key(operator) in self.operators.get(_key(owner), set())

    def transferFrom(self, tx: Tx, src: str, dst: str, token_id: int):
        self.transfer(tx.sender, src, dst, token_id)

    def transfer(self, operator: str, src: str, dst: str, token_id: int):
        owner = self.ownerOf(token_id)
        _require(_key(owner) == _key(src), "Not the owner")
        _require(
            _key(operator) == _key(owner) or self.isApprovedForAll(owner, operator),
            "Not approved",
        )
        _require(_key(dst) != ZERO_ADDRESS, "Transfer to the zero address")
        self.owners[token_id] = to_checksum_address(dst)


class MockProxyRegistry:
    def __init__(self):
        self.proxies_by_owner: Dict[str, str] = {}

    def registerProxy(self, tx: Tx):
        _require(_key(tx.sender) not in self.proxies_by_owner, "Proxy already registered")
        proxy = to_checksum_address(keccak(b"proxy" + bytes.fromhex(tx.sender[2:]))[-20:])
        self.proxies_by_owner[_key(tx.sender)] = proxy

    def proxies(self, owner: str) -> str:
        return self.proxies_by_owner.get(_key(owner), ZERO_ADDRESS)


class MockWyvernExchange:
    """Settles matched Wyvern orders against the mock token contracts.

    Orders are kept as the flat ABI arguments the exchange receives and
    checked the way ``ExchangeCore.atomicMatch`` does.
    """

    def __init__(self):
        self.nonce_by_maker: Dict[str, int] = {}
        self.finalized: Set[str] = set()
        self.executed_calldata: Optional[bytes] = None

    def nonces(self, owner: str) -> int:
        return self.nonce_by_maker.get(_key(owner), 0)

    def cancelledOrFinalized(self, order_hash) -> bool:
        return _hex(order_hash) in self.finalized

    def incrementNonce(self, tx: Tx):
        self.nonce_by_maker[_key(tx.sender)] = self.nonces(tx.sender) + 1

    def cancelOrder_(self, tx: Tx, addrs, uints, fee_method, side, sale_kind, how_to_call,
                     calldata, replacement_pattern, static_extradata, v, r, s):
        order = _unpack(
            addrs, uints, [fee_method, side, sale_kind, how_to_call],
            calldata, replacement_pattern, static_extradata,
        )
        _require(_key(order.maker) == _key(tx.sender), "Not the maker")
        self.finalized.add(self._hash_to_sign(order))

    def _hash_to_sign(self, o: SimpleNamespace) -> str:
        packed = encode_packed(
            ORDER_HASH_TYPES,
            [
                o.exchange, o.maker, o.taker,
                o.maker_relayer_fee, o.taker_relayer_fee, o.maker_protocol_fee, o.taker_protocol_fee,
                o.fee_recipient, o.fee_method, o.side, o.sale_kind, o.target, o.how_to_call,
                o.calldata, o.replacement_pattern, o.static_target, o.static_extradata,
                o.payment_token, o.base_price, o.extra, o.listing_time, o.expiration_time,
                o.salt, self.nonces(o.maker),
            ],
        )
        o.hash = keccak(packed)
        return "0x" + keccak(b"\x19Ethereum Signed Message:\n32" + o.hash).hex()

    def _require_authorized(self, tx: Tx, o: SimpleNamespace, v: int, r: bytes, s: bytes):
        if _key(o.maker) == _key(tx.sender):
            return
        try:
            signer = Account.recover_message(
                encode_defunct(primitive=o.hash),
                vrs=(v, int.from_bytes(r, "big"), int.from_bytes(s, "big")),
            )
        except Exception as exc:
            raise Revert(f"Bad signature: {exc}") from exc
        _require(_key(signer) == _key(o.maker), "Not signed by the maker")

    def _can_match(self, b: SimpleNamespace, s: SimpleNamespace) -> bool:
        now = self.chain.timestamp
        return (
            b.side == 0 and s.side == 1
            and b.fee_method == s.fee_method
            and _key(b.payment_token) == _key(s.payment_token)
            and (_key(s.taker) == ZERO_ADDRESS or _key(s.taker) == _key(b.maker))
            and (_key(b.taker) == ZERO_ADDRESS or _key(b.taker) == _key(s.maker))
            and (_key(s.fee_recipient) == ZERO_ADDRESS) != (_key(b.fee_recipient) == ZERO_ADDRESS)
            and _key(b.target) == _key(s.target)
            and b.how_to_call == s.how_to_call
            and _can_settle(b, now)
            and _can_settle(s, now)
        )

    def atomicMatch_(self, tx: Tx, addrs, uints, kinds, calldata_buy, calldata_sell,
                     pattern_buy, pattern_sell, extradata_buy, extradata_sell, vs, rss):
        buy = _unpack(addrs[:7], uints[:9], kinds[:4], calldata_buy, pattern_buy, extradata_buy)
        sell = _unpack(addrs[7:], uints[9:], kinds[4:], calldata_sell, pattern_sell, extradata_sell)

        buy_hash, sell_hash = self._hash_to_sign(buy), self._hash_to_sign(sell)
        _require(buy_hash not in self.finalized, "Buy order finalized")
        _require(sell_hash not in self.finalized, "Sell order finalized")
        self._require_authorized(tx, buy, vs[0], rss[0], rss[1])
        self._require_authorized(tx, sell, vs[1], rss[2], rss[3])

        _require(self._can_match(buy, sell), "Orders cannot match")

        if buy.replacement_pattern:
            buy.calldata = _replace(buy.calldata, sell.calldata, buy.replacement_pattern)
        if sell.replacement_pattern:
            sell.calldata = _replace(sell.calldata, buy.calldata, sell.replacement_pattern)
        _require(buy.calldata == sell.calldata, "Calldata mismatch")

        self.finalized.update({buy_hash, sell_hash})
        self.executed_calldata = buy.calldata

        self._transfer_funds(buy, sell)
        self._execute_call(sell)

    def _transfer_funds(self, b: SimpleNamespace, s: SimpleNamespace):
        now = self.chain.timestamp
        sell_price, buy_price = _final_price(s, now), _final_price(b, now)
        _require(buy_price >= sell_price, "Price too low")

        weth = self.chain.at(s.payment_token)
        token_transfer_proxy = WyvernAddresses.TOKEN_TRANSFER_PROXY[self.chain.chain_id]

        if _key(s.fee_recipient) != ZERO_ADDRESS:
            price = sell_price
            _require(s.taker_relayer_fee <= b.taker_relayer_fee, "Taker fee too high")
            recipient = s.fee_recipient
            payers = ((s.maker, s.maker_relayer_fee), (b.maker, s.taker_relayer_fee))
        else:
            price = buy_price
            _require(s.maker_relayer_fee <= b.maker_relayer_fee, "Maker fee too high")
            _require(s.taker_relayer_fee <= b.taker_relayer_fee, "Taker fee too high")
            recipient = b.fee_recipient
            payers = ((b.maker, b.maker_relayer_fee), (s.maker, b.taker_relayer_fee))

        weth.transfer_from(token_transfer_proxy, b.maker, s.maker, price)
        for payer, fee_bps in payers:
            fee = price * fee_bps // 10000
            if fee:
                weth.transfer_from(token_transfer_proxy, payer, recipient, fee)

    def _execute_call(self, s: SimpleNamespace):
        proxy = self.chain.at(WyvernAddresses.PROXY_REGISTRY[self.chain.chain_id]).proxies(s.maker)
        _require(_key(proxy) != ZERO_ADDRESS, "Seller has no proxy")

        selector, args = s.calldata[:4], s.calldata[4:]
        if s.how_to_call == 1:
            _require(
                _key(s.target) == _key(WyvernAddresses.MERKLE_VALIDATOR[self.chain.chain_id]),
                "Unknown delegate target",
            )
            _require(selector == keccak(text=MATCH_ERC721_USING_CRITERIA)[:4], "Bad call")
            src, dst, token, token_id, root, proof = decode(
                ["address", "address", "address", "uint256", "bytes32", "bytes32[]"], args
            )
            node = keccak(encode(["uint256"], [token_id]))
            for sibling in proof:
                node = keccak(min(node, sibling) + max(node, sibling))
            _require(node == root, "Invalid proof")
            self.chain.at(token).transfer(proxy, src, dst, token_id)
        else:
            _require(selector == keccak(text=TRANSFER_FROM)[:4], "Bad call")
            src, dst, token_id = decode(["address", "address", "uint256"], args)
            self.chain.at(s.target).transfer(proxy, src, dst, token_id)


ORDER_HASH_TYPES = (
    ["address", "address", "address", "uint256", "uint256", "uint256", "uint256", "address"]
    + ["uint8", "uint8", "uint8", "address", "uint8", "bytes", "bytes", "address", "bytes"]
    + ["address", "uint256", "uint256", "uint256", "uint256", "uint256", "uint256"]
)


def _unpack(addrs, uints, kinds, calldata, pattern, extradata) -> SimpleNamespace:
    return SimpleNamespace(
        exchange=addrs[0],
        maker=addrs[1],
        taker=addrs[2],
        fee_recipient=addrs[3],
        target=addrs[4],
        static_target=addrs[5],
        payment_token=addrs[6],
        maker_relayer_fee=uints[0],
        taker_relayer_fee=uints[1],
        maker_protocol_fee=uints[2],
        taker_protocol_fee=uints[3],
        base_price=uints[4],
        extra=uints[5],
        listing_time=uints[6],
        expiration_time=uints[7],
        salt=uints[8],
        fee_method=kinds[0],
        side=kinds[1],
        sale_kind=kinds[2],
        how_to_call=kinds[3],
        calldata=bytes(calldata),
        replacement_pattern=bytes(pattern),
        static_extradata=bytes(extradata),
    )


def _can_settle(o: SimpleNamespace, now: int) -> bool:
    return o.listing_time < now and (o.expiration_time == 0 or now < o.expiration_time)


def _final_price(o: SimpleNamespace, now: int) -> int:
    if o.sale_kind == 0:
        return o.base_price
    diff = o.extra * (now - o.listing_time) // (o.expiration_time - o.listing_time)
    return o.base_price - diff if o.side == 1 else o.base_price + diff


def _replace(array: bytes, desired: bytes, mask: bytes) -> bytes:
    _require(len(array) == len(desired) == len(mask), "Replacement length mismatch")
    a, d, m = (int.from_bytes(x, "big") for x in (array, desired, mask))
    return ((a & ~m) | (d & m)).to_bytes(len(array), "big")


class MockSeaportExchange:
    """Tracks counters and order statuses. Fills are recorded but move no assets."""

    def __init__(self):
        self.counters: Dict[str, int] = {}
        self.cancelled: Set[str] = set()
        self.filled: Set[str] = set()

    def getCounter(self, owner: str) -> int:
        return self.counters.get(_key(owner), 0)

    def incrementCounter(self, tx: Tx):
        self.counters[_key(tx.sender)] = self.getCounter(tx.sender) + 1

    def getOrderStatus(self, order_hash):
        order_hash = _hex(order_hash)
        is_filled = order_hash in self.filled
        return (is_filled, order_hash in self.cancelled, int(is_filled), int(is_filled))

    def _hash(self, parameters, counter: int) -> str:
        offer = [OfferItem(ItemType(i[0]), i[1], i[2], i[3], i[4]) for i in parameters[2]]
        consideration = [
            ConsiderationItem(ItemType(i[0]), i[1], i[2], i[3], i[4], recipient=i[5])
            for i in parameters[3]
        ]
        components = OrderComponents(
            offerer=parameters[0],
            zone=parameters[1],
            offer=offer,
            consideration=consideration,
            order_type=OrderType(parameters[4]),
            start_time=parameters[5],
            end_time=parameters[6],
            zone_hash="0x" + parameters[7].hex(),
            salt=parameters[8],
            conduit_key="0x" + parameters[9].hex(),
            counter=counter,
        )
        return SeaportOrder(self.chain.chain_id, components).hash().lower()

    def cancel(self, tx: Tx, orders):
        for order in orders:
            _require(_key(order[0]) == _key(tx.sender), "Not the offerer")
            self.cancelled.add(self._hash(order, order[10]))

    def fulfillAdvancedOrder(self, tx: Tx, advanced_order, criteria_resolvers, conduit_key, recipient):
        parameters = advanced_order[0]
        order_hash = self._hash(parameters, self.getCounter(parameters[0]))
        _require(order_hash not in self.cancelled, "Order cancelled")
        _require(order_hash not in self.filled, "Order filled")
        self.filled.add(order_hash)


class MockConduitController:
    def __init__(self):
        self.conduits: Dict[str, str] = {}

    def getConduit(self, conduit_key):
        conduit = self.conduits.get(_hex(conduit_key))
        return (conduit or ZERO_ADDRESS, conduit is not None)


NFT_ADDRESS = to_checksum_address("0x" + "11" * 20)
OTHER_TOKEN_ADDRESS = to_checksum_address("0x" + "22" * 20)


def setup_chain(chain_id: int = 1) -> MockChain:
    """Mock chain with WETH, an ERC721, the Wyvern and the Seaport contracts."""
    chain = MockChain(chain_id)
    chain.deploy(WETH[chain_id], MockWeth())
    chain.deploy(NFT_ADDRESS, MockErc721())
    chain.deploy(WyvernAddresses.PROXY_REGISTRY[chain_id], MockProxyRegistry())
    chain.deploy(WyvernAddresses.EXCHANGE[chain_id], MockWyvernExchange())
    chain.deploy(SeaportAddresses.EXCHANGE[chain_id], MockSeaportExchange())
    chain.deploy(SeaportAddresses.CONDUIT_CONTROLLER[chain_id], MockConduitController())
    return chain
