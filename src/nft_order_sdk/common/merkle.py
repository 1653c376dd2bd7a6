"""Token-list commitments.

A set of token ids is committed to with a merkle root so an order can accept
any token from the set while only carrying 32 bytes. The counterparty later
opens the commitment for one token with an inclusion proof.

Leaves are ``keccak256(abi.encode(uint256 tokenId))``. Pairs are hashed in
sorted order so a proof needs no left/right flags. An odd node at any level
is paired with itself, which gives every leaf a proof of the same length.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Union

from eth_abi import encode
from eth_utils import keccak

from .errors import InvalidParamsError
from .utils import bn, hex_to_bytes


def hash_leaf(token_id: Union[int, str]) -> bytes:
    return keccak(encode(["uint256"], [bn(token_id)]))


def hash_pair(a: bytes, b: bytes) -> bytes:
    return keccak(a + b) if a <= b else keccak(b + a)


@dataclass
class MerkleTree:
    """Merkle tree over a list of token ids."""

    token_ids: List[int]
    """Committed token ids, in the order they were given."""

    layers: List[List[bytes]] = field(default_factory=list)
    """Leaves first, root last."""

    _index: Dict[int, int] = field(default_factory=dict, repr=False)

    @property
    def root(self) -> str:
        return "0x" + self.layers[-1][0].hex()

    @property
    def depth(self) -> int:
        return len(self.layers) - 1

    def get_proof(self, token_id: Union[int, str]) -> List[str]:
        """Inclusion proof for ``token_id`` as a list of 0x-hex bytes32 values.

        Raises:
            InvalidParamsError: If the token is not part of the tree
        """
        token_id = bn(token_id)
        if token_id not in self._index:
            raise InvalidParamsError(f"Token {token_id} is not part of the token list")

        proof = []
        position = self._index[token_id]
        for layer in self.layers[:-1]:
            sibling = position ^ 1
            proof.append(layer[sibling] if sibling < len(layer) else layer[position])
            position //= 2
        return ["0x" + node.hex() for node in proof]


def generate_merkle_tree(token_ids: Iterable[Union[int, str]]) -> MerkleTree:
    """Build the merkle tree committing to ``token_ids``.

    Duplicate ids are ignored after their first occurrence.

    Raises:
        InvalidParamsError: If no token ids are given
    """
    ids: List[int] = []
    index: Dict[int, int] = {}
    for token_id in token_ids:
        token_id = bn(token_id)
        if token_id not in index:
            index[token_id] = len(ids)
            ids.append(token_id)

    if not ids:
        raise InvalidParamsError("Token list must not be empty")

    layers = [[hash_leaf(token_id) for token_id in ids]]
    while len(layers[-1]) > 1:
        current = layers[-1]
        layers.append(
            [
                hash_pair(current[i], current[i + 1] if i + 1 < len(current) else current[i])
                for i in range(0, len(current), 2)
            ]
        )

    return MerkleTree(token_ids=ids, layers=layers, _index=index)


def get_merkle_root(token_ids: Iterable[Union[int, str]]) -> str:
    return generate_merkle_tree(token_ids).root


def verify_merkle_proof(root: str, token_id: Union[int, str], proof: List[str]) -> bool:
    """Check that ``proof`` opens ``root`` for ``token_id``."""
    computed = hash_leaf(token_id)
    for node in proof:
        computed = hash_pair(computed, hex_to_bytes(node))
    return computed == hex_to_bytes(root)
