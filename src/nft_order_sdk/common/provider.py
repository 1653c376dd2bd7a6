"""Chain access used by fillability checks, helpers and exchanges.

Contract functions are named by signature strings such as
``"balanceOf(address) returns (uint256)"``. ``Web3Provider`` talks to a
JSON-RPC node through web3.py. Any other backend can be plugged in by
implementing ``ChainProvider``.
"""

import logging
from typing import Any, Dict, Protocol, Sequence

from eth_abi import decode
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address, to_hex
from web3 import AsyncWeb3

from .errors import TransactionError
from .utils import encode_function_call, parse_signature

logger = logging.getLogger(__name__)

DEFAULT_RECEIPT_TIMEOUT = 120


class ChainProvider(Protocol):
    """Protocol for chain backends (JSON-RPC node wrappers, test chains, ...)."""

    async def get_block_timestamp(self) -> int:
        """Timestamp of the latest block."""
        ...

    async def call(self, to: str, signature: str, args: Sequence[Any]) -> Any:
        """Read-only contract call.

        Args:
            to: Contract address
            signature: Function signature with return types,
                e.g. "balanceOf(address) returns (uint256)"
            args: Positional call arguments

        Returns:
            Decoded return value, a tuple for several return values
        """
        ...

    async def send_transaction(
        self,
        signer: LocalAccount,
        to: str,
        signature: str,
        args: Sequence[Any],
        value: int = 0,
    ) -> Dict[str, Any]:
        """Submit a state changing contract call and wait for its receipt.

        Returns:
            Transaction receipt
        """
        ...


class Web3Provider:
    """``ChainProvider`` over a web3.py ``AsyncWeb3`` connection.

    Transactions are signed locally by the ``eth_account`` signer and sent
    raw, so the node needs no unlocked accounts.

    Args:
        w3: Connected AsyncWeb3 instance
        receipt_timeout: Seconds to wait for a transaction to be mined

    Example:
        >>> provider = Web3Provider.from_rpc_url("https://eth.llamarpc.com")
        >>> await Exchange(1).get_nonce(provider, "0x...")
    """

    def __init__(self, w3: AsyncWeb3, receipt_timeout: int = DEFAULT_RECEIPT_TIMEOUT):
        self.w3 = w3
        self.receipt_timeout = receipt_timeout

    @classmethod
    def from_rpc_url(cls, rpc_url: str, **kwargs: Any) -> "Web3Provider":
        return cls(AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url)), **kwargs)

    async def get_block_timestamp(self) -> int:
        block = await self.w3.eth.get_block("latest")
        return block["timestamp"]

    async def call(self, to: str, signature: str, args: Sequence[Any]) -> Any:
        outputs = parse_signature(signature).outputs
        result = await self.w3.eth.call(
            {
                "to": to_checksum_address(to),
                "data": "0x" + encode_function_call(signature, args).hex(),
            }
        )
        values = decode(outputs, bytes(result))
        return values[0] if len(values) == 1 else values

    async def send_transaction(
        self,
        signer: LocalAccount,
        to: str,
        signature: str,
        args: Sequence[Any],
        value: int = 0,
    ) -> Dict[str, Any]:
        """Sign and send the call, then wait for its receipt.

        Raises:
            TransactionError: If the transaction reverted
        """
        tx: Dict[str, Any] = {
            "from": signer.address,
            "to": to_checksum_address(to),
            "data": "0x" + encode_function_call(signature, args).hex(),
            "value": value,
            "nonce": await self.w3.eth.get_transaction_count(signer.address),
            "gasPrice": await self.w3.eth.gas_price,
            "chainId": await self.w3.eth.chain_id,
        }
        tx["gas"] = await self.w3.eth.estimate_gas(tx)

        signed = signer.sign_transaction(tx)
        tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        tx_hash_hex = to_hex(tx_hash)
        logger.info("Sent %s to %s: %s", parse_signature(signature).name, tx["to"], tx_hash_hex)

        receipt = await self.w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.receipt_timeout
        )
        if receipt["status"] != 1:
            raise TransactionError(tx_hash_hex)
        return dict(receipt)


async def get_current_chain_timestamp(provider: ChainProvider) -> int:
    return await provider.get_block_timestamp()
