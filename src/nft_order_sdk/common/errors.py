"""Error types raised across the SDK.

Structural problems with an order or its build parameters subclass
``ValueError`` so callers that only care about bad input can keep catching
that. Problems with on-chain state raise ``FillabilityError``.
"""

from typing import Optional


class SdkError(Exception):
    """Base class for every error raised by the SDK."""


class UnsupportedChainError(SdkError, ValueError):
    """Raised when a builder, order or exchange is created for an unknown chain."""

    def __init__(self, chain_id: int):
        super().__init__(f"Unsupported chain id: {chain_id}")
        self.chain_id = chain_id


class InvalidOrderError(SdkError, ValueError):
    """The order is structurally malformed."""


class InvalidOfferError(InvalidOrderError):
    """The offer does not consist of exactly one item."""


class InvalidConsiderationError(InvalidOrderError):
    """The consideration is empty or does not fit the order shape."""


class InvalidItemError(InvalidOrderError):
    """An item has a type that is not allowed at its position."""


class InvalidSignatureError(InvalidOrderError):
    """The order is unsigned or signed by someone other than the maker."""


class InvalidParamsError(SdkError, ValueError):
    """Build or matching parameters cannot produce a valid order."""


class UnknownBuilderError(SdkError, LookupError):
    """No builder is registered for a kind, or none recognizes an order."""


class FillabilityError(SdkError):
    """On-chain state does not allow the order to be filled.

    Attributes:
        reason: Short machine readable reason, e.g. ``"no-balance"``
    """

    def __init__(self, reason: str, message: Optional[str] = None):
        super().__init__(message or reason)
        self.reason = reason


class TransactionError(SdkError):
    """A submitted transaction reverted."""

    def __init__(self, tx_hash: str, message: Optional[str] = None):
        super().__init__(message or f"Transaction {tx_hash} reverted")
        self.tx_hash = tx_hash
