"""Wyvern v2.3 order builders and their kind tag registry."""

import logging
from typing import TYPE_CHECKING, Dict, Type

from ...common.errors import UnknownBuilderError
from .base import BaseBuilder, BaseBuildParams, OrderInfo, DEFAULT_START_TIME_OFFSET
from .erc721 import (
    Erc721SingleTokenBuilder,
    Erc721TokenListBuilder,
    SingleTokenBuildParams,
    TokenListBuildParams,
)

if TYPE_CHECKING:
    from ..order import Order

logger = logging.getLogger(__name__)

BUILDERS: Dict[str, Type[BaseBuilder]] = {
    Erc721SingleTokenBuilder.kind: Erc721SingleTokenBuilder,
    Erc721TokenListBuilder.kind: Erc721TokenListBuilder,
}


def get_builder(kind: str, chain_id: int) -> BaseBuilder:
    """Instantiate the builder registered under ``kind``.

    Raises:
        UnknownBuilderError: If no builder is registered for the kind
    """
    try:
        return BUILDERS[kind](chain_id)
    except KeyError:
        raise UnknownBuilderError(f"Unknown order kind: {kind}") from None


def detect_kind(order: "Order") -> str:
    """Find the kind of an untagged order.

    Raises:
        UnknownBuilderError: If no builder recognizes the order
    """
    for kind, builder_class in BUILDERS.items():
        if builder_class(order.chain_id).get_info(order) is not None:
            logger.debug("Detected %s order", kind)
            return kind
    raise UnknownBuilderError("No builder recognizes the order")


__all__ = [
    "BUILDERS",
    "DEFAULT_START_TIME_OFFSET",
    "BaseBuilder",
    "BaseBuildParams",
    "OrderInfo",
    "Erc721SingleTokenBuilder",
    "Erc721TokenListBuilder",
    "SingleTokenBuildParams",
    "TokenListBuildParams",
    "detect_kind",
    "get_builder",
]
