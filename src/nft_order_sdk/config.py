"""SDK configuration.

Settings are passed as a partial ``SdkConfig`` dict (or read from the
environment) and resolved into a ``ResolvedSdkConfig`` with every default
applied.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional, TypedDict

from .common.addresses import ensure_supported_chain

DEFAULT_CHAIN_ID = 1
DEFAULT_START_TIME_OFFSET = 5 * 60
DEFAULT_LOG_LEVEL = "WARNING"

ENV_CHAIN_ID = "NFT_SDK_CHAIN_ID"
ENV_START_TIME_OFFSET = "NFT_SDK_START_TIME_OFFSET"
ENV_LOG_LEVEL = "NFT_SDK_LOG_LEVEL"
ENV_RPC_URL = "NFT_SDK_RPC_URL"


class SdkConfig(TypedDict, total=False):
    """User facing SDK settings."""

    chain_id: int
    """Chain id (1 for mainnet, 4 for rinkeby). Default: 1"""

    start_time_offset: int
    """Seconds subtracted from now for defaulted order start times. Default: 300"""

    log_level: str
    """Level of the ``nft_order_sdk`` logger. Default: WARNING"""

    rpc_url: str
    """JSON-RPC endpoint for ``Web3Provider``. Default: None"""


@dataclass
class ResolvedSdkConfig:
    """SDK settings with all defaults applied."""

    chain_id: int
    start_time_offset: int
    log_level: str
    rpc_url: Optional[str] = None


def resolve_config(config: Optional[SdkConfig] = None) -> ResolvedSdkConfig:
    """Apply defaults to a partial config.

    Raises:
        UnsupportedChainError: If the chain id is not supported
        ValueError: If the start time offset is negative
    """
    config = config or {}

    start_time_offset = config.get("start_time_offset", DEFAULT_START_TIME_OFFSET)
    if start_time_offset < 0:
        raise ValueError(f"Invalid start_time_offset: {start_time_offset}. Must be >= 0")

    return ResolvedSdkConfig(
        chain_id=ensure_supported_chain(config.get("chain_id", DEFAULT_CHAIN_ID)),
        start_time_offset=start_time_offset,
        log_level=config.get("log_level", DEFAULT_LOG_LEVEL).upper(),
        rpc_url=config.get("rpc_url") or None,
    )


def _int_from_env(environ: Mapping[str, str], name: str) -> Optional[int]:
    value = environ.get(name)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Invalid {name}: {value!r}. Must be an integer") from None


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> ResolvedSdkConfig:
    """Resolve the config from ``NFT_SDK_*`` environment variables.

    Args:
        environ: Mapping to read from (default: os.environ)
    """
    environ = os.environ if environ is None else environ

    config: SdkConfig = {}
    chain_id = _int_from_env(environ, ENV_CHAIN_ID)
    if chain_id is not None:
        config["chain_id"] = chain_id
    start_time_offset = _int_from_env(environ, ENV_START_TIME_OFFSET)
    if start_time_offset is not None:
        config["start_time_offset"] = start_time_offset
    if environ.get(ENV_LOG_LEVEL):
        config["log_level"] = environ[ENV_LOG_LEVEL]
    if environ.get(ENV_RPC_URL):
        config["rpc_url"] = environ[ENV_RPC_URL]

    return resolve_config(config)


def configure_logging(config: ResolvedSdkConfig) -> logging.Logger:
    """Set the level of the package logger. Handlers are left to the application."""
    logger = logging.getLogger("nft_order_sdk")
    logger.setLevel(config.log_level)
    return logger
