"""Shared fixtures: deterministic accounts and a fresh mock chain per test."""

import pytest
from eth_account import Account

from mock_chain import MockChain, setup_chain

# Test wallets (DO NOT use in production)
DEPLOYER = Account.from_key("0x" + "d0" * 32)
ALICE = Account.from_key("0x" + "a1" * 32)
BOB = Account.from_key("0x" + "b0" * 32)
CAROL = Account.from_key("0x" + "c0" * 32)


@pytest.fixture
def chain() -> MockChain:
    return setup_chain(chain_id=1)


@pytest.fixture
def alice():
    return ALICE


@pytest.fixture
def bob():
    return BOB


@pytest.fixture
def carol():
    return CAROL
