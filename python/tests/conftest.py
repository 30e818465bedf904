"""
Shared pytest fixtures for cause-sdk tests.

This module provides the wallets used across test files, including the
reference BTC/ETH/USD wallet, and a mock ledger for service tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from cause_sdk.types import TokenBalance


BTC_KEY = "btc_vault_address,1"
ETH_KEY = "eth_vault_address,1"
USD_KEY = "usd_vault_address,1"


@pytest.fixture
def btc():
    """One bitcoin at $50,000."""
    return TokenBalance(
        token_key=BTC_KEY,
        symbol="BTC",
        name="Bitcoin",
        balance=1.0,
        average_valuation=50000.0,
        token_image_url="https://img.example/btc.png",
    )


@pytest.fixture
def eth():
    """Ten ether at $3,000."""
    return TokenBalance(
        token_key=ETH_KEY,
        symbol="ETH",
        name="Ethereum",
        balance=10.0,
        average_valuation=3000.0,
    )


@pytest.fixture
def usd():
    """Twenty thousand stable dollars."""
    return TokenBalance(
        token_key=USD_KEY,
        symbol="USD",
        name="US Dollar",
        balance=20000.0,
        average_valuation=1.0,
    )


@pytest.fixture
def wallet(btc, eth, usd):
    """Reference wallet worth $100,000 ($50k BTC, $30k ETH, $20k USD)."""
    return [btc, eth, usd]


@pytest.fixture
def thin_wallet():
    """Wallet worth $15: $5 of BTC and $10 of USD."""
    return [
        TokenBalance(
            token_key=BTC_KEY, symbol="BTC", name="Bitcoin",
            balance=0.0001, average_valuation=50000.0,
        ),
        TokenBalance(
            token_key=USD_KEY, symbol="USD", name="US Dollar",
            balance=10.0, average_valuation=1.0,
        ),
    ]


@pytest.fixture
def mock_ledger():
    """Create a mock ledger that accepts every submission."""
    ledger = MagicMock()
    ledger.submit_verifiables = AsyncMock(return_value=None)
    return ledger
