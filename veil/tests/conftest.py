"""Shared fixtures for Veil client tests."""

import json
from unittest.mock import MagicMock

import pytest
from eth_account import Account

from ..config import VeilSettings
from ..metrics import Metrics
from ..models import Challenge, Market
from ..auth.signer import LocalAccountSigner


TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return VeilSettings(
        _env_file=None,
        api_url="https://api.veil.test",
        feeds_api_url="https://feeds.veil.test",
    )


@pytest.fixture
def metrics():
    """Enabled metrics with a private registry."""
    return Metrics(enabled=True)


@pytest.fixture
def account():
    return Account.from_key(TEST_PRIVATE_KEY)


@pytest.fixture
def signer():
    return LocalAccountSigner.from_private_key(TEST_PRIVATE_KEY)


@pytest.fixture
def make_response():
    """Build a fake requests.Response."""
    def _make(payload=None, status_code=200, content=None, reason="OK"):
        response = MagicMock()
        response.status_code = status_code
        response.reason = reason
        if content is None:
            content = json.dumps(payload).encode("utf-8")
        response.content = content
        response.text = content.decode("utf-8")
        return response
    return _make


@pytest.fixture
def http_session():
    """Mocked requests.Session."""
    return MagicMock()


@pytest.fixture
def mock_api():
    """Mocked VeilAPI with a working challenge exchange."""
    api = MagicMock()
    api.create_session_challenge.return_value = Challenge(uid="challenge-1")
    api.create_session.side_effect = [f"token-{i}" for i in range(1, 20)]
    api.get_taker_address.return_value = "0x" + "ab" * 20
    return api


@pytest.fixture
def market():
    """Binary market with 10000 ticks."""
    return Market(
        slug="will-btc-close-above-10k",
        uid="market-1",
        num_ticks="10000",
        long_token="0x" + "11" * 20,
        short_token="0x" + "22" * 20,
    )


@pytest.fixture
def scalar_market():
    return Market(
        slug="eth-price-end-of-month",
        num_ticks="10000",
        min_price="12750000000000000000",
        max_price="14980000000000000000",
        long_token="0x" + "33" * 20,
        short_token="0x" + "44" * 20,
    )


@pytest.fixture
def zero_ex_order(account):
    """Unsigned 0x v2 order made by the test account."""
    return {
        "makerAddress": account.address.lower(),
        "takerAddress": ZERO_ADDRESS,
        "feeRecipientAddress": ZERO_ADDRESS,
        "senderAddress": ZERO_ADDRESS,
        "makerAssetAmount": "5000000000000000",
        "takerAssetAmount": "30000000000000000",
        "makerFee": "0",
        "takerFee": "0",
        "expirationTimeSeconds": "1700000000",
        "salt": "59316432118374513984516233405473474939627466213936543283836932935768693245213",
        "makerAssetData": "0xf47261b0" + "00" * 12 + "11" * 20,
        "takerAssetData": "0xf47261b0" + "00" * 12 + "55" * 20,
        "exchangeAddress": "0x" + "66" * 20,
    }
