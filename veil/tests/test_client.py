"""
Tests for VeilClient.

API clients are mocked; session authentication and order signing run for real.
"""

import orjson
import pytest
from decimal import Decimal
from unittest.mock import MagicMock

from .. import VeilClient, WalletConfig
from ..config import VeilSettings
from ..exceptions import (
    ConfigurationError,
    NotFoundError,
    RequestError,
    SessionRetryExhaustedError,
    ValidationError,
)
from ..metrics import Metrics
from ..models import DataFeedScope, MarketStatus, Order, OrderStatus, Quote
from ..utils.numeric import RawUnits

URL = "https://api.veil.test/graphql"


def expired():
    return RequestError([{"message": "jwt expired"}], URL)


@pytest.fixture
def mock_feeds():
    return MagicMock()


@pytest.fixture
def client(signer, settings, mock_api, mock_feeds):
    return VeilClient(
        signer=signer,
        settings=settings,
        api=mock_api,
        feeds_api=mock_feeds,
        metrics=Metrics(enabled=False),
    )


@pytest.fixture
def read_only_client(settings, mock_api, mock_feeds):
    return VeilClient(
        settings=settings,
        api=mock_api,
        feeds_api=mock_feeds,
        metrics=Metrics(enabled=False),
    )


@pytest.fixture
def quote(zero_ex_order):
    return Quote(uid="quote-1", zero_ex_order=zero_ex_order)


class TestConstruction:

    def test_address_defaults_to_signer(self, client, signer):
        assert client.address == signer.address.lower()
        assert client.session.address == signer.address.lower()

    def test_retry_bound_from_settings(self, signer, mock_api, mock_feeds):
        settings = VeilSettings(_env_file=None, max_session_retries=5)

        client = VeilClient(signer=signer, settings=settings, api=mock_api, feeds_api=mock_feeds)

        assert client.retry.max_retries == 5

    def test_from_wallet(self, settings, account):
        client = VeilClient.from_wallet(
            WalletConfig(private_key="0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"),
            settings=settings,
        )

        assert client.address == account.address.lower()
        assert client.session.is_configured
        client.close()

    def test_read_only_client(self, read_only_client):
        assert read_only_client.address is None
        assert not read_only_client.session.is_configured


class TestMarketData:

    @pytest.mark.asyncio
    async def test_get_markets(self, read_only_client, mock_api):
        mock_api.get_markets.return_value = []

        assert await read_only_client.get_markets(index="btc", status="open") == []

        mock_api.get_markets.assert_called_once_with("btc", MarketStatus.OPEN)
        mock_api.create_session_challenge.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_markets_invalid_status(self, read_only_client, mock_api):
        with pytest.raises(ValidationError):
            await read_only_client.get_markets(status="closed")

        mock_api.get_markets.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_market(self, read_only_client, mock_api, market):
        mock_api.get_market.return_value = market

        assert await read_only_client.get_market(market.slug) is market

    @pytest.mark.asyncio
    async def test_get_market_not_found(self, read_only_client, mock_api):
        mock_api.get_market.side_effect = NotFoundError("Market not found: x", identifier="x")

        with pytest.raises(NotFoundError):
            await read_only_client.get_market("x")

    @pytest.mark.asyncio
    async def test_get_order_book_accepts_market_or_slug(self, read_only_client, mock_api, market):
        mock_api.get_order_book.return_value = []

        await read_only_client.get_order_book(market)
        await read_only_client.get_order_book("other-market")

        assert [c.args[0] for c in mock_api.get_order_book.call_args_list] == [
            market.slug, "other-market"
        ]

    @pytest.mark.asyncio
    async def test_get_data_feed(self, read_only_client, mock_feeds):
        await read_only_client.get_data_feed("BTCUSD", "day")
        await read_only_client.get_data_feed("BTCUSD")

        assert [c.args for c in mock_feeds.get_data_feed.call_args_list] == [
            ("BTCUSD", DataFeedScope.DAY),
            ("BTCUSD", DataFeedScope.MONTH),
        ]

    @pytest.mark.asyncio
    async def test_get_data_feed_invalid_scope(self, read_only_client, mock_feeds):
        with pytest.raises(ValidationError):
            await read_only_client.get_data_feed("BTCUSD", "week")

        mock_feeds.get_data_feed.assert_not_called()


class TestScalarRange:

    def test_scalar_range(self, read_only_client, scalar_market):
        assert read_only_client.get_scalar_range(scalar_market) == (
            Decimal("12.75"), Decimal("14.98")
        )

    def test_missing_min_price(self, read_only_client, scalar_market):
        market = scalar_market.model_copy(update={"min_price": None})

        with pytest.raises(ValidationError):
            read_only_client.get_scalar_range(market)

    def test_binary_market(self, read_only_client, market):
        with pytest.raises(ValidationError):
            read_only_client.get_scalar_range(market)


class TestSession:

    @pytest.mark.asyncio
    async def test_setup(self, client, mock_api):
        await client.setup()
        await client.setup()

        assert client.is_setup
        assert client.taker_address == "0x" + "ab" * 20
        mock_api.create_session_challenge.assert_called_once()
        mock_api.get_taker_address.assert_called_once()

    @pytest.mark.asyncio
    async def test_authenticate_forces_new_token(self, client):
        await client.setup()
        await client.authenticate()

        assert client.session.token == "token-2"

    @pytest.mark.asyncio
    async def test_authenticated_call_without_signer(self, read_only_client, market, mock_api):
        with pytest.raises(ConfigurationError):
            await read_only_client.create_quote(market, "buy", "long", 1, "0.5")

        mock_api.create_quote.assert_not_called()


class TestTrading:

    @pytest.mark.asyncio
    async def test_create_quote(self, client, mock_api, market, quote):
        mock_api.create_quote.return_value = quote

        result = await client.create_quote(market, "buy", "long", 50, Decimal("0.6"))

        assert result is quote
        mock_api.create_quote.assert_called_once_with(
            {
                "side": "buy",
                "token": market.long_token,
                "tokenAmount": "5000000000000000",
                "price": "6000",
                "type": "limit",
            },
            token="token-1",
        )

    @pytest.mark.asyncio
    async def test_create_quote_raw_units(self, client, mock_api, market, quote):
        mock_api.create_quote.return_value = quote

        await client.create_quote(market, "sell", "short", RawUnits("42"), RawUnits("7000"))

        params = mock_api.create_quote.call_args.args[0]
        assert params["tokenAmount"] == "42"
        assert params["price"] == "7000"
        assert params["token"] == market.short_token

    @pytest.mark.asyncio
    async def test_invalid_quote_input_does_not_authenticate(self, client, mock_api, market):
        with pytest.raises(ValidationError):
            await client.create_quote(market, "hold", "long", 1, "0.5")

        mock_api.create_session_challenge.assert_not_called()

    @pytest.mark.asyncio
    async def test_expired_session_reauthenticates_once(self, client, mock_api, market, quote):
        mock_api.create_quote.side_effect = [expired(), quote]

        assert await client.create_quote(market, "buy", "long", 1, "0.5") is quote

        assert mock_api.create_session.call_count == 2
        tokens = [c.kwargs["token"] for c in mock_api.create_quote.call_args_list]
        assert tokens == ["token-1", "token-2"]

    @pytest.mark.asyncio
    async def test_persistent_expiry(self, signer, mock_api, mock_feeds, market):
        settings = VeilSettings(_env_file=None, max_session_retries=2)
        client = VeilClient(
            signer=signer, settings=settings, api=mock_api, feeds_api=mock_feeds,
            metrics=Metrics(enabled=False),
        )

        def always_expired(*args, **kwargs):
            raise expired()

        mock_api.create_quote.side_effect = always_expired

        with pytest.raises(SessionRetryExhaustedError) as exc_info:
            await client.create_quote(market, "buy", "long", 1, "0.5")

        assert exc_info.value.attempts == 2
        assert mock_api.create_quote.call_count == 3
        # Initial session plus two re-authentications
        assert mock_api.create_session.call_count == 3

    @pytest.mark.asyncio
    async def test_other_errors_not_retried(self, client, mock_api, market):
        mock_api.create_quote.side_effect = RequestError([{"message": "Market closed"}], URL)

        with pytest.raises(RequestError):
            await client.create_quote(market, "buy", "long", 1, "0.5")

        assert mock_api.create_quote.call_count == 1
        assert mock_api.create_session.call_count == 1

    @pytest.mark.asyncio
    async def test_create_order_signs_quote(self, client, mock_api, quote, zero_ex_order):
        created = Order(uid="order-1", status=OrderStatus.OPEN)
        mock_api.create_order.return_value = created

        assert await client.create_order(quote) is created

        params = mock_api.create_order.call_args.args[0]
        assert params["quoteUid"] == "quote-1"
        assert "postOnly" not in params
        signed = params["zeroExOrder"]
        assert signed["signature"].endswith("03")
        assert {k: v for k, v in signed.items() if k != "signature"} == zero_ex_order
        assert "signature" not in quote.zero_ex_order

    @pytest.mark.asyncio
    async def test_create_order_with_integer_salt(self, client, mock_api, zero_ex_order):
        salt = int(zero_ex_order["salt"])
        quote = Quote(uid="quote-1", zero_ex_order={**zero_ex_order, "salt": salt})
        mock_api.create_order.return_value = Order(uid="order-1")

        await client.create_order(quote)

        params = mock_api.create_order.call_args.args[0]
        assert params["zeroExOrder"]["salt"] == str(salt)
        orjson.dumps(params)

    @pytest.mark.asyncio
    async def test_create_order_post_only(self, client, mock_api, quote):
        mock_api.create_order.return_value = Order(uid="order-1")

        await client.create_order(quote, post_only=True)

        assert mock_api.create_order.call_args.args[0]["postOnly"] is True

    @pytest.mark.asyncio
    async def test_create_order_retries_with_same_signature(self, client, mock_api, quote):
        mock_api.create_order.side_effect = [expired(), Order(uid="order-1")]

        await client.create_order(quote)

        first, second = mock_api.create_order.call_args_list
        assert first.args[0] == second.args[0]
        assert second.kwargs["token"] == "token-2"

    @pytest.mark.asyncio
    async def test_cancel_order(self, client, mock_api):
        mock_api.cancel_order.return_value = Order(uid="order-1", status=OrderStatus.CANCELED)

        order = await client.cancel_order("order-1")

        assert order.status == OrderStatus.CANCELED
        mock_api.cancel_order.assert_called_once_with("order-1", token="token-1")

    @pytest.mark.asyncio
    async def test_get_user_orders(self, client, mock_api, market):
        mock_api.get_user_orders.return_value = [Order(uid="order-1", status=OrderStatus.OPEN)]

        orders = await client.get_user_orders(market)

        assert orders[0].is_open
        mock_api.get_user_orders.assert_called_once_with(market.slug, token="token-1")


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_context_manager_closes(self, client, mock_api, mock_feeds):
        async with client as entered:
            assert entered is client

        mock_api.close.assert_called_once()
        mock_feeds.close.assert_called_once()

    def test_repr(self, client):
        assert "token" not in repr(client)
        assert client.address in repr(client)
