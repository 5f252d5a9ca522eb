"""
Main Veil client.

Unified async interface for market data, quotes and orders on Veil.
One client owns one session; authenticated operations re-authenticate
automatically when the server reports the session expired.
"""

from decimal import Decimal
from typing import Any, Callable, List, Optional, Tuple, TypeVar, Union
import asyncio
import logging

from .config import get_settings, VeilSettings
from .models import (
    DataFeed,
    DataFeedScope,
    Market,
    MarketStatus,
    Order,
    Quote,
    Side,
    TokenType,
    WalletConfig,
)
from .api.veil_api import VeilAPI
from .api.feeds import FeedsAPI
from .auth.session import SessionManager
from .auth.signer import LocalAccountSigner, Signer
from .trading.order_signer import sign_order
from .trading.quote_builder import AmountInput, build_quote_params
from .utils.numeric import from_base_units
from .utils.retry import SessionRetryStrategy
from .utils.validators import (
    validate_data_feed_scope,
    validate_market_status,
    validate_slug,
)
from .exceptions import ValidationError
from .metrics import Metrics, get_metrics

logger = logging.getLogger(__name__)

T = TypeVar('T')

MarketRef = Union[Market, str]


def _market_slug(market: MarketRef) -> str:
    if isinstance(market, Market):
        return market.slug
    return validate_slug(market)


class VeilClient:
    """
    Main client for Veil operations.

    Features:
    - Lazy session authentication with a wallet signature
    - Bounded re-authentication on expired sessions
    - Exact fixed-point amount and price handling
    - Typed exceptions and models

    Usage:
        async with VeilClient.from_wallet(WalletConfig(private_key=key)) as client:
            market = await client.get_market("some-market")
            quote = await client.create_quote(market, "buy", "long", 10, Decimal("0.6"))
            order = await client.create_order(quote)
    """

    def __init__(
        self,
        signer: Optional[Signer] = None,
        address: Optional[str] = None,
        settings: Optional[VeilSettings] = None,
        api: Optional[VeilAPI] = None,
        feeds_api: Optional[FeedsAPI] = None,
        session: Optional[SessionManager] = None,
        metrics: Optional[Metrics] = None
    ):
        """
        Initialize Veil client.

        Read-only operations need no signer. Authenticated operations raise
        ConfigurationError unless both a signer and an address are known.

        Args:
            signer: Message signer for the wallet
            address: Wallet address (defaults to signer.address when available)
            settings: Optional settings (loads from env if not provided)
            api: Trading API client override
            feeds_api: Feeds API client override
            session: Session manager override
            metrics: Metrics collector override
        """
        self.settings = settings or get_settings()

        self.metrics = metrics or get_metrics(
            enabled=self.settings.enable_metrics,
            port=self.settings.metrics_port
        )

        if address is None and signer is not None:
            address = getattr(signer, "address", None)
        self.signer = signer
        self.address = address.lower() if address else None

        self.api = api or VeilAPI(settings=self.settings, metrics=self.metrics)
        self.feeds_api = feeds_api or FeedsAPI(settings=self.settings, metrics=self.metrics)

        self.session = session or SessionManager(
            api=self.api,
            signer=self.signer,
            address=self.address,
            metrics=self.metrics
        )
        self.retry = SessionRetryStrategy(
            self.session,
            max_retries=self.settings.max_session_retries
        )

        self._taker_address: Optional[str] = None

        logger.info(f"Veil client initialized for {self.settings.api_url}")

    @classmethod
    def from_wallet(
        cls,
        wallet_config: WalletConfig,
        settings: Optional[VeilSettings] = None,
        **kwargs: Any
    ) -> "VeilClient":
        """
        Build a client that signs with a local private key or mnemonic.

        Args:
            wallet_config: Wallet secrets and optional address
            settings: Optional settings
            **kwargs: Passed through to the constructor

        Raises:
            AuthenticationError: If the configured address does not match the key
        """
        signer = LocalAccountSigner.from_wallet_config(wallet_config)
        return cls(
            signer=signer,
            address=wallet_config.address or signer.address,
            settings=settings,
            **kwargs
        )

    # ========== Session ==========

    @property
    def taker_address(self) -> Optional[str]:
        return self._taker_address

    @property
    def is_setup(self) -> bool:
        return self.session.token is not None and self._taker_address is not None

    async def setup(self) -> None:
        """
        Establish a session and fetch the exchange taker address.

        Idempotent: only missing pieces are fetched.
        """
        await self.session.ensure_session()
        if self._taker_address is None:
            self._taker_address = await asyncio.to_thread(self.api.get_taker_address)
            logger.debug(f"Taker address: {self._taker_address}")

    async def authenticate(self) -> None:
        """Force a fresh session, replacing any cached token."""
        await self.session.authenticate()

    async def _with_session(self, func: Callable[..., T], *args: Any) -> T:
        """Run a token-taking API call under the expired-session retry policy."""
        if not self.is_setup:
            await self.setup()

        async def operation(token: str) -> T:
            return await asyncio.to_thread(func, *args, token=token)

        return await self.retry.execute_async(operation)

    # ========== Market Data (Read-Only) ==========

    async def get_markets(
        self,
        index: Optional[str] = None,
        status: Optional[Union[MarketStatus, str]] = None
    ) -> List[Market]:
        """
        List markets.

        Args:
            index: Filter by data feed index
            status: "open" or "resolved"

        Returns:
            List of markets
        """
        if status is not None:
            status = validate_market_status(status)
        return await asyncio.to_thread(self.api.get_markets, index, status)

    async def get_market(self, slug: str) -> Market:
        """
        Get market by slug.

        Raises:
            NotFoundError: If the market does not exist
        """
        return await asyncio.to_thread(self.api.get_market, validate_slug(slug))

    async def get_order_book(self, market: MarketRef) -> List[Order]:
        """Get the open orders of a market."""
        return await asyncio.to_thread(self.api.get_order_book, _market_slug(market))

    async def get_data_feed(
        self,
        name: str,
        scope: Union[DataFeedScope, str] = DataFeedScope.MONTH
    ) -> DataFeed:
        """
        Get a data feed from the feeds host.

        Args:
            name: Data feed name
            scope: "day" or "month"

        Raises:
            ValidationError: If scope is invalid
            NotFoundError: If the feed does not exist
        """
        scope = validate_data_feed_scope(scope)
        return await asyncio.to_thread(
            self.feeds_api.get_data_feed,
            validate_slug(name, "Data feed name"),
            scope
        )

    def get_scalar_range(self, market: Market) -> Tuple[Decimal, Decimal]:
        """
        Get the human-scale price bounds of a scalar market.

        A market with minPrice="12750000000000000000" and
        maxPrice="14980000000000000000" yields (Decimal("12.75"), Decimal("14.98")).

        Raises:
            ValidationError: If the market lacks minPrice or maxPrice
        """
        if not market.min_price or not market.max_price:
            raise ValidationError(
                f"Market {market.slug} does not have min and max price"
            )
        return (
            from_base_units(market.min_price),
            from_base_units(market.max_price),
        )

    # ========== Trading (Authenticated) ==========

    async def create_quote(
        self,
        market: Market,
        side: Union[Side, str],
        token_type: Union[TokenType, str],
        amount: AmountInput,
        price: AmountInput
    ) -> Quote:
        """
        Request a quote for a limit order.

        Args:
            market: Market (needs numTicks and token addresses)
            side: "buy" or "sell"
            token_type: "long" or "short"
            amount: Share amount, human-scale or RawUnits
            price: Price in [0, 1] for the long token, human-scale or RawUnits

        Returns:
            Quote carrying an unsigned 0x order

        Raises:
            ValidationError: On invalid arguments
            ConfigurationError: If no signer is configured
        """
        params = build_quote_params(market, side, token_type, amount, price)
        quote = await self._with_session(self.api.create_quote, params)
        logger.info(f"Quote {quote.uid} created for {market.slug}")
        return quote

    async def create_order(self, quote: Quote, post_only: Optional[bool] = None) -> Order:
        """
        Sign a quote's 0x order and submit it.

        Args:
            quote: Quote from create_quote
            post_only: Reject the order instead of filling immediately

        Returns:
            Created order
        """
        if not self.is_setup:
            await self.setup()

        signed_order = await asyncio.to_thread(sign_order, self.signer, quote.zero_ex_order)
        params = {"zeroExOrder": signed_order, "quoteUid": quote.uid}
        if post_only is not None:
            params["postOnly"] = post_only

        order = await self._with_session(self.api.create_order, params)
        logger.info(f"Order {order.uid} created from quote {quote.uid} ({order.status})")
        return order

    async def cancel_order(self, uid: str) -> Order:
        """Cancel an order by uid."""
        order = await self._with_session(
            self.api.cancel_order,
            validate_slug(uid, "Order uid")
        )
        logger.info(f"Order {uid} canceled")
        return order

    async def get_user_orders(self, market: MarketRef) -> List[Order]:
        """Get this wallet's orders in a market."""
        return await self._with_session(self.api.get_user_orders, _market_slug(market))

    # ========== Lifecycle ==========

    def close(self) -> None:
        """Close HTTP sessions."""
        self.api.close()
        self.feeds_api.close()
        logger.debug("Veil client closed")

    async def __aenter__(self) -> "VeilClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"VeilClient(address={self.address}, api_url={self.settings.api_url})"
