"""
Veil trading API client.

One method per remote operation. Market listing goes through REST; every
other operation is a GraphQL document. Methods are synchronous and take the
bearer token explicitly; the domain client runs them in worker threads.
"""

from typing import Optional, List, Dict, Any
import logging

from .base import BaseAPIClient
from ..config import VeilSettings
from ..metrics import Metrics
from ..models import Market, Order, Quote, Challenge, MarketStatus
from ..exceptions import NotFoundError, TransportError

logger = logging.getLogger(__name__)


CREATE_SESSION_CHALLENGE = """
  mutation CreateSessionChallenge {
    createSessionChallenge {
      uid
    }
  }
"""

CREATE_SESSION = """
  mutation CreateSession($signature: String!, $challengeUid: String!) {
    createSession(signature: $signature, challengeUid: $challengeUid, message: $challengeUid) {
      token
    }
  }
"""

GET_MARKET = """
  query GetMarket($slug: String!) {
    market(slug: $slug) {
      slug
      uid
      endsAt
      minPrice
      maxPrice
      shortToken
      longToken
      numTicks
      index
      limitPrice
    }
  }
"""

GET_ORDER_BOOK = """
  query GetOrderBook($slug: String!) {
    market(slug: $slug) {
      orders {
        longPrice
        longSide
        tokenAmount
        tokenAmountFilled
      }
    }
  }
"""

GET_TAKER_ADDRESS = """
  query GetTakerAddress {
    takerAddress
  }
"""

CREATE_QUOTE = """
  mutation CreateQuote($params: CreateQuoteInput!) {
    createQuote(params: $params) {
      uid
      zeroExOrder
    }
  }
"""

CREATE_ORDER = """
  mutation CreateOrder($params: CreateOrderInput!) {
    createOrder(params: $params) {
      uid
      status
      tokenAmount
      tokenAmountFilled
    }
  }
"""

CANCEL_ORDER = """
  mutation CancelOrder($uid: String!) {
    cancelOrder(uid: $uid) {
      uid
      status
      tokenAmount
      tokenAmountFilled
    }
  }
"""

GET_USER_ORDERS = """
  query GetUserOrders($slug: String!) {
    userOrders(marketSlug: $slug) {
      uid
      longPrice
      longSide
      tokenAmount
      tokenAmountFilled
      status
    }
  }
"""


def _field(data: Any, name: str, url: str) -> Any:
    """Pull a top-level field out of a GraphQL data payload."""
    if not isinstance(data, dict) or name not in data:
        raise TransportError(f"Response from {url} is missing '{name}'", url=url)
    return data[name]


class VeilAPI(BaseAPIClient):
    """
    Veil trading API client.

    Unauthenticated reads accept no token; every other call requires one.
    """

    def __init__(
        self,
        settings: VeilSettings,
        metrics: Optional[Metrics] = None
    ):
        """
        Initialize Veil API client.

        Args:
            settings: Client settings
            metrics: Optional metrics collector
        """
        super().__init__(
            base_url=settings.api_url,
            settings=settings,
            metrics=metrics
        )

    @property
    def graphql_url(self) -> str:
        return self._build_url("/graphql")

    # ========== Session ==========

    def create_session_challenge(self) -> Challenge:
        """Request a one-time challenge to sign."""
        data = self.graphql(CREATE_SESSION_CHALLENGE)
        return Challenge.model_validate(
            _field(data, "createSessionChallenge", self.graphql_url)
        )

    def create_session(self, signature: str, challenge_uid: str) -> str:
        """
        Exchange a signed challenge for a session token.

        Args:
            signature: Hex signature over the challenge uid
            challenge_uid: Challenge uid that was signed

        Returns:
            Bearer token
        """
        data = self.graphql(
            CREATE_SESSION,
            {"signature": signature, "challengeUid": challenge_uid}
        )
        session = _field(data, "createSession", self.graphql_url)
        token = session.get("token") if isinstance(session, dict) else None
        if not token:
            raise TransportError(
                f"Response from {self.graphql_url} has no session token",
                url=self.graphql_url
            )
        return token

    # ========== Market Data (Read-Only) ==========

    def get_markets(
        self,
        index: Optional[str] = None,
        status: Optional[MarketStatus] = None
    ) -> List[Market]:
        """
        List markets.

        Args:
            index: Filter by data feed index
            status: Filter by open/resolved

        Returns:
            List of markets
        """
        data = self.get(
            "/api/v1/markets",
            params={"index": index, "status": status}
        )
        # Paginated responses wrap the list
        if isinstance(data, dict) and "results" in data:
            data = data["results"]
        if not isinstance(data, list):
            raise TransportError(
                f"Unexpected markets payload: {type(data).__name__}",
                url=self._build_url("/api/v1/markets")
            )

        markets = [Market.model_validate(item) for item in data]
        logger.info(f"Fetched {len(markets)} markets")
        return markets

    def get_market(self, slug: str) -> Market:
        """
        Get market by slug.

        Raises:
            NotFoundError: If the server returns no market
        """
        data = self.graphql(GET_MARKET, {"slug": slug})
        market = _field(data, "market", self.graphql_url)
        if not market:
            raise NotFoundError(f"Market not found: {slug}", identifier=slug)
        return Market.model_validate(market)

    def get_order_book(self, slug: str) -> List[Order]:
        """
        Get open orders for a market.

        Raises:
            NotFoundError: If the server returns no market
        """
        data = self.graphql(GET_ORDER_BOOK, {"slug": slug})
        market = _field(data, "market", self.graphql_url)
        if not market:
            raise NotFoundError(f"Market not found: {slug}", identifier=slug)
        return [Order.model_validate(order) for order in market.get("orders") or []]

    def get_taker_address(self) -> str:
        """Get the exchange taker address used by the API."""
        data = self.graphql(GET_TAKER_ADDRESS)
        return _field(data, "takerAddress", self.graphql_url)

    # ========== Trading (Authenticated) ==========

    def create_quote(self, params: Dict[str, Any], token: str) -> Quote:
        """
        Create a quote.

        Args:
            params: Normalized CreateQuoteInput
            token: Session token

        Returns:
            Quote with unsigned 0x order
        """
        data = self.graphql(CREATE_QUOTE, {"params": params}, token=token)
        return Quote.model_validate(_field(data, "createQuote", self.graphql_url))

    def create_order(self, params: Dict[str, Any], token: str) -> Order:
        """
        Submit a signed order.

        Args:
            params: CreateOrderInput with the signed 0x order and quote uid
            token: Session token
        """
        data = self.graphql(CREATE_ORDER, {"params": params}, token=token)
        return Order.model_validate(_field(data, "createOrder", self.graphql_url))

    def cancel_order(self, uid: str, token: str) -> Order:
        """Cancel an order by uid."""
        data = self.graphql(CANCEL_ORDER, {"uid": uid}, token=token)
        return Order.model_validate(_field(data, "cancelOrder", self.graphql_url))

    def get_user_orders(self, slug: str, token: str) -> List[Order]:
        """Get the authenticated user's orders in a market."""
        data = self.graphql(GET_USER_ORDERS, {"slug": slug}, token=token)
        orders = _field(data, "userOrders", self.graphql_url) or []
        return [Order.model_validate(order) for order in orders]
