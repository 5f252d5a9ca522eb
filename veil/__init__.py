"""
Veil Client Library

Async client for the Veil prediction market: market data, quotes,
0x order signing and order management.
"""

from .client import VeilClient
from .config import VeilSettings, get_settings
from .models import (
    Side,
    TokenType,
    OrderStatus,
    MarketStatus,
    DataFeedScope,
    Order,
    Market,
    Quote,
    DataFeed,
    DataFeedEntry,
    WalletConfig,
)
from .exceptions import (
    VeilError,
    ConfigurationError,
    TransportError,
    RequestTimeoutError,
    RequestError,
    SessionRetryExhaustedError,
    AuthenticationError,
    NotFoundError,
    ValidationError,
)
from .auth import Signer, LocalAccountSigner
from .utils.numeric import (
    RawUnits,
    to_base_units,
    from_base_units,
    to_share_units,
    from_share_units,
)
from .logging_config import setup_logging

__version__ = "1.0.0"

__all__ = [
    "VeilClient",
    "VeilSettings",
    "get_settings",
    "Side",
    "TokenType",
    "OrderStatus",
    "MarketStatus",
    "DataFeedScope",
    "Order",
    "Market",
    "Quote",
    "DataFeed",
    "DataFeedEntry",
    "WalletConfig",
    "VeilError",
    "ConfigurationError",
    "TransportError",
    "RequestTimeoutError",
    "RequestError",
    "SessionRetryExhaustedError",
    "AuthenticationError",
    "NotFoundError",
    "ValidationError",
    "Signer",
    "LocalAccountSigner",
    "RawUnits",
    "to_base_units",
    "from_base_units",
    "to_share_units",
    "from_share_units",
    "setup_logging",
]
