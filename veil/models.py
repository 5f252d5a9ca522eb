"""
Type definitions for the Veil client.

Uses Pydantic for runtime validation and type safety.
PRECISION: Amounts and prices stay integer-scaled strings exactly as the API
sent them. Use veil.utils.numeric to convert them to human-scale Decimals.
"""

from enum import Enum
from typing import Optional, Any, Union
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel


class Side(str, Enum):
    """Order side."""
    BUY = "buy"
    SELL = "sell"


class TokenType(str, Enum):
    """Market outcome token."""
    LONG = "long"
    SHORT = "short"


class OrderStatus(str, Enum):
    """
    Order lifecycle states.

    Transitions happen server side: open -> filled | canceled | expired.
    """
    OPEN = "open"
    FILLED = "filled"
    CANCELED = "canceled"
    EXPIRED = "expired"


class MarketStatus(str, Enum):
    """Market listing filter."""
    OPEN = "open"
    RESOLVED = "resolved"


class DataFeedScope(str, Enum):
    """Time window for data feed entries."""
    DAY = "day"
    MONTH = "month"


def _numeric_string(v: Any) -> Any:
    """Keep integer-scaled values as strings without going through float."""
    if v is None or isinstance(v, str):
        return v
    if isinstance(v, bool):
        raise ValueError("Boolean is not a numeric value")
    if isinstance(v, (int, Decimal)):
        return str(v)
    if isinstance(v, float):
        return str(Decimal(str(v)))
    raise ValueError(f"Cannot convert {type(v)} to numeric string")


class VeilModel(BaseModel):
    """Base model: camelCase aliases, unknown fields kept."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class Order(VeilModel):
    """Order, as returned by order mutations, user orders and order books."""
    uid: Optional[str] = None
    status: Optional[Union[OrderStatus, str]] = None
    long_price: Optional[str] = None
    long_side: Optional[Side] = None
    token_amount: Optional[str] = None
    token_amount_filled: Optional[str] = None
    token_amount_unfilled: Optional[str] = None

    @field_validator(
        "long_price", "token_amount", "token_amount_filled", "token_amount_unfilled",
        mode="before"
    )
    @classmethod
    def validate_numeric(cls, v: Any) -> Any:
        """Convert numeric fields to strings."""
        return _numeric_string(v)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> Any:
        """Keep statuses this client does not know as plain strings."""
        if isinstance(v, str) and not isinstance(v, OrderStatus):
            try:
                return OrderStatus(v)
            except ValueError:
                return v
        return v

    @property
    def is_open(self) -> bool:
        return self.status == OrderStatus.OPEN


class Market(VeilModel):
    """Market reference data."""
    slug: str
    uid: Optional[str] = None
    name: Optional[str] = None
    ends_at: Optional[str] = None
    short_token: Optional[str] = None
    long_token: Optional[str] = None
    num_ticks: Optional[str] = None
    min_price: Optional[str] = None
    max_price: Optional[str] = None
    index: Optional[str] = None
    limit_price: Optional[str] = None
    orders: Optional[list[Order]] = None

    @field_validator(
        "ends_at", "num_ticks", "min_price", "max_price", "limit_price",
        mode="before"
    )
    @classmethod
    def validate_numeric(cls, v: Any) -> Any:
        """Convert numeric fields to strings."""
        return _numeric_string(v)

    @property
    def is_scalar(self) -> bool:
        """Scalar markets carry both price bounds."""
        return bool(self.min_price) and bool(self.max_price)


class Quote(VeilModel):
    """Priced, unsigned trade proposal returned by the server."""
    uid: str
    zero_ex_order: dict[str, Any]


class DataFeedEntry(VeilModel):
    """Single data feed observation."""
    value: str
    timestamp: str

    @field_validator("value", "timestamp", mode="before")
    @classmethod
    def validate_numeric(cls, v: Any) -> Any:
        """Convert numeric fields to strings."""
        return _numeric_string(v)


class DataFeed(VeilModel):
    """Index data feed backing scalar markets."""
    uid: str
    name: str
    description: Optional[str] = None
    denomination: Optional[str] = None
    entries: list[DataFeedEntry] = Field(default_factory=list)


class Challenge(VeilModel):
    """One-time session challenge."""
    uid: str


# Configuration Models
class WalletConfig(BaseModel):
    """
    Wallet configuration.

    Exactly one of private_key or mnemonic must be set.
    SECURITY: Secrets are hidden from repr to prevent leakage in logs.
    """
    private_key: Optional[str] = Field(None, repr=False, description="Wallet private key (hex)")
    mnemonic: Optional[str] = Field(None, repr=False, description="BIP-39 mnemonic")
    address: Optional[str] = Field(None, description="Wallet address (derived if not provided)")
    account_path: str = Field(default="m/44'/60'/0'/0/0", description="HD derivation path")

    @model_validator(mode="after")
    def check_secret(self) -> "WalletConfig":
        if bool(self.private_key) == bool(self.mnemonic):
            raise ValueError("Provide exactly one of private_key or mnemonic")
        return self
