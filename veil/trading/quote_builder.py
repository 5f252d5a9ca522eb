"""
Quote parameter normalization.

Turns a human-scale trade intent into the CreateQuoteInput the API expects:
integer share units for the amount, integer ticks for the price.
"""

from decimal import Decimal
from typing import Any, Dict, Union
import logging

from ..models import Market, Side, TokenType
from ..exceptions import ValidationError
from ..utils.numeric import (
    Numeric,
    RawUnits,
    parse_num_ticks,
    round_to_integer,
    scale_shares,
    to_price_ticks,
)
from ..utils.validators import validate_side, validate_token_type

logger = logging.getLogger(__name__)

QUOTE_TYPE_LIMIT = "limit"

AmountInput = Union[Numeric, RawUnits]


def clamp_price(price: Decimal, num_ticks: Decimal) -> Decimal:
    """
    Clamp a tick price into [0, num_ticks].

    Examples:
        >>> clamp_price(Decimal("-5"), Decimal("10000"))
        Decimal('0')
        >>> clamp_price(Decimal("12000"), Decimal("10000"))
        Decimal('10000')
    """
    if price < 0:
        return Decimal(0)
    if price > num_ticks:
        return num_ticks
    return price


def resolve_token(market: Market, token_type: TokenType) -> str:
    """Pick the long or short token address of a market."""
    token = market.long_token if token_type == TokenType.LONG else market.short_token
    if not token:
        raise ValidationError(
            f"Market {market.slug} has no {token_type.value} token"
        )
    return token


def build_quote_params(
    market: Market,
    side: Union[Side, str],
    token_type: Union[TokenType, str],
    amount: AmountInput,
    price: AmountInput
) -> Dict[str, Any]:
    """
    Build CreateQuoteInput params.

    Human-scale amounts are converted to share units and human-scale prices
    to ticks, relative to the market's numTicks. RawUnits are used as-is.
    The price is clamped into [0, numTicks]; both values are then rounded
    half away from zero to integers.

    Args:
        market: Market to trade (needs numTicks and token addresses)
        side: buy or sell
        token_type: long or short
        amount: Share amount (human-scale or RawUnits)
        price: Price as a fraction of the payout (human-scale or RawUnits)

    Returns:
        Params dict with integer-string tokenAmount and price

    Raises:
        ValidationError: On invalid side, token type, numTicks or numbers
    """
    side = validate_side(side)
    token_type = validate_token_type(token_type)
    num_ticks = parse_num_ticks(market.num_ticks)

    if isinstance(amount, RawUnits):
        amount_units = amount.value
    else:
        amount_units = scale_shares(amount, num_ticks)

    if isinstance(price, RawUnits):
        price_ticks = price.value
    else:
        price_ticks = to_price_ticks(price, num_ticks)

    price_ticks = clamp_price(price_ticks, num_ticks)

    params = {
        "side": side.value,
        "token": resolve_token(market, token_type),
        "tokenAmount": str(round_to_integer(amount_units)),
        "price": str(round_to_integer(price_ticks)),
        "type": QUOTE_TYPE_LIMIT,
    }
    logger.debug(
        f"Quote params for {market.slug}: {side.value} {token_type.value} "
        f"amount={params['tokenAmount']} price={params['price']}"
    )
    return params
