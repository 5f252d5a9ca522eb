"""
Fixed-point conversion utilities.

Converts between human-scale decimal amounts and the integer-scaled strings
the Veil API expects. Currency amounts are scaled by 10^18 (base units);
share amounts are scaled by 10^18 / numTicks (share units); prices are
expressed in ticks (price * numTicks).

All arithmetic runs on Decimal in a local context wide enough for uint256
values. Floats are only accepted as input and go through str() first.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, localcontext
from typing import Any, Optional, Union
import logging

from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

# uint256 has 78 decimal digits; leave headroom for fractional digits
DECIMAL_PRECISION = 100

BASE_UNIT_DECIMALS = 18
TEN_18 = Decimal(10) ** BASE_UNIT_DECIMALS

Numeric = Union[int, float, str, Decimal]


@dataclass(frozen=True)
class RawUnits:
    """
    Amount or price that is already integer-scaled.

    Passing RawUnits to quote creation skips human-scale conversion.

    Examples:
        >>> RawUnits("5000").value
        Decimal('5000')
    """
    value: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", parse_api_numeric(self.value, "raw units"))

    def __str__(self) -> str:
        return str(self.value)


def to_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """
    Safely convert any value to Decimal.

    Args:
        value: Value to convert (str, int, float, Decimal, RawUnits, None)
        default: Default value if conversion fails (default: None)

    Returns:
        Decimal or default if conversion fails

    Examples:
        >>> to_decimal("0.65")
        Decimal('0.65')
        >>> to_decimal(100.50)
        Decimal('100.5')
        >>> to_decimal(None, Decimal("0"))
        Decimal('0')
    """
    if value is None:
        return default

    try:
        if isinstance(value, Decimal):
            return value
        elif isinstance(value, RawUnits):
            return value.value
        elif isinstance(value, str):
            # Direct string conversion (most precise)
            return Decimal(value.strip())
        elif isinstance(value, (int, float)):
            # Convert via string to avoid float precision loss
            return Decimal(str(value))
        else:
            logger.warning(f"Cannot convert {type(value)} to Decimal: {value}")
            return default
    except (ValueError, InvalidOperation) as e:
        logger.warning(f"Failed to convert {value} to Decimal: {e}")
        return default


def parse_api_numeric(value: Any, field_name: str = "value") -> Decimal:
    """
    Parse a finite numeric value.

    Handles both string and numeric JSON values.

    Args:
        value: Value to parse (str, int, float, Decimal)
        field_name: Field name for error messages

    Returns:
        Decimal value

    Raises:
        ValidationError: If value is missing, malformed or not finite

    Examples:
        >>> parse_api_numeric("12750000000000000000")
        Decimal('12750000000000000000')
        >>> parse_api_numeric(None, "numTicks")
        Traceback (most recent call last):
        ...
        veil.exceptions.ValidationError: Missing required field: numTicks
    """
    if value is None:
        raise ValidationError(f"Missing required field: {field_name}")

    result = to_decimal(value)
    if result is None or not result.is_finite():
        raise ValidationError(f"Invalid numeric value for {field_name}: {value!r}")

    return result


def parse_num_ticks(num_ticks: Any) -> Decimal:
    """Parse numTicks, which must be a positive integer."""
    ticks = parse_api_numeric(num_ticks, "numTicks")
    if ticks <= 0 or ticks != ticks.to_integral_value():
        raise ValidationError(f"numTicks must be a positive integer, got {num_ticks!r}")
    return ticks


def round_to_integer(value: Decimal) -> int:
    """
    Round to the nearest integer, halves away from zero.

    Examples:
        >>> round_to_integer(Decimal("2.5"))
        3
        >>> round_to_integer(Decimal("-2.5"))
        -3
    """
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_base_units(amount: Numeric) -> str:
    """
    Convert a human-scale currency amount to base units (amount * 10^18).

    Examples:
        >>> to_base_units("1.5")
        '1500000000000000000'
        >>> to_base_units(0.1)
        '100000000000000000'
    """
    value = parse_api_numeric(amount, "amount")
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return str(round_to_integer(value * TEN_18))


def from_base_units(amount: Numeric) -> Decimal:
    """
    Convert base units back to a human-scale amount (amount / 10^18).

    Examples:
        >>> from_base_units("12750000000000000000")
        Decimal('12.75')
    """
    value = parse_api_numeric(amount, "amount")
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return value / TEN_18


def to_share_units(amount: Numeric, num_ticks: Numeric) -> str:
    """
    Convert a human-scale share amount to share units (amount * 10^18 / numTicks).

    Examples:
        >>> to_share_units(50, "10000")
        '5000000000000000'
    """
    return str(round_to_integer(scale_shares(amount, num_ticks)))


def scale_shares(amount: Numeric, num_ticks: Numeric) -> Decimal:
    """Unrounded share-unit scaling, used where rounding happens later."""
    value = parse_api_numeric(amount, "amount")
    ticks = parse_num_ticks(num_ticks)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return value * TEN_18 / ticks


def from_share_units(amount: Numeric, num_ticks: Numeric) -> Decimal:
    """
    Convert share units back to a human-scale amount (amount * numTicks / 10^18).

    Examples:
        >>> from_share_units("5000000000000000", 10000)
        Decimal('50')
    """
    value = parse_api_numeric(amount, "amount")
    ticks = parse_num_ticks(num_ticks)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return value * ticks / TEN_18


def to_price_ticks(price: Numeric, num_ticks: Numeric) -> Decimal:
    """
    Convert a human-scale price (fraction of the payout) to ticks, unrounded.

    Examples:
        >>> to_price_ticks("0.5", 10000)
        Decimal('5000.0')
    """
    value = parse_api_numeric(price, "price")
    ticks = parse_num_ticks(num_ticks)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return value * ticks


def from_price_ticks(ticks: Numeric, num_ticks: Numeric) -> Decimal:
    """Convert a tick price back to a human-scale price."""
    value = parse_api_numeric(ticks, "price")
    total = parse_num_ticks(num_ticks)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return value / total
