"""
Input validation utilities.

Validates enum-like arguments, addresses and keys before API calls.
"""

import re
from typing import Any

from eth_utils import to_checksum_address

from ..exceptions import ValidationError
from ..models import Side, TokenType, DataFeedScope, MarketStatus


def _validate_choice(value: Any, enum_cls, label: str):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            pass
    choices = ", ".join(member.value for member in enum_cls)
    raise ValidationError(f"{label} must be one of {choices}, got {value!r}")


def validate_side(side: Any) -> Side:
    """
    Validate order side.

    Raises:
        ValidationError: If side is not buy or sell
    """
    return _validate_choice(side, Side, "Side")


def validate_token_type(token_type: Any) -> TokenType:
    """
    Validate token type.

    Raises:
        ValidationError: If token type is not long or short
    """
    return _validate_choice(token_type, TokenType, "Token type")


def validate_data_feed_scope(scope: Any) -> DataFeedScope:
    """Validate data feed scope (day or month)."""
    return _validate_choice(scope, DataFeedScope, "Data feed scope")


def validate_market_status(status: Any) -> MarketStatus:
    """Validate market status filter (open or resolved)."""
    return _validate_choice(status, MarketStatus, "Market status")


def validate_slug(slug: Any, label: str = "Market slug") -> str:
    """Validate a non-empty identifier."""
    if not isinstance(slug, str) or not slug.strip():
        raise ValidationError(f"{label} must be a non-empty string, got {slug!r}")
    return slug.strip()


def validate_address(address: str) -> str:
    """
    Validate Ethereum address.

    Args:
        address: Ethereum address

    Returns:
        Checksummed address

    Raises:
        ValidationError: If address is invalid
    """
    if not isinstance(address, str):
        raise ValidationError(f"Address must be string, got {type(address)}")

    # Remove 0x prefix if present
    addr = address[2:] if address.startswith("0x") else address

    # Validate hex format and length (20 bytes = 40 hex chars)
    if not re.match(r"^[0-9a-fA-F]{40}$", addr):
        raise ValidationError(f"Invalid Ethereum address: {address}")

    return to_checksum_address(f"0x{addr}")


def validate_private_key(private_key: str) -> str:
    """
    Validate private key format.

    Args:
        private_key: Private key hex string

    Returns:
        Normalized private key

    Raises:
        ValidationError: If private key is invalid
    """
    if not isinstance(private_key, str):
        raise ValidationError(f"Private key must be string, got {type(private_key)}")

    # Remove 0x prefix if present
    key = private_key[2:] if private_key.startswith("0x") else private_key

    # Validate hex format and length (32 bytes = 64 hex chars)
    if not re.match(r"^[0-9a-fA-F]{64}$", key):
        raise ValidationError("Invalid private key format")

    return f"0x{key.lower()}"
