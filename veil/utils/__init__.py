"""Utility modules for the Veil client."""

from .numeric import (
    RawUnits,
    to_base_units,
    from_base_units,
    to_share_units,
    from_share_units,
    to_price_ticks,
    from_price_ticks,
)
from .retry import SessionRetryStrategy, is_session_expired

__all__ = [
    "RawUnits",
    "to_base_units",
    "from_base_units",
    "to_share_units",
    "from_share_units",
    "to_price_ticks",
    "from_price_ticks",
    "SessionRetryStrategy",
    "is_session_expired",
]
