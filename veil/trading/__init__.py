"""Trading helpers: quote normalization and 0x order signing."""

from .quote_builder import build_quote_params, clamp_price
from .order_signer import hash_order, sign_order

__all__ = ["build_quote_params", "clamp_price", "hash_order", "sign_order"]
