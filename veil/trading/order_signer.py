"""
0x v2 order hashing and signing.

Quotes carry an unsigned 0x order; the maker signs its EIP-712 hash before
the order is submitted. Signatures use the 0x EthSign layout:
v (1 byte) || r (32) || s (32) || signature type 0x03.
"""

from typing import Any, Dict
import logging

from poly_eip712_structs import make_domain
from eth_utils import keccak, to_bytes, to_hex

from .eip712_models import Order as ZeroExOrderStruct
from ..auth.signer import Signer
from ..exceptions import ValidationError
from ..utils.numeric import parse_api_numeric

logger = logging.getLogger(__name__)

DOMAIN_NAME = "0x Protocol"
DOMAIN_VERSION = "2"
ETH_SIGN_SIGNATURE_TYPE = 0x03

ADDRESS_FIELDS = (
    "makerAddress",
    "takerAddress",
    "feeRecipientAddress",
    "senderAddress",
)
UINT_FIELDS = (
    "makerAssetAmount",
    "takerAssetAmount",
    "makerFee",
    "takerFee",
    "expirationTimeSeconds",
    "salt",
)
BYTES_FIELDS = ("makerAssetData", "takerAssetData")


def _require(order: Dict[str, Any], field: str) -> Any:
    value = order.get(field)
    if value is None or value == "":
        raise ValidationError(f"0x order is missing {field}")
    return value


def _to_uint(order: Dict[str, Any], field: str) -> int:
    value = parse_api_numeric(_require(order, field), field)
    if value < 0 or value != value.to_integral_value():
        raise ValidationError(f"0x order {field} must be a non-negative integer, got {value}")
    return int(value)


def hash_order(order: Dict[str, Any]) -> bytes:
    """
    Compute the EIP-712 hash of a 0x v2 order.

    Args:
        order: 0x order as returned in a quote (camelCase keys)

    Returns:
        32-byte order hash

    Raises:
        ValidationError: If a required order field is missing or malformed
    """
    domain = make_domain(
        name=DOMAIN_NAME,
        version=DOMAIN_VERSION,
        verifyingContract=_require(order, "exchangeAddress")
    )

    values: Dict[str, Any] = {}
    for field in ADDRESS_FIELDS:
        values[field] = _require(order, field)
    for field in UINT_FIELDS:
        values[field] = _to_uint(order, field)
    for field in BYTES_FIELDS:
        values[field] = to_bytes(hexstr=_require(order, field))

    struct = ZeroExOrderStruct(**values)
    return keccak(struct.signable_bytes(domain))


def sign_order(signer: Signer, order: Dict[str, Any]) -> Dict[str, Any]:
    """
    Sign a 0x order with the maker's key.

    Args:
        signer: Signer controlling order["makerAddress"]
        order: Unsigned 0x order

    Returns:
        Copy of the order with uint fields as decimal strings and a "signature" field
    """
    order_hash = hash_order(order)
    maker = order["makerAddress"]

    raw = to_bytes(hexstr=signer.sign_message(maker, order_hash))
    if len(raw) != 65:
        raise ValidationError(f"Expected 65-byte signature, got {len(raw)} bytes")

    r, s, v = raw[:32], raw[32:64], raw[64]
    signature = bytes([v]) + r + s + bytes([ETH_SIGN_SIGNATURE_TYPE])

    # uint256 values travel as decimal strings
    uints = {field: str(_to_uint(order, field)) for field in UINT_FIELDS}

    logger.debug(f"Signed 0x order {to_hex(order_hash)} for {maker}")
    return {**order, **uints, "signature": to_hex(signature)}
