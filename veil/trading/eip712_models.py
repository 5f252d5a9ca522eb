"""
EIP-712 struct models for 0x v2 exchange orders.

Uses poly_eip712_structs. The struct name must stay "Order" because it is
part of the EIP-712 type hash.
"""

from poly_eip712_structs import EIP712Struct, Address, Bytes, Uint


class Order(EIP712Struct):
    """0x protocol v2 order."""
    makerAddress = Address()
    takerAddress = Address()
    feeRecipientAddress = Address()
    senderAddress = Address()
    makerAssetAmount = Uint(256)
    takerAssetAmount = Uint(256)
    makerFee = Uint(256)
    takerFee = Uint(256)
    expirationTimeSeconds = Uint(256)
    salt = Uint(256)
    makerAssetData = Bytes()
    takerAssetData = Bytes()
