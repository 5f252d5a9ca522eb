"""
Wallet signing capability.

The client only depends on the Signer protocol: an address plus EIP-191
personal-message signing. LocalAccountSigner implements it with eth-account
for a private key or a BIP-39 mnemonic.
"""

from typing import Protocol, runtime_checkable
import logging

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from eth_utils import to_hex

from ..exceptions import AuthenticationError
from ..models import WalletConfig
from ..utils.validators import validate_private_key, validate_address

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNT_PATH = "m/44'/60'/0'/0/0"


@runtime_checkable
class Signer(Protocol):
    """Message-signing capability for one or more addresses."""

    def sign_message(self, address: str, message: bytes) -> str:
        """Sign message bytes (EIP-191) for address and return a 0x-hex signature."""
        ...


class LocalAccountSigner:
    """
    Signer backed by an in-process eth-account key.

    SECURITY: The key never appears in repr or log output.
    """

    def __init__(self, account: LocalAccount):
        self._account = account

    @classmethod
    def from_private_key(cls, private_key: str) -> "LocalAccountSigner":
        return cls(Account.from_key(validate_private_key(private_key)))

    @classmethod
    def from_mnemonic(
        cls,
        mnemonic: str,
        account_path: str = DEFAULT_ACCOUNT_PATH
    ) -> "LocalAccountSigner":
        Account.enable_unaudited_hdwallet_features()
        try:
            account = Account.from_mnemonic(mnemonic, account_path=account_path)
        except Exception as e:
            # SECURITY: Never echo the mnemonic back in the error
            raise AuthenticationError(f"Invalid mnemonic: {type(e).__name__}") from None
        return cls(account)

    @classmethod
    def from_wallet_config(cls, wallet_config: WalletConfig) -> "LocalAccountSigner":
        """
        Build a signer from wallet configuration.

        Raises:
            AuthenticationError: If the configured address does not match the key
        """
        if wallet_config.private_key:
            signer = cls.from_private_key(wallet_config.private_key)
        else:
            signer = cls.from_mnemonic(wallet_config.mnemonic, wallet_config.account_path)

        if wallet_config.address and not signer.controls(wallet_config.address):
            raise AuthenticationError(
                f"Configured address {wallet_config.address} does not match signing key"
            )
        return signer

    @property
    def address(self) -> str:
        return self._account.address

    def controls(self, address: str) -> bool:
        return validate_address(address) == self._account.address

    def sign_message(self, address: str, message: bytes) -> str:
        """
        Sign message with the EIP-191 personal-message prefix.

        Raises:
            AuthenticationError: If address is not this signer's account
        """
        if not self.controls(address):
            raise AuthenticationError(f"Signer cannot sign for address {address}")

        try:
            signed = self._account.sign_message(encode_defunct(primitive=message))
        except Exception as e:
            # SECURITY: Sanitize error message to prevent credential leakage
            error_type = type(e).__name__
            logger.error(f"Failed to sign message: {error_type}")
            raise AuthenticationError(f"Message signature failed: {error_type}") from None

        return to_hex(signed.signature)

    def __repr__(self) -> str:
        return f"LocalAccountSigner(address={self.address})"
