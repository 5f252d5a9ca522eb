"""Authentication modules for the Veil client."""

from .signer import Signer, LocalAccountSigner
from .session import SessionManager, SessionState

__all__ = ["Signer", "LocalAccountSigner", "SessionManager", "SessionState"]
