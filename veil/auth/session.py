"""
Session management for the Veil API.

Obtains a bearer token by signing a server-issued challenge with the wallet
and caches it for the owning client. Expiry is never predicted; callers
re-authenticate when a request reports an expired session.
"""

import asyncio
from enum import Enum
from typing import Optional
import logging

from .signer import Signer
from ..api.veil_api import VeilAPI
from ..exceptions import ConfigurationError
from ..metrics import Metrics

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Session lifecycle."""
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class SessionManager:
    """
    Holds the session token for one client instance.

    The token is replaced, never mutated, on every authentication. Concurrent
    authenticate() calls share one in-flight attempt. No lock guards the
    token: a redundant re-authentication from a racing caller is harmless.
    """

    def __init__(
        self,
        api: VeilAPI,
        signer: Optional[Signer] = None,
        address: Optional[str] = None,
        metrics: Optional[Metrics] = None
    ):
        """
        Initialize session manager.

        Args:
            api: API client used for the challenge exchange
            signer: Message signer for address
            address: Wallet address that signs the challenge
            metrics: Optional metrics collector
        """
        self.api = api
        self.signer = signer
        self.address = address.lower() if address else None
        self.metrics = metrics

        self._token: Optional[str] = None
        self._state = SessionState.UNAUTHENTICATED
        self._inflight: Optional[asyncio.Future] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_configured(self) -> bool:
        return self.signer is not None and bool(self.address)

    async def ensure_session(self) -> str:
        """Return the cached token, authenticating first if there is none."""
        if self._token is not None:
            return self._token
        return await self.authenticate()

    async def authenticate(self) -> str:
        """
        Obtain a fresh session token.

        Returns:
            The new token

        Raises:
            ConfigurationError: If no signer/address is configured
            AuthenticationError: If signing the challenge fails
            RequestError: If the server rejects the challenge exchange
        """
        if not self.is_configured:
            raise ConfigurationError(
                "Authenticated operation requires a signer and wallet address"
            )

        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._authenticate())
        return await asyncio.shield(self._inflight)

    async def _authenticate(self) -> str:
        self._state = SessionState.AUTHENTICATING
        logger.debug(f"Authenticating {self.address}")

        try:
            challenge = await asyncio.to_thread(self.api.create_session_challenge)
            signature = await asyncio.to_thread(
                self.signer.sign_message,
                self.address,
                challenge.uid.encode("utf-8")
            )
            token = await asyncio.to_thread(
                self.api.create_session,
                signature,
                challenge.uid
            )
        except Exception:
            self._state = (
                SessionState.AUTHENTICATED if self._token else SessionState.UNAUTHENTICATED
            )
            if self.metrics:
                self.metrics.track_authentication("failure")
            raise

        self._token = token
        self._state = SessionState.AUTHENTICATED
        if self.metrics:
            self.metrics.track_authentication("success")
        logger.info(f"Session established for {self.address}")
        return token

    def record_expired(self) -> None:
        """Note that the server rejected the current token as expired."""
        if self.metrics:
            self.metrics.track_session_expired()
        logger.debug(f"Session expired for {self.address}")
