"""
Re-authenticate-and-retry logic for session-authenticated calls.

The only recoverable API error is an expired session. Every authenticated
operation goes through SessionRetryStrategy.execute_async, which
re-authenticates and retries a bounded number of times.
"""

from typing import Any, Awaitable, Callable, Iterable, TypeVar, TYPE_CHECKING
import logging

from ..exceptions import RequestError, SessionRetryExhaustedError

if TYPE_CHECKING:
    from ..auth.session import SessionManager

logger = logging.getLogger(__name__)

T = TypeVar('T')

SESSION_EXPIRED_CODES = frozenset({"SESSION_EXPIRED", "JWT_EXPIRED"})
SESSION_EXPIRED_MESSAGE = "jwt expired"


def is_session_expired(errors: Iterable[Any]) -> bool:
    """
    Check whether a server error list signals an expired session.

    A structured extensions.code is preferred; the "jwt expired" message
    substring is kept for servers that do not send one.

    Examples:
        >>> is_session_expired([{"message": "jwt expired"}])
        True
        >>> is_session_expired([{"message": "x", "extensions": {"code": "SESSION_EXPIRED"}}])
        True
        >>> is_session_expired([{"message": "Market not found"}])
        False
    """
    for error in errors or ():
        if not isinstance(error, dict):
            if SESSION_EXPIRED_MESSAGE in str(error):
                return True
            continue

        extensions = error.get("extensions")
        if isinstance(extensions, dict) and extensions.get("code") in SESSION_EXPIRED_CODES:
            return True

        message = error.get("message")
        if isinstance(message, str) and SESSION_EXPIRED_MESSAGE in message:
            return True

    return False


class SessionRetryStrategy:
    """
    Authenticate-and-retry policy around session-authenticated operations.

    1. Ensure a session exists.
    2. Invoke the operation with the current token.
    3. On an expired-session RequestError, re-authenticate and retry,
       at most max_retries times, then raise SessionRetryExhaustedError.
    4. Any other error propagates unretried.
    """

    def __init__(self, session: "SessionManager", max_retries: int = 3):
        """
        Initialize retry strategy.

        Args:
            session: Session manager providing tokens
            max_retries: Maximum re-authentications per call
        """
        self.session = session
        self.max_retries = max_retries

    async def execute_async(self, operation: Callable[[str], Awaitable[T]]) -> T:
        """
        Execute operation with session retry.

        Args:
            operation: Coroutine function taking the session token

        Returns:
            Operation result

        Raises:
            SessionRetryExhaustedError: If the session keeps expiring
        """
        token = await self.session.ensure_session()
        attempt = 0

        while True:
            try:
                return await operation(token)
            except RequestError as e:
                if not is_session_expired(e.errors):
                    raise

                self.session.record_expired()

                if attempt >= self.max_retries:
                    logger.error(
                        f"Session still expired after {attempt} re-authentication(s): {e.url}"
                    )
                    raise SessionRetryExhaustedError(
                        e.errors, e.url, attempts=attempt, status_code=e.status_code
                    ) from e

                attempt += 1
                logger.warning(
                    f"Session expired, re-authenticating "
                    f"(retry {attempt}/{self.max_retries})"
                )
                token = await self.session.authenticate()
