"""
Custom exceptions for the Veil client.

Provides typed exceptions so callers can tell transport failures, API-level
failures and local precondition violations apart.
"""

from typing import Optional, Any


class VeilError(Exception):
    """Base exception for all Veil errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(VeilError):
    """Authenticated operation attempted without a signing identity."""
    pass


class TransportError(VeilError):
    """Network or transport failure unrelated to the API's own error semantics."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 url: Optional[str] = None):
        super().__init__(message, {"status_code": status_code, "url": url})
        self.status_code = status_code
        self.url = url


class RequestTimeoutError(TransportError):
    """Request timed out."""
    pass


class RequestError(VeilError):
    """
    API returned an error envelope.

    Carries the raw server error list and the originating URL.
    """

    def __init__(self, errors: list[Any], url: str,
                 status_code: Optional[int] = None,
                 message: Optional[str] = None):
        if message is None:
            message = f"Request to {url} failed: {_summarize(errors)}"
        super().__init__(message, {"errors": errors, "url": url, "status_code": status_code})
        self.errors = errors
        self.url = url
        self.status_code = status_code


class SessionRetryExhaustedError(RequestError):
    """Session kept expiring after the maximum number of re-authentications."""

    def __init__(self, errors: list[Any], url: str, attempts: int,
                 status_code: Optional[int] = None):
        super().__init__(
            errors,
            url,
            status_code=status_code,
            message=(
                f"Session still expired after {attempts} re-authentication(s) "
                f"for {url}: {_summarize(errors)}"
            ),
        )
        self.attempts = attempts


class AuthenticationError(VeilError):
    """Signing the session challenge failed."""
    pass


class NotFoundError(VeilError):
    """Requested entity does not exist."""

    def __init__(self, message: str, identifier: Optional[str] = None):
        super().__init__(message, {"identifier": identifier})
        self.identifier = identifier


class ValidationError(VeilError):
    """Input validation or precondition failed."""
    pass


def _summarize(errors: list[Any]) -> str:
    messages = []
    for error in errors:
        if isinstance(error, dict):
            messages.append(str(error.get("message", error)))
        else:
            messages.append(str(error))
    return "; ".join(messages) or "unknown error"
