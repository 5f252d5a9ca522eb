"""
Tests for the expired-session retry policy.

Re-authentication is bounded: a session that keeps expiring ends in
SessionRetryExhaustedError instead of looping forever.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from ..exceptions import RequestError, SessionRetryExhaustedError, TransportError
from ..utils.retry import SessionRetryStrategy, is_session_expired

URL = "https://api.veil.test/graphql"
EXPIRED = [{"message": "jwt expired"}]


def expired_error():
    return RequestError(list(EXPIRED), URL, status_code=200)


def raise_expired(token):
    raise expired_error()


@pytest.fixture
def session():
    session = MagicMock()
    session.ensure_session = AsyncMock(return_value="token-0")
    session.authenticate = AsyncMock(side_effect=[f"token-{i}" for i in range(1, 20)])
    return session


class TestIsSessionExpired:

    def test_message_substring(self):
        assert is_session_expired([{"message": "jwt expired"}])
        assert is_session_expired([{"message": "Context creation failed: jwt expired"}])

    def test_structured_code(self):
        assert is_session_expired([{"message": "Unauthorized", "extensions": {"code": "SESSION_EXPIRED"}}])
        assert is_session_expired([{"message": "x", "extensions": {"code": "JWT_EXPIRED"}}])

    def test_any_error_in_list(self):
        assert is_session_expired([{"message": "other"}, {"message": "jwt expired"}])

    def test_other_errors(self):
        assert not is_session_expired([{"message": "Market not found"}])
        assert not is_session_expired([{"message": "x", "extensions": {"code": "FORBIDDEN"}}])
        assert not is_session_expired([])
        assert not is_session_expired(None)

    def test_malformed_errors(self):
        assert is_session_expired(["jwt expired"])
        assert not is_session_expired([{"message": None}, 42])


class TestSessionRetryStrategy:

    @pytest.mark.asyncio
    async def test_success_without_retry(self, session):
        operation = AsyncMock(return_value="result")

        result = await SessionRetryStrategy(session).execute_async(operation)

        assert result == "result"
        operation.assert_awaited_once_with("token-0")
        session.authenticate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expired_then_success(self, session):
        operation = AsyncMock(side_effect=[expired_error(), "result"])

        result = await SessionRetryStrategy(session).execute_async(operation)

        assert result == "result"
        assert session.authenticate.await_count == 1
        assert [call.args[0] for call in operation.await_args_list] == ["token-0", "token-1"]
        session.record_expired.assert_called_once()

    @pytest.mark.asyncio
    async def test_structured_code_triggers_retry(self, session):
        error = RequestError(
            [{"message": "Unauthorized", "extensions": {"code": "SESSION_EXPIRED"}}], URL
        )
        operation = AsyncMock(side_effect=[error, "result"])

        assert await SessionRetryStrategy(session).execute_async(operation) == "result"
        assert session.authenticate.await_count == 1

    @pytest.mark.asyncio
    async def test_other_request_error_propagates(self, session):
        error = RequestError([{"message": "Market not found"}], URL)
        operation = AsyncMock(side_effect=error)

        with pytest.raises(RequestError) as exc_info:
            await SessionRetryStrategy(session).execute_async(operation)

        assert exc_info.value is error
        session.authenticate.assert_not_awaited()
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, session):
        operation = AsyncMock(side_effect=TransportError("Connection error", url=URL))

        with pytest.raises(TransportError):
            await SessionRetryStrategy(session).execute_async(operation)

        session.authenticate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_persistent_expiry_is_bounded(self, session):
        operation = AsyncMock(side_effect=raise_expired)

        with pytest.raises(SessionRetryExhaustedError) as exc_info:
            await SessionRetryStrategy(session, max_retries=3).execute_async(operation)

        error = exc_info.value
        assert isinstance(error, RequestError)
        assert error.attempts == 3
        assert error.errors == EXPIRED
        assert error.url == URL
        assert isinstance(error.__cause__, RequestError)
        assert session.authenticate.await_count == 3
        assert operation.await_count == 4

    @pytest.mark.asyncio
    async def test_zero_retries(self, session):
        operation = AsyncMock(side_effect=raise_expired)

        with pytest.raises(SessionRetryExhaustedError) as exc_info:
            await SessionRetryStrategy(session, max_retries=0).execute_async(operation)

        assert exc_info.value.attempts == 0
        session.authenticate.assert_not_awaited()
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_reauthentication_failure_propagates(self, session):
        session.authenticate = AsyncMock(side_effect=RequestError([{"message": "Invalid signature"}], URL))
        operation = AsyncMock(side_effect=raise_expired)

        with pytest.raises(RequestError) as exc_info:
            await SessionRetryStrategy(session).execute_async(operation)

        assert not isinstance(exc_info.value, SessionRetryExhaustedError)
        assert operation.await_count == 1
