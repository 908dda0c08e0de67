"""Tests for RetryBotClient flood-control retries."""

import asyncio
import os
import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sdk.client import BotClient
from sdk.exceptions import APIException, TransportException
from sdk.methods import GetMeRequest
from sdk.retry import RetryBotClient

ME = {"id": 1, "is_bot": True, "first_name": "Bot"}


def _flood(retry_after=None) -> APIException:
    body = {"ok": False, "error_code": 429, "description": "Too Many Requests"}
    if retry_after is not None:
        body["parameters"] = {"retry_after": retry_after}
    return APIException(429, body)


class TestRetryInit:
    def test_is_bot_client(self) -> None:
        c = RetryBotClient("https://api.example.com", retry_max=2, polling_timeout=5)
        assert isinstance(c, BotClient)
        assert c.retry_max == 2
        assert c.polling_timeout == 5

    def test_retry_max_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            RetryBotClient("https://api.example.com", retry_max=0)


class TestSyncRetry:
    """Validate blocking retries."""

    @patch("sdk.retry.time.sleep")
    @patch.object(BotClient, "_post")
    def test_retries_with_server_delay(self, mock_post: MagicMock, mock_sleep: MagicMock) -> None:
        mock_post.side_effect = [_flood(retry_after=4), {"ok": True, "result": ME}]

        c = RetryBotClient("https://api.example.com", retry_max=3, default_retry_delay=30)
        me = c.send_request(GetMeRequest())

        assert me.first_name == "Bot"
        assert mock_post.call_count == 2
        mock_sleep.assert_called_once_with(4.0)

    @patch("sdk.retry.time.sleep")
    @patch.object(BotClient, "_post")
    def test_default_delay_without_retry_after(self, mock_post: MagicMock, mock_sleep: MagicMock) -> None:
        mock_post.side_effect = [_flood(), {"ok": True, "result": ME}]

        c = RetryBotClient("https://api.example.com", default_retry_delay=1.5)
        c.get_me()
        mock_sleep.assert_called_once_with(1.5)

    @patch("sdk.retry.time.sleep")
    @patch.object(BotClient, "_post")
    def test_gives_up_with_last_flood_error(self, mock_post: MagicMock, mock_sleep: MagicMock) -> None:
        last = _flood(retry_after=2)
        mock_post.side_effect = [_flood(retry_after=1), _flood(retry_after=1), last]

        c = RetryBotClient("https://api.example.com", retry_max=3)
        with pytest.raises(APIException) as exc_info:
            c.get_me()
        assert exc_info.value is last
        assert mock_post.call_count == 3
        assert mock_sleep.call_count == 2

    @patch("sdk.retry.time.sleep")
    @patch.object(BotClient, "_post")
    def test_other_api_errors_are_not_retried(self, mock_post: MagicMock, mock_sleep: MagicMock) -> None:
        mock_post.side_effect = APIException(400, {"error_code": 400, "description": "Bad Request"})

        c = RetryBotClient("https://api.example.com")
        with pytest.raises(APIException):
            c.get_me()
        assert mock_post.call_count == 1
        mock_sleep.assert_not_called()

    @patch("sdk.retry.time.sleep")
    @patch.object(BotClient, "_post")
    def test_transport_errors_are_not_retried(self, mock_post: MagicMock, mock_sleep: MagicMock) -> None:
        mock_post.side_effect = TransportException("offline")

        c = RetryBotClient("https://api.example.com")
        with pytest.raises(TransportException):
            c.get_me()
        assert mock_post.call_count == 1


class TestAsyncRetry:
    """Validate non-blocking retries."""

    @pytest.mark.asyncio
    @patch("sdk.retry.asyncio.sleep", new_callable=AsyncMock)
    @patch.object(BotClient, "_post")
    async def test_retries_with_async_sleep(self, mock_post: MagicMock, mock_sleep: AsyncMock) -> None:
        mock_post.side_effect = [_flood(retry_after=3), {"ok": True, "result": ME}]

        c = RetryBotClient("https://api.example.com")
        me = await c.send_request_async(GetMeRequest())

        assert me.id == 1
        mock_sleep.assert_awaited_once_with(3.0)

    @pytest.mark.asyncio
    @patch.object(BotClient, "_post")
    async def test_wait_is_cancellable(self, mock_post: MagicMock) -> None:
        mock_post.side_effect = [_flood(retry_after=60), {"ok": True, "result": ME}]

        c = RetryBotClient("https://api.example.com")
        task = asyncio.ensure_future(c.send_request_async(GetMeRequest()))
        for _ in range(50):
            await asyncio.sleep(0.01)
            if mock_post.call_count:
                break
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert mock_post.call_count == 1

    @pytest.mark.asyncio
    @patch("sdk.retry.asyncio.sleep", new_callable=AsyncMock)
    @patch.object(BotClient, "_post")
    async def test_async_gives_up_with_last_flood_error(self, mock_post: MagicMock, mock_sleep: AsyncMock) -> None:
        last = _flood(retry_after=2)
        mock_post.side_effect = [_flood(retry_after=1), last]

        c = RetryBotClient("https://api.example.com", retry_max=2)
        with pytest.raises(APIException) as exc_info:
            await c.send_request_async(GetMeRequest())
        assert exc_info.value is last
        mock_sleep.assert_awaited_once_with(1.0)


class TestSingleAttempt:
    """With ``retry_max=1`` the first 429 is raised without waiting."""

    @patch("sdk.retry.time.sleep")
    @patch.object(BotClient, "_post")
    def test_sync(self, mock_post: MagicMock, mock_sleep: MagicMock) -> None:
        flood = _flood(retry_after=1)
        mock_post.side_effect = [flood]

        c = RetryBotClient("https://api.example.com", retry_max=1)
        with pytest.raises(APIException) as exc_info:
            c.get_me()
        assert exc_info.value is flood
        mock_sleep.assert_not_called()

    @pytest.mark.asyncio
    @patch("sdk.retry.asyncio.sleep", new_callable=AsyncMock)
    @patch.object(BotClient, "_post")
    async def test_async(self, mock_post: MagicMock, mock_sleep: AsyncMock) -> None:
        flood = _flood()
        mock_post.side_effect = [flood]

        c = RetryBotClient("https://api.example.com", retry_max=1)
        with pytest.raises(APIException) as exc_info:
            await c.send_request_async(GetMeRequest())
        assert exc_info.value is flood
        mock_sleep.assert_not_awaited()
