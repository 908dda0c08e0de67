"""RetryBotClient -- a :class:`~sdk.client.BotClient` that honours flood control.

When the Bot API answers ``429 Too Many Requests`` it usually includes
``parameters.retry_after``.  This client waits that long (or a configured
default) and re-sends the same request, up to ``retry_max`` attempts.
Every other error propagates immediately.  The live-API tests use it so
that bursts of test requests do not fail on rate limits.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

from core.logger import DakiyaLogger
from sdk.client import BotClient, run_detached
from sdk.exceptions import APIException
from sdk.methods import RequestBase

logger = DakiyaLogger.get_logger()

TOO_MANY_REQUESTS = 429


class RetryBotClient(BotClient):
    """Bot client that retries rate-limited requests.

    Args:
        base_url: Full Bot API base URL.
        retry_max: Total number of attempts per request (at least 1).
        default_retry_delay: Seconds to wait when the server gives no ``retry_after``.
        **client_kwargs: Forwarded to :class:`BotClient`.
    """

    def __init__(self, base_url: str, retry_max: int = 3, default_retry_delay: float = 30.0, **client_kwargs: Any) -> None:
        if retry_max < 1:
            raise ValueError("retry_max must be at least 1")
        super().__init__(base_url, **client_kwargs)
        self.retry_max = retry_max
        self.default_retry_delay = default_retry_delay

    def _retry_delay(self, exc: APIException) -> float:
        """Seconds to wait before re-sending after *exc*."""
        if exc.retry_after is not None:
            return float(exc.retry_after)
        return self.default_retry_delay

    def _log_retry(self, request: RequestBase, attempt: int, delay: float) -> None:
        logger.info(
            "Rate limited, retrying",
            extra={"api_method": request.api_method, "attempt": attempt, "retry_max": self.retry_max, "delay": delay},
        )

    def _log_exhausted(self, request: RequestBase) -> None:
        logger.warning("Retry attempts exhausted", extra={"api_method": request.api_method, "retry_max": self.retry_max})

    def send_request(self, request: RequestBase) -> Any:
        """Send *request*, sleeping and retrying on ``429`` responses.

        Raises:
            APIException: The last ``429`` once attempts are exhausted, or any other API error.
        """
        attempt = 1
        while True:
            try:
                return super().send_request(request)
            except APIException as exc:
                if exc.error_code != TOO_MANY_REQUESTS:
                    raise
                if attempt >= self.retry_max:
                    self._log_exhausted(request)
                    raise
                delay = self._retry_delay(exc)
                self._log_retry(request, attempt, delay)
            time.sleep(delay)
            attempt += 1

    async def send_request_async(self, request: RequestBase) -> Any:
        """Async variant of :meth:`send_request`; waits with :func:`asyncio.sleep` so it can be cancelled."""
        attempt = 1
        while True:
            try:
                return await run_detached(BotClient.send_request, self, request)
            except APIException as exc:
                if exc.error_code != TOO_MANY_REQUESTS:
                    raise
                if attempt >= self.retry_max:
                    self._log_exhausted(request)
                    raise
                delay = self._retry_delay(exc)
                self._log_retry(request, attempt, delay)
            await asyncio.sleep(delay)
            attempt += 1
