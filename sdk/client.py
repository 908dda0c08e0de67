"""BotClient -- service layer over the Telegram Bot API.

Every call is a JSON ``POST`` to ``<base_url>/<method>`` made with the
``requests`` library.  Requests are pydantic models from :mod:`sdk.methods`;
results come back as pydantic models from :mod:`sdk.models`.

Async callers (see :meth:`BotClient.send_request_async`), including the
update receiver in :mod:`polling.receiver`, get the blocking call run on a
detached daemon thread by :func:`run_detached`, so cancelling a long poll
releases the caller at once.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar, Union

import requests
from pydantic import ValidationError

from core.logger import DakiyaLogger
from sdk.exceptions import APIException, TransportException
from sdk.methods import (
    DeleteWebhookRequest,
    GetBusinessConnectionRequest,
    GetChatAdministratorsRequest,
    GetChatMemberCountRequest,
    GetChatMemberRequest,
    GetChatRequest,
    GetMeRequest,
    GetMyShortDescriptionRequest,
    GetStarTransactionsRequest,
    GetUpdatesRequest,
    RequestBase,
    SendChatActionRequest,
    SendMessageRequest,
)
from sdk.models import (
    BotShortDescription,
    BusinessConnection,
    ChatAction,
    ChatFullInfo,
    ChatMember,
    InlineKeyboardMarkup,
    Message,
    StarTransactions,
    Update,
    UpdateType,
    User,
)
from sdk.serialization import raise_unknown_variant

logger = DakiyaLogger.get_logger()

API_URL = "https://api.telegram.org"

T = TypeVar("T")


async def run_detached(func: Callable[..., T], *args: Any) -> T:
    """Run blocking *func* on a daemon thread and await its outcome.

    Unlike :func:`asyncio.to_thread` the thread is not owned by the loop's
    default executor.  Cancelling the awaiting task returns immediately, and
    neither ``asyncio.run`` nor interpreter shutdown waits for an abandoned
    long poll to finish.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future = loop.create_future()

    def _settle(result: Any, exc: Optional[BaseException]) -> None:
        if future.done():
            return
        if exc is not None:
            future.set_exception(exc)
        else:
            future.set_result(result)

    def _worker() -> None:
        result: Any = None
        error: Optional[BaseException] = None
        try:
            result = func(*args)
        except Exception as exc:
            error = exc
        try:
            loop.call_soon_threadsafe(_settle, result, error)
        except RuntimeError:
            # The loop closed while the call was abandoned.
            logger.debug("Detached call finished after its event loop closed", extra={"func": getattr(func, "__name__", repr(func))})

    threading.Thread(target=_worker, name="dakiya-http", daemon=True).start()
    return await future


class BotClient:
    """Client-side service layer for the Telegram Bot API.

    Each public method corresponds to a Telegram Bot API endpoint.  The
    client validates responses with Pydantic models, raises
    :class:`APIException` when the API reports an error and
    :class:`TransportException` when no usable answer was received.
    """

    _DEFAULT_TIMEOUT: int = 10
    _DEFAULT_POLLING_TIMEOUT: int = 30

    def __init__(
        self,
        base_url: str,
        timeout: int = _DEFAULT_TIMEOUT,
        bot_token: str | None = None,
        polling_timeout: int = _DEFAULT_POLLING_TIMEOUT,
    ) -> None:
        """Create a new client bound to *base_url*.

        Args:
            base_url: Full Bot API base URL (e.g. ``https://api.telegram.org/bot<token>``).
            timeout: Default request timeout in seconds.
            bot_token: Raw bot token, used for file-download URLs.
            polling_timeout: Long-poll wait, in seconds, requested by update receivers.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._bot_token = bot_token
        self.polling_timeout = polling_timeout

    @classmethod
    def from_token(cls, token: str, **kwargs: Any) -> "BotClient":
        """Build a client for the public Bot API server from a bot token."""
        return cls(f"{API_URL}/bot{token}", bot_token=token, **kwargs)

    @property
    def timeout(self) -> int:
        """Per-request HTTP timeout in seconds."""
        return self._timeout

    # ------------------------------------------------------------------
    #  Internal helpers
    # ------------------------------------------------------------------

    def _post(self, endpoint: str, payload: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Send a POST request and return the parsed JSON body.

        Raises:
            APIException: If the status code is not 2xx or the body has ``"ok": false``.
            TransportException: On transport-level failures.
        """
        url = f"{self._base_url}/{endpoint.lstrip('/')}"
        try:
            response = requests.post(url, json=payload, timeout=timeout or self._timeout)
        except requests.RequestException as exc:
            logger.error("Request failed", extra={"api_method": endpoint, "error": str(exc)})
            raise TransportException(f"{endpoint} request failed: {exc}") from exc
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        if not response.ok or body.get("ok") is False:
            logger.warning("API error", extra={"api_method": endpoint, "status_code": response.status_code, "api_response": body})
            raise APIException(response.status_code, body)
        return body

    def _request_timeout(self, request: RequestBase) -> float:
        """HTTP timeout for *request*; long-poll requests get their wait added on top."""
        wait = getattr(request, "timeout", None)
        if isinstance(wait, int) and wait > 0:
            return wait + self._timeout
        return self._timeout

    # ------------------------------------------------------------------
    #  Generic request dispatch
    # ------------------------------------------------------------------

    def send_request(self, request: RequestBase) -> Any:
        """Send *request* and decode its ``result`` with the request's result type.

        Raises:
            APIException: The API rejected the request.
            TransportException: Network failure or malformed response.
            UnknownVariantError: A polymorphic result carried an unknown discriminator.
        """
        method = request.api_method
        body = self._post(method, request.to_payload(), timeout=self._request_timeout(request))
        if "result" not in body:
            raise TransportException(f"{method} response has no 'result' field")
        try:
            return request.result_adapter().validate_python(body["result"])
        except ValidationError as exc:
            raise_unknown_variant(exc)
            raise TransportException(f"{method} returned a malformed result: {exc}") from exc

    async def send_request_async(self, request: RequestBase) -> Any:
        """Async variant of :meth:`send_request`; the HTTP call runs on a detached thread (see :func:`run_detached`)."""
        return await run_detached(self.send_request, request)

    # ------------------------------------------------------------------
    #  Endpoint methods
    # ------------------------------------------------------------------

    def get_updates(self, offset: Optional[int] = None, limit: Optional[int] = None, timeout: Optional[int] = None, allowed_updates: Optional[Sequence[UpdateType]] = None) -> List[Update]:
        """Receive incoming updates using long polling. Returns an ordered list of :class:`Update`."""
        return self.send_request(GetUpdatesRequest(
            offset=offset,
            limit=limit,
            timeout=timeout,
            allowed_updates=list(allowed_updates) if allowed_updates is not None else None,
        ))

    async def get_updates_async(self, offset: Optional[int] = None, limit: Optional[int] = None, timeout: Optional[int] = None, allowed_updates: Optional[Sequence[UpdateType]] = None) -> List[Update]:
        """Async variant of :meth:`get_updates`."""
        return await run_detached(self.get_updates, offset, limit, timeout, allowed_updates)

    def delete_webhook(self, drop_pending_updates: Optional[bool] = None) -> bool:
        """Remove webhook integration so long polling can be used. Returns *True* on success."""
        return self.send_request(DeleteWebhookRequest(drop_pending_updates=drop_pending_updates))

    def get_me(self) -> User:
        """A simple method for testing your bot's auth token. Returns the bot as a :class:`User`."""
        return self.send_request(GetMeRequest())

    async def get_me_async(self) -> User:
        """Async variant of :meth:`get_me`."""
        return await self.send_request_async(GetMeRequest())

    def get_chat(self, chat_id: Union[int, str]) -> ChatFullInfo:
        """Get up-to-date information about the chat."""
        return self.send_request(GetChatRequest(chat_id=chat_id))

    def get_chat_member(self, chat_id: Union[int, str], user_id: int) -> ChatMember:
        """Get information about a member of a chat, as the matching ``ChatMember*`` variant."""
        return self.send_request(GetChatMemberRequest(chat_id=chat_id, user_id=user_id))

    def get_chat_administrators(self, chat_id: Union[int, str]) -> List[ChatMember]:
        """Get a list of administrators in a chat, which aren't bots."""
        return self.send_request(GetChatAdministratorsRequest(chat_id=chat_id))

    def get_chat_member_count(self, chat_id: Union[int, str]) -> int:
        return self.send_request(GetChatMemberCountRequest(chat_id=chat_id))

    def send_chat_action(self, chat_id: Union[int, str], action: ChatAction, business_connection_id: Optional[str] = None, message_thread_id: Optional[int] = None) -> bool:
        """Tell the user that something is happening on the bot's side (5 seconds or less)."""
        return self.send_request(SendChatActionRequest(
            chat_id=chat_id,
            action=action,
            business_connection_id=business_connection_id,
            message_thread_id=message_thread_id,
        ))

    def send_message(self, chat_id: Union[int, str], text: str, parse_mode: Optional[str] = None, reply_markup: Optional[InlineKeyboardMarkup] = None, disable_notification: Optional[bool] = None, business_connection_id: Optional[str] = None) -> Message:
        """Send a text message. On success, the sent :class:`Message` is returned."""
        logger.debug("Sending message", extra={"chat_id": chat_id, "api_method": "sendMessage", "text_preview": text[:80]})
        return self.send_request(SendMessageRequest(
            chat_id=chat_id,
            text=text,
            parse_mode=parse_mode,
            reply_markup=reply_markup,
            disable_notification=disable_notification,
            business_connection_id=business_connection_id,
        ))

    def get_business_connection(self, business_connection_id: str) -> BusinessConnection:
        """Get information about the connection of the bot with a business account."""
        return self.send_request(GetBusinessConnectionRequest(business_connection_id=business_connection_id))

    def get_my_short_description(self, language_code: Optional[str] = None) -> BotShortDescription:
        """Get the current bot short description for the given user language."""
        return self.send_request(GetMyShortDescriptionRequest(language_code=language_code))

    def get_star_transactions(self, offset: Optional[int] = None, limit: Optional[int] = None) -> StarTransactions:
        """Return the bot's Telegram Star transactions in chronological order."""
        return self.send_request(GetStarTransactionsRequest(offset=offset, limit=limit))
