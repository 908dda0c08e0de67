"""Request models — one pydantic class per Bot API method.

Each request knows its API method name and how to decode the ``result``
field of a successful response, so :meth:`sdk.client.BotClient.send_request`
stays generic::

    updates = client.send_request(GetUpdatesRequest(offset=12, timeout=30))
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from sdk.models import (
    BotShortDescription,
    BusinessConnection,
    ChatAction,
    ChatFullInfo,
    ChatMember,
    InlineKeyboardMarkup,
    Message,
    MessageEntity,
    StarTransactions,
    Update,
    UpdateType,
    User,
)
from sdk.serialization import adapter_for


class RequestBase(BaseModel):
    """Common behaviour of every request model."""

    api_method: ClassVar[str]
    result_type: ClassVar[Any]

    model_config = {"populate_by_name": True}

    @classmethod
    def result_adapter(cls) -> TypeAdapter[Any]:
        """Adapter that decodes this method's ``result`` payload."""
        return adapter_for(cls.result_type)

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for the request; unset optional parameters are omitted."""
        return self.model_dump(mode="json", exclude_none=True, by_alias=True)


# ── Getting updates ──────────────────────────────────────────────────────────


class GetUpdatesRequest(RequestBase):
    """Receive incoming updates using long polling. Returns an array of :class:`Update`."""

    api_method: ClassVar[str] = "getUpdates"
    result_type: ClassVar[Any] = List[Update]

    offset: Optional[int] = None
    limit: Optional[int] = Field(None, ge=1, le=100)
    timeout: Optional[int] = Field(None, ge=0)
    allowed_updates: Optional[List[UpdateType]] = None


class DeleteWebhookRequest(RequestBase):
    """Remove webhook integration so ``getUpdates`` can be used. Returns ``True``."""

    api_method: ClassVar[str] = "deleteWebhook"
    result_type: ClassVar[Any] = bool

    drop_pending_updates: Optional[bool] = None


# ── Bot and chat information ─────────────────────────────────────────────────


class GetMeRequest(RequestBase):
    """Test the bot's auth token. Returns the bot as a :class:`User`."""

    api_method: ClassVar[str] = "getMe"
    result_type: ClassVar[Any] = User


class GetChatRequest(RequestBase):
    """Get up-to-date information about a chat. Returns :class:`ChatFullInfo`."""

    api_method: ClassVar[str] = "getChat"
    result_type: ClassVar[Any] = ChatFullInfo

    chat_id: Union[int, str]


class GetChatMemberRequest(RequestBase):
    """Get information about a member of a chat. Returns a :data:`ChatMember` variant."""

    api_method: ClassVar[str] = "getChatMember"
    result_type: ClassVar[Any] = ChatMember

    chat_id: Union[int, str]
    user_id: int


class GetChatAdministratorsRequest(RequestBase):
    """Get a list of administrators in a chat, which aren't bots."""

    api_method: ClassVar[str] = "getChatAdministrators"
    result_type: ClassVar[Any] = List[ChatMember]

    chat_id: Union[int, str]


class GetChatMemberCountRequest(RequestBase):
    """Get the number of members in a chat. Returns ``int``."""

    api_method: ClassVar[str] = "getChatMemberCount"
    result_type: ClassVar[Any] = int

    chat_id: Union[int, str]


class GetBusinessConnectionRequest(RequestBase):
    """Get information about the connection of the bot with a business account."""

    api_method: ClassVar[str] = "getBusinessConnection"
    result_type: ClassVar[Any] = BusinessConnection

    business_connection_id: str


class GetMyShortDescriptionRequest(RequestBase):
    """Get the current bot short description for the given user language."""

    api_method: ClassVar[str] = "getMyShortDescription"
    result_type: ClassVar[Any] = BotShortDescription

    language_code: Optional[str] = None


class GetStarTransactionsRequest(RequestBase):
    """Returns the bot's Telegram Star transactions in chronological order."""

    api_method: ClassVar[str] = "getStarTransactions"
    result_type: ClassVar[Any] = StarTransactions

    offset: Optional[int] = Field(None, ge=0)
    limit: Optional[int] = Field(None, ge=1, le=100)


# ── Sending ──────────────────────────────────────────────────────────────────


class SendChatActionRequest(RequestBase):
    """Tell the user that something is happening on the bot's side. Returns ``True``."""

    api_method: ClassVar[str] = "sendChatAction"
    result_type: ClassVar[Any] = bool

    chat_id: Union[int, str]
    action: ChatAction
    business_connection_id: Optional[str] = None
    message_thread_id: Optional[int] = None


class SendMessageRequest(RequestBase):
    """Send a text message. Returns the sent :class:`Message`."""

    api_method: ClassVar[str] = "sendMessage"
    result_type: ClassVar[Any] = Message

    chat_id: Union[int, str]
    text: str
    business_connection_id: Optional[str] = None
    message_thread_id: Optional[int] = None
    parse_mode: Optional[str] = None
    entities: Optional[List[MessageEntity]] = None
    disable_notification: Optional[bool] = None
    protect_content: Optional[bool] = None
    reply_markup: Optional[InlineKeyboardMarkup] = None
