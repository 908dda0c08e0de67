"""Pydantic data models for the Telegram Bot API types used by Dakiya.

Every class mirrors an object from https://core.telegram.org/bots/api
verbatim (snake_case field names, the ``from`` field aliased to
``from_field``).  Sum types such as :data:`TransactionPartner` and
:data:`ChatMember` are discriminated unions: the ``type`` / ``status``
field selects exactly one variant class at decode time.  Use
:func:`sdk.serialization.parse_as` to decode them so an unknown
discriminator surfaces as :class:`~sdk.exceptions.UnknownVariantError`.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


# ── Enumerations ─────────────────────────────────────────────────────────────


class UpdateType(str, Enum):
    """Kinds of incoming updates; used for the ``allowed_updates`` filter."""

    MESSAGE = "message"
    EDITED_MESSAGE = "edited_message"
    CHANNEL_POST = "channel_post"
    EDITED_CHANNEL_POST = "edited_channel_post"
    BUSINESS_CONNECTION = "business_connection"
    BUSINESS_MESSAGE = "business_message"
    EDITED_BUSINESS_MESSAGE = "edited_business_message"
    DELETED_BUSINESS_MESSAGES = "deleted_business_messages"
    MESSAGE_REACTION = "message_reaction"
    MESSAGE_REACTION_COUNT = "message_reaction_count"
    INLINE_QUERY = "inline_query"
    CHOSEN_INLINE_RESULT = "chosen_inline_result"
    CALLBACK_QUERY = "callback_query"
    SHIPPING_QUERY = "shipping_query"
    PRE_CHECKOUT_QUERY = "pre_checkout_query"
    PURCHASED_PAID_MEDIA = "purchased_paid_media"
    POLL = "poll"
    POLL_ANSWER = "poll_answer"
    MY_CHAT_MEMBER = "my_chat_member"
    CHAT_MEMBER = "chat_member"
    CHAT_JOIN_REQUEST = "chat_join_request"
    CHAT_BOOST = "chat_boost"
    REMOVED_CHAT_BOOST = "removed_chat_boost"


class ChatType(str, Enum):
    """Type of a chat."""

    PRIVATE = "private"
    GROUP = "group"
    SUPERGROUP = "supergroup"
    CHANNEL = "channel"
    SENDER = "sender"


class ChatAction(str, Enum):
    """Actions that can be broadcast with ``sendChatAction``."""

    TYPING = "typing"
    UPLOAD_PHOTO = "upload_photo"
    RECORD_VIDEO = "record_video"
    UPLOAD_VIDEO = "upload_video"
    RECORD_VOICE = "record_voice"
    UPLOAD_VOICE = "upload_voice"
    UPLOAD_DOCUMENT = "upload_document"
    CHOOSE_STICKER = "choose_sticker"
    FIND_LOCATION = "find_location"
    RECORD_VIDEO_NOTE = "record_video_note"
    UPLOAD_VIDEO_NOTE = "upload_video_note"


class ChatMemberStatus(str, Enum):
    """Discriminator values of :data:`ChatMember`."""

    CREATOR = "creator"
    ADMINISTRATOR = "administrator"
    MEMBER = "member"
    RESTRICTED = "restricted"
    LEFT = "left"
    KICKED = "kicked"


class TransactionPartnerType(str, Enum):
    """Discriminator values of :data:`TransactionPartner`."""

    FRAGMENT = "fragment"
    USER = "user"
    OTHER = "other"
    TELEGRAM_ADS = "telegram_ads"
    TELEGRAM_API = "telegram_api"


class RevenueWithdrawalStateType(str, Enum):
    """Discriminator values of :data:`RevenueWithdrawalState`."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# ── Envelope / errors ────────────────────────────────────────────────────────


class ResponseParameters(BaseModel):
    """Contains information about why a request was unsuccessful."""

    migrate_to_chat_id: Optional[int] = None
    retry_after: Optional[int] = None

    model_config = {"populate_by_name": True}


class Error(BaseModel):
    """Body returned by the Bot API for an unsuccessful request."""

    ok: bool = False
    error_code: int
    description: str
    parameters: Optional[ResponseParameters] = None

    model_config = {"populate_by_name": True}


# ── Users and chats ──────────────────────────────────────────────────────────


class User(BaseModel):
    """This object represents a Telegram user or bot."""

    id: int
    is_bot: bool
    first_name: str
    last_name: Optional[str] = None
    username: Optional[str] = None
    language_code: Optional[str] = None
    is_premium: Optional[bool] = None
    can_join_groups: Optional[bool] = None
    can_read_all_group_messages: Optional[bool] = None
    supports_inline_queries: Optional[bool] = None
    can_connect_to_business: Optional[bool] = None

    model_config = {"populate_by_name": True}


class Chat(BaseModel):
    """This object represents a chat."""

    id: int
    type: ChatType
    title: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_forum: Optional[bool] = None

    model_config = {"populate_by_name": True}


class ChatPermissions(BaseModel):
    """Describes actions that a non-administrator user is allowed to take in a chat."""

    can_send_messages: Optional[bool] = None
    can_send_audios: Optional[bool] = None
    can_send_documents: Optional[bool] = None
    can_send_photos: Optional[bool] = None
    can_send_videos: Optional[bool] = None
    can_send_video_notes: Optional[bool] = None
    can_send_voice_notes: Optional[bool] = None
    can_send_polls: Optional[bool] = None
    can_send_other_messages: Optional[bool] = None
    can_add_web_page_previews: Optional[bool] = None
    can_change_info: Optional[bool] = None
    can_invite_users: Optional[bool] = None
    can_pin_messages: Optional[bool] = None
    can_manage_topics: Optional[bool] = None

    model_config = {"populate_by_name": True}


# ── Messages and keyboards ───────────────────────────────────────────────────


class MessageEntity(BaseModel):
    """This object represents one special entity in a text message (hashtag, URL, …)."""

    type: str
    offset: int
    length: int
    url: Optional[str] = None
    user: Optional[User] = None
    language: Optional[str] = None
    custom_emoji_id: Optional[str] = None

    model_config = {"populate_by_name": True}


class CopyTextButton(BaseModel):
    """An inline keyboard button that copies specified text to the clipboard."""

    text: str = Field(..., min_length=1, max_length=256)

    model_config = {"populate_by_name": True}


class InlineKeyboardButton(BaseModel):
    """One button of an inline keyboard. You **must** use exactly one of the optional fields."""

    text: str
    url: Optional[str] = None
    callback_data: Optional[str] = None
    switch_inline_query: Optional[str] = None
    switch_inline_query_current_chat: Optional[str] = None
    copy_text: Optional[CopyTextButton] = None
    pay: Optional[bool] = None

    model_config = {"populate_by_name": True}


class InlineKeyboardMarkup(BaseModel):
    """An inline keyboard that appears right next to the message it belongs to."""

    inline_keyboard: List[List[InlineKeyboardButton]]

    model_config = {"populate_by_name": True}


class Message(BaseModel):
    """This object represents a message."""

    message_id: int
    date: int
    chat: Chat
    message_thread_id: Optional[int] = None
    from_field: Optional[User] = Field(None, alias="from")
    sender_chat: Optional[Chat] = None
    business_connection_id: Optional[str] = None
    reply_to_message: Optional[Message] = None
    via_bot: Optional[User] = None
    edit_date: Optional[int] = None
    media_group_id: Optional[str] = None
    author_signature: Optional[str] = None
    text: Optional[str] = None
    entities: Optional[List[MessageEntity]] = None
    caption: Optional[str] = None
    caption_entities: Optional[List[MessageEntity]] = None
    reply_markup: Optional[InlineKeyboardMarkup] = None

    model_config = {"populate_by_name": True}


class ChatFullInfo(BaseModel):
    """Full information about a chat, as returned by ``getChat``."""

    id: int
    type: ChatType
    accent_color_id: Optional[int] = None
    max_reaction_count: Optional[int] = None
    title: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_forum: Optional[bool] = None
    bio: Optional[str] = None
    description: Optional[str] = None
    invite_link: Optional[str] = None
    pinned_message: Optional[Message] = None
    permissions: Optional[ChatPermissions] = None
    slow_mode_delay: Optional[int] = None
    sticker_set_name: Optional[str] = None
    can_set_sticker_set: Optional[bool] = None
    linked_chat_id: Optional[int] = None

    model_config = {"populate_by_name": True}


class CallbackQuery(BaseModel):
    """An incoming callback query from a callback button in an inline keyboard."""

    id: str
    from_field: User = Field(..., alias="from")
    chat_instance: str
    message: Optional[Message] = None
    inline_message_id: Optional[str] = None
    data: Optional[str] = None
    game_short_name: Optional[str] = None

    model_config = {"populate_by_name": True}


# ── Chat members (polymorphic on ``status``) ─────────────────────────────────


class ChatMemberOwner(BaseModel):
    """A chat member that owns the chat and has all administrator privileges."""

    status: Literal["creator"] = "creator"
    user: User
    is_anonymous: bool = False
    custom_title: Optional[str] = None

    model_config = {"populate_by_name": True}


class ChatMemberAdministrator(BaseModel):
    """A chat member that has some additional privileges."""

    status: Literal["administrator"] = "administrator"
    user: User
    can_be_edited: bool = False
    is_anonymous: bool = False
    can_manage_chat: bool = False
    can_delete_messages: bool = False
    can_manage_video_chats: bool = False
    can_restrict_members: bool = False
    can_promote_members: bool = False
    can_change_info: bool = False
    can_invite_users: bool = False
    can_post_stories: bool = False
    can_edit_stories: bool = False
    can_delete_stories: bool = False
    can_post_messages: Optional[bool] = None
    can_edit_messages: Optional[bool] = None
    can_pin_messages: Optional[bool] = None
    can_manage_topics: Optional[bool] = None
    custom_title: Optional[str] = None

    model_config = {"populate_by_name": True}


class ChatMemberMember(BaseModel):
    """A chat member that has no additional privileges or restrictions."""

    status: Literal["member"] = "member"
    user: User
    until_date: Optional[int] = None

    model_config = {"populate_by_name": True}


class ChatMemberRestricted(BaseModel):
    """A chat member that is under certain restrictions in the chat. Supergroups only."""

    status: Literal["restricted"] = "restricted"
    user: User
    is_member: bool = False
    can_send_messages: bool = False
    can_send_audios: bool = False
    can_send_documents: bool = False
    can_send_photos: bool = False
    can_send_videos: bool = False
    can_send_video_notes: bool = False
    can_send_voice_notes: bool = False
    can_send_polls: bool = False
    can_send_other_messages: bool = False
    can_add_web_page_previews: bool = False
    can_change_info: bool = False
    can_invite_users: bool = False
    can_pin_messages: bool = False
    can_manage_topics: bool = False
    until_date: int = 0

    model_config = {"populate_by_name": True}


class ChatMemberLeft(BaseModel):
    """A chat member that isn't currently a member of the chat, but may join it themselves."""

    status: Literal["left"] = "left"
    user: User

    model_config = {"populate_by_name": True}


class ChatMemberBanned(BaseModel):
    """A chat member that was banned in the chat and can't return to the chat or view chat messages."""

    status: Literal["kicked"] = "kicked"
    user: User
    until_date: int = 0

    model_config = {"populate_by_name": True}


ChatMember = Annotated[
    Union[
        ChatMemberOwner,
        ChatMemberAdministrator,
        ChatMemberMember,
        ChatMemberRestricted,
        ChatMemberLeft,
        ChatMemberBanned,
    ],
    Field(discriminator="status"),
]


class ChatMemberUpdated(BaseModel):
    """Represents changes in the status of a chat member."""

    chat: Chat
    from_field: User = Field(..., alias="from")
    date: int
    old_chat_member: ChatMember
    new_chat_member: ChatMember
    via_join_request: Optional[bool] = None
    via_chat_folder_invite_link: Optional[bool] = None

    model_config = {"populate_by_name": True}


# ── Business ─────────────────────────────────────────────────────────────────


class BusinessConnection(BaseModel):
    """Describes the connection of the bot with a business account."""

    id: str
    user: User
    user_chat_id: int
    date: int
    can_reply: bool = False
    is_enabled: bool

    model_config = {"populate_by_name": True}


class BotShortDescription(BaseModel):
    """This object represents the bot's short description."""

    short_description: str

    model_config = {"populate_by_name": True}


# ── Payments: revenue withdrawal state (polymorphic on ``type``) ─────────────


class RevenueWithdrawalStatePending(BaseModel):
    """The withdrawal is in progress."""

    type: Literal["pending"] = "pending"

    model_config = {"populate_by_name": True}


class RevenueWithdrawalStateSucceeded(BaseModel):
    """The withdrawal succeeded."""

    type: Literal["succeeded"] = "succeeded"
    date: int
    url: str

    model_config = {"populate_by_name": True}


class RevenueWithdrawalStateFailed(BaseModel):
    """The withdrawal failed and the transaction was refunded."""

    type: Literal["failed"] = "failed"

    model_config = {"populate_by_name": True}


RevenueWithdrawalState = Annotated[
    Union[
        RevenueWithdrawalStatePending,
        RevenueWithdrawalStateSucceeded,
        RevenueWithdrawalStateFailed,
    ],
    Field(discriminator="type"),
]


# ── Payments: transaction partner (polymorphic on ``type``) ──────────────────


class TransactionPartnerUser(BaseModel):
    """Describes a transaction with a user."""

    type: Literal["user"] = "user"
    user: User
    invoice_payload: Optional[str] = None
    paid_media: Optional[List[Dict[str, Any]]] = None
    paid_media_payload: Optional[str] = None

    model_config = {"populate_by_name": True}


class TransactionPartnerFragment(BaseModel):
    """Describes a withdrawal transaction with Fragment."""

    type: Literal["fragment"] = "fragment"
    withdrawal_state: Optional[RevenueWithdrawalState] = None

    model_config = {"populate_by_name": True}


class TransactionPartnerTelegramAds(BaseModel):
    """Describes a withdrawal transaction to the Telegram Ads platform."""

    type: Literal["telegram_ads"] = "telegram_ads"

    model_config = {"populate_by_name": True}


class TransactionPartnerTelegramApi(BaseModel):
    """Describes a transaction with payment for paid broadcasting."""

    type: Literal["telegram_api"] = "telegram_api"
    request_count: int

    model_config = {"populate_by_name": True}


class TransactionPartnerOther(BaseModel):
    """Describes a transaction with an unknown source or recipient."""

    type: Literal["other"] = "other"

    model_config = {"populate_by_name": True}


TransactionPartner = Annotated[
    Union[
        TransactionPartnerUser,
        TransactionPartnerFragment,
        TransactionPartnerTelegramAds,
        TransactionPartnerTelegramApi,
        TransactionPartnerOther,
    ],
    Field(discriminator="type"),
]


class StarTransaction(BaseModel):
    """Describes a Telegram Star transaction."""

    id: str
    amount: int
    nanostar_amount: Optional[int] = None
    date: int
    source: Optional[TransactionPartner] = None
    receiver: Optional[TransactionPartner] = None

    model_config = {"populate_by_name": True}


class StarTransactions(BaseModel):
    """Contains a list of Telegram Star transactions."""

    transactions: List[StarTransaction]

    model_config = {"populate_by_name": True}


# ── Updates ──────────────────────────────────────────────────────────────────


class WebhookInfo(BaseModel):
    """Contains information about the current status of a webhook."""

    url: str
    has_custom_certificate: bool
    pending_update_count: int
    ip_address: Optional[str] = None
    last_error_date: Optional[int] = None
    last_error_message: Optional[str] = None
    max_connections: Optional[int] = None
    allowed_updates: Optional[List[str]] = None

    model_config = {"populate_by_name": True}


class Update(BaseModel):
    """An incoming update. At most **one** of the optional parameters can be present in any given update.

    Update kinds that have no dedicated model here are kept verbatim in
    ``model_extra`` so nothing the server sends is lost.
    """

    update_id: int
    message: Optional[Message] = None
    edited_message: Optional[Message] = None
    channel_post: Optional[Message] = None
    edited_channel_post: Optional[Message] = None
    business_connection: Optional[BusinessConnection] = None
    business_message: Optional[Message] = None
    edited_business_message: Optional[Message] = None
    callback_query: Optional[CallbackQuery] = None
    my_chat_member: Optional[ChatMemberUpdated] = None
    chat_member: Optional[ChatMemberUpdated] = None

    model_config = {"populate_by_name": True, "extra": "allow"}

    @property
    def type(self) -> Optional[UpdateType]:
        """Return the kind of this update, or ``None`` if it carries no known payload."""
        for update_type in UpdateType:
            name = update_type.value
            if name in type(self).model_fields:
                if getattr(self, name) is not None:
                    return update_type
            elif self.model_extra and self.model_extra.get(name) is not None:
                return update_type
        return None
