"""Typed Telegram Bot API SDK — Pydantic models, request models, clients, and exceptions.

The :class:`BotClient` class sends :mod:`sdk.methods` request models and
decodes results into :mod:`sdk.models`.  :class:`RetryBotClient` adds
flood-control retries.

Usage::

    from sdk import BotClient, APIException
    from sdk.models import Update, UpdateType
    from sdk.methods import GetUpdatesRequest
"""

from sdk.client import BotClient
from sdk.exceptions import APIException, TransportException, UnknownVariantError
from sdk.retry import RetryBotClient

__all__ = [
    "BotClient",
    "RetryBotClient",
    "APIException",
    "TransportException",
    "UnknownVariantError",
]
