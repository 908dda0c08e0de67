"""Dakiya entry point — long-poll the Bot API and log every incoming update.

Builds a :class:`~sdk.retry.RetryBotClient` and a
:class:`~polling.receiver.BlockingUpdateReceiver` from :mod:`config`, then
consumes updates until SIGINT / SIGTERM.

Run with::

    BOT_TOKEN=123:abc python main.py
"""

import asyncio
import signal

import config
from core.logger import DakiyaLogger
from polling import BlockingUpdateReceiver, CancellationSignal, ReceiverOptions
from sdk.exceptions import APIException
from sdk.models import Update
from sdk.retry import RetryBotClient

logger = DakiyaLogger.get_logger()

# Pause after a non-rate-limit failure so a dead network does not spin the loop.
ERROR_BACKOFF_SECONDS = 5


async def polling_error_handler(exc: Exception, cancel: CancellationSignal) -> None:
    """Log a failed ``getUpdates`` call and wait before the receiver retries it.

    Rate-limit errors wait for the server's ``retry_after``; everything else
    waits :data:`ERROR_BACKOFF_SECONDS`.  The wait ends early on cancellation.
    """
    delay: float = ERROR_BACKOFF_SECONDS
    if isinstance(exc, APIException):
        logger.warning("getUpdates API error", extra={"api_method": "getUpdates", "error_code": exc.error_code, "description": exc.description})
        if exc.retry_after is not None:
            delay = exc.retry_after
    else:
        logger.error("getUpdates failed", extra={"api_method": "getUpdates", "error": str(exc)})
    await cancel.guard(asyncio.sleep(delay))


def describe_update(update: Update) -> dict:
    """Summarise *update* as log fields."""
    update_type = update.type
    fields: dict = {"update_id": update.update_id, "update_type": update_type.value if update_type else "unknown"}
    message = update.message or update.edited_message or update.channel_post or update.business_message
    if message is not None:
        fields["chat_id"] = message.chat.id
        if message.text:
            fields["text_preview"] = message.text[:80]
    return fields


async def run(stop_event: asyncio.Event | None = None) -> None:
    """Poll for updates until *stop_event* is set (or the task is cancelled)."""
    client = RetryBotClient(
        config.BASE_URL,
        retry_max=config.RETRY_MAX,
        default_retry_delay=config.RETRY_DEFAULT_DELAY,
        timeout=config.REQUEST_TIMEOUT,
        bot_token=config.BOT_TOKEN,
        polling_timeout=config.POLLING_TIMEOUT,
    )
    receiver = BlockingUpdateReceiver(client, ReceiverOptions.from_env(), polling_error_handler)

    logger.info("Dakiya is running. Polling for updates...")
    try:
        async with receiver.iterate(stop_event) as updates:
            async for update in updates:
                logger.info("Received update", extra=describe_update(update))
    except asyncio.CancelledError:
        if stop_event is None or not stop_event.is_set():
            raise
        logger.info("Polling stopped")


async def _main() -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loops do not support signal handlers.
            pass
    await run(stop_event)


def main() -> None:
    if not config.BOT_TOKEN:
        raise EnvironmentError("BOT_TOKEN environment variable is not set or is empty.")
    asyncio.run(_main())


if __name__ == "__main__":
    main()
