"""Pull-based long-polling update receiver.

:class:`BlockingUpdateReceiver` turns the stateless, offset-based
``getUpdates`` endpoint into an ordered async sequence of
:class:`~sdk.models.Update` objects::

    receiver = BlockingUpdateReceiver(client, ReceiverOptions(limit=50), on_error)
    async with receiver.iterate(stop_event) as updates:
        async for update in updates:
            ...

Only one batch is buffered at a time.  The next ``getUpdates`` call is made
inline by the pull that exhausts the buffer, so a slow consumer simply
polls less often.  The offset advances only after a whole batch has been
received, which means a failed or cancelled fetch never skips an update.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Awaitable, Callable, List, Optional, Protocol

from core.logger import DakiyaLogger
from polling.cancellation import CancellationSignal
from polling.options import ReceiverOptions
from sdk.methods import GetUpdatesRequest, RequestBase
from sdk.models import Update

logger = DakiyaLogger.get_logger()

PollingErrorHandler = Callable[[Exception, CancellationSignal], Awaitable[None]]


class UpdateSource(Protocol):
    """What the receiver needs from a transport (:class:`sdk.client.BotClient` fits)."""

    polling_timeout: int

    async def send_request_async(self, request: RequestBase) -> Any: ...  # noqa: E704


class BlockingUpdateReceiver:
    """Async-iterable source of updates, backed by ``getUpdates`` long polling.

    Args:
        client: Transport used for ``getUpdates`` calls.
        receiver_options: Session configuration; defaults to :class:`ReceiverOptions`.
        polling_error_handler: Awaited with ``(exception, signal)`` whenever a
            fetch fails with anything but cancellation.  The fetch is retried
            once it returns.  Without a handler the exception ends the sequence.

    The receiver may be iterated exactly once.
    """

    def __init__(
        self,
        client: UpdateSource,
        receiver_options: Optional[ReceiverOptions] = None,
        polling_error_handler: Optional[PollingErrorHandler] = None,
    ) -> None:
        if client is None:
            raise ValueError("client is required")
        self._client = client
        self._options = receiver_options or ReceiverOptions()
        self._polling_error_handler = polling_error_handler
        self._guard = threading.Lock()
        self._in_process = False

    def iterate(self, cancel_event: Optional[asyncio.Event] = None) -> UpdateEnumerator:
        """Start the one permitted iteration.

        Args:
            cancel_event: Setting this event stops receiving; pending and
                later pulls raise :class:`asyncio.CancelledError`.

        Raises:
            RuntimeError: If the receiver has already been iterated.
        """
        with self._guard:
            if self._in_process:
                raise RuntimeError("iterate() may only be called once per receiver")
            self._in_process = True
        return UpdateEnumerator(self, cancel_event)

    def __aiter__(self) -> UpdateEnumerator:
        return self.iterate()


class UpdateEnumerator:
    """Cursor over one receiving session. Created by :meth:`BlockingUpdateReceiver.iterate`."""

    def __init__(self, receiver: BlockingUpdateReceiver, cancel_event: Optional[asyncio.Event]) -> None:
        options = receiver._options
        self._client = receiver._client
        self._error_handler = receiver._polling_error_handler
        self._signal = CancellationSignal(cancel_event)
        self._offset = options.offset
        self._limit = options.limit
        self._allowed_updates = list(options.allowed_updates) if options.allowed_updates is not None else None
        self._drop_pending_updates = options.drop_pending_updates
        self._pending_dropped = False
        self._updates: List[Update] = []
        self._index = 0
        self._disposed = False

    @property
    def offset(self) -> int:
        """Offset the next ``getUpdates`` call will request."""
        return self._offset

    @property
    def signal(self) -> CancellationSignal:
        return self._signal

    @property
    def current(self) -> Update:
        """The update produced by the last successful :meth:`move_next`."""
        if not 0 <= self._index < len(self._updates):
            raise RuntimeError("No current update; await move_next() first")
        return self._updates[self._index]

    async def move_next(self) -> bool:
        """Advance to the next update, fetching a new batch when the buffer is exhausted.

        Always returns ``True``: the sequence only ends by raising.

        Raises:
            asyncio.CancelledError: The session was cancelled or disposed.
            Exception: A fetch failed and no error handler is configured, or
                the error handler itself raised.
        """
        self._signal.raise_if_cancelled()

        self._index += 1
        if self._index < len(self._updates):
            return True
        return await self._receive_updates()

    async def _receive_updates(self) -> bool:
        if self._drop_pending_updates and not self._pending_dropped:
            await self._drop_pending()

        self._updates = []
        self._index = 0

        while not self._updates:
            request = GetUpdatesRequest(
                offset=self._offset,
                limit=self._limit,
                timeout=self._client.polling_timeout,
                allowed_updates=self._allowed_updates,
            )
            try:
                updates = await self._signal.guard(self._client.send_request_async(request))
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                if self._error_handler is None:
                    logger.error("getUpdates failed, ending update sequence", extra={"offset": self._offset, "error": str(exc)})
                    raise
                logger.warning("getUpdates failed, handing off to error handler", extra={"offset": self._offset, "error": str(exc)})
                await self._signal.guard(self._error_handler(exc, self._signal))
                continue

            logger.debug("Fetched updates", extra={"offset": self._offset, "count": len(updates)})
            self._updates = list(updates)

        self._offset = self._updates[-1].update_id + 1
        return True

    async def _drop_pending(self) -> None:
        """Skip whatever is queued server-side. Best effort: failures are logged and ignored."""
        try:
            pending = await self._signal.guard(self._client.send_request_async(
                GetUpdatesRequest(offset=-1, limit=1, timeout=0, allowed_updates=[])
            ))
            if pending:
                self._offset = pending[-1].update_id + 1
            logger.info("Dropped pending updates", extra={"offset": self._offset})
        except asyncio.CancelledError:
            if not self._signal.is_cancelled:
                raise
            logger.debug("Dropping pending updates interrupted by cancellation")
        except Exception as exc:
            logger.warning("Dropping pending updates failed", extra={"error": str(exc)})
        finally:
            self._pending_dropped = True

    async def aclose(self) -> None:
        """Cancel the session. Idempotent; any in-flight fetch unwinds with :class:`asyncio.CancelledError`."""
        if self._disposed:
            return
        self._disposed = True
        self._signal.cancel()
        logger.info("Update receiver disposed", extra={"offset": self._offset})

    def __aiter__(self) -> UpdateEnumerator:
        return self

    async def __anext__(self) -> Update:
        await self.move_next()
        return self.current

    async def __aenter__(self) -> UpdateEnumerator:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
