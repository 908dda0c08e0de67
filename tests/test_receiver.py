"""Tests for BlockingUpdateReceiver and its update enumerator."""

import asyncio
import os
import sys
from unittest.mock import AsyncMock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from polling.cancellation import CancellationSignal
from polling.options import ReceiverOptions
from polling.receiver import BlockingUpdateReceiver
from sdk.exceptions import APIException, TransportException
from sdk.methods import GetUpdatesRequest
from sdk.models import Update, UpdateType


# ── Fixtures / helpers ───────────────────────────────────────────────────────


class FakeClient:
    """In-memory transport that replays scripted ``getUpdates`` outcomes.

    Each scripted item is either a list of updates (returned) or an exception
    (raised).  Once the script runs out, calls block until cancelled.
    """

    def __init__(self, *responses, polling_timeout: int = 30) -> None:
        self.polling_timeout = polling_timeout
        self._responses = list(responses)
        self.requests: list[GetUpdatesRequest] = []

    def push(self, *responses) -> None:
        self._responses.extend(responses)

    async def send_request_async(self, request: GetUpdatesRequest):
        self.requests.append(request)
        if not self._responses:
            await asyncio.Event().wait()
        item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    @property
    def offsets(self) -> list:
        return [r.offset for r in self.requests]


def _batch(*ids: int) -> list[Update]:
    return [Update(update_id=i) for i in ids]


async def _settle() -> None:
    """Let pending tasks run until they block."""
    for _ in range(5):
        await asyncio.sleep(0)


# ── Construction and the single-iteration guard ─────────────────────────────


class TestConstruction:
    """Validate receiver construction and the once-only iteration rule."""

    def test_missing_client_raises(self) -> None:
        with pytest.raises(ValueError):
            BlockingUpdateReceiver(None)

    def test_defaults(self) -> None:
        receiver = BlockingUpdateReceiver(FakeClient())
        enumerator = receiver.iterate()
        assert enumerator.offset == 0

    @pytest.mark.asyncio
    async def test_second_iterate_fails_without_disturbing_first(self) -> None:
        client = FakeClient(_batch(1), _batch(2))
        receiver = BlockingUpdateReceiver(client)
        first = receiver.iterate()

        with pytest.raises(RuntimeError, match="only be called once"):
            receiver.iterate()
        with pytest.raises(RuntimeError):
            aiter(receiver)

        assert await first.move_next() is True
        assert first.current.update_id == 1
        assert await first.move_next() is True
        assert first.current.update_id == 2

    def test_current_before_move_next_raises(self) -> None:
        enumerator = BlockingUpdateReceiver(FakeClient()).iterate()
        with pytest.raises(RuntimeError):
            _ = enumerator.current


# ── Buffering and offset advancement ────────────────────────────────────────


class TestFetching:
    """Validate the buffer / offset state machine."""

    @pytest.mark.asyncio
    async def test_empty_batches_then_buffered_batch(self) -> None:
        """[], [], [10, 11] from offset 0: three fetches, two updates, then offset 12."""
        client = FakeClient([], [], _batch(10, 11))
        enumerator = BlockingUpdateReceiver(client).iterate()

        assert await enumerator.move_next() is True
        assert enumerator.current.update_id == 10
        assert client.offsets == [0, 0, 0]

        assert await enumerator.move_next() is True
        assert enumerator.current.update_id == 11
        assert len(client.requests) == 3

        client.push(_batch(12))
        assert await enumerator.move_next() is True
        assert client.offsets == [0, 0, 0, 12]
        assert enumerator.current.update_id == 12

    @pytest.mark.asyncio
    @pytest.mark.parametrize("empty_count", [0, 1, 4])
    async def test_n_empty_batches_cost_n_plus_one_fetches(self, empty_count: int) -> None:
        client = FakeClient(*([[]] * empty_count), _batch(5, 6))
        enumerator = BlockingUpdateReceiver(client).iterate()

        assert await enumerator.move_next() is True
        assert enumerator.current.update_id == 5
        assert len(client.requests) == empty_count + 1

    @pytest.mark.asyncio
    async def test_ids_non_decreasing_across_batches(self) -> None:
        client = FakeClient(_batch(1, 2), [], _batch(3), _batch(4, 5, 6))
        enumerator = BlockingUpdateReceiver(client).iterate()

        seen = []
        for _ in range(6):
            await enumerator.move_next()
            seen.append(enumerator.current.update_id)

        assert seen == sorted(seen) == [1, 2, 3, 4, 5, 6]
        assert client.offsets == [0, 3, 3, 4]
        assert enumerator.offset == 7

    @pytest.mark.asyncio
    async def test_initial_offset_and_filters_are_sent(self) -> None:
        client = FakeClient(_batch(100), polling_timeout=25)
        options = ReceiverOptions(offset=100, limit=10, allowed_updates=(UpdateType.MESSAGE, UpdateType.CALLBACK_QUERY))
        enumerator = BlockingUpdateReceiver(client, options).iterate()

        await enumerator.move_next()
        request = client.requests[0]
        assert request.offset == 100
        assert request.limit == 10
        assert request.timeout == 25
        assert request.allowed_updates == [UpdateType.MESSAGE, UpdateType.CALLBACK_QUERY]

    @pytest.mark.asyncio
    async def test_async_for_yields_updates(self) -> None:
        client = FakeClient(_batch(1, 2), _batch(3))
        receiver = BlockingUpdateReceiver(client)

        seen = []
        async with receiver.iterate() as updates:
            async for update in updates:
                seen.append(update.update_id)
                if len(seen) == 3:
                    break
        assert seen == [1, 2, 3]


# ── Error handling ──────────────────────────────────────────────────────────


class TestErrorHandling:
    """Validate the retry / error-hook loop."""

    @pytest.mark.asyncio
    async def test_hook_called_once_per_failure_and_offset_kept(self) -> None:
        first = TransportException("offline")
        second = APIException(502, {"ok": False, "error_code": 502, "description": "Bad Gateway"})
        client = FakeClient(_batch(1), first, second, _batch(2))
        hook = AsyncMock()
        enumerator = BlockingUpdateReceiver(client, polling_error_handler=hook).iterate()

        await enumerator.move_next()
        await enumerator.move_next()

        assert enumerator.current.update_id == 2
        assert hook.await_count == 2
        assert hook.await_args_list[0].args[0] is first
        assert hook.await_args_list[1].args[0] is second
        assert isinstance(hook.await_args_list[0].args[1], CancellationSignal)
        assert client.offsets == [0, 2, 2, 2]

    @pytest.mark.asyncio
    async def test_without_hook_fault_propagates(self) -> None:
        error = TransportException("offline")
        client = FakeClient(error)
        enumerator = BlockingUpdateReceiver(client).iterate()

        with pytest.raises(TransportException) as exc_info:
            await enumerator.move_next()
        assert exc_info.value is error
        assert len(client.requests) == 1

    @pytest.mark.asyncio
    async def test_hook_failure_propagates(self) -> None:
        client = FakeClient(TransportException("offline"))
        hook = AsyncMock(side_effect=RuntimeError("give up"))
        enumerator = BlockingUpdateReceiver(client, polling_error_handler=hook).iterate()

        with pytest.raises(RuntimeError, match="give up"):
            await enumerator.move_next()
        assert len(client.requests) == 1

    @pytest.mark.asyncio
    async def test_cancellation_from_transport_skips_hook(self) -> None:
        client = FakeClient(asyncio.CancelledError())
        hook = AsyncMock()
        enumerator = BlockingUpdateReceiver(client, polling_error_handler=hook).iterate()

        with pytest.raises(asyncio.CancelledError):
            await enumerator.move_next()
        hook.assert_not_awaited()


# ── Cancellation and disposal ───────────────────────────────────────────────


class TestCancellation:
    """Validate cancellation via the external event and via disposal."""

    @pytest.mark.asyncio
    async def test_already_cancelled_fails_without_fetching(self) -> None:
        stop = asyncio.Event()
        stop.set()
        client = FakeClient(_batch(1))
        enumerator = BlockingUpdateReceiver(client).iterate(stop)

        with pytest.raises(asyncio.CancelledError):
            await enumerator.move_next()
        assert client.requests == []

    @pytest.mark.asyncio
    async def test_cancel_during_pending_fetch(self) -> None:
        stop = asyncio.Event()
        client = FakeClient()
        enumerator = BlockingUpdateReceiver(client).iterate(stop)

        pull = asyncio.ensure_future(enumerator.move_next())
        await _settle()
        assert len(client.requests) == 1

        stop.set()
        with pytest.raises(asyncio.CancelledError):
            await pull
        with pytest.raises(asyncio.CancelledError):
            await enumerator.move_next()
        assert len(client.requests) == 1
        assert enumerator.offset == 0

    @pytest.mark.asyncio
    async def test_cancel_during_error_hook(self) -> None:
        stop = asyncio.Event()
        hook_started = asyncio.Event()

        async def slow_hook(exc: Exception, signal: CancellationSignal) -> None:
            hook_started.set()
            await asyncio.Event().wait()

        client = FakeClient(TransportException("offline"), _batch(1))
        enumerator = BlockingUpdateReceiver(client, polling_error_handler=slow_hook).iterate(stop)

        pull = asyncio.ensure_future(enumerator.move_next())
        await hook_started.wait()
        stop.set()

        with pytest.raises(asyncio.CancelledError):
            await pull
        assert len(client.requests) == 1

    @pytest.mark.asyncio
    async def test_aclose_cancels_pending_fetch_and_is_idempotent(self) -> None:
        client = FakeClient()
        enumerator = BlockingUpdateReceiver(client).iterate()

        pull = asyncio.ensure_future(enumerator.move_next())
        await _settle()

        await enumerator.aclose()
        await enumerator.aclose()

        with pytest.raises(asyncio.CancelledError):
            await pull
        with pytest.raises(asyncio.CancelledError):
            await enumerator.move_next()
        assert enumerator.signal.is_cancelled

    @pytest.mark.asyncio
    async def test_aclose_does_not_touch_external_event(self) -> None:
        stop = asyncio.Event()
        enumerator = BlockingUpdateReceiver(FakeClient()).iterate(stop)
        await enumerator.aclose()
        assert not stop.is_set()


# ── Dropping pending updates ────────────────────────────────────────────────


class TestDropPendingUpdates:
    """Validate the best-effort start-up drop of queued updates."""

    @pytest.mark.asyncio
    async def test_starts_after_most_recent_pending_update(self) -> None:
        client = FakeClient(_batch(42), _batch(43))
        options = ReceiverOptions(drop_pending_updates=True)
        enumerator = BlockingUpdateReceiver(client, options).iterate()

        await enumerator.move_next()

        drop = client.requests[0]
        assert (drop.offset, drop.limit, drop.timeout, drop.allowed_updates) == (-1, 1, 0, [])
        assert client.requests[1].offset == 43
        assert enumerator.current.update_id == 43

    @pytest.mark.asyncio
    async def test_keeps_initial_offset_when_nothing_pending(self) -> None:
        client = FakeClient([], _batch(7))
        options = ReceiverOptions(offset=5, drop_pending_updates=True)
        enumerator = BlockingUpdateReceiver(client, options).iterate()

        await enumerator.move_next()
        assert client.offsets == [-1, 5]

    @pytest.mark.asyncio
    async def test_runs_only_once_per_session(self) -> None:
        client = FakeClient(_batch(9), _batch(10), _batch(11))
        options = ReceiverOptions(drop_pending_updates=True)
        enumerator = BlockingUpdateReceiver(client, options).iterate()

        await enumerator.move_next()
        await enumerator.move_next()
        assert client.offsets == [-1, 10, 11]

    @pytest.mark.asyncio
    async def test_failure_is_swallowed_and_not_retried(self) -> None:
        client = FakeClient(TransportException("offline"), _batch(3))
        options = ReceiverOptions(offset=2, drop_pending_updates=True)
        enumerator = BlockingUpdateReceiver(client, options).iterate()

        await enumerator.move_next()
        assert enumerator.current.update_id == 3
        assert client.offsets == [-1, 2]

    @pytest.mark.asyncio
    async def test_cancellation_during_drop_still_aborts(self) -> None:
        stop = asyncio.Event()
        client = FakeClient()
        options = ReceiverOptions(drop_pending_updates=True)
        enumerator = BlockingUpdateReceiver(client, options).iterate(stop)

        pull = asyncio.ensure_future(enumerator.move_next())
        await _settle()
        stop.set()

        with pytest.raises(asyncio.CancelledError):
            await pull
        assert client.offsets == [-1]
