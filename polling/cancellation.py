"""Linked cancellation signal built on :class:`asyncio.Event`.

A :class:`CancellationSignal` owns one internal event and may be linked
to any number of caller-supplied events.  It counts as cancelled as soon
as any of them is set.  Awaitables run through :meth:`CancellationSignal.guard`
are torn down the moment the signal fires, and the caller sees
:class:`asyncio.CancelledError`.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Optional, TypeVar

T = TypeVar("T")


class CancellationSignal:
    """Cancellation source linked to zero or more external :class:`asyncio.Event` objects."""

    def __init__(self, *linked: Optional[asyncio.Event]) -> None:
        self._event = asyncio.Event()
        self._linked: tuple[asyncio.Event, ...] = tuple(e for e in linked if e is not None)

    def cancel(self) -> None:
        """Fire the internal event. Safe to call repeatedly."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set() or any(e.is_set() for e in self._linked)

    def raise_if_cancelled(self) -> None:
        """Raise :class:`asyncio.CancelledError` if the signal has fired."""
        if self.is_cancelled:
            raise asyncio.CancelledError()

    async def wait(self) -> None:
        """Suspend until the internal event or any linked event is set."""
        waiters = [asyncio.ensure_future(e.wait()) for e in (self._event, *self._linked)]
        try:
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                waiter.cancel()

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await *awaitable*, abandoning it as soon as the signal fires.

        Returns the awaitable's result or re-raises its exception.  On
        cancellation the inner task is cancelled and awaited before
        :class:`asyncio.CancelledError` is raised, so no work outlives the call.
        """
        if self.is_cancelled:
            _discard(awaitable)
            raise asyncio.CancelledError()

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self.wait())
        try:
            done, _pending = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise asyncio.CancelledError()


def _discard(awaitable: Any) -> None:
    """Close an un-awaited coroutine so it does not trigger a 'never awaited' warning."""
    close = getattr(awaitable, "close", None)
    if asyncio.iscoroutine(awaitable) and close is not None:
        close()
