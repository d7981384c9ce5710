"""Interfaces the engine consumes from its ledger client."""

import asyncio
from typing import NamedTuple, Protocol

_END = object()


class LedgerEvent(NamedTuple):
    event_name: str
    payload: bytes


class Subscription:
    """Ordered stream of ledger events for one event name.

    Backed by an unbounded queue, so a producer can run ahead of the
    consumer. Iterate with ``async for`` or call ``next_event()``.
    """

    def __init__(self, event_name: str, on_close=None):
        self.event_name = event_name
        self._queue: asyncio.Queue = asyncio.Queue()
        self._on_close = on_close
        self.closed = False

    def deliver(self, event: LedgerEvent) -> None:
        if not self.closed:
            self._queue.put_nowait(event)

    def end(self) -> None:
        """Mark the end of the stream. Pending events are still delivered first."""
        self._queue.put_nowait(_END)

    async def next_event(self) -> LedgerEvent:
        """Wait for the next event. Raises StopAsyncIteration once the stream ends."""
        item = await self._queue.get()
        if item is _END:
            # Keep the marker for any later caller
            self._queue.put_nowait(_END)
            raise StopAsyncIteration
        return item

    def __aiter__(self):
        return self

    async def __anext__(self) -> LedgerEvent:
        return await self.next_event()

    async def close(self) -> None:
        """Release the subscription. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True
        if self._on_close is not None:
            result = self._on_close(self)
            if asyncio.iscoroutine(result):
                await result


class LedgerClient(Protocol):
    async def subscribe(self, event_name: str) -> Subscription: ...

    async def submit_transaction(self, function_name: str, *args: str) -> bytes: ...

    async def close(self) -> None: ...
