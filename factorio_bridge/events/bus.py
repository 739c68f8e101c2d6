"""Bounded event channel between the producers and the router.

The bus is the only object shared between tasks. Producers suspend in
``publish`` while the bus is full; the single consumer drains it in FIFO
order until it is closed and empty.
"""

import asyncio
from typing import AsyncIterator, Optional

from ..logger import logger
from .base import DomainEvent

DEFAULT_CAPACITY = 16


class BusClosedError(Exception):
    """Raised when publishing to a closed bus."""


class EventBus:
    """Single-consumer FIFO channel with a fixed capacity."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")

        self._queue: asyncio.Queue[DomainEvent] = asyncio.Queue(maxsize=capacity)
        self._closed = asyncio.Event()

    @property
    def capacity(self) -> int:
        return self._queue.maxsize

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def qsize(self) -> int:
        return self._queue.qsize()

    async def publish(self, event: DomainEvent) -> None:
        """Put an event on the bus, waiting for a free slot if it is full.

        Raises:
            BusClosedError: The bus was closed before the event was accepted
        """
        if self.closed:
            raise BusClosedError("event bus is closed")

        put = asyncio.ensure_future(self._queue.put(event))
        closed = asyncio.ensure_future(self._closed.wait())
        try:
            await asyncio.wait({put, closed}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            closed.cancel()
            if not put.done():
                put.cancel()

        if put.cancelled() or not put.done():
            raise BusClosedError("event bus closed while waiting for a free slot")

    async def receive(self) -> Optional[DomainEvent]:
        """Take the next event, or return None once the bus is closed and empty."""
        while True:
            if not self._queue.empty():
                return self._queue.get_nowait()
            if self.closed:
                return None

            get = asyncio.ensure_future(self._queue.get())
            closed = asyncio.ensure_future(self._closed.wait())
            try:
                await asyncio.wait({get, closed}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                closed.cancel()
                if not get.done():
                    get.cancel()

            if get.done() and not get.cancelled():
                return get.result()

    def close(self) -> None:
        """Stop accepting events; queued events are still delivered."""
        if not self.closed:
            logger.debug(f"Closing event bus with {self.qsize()} queued events")
        self._closed.set()

    async def __aiter__(self) -> AsyncIterator[DomainEvent]:
        while (event := await self.receive()) is not None:
            yield event
