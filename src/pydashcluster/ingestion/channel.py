"""Ordered sample channel between sensor collaborators and fusion engines.

Sensor collaborators may deliver samples from their own threads; the
channel hops every item onto the owning event loop so the engine that
consumes it is the only writer of its filter state.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Generic, TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")

_CLOSED = object()


class SampleChannel(Generic[T]):
    """FIFO channel consumed by exactly one handler on one event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, *, name: str = "samples") -> None:
        self._loop = loop
        self._name = name
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _enqueue(self, item: object) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._queue.put_nowait(item)
        else:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, item)

    def push(self, item: T) -> None:
        """Queue *item*; safe to call from any thread. Ignored once closed."""
        if self._closed:
            return
        self._enqueue(item)

    def close(self) -> None:
        """Stop accepting items; queued items are still delivered."""
        if self._closed:
            return
        self._closed = True
        self._enqueue(_CLOSED)

    async def join(self) -> None:
        """Wait until every queued item has been handled."""
        await self._queue.join()

    async def consume(self, handler: Callable[[T], None]) -> None:
        """Feed items to *handler* in arrival order until the channel is closed."""
        while True:
            item = await self._queue.get()
            try:
                if item is _CLOSED:
                    _logger.debug("Channel %s closed", self._name)
                    return
                handler(item)  # type: ignore[arg-type]
            finally:
                self._queue.task_done()
