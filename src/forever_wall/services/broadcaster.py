"""Realtime fanout of newly persisted messages.

Each subscriber gets its own bounded queue. Publishing never blocks: a reader
whose queue is full misses the event, and readers that were not subscribed at
publish time never see it. Clients catch up by reading the wall again.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from forever_wall.core.settings import settings

logger = logging.getLogger(__name__)

MESSAGE_INSERTED = "message.inserted"


@dataclass(frozen=True)
class WallEvent:
    """An event delivered to realtime readers."""

    type: str
    data: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "data": self.data}


class RealtimeBroadcaster:
    """Deliver insert events to every currently subscribed reader."""

    def __init__(self, queue_size: int = settings.stream_queue_size) -> None:
        self.queue_size = queue_size
        self._subscribers: set[asyncio.Queue[WallEvent | None]] = set()
        self._closed = False

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @asynccontextmanager
    async def subscribe(self) -> AsyncIterator[asyncio.Queue[WallEvent | None]]:
        """Register a reader for the duration of the ``async with`` block.

        The queue yields ``None`` once the broadcaster is closed.
        """
        queue: asyncio.Queue[WallEvent | None] = asyncio.Queue(maxsize=self.queue_size)
        if self._closed:
            queue.put_nowait(None)
        self._subscribers.add(queue)
        logger.debug("Reader subscribed (%d active)", len(self._subscribers))
        try:
            yield queue
        finally:
            self._subscribers.discard(queue)
            logger.debug("Reader unsubscribed (%d active)", len(self._subscribers))

    def publish(self, payload: dict[str, Any], event_type: str = MESSAGE_INSERTED) -> int:
        """Fan ``payload`` out to current subscribers; return how many received it."""
        event = WallEvent(type=event_type, data=payload)
        delivered = 0
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning("Dropping %s event for a slow reader", event_type)
                continue
            delivered += 1
        return delivered

    def close(self) -> None:
        """Signal end-of-stream to every subscriber."""
        self._closed = True
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(None)
            except asyncio.QueueFull:
                # Make room for the sentinel; the reader is going away anyway.
                queue.get_nowait()
                queue.put_nowait(None)
