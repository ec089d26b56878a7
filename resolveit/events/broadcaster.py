"""Status-change event broadcasting.

Publishing is fire-and-forget and at-most-once: each subscriber gets a
bounded queue and events that do not fit are dropped.
"""

import asyncio
from abc import ABC, abstractmethod
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Any, AsyncContextManager, AsyncIterator

from resolveit.core.logging import log

DASHBOARD_TOPIC = "dashboard"


def case_topic(case_id: str) -> str:
    """Topic carrying updates for a single case."""
    return f"case:{case_id}"


class EventBroadcaster(ABC):
    """Publishes events to whoever is listening on a topic."""

    @abstractmethod
    async def publish(self, topic: str, payload: dict[str, Any]) -> None:
        """Deliver payload to current subscribers of topic. Must not raise."""
        pass

    @abstractmethod
    def subscribe(self, topic: str) -> AsyncContextManager[asyncio.Queue]:
        """Async context manager yielding a queue that receives topic events."""
        pass


class InMemoryBroadcaster(EventBroadcaster):
    """In-process pub/sub used by the WebSocket endpoints."""

    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self._subscribers: dict[str, set[asyncio.Queue]] = defaultdict(set)

    async def publish(self, topic: str, payload: dict[str, Any]) -> None:
        for queue in list(self._subscribers.get(topic, ())):
            try:
                queue.put_nowait(payload)
            except asyncio.QueueFull:
                log.warning(f"Dropping event for slow subscriber on {topic}")

    @asynccontextmanager
    async def subscribe(self, topic: str) -> AsyncIterator[asyncio.Queue]:
        """Register a queue on topic for the lifetime of the context."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        self._subscribers[topic].add(queue)
        log.debug(f"Subscriber joined {topic}")
        try:
            yield queue
        finally:
            self._subscribers[topic].discard(queue)
            if not self._subscribers[topic]:
                del self._subscribers[topic]
            log.debug(f"Subscriber left {topic}")

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))


broadcaster = InMemoryBroadcaster()
