"""
Ticker Event Bus

Fans ticker events out to any number of WebSocket clients. Publishing is
synchronous because engine notifications are plain callbacks on the event
loop; each subscriber owns an asyncio.Queue and never blocks the publisher.
"""

import asyncio
from collections import defaultdict
from typing import Any, DefaultDict, Dict, Set

from core.logging import get_logger


class EventBus:
    """
    Topic-based pub/sub on asyncio queues.

    - Full subscriber queues drop the event instead of applying backpressure.
    - Subscribers must unsubscribe when their client disconnects.
    """

    def __init__(self, max_queue_size: int = 100) -> None:
        self._topics: DefaultDict[str, Set[asyncio.Queue]] = defaultdict(set)
        self._max_queue_size = max_queue_size
        self._logger = get_logger(__name__)

    def subscribe(self, topic: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue_size)
        self._topics[topic].add(queue)
        self._logger.debug(f"Subscriber added to '{topic}'. total={len(self._topics[topic])}")
        return queue

    def unsubscribe(self, topic: str, queue: asyncio.Queue) -> None:
        self._topics[topic].discard(queue)
        self._logger.debug(f"Subscriber removed from '{topic}'. total={len(self._topics[topic])}")

    def subscriber_count(self, topic: str) -> int:
        return len(self._topics.get(topic, ()))

    def publish(self, topic: str, event: Dict[str, Any]) -> None:
        for queue in list(self._topics.get(topic, ())):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                self._logger.warning(f"Dropping event for '{topic}' due to full queue")


bus = EventBus()
