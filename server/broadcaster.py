"""Per-topic WebSocket subscriber queues and thread-safe broadcasting."""

import asyncio

from i2c_imu.pipeline.records import TOPICS

__all__ = ["TopicBroadcaster"]


def _enqueue_message(queue: asyncio.Queue[str], message: str) -> None:
    if queue.full():
        queue.get_nowait()
    queue.put_nowait(message)


class TopicBroadcaster:
    """Fan messages out to the subscriber queues of one topic.

    Queues are only touched on the event loop thread. Producers on other
    threads go through ``broadcast``, which schedules the enqueue with
    ``call_soon_threadsafe``. A full queue drops its oldest message so a slow
    client never blocks the acquisition thread.

    Args:
        topics: Topic names subscribers may attach to.
    """

    def __init__(self, topics: tuple[str, ...] = TOPICS) -> None:
        self._subscribers: dict[str, list[asyncio.Queue[str]]] = {
            topic: [] for topic in topics
        }

    @property
    def topics(self) -> tuple[str, ...]:
        return tuple(self._subscribers)

    def add_subscriber(self, topic: str, queue: asyncio.Queue[str]) -> None:
        """Attach *queue* to *topic*.

        Raises:
            KeyError: If *topic* is unknown.
        """
        self._subscribers[topic].append(queue)

    def remove_subscriber(self, topic: str, queue: asyncio.Queue[str]) -> None:
        """Detach *queue* from *topic*."""
        self._subscribers[topic].remove(queue)

    def subscriber_count(self, topic: str) -> int:
        """Return how many queues are attached to *topic*.

        Raises:
            KeyError: If *topic* is unknown.
        """
        return len(self._subscribers[topic])

    def broadcast(
        self, topic: str, message: str, loop: asyncio.AbstractEventLoop
    ) -> None:
        """Dispatch a message to every subscriber of *topic* safely."""
        for queue in list(self._subscribers[topic]):
            loop.call_soon_threadsafe(_enqueue_message, queue, message)
