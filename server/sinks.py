"""Sinks that publish IMU records to WebSocket subscribers."""

import asyncio

from i2c_imu.config.types import ChannelConfig
from i2c_imu.pipeline.records import DATA_TOPIC, EULER_TOPIC, MAG_TOPIC, OutputRecord
from server.broadcaster import TopicBroadcaster
from server.formatters import format_record

__all__ = ["BroadcastSink", "build_sinks"]


class BroadcastSink:
    """Publish the records of one topic through a ``TopicBroadcaster``.

    ``publish`` is called from the acquisition thread; it only formats the
    record and schedules delivery on *loop*, so it never blocks.

    Args:
        topic: Topic the records are published on.
        broadcaster: Subscriber registry shared with the WebSocket endpoint.
        loop: Running asyncio event loop that owns the subscriber queues.
    """

    def __init__(
        self,
        topic: str,
        broadcaster: TopicBroadcaster,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self.topic = topic
        self._broadcaster = broadcaster
        self._loop = loop

    def publish(self, record: OutputRecord) -> None:
        self._broadcaster.broadcast(self.topic, format_record(record), self._loop)


def build_sinks(
    channels: ChannelConfig,
    broadcaster: TopicBroadcaster,
    loop: asyncio.AbstractEventLoop,
) -> dict[str, BroadcastSink]:
    """Create a sink for the ``data`` topic and each enabled optional channel."""
    topics = [DATA_TOPIC]
    if channels.magnetometer:
        topics.append(MAG_TOPIC)
    if channels.euler:
        topics.append(EULER_TOPIC)
    return {topic: BroadcastSink(topic, broadcaster, loop) for topic in topics}
