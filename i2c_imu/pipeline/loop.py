"""Rate-adaptive acquisition loop.

One thread owns the driver. Each tick drains every sample the driver has
queued, translates each into records and hands the records to the sink of
their topic, then sleeps until the next tick. The tick period is the
driver's poll interval, read once after initialisation.

Shutdown is only observed between ticks: a drain in progress always runs to
completion, so a sample that was read is always fully dispatched.
"""

import logging
import threading
import time
from collections.abc import Callable, Mapping
from typing import Protocol

from i2c_imu.config.types import ChannelConfig
from i2c_imu.device.driver import DeviceDriver, DeviceInitError
from i2c_imu.pipeline.rate import RateLimiter
from i2c_imu.pipeline.records import OutputRecord
from i2c_imu.pipeline.translator import translate

__all__ = ["AcquisitionLoop", "Sink"]

logger = logging.getLogger(__name__)


class Sink(Protocol):
    """Destination for the records of one topic."""

    def publish(self, record: OutputRecord) -> None: ...


class AcquisitionLoop:
    """Drive an IMU and publish its samples at the device's pace.

    Topics without an entry in *sinks* are treated as disabled: their records
    are produced by the translator and then dropped here.

    Example::

        loop = AcquisitionLoop(driver, channels, {"data": data_sink})
        threading.Thread(target=loop.run).start()
        ...
        loop.stop()

    Args:
        driver: The device, owned exclusively by this loop.
        channels: Frame id and optional channel switches.
        sinks: Sink per topic name.
        stop_event: Event that ends ``run()`` at the next tick boundary.
        clock: Wall-clock source for record timestamps, in seconds.
        monotonic: Time source for tick scheduling, in seconds.
        sleep: Waits for the given seconds; defaults to waiting on
            *stop_event* so a stop request shortens the final sleep.
    """

    def __init__(
        self,
        driver: DeviceDriver,
        channels: ChannelConfig,
        sinks: Mapping[str, Sink],
        stop_event: threading.Event | None = None,
        clock: Callable[[], float] = time.time,
        monotonic: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], object] | None = None,
    ) -> None:
        self._driver = driver
        self._channels = channels
        self._sinks = dict(sinks)
        self._stop_event = stop_event if stop_event is not None else threading.Event()
        self._clock = clock
        self._monotonic = monotonic
        self._sleep = sleep if sleep is not None else self._stop_event.wait
        self._limiter: RateLimiter | None = None

    @property
    def ready(self) -> bool:
        """Whether ``start()`` has initialised the device and set the tick rate."""
        return self._limiter is not None

    def start(self) -> None:
        """Initialise the device and derive the tick rate.

        Raises:
            DeviceInitError: If the driver fails to initialise.
        """
        if not self._driver.init():
            raise DeviceInitError("Failed to init the IMU.")
        interval_ms = self._driver.poll_interval_ms()
        if interval_ms <= 0:
            logger.warning("IMU reported poll interval %d ms; polling without sleep", interval_ms)
        self._limiter = RateLimiter.from_interval_ms(
            interval_ms, clock=self._monotonic, sleep=self._sleep
        )
        logger.info("IMU ready; polling every %d ms", interval_ms)

    def stop(self) -> None:
        """Request the loop to end at the next tick boundary."""
        self._stop_event.set()

    def spin_once(self) -> int:
        """Drain every queued sample and dispatch its records.

        Returns:
            The number of samples read from the driver.
        """
        count = 0
        while self._driver.read_available():
            count += 1
            self._process_sample()
        return count

    def _process_sample(self) -> None:
        try:
            sample = self._driver.latest_sample()
            records = translate(sample, self._channels, self._clock())
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping malformed IMU sample", exc_info=True)
            return
        for record in records:
            self._dispatch(record)

    def _dispatch(self, record: OutputRecord) -> None:
        sink = self._sinks.get(record.topic)
        if sink is None:
            return
        try:
            sink.publish(record)
        except Exception:
            logger.exception("Failed to publish %s record", record.topic)

    def run(self) -> None:
        """Poll the device until ``stop()`` is called.

        Initialises the device first if ``start()`` has not been called.

        Raises:
            DeviceInitError: If the driver fails to initialise.
        """
        if self._limiter is None:
            self.start()
        limiter = self._limiter
        while not self._stop_event.is_set():
            self.spin_once()
            limiter.sleep()
        logger.info("Acquisition loop stopped")
