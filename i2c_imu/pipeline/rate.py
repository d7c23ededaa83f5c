"""Fixed-rate tick scheduling."""

import time
from collections.abc import Callable

__all__ = ["RateLimiter"]


class RateLimiter:
    """Sleep so that successive ticks start one period apart.

    The schedule advances by exactly one period per ``sleep()``, so short
    overruns are absorbed by the following ticks. If a tick overruns by more
    than a whole period the schedule is re-anchored to the current time
    instead of trying to catch up with a burst of zero-length sleeps.

    Args:
        period: Seconds between tick starts; ``0`` never sleeps.
        clock: Monotonic time source in seconds.
        sleep: Called with the number of seconds to wait.
    """

    def __init__(
        self,
        period: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], object] = time.sleep,
    ) -> None:
        if period < 0:
            raise ValueError(f"period must not be negative, got {period}")
        self._period = period
        self._clock = clock
        self._sleep = sleep
        self._start = clock()

    @classmethod
    def from_interval_ms(cls, interval_ms: int, **kwargs) -> "RateLimiter":
        """Build a limiter from a poll interval in milliseconds."""
        return cls(max(interval_ms, 0) / 1000.0, **kwargs)

    @property
    def period(self) -> float:
        return self._period

    def sleep(self) -> bool:
        """Wait until the next tick boundary.

        Returns:
            ``True`` if the boundary was met, ``False`` if the tick had
            already overrun it.
        """
        expected_end = self._start + self._period
        now = self._clock()
        remaining = expected_end - now
        self._start = expected_end

        if remaining <= 0:
            if now > expected_end + self._period:
                self._start = now
            return self._period == 0

        self._sleep(remaining)
        return True
