"""Sample factories and a scripted driver shared across tests."""

from collections import deque
from collections.abc import Iterable

from i2c_imu.config.types import Vec3
from i2c_imu.device.types import Quaternion, RawSample


def make_sample(
    accel: tuple[float, float, float] = (0.0, 0.0, 1.0),
    gyro: tuple[float, float, float] = (0.0, 0.0, 0.0),
    compass: tuple[float, float, float] | None = (20.0, -5.0, 40.0),
    compass_valid: bool = True,
    euler: tuple[float, float, float] | None = (0.1, 0.2, 0.3),
) -> RawSample:
    return RawSample(
        orientation=Quaternion(1.0, 0.0, 0.0, 0.0),
        angular_velocity=Vec3(*gyro),
        linear_acceleration=Vec3(*accel),
        compass=Vec3(*compass) if compass is not None else None,
        compass_valid=compass_valid,
        euler=Vec3(*euler) if euler is not None else None,
    )


class ScriptedDriver:
    """Driver whose queue is filled by the test.

    ``read_available`` pops the next queued item; an item that is an
    exception instance is raised from ``latest_sample`` instead of returned.
    """

    def __init__(
        self,
        samples: Iterable[RawSample | Exception] = (),
        init_result: bool = True,
        interval_ms: int = 10,
    ) -> None:
        self.queue: deque[RawSample | Exception] = deque(samples)
        self.init_result = init_result
        self.interval_ms = interval_ms
        self.init_calls = 0
        self.reads = 0
        self._current: RawSample | Exception | None = None

    def init(self) -> bool:
        self.init_calls += 1
        return self.init_result

    def poll_interval_ms(self) -> int:
        return self.interval_ms

    def read_available(self) -> bool:
        if not self.queue:
            return False
        self._current = self.queue.popleft()
        self.reads += 1
        return True

    def latest_sample(self) -> RawSample:
        if isinstance(self._current, Exception):
            raise self._current
        assert self._current is not None
        return self._current


class RecordingSink:
    """Sink that keeps every record it is given."""

    def __init__(self) -> None:
        self.records: list = []

    def publish(self, record) -> None:
        self.records.append(record)
