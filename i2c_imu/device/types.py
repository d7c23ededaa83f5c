"""IMU sample types produced by the device driver."""

from collections.abc import Iterator
from dataclasses import dataclass

from i2c_imu.config.types import Vec3


@dataclass(frozen=True)
class Quaternion:
    """A unit quaternion with the scalar part first.

    Attributes:
        w: Scalar part.
        x: First vector component.
        y: Second vector component.
        z: Third vector component.
    """

    w: float
    x: float
    y: float
    z: float

    def __iter__(self) -> Iterator[float]:
        yield self.w
        yield self.x
        yield self.y
        yield self.z


@dataclass(frozen=True)
class RawSample:
    """A single fused IMU sample as delivered by the driver.

    Attributes:
        orientation: Fused orientation, normalized by the driver.
        angular_velocity: Gyroscope rates in rad/s.
        linear_acceleration: Accelerometer reading in g.

        compass: Magnetometer reading in uT, or ``None`` if not read.
        compass_valid: ``True`` when ``compass`` holds a usable fix for this
            sample. A sample may carry a compass vector that is not valid.
        euler: Fused roll/pitch/yaw in radians, or ``None``.

        timestamp_us: Driver timestamp in microseconds, or ``None``.

    Example:
        >>> sample = driver.latest_sample()
        >>> sample.linear_acceleration.z  # roughly 1.0 g when flat
        0.99...
        >>> sample.compass_valid
        True
    """

    orientation: Quaternion
    angular_velocity: Vec3
    linear_acceleration: Vec3

    compass: Vec3 | None = None
    compass_valid: bool = False
    euler: Vec3 | None = None

    timestamp_us: int | None = None
