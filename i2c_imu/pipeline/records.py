"""Output record types published on the IMU topics.

Each record carries the time it was produced and the frame it is expressed
in, and names the topic it belongs to through the ``topic`` class attribute:

    data   OrientationRecord   always published
    mag    MagnetometerRecord  optional channel
    euler  EulerRecord         optional channel
"""

from dataclasses import dataclass
from typing import ClassVar

from i2c_imu.config.types import Vec3
from i2c_imu.device.types import Quaternion

__all__ = [
    "DATA_TOPIC",
    "EULER_TOPIC",
    "MAG_TOPIC",
    "TOPICS",
    "EulerRecord",
    "MagnetometerRecord",
    "OrientationRecord",
    "OutputRecord",
]

DATA_TOPIC = "data"
MAG_TOPIC = "mag"
EULER_TOPIC = "euler"
TOPICS = (DATA_TOPIC, MAG_TOPIC, EULER_TOPIC)


@dataclass(frozen=True)
class OrientationRecord:
    """Fused orientation with rates and SI acceleration.

    Attributes:
        timestamp: Wall-clock seconds at which the sample was translated.
        frame_id: Frame the vectors are expressed in.
        orientation: Unit quaternion (w, x, y, z).
        angular_velocity: Angular rate in rad/s.
        linear_acceleration: Acceleration in m/s².
    """

    topic: ClassVar[str] = DATA_TOPIC

    timestamp: float
    frame_id: str
    orientation: Quaternion
    angular_velocity: Vec3
    linear_acceleration: Vec3


@dataclass(frozen=True)
class MagnetometerRecord:
    """Magnetometer reading, published only for samples with a valid compass."""

    topic: ClassVar[str] = MAG_TOPIC

    timestamp: float
    frame_id: str
    vector: Vec3


@dataclass(frozen=True)
class EulerRecord:
    """Roll, pitch and yaw in radians with the yaw sign flipped."""

    topic: ClassVar[str] = EULER_TOPIC

    timestamp: float
    frame_id: str
    vector: Vec3


OutputRecord = OrientationRecord | MagnetometerRecord | EulerRecord
