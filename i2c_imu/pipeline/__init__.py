"""Sample translation, tick scheduling, and the acquisition loop."""

from i2c_imu.pipeline.loop import AcquisitionLoop, Sink
from i2c_imu.pipeline.rate import RateLimiter
from i2c_imu.pipeline.records import (
    DATA_TOPIC,
    EULER_TOPIC,
    MAG_TOPIC,
    TOPICS,
    EulerRecord,
    MagnetometerRecord,
    OrientationRecord,
    OutputRecord,
)
from i2c_imu.pipeline.translator import STANDARD_GRAVITY, translate

__all__ = [
    "DATA_TOPIC",
    "EULER_TOPIC",
    "MAG_TOPIC",
    "STANDARD_GRAVITY",
    "TOPICS",
    "AcquisitionLoop",
    "EulerRecord",
    "MagnetometerRecord",
    "OrientationRecord",
    "OutputRecord",
    "RateLimiter",
    "Sink",
    "translate",
]
