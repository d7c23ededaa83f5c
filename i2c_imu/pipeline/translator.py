"""Translate raw IMU samples into output records.

Translation is pure: the caller supplies the timestamp, so the same sample,
channels and timestamp always produce the same records. Whether a record is
actually delivered is decided later, when it is dispatched to a sink.
"""

from i2c_imu.config.types import ChannelConfig, Vec3
from i2c_imu.device.types import RawSample
from i2c_imu.pipeline.records import (
    EulerRecord,
    MagnetometerRecord,
    OrientationRecord,
    OutputRecord,
)

__all__ = ["STANDARD_GRAVITY", "translate"]

STANDARD_GRAVITY = 9.80665  # m/s² per g


def _to_si(acceleration_g: Vec3) -> Vec3:
    return Vec3(
        acceleration_g.x * STANDARD_GRAVITY,
        acceleration_g.y * STANDARD_GRAVITY,
        acceleration_g.z * STANDARD_GRAVITY,
    )


def translate(
    sample: RawSample,
    channels: ChannelConfig,
    timestamp: float,
) -> list[OutputRecord]:
    """Convert one sample into the records it produces.

    Rules, in order:

    1. One ``OrientationRecord`` is always produced; acceleration is
       converted from g to m/s².
    2. A ``MagnetometerRecord`` is produced if the magnetometer channel is
       enabled and this sample's compass reading is valid.
    3. An ``EulerRecord`` is produced if the Euler channel is enabled and the
       sample carries a pose; its third component is negated.

    Args:
        sample: Sample returned by the driver.
        channels: Frame id and optional channel switches.
        timestamp: Seconds to stamp every record of this sample with.

    Returns:
        The records in topic order ``data``, ``mag``, ``euler``.
    """
    records: list[OutputRecord] = [
        OrientationRecord(
            timestamp=timestamp,
            frame_id=channels.frame_id,
            orientation=sample.orientation,
            angular_velocity=sample.angular_velocity,
            linear_acceleration=_to_si(sample.linear_acceleration),
        )
    ]

    if channels.magnetometer and sample.compass_valid and sample.compass is not None:
        records.append(
            MagnetometerRecord(
                timestamp=timestamp,
                frame_id=channels.frame_id,
                vector=sample.compass,
            )
        )

    if channels.euler and sample.euler is not None:
        pose = sample.euler
        records.append(
            EulerRecord(
                timestamp=timestamp,
                frame_id=channels.frame_id,
                vector=Vec3(pose.x, pose.y, -pose.z),
            )
        )

    return records
