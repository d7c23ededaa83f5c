"""JSON formatting utilities for IMU output records."""

import json
from typing import Any

from i2c_imu.config.types import Vec3
from i2c_imu.pipeline.records import (
    EulerRecord,
    MagnetometerRecord,
    OrientationRecord,
    OutputRecord,
)

__all__ = ["format_record"]


def _vector(vector: Vec3) -> dict[str, float]:
    return {"x": vector.x, "y": vector.y, "z": vector.z}


def _payload(record: OutputRecord) -> dict[str, Any]:
    if isinstance(record, OrientationRecord):
        q = record.orientation
        return {
            "orientation": {"w": q.w, "x": q.x, "y": q.y, "z": q.z},
            "angular_velocity": _vector(record.angular_velocity),
            "linear_acceleration": _vector(record.linear_acceleration),
        }
    if isinstance(record, (MagnetometerRecord, EulerRecord)):
        return {"vector": _vector(record.vector)}
    raise TypeError(f"Unsupported record type: {type(record).__name__}")


def format_record(record: OutputRecord) -> str:
    """Serialize an output record into a JSON string for WebSocket transmission."""
    return json.dumps({
        "type": record.topic,
        "timestamp": record.timestamp,
        "frame_id": record.frame_id,
        **_payload(record),
    })
