"""Parameter loading and device/channel configuration resolution."""

from i2c_imu.config.params import flatten_params, load_params
from i2c_imu.config.resolver import resolve, resolve_channels
from i2c_imu.config.types import (
    ChannelConfig,
    CompassCalibration,
    DeviceConfig,
    FusionType,
    ImuType,
    ModelId,
    ModelTuning,
    Vec3,
)

__all__ = [
    "ChannelConfig",
    "CompassCalibration",
    "DeviceConfig",
    "FusionType",
    "ImuType",
    "ModelId",
    "ModelTuning",
    "Vec3",
    "flatten_params",
    "load_params",
    "resolve",
    "resolve_channels",
]
