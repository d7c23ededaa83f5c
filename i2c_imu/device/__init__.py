"""IMU device driver interface, RTIMULib adapter, and sample types."""

from i2c_imu.device.driver import (
    DeviceDriver,
    DeviceError,
    DeviceInitError,
    DeviceOpenError,
    RTIMUDriver,
    open_device,
    render_settings,
)
from i2c_imu.device.types import Quaternion, RawSample

__all__ = [
    "DeviceDriver",
    "DeviceError",
    "DeviceInitError",
    "DeviceOpenError",
    "Quaternion",
    "RTIMUDriver",
    "RawSample",
    "open_device",
    "render_settings",
]
