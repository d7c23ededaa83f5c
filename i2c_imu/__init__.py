"""IMU acquisition and publication pipeline built on RTIMULib."""

from i2c_imu.config import ChannelConfig, DeviceConfig, load_params, resolve, resolve_channels
from i2c_imu.device import DeviceDriver, DeviceError, RawSample, open_device
from i2c_imu.pipeline import AcquisitionLoop, OutputRecord, translate

__all__ = [
    "AcquisitionLoop",
    "ChannelConfig",
    "DeviceConfig",
    "DeviceDriver",
    "DeviceError",
    "OutputRecord",
    "RawSample",
    "load_params",
    "open_device",
    "resolve",
    "resolve_channels",
    "translate",
]
