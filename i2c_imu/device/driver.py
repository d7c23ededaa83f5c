"""IMU device driver interface and RTIMULib adapter.

The acquisition loop drives any object that satisfies ``DeviceDriver``. The
production implementation wraps the RTIMULib Python binding (``RTIMU``),
which performs the bus transactions and runs the fusion filter.

RTIMULib is configured through an ``.ini`` settings file rather than through
setters, so ``open_device`` renders the resolved ``DeviceConfig`` into that
file before creating the IMU.

Data conventions of ``RTIMU.getIMUData()``:
    - ``fusionQPose`` is a 4-tuple with the scalar part first (w, x, y, z)
    - ``gyro`` is in rad/s, ``accel`` in g, ``compass`` in uT
    - ``fusionPose`` is (roll, pitch, yaw) in radians
    - ``timestamp`` is in microseconds
"""

import importlib
import logging
import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

from i2c_imu.config.types import DeviceConfig, ModelId, Vec3
from i2c_imu.device.types import Quaternion, RawSample

__all__ = [
    "DeviceDriver",
    "DeviceError",
    "DeviceInitError",
    "DeviceOpenError",
    "RTIMUDriver",
    "open_device",
    "render_settings",
    "settings_entries",
    "write_settings",
]

logger = logging.getLogger(__name__)

_SETTINGS_PRODUCT = "RTIMULib"

# --- RTIMULib settings keys ---------------------------------------------------

# ModelTuning field -> key suffix. MPU chips spell full-scale range "FSR".
_TUNING_SUFFIXES: dict[str, str] = {
    "gyro_accel_sample_rate": "GyroAccelSampleRate",
    "gyro_sample_rate": "GyroSampleRate",
    "accel_sample_rate": "AccelSampleRate",
    "compass_sample_rate": "CompassSampleRate",
    "accel_full_scale_range": "AccelFsr",
    "gyro_full_scale_range": "GyroFsr",
    "compass_full_scale_range": "CompassFsr",
    "gyro_accel_low_pass_filter": "GyroAccelLpf",
    "accel_low_pass_filter": "AccelLpf",
    "gyro_low_pass_filter": "GyroLpf",
    "gyro_high_pass_filter": "GyroHpf",
    "gyro_bandwidth": "GyroBW",
}
_MPU_MODELS = (ModelId.MPU9150, ModelId.MPU9250)


# --- Errors -------------------------------------------------------------------


class DeviceError(Exception):
    """Base class for unrecoverable device failures."""


class DeviceOpenError(DeviceError):
    """The IMU could not be created on the configured bus."""


class DeviceInitError(DeviceError):
    """The IMU was created but failed to initialise."""


# --- Interface ----------------------------------------------------------------


class DeviceDriver(Protocol):
    """What the acquisition loop needs from an IMU driver."""

    def init(self) -> bool:
        """Initialise the device; ``False`` means it is unusable."""
        ...

    def poll_interval_ms(self) -> int:
        """Return the recommended poll interval in milliseconds."""
        ...

    def read_available(self) -> bool:
        """Advance to the next queued sample; ``False`` when none is queued."""
        ...

    def latest_sample(self) -> RawSample:
        """Return the sample made current by the last ``read_available``."""
        ...


# --- Settings rendering -------------------------------------------------------


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _tuning_key(model: ModelId, field_name: str) -> str:
    suffix = _TUNING_SUFFIXES[field_name]
    if model in _MPU_MODELS:
        suffix = suffix.replace("Fsr", "FSR")
    return f"{model.value.upper()}{suffix}"


def settings_entries(config: DeviceConfig) -> dict[str, Any]:
    """Map a ``DeviceConfig`` onto RTIMULib settings keys."""
    entries: dict[str, Any] = {
        "IMUType": int(config.imu_type),
        "FusionType": int(config.fusion_type),
        "BusIsI2C": True,
        "I2CBus": config.bus_id,
        "I2CSlaveAddress": config.bus_address,
        "compassAdjDeclination": config.compass_declination_deg,
    }
    for model in ModelId:
        for name, value in config.tuning_for(model).settings().items():
            entries[_tuning_key(model, name)] = value

    calibration = config.compass_calibration
    entries["CompassCalValid"] = calibration is not None
    if calibration is not None:
        for axis, value in zip("XYZ", calibration.min):
            entries[f"CompassCalMin{axis}"] = value
        for axis, value in zip("XYZ", calibration.max):
            entries[f"CompassCalMax{axis}"] = value
    return entries


def render_settings(config: DeviceConfig) -> str:
    """Render a ``DeviceConfig`` in RTIMULib's ``key=value`` ``.ini`` format.

    Example:
        >>> print(render_settings(config).splitlines()[0])
        IMUType=7
    """
    lines = [f"{key}={_format_value(value)}" for key, value in settings_entries(config).items()]
    return "\n".join(lines) + "\n"


# --- Sample conversion --------------------------------------------------------


def _vec3(values: Sequence[float]) -> Vec3:
    x, y, z = values
    return Vec3(float(x), float(y), float(z))


def _parse_imu_data(data: Mapping[str, Any]) -> RawSample:
    """Convert an RTIMULib data dictionary into a ``RawSample``.

    Args:
        data: Dictionary returned by ``RTIMU.getIMUData()``.

    Returns:
        RawSample with the orientation, rates and acceleration copied as
        delivered; compass and Euler pose are included when present.

    Raises:
        KeyError: If a mandatory field is missing.
        ValueError: If a vector has the wrong number of components.
    """
    w, x, y, z = data["fusionQPose"]
    compass = data.get("compass")
    euler = data.get("fusionPose")
    timestamp = data.get("timestamp")
    return RawSample(
        orientation=Quaternion(float(w), float(x), float(y), float(z)),
        angular_velocity=_vec3(data["gyro"]),
        linear_acceleration=_vec3(data["accel"]),
        compass=_vec3(compass) if compass is not None else None,
        compass_valid=bool(data.get("compassValid", False)),
        euler=_vec3(euler) if euler is not None else None,
        timestamp_us=int(timestamp) if timestamp is not None else None,
    )


# --- Public API ---------------------------------------------------------------


class RTIMUDriver:
    """``DeviceDriver`` backed by an ``RTIMU.RTIMU`` instance.

    The wrapped object is owned exclusively by this driver; RTIMULib's bus
    handle must not be shared between threads.

    Args:
        imu: Object exposing RTIMULib's ``IMUInit``, ``IMUGetPollInterval``,
            ``IMURead`` and ``getIMUData``.
    """

    def __init__(self, imu: Any) -> None:
        self._imu = imu

    def init(self) -> bool:
        return bool(self._imu.IMUInit())

    def poll_interval_ms(self) -> int:
        return int(self._imu.IMUGetPollInterval())

    def read_available(self) -> bool:
        return bool(self._imu.IMURead())

    def latest_sample(self) -> RawSample:
        return _parse_imu_data(self._imu.getIMUData())


def write_settings(config: DeviceConfig, settings_dir: str | os.PathLike[str]) -> Path:
    """Write the RTIMULib settings file and return its path."""
    path = Path(settings_dir) / f"{_SETTINGS_PRODUCT}.ini"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings(config), encoding="utf-8")
    logger.debug("Wrote RTIMULib settings to %s", path)
    return path


def open_device(
    config: DeviceConfig, settings_dir: str | os.PathLike[str]
) -> RTIMUDriver:
    """Create the IMU described by *config* through RTIMULib.

    The settings file is written to ``<settings_dir>/RTIMULib.ini`` and
    RTIMULib is pointed at it. The returned driver is not initialised yet.

    Raises:
        DeviceOpenError: If the RTIMULib binding is not installed, the
            settings file cannot be written, or no IMU could be created.
    """
    try:
        path = write_settings(config, settings_dir)
    except OSError as e:
        raise DeviceOpenError(f"Cannot write RTIMULib settings: {e}") from e

    try:
        rtimu = importlib.import_module("RTIMU")
    except ImportError as e:
        raise DeviceOpenError("The RTIMULib Python binding (RTIMU) is not installed.") from e

    location = f"i2c bus {config.bus_id} (address 0x{config.bus_address:02X})"
    try:
        # RTIMULib appends ".ini" to the product name it is given
        settings = rtimu.Settings(str(path.with_suffix("")))
        imu = rtimu.RTIMU(settings)
    except Exception as e:
        raise DeviceOpenError(f"Failed to open the IMU on {location}: {e}") from e
    if imu is None:
        raise DeviceOpenError(f"Failed to open the IMU on {location}.")
    logger.info("Opened IMU %s", imu.IMUName())
    return RTIMUDriver(imu)
