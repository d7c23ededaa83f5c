"""Resolve a flat parameter namespace into device and channel configuration.

Resolution is total: a key that is missing, unreadable, of the wrong type, or
out of range is treated as absent and its field keeps the default listed
below. Unknown keys are ignored.

General defaults (RTIMULib's own):
    imu_type              AUTODISCOVER
    fusion_type           RTQF
    i2c_bus               1
    i2c_slave_address     0   (probe the bus)
    magnetic_declination  0.0 rad

Per-model tuning tables are read for every ``ModelId``, not only the active
one, so the resulting ``DeviceConfig`` can serve a different model without
re-reading parameters.
"""

import enum
import logging
import math
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, TypeVar

from i2c_imu.config.params import (
    read_bool,
    read_float,
    read_int,
    read_str,
    read_value,
    read_vec3,
)
from i2c_imu.config.types import (
    ChannelConfig,
    CompassCalibration,
    DeviceConfig,
    FusionType,
    ImuType,
    ModelId,
    ModelTuning,
)

__all__ = ["MODEL_DEFAULTS", "resolve", "resolve_channels", "resolve_tuning"]

logger = logging.getLogger(__name__)

_E = TypeVar("_E", bound=enum.IntEnum)

# --- General defaults ---------------------------------------------------------

_DEFAULT_IMU_TYPE = ImuType.AUTODISCOVER
_DEFAULT_FUSION_TYPE = FusionType.RTQF
_DEFAULT_BUS_ID = 1
_DEFAULT_BUS_ADDRESS = 0
_DEFAULT_DECLINATION_RAD = 0.0

_MAX_BUS_ID = 0xFF
_MAX_BUS_ADDRESS = 0x7F

_CALIB_MIN_KEY = "calib/compass_min"
_CALIB_MAX_KEY = "calib/compass_max"

# --- Per-model tuning defaults -----------------------------------------------
# Register codes from RTIMULib's RTIMUSettings::setDefaults(). The fields
# listed per model are the only ones read for that model.

MODEL_DEFAULTS: Mapping[ModelId, ModelTuning] = MappingProxyType({
    ModelId.MPU9150: ModelTuning(
        gyro_accel_sample_rate=50,
        compass_sample_rate=25,
        gyro_accel_low_pass_filter=4,  # MPU9150_LPF_20
        gyro_full_scale_range=16,  # MPU9150_GYROFSR_1000
        accel_full_scale_range=16,  # MPU9150_ACCELFSR_8
    ),
    ModelId.MPU9250: ModelTuning(
        gyro_accel_sample_rate=80,
        compass_sample_rate=40,
        gyro_low_pass_filter=3,  # MPU9250_GYRO_LPF_41
        accel_low_pass_filter=3,  # MPU9250_ACCEL_LPF_41
        gyro_full_scale_range=16,  # MPU9250_GYROFSR_1000
        accel_full_scale_range=16,  # MPU9250_ACCELFSR_8
    ),
    ModelId.GD20HM303D: ModelTuning(
        gyro_sample_rate=1,  # L3GD20H_SAMPLERATE_50
        gyro_bandwidth=1,
        gyro_high_pass_filter=4,
        gyro_full_scale_range=1,  # L3GD20H_FSR_500
        accel_sample_rate=5,  # LSM303D_ACCEL_SAMPLERATE_50
        accel_full_scale_range=3,  # LSM303D_ACCEL_FSR_8
        accel_low_pass_filter=3,  # LSM303D_ACCEL_LPF_50
        compass_sample_rate=4,  # LSM303D_COMPASS_SAMPLERATE_50
        compass_full_scale_range=0,  # LSM303D_COMPASS_FSR_2
    ),
    ModelId.GD20M303DLHC: ModelTuning(
        gyro_sample_rate=0,  # L3GD20_SAMPLERATE_95
        gyro_bandwidth=1,
        gyro_high_pass_filter=4,
        gyro_full_scale_range=1,  # L3GD20_FSR_500
        accel_sample_rate=4,  # LSM303DLHC_ACCEL_SAMPLERATE_50
        accel_full_scale_range=2,  # LSM303DLHC_ACCEL_FSR_8
        compass_sample_rate=5,  # LSM303DLHC_COMPASS_SAMPLERATE_30
        compass_full_scale_range=1,  # LSM303DLHC_COMPASS_FSR_1_3
    ),
    ModelId.GD20HM303DLHC: ModelTuning(
        gyro_sample_rate=1,  # L3GD20H_SAMPLERATE_50
        gyro_bandwidth=1,
        gyro_high_pass_filter=4,
        gyro_full_scale_range=1,
        accel_sample_rate=4,
        accel_full_scale_range=2,
        compass_sample_rate=5,
        compass_full_scale_range=1,
    ),
    ModelId.LSM9DS0: ModelTuning(
        gyro_sample_rate=0,  # LSM9DS0_GYRO_SAMPLERATE_95
        gyro_bandwidth=1,
        gyro_high_pass_filter=4,
        gyro_full_scale_range=1,  # LSM9DS0_GYRO_FSR_500
        accel_sample_rate=5,  # LSM9DS0_ACCEL_SAMPLERATE_50
        accel_full_scale_range=3,  # LSM9DS0_ACCEL_FSR_8
        accel_low_pass_filter=3,  # LSM9DS0_ACCEL_LPF_50
        compass_sample_rate=4,  # LSM9DS0_COMPASS_SAMPLERATE_50
        compass_full_scale_range=0,  # LSM9DS0_COMPASS_FSR_2
    ),
})


# --- Field readers ------------------------------------------------------------


def _read_enum(params: Mapping[str, Any], key: str, enum_type: type[_E]) -> _E | None:
    """Read an enum by integer value or case-insensitive member name."""
    value = read_value(params, key)
    if isinstance(value, str):
        try:
            return enum_type[value.upper()]
        except KeyError:
            logger.debug("Ignoring parameter %s=%r: unknown name", key, value)
            return None
    number = read_int(params, key)
    if number is None:
        return None
    try:
        return enum_type(number)
    except ValueError:
        logger.debug("Ignoring parameter %s=%r: out of range", key, number)
        return None


def _read_ranged_int(
    params: Mapping[str, Any], key: str, upper: int
) -> int | None:
    value = read_int(params, key)
    if value is None:
        return None
    if not 0 <= value <= upper:
        logger.debug("Ignoring parameter %s=%r: outside 0..%d", key, value, upper)
        return None
    return value


def _or_default(value: Any, default: Any) -> Any:
    return default if value is None else value


def resolve_tuning(params: Mapping[str, Any], model: ModelId) -> ModelTuning:
    """Read the tuning table of one model, field by field.

    Only the fields the model exposes (those set in ``MODEL_DEFAULTS``) are
    read; each is independently read or defaulted.
    """
    defaults = MODEL_DEFAULTS[model].settings()
    values = {
        name: _or_default(read_int(params, f"{model.value}/{name}"), default)
        for name, default in defaults.items()
    }
    return ModelTuning(**values)


def _resolve_calibration(params: Mapping[str, Any]) -> CompassCalibration | None:
    compass_min = read_vec3(params, _CALIB_MIN_KEY)
    compass_max = read_vec3(params, _CALIB_MAX_KEY)
    if compass_min is None or compass_max is None:
        return None
    return CompassCalibration(min=compass_min, max=compass_max)


# --- Public API ---------------------------------------------------------------


def resolve(params: Mapping[str, Any]) -> DeviceConfig:
    """Build a ``DeviceConfig`` from a flat parameter namespace.

    Never raises for bad parameter values: each field is either the supplied
    value or its documented default. ``magnetic_declination`` is read in
    radians and stored in degrees. Compass calibration is enabled only when
    both ``calib/compass_min`` and ``calib/compass_max`` hold exactly three
    numbers.

    Args:
        params: Flat key/value namespace, e.g. from ``load_params``.

    Returns:
        An immutable ``DeviceConfig``.
    """
    declination_rad = _or_default(
        read_float(params, "magnetic_declination"), _DEFAULT_DECLINATION_RAD
    )
    config = DeviceConfig(
        imu_type=_or_default(_read_enum(params, "imu_type", ImuType), _DEFAULT_IMU_TYPE),
        fusion_type=_or_default(
            _read_enum(params, "fusion_type", FusionType), _DEFAULT_FUSION_TYPE
        ),
        bus_id=_or_default(_read_ranged_int(params, "i2c_bus", _MAX_BUS_ID), _DEFAULT_BUS_ID),
        bus_address=_or_default(
            _read_ranged_int(params, "i2c_slave_address", _MAX_BUS_ADDRESS),
            _DEFAULT_BUS_ADDRESS,
        ),
        compass_declination_deg=math.degrees(declination_rad),
        per_model_tuning=MappingProxyType(
            {model: resolve_tuning(params, model) for model in ModelId}
        ),
        compass_calibration=_resolve_calibration(params),
    )
    logger.info(
        "Resolved IMU config: type=%s fusion=%s bus=%d address=0x%02X calibration=%s",
        config.imu_type.name,
        config.fusion_type.name,
        config.bus_id,
        config.bus_address,
        "on" if config.compass_calibration is not None else "off",
    )
    return config


def resolve_channels(params: Mapping[str, Any]) -> ChannelConfig:
    """Build the output ``ChannelConfig`` (frame id and optional channels)."""
    defaults = ChannelConfig()
    return ChannelConfig(
        frame_id=_or_default(read_str(params, "frame_id"), defaults.frame_id),
        magnetometer=_or_default(
            read_bool(params, "publish_magnetometer"), defaults.magnetometer
        ),
        euler=_or_default(read_bool(params, "publish_euler"), defaults.euler),
    )
