"""Configuration types for the IMU device and its output channels.

Design Decisions:
    1. Closed model set: every chip RTIMULib can be tuned for is a member of
       ``ModelId``. Its value doubles as the parameter namespace, so
       ``mpu9250/gyro_low_pass_filter`` belongs to ``ModelId.MPU9250``.

    2. One tuning record for all chips: physically different chips expose
       different registers, so ``ModelTuning`` carries the union of fields and
       leaves the ones a chip lacks as ``None``. The values are the chip's own
       register enumerations, not physical units.

    3. Calibration is all-or-nothing: ``DeviceConfig.compass_calibration`` is
       either a complete ``CompassCalibration`` or ``None``. There is no
       separate "valid" flag that could disagree with the bounds.
"""

import enum
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, fields


class ImuType(enum.IntEnum):
    """RTIMULib IMU type selector (``imu_type`` parameter)."""

    AUTODISCOVER = 0
    NULL = 1
    MPU9150 = 2
    GD20HM303D = 3
    GD20M303DLHC = 4
    LSM9DS0 = 5
    LSM9DS1 = 6
    MPU9250 = 7
    GD20HM303DLHC = 8
    BMX055 = 9
    BNO055 = 10


class FusionType(enum.IntEnum):
    """RTIMULib fusion algorithm selector (``fusion_type`` parameter)."""

    NULL = 0
    KALMANSTATE4 = 1
    RTQF = 2


class ModelId(str, enum.Enum):
    """Device models with a per-model tuning table."""

    MPU9150 = "mpu9150"
    MPU9250 = "mpu9250"
    GD20HM303D = "GD20HM303D"
    GD20M303DLHC = "GD20M303DLHC"
    GD20HM303DLHC = "GD20HM303DLHC"
    LSM9DS0 = "LSM9DS0"


@dataclass(frozen=True)
class Vec3:
    """A three-component vector.

    Attributes:
        x: First component.
        y: Second component.
        z: Third component.
    """

    x: float
    y: float
    z: float

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z


@dataclass(frozen=True)
class ModelTuning:
    """Register-level tuning for one device model.

    Every field holds the chip's own register enumeration value (for example
    ``MPU9250_GYRO_LPF_41`` is ``3``). Fields the chip does not expose are
    ``None`` and are never sent to the driver.

    Attributes:
        gyro_accel_sample_rate: Shared gyro/accel rate in Hz (MPU chips).
        gyro_sample_rate: Gyroscope output data rate code.
        accel_sample_rate: Accelerometer output data rate code.
        compass_sample_rate: Magnetometer rate (Hz on MPU chips, code otherwise).

        accel_full_scale_range: Accelerometer FSR code.
        gyro_full_scale_range: Gyroscope FSR code.
        compass_full_scale_range: Magnetometer FSR code.

        gyro_accel_low_pass_filter: Shared gyro/accel LPF code (MPU9150).
        accel_low_pass_filter: Accelerometer LPF code.
        gyro_low_pass_filter: Gyroscope LPF code.
        gyro_high_pass_filter: Gyroscope HPF code.
        gyro_bandwidth: Gyroscope bandwidth code.
    """

    gyro_accel_sample_rate: int | None = None
    gyro_sample_rate: int | None = None
    accel_sample_rate: int | None = None
    compass_sample_rate: int | None = None

    accel_full_scale_range: int | None = None
    gyro_full_scale_range: int | None = None
    compass_full_scale_range: int | None = None

    gyro_accel_low_pass_filter: int | None = None
    accel_low_pass_filter: int | None = None
    gyro_low_pass_filter: int | None = None
    gyro_high_pass_filter: int | None = None
    gyro_bandwidth: int | None = None

    def settings(self) -> dict[str, int]:
        """Return the fields this model exposes, keyed by parameter name."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                result[f.name] = value
        return result


@dataclass(frozen=True)
class CompassCalibration:
    """Hard-iron compass calibration bounds.

    The axis order (x, y, z) of the supplied sequences is assumed.

    Attributes:
        min: Minimum raw reading per axis.
        max: Maximum raw reading per axis.
    """

    min: Vec3
    max: Vec3


@dataclass(frozen=True)
class DeviceConfig:
    """Validated, device-specific configuration handed to the driver.

    Attributes:
        imu_type: Model selector; ``AUTODISCOVER`` probes the bus.
        fusion_type: Fusion algorithm run by the driver.

        bus_id: I2C bus number (``/dev/i2c-<bus_id>``).
        bus_address: 7-bit device address; ``0`` lets the driver probe.

        compass_declination_deg: Magnetic declination in degrees.

        per_model_tuning: Tuning table for every ``ModelId``. Only the entry
            matching ``imu_type`` is used by the driver.
        compass_calibration: Calibration bounds, or ``None`` when disabled.
    """

    imu_type: ImuType
    fusion_type: FusionType
    bus_id: int
    bus_address: int
    compass_declination_deg: float
    per_model_tuning: Mapping[ModelId, ModelTuning]
    compass_calibration: CompassCalibration | None = None

    # The tuning mapping is not hashable, so neither is the config
    __hash__ = None  # type: ignore[assignment]

    def tuning_for(self, model: ModelId) -> ModelTuning:
        """Return the tuning table of *model*."""
        return self.per_model_tuning[model]


@dataclass(frozen=True)
class ChannelConfig:
    """Output channel settings for the acquisition loop.

    Attributes:
        frame_id: Frame identifier attached to every output record.
        magnetometer: Publish magnetometer records on the ``mag`` topic.
        euler: Publish Euler-angle records on the ``euler`` topic.
    """

    frame_id: str = "imu_link"
    magnetometer: bool = False
    euler: bool = False
