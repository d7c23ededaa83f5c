"""Tests for the RTIMULib driver adapter and settings rendering."""

import sys
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from i2c_imu.config import ModelId, Vec3, resolve
from i2c_imu.device import (
    DeviceOpenError,
    Quaternion,
    RawSample,
    RTIMUDriver,
    open_device,
    render_settings,
)
from i2c_imu.device.driver import _parse_imu_data, settings_entries

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_imu_data(**overrides) -> dict:
    """Build a dictionary shaped like ``RTIMU.getIMUData()``."""
    data = {
        "timestamp": 1_700_000_000_000_000,
        "fusionQPose": (0.5, 0.5, -0.5, 0.5),
        "fusionPose": (0.1, -0.2, 1.5),
        "gyro": (0.01, 0.02, -0.03),
        "accel": (0.0, 0.1, 0.98),
        "compass": (21.0, -4.0, 39.5),
        "compassValid": True,
    }
    data.update(overrides)
    return data


@pytest.fixture
def fake_rtimu(monkeypatch):
    """Install a fake ``RTIMU`` module exposing ``Settings`` and ``RTIMU``."""
    imu = MagicMock()
    imu.IMUName.return_value = "MPU-9250"
    module = SimpleNamespace(
        Settings=MagicMock(name="Settings"),
        RTIMU=MagicMock(name="RTIMU", return_value=imu),
    )
    monkeypatch.setitem(sys.modules, "RTIMU", module)
    return SimpleNamespace(module=module, imu=imu)


# ---------------------------------------------------------------------------
# _parse_imu_data
# ---------------------------------------------------------------------------


class TestParseImuData:
    """Tests for the RTIMULib dictionary to RawSample conversion."""

    def test_returns_raw_sample(self):
        assert isinstance(_parse_imu_data(_make_imu_data()), RawSample)

    def test_quaternion_scalar_comes_first(self):
        sample = _parse_imu_data(_make_imu_data())
        assert sample.orientation == Quaternion(w=0.5, x=0.5, y=-0.5, z=0.5)

    def test_vectors_are_copied_unchanged(self):
        sample = _parse_imu_data(_make_imu_data())
        assert sample.angular_velocity == Vec3(0.01, 0.02, -0.03)
        assert sample.linear_acceleration == Vec3(0.0, 0.1, 0.98)
        assert sample.compass == Vec3(21.0, -4.0, 39.5)
        assert sample.euler == Vec3(0.1, -0.2, 1.5)

    def test_compass_validity_is_preserved(self):
        assert _parse_imu_data(_make_imu_data(compassValid=False)).compass_valid is False

    def test_missing_optional_fields(self):
        data = _make_imu_data()
        for key in ("compass", "compassValid", "fusionPose", "timestamp"):
            del data[key]
        sample = _parse_imu_data(data)
        assert sample.compass is None
        assert sample.compass_valid is False
        assert sample.euler is None
        assert sample.timestamp_us is None

    def test_timestamp_is_preserved(self):
        assert _parse_imu_data(_make_imu_data()).timestamp_us == 1_700_000_000_000_000

    def test_missing_orientation_raises_key_error(self):
        data = _make_imu_data()
        del data["fusionQPose"]
        with pytest.raises(KeyError):
            _parse_imu_data(data)

    def test_wrong_vector_length_raises_value_error(self):
        with pytest.raises(ValueError):
            _parse_imu_data(_make_imu_data(gyro=(0.0, 0.0)))


# ---------------------------------------------------------------------------
# RTIMUDriver
# ---------------------------------------------------------------------------


class TestRTIMUDriver:
    """Tests for the adapter's delegation to the RTIMULib object."""

    def test_init_delegates(self):
        imu = MagicMock()
        imu.IMUInit.return_value = False
        assert RTIMUDriver(imu).init() is False
        imu.IMUInit.assert_called_once_with()

    def test_poll_interval(self):
        imu = MagicMock()
        imu.IMUGetPollInterval.return_value = 4
        assert RTIMUDriver(imu).poll_interval_ms() == 4

    def test_read_available(self):
        imu = MagicMock()
        imu.IMURead.side_effect = [True, False]
        driver = RTIMUDriver(imu)
        assert driver.read_available() is True
        assert driver.read_available() is False

    def test_latest_sample_converts_imu_data(self):
        imu = MagicMock()
        imu.getIMUData.return_value = _make_imu_data()
        sample = RTIMUDriver(imu).latest_sample()
        assert sample.linear_acceleration == Vec3(0.0, 0.1, 0.98)


# ---------------------------------------------------------------------------
# Settings rendering
# ---------------------------------------------------------------------------


class TestRenderSettings:
    """Tests for the RTIMULib .ini rendering."""

    def test_general_entries(self):
        entries = settings_entries(
            resolve({"imu_type": 7, "i2c_bus": 2, "i2c_slave_address": 0x68})
        )
        assert entries["IMUType"] == 7
        assert entries["FusionType"] == 2
        assert entries["I2CBus"] == 2
        assert entries["I2CSlaveAddress"] == 0x68

    def test_declination_is_written_in_degrees(self):
        entries = settings_entries(resolve({"magnetic_declination": 0.7853981634}))
        assert entries["compassAdjDeclination"] == pytest.approx(45.0)

    def test_mpu_keys_use_upper_case_fsr(self):
        entries = settings_entries(resolve({"mpu9250/gyro_full_scale_range": 8}))
        assert entries["MPU9250GyroFSR"] == 8
        assert "MPU9250GyroFsr" not in entries

    def test_st_keys_use_mixed_case_fsr(self):
        entries = settings_entries(resolve({}))
        assert entries["LSM9DS0GyroFsr"] == 1
        assert entries["GD20HM303DGyroBW"] == 1

    def test_every_model_is_rendered(self):
        entries = settings_entries(resolve({}))
        for model in ModelId:
            assert any(key.startswith(model.value.upper()) for key in entries)

    def test_calibration_disabled(self):
        entries = settings_entries(resolve({}))
        assert entries["CompassCalValid"] is False
        assert "CompassCalMinX" not in entries

    def test_calibration_enabled(self):
        config = resolve({"calib/compass_min": [-1, -2, -3], "calib/compass_max": [4, 5, 6]})
        entries = settings_entries(config)
        assert entries["CompassCalValid"] is True
        assert (entries["CompassCalMinX"], entries["CompassCalMinY"], entries["CompassCalMinZ"]) == (
            -1.0,
            -2.0,
            -3.0,
        )
        assert entries["CompassCalMaxZ"] == 6.0

    def test_rendered_lines_are_key_value(self):
        text = render_settings(resolve({"imu_type": 7}))
        lines = text.splitlines()
        assert lines[0] == "IMUType=7"
        assert "CompassCalValid=false" in lines
        assert "BusIsI2C=true" in lines
        assert text.endswith("\n")


# ---------------------------------------------------------------------------
# open_device
# ---------------------------------------------------------------------------


class TestOpenDevice:
    """Tests for device creation through the RTIMU binding."""

    def test_writes_settings_file(self, fake_rtimu, tmp_path):
        config = resolve({"imu_type": 7})
        open_device(config, tmp_path)
        assert (tmp_path / "RTIMULib.ini").read_text(encoding="utf-8") == render_settings(config)

    def test_settings_are_loaded_without_ini_suffix(self, fake_rtimu, tmp_path):
        open_device(resolve({}), tmp_path)
        fake_rtimu.module.Settings.assert_called_once_with(str(tmp_path / "RTIMULib"))

    def test_returns_driver_over_created_imu(self, fake_rtimu, tmp_path):
        driver = open_device(resolve({}), tmp_path)
        fake_rtimu.imu.IMUInit.return_value = True
        assert isinstance(driver, RTIMUDriver)
        assert driver.init() is True

    def test_missing_binding_raises_open_error(self, monkeypatch, tmp_path):
        monkeypatch.setitem(sys.modules, "RTIMU", None)
        with pytest.raises(DeviceOpenError, match="RTIMU"):
            open_device(resolve({}), tmp_path)

    def test_no_imu_raises_open_error(self, fake_rtimu, tmp_path):
        fake_rtimu.module.RTIMU.return_value = None
        with pytest.raises(DeviceOpenError, match="bus 1"):
            open_device(resolve({}), tmp_path)

    def test_binding_failure_raises_open_error(self, fake_rtimu, tmp_path):
        fake_rtimu.module.RTIMU.side_effect = RuntimeError("no device found")
        with pytest.raises(DeviceOpenError, match="no device found") as excinfo:
            open_device(resolve({}), tmp_path)
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_settings_failure_raises_open_error(self, fake_rtimu, tmp_path):
        fake_rtimu.module.Settings.side_effect = OSError("bad settings")
        with pytest.raises(DeviceOpenError, match="bus 1"):
            open_device(resolve({}), tmp_path)

    def test_unwritable_settings_dir_raises_open_error(self, fake_rtimu, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        with pytest.raises(DeviceOpenError, match="settings"):
            open_device(resolve({}), blocker / "sub")
