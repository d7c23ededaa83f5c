"""Pytest fixtures for server module testing."""

import queue
import threading
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest

from i2c_imu.config.params import PARAMS_ENV_VAR
from i2c_imu.device.types import RawSample

_PARAMS_YAML = """\
frame_id: test_imu
publish_magnetometer: true
publish_euler: true
"""


class ControlledDriver:
    """Driver fed by the test thread through a queue."""

    def __init__(self) -> None:
        self.message_queue: queue.Queue[RawSample] = queue.Queue()
        self.init_result = True
        self._current: RawSample | None = None

    def init(self) -> bool:
        return self.init_result

    def poll_interval_ms(self) -> int:
        return 1

    def read_available(self) -> bool:
        try:
            self._current = self.message_queue.get_nowait()
        except queue.Empty:
            return False
        return True

    def latest_sample(self) -> RawSample:
        assert self._current is not None
        return self._current


@pytest.fixture
def params_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "params.yaml"
    path.write_text(_PARAMS_YAML, encoding="utf-8")
    monkeypatch.setenv(PARAMS_ENV_VAR, str(path))
    return path


@pytest.fixture(autouse=True)
def driver(params_file: Path) -> Iterator[ControlledDriver]:
    controller = ControlledDriver()
    with patch("server.main.open_device", return_value=controller):
        yield controller


@pytest.fixture(autouse=True)
def shutdown_request() -> Iterator[threading.Event]:
    """Record shutdown requests instead of signalling the test process."""
    requested = threading.Event()
    with patch("server.main._request_shutdown", side_effect=requested.set):
        yield requested
