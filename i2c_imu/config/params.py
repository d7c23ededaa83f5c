"""Parameter source utilities.

Parameters live in a flat, read-only key/value namespace. Keys use ``/`` to
separate namespaces, so the MPU-9250 gyro low-pass filter is read from
``mpu9250/gyro_low_pass_filter``. A parameter file may be written as nested
YAML; ``flatten_params`` turns the nesting into ``/``-joined keys.

Every ``read_*`` helper returns ``None`` when the key is absent OR its value
has the wrong type, allowing callers to treat both cases as "use the default".
"""

import logging
import math
import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from i2c_imu.config.types import Vec3

__all__ = [
    "PARAMS_ENV_VAR",
    "flatten_params",
    "load_params",
    "read_bool",
    "read_float",
    "read_int",
    "read_str",
    "read_value",
    "read_vec3",
]

logger = logging.getLogger(__name__)

PARAMS_ENV_VAR = "I2C_IMU_PARAMS"

_SEPARATOR = "/"


def flatten_params(nested: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested mappings into ``/``-joined keys.

    Sequences are leaf values and are kept as they are.

    Args:
        nested: Mapping as loaded from a YAML parameter file.
        prefix: Namespace prepended to every key.

    Returns:
        A flat dictionary suitable for the config resolver.

    Example:
        >>> flatten_params({"imu_type": 7, "mpu9250": {"gyro_low_pass_filter": 3}})
        {'imu_type': 7, 'mpu9250/gyro_low_pass_filter': 3}
    """
    flat: dict[str, Any] = {}
    for key, value in nested.items():
        name = f"{prefix}{_SEPARATOR}{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(flatten_params(value, name))
        else:
            flat[name] = value
    return flat


def load_params(path: str | os.PathLike[str] | None = None) -> dict[str, Any]:
    """Load a YAML parameter file into a flat parameter dictionary.

    When *path* is ``None`` the ``I2C_IMU_PARAMS`` environment variable is
    consulted. With neither set, an empty namespace is returned and every
    setting keeps its default.

    Raises:
        FileNotFoundError: If an explicitly named file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
    """
    if path is None:
        path = os.environ.get(PARAMS_ENV_VAR) or None
    if path is None:
        logger.info("No parameter file given; using defaults")
        return {}

    with Path(path).open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        logger.warning("Parameter file %s is not a mapping; ignoring it", path)
        return {}
    logger.info("Loaded parameters from %s", path)
    return flatten_params(raw)


def read_value(params: Mapping[str, Any], key: str) -> Any:
    """Read a raw parameter value; unreadable keys read as ``None``."""
    try:
        return params[key]
    except (KeyError, TypeError):
        return None
    except Exception:
        logger.debug("Cannot read parameter %s", key, exc_info=True)
        return None


def _mismatch(key: str, value: Any) -> None:
    logger.debug("Ignoring parameter %s=%r: unexpected type or range", key, value)


def read_int(params: Mapping[str, Any], key: str) -> int | None:
    """Read an integer parameter; booleans are not integers here.

    Example:
        >>> read_int({"i2c_bus": 1}, "i2c_bus")
        1
        >>> read_int({"i2c_bus": True}, "i2c_bus")
        None
    """
    value = read_value(params, key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        _mismatch(key, value)
        return None
    return value


def read_float(params: Mapping[str, Any], key: str) -> float | None:
    """Read a finite float parameter; integers are widened to float."""
    value = read_value(params, key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        _mismatch(key, value)
        return None
    try:
        result = float(value)
    except OverflowError:
        _mismatch(key, value)
        return None
    if not math.isfinite(result):
        _mismatch(key, value)
        return None
    return result


def read_bool(params: Mapping[str, Any], key: str) -> bool | None:
    """Read a boolean parameter; ``0``/``1`` and strings are rejected."""
    value = read_value(params, key)
    if value is None:
        return None
    if not isinstance(value, bool):
        _mismatch(key, value)
        return None
    return value


def read_str(params: Mapping[str, Any], key: str) -> str | None:
    """Read a non-empty string parameter."""
    value = read_value(params, key)
    if value is None:
        return None
    if not isinstance(value, str) or not value:
        _mismatch(key, value)
        return None
    return value


def read_vec3(params: Mapping[str, Any], key: str) -> Vec3 | None:
    """Read a sequence of exactly three numbers as a ``Vec3``.

    Strings, sequences of any other length, and sequences with a
    non-numeric component all read as absent.

    Example:
        >>> read_vec3({"calib/compass_min": [-40, -35, -50]}, "calib/compass_min")
        Vec3(x=-40.0, y=-35.0, z=-50.0)
        >>> read_vec3({"calib/compass_min": [-40, -35]}, "calib/compass_min")
        None
    """
    value = read_value(params, key)
    if value is None:
        return None
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        _mismatch(key, value)
        return None
    if len(value) != 3:
        _mismatch(key, value)
        return None
    components = []
    for component in value:
        if isinstance(component, bool) or not isinstance(component, (int, float)):
            _mismatch(key, value)
            return None
        try:
            component = float(component)
        except OverflowError:
            _mismatch(key, value)
            return None
        if not math.isfinite(component):
            _mismatch(key, value)
            return None
        components.append(component)
    return Vec3(*components)
