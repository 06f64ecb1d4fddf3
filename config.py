"""
Simulation configuration: motion limits, sensor fan geometry, and tick rate.

Values come from three layers, later ones winning:

    1. dataclass defaults below
    2. an optional JSON / YAML file (``load_config(path)``)
    3. ``TESTBED_<FIELD>`` environment variables, e.g. ``TESTBED_MAX_VELOCITY=120``
"""
import json
import logging
import math
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "TESTBED_"


@dataclass
class SimConfig:
    """Motion and sensor constants for one simulation run."""

    # Motion limits (world units, seconds, radians)
    acceleration: float = 150.0
    max_velocity: float = 200.0
    angular_acceleration: float = math.pi / 4
    max_angular_velocity: float = math.pi / 2

    # Sensor fan
    ray_count: int = 10
    fov: float = math.pi / 4  # half-angle of the fan
    sensor_max_length: float = 250.0

    # Tick driver
    dt: float = 1.0 / 60.0
    trail_length: int = 600

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ValueError for settings the controller or sensors cannot run with."""
        # Braking distance/angle formulas divide by these
        if self.acceleration <= 0.0:
            raise ValueError(f"acceleration must be > 0, got {self.acceleration}")
        if self.angular_acceleration <= 0.0:
            raise ValueError(
                f"angular_acceleration must be > 0, got {self.angular_acceleration}"
            )
        if self.max_velocity < 0.0:
            raise ValueError(f"max_velocity must be >= 0, got {self.max_velocity}")
        if self.max_angular_velocity < 0.0:
            raise ValueError(
                f"max_angular_velocity must be >= 0, got {self.max_angular_velocity}"
            )
        if self.ray_count < 1:
            raise ValueError(f"ray_count must be >= 1, got {self.ray_count}")
        if self.fov < 0.0:
            raise ValueError(f"fov must be >= 0, got {self.fov}")
        if self.sensor_max_length < 0.0:
            raise ValueError(
                f"sensor_max_length must be >= 0, got {self.sensor_max_length}"
            )
        if self.dt <= 0.0:
            raise ValueError(f"dt must be > 0, got {self.dt}")
        if self.trail_length < 1:
            raise ValueError(f"trail_length must be >= 1, got {self.trail_length}")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "SimConfig":
        """Build a config from a plain mapping, coercing each value to its field type.

        Unknown keys are rejected so that typos in config files do not pass silently.
        """
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(values) - set(known))
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

        kwargs: Dict[str, Any] = {}
        for name, value in values.items():
            try:
                number = float(value)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Invalid value for {name!r}: {value!r}") from exc
            if known[name].type in (int, "int"):
                # 10.7 rays is a typo, not 10 rays
                if not number.is_integer():
                    raise ValueError(f"{name} must be a whole number, got {value!r}")
                kwargs[name] = int(number)
            else:
                kwargs[name] = number
        return cls(**kwargs)


def _read_file(path: Path) -> Dict[str, Any]:
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Cannot read config file {path}: {exc}") from exc

    if suffix == ".json":
        data = json.loads(text)
    elif suffix in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    else:
        raise ValueError(f"Unsupported config format {suffix!r} (use .json, .yaml or .yml)")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level")
    return data


def _read_env(environ: Mapping[str, str]) -> Dict[str, str]:
    """Collect TESTBED_<FIELD> overrides (TESTBED_MAX_VELOCITY -> max_velocity)."""
    names = {f.name for f in fields(SimConfig)}
    overrides = {}
    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        name = key[len(ENV_PREFIX):].lower()
        if name in names:
            overrides[name] = value
        else:
            logger.warning("Ignoring unknown config variable %s", key)
    return overrides


def load_config(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> SimConfig:
    """Load a SimConfig from defaults, an optional file, and environment overrides.

    Args:
        path:    Optional JSON or YAML file with a flat mapping of field names.
        environ: Environment to read overrides from (defaults to os.environ).

    Returns:
        A validated SimConfig.
    """
    values: Dict[str, Any] = {}
    if path is not None:
        values.update(_read_file(Path(path)))
        logger.info("Loaded config from %s", path)

    env_values = _read_env(os.environ if environ is None else environ)
    if env_values:
        logger.info("Config overrides from environment: %s", ", ".join(sorted(env_values)))
    values.update(env_values)

    return SimConfig.from_mapping(values)
