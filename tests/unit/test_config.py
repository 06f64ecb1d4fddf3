"""
Unit tests for SimConfig validation and loading.
"""
import dataclasses
import json
import logging
import math

import pytest

from config import SimConfig, load_config


class TestSimConfigValidation:
    def test_defaults_are_valid(self):
        config = SimConfig()
        assert config.acceleration == 150.0
        assert config.max_velocity == 200.0
        assert config.angular_acceleration == math.pi / 4
        assert config.max_angular_velocity == math.pi / 2
        assert config.ray_count == 10
        assert config.fov == math.pi / 4

    @pytest.mark.parametrize(
        "field, value",
        [
            ("acceleration", 0.0),
            ("acceleration", -1.0),
            ("angular_acceleration", 0.0),
            ("max_velocity", -1.0),
            ("max_angular_velocity", -0.1),
            ("ray_count", 0),
            ("fov", -0.5),
            ("sensor_max_length", -1.0),
            ("dt", 0.0),
            ("trail_length", 0),
        ],
    )
    def test_invalid_values_are_rejected(self, field, value):
        with pytest.raises(ValueError, match=field):
            SimConfig(**{field: value})

    def test_zero_speed_limits_are_allowed(self):
        config = SimConfig(max_velocity=0.0, max_angular_velocity=0.0)
        assert config.max_velocity == 0.0


class TestFromMapping:
    def test_values_are_coerced_to_field_types(self):
        config = SimConfig.from_mapping({"ray_count": "12", "max_velocity": "99.5"})
        assert config.ray_count == 12
        assert isinstance(config.ray_count, int)
        assert config.max_velocity == 99.5

    def test_unknown_keys_are_rejected(self):
        with pytest.raises(ValueError, match="max_speed"):
            SimConfig.from_mapping({"max_speed": 10})

    def test_non_numeric_value_is_rejected(self):
        with pytest.raises(ValueError, match="acceleration"):
            SimConfig.from_mapping({"acceleration": "fast"})

    def test_round_trip_through_dict(self):
        config = SimConfig(ray_count=5)
        assert SimConfig.from_mapping(dataclasses.asdict(config)) == config

    def test_fractional_int_field_is_rejected(self):
        with pytest.raises(ValueError, match="ray_count"):
            SimConfig.from_mapping({"ray_count": 10.7})
        with pytest.raises(ValueError, match="trail_length"):
            SimConfig.from_mapping({"trail_length": "99.5"})

    def test_whole_float_int_field_is_accepted(self):
        config = SimConfig.from_mapping({"ray_count": 12.0, "trail_length": "300"})
        assert config.ray_count == 12
        assert isinstance(config.ray_count, int)
        assert config.trail_length == 300


class TestLoadConfig:
    def test_no_file_no_env_gives_defaults(self):
        assert load_config(environ={}) == SimConfig()

    def test_json_file(self, tmp_path):
        path = tmp_path / "testbed.json"
        path.write_text(json.dumps({"max_velocity": 120, "ray_count": 7}))

        config = load_config(path, environ={})

        assert config.max_velocity == 120.0
        assert config.ray_count == 7

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "testbed.yaml"
        path.write_text("acceleration: 80\nsensor_max_length: 300\n")

        config = load_config(path, environ={})

        assert config.acceleration == 80.0
        assert config.sensor_max_length == 300.0

    def test_empty_yaml_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert load_config(path, environ={}) == SimConfig()

    def test_environment_overrides_file(self, tmp_path):
        path = tmp_path / "testbed.json"
        path.write_text(json.dumps({"max_velocity": 120}))

        config = load_config(path, environ={"TESTBED_MAX_VELOCITY": "50", "HOME": "/root"})

        assert config.max_velocity == 50.0

    def test_unknown_environment_variable_is_ignored_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="config"):
            config = load_config(environ={"TESTBED_WARP_DRIVE": "1"})
        assert config == SimConfig()
        assert "TESTBED_WARP_DRIVE" in caplog.text

    def test_invalid_value_from_file_is_rejected(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"angular_acceleration": 0}))
        with pytest.raises(ValueError, match="angular_acceleration"):
            load_config(path, environ={})

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "testbed.toml"
        path.write_text("max_velocity = 1\n")
        with pytest.raises(ValueError, match="Unsupported"):
            load_config(path, environ={})

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="Cannot read"):
            load_config(tmp_path / "missing.json", environ={})

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path, environ={})
