"""Tests for configuration loading and validation."""

import json

import pytest

from nest_guard.config import NestConfig, load_config, read_config_file, settings_from_env, validate_config
from nest_guard.errors import ConfigError

REQUIRED = {"thermostat_id": "abc", "token": "c.token"}


def write_config(tmp_path, data) -> str:
    path = tmp_path / "nest.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_defaults(self) -> None:
        """Test that unset options take their defaults."""
        config = load_config(overrides=REQUIRED, environ={})
        assert config.minutes == 10
        assert config.output == "nest.tsv"
        assert config.last_output == "nest_last.json"
        assert config.debug is False
        assert config.webhook_post == ""
        assert config.interval_seconds == 600

    def test_config_file_values(self, tmp_path) -> None:
        """Test that config file keys are applied."""
        path = write_config(
            tmp_path,
            {
                "token": "c.file",
                "thermostat_id": "file-id",
                "minutes": 5,
                "output": "out.tsv",
                "debug": True,
                "webhook_get": "https://hooks.example.com/get",
            },
        )
        config = load_config(config_file=path, environ={})
        assert config.token == "c.file"
        assert config.thermostat_id == "file-id"
        assert config.minutes == 5
        assert config.output == "out.tsv"
        assert config.debug is True
        assert config.webhook_get == "https://hooks.example.com/get"

    def test_overrides_take_precedence(self, tmp_path) -> None:
        """Test that direct overrides win over the file, which wins over the environment."""
        path = write_config(tmp_path, {"token": "c.file", "thermostat_id": "file-id", "minutes": 5})
        environ = {"NEST_TOKEN": "c.env", "NEST_MINUTES": "7", "NEST_OUTPUT": "env.tsv"}

        config = load_config(
            config_file=path,
            overrides={"thermostat_id": "cli-id", "token": None, "minutes": "2"},
            environ=environ,
        )

        assert config.thermostat_id == "cli-id"
        assert config.token == "c.file"
        assert config.minutes == 2
        assert config.output == "env.tsv"

    def test_config_file_minutes_below_one_keeps_default(self, tmp_path) -> None:
        """Test that a config file cannot set minutes below 1."""
        path = write_config(tmp_path, {**REQUIRED, "minutes": 0, "output": ""})
        config = load_config(config_file=path, environ={})
        assert config.minutes == 10
        assert config.output == "nest.tsv"

    def test_config_file_fractional_minutes_rejected(self, tmp_path) -> None:
        """Test that a non-integral interval is an error instead of being truncated."""
        path = write_config(tmp_path, {**REQUIRED, "minutes": 2.7})
        with pytest.raises(ConfigError, match="whole number"):
            load_config(config_file=path, environ={})

    def test_config_file_integral_float_minutes(self, tmp_path) -> None:
        """Test that a float with no fractional part is accepted."""
        path = write_config(tmp_path, {**REQUIRED, "minutes": 3.0})
        assert load_config(config_file=path, environ={}).minutes == 3

    def test_missing_thermostat_id(self) -> None:
        """Test that a thermostat id is required."""
        with pytest.raises(ConfigError, match="thermostat ID"):
            load_config(overrides={"token": "c.token"}, environ={})

    def test_missing_token(self) -> None:
        """Test that a token is required."""
        with pytest.raises(ConfigError, match="token"):
            load_config(overrides={"thermostat_id": "abc"}, environ={})

    @pytest.mark.parametrize("minutes", ["0", "-3"])
    def test_minutes_below_one(self, minutes) -> None:
        """Test that an override below one minute is rejected."""
        with pytest.raises(ConfigError, match="at least 1"):
            load_config(overrides={**REQUIRED, "minutes": minutes}, environ={})

    def test_minutes_not_a_number(self) -> None:
        """Test that a non-numeric interval is rejected."""
        with pytest.raises(ConfigError, match="parseable number"):
            load_config(overrides={**REQUIRED, "minutes": "ten"}, environ={})

    @pytest.mark.parametrize("key", ["webhook_post", "webhook_get"])
    def test_invalid_webhook_url(self, key) -> None:
        """Test that webhook URLs must be absolute http(s) URLs."""
        with pytest.raises(ConfigError, match="invalid webhook"):
            load_config(overrides={**REQUIRED, key: "not a url"}, environ={})

    def test_unknown_override(self) -> None:
        """Test that unknown override names are rejected."""
        with pytest.raises(ConfigError, match="Unrecognized"):
            load_config(overrides={**REQUIRED, "colour": "blue"}, environ={})

    def test_config_is_frozen(self) -> None:
        """Test that the loaded configuration cannot be mutated."""
        config = load_config(overrides=REQUIRED, environ={})
        with pytest.raises((AttributeError, TypeError)):
            config.minutes = 3


class TestReadConfigFile:
    """Tests for read_config_file function."""

    def test_missing_file(self, tmp_path) -> None:
        """Test that an unreadable file is a ConfigError."""
        with pytest.raises(ConfigError, match="Error reading config file"):
            read_config_file(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path) -> None:
        """Test that malformed JSON is a ConfigError."""
        path = tmp_path / "nest.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="not valid JSON"):
            read_config_file(str(path))

    def test_ignores_unknown_keys(self, tmp_path) -> None:
        """Test that unrelated keys are dropped."""
        path = write_config(tmp_path, {"token": "c.file", "extra": 1})
        assert read_config_file(path) == {"token": "c.file"}


class TestEnvironment:
    """Tests for settings_from_env and validate_config."""

    def test_env_variables_mapped(self) -> None:
        """Test that NEST_* variables map onto config fields."""
        settings = settings_from_env({"NEST_THERMOSTAT_ID": "abc", "NEST_DEBUG": "true", "OTHER": "x"})
        assert settings == {"thermostat_id": "abc", "debug": "true"}

    def test_validate_returns_config(self) -> None:
        """Test that a valid config is returned unchanged."""
        config = NestConfig(**REQUIRED)
        assert validate_config(config) is config
