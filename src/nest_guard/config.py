"""
Configuration module for Nest-Guard.

Settings are resolved from, in increasing order of precedence: built-in
defaults, environment variables (optionally loaded from a `.env` file), a JSON
config file, and direct overrides supplied on the command line.
"""

import json
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

from .errors import ConfigError

# Nest API configuration
NEST_API_BASE_URL = "https://developer-api.nest.com"
NEST_MAX_REDIRECTS = 10
NEST_SETTLE_SECONDS = 60

DEFAULT_MINUTES = 10
DEFAULT_OUTPUT = "nest.tsv"
DEFAULT_LAST_OUTPUT = "nest_last.json"

# Config file keys mapped to NestConfig fields
CONFIG_FILE_KEYS = {
    "token": "token",
    "thermostat_id": "thermostat_id",
    "minutes": "minutes",
    "output": "output",
    "last_output": "last_output",
    "debug": "debug",
    "webhook_post": "webhook_post",
    "webhook_get": "webhook_get",
}

# Environment variables mapped to NestConfig fields
ENV_KEYS = {
    "NEST_TOKEN": "token",
    "NEST_THERMOSTAT_ID": "thermostat_id",
    "NEST_MINUTES": "minutes",
    "NEST_OUTPUT": "output",
    "NEST_LAST_OUTPUT": "last_output",
    "NEST_DEBUG": "debug",
    "NEST_WEBHOOK_POST": "webhook_post",
    "NEST_WEBHOOK_GET": "webhook_get",
}


@dataclass(frozen=True)
class NestConfig:
    """Immutable per-run settings."""

    thermostat_id: str = ""
    token: str = ""
    minutes: int = DEFAULT_MINUTES
    output: str = DEFAULT_OUTPUT
    last_output: str = DEFAULT_LAST_OUTPUT
    debug: bool = False
    webhook_post: str = ""
    webhook_get: str = ""

    @property
    def interval_seconds(self) -> int:
        return self.minutes * 60


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _parse_minutes(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"minutes parameter is not a parseable number: {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ConfigError(f"minutes parameter must be a whole number: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"minutes parameter is not a parseable number: {value!r}")


def _coerce(settings: Dict[str, Any]) -> Dict[str, Any]:
    coerced = {}
    for name, value in settings.items():
        if value is None:
            continue
        if name == "minutes":
            coerced[name] = _parse_minutes(value)
        elif name == "debug":
            coerced[name] = _parse_bool(value)
        else:
            coerced[name] = str(value).strip()
    return coerced


def settings_from_env(environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """
    Collect settings from environment variables.

    Args:
        environ: Mapping to read from; defaults to `os.environ` after loading `.env`.

    Returns:
        Dict of NestConfig field names to raw values.
    """
    if environ is None:
        load_dotenv()
        environ = dict(os.environ)
    return {field: environ[key] for key, field in ENV_KEYS.items() if environ.get(key)}


def read_config_file(file_name: str) -> Dict[str, Any]:
    """
    Read a JSON config file.

    A `minutes` value below 1 or a blank output path is dropped so the
    lower-precedence value is kept.

    Args:
        file_name: Path of the JSON config file.

    Returns:
        Dict of NestConfig field names to raw values.
    """
    try:
        with open(file_name, "r", encoding="utf-8") as config_file:
            data = json.load(config_file)
    except OSError as e:
        raise ConfigError(f"Error reading config file {file_name}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file {file_name} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {file_name} must contain a JSON object")

    settings = {CONFIG_FILE_KEYS[key]: value for key, value in data.items() if key in CONFIG_FILE_KEYS}
    minutes = settings.get("minutes")
    if minutes is not None and not isinstance(minutes, bool) and isinstance(minutes, (int, float)) and minutes < 1:
        del settings["minutes"]
    for key in ("output", "last_output"):
        if key in settings and not settings[key]:
            del settings[key]
    return settings


def _is_valid_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_config(config: NestConfig) -> NestConfig:
    """
    Validate that all required configuration parameters are set.

    Raises:
        ConfigError: If a required setting is missing or a value is invalid.

    Returns:
        The same config, for chaining.
    """
    if not config.thermostat_id:
        raise ConfigError("Must provide a thermostat ID")
    if not config.token:
        raise ConfigError("Must provide a token")
    if config.minutes < 1:
        raise ConfigError("minutes parameter must be at least 1")
    if not config.output:
        raise ConfigError("Must provide an output file")
    if config.webhook_post and not _is_valid_url(config.webhook_post):
        raise ConfigError(f"invalid webhook-post url: {config.webhook_post}")
    if config.webhook_get and not _is_valid_url(config.webhook_get):
        raise ConfigError(f"invalid webhook-get url: {config.webhook_get}")
    return config


def load_config(
    config_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    environ: Optional[Dict[str, str]] = None,
) -> NestConfig:
    """
    Build and validate the run configuration.

    Args:
        config_file: Optional path of a JSON config file.
        overrides: Direct settings (e.g. from the command line); None values are ignored.
        environ: Optional environment mapping, mainly for tests.

    Returns:
        A validated NestConfig.
    """
    config = replace(NestConfig(), **_coerce(settings_from_env(environ)))
    if config_file:
        config = replace(config, **_coerce(read_config_file(config_file)))
    if overrides:
        known = {f.name for f in fields(NestConfig)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigError(f"Unrecognized settings: {', '.join(sorted(unknown))}")
        config = replace(config, **_coerce(overrides))
    return validate_config(config)
