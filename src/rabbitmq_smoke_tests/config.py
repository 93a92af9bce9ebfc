"""Smoke test configuration.

The config file location comes from the CONFIG_PATH environment variable.
The file is JSON (YAML is accepted for .yaml/.yml files) and is loaded once
per run; the resulting SmokeTestConfig is immutable.
"""

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

CONFIG_PATH_ENV = "CONFIG_PATH"

# Default values
DEFAULT_TIMEOUT = 25.0
DEFAULT_START_TIMEOUT = 300.0
DEFAULT_RETRY_INTERVAL = 4.0
DEFAULT_APP_MEMORY = "256M"
DEFAULT_APP_STACK = "cflinuxfs2"
DEFAULT_ASSETS_PATH = "../assets"
DEFAULT_NAME_PREFIX = "rabbitmq-smoke-test"

REQUIRED_KEYS = ("api", "apps_domain", "service_name", "plan_names")
FLOAT_KEYS = ("timeout_scale", "timeout_seconds", "start_timeout_seconds", "retry_interval_seconds")
BOOL_KEYS = ("skip_ssl_validation", "rabbitmq_skip_ssl", "test_stomp", "test_mqtt")
STR_KEYS = (
    "api",
    "apps_domain",
    "service_name",
    "admin_user",
    "admin_password",
    "app_memory",
    "app_stack",
    "name_prefix",
)


@dataclass(frozen=True)
class SmokeTestConfig:
    """Smoke test configuration."""

    api: str
    apps_domain: str
    service_name: str
    plan_names: tuple[str, ...]
    admin_user: str = ""
    admin_password: str = ""
    skip_ssl_validation: bool = False
    rabbitmq_skip_ssl: bool = False
    test_stomp: bool = False
    test_mqtt: bool = False
    timeout_scale: float = 1.0
    timeout_seconds: float = DEFAULT_TIMEOUT
    start_timeout_seconds: float = DEFAULT_START_TIMEOUT
    retry_interval_seconds: float = DEFAULT_RETRY_INTERVAL
    app_memory: str = DEFAULT_APP_MEMORY
    app_stack: str = DEFAULT_APP_STACK
    assets_path: Path = field(default_factory=lambda: Path(DEFAULT_ASSETS_PATH))
    name_prefix: str = DEFAULT_NAME_PREFIX

    def scaled_timeout(self, seconds: float) -> float:
        """Scale a base duration by the configured timeout factor."""
        return seconds * self.timeout_scale

    @property
    def timeout(self) -> float:
        """Scaled timeout for ordinary commands and HTTP assertions."""
        return self.scaled_timeout(self.timeout_seconds)

    @property
    def start_timeout(self) -> float:
        """Scaled timeout for set-env and start."""
        return self.scaled_timeout(self.start_timeout_seconds)

    def app_uri(self, app_name: str) -> str:
        """Public URI of a pushed application."""
        return f"https://{app_name}.{self.apps_domain}"


def get_config_path() -> Path:
    """Get the config file path from the environment.

    Returns:
        Path named by CONFIG_PATH

    Raises:
        ConfigError: If CONFIG_PATH is not set
    """
    value = os.environ.get(CONFIG_PATH_ENV)
    if not value:
        raise ConfigError(message=f"{CONFIG_PATH_ENV} is not set")
    return Path(value)


def _read_file(path: Path) -> dict[str, Any]:
    try:
        with path.open() as f:
            if path.suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except OSError as e:
        raise ConfigError(message=f"Cannot read config file {path}: {e}", path=str(path)) from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(message=f"Malformed config file {path}: {e}", path=str(path)) from e

    if not isinstance(data, dict):
        raise ConfigError(message=f"Config file {path} must contain an object", path=str(path))
    return data


def config_from_dict(data: dict[str, Any], source: str | None = None) -> SmokeTestConfig:
    """Build a SmokeTestConfig from decoded config data.

    Unknown keys are ignored so one file can be shared with other suites.

    Args:
        data: Decoded config mapping
        source: Where the data came from, for error messages

    Returns:
        SmokeTestConfig

    Raises:
        ConfigError: If required keys are missing or values have the wrong type
    """
    missing = [key for key in REQUIRED_KEYS if key not in data]
    if missing:
        raise ConfigError(
            message=f"Missing required config keys: {', '.join(missing)}",
            path=source,
        )

    plan_names = data["plan_names"]
    if not isinstance(plan_names, list) or not all(isinstance(p, str) for p in plan_names):
        raise ConfigError(message="plan_names must be a list of strings", path=source)

    known = {f.name for f in fields(SmokeTestConfig)}
    values = {key: value for key, value in data.items() if key in known}
    values["plan_names"] = tuple(plan_names)

    try:
        for key in STR_KEYS:
            if key in values and not isinstance(values[key], str):
                raise TypeError(f"{key} must be a string")
        for key in FLOAT_KEYS:
            if key in values:
                if isinstance(values[key], bool):
                    raise TypeError(f"{key} must be a number")
                values[key] = float(values[key])
        for key in BOOL_KEYS:
            if key in values and not isinstance(values[key], bool):
                raise ValueError(f"{key} must be a boolean")
        if "assets_path" in values:
            values["assets_path"] = Path(values["assets_path"])
    except (TypeError, ValueError) as e:
        raise ConfigError(message=f"Invalid config value: {e}", path=source) from e

    if values.get("timeout_scale", 1.0) <= 0:
        raise ConfigError(message="timeout_scale must be positive", path=source)

    return SmokeTestConfig(**values)


def load_config(path: str | Path | None = None) -> SmokeTestConfig:
    """Load the smoke test configuration.

    Args:
        path: Config file path. Defaults to the CONFIG_PATH environment variable.

    Returns:
        SmokeTestConfig

    Raises:
        ConfigError: If the file cannot be found, read or decoded
    """
    config_path = Path(path) if path else get_config_path()
    data = _read_file(config_path)
    return config_from_dict(data, source=str(config_path))
