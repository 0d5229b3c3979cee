"""
Configuration Dataclasses

Type-safe configuration structures for the control client.
Loaded once at startup from a YAML file plus environment overrides,
then validated before the control loop starts.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml

from .exceptions import ConfigError

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_LOG_FORMATS = ("text", "json")

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "THERMOCTL_BASE_URL": ("api", "base_url"),
    "THERMOCTL_API_KEY": ("api", "api_key"),
    "THERMOCTL_LOG_LEVEL": ("logging", "level"),
    "THERMOCTL_LOG_FORMAT": ("logging", "format"),
}


@dataclass
class ApiSettings:
    """Remote thermal API connection settings"""
    base_url: str = "https://localhost:7021/"
    api_key: str = ""
    timeout_s: float = 10.0
    verify_tls: bool = True


@dataclass
class ControlSettings:
    """Hysteresis policy and polling settings"""
    sensor_id: int = 1
    target_high: float = 19.0  # Stop heating at or above (°C)
    target_low: float = 18.0   # Stop cooling at or below (°C)
    poll_interval_s: float = 2.0
    heater_ids: list[int] = field(default_factory=lambda: [1, 2, 3])
    fan_ids: list[int] = field(default_factory=lambda: [1, 2, 3])
    max_heater_level: int = 5


@dataclass
class LoggingSettings:
    """Console logging configuration"""
    level: str = "INFO"
    format: str = "text"  # text, json


@dataclass
class HealthSettings:
    """Status HTTP endpoint configuration"""
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 8090


@dataclass
class ClientConfig:
    """Complete client configuration"""
    api: ApiSettings = field(default_factory=ApiSettings)
    control: ControlSettings = field(default_factory=ControlSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    health: HealthSettings = field(default_factory=HealthSettings)

    def validate(self) -> None:
        """Raise ConfigError listing every problem, if any"""
        errors = validate_config(self)
        if errors:
            raise ConfigError("; ".join(errors), errors)


def validate_config(config: ClientConfig) -> list[str]:
    """
    Validate the configuration.

    Args:
        config: Loaded client configuration

    Returns:
        List of error messages (empty when valid)
    """
    errors = []

    # API settings
    parsed = urlparse(config.api.base_url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        errors.append(f"api.base_url must be an http(s) URL, got {config.api.base_url!r}")
    if not config.api.api_key:
        errors.append("api.api_key is required (or set THERMOCTL_API_KEY)")
    if config.api.timeout_s <= 0:
        errors.append("api.timeout_s must be positive")

    # Control settings
    control = config.control
    if control.target_high <= control.target_low:
        errors.append(
            f"control.target_high ({control.target_high}) must exceed "
            f"control.target_low ({control.target_low})"
        )
    if control.poll_interval_s <= 0:
        errors.append("control.poll_interval_s must be positive")
    if not control.heater_ids:
        errors.append("control.heater_ids must list at least one heater")
    if not control.fan_ids:
        errors.append("control.fan_ids must list at least one fan")
    if control.max_heater_level < 1:
        errors.append("control.max_heater_level must be at least 1")

    # Logging
    if config.logging.level.upper() not in VALID_LOG_LEVELS:
        errors.append(f"logging.level must be one of {', '.join(VALID_LOG_LEVELS)}")
    if config.logging.format.lower() not in VALID_LOG_FORMATS:
        errors.append(f"logging.format must be one of {', '.join(VALID_LOG_FORMATS)}")

    # Health endpoint
    if not 0 < config.health.port < 65536:
        errors.append("health.port must be between 1 and 65535")

    return errors


def apply_env_overrides(data: dict, environ: dict | None = None) -> dict:
    """Overlay THERMOCTL_* environment variables onto raw config data"""
    environ = os.environ if environ is None else environ
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            data.setdefault(section, {})[key] = value
    return data


def _section(data: dict, name: str) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Section '{name}' must be a mapping")
    return section


def load_client_config(data: dict[str, Any]) -> ClientConfig:
    """Load ClientConfig from dictionary (e.g., parsed YAML)"""
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")

    api_data = _section(data, "api")
    control_data = _section(data, "control")
    logging_data = _section(data, "logging")
    health_data = _section(data, "health")

    try:
        api = ApiSettings(
            base_url=str(api_data.get("base_url", ApiSettings.base_url)),
            api_key=str(api_data.get("api_key") or ""),
            timeout_s=float(api_data.get("timeout_s", 10.0)),
            verify_tls=bool(api_data.get("verify_tls", True)),
        )

        control = ControlSettings(
            sensor_id=int(control_data.get("sensor_id", 1)),
            target_high=float(control_data.get("target_high", 19.0)),
            target_low=float(control_data.get("target_low", 18.0)),
            poll_interval_s=float(control_data.get("poll_interval_s", 2.0)),
            heater_ids=[int(i) for i in control_data.get("heater_ids", [1, 2, 3])],
            fan_ids=[int(i) for i in control_data.get("fan_ids", [1, 2, 3])],
            max_heater_level=int(control_data.get("max_heater_level", 5)),
        )

        logging_settings = LoggingSettings(
            level=str(logging_data.get("level", "INFO")),
            format=str(logging_data.get("format", "text")),
        )

        health = HealthSettings(
            enabled=bool(health_data.get("enabled", False)),
            host=str(health_data.get("host", "127.0.0.1")),
            port=int(health_data.get("port", 8090)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value: {e}")

    return ClientConfig(
        api=api,
        control=control,
        logging=logging_settings,
        health=health,
    )


def load_config(config_path: str | Path, environ: dict | None = None) -> ClientConfig:
    """
    Load and validate configuration from a YAML file.

    A missing file is not an error: defaults plus environment overrides
    are used, so the client can be configured from the environment alone.

    Args:
        config_path: Path to configuration file
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated ClientConfig

    Raises:
        ConfigError: If the file cannot be parsed or the result is invalid
    """
    path = Path(config_path)
    data: dict = {}

    if path.exists():
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Cannot parse {path}: {e}")
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")

    config = load_client_config(apply_env_overrides(data, environ))
    config.validate()
    return config
