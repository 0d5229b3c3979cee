"""
Common Utilities

Shared modules used across the client:
- config.py - Configuration dataclasses and loading
- exceptions.py - Custom exception classes
- logging_setup.py - Logging setup and console report helpers
"""

from .config import (
    ApiSettings,
    ControlSettings,
    LoggingSettings,
    HealthSettings,
    ClientConfig,
    load_client_config,
    load_config,
    validate_config,
)
from .exceptions import (
    ThermoctlError,
    ConfigError,
    ApiError,
    TransportError,
    ProtocolError,
    ParseError,
)
from .logging_setup import (
    setup_logging,
    get_service_logger,
    configure_logging,
    log_temperature,
    log_system_state,
    log_sensor_configurations,
    log_fan_configurations,
    log_control_action,
    log_control_cycle,
)

__all__ = [
    # Config
    "ApiSettings",
    "ControlSettings",
    "LoggingSettings",
    "HealthSettings",
    "ClientConfig",
    "load_client_config",
    "load_config",
    "validate_config",
    # Exceptions
    "ThermoctlError",
    "ConfigError",
    "ApiError",
    "TransportError",
    "ProtocolError",
    "ParseError",
    # Logging
    "setup_logging",
    "get_service_logger",
    "configure_logging",
    "log_temperature",
    "log_system_state",
    "log_sensor_configurations",
    "log_fan_configurations",
    "log_control_action",
    "log_control_cycle",
]
