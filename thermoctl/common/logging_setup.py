"""
Logging Setup

Consistent logging configuration for the control client.
Text format on the console by default, JSON for log shippers.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Iterable

_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "service",
    "message", "taskName",
))

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Defaults applied by get_service_logger(); configure_logging() updates them
_defaults = {
    "level": os.environ.get("THERMOCTL_LOG_LEVEL", "INFO"),
    "format": os.environ.get("THERMOCTL_LOG_FORMAT", "text"),
}


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service", "unknown"),
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ServiceLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds service name to all logs"""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs.setdefault("extra", {})
        kwargs["extra"]["service"] = self.extra.get("service", "unknown")
        return msg, kwargs


def setup_logging(
    service_name: str,
    log_level: str = "INFO",
    json_format: bool = False,
) -> logging.Logger:
    """
    Set up logging for one part of the client.

    Args:
        service_name: Name of the component (e.g., "control", "api")
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format instead of the console text format

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(f"thermoctl.{service_name}")
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)

    if json_format:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT)

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    return logger


def get_service_logger(service_name: str) -> ServiceLoggerAdapter:
    """
    Get a logger adapter with service context.

    Args:
        service_name: Name of the component

    Returns:
        Logger adapter with service name in all logs
    """
    json_format = _defaults["format"].lower() == "json"
    logger = setup_logging(service_name, _defaults["level"], json_format)
    return ServiceLoggerAdapter(logger, {"service": service_name})


def configure_logging(log_level: str, log_format: str) -> None:
    """
    Reconfigure every thermoctl logger created so far.

    Called once at startup after the config file is loaded, so module-level
    loggers pick up the configured level and format.
    """
    _defaults["level"] = log_level
    _defaults["format"] = log_format

    manager = logging.Logger.manager
    for name in list(manager.loggerDict):
        if name.startswith("thermoctl."):
            setup_logging(
                name.split(".", 1)[1],
                log_level,
                log_format.lower() == "json",
            )


# Console report helpers, one call per section of a poll cycle
def log_temperature(logger: logging.Logger, sensor_id: int, temperature: float) -> None:
    """Log the current reading of the primary sensor"""
    logger.info(
        f"Current Temperature: {temperature:.1f}°C",
        extra={"sensor_id": sensor_id, "temperature": temperature},
    )


def log_system_state(logger: logging.Logger, heaters: Iterable[Any], fans: Iterable[Any]) -> None:
    """Log every heater level and fan state"""
    logger.info("System State:")
    for heater in heaters:
        logger.info(f"  Heater {heater.heater_id}: Level {heater.level}")
    for fan in fans:
        logger.info(f"  Fan {fan.fan_id}: {'On' if fan.is_on else 'Off'}")


def log_sensor_configurations(logger: logging.Logger, sensor_configs: Iterable[Any]) -> None:
    """Log the adjustment logic of every sensor"""
    logger.info("Sensor Configurations:")
    for config in sensor_configs:
        logger.info(f"  Sensor {config.id}: Adjustment Logic - {config.logic_description}")


def log_fan_configurations(logger: logging.Logger, fan_configs: Iterable[Any]) -> None:
    """Log the delay of every fan"""
    logger.info("Fan Configurations:")
    for config in fan_configs:
        logger.info(f"  Fan {config.id}: Delay - {config.delay_seconds} seconds")


def log_control_action(
    logger: logging.Logger,
    action: str,
    message: str,
    mode: str,
    next_mode: str,
) -> None:
    """Log the action chosen by the control policy"""
    logger.info(
        message,
        extra={"action": action, "mode": mode, "next_mode": next_mode},
    )


def log_control_cycle(
    logger: logging.Logger,
    cycle_count: int,
    temperature: float | None,
    mode: str,
    commands_sent: int,
    execution_time_ms: float,
) -> None:
    """Log control cycle summary"""
    temp_str = f"{temperature:.1f}°C" if temperature is not None else "n/a"
    logger.debug(
        f"Cycle {cycle_count}: temp={temp_str}, mode={mode}, "
        f"commands={commands_sent}, exec={execution_time_ms:.0f}ms",
        extra={
            "cycle_count": cycle_count,
            "temperature": temperature,
            "mode": mode,
            "commands_sent": commands_sent,
            "execution_time_ms": execution_time_ms,
        },
    )
