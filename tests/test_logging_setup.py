# tests/test_logging_setup.py

import json
import logging

from thermoctl.api.models import FanConfiguration, FanState, HeaterState, SensorConfiguration
from thermoctl.common.logging_setup import (
    JsonFormatter,
    get_service_logger,
    log_fan_configurations,
    log_sensor_configurations,
    log_system_state,
    log_temperature,
)


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.messages = []

    def emit(self, record):
        self.messages.append(record.getMessage())


def make_logger():
    logger = get_service_logger("test.report")
    handler = ListHandler()
    logger.logger.addHandler(handler)
    return logger, handler


def test_console_report_lines():
    logger, handler = make_logger()

    log_temperature(logger, 1, 18.04)
    log_system_state(logger, [HeaterState(1, 5)], [FanState(2, False)])
    log_sensor_configurations(logger, [SensorConfiguration(1, "Linear")])
    log_fan_configurations(logger, [FanConfiguration(3, 4)])

    assert handler.messages == [
        "Current Temperature: 18.0°C",
        "System State:",
        "  Heater 1: Level 5",
        "  Fan 2: Off",
        "Sensor Configurations:",
        "  Sensor 1: Adjustment Logic - Linear",
        "Fan Configurations:",
        "  Fan 3: Delay - 4 seconds",
    ]


def test_service_logger_name_and_propagation():
    logger = get_service_logger("control")

    assert logger.logger.name == "thermoctl.control"
    assert logger.logger.propagate is False
    assert logger.extra == {"service": "control"}


def test_json_formatter_includes_service_and_extras():
    record = logging.LogRecord("thermoctl.control", logging.ERROR, __file__, 1, "Error: boom", None, None)
    record.service = "control"
    record.error_kind = "protocol"

    data = json.loads(JsonFormatter().format(record))

    assert data["level"] == "ERROR"
    assert data["service"] == "control"
    assert data["message"] == "Error: boom"
    assert data["error_kind"] == "protocol"
