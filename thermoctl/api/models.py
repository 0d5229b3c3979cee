"""
Remote API Records

Dataclasses for the payloads returned by the thermal-control API.
Field names are matched case-insensitively ("HeaterId", "heaterId"
and "heaterid" all decode the same way). An absent or null field takes
the default for its type (0, False, ""); a present value of the wrong
type is a ParseError.
"""

from dataclasses import dataclass, field
from typing import Any

from ..common.exceptions import ParseError


def _lower_keys(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ParseError(f"{what} must be a JSON object, got {type(data).__name__}")
    return {str(k).lower(): v for k, v in data.items()}


def _get_int(data: dict, key: str, what: str) -> int:
    value = data.get(key.lower())
    # Absent or null decodes to the record default
    if value is None:
        return 0
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ParseError(f"{what}.{key} must be an integer, got {value!r}")
    return value


def _get_bool(data: dict, key: str, what: str) -> bool:
    value = data.get(key.lower())
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ParseError(f"{what}.{key} must be a boolean, got {value!r}")
    return value


def _get_list(data: dict, key: str, what: str) -> list:
    value = data.get(key.lower())
    if value is None:
        return []
    if not isinstance(value, list):
        raise ParseError(f"{what}.{key} must be an array")
    return value


@dataclass(frozen=True)
class HeaterState:
    """Current level of one heater (0 = off)"""
    heater_id: int
    level: int

    @classmethod
    def from_dict(cls, data: Any) -> "HeaterState":
        d = _lower_keys(data, "Heater")
        return cls(
            heater_id=_get_int(d, "HeaterId", "Heater"),
            level=_get_int(d, "Level", "Heater"),
        )


@dataclass(frozen=True)
class FanState:
    """Current on/off state of one fan"""
    fan_id: int
    is_on: bool

    @classmethod
    def from_dict(cls, data: Any) -> "FanState":
        d = _lower_keys(data, "Fan")
        return cls(
            fan_id=_get_int(d, "FanId", "Fan"),
            is_on=_get_bool(d, "IsOn", "Fan"),
        )


@dataclass(frozen=True)
class SystemState:
    """Aggregate actuator state, fetched fresh every cycle"""
    heaters: list[HeaterState] = field(default_factory=list)
    fans: list[FanState] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "SystemState":
        d = _lower_keys(data, "SystemState")
        return cls(
            heaters=[HeaterState.from_dict(h) for h in _get_list(d, "Heaters", "SystemState")],
            fans=[FanState.from_dict(f) for f in _get_list(d, "Fans", "SystemState")],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "heaters": [{"heater_id": h.heater_id, "level": h.level} for h in self.heaters],
            "fans": [{"fan_id": f.fan_id, "is_on": f.is_on} for f in self.fans],
        }


@dataclass(frozen=True)
class SensorConfiguration:
    """Descriptive sensor metadata (display only)"""
    id: int
    logic_description: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "SensorConfiguration":
        d = _lower_keys(data, "SensorConfiguration")
        description = d.get("logicdescription")
        if description is not None and not isinstance(description, str):
            raise ParseError(
                f"SensorConfiguration.LogicDescription must be a string, got {description!r}"
            )
        return cls(
            id=_get_int(d, "Id", "SensorConfiguration"),
            logic_description=description or "",
        )


@dataclass(frozen=True)
class FanConfiguration:
    """Descriptive fan metadata (display only)"""
    id: int
    delay_seconds: int

    @classmethod
    def from_dict(cls, data: Any) -> "FanConfiguration":
        d = _lower_keys(data, "FanConfiguration")
        return cls(
            id=_get_int(d, "Id", "FanConfiguration"),
            delay_seconds=_get_int(d, "DelaySeconds", "FanConfiguration"),
        )


def parse_list(data: Any, record_type: type, what: str) -> list:
    """Decode a JSON array of records"""
    if not isinstance(data, list):
        raise ParseError(f"{what} must be a JSON array, got {type(data).__name__}")
    return [record_type.from_dict(item) for item in data]
