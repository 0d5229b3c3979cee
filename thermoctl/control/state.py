"""
Control State Dataclasses

Data structures for the hysteresis policy and the poll cycle.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ControlMode(str, Enum):
    """Which actuator group the policy is driving"""
    HEATING = "heating"
    COOLING = "cooling"


class ControlAction(str, Enum):
    """Outcome of one policy evaluation"""
    HEAT = "heat"                # heaters to max, stay in HEATING
    HEAT_TARGET_REACHED = "heat_target_reached"  # heaters off, switch to COOLING
    COOL = "cool"                # fans on, stay in COOLING
    COOL_TARGET_REACHED = "cool_target_reached"  # fans off, switch to HEATING


class ActuatorKind(str, Enum):
    HEATER = "heater"
    FAN = "fan"


@dataclass(frozen=True)
class ActuatorCommand:
    """One remote command: heater level (int) or fan state (bool)"""
    kind: ActuatorKind
    actuator_id: int
    value: int | bool

    def describe(self) -> str:
        if self.kind == ActuatorKind.HEATER:
            return f"heater {self.actuator_id} -> level {self.value}"
        return f"fan {self.actuator_id} -> {'on' if self.value else 'off'}"


@dataclass
class CycleState:
    """Snapshot of the most recent poll cycle"""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    cycle_count: int = 0

    # Inputs
    temperature_c: float | None = None
    heaters: list[dict[str, Any]] = field(default_factory=list)
    fans: list[dict[str, Any]] = field(default_factory=list)

    # Decision
    mode: str = ControlMode.HEATING.value
    action: str | None = None
    commands_sent: int = 0

    # Execution
    success: bool = True
    error_kind: str | None = None
    error: str | None = None
    execution_time_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging and the status endpoint"""
        return {
            "timestamp": self.timestamp.isoformat(),
            "cycle_count": self.cycle_count,
            "temperature_c": self.temperature_c,
            "heaters": self.heaters,
            "fans": self.fans,
            "mode": self.mode,
            "action": self.action,
            "commands_sent": self.commands_sent,
            "success": self.success,
            "error_kind": self.error_kind,
            "error": self.error,
            "execution_time_ms": round(self.execution_time_ms, 1),
        }
