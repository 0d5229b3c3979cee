"""
Control Algorithm - Two-Point Hysteresis

HEATING: drive every heater to max until temperature reaches target_high,
         then switch heaters off and move to COOLING.
COOLING: run every fan until temperature falls to target_low,
         then switch fans off and move to HEATING.

Reaching a threshold exactly takes the transition branch.
"""

from dataclasses import dataclass, replace

from ..common.logging_setup import get_service_logger
from .state import ActuatorCommand, ActuatorKind, ControlAction, ControlMode

logger = get_service_logger("control.algorithm")

ACTION_MESSAGES = {
    ControlAction.HEAT: "Heating up...",
    ControlAction.HEAT_TARGET_REACHED: "Target temperature reached. Turning off heater.",
    ControlAction.COOL: "Cooling down...",
    ControlAction.COOL_TARGET_REACHED: "Minimum temperature reached. Turning off fans.",
}


@dataclass(frozen=True)
class ControlDecision:
    """Output from one policy evaluation"""
    action: ControlAction
    commands: tuple[ActuatorCommand, ...]
    next_controller: "HysteresisController"

    @property
    def message(self) -> str:
        return ACTION_MESSAGES[self.action]

    @property
    def transitions(self) -> bool:
        return self.action in (ControlAction.HEAT_TARGET_REACHED, ControlAction.COOL_TARGET_REACHED)


@dataclass(frozen=True)
class HysteresisController:
    """
    Immutable controller value: thresholds, actuator ids and current mode.

    decide() never mutates; the caller adopts decision.next_controller once
    the decided commands have all been delivered.
    """
    target_high: float
    target_low: float
    mode: ControlMode = ControlMode.HEATING
    heater_ids: tuple[int, ...] = (1, 2, 3)
    fan_ids: tuple[int, ...] = (1, 2, 3)
    max_heater_level: int = 5

    def __post_init__(self):
        if self.target_high <= self.target_low:
            raise ValueError(
                f"target_high ({self.target_high}) must exceed target_low ({self.target_low})"
            )
        # Accept lists from config, store tuples so the value stays hashable
        object.__setattr__(self, "heater_ids", tuple(self.heater_ids))
        object.__setattr__(self, "fan_ids", tuple(self.fan_ids))

    @classmethod
    def from_settings(cls, settings) -> "HysteresisController":
        """Build the initial controller from ControlSettings"""
        return cls(
            target_high=settings.target_high,
            target_low=settings.target_low,
            heater_ids=tuple(settings.heater_ids),
            fan_ids=tuple(settings.fan_ids),
            max_heater_level=settings.max_heater_level,
        )

    def with_mode(self, mode: ControlMode) -> "HysteresisController":
        return replace(self, mode=mode)

    def _heaters(self, level: int) -> tuple[ActuatorCommand, ...]:
        return tuple(ActuatorCommand(ActuatorKind.HEATER, i, level) for i in self.heater_ids)

    def _fans(self, is_on: bool) -> tuple[ActuatorCommand, ...]:
        return tuple(ActuatorCommand(ActuatorKind.FAN, i, is_on) for i in self.fan_ids)

    def decide(self, temperature: float) -> ControlDecision:
        """
        Evaluate the policy for one temperature reading.

        Args:
            temperature: Current reading in Celsius

        Returns:
            ControlDecision with the commands to issue and the controller
            to use from the next cycle on
        """
        if self.mode == ControlMode.HEATING:
            if temperature < self.target_high:
                action = ControlAction.HEAT
                commands = self._heaters(self.max_heater_level)
                next_mode = ControlMode.HEATING
            else:
                action = ControlAction.HEAT_TARGET_REACHED
                commands = self._heaters(0)
                next_mode = ControlMode.COOLING
        else:
            if temperature > self.target_low:
                action = ControlAction.COOL
                commands = self._fans(True)
                next_mode = ControlMode.COOLING
            else:
                action = ControlAction.COOL_TARGET_REACHED
                commands = self._fans(False)
                next_mode = ControlMode.HEATING

        logger.debug(
            f"Hysteresis: temp={temperature:.2f}, band=[{self.target_low}, {self.target_high}], "
            f"mode={self.mode.value} -> {next_mode.value} ({action.value})"
        )

        next_controller = self if next_mode == self.mode else self.with_mode(next_mode)
        return ControlDecision(action=action, commands=commands, next_controller=next_controller)
