# tests/test_algorithm.py

import pytest

from thermoctl.control.algorithm import HysteresisController
from thermoctl.control.state import ActuatorCommand, ActuatorKind, ControlAction, ControlMode


def make_controller(mode=ControlMode.HEATING):
    return HysteresisController(target_high=19.0, target_low=18.0, mode=mode)


def heater_levels(decision):
    return [(c.actuator_id, c.value) for c in decision.commands if c.kind == ActuatorKind.HEATER]


def fan_states(decision):
    return [(c.actuator_id, c.value) for c in decision.commands if c.kind == ActuatorKind.FAN]


def test_heating_below_target_drives_heaters_to_max():
    decision = make_controller().decide(17.5)

    assert decision.action == ControlAction.HEAT
    assert heater_levels(decision) == [(1, 5), (2, 5), (3, 5)]
    assert fan_states(decision) == []
    assert decision.next_controller.mode == ControlMode.HEATING
    assert decision.message == "Heating up..."


def test_heating_at_target_turns_heaters_off_and_switches_to_cooling():
    decision = make_controller().decide(19.0)

    assert decision.action == ControlAction.HEAT_TARGET_REACHED
    assert heater_levels(decision) == [(1, 0), (2, 0), (3, 0)]
    assert decision.next_controller.mode == ControlMode.COOLING
    assert decision.transitions


def test_cooling_above_low_target_runs_fans():
    decision = make_controller(ControlMode.COOLING).decide(18.5)

    assert decision.action == ControlAction.COOL
    assert fan_states(decision) == [(1, True), (2, True), (3, True)]
    assert heater_levels(decision) == []
    assert decision.next_controller.mode == ControlMode.COOLING
    assert not decision.transitions


def test_cooling_at_low_target_turns_fans_off_and_switches_to_heating():
    decision = make_controller(ControlMode.COOLING).decide(18.0)

    assert decision.action == ControlAction.COOL_TARGET_REACHED
    assert fan_states(decision) == [(1, False), (2, False), (3, False)]
    assert decision.next_controller.mode == ControlMode.HEATING
    assert decision.message == "Minimum temperature reached. Turning off fans."


@pytest.mark.parametrize("temperature", [-10.0, 0.0, 18.0, 18.5, 18.99, 19.0, 19.01, 25.0])
def test_heating_mode_properties(temperature):
    decision = make_controller().decide(temperature)
    levels = {level for _, level in heater_levels(decision)}

    if temperature < 19.0:
        assert levels == {5}
        assert decision.next_controller.mode == ControlMode.HEATING
    else:
        assert levels == {0}
        assert decision.next_controller.mode == ControlMode.COOLING


@pytest.mark.parametrize("temperature", [10.0, 17.99, 18.0, 18.01, 19.0, 30.0])
def test_cooling_mode_properties(temperature):
    decision = make_controller(ControlMode.COOLING).decide(temperature)
    states = {is_on for _, is_on in fan_states(decision)}

    if temperature > 18.0:
        assert states == {True}
        assert decision.next_controller.mode == ControlMode.COOLING
    else:
        assert states == {False}
        assert decision.next_controller.mode == ControlMode.HEATING


def test_mode_changes_only_at_thresholds():
    controller = make_controller()
    trace = [17.0, 18.5, 18.9, 19.0, 18.9, 18.5, 18.1, 18.0, 18.5, 19.2]
    modes = []

    for temperature in trace:
        controller = controller.decide(temperature).next_controller
        modes.append(controller.mode)

    assert modes == [
        ControlMode.HEATING, ControlMode.HEATING, ControlMode.HEATING,
        ControlMode.COOLING, ControlMode.COOLING, ControlMode.COOLING,
        ControlMode.COOLING, ControlMode.HEATING, ControlMode.HEATING,
        ControlMode.COOLING,
    ]


def test_decide_does_not_mutate_controller():
    controller = make_controller()
    decision = controller.decide(25.0)

    assert controller.mode == ControlMode.HEATING
    assert decision.next_controller is not controller
    assert decision.next_controller.target_high == controller.target_high


def test_steady_state_returns_same_controller():
    controller = make_controller()
    assert controller.decide(15.0).next_controller is controller


def test_custom_actuators_and_level():
    controller = HysteresisController(
        target_high=22.0,
        target_low=20.0,
        heater_ids=[4, 7],
        fan_ids=[9],
        max_heater_level=3,
    )

    assert heater_levels(controller.decide(21.0)) == [(4, 3), (7, 3)]
    cooling = controller.with_mode(ControlMode.COOLING)
    assert fan_states(cooling.decide(21.0)) == [(9, True)]


@pytest.mark.parametrize("high,low", [(18.0, 18.0), (17.0, 18.0)])
def test_thresholds_must_form_a_band(high, low):
    with pytest.raises(ValueError):
        HysteresisController(target_high=high, target_low=low)


def test_actuator_command_describe():
    assert ActuatorCommand(ActuatorKind.HEATER, 2, 5).describe() == "heater 2 -> level 5"
    assert ActuatorCommand(ActuatorKind.FAN, 3, False).describe() == "fan 3 -> off"
