"""Hysteresis control policy, cycle state and failure handling."""

from .algorithm import ACTION_MESSAGES, ControlDecision, HysteresisController
from .failure_policy import (
    FAILURE_POLICY,
    FailureAction,
    FailureKind,
    FailureRule,
    OperationResult,
    attempt,
    classify,
)
from .state import ActuatorCommand, ActuatorKind, ControlAction, ControlMode, CycleState

__all__ = [
    "ACTION_MESSAGES",
    "ControlDecision",
    "HysteresisController",
    "FAILURE_POLICY",
    "FailureAction",
    "FailureKind",
    "FailureRule",
    "OperationResult",
    "attempt",
    "classify",
    "ActuatorCommand",
    "ActuatorKind",
    "ControlAction",
    "ControlMode",
    "CycleState",
]
