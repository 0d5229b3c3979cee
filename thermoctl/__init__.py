"""thermoctl - hysteresis polling client for a remote thermal-control API."""

__version__ = "1.0.0"

__all__ = [
    "ClientConfig",
    "load_config",
    "ThermalApiClient",
    "HysteresisController",
    "ControlMode",
    "ControlLoop",
    "RunContext",
]

from .common.config import ClientConfig, load_config
from .api.client import ThermalApiClient
from .control.algorithm import HysteresisController
from .control.state import ControlMode
from .control_loop import ControlLoop, RunContext
