"""Remote thermal-control API client and payload records."""

from .client import ThermalApiClient
from .models import (
    FanConfiguration,
    FanState,
    HeaterState,
    SensorConfiguration,
    SystemState,
)

__all__ = [
    "ThermalApiClient",
    "FanConfiguration",
    "FanState",
    "HeaterState",
    "SensorConfiguration",
    "SystemState",
]
