"""
Thermal API Client

Async HTTP client for the remote thermal-control service.

Every call is a single awaited request on one reused connection pool.
Failures are raised as typed errors:
- TransportError - no response (connection refused, TLS, timeout)
- ProtocolError  - non-2xx status
- ParseError     - body is not a number / not the expected JSON
"""

import math
from typing import Any

import httpx

from ..common.exceptions import ParseError, ProtocolError, TransportError
from ..common.logging_setup import get_service_logger
from .models import (
    FanConfiguration,
    SensorConfiguration,
    SystemState,
    parse_list,
)

logger = get_service_logger("api")

API_KEY_HEADER = "X-Api-Key"
JSON_CONTENT_TYPE = "application/json"


class ThermalApiClient:
    """
    Client for the thermal-control REST API.

    Reads sensor temperatures, system state and configuration, and
    commands heaters and fans. The static API key is sent on every request.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout_s: float = 10.0,
        verify_tls: bool = True,
        max_heater_level: int = 5,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Service root (e.g., "https://localhost:7021/")
            api_key: Value of the X-Api-Key header
            timeout_s: Per-request timeout in seconds
            verify_tls: Verify the server certificate
            max_heater_level: Highest level accepted by set_heater_level
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url
        self.api_key = api_key
        self.timeout_s = timeout_s
        self.verify_tls = verify_tls
        self.max_heater_level = max_heater_level
        self._transport = transport
        # Reusable HTTP client - avoids connection overhead per request
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create reusable HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={API_KEY_HEADER: self.api_key},
                timeout=self.timeout_s,
                verify=self.verify_tls,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client"""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ThermalApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        failure: str,
        content: str | None = None,
    ) -> httpx.Response:
        """
        Send one request and enforce a 2xx status.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            operation: Short operation name carried on raised errors
            failure: Human-readable prefix for error messages
            content: Optional plain-text body sent as application/json
        """
        client = await self._get_client()
        headers = {"Content-Type": JSON_CONTENT_TYPE} if content is not None else None

        try:
            response = await client.request(method, path, content=content, headers=headers)
        except httpx.TimeoutException as e:
            raise TransportError(f"{failure}: request timed out ({e})", operation) from e
        except httpx.RequestError as e:
            raise TransportError(f"{failure}: {e}", operation) from e

        logger.debug(f"{method} {path} -> {response.status_code}")

        if not response.is_success:
            raise ProtocolError(
                f"{failure}: {response.status_code} {response.reason_phrase}",
                operation,
                status_code=response.status_code,
                reason=response.reason_phrase,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response, failure: str, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ParseError(f"{failure}: invalid JSON ({e})", operation, response.text) from e

    async def get_temperature(self, sensor_id: int) -> float:
        """
        Read the current temperature of a sensor.

        Returns:
            Temperature in Celsius

        Raises:
            TransportError, ProtocolError, ParseError
        """
        failure = f"Failed to get temperature from sensor {sensor_id}"
        response = await self._request("GET", f"api/sensor/{sensor_id}", "get_temperature", failure)

        body = response.text.strip()
        try:
            temperature = float(body)
        except ValueError as e:
            raise ParseError(f"{failure}: {body!r} is not a number", "get_temperature", body) from e

        if not math.isfinite(temperature):
            raise ParseError(f"{failure}: {body!r} is not a finite number", "get_temperature", body)

        return temperature

    async def get_system_state(self) -> SystemState:
        """Read heater levels and fan states"""
        failure = "Failed to get system state"
        response = await self._request("GET", "api/SystemState", "get_system_state", failure)
        data = self._json(response, failure, "get_system_state")
        try:
            return SystemState.from_dict(data)
        except ParseError as e:
            raise ParseError(f"{failure}: {e.detail}", "get_system_state", response.text) from e

    async def get_sensor_configurations(self) -> list[SensorConfiguration]:
        """Read sensor adjustment-logic descriptions"""
        failure = "Failed to get sensor configurations"
        response = await self._request(
            "GET", "api/sensors/configurations", "get_sensor_configurations", failure
        )
        data = self._json(response, failure, "get_sensor_configurations")
        try:
            return parse_list(data, SensorConfiguration, "Sensor configurations")
        except ParseError as e:
            raise ParseError(f"{failure}: {e.detail}", "get_sensor_configurations", response.text) from e

    async def get_fan_configurations(self) -> list[FanConfiguration]:
        """Read fan delay settings"""
        failure = "Failed to get fan configurations"
        response = await self._request(
            "GET", "api/fans/configurations", "get_fan_configurations", failure
        )
        data = self._json(response, failure, "get_fan_configurations")
        try:
            return parse_list(data, FanConfiguration, "Fan configurations")
        except ParseError as e:
            raise ParseError(f"{failure}: {e.detail}", "get_fan_configurations", response.text) from e

    async def set_heater_level(self, heater_id: int, level: int) -> None:
        """
        Set a heater to a discrete level.

        Args:
            heater_id: Heater to command
            level: 0 (off) to max_heater_level

        Raises:
            ValueError: If level is out of range (no request is sent)
            TransportError, ProtocolError
        """
        if isinstance(level, bool) or not isinstance(level, int) or not 0 <= level <= self.max_heater_level:
            raise ValueError(f"Heater level must be 0-{self.max_heater_level}, got {level!r}")

        await self._request(
            "POST",
            f"api/heat/{heater_id}",
            "set_heater_level",
            f"Failed to set heater level {heater_id}",
            content=str(level),
        )
        logger.debug(f"Heater {heater_id} set to level {level}")

    async def set_fan_state(self, fan_id: int, is_on: bool) -> None:
        """Switch a fan on or off"""
        await self._request(
            "POST",
            f"api/fans/{fan_id}",
            "set_fan_state",
            f"Failed to set fan state for fan {fan_id}",
            content="true" if is_on else "false",
        )
        logger.debug(f"Fan {fan_id} set {'on' if is_on else 'off'}")
