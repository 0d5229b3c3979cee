# tests/conftest.py

import httpx
import pytest

from thermoctl.api.client import ThermalApiClient
from thermoctl.common.config import ApiSettings, ClientConfig, ControlSettings

BASE_URL = "https://thermal.test/"
API_KEY = "test-key"


class FakeThermalService:
    """In-memory stand-in for the remote thermal API, served through httpx.MockTransport"""

    def __init__(self):
        self.temperature = "17.5"
        self.system_state = {
            "Heaters": [{"HeaterId": i, "Level": 0} for i in (1, 2, 3)],
            "Fans": [{"FanId": i, "IsOn": False} for i in (1, 2, 3)],
        }
        self.sensor_configs = [{"Id": 1, "LogicDescription": "Linear drift"}]
        self.fan_configs = [{"Id": i, "DelaySeconds": 2} for i in (1, 2, 3)]
        # path -> status code to answer with
        self.fail_paths: dict[str, int] = {}
        # paths that raise a connection error
        self.unreachable_paths: set[str] = set()
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path in self.unreachable_paths:
            raise httpx.ConnectError("connection refused", request=request)
        if path in self.fail_paths:
            return httpx.Response(self.fail_paths[path])

        if request.method == "GET":
            if path.startswith("/api/sensor/"):
                return httpx.Response(200, text=self.temperature)
            if path == "/api/SystemState":
                return httpx.Response(200, json=self.system_state)
            if path == "/api/sensors/configurations":
                return httpx.Response(200, json=self.sensor_configs)
            if path == "/api/fans/configurations":
                return httpx.Response(200, json=self.fan_configs)
        elif request.method == "POST":
            if path.startswith("/api/heat/") or path.startswith("/api/fans/"):
                return httpx.Response(200)

        return httpx.Response(404)

    @property
    def commands(self) -> list[tuple[str, str]]:
        """(path, body) of every POST, in order"""
        return [
            (r.url.path, r.content.decode())
            for r in self.requests
            if r.method == "POST"
        ]


@pytest.fixture
def service():
    return FakeThermalService()


@pytest.fixture
def api(service):
    return ThermalApiClient(
        BASE_URL,
        API_KEY,
        transport=httpx.MockTransport(service.handler),
    )


@pytest.fixture
def config():
    return ClientConfig(
        api=ApiSettings(base_url=BASE_URL, api_key=API_KEY),
        control=ControlSettings(poll_interval_s=0.01),
    )
