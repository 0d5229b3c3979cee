"""
Control Loop - Hysteresis Polling Client

Each poll cycle:
1. Reads the primary sensor temperature
2. Reads heater levels and fan states
3. Reads sensor and fan configuration (display only)
4. Evaluates the hysteresis policy
5. Sends the decided heater/fan commands
6. Waits for the next poll interval

Any API failure ends the cycle early; the failure policy decides how it is
logged and the next cycle starts again from step 1. The mode only changes
once every command of a transition has been delivered.
"""

import asyncio
import signal
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from aiohttp import web

from .api.client import ThermalApiClient
from .common.config import ClientConfig
from .common.logging_setup import (
    get_service_logger,
    log_control_action,
    log_control_cycle,
    log_fan_configurations,
    log_sensor_configurations,
    log_system_state,
    log_temperature,
)
from .control.algorithm import HysteresisController
from .control.failure_policy import FailureRule, OperationResult, attempt, rule_for
from .control.state import ActuatorCommand, ActuatorKind, CycleState

logger = get_service_logger("control")


class CycleInterrupted(Exception):
    """Shutdown was requested in the middle of a cycle"""


class RunContext:
    """
    Cancellation signal shared by the loop and its owner.

    Checked before every request and every wait, so stop() takes effect
    at the next suspension point.
    """

    def __init__(self):
        self._stop_event = asyncio.Event()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Request shutdown"""
        if not self._stop_event.is_set():
            logger.info("Shutdown requested")
        self._stop_event.set()

    def check(self) -> None:
        """Raise CycleInterrupted if shutdown was requested"""
        if self._stop_event.is_set():
            raise CycleInterrupted()

    async def sleep(self, seconds: float) -> bool:
        """
        Wait up to `seconds`, returning early on stop().

        Returns:
            True if the full interval elapsed, False if stopped
        """
        if self.stopped:
            return False
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return True
        return False

    def install_signal_handlers(self) -> None:
        """Stop on SIGTERM / SIGINT"""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, self.stop)
            except NotImplementedError:
                signal.signal(sig, lambda s, f: self.stop())


class ControlLoop:
    """
    Polls the thermal API and drives heaters and fans.

    The controller value (mode + thresholds) is owned here and replaced,
    never mutated, after each successful transition.
    """

    def __init__(
        self,
        config: ClientConfig,
        api: ThermalApiClient | None = None,
        context: RunContext | None = None,
        controller: HysteresisController | None = None,
    ):
        """
        Initialize the control loop.

        Args:
            config: Validated client configuration
            api: API client (built from config.api when omitted)
            context: Cancellation context (a fresh one when omitted)
            controller: Initial controller (HEATING with configured thresholds when omitted)
        """
        self.config = config
        self.api = api or ThermalApiClient(
            base_url=config.api.base_url,
            api_key=config.api.api_key,
            timeout_s=config.api.timeout_s,
            verify_tls=config.api.verify_tls,
            max_heater_level=config.control.max_heater_level,
        )
        self.context = context or RunContext()
        self.controller = controller or HysteresisController.from_settings(config.control)

        self.sensor_id = config.control.sensor_id
        self.interval_s = config.control.poll_interval_s

        self.state = CycleState(mode=self.controller.mode.value)
        self._cycle_count = 0
        self._start_time = datetime.now(timezone.utc)

        # Health server
        self._health_runner: web.AppRunner | None = None

        logger.info("Control loop initialized:")
        logger.info(f"  - API: {config.api.base_url}")
        logger.info(f"  - Sensor: {self.sensor_id}")
        logger.info(f"  - Band: {self.controller.target_low}°C .. {self.controller.target_high}°C")
        logger.info(f"  - Heaters: {list(self.controller.heater_ids)}")
        logger.info(f"  - Fans: {list(self.controller.fan_ids)}")
        logger.info(f"  - Interval: {self.interval_s}s")

    # ============================================
    # POLL CYCLE
    # ============================================

    async def _call(self, operation: str, func: Callable[..., Awaitable[Any]], *args) -> OperationResult:
        """Check for shutdown, then run one remote call as an OperationResult"""
        self.context.check()
        return await attempt(operation, func(*args))

    def _apply_failure_policy(self, state: CycleState, result: OperationResult) -> FailureRule:
        """Record and log a failed operation; return the rule applied"""
        rule = rule_for(result.kind)

        state.success = False
        state.error_kind = result.kind.value
        state.error = result.error.message

        logger.log(
            rule.log_level,
            f"Error: {result.error.message}",
            extra={"operation": result.operation, "error_kind": result.kind.value},
        )
        return rule

    def _step_failed(self, state: CycleState, result: OperationResult) -> bool:
        """
        Apply the failure policy to a failed step.

        Returns:
            True if the cycle must end here. Every action does, since later
            steps need the value the failed step did not produce.
        """
        if result.ok:
            return False
        self._apply_failure_policy(state, result)
        return True

    async def _send_command(self, command: ActuatorCommand) -> OperationResult:
        if command.kind == ActuatorKind.HEATER:
            return await self._call("set_heater_level", self.api.set_heater_level,
                                    command.actuator_id, command.value)
        return await self._call("set_fan_state", self.api.set_fan_state,
                                command.actuator_id, command.value)

    async def _execute_cycle(self, state: CycleState) -> None:
        # 1. Temperature of the primary sensor
        result = await self._call("get_temperature", self.api.get_temperature, self.sensor_id)
        if self._step_failed(state, result):
            return
        temperature = result.value
        state.temperature_c = temperature
        log_temperature(logger, self.sensor_id, temperature)

        # 2. Heater and fan state
        result = await self._call("get_system_state", self.api.get_system_state)
        if self._step_failed(state, result):
            return
        system_state = result.value
        state.heaters = system_state.to_dict()["heaters"]
        state.fans = system_state.to_dict()["fans"]
        log_system_state(logger, system_state.heaters, system_state.fans)

        # 3. Configuration, display only
        result = await self._call("get_sensor_configurations", self.api.get_sensor_configurations)
        if self._step_failed(state, result):
            return
        log_sensor_configurations(logger, result.value)

        result = await self._call("get_fan_configurations", self.api.get_fan_configurations)
        if self._step_failed(state, result):
            return
        log_fan_configurations(logger, result.value)

        # 4. Policy
        decision = self.controller.decide(temperature)
        state.action = decision.action.value
        log_control_action(
            logger,
            decision.action.value,
            decision.message,
            self.controller.mode.value,
            decision.next_controller.mode.value,
        )

        # 5. Actuators; a failure leaves the rest of the batch unsent
        for command in decision.commands:
            result = await self._send_command(command)
            if self._step_failed(state, result):
                return
            state.commands_sent += 1
            logger.debug(f"Sent {command.describe()}")

        if decision.transitions:
            logger.info(
                f"Mode changed: {self.controller.mode.value} -> {decision.next_controller.mode.value}"
            )
        self.controller = decision.next_controller
        state.mode = self.controller.mode.value

    async def run_cycle(self) -> CycleState:
        """
        Run a single poll cycle.

        Never raises for API failures; they are recorded on the returned state.

        Returns:
            The cycle state, also kept as self.state
        """
        cycle_start = time.time()
        self._cycle_count += 1
        state = CycleState(cycle_count=self._cycle_count, mode=self.controller.mode.value)

        try:
            await self._execute_cycle(state)
        except CycleInterrupted:
            logger.debug(f"Cycle {self._cycle_count} interrupted by shutdown")

        state.execution_time_ms = (time.time() - cycle_start) * 1000
        self.state = state

        log_control_cycle(
            logger,
            cycle_count=state.cycle_count,
            temperature=state.temperature_c,
            mode=state.mode,
            commands_sent=state.commands_sent,
            execution_time_ms=state.execution_time_ms,
        )
        return state

    async def run(self, max_cycles: int | None = None) -> None:
        """
        Run poll cycles until stopped.

        Args:
            max_cycles: Stop after this many cycles (None = run until stop())
        """
        logger.info("Starting temperature control loop...")

        try:
            if self.config.health.enabled:
                await self._start_health_server()

            while not self.context.stopped:
                loop_start = time.time()
                await self.run_cycle()

                if max_cycles is not None and self._cycle_count >= max_cycles:
                    break

                # Wait for next interval
                elapsed = time.time() - loop_start
                await self.context.sleep(max(0.0, self.interval_s - elapsed))

        except asyncio.CancelledError:
            logger.info("Control loop cancelled")
            raise
        finally:
            await self.api.close()
            await self._stop_health_server()
            logger.info("Control loop stopped")

    def stop(self) -> None:
        """Stop the control loop at its next suspension point."""
        self.context.stop()

    def get_status(self) -> dict:
        """Get current control status as dictionary."""
        return {
            "cycle_count": self._cycle_count,
            "mode": self.controller.mode.value,
            "target_high": self.controller.target_high,
            "target_low": self.controller.target_low,
            "running": not self.context.stopped,
            "uptime_seconds": int((datetime.now(timezone.utc) - self._start_time).total_seconds()),
            "last_cycle": self.state.to_dict(),
        }

    # ============================================
    # STATUS ENDPOINT
    # ============================================

    def _build_health_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/health", self._health_handler)
        app.router.add_get("/state", self._state_handler)
        return app

    async def _start_health_server(self) -> None:
        """Start the health check HTTP server"""
        self._health_runner = web.AppRunner(self._build_health_app())
        await self._health_runner.setup()

        site = web.TCPSite(self._health_runner, self.config.health.host, self.config.health.port)
        await site.start()

        logger.info(f"Health server started on {self.config.health.host}:{self.config.health.port}")

    async def _stop_health_server(self) -> None:
        """Stop the health check HTTP server"""
        if self._health_runner:
            await self._health_runner.cleanup()
            self._health_runner = None

    async def _health_handler(self, request: web.Request) -> web.Response:
        """Handle health check requests"""
        uptime = (datetime.now(timezone.utc) - self._start_time).total_seconds()

        return web.json_response({
            "status": "healthy" if not self.context.stopped else "stopping",
            "service": "control",
            "uptime": int(uptime),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "mode": self.controller.mode.value,
            "cycle_count": self._cycle_count,
            "last_cycle_ok": self.state.success,
        })

    async def _state_handler(self, request: web.Request) -> web.Response:
        """Return latest cycle state"""
        return web.json_response(self.state.to_dict())
