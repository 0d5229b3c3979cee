#!/usr/bin/env python3
"""
Thermal Control Client - Main Entry Point

Loads the configuration and starts the control loop.

Usage:
    thermoctl                         # Use default config.yaml
    thermoctl --config my.yaml        # Use custom config file
    thermoctl --dry-run               # Print config and exit
    thermoctl --max-cycles 10         # Stop after ten poll cycles

The client will:
1. Load configuration from YAML file and THERMOCTL_* environment variables
2. Validate it once (thresholds, URL, API key, ...)
3. Poll the thermal API and drive heaters/fans until SIGINT/SIGTERM
"""

import argparse
import asyncio
import sys

from .common.config import ClientConfig, load_config
from .common.exceptions import ConfigError
from .common.logging_setup import configure_logging, get_service_logger
from .control_loop import ControlLoop, RunContext

logger = get_service_logger("main")


def print_config_summary(config: ClientConfig) -> None:
    """Print a summary of the configuration."""
    print("\n" + "=" * 60)
    print("  THERMAL CONTROL CLIENT")
    print("=" * 60)

    print(f"\n  API: {config.api.base_url}")
    print(f"  API Key: {'set' if config.api.api_key else 'missing'}")
    print(f"  Timeout: {config.api.timeout_s}s")

    control = config.control
    print(f"\n  Control Settings:")
    print(f"    - Sensor: {control.sensor_id}")
    print(f"    - Target High: {control.target_high}°C")
    print(f"    - Target Low: {control.target_low}°C")
    print(f"    - Interval: {control.poll_interval_s}s")
    print(f"    - Heaters: {', '.join(str(i) for i in control.heater_ids)} (max level {control.max_heater_level})")
    print(f"    - Fans: {', '.join(str(i) for i in control.fan_ids)}")

    if config.health.enabled:
        print(f"\n  Health: http://{config.health.host}:{config.health.port}/health")
    else:
        print(f"\n  Health: Disabled")

    print("=" * 60 + "\n")


async def main_async(config: ClientConfig, max_cycles: int | None = None) -> None:
    """
    Async main function.

    Args:
        config: Validated configuration
        max_cycles: Optional cycle limit
    """
    context = RunContext()
    context.install_signal_handlers()

    loop = ControlLoop(config, context=context)
    await loop.run(max_cycles=max_cycles)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Thermal control polling client"
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default="config.yaml",
        help="Path to configuration file (default: config.yaml)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print configuration and exit without starting the loop"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (debug) logging"
    )
    parser.add_argument(
        "--max-cycles",
        type=int,
        default=None,
        help="Stop after this many poll cycles"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        for error in e.errors or [e.message]:
            logger.error(f"Configuration error: {error}")
        return 1

    configure_logging(
        "DEBUG" if args.verbose else config.logging.level,
        config.logging.format,
    )

    print_config_summary(config)

    if args.dry_run:
        print("Dry run mode - exiting without starting control loop")
        return 0

    logger.info("Starting temperature control simulation...")
    print("Press Ctrl+C to stop\n")

    try:
        asyncio.run(main_async(config, args.max_cycles))
    except KeyboardInterrupt:
        print("\nStopped by user")

    return 0


if __name__ == "__main__":
    sys.exit(main())
