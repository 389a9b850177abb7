"""Telemetry bridge entry point.

Connects to NATS, serves ``POST /telemetry`` and republishes every reading on
``device.<device_id>.telemetry``. Controlled via environment variables, see
``src/config.py``.
"""

import asyncio
import signal
import sys

import structlog

from bridge_base.errors import BusConnectionError
from src.config import BridgeConfig
from src.service import TelemetryBridgeService

structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ]
)
logger = structlog.get_logger()


async def main() -> int:
    try:
        config = BridgeConfig.from_env()
    except ValueError:
        logger.exception("Invalid configuration")
        return 1

    try:
        service = await TelemetryBridgeService.create(config)
    except BusConnectionError:
        logger.exception("Cannot create service", nats_url=config.nats_url)
        return 1

    try:
        await service.start()
    except OSError:
        logger.exception("Cannot start HTTP listener", host=config.host, port=config.port)
        await service.stop()
        return 1

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()
    loop.add_signal_handler(signal.SIGTERM, stop_event.set)
    loop.add_signal_handler(signal.SIGINT, stop_event.set)

    await stop_event.wait()
    await service.stop()
    logger.info("Telemetry bridge shut down gracefully")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
