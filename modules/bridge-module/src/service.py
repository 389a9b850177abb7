"""Telemetry bridge service.

Owns one bus connection and one HTTP listener. The bus is connected before
the service object exists, so a service that was constructed can always
accept traffic once started. Shutdown stops the listener first, then drains
the bus, both inside a single ``stop_timeout_s`` budget.
"""

import asyncio

import structlog
from aiohttp import web

from bridge_base.bus import BaseBusConnection, connect
from bridge_base.errors import DrainError
from bridge_base.lifecycle import BaseService

from .config import BridgeConfig
from .endpoint import create_app

logger = structlog.get_logger()


class TelemetryBridgeService(BaseService):
    """HTTP → bus bridge for device telemetry.

    Args:
        config: Listener address and shutdown budget.
        bus: Already connected bus connection; the service takes ownership.
    """

    def __init__(self, config: BridgeConfig, bus: BaseBusConnection) -> None:
        super().__init__("telemetry-bridge")
        self.config = config
        self.bus = bus
        self._app = create_app(bus)
        self._runner: web.AppRunner | None = None

    @classmethod
    async def create(cls, config: BridgeConfig) -> "TelemetryBridgeService":
        """Connect to the bus and build a service around the connection.

        Raises:
            BusConnectionError: If the bus is unreachable.
        """
        bus = await connect(config.nats_url, config.reconnect_options())
        return cls(config, bus)

    @property
    def port(self) -> int | None:
        """Port the listener is bound to, or None before start."""
        if self._runner is None:
            return None
        for address in self._runner.addresses:
            if isinstance(address, tuple):
                return address[1]
        return None

    async def _on_start(self) -> None:
        runner = web.AppRunner(self._app, access_log=None, shutdown_timeout=self.config.stop_timeout_s)
        await runner.setup()
        try:
            site = web.TCPSite(runner, self.config.host, self.config.port)
            await site.start()
        except OSError:
            await runner.cleanup()
            raise
        self._runner = runner
        logger.info("Telemetry bridge ready", host=self.config.host, port=self.port)

    async def _on_stop(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.config.stop_timeout_s

        if self._runner is not None:
            try:
                await asyncio.wait_for(self._runner.cleanup(), timeout=deadline - loop.time())
                logger.info("HTTP listener stopped")
            except asyncio.TimeoutError:
                logger.error("HTTP listener did not stop in time", timeout_s=self.config.stop_timeout_s)
            except Exception:
                logger.exception("Error during HTTP listener shutdown")
            self._runner = None

        remaining = max(deadline - loop.time(), 0.0)
        try:
            await self.bus.drain(remaining)
        except DrainError as exc:
            logger.error("Error during bus drain", error=str(exc))
