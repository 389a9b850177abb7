"""Telemetry ingestion endpoint.

Decodes a ``POST /telemetry`` body, publishes it on the device's subject and
answers only after the publish call has returned:

  200  published or buffered by the bus client
  400  method other than POST
  500  body could not be decoded, or the bus refused the message
"""

import structlog
from aiohttp import web

from bridge_base.bus import BaseBusConnection
from bridge_base.errors import DecodeError, PublishError
from bridge_base.telemetry import TelemetryReading

logger = structlog.get_logger()

TELEMETRY_PATH = "/telemetry"


def publish_telemetry_endpoint(bus: BaseBusConnection):
    async def handle(request: web.Request) -> web.Response:
        if request.method != "POST":
            return web.Response(status=400)

        try:
            reading = TelemetryReading.from_json(await request.read())
        except DecodeError as exc:
            # Undecodable input is reported as a server error, not 400.
            logger.warning("Cannot decode telemetry request", error=str(exc))
            return web.Response(status=500)

        try:
            await bus.publish(reading.subject, reading.to_message())
        except PublishError as exc:
            logger.warning(
                "Cannot publish telemetry message",
                subject=reading.subject,
                device_id=reading.device_id,
                error=str(exc),
            )
            return web.Response(status=500)

        logger.debug("Telemetry forwarded", subject=reading.subject, device_id=reading.device_id)
        return web.Response(status=200)

    return handle


def create_app(bus: BaseBusConnection) -> web.Application:
    app = web.Application()
    app.router.add_route("*", TELEMETRY_PATH, publish_telemetry_endpoint(bus))
    return app
