"""Message bus connection abstraction.

A single ``BusConnection`` owns the outbound link to NATS for the lifetime of
a service instance. Reconnect, backoff and buffering while disconnected are
left to the nats-py client and configured through ``ReconnectOptions``:

  - while the client is reconnecting, ``publish`` appends to its pending
    buffer and succeeds
  - once the reconnect budget is spent the client closes and every later
    ``publish`` fails; the connection never comes back on its own
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

import structlog
from nats.aio.client import Client as NATS
from nats.errors import Error as NatsError

from .errors import BusConnectionError, DrainError, PublishError

logger = structlog.get_logger()

DEFAULT_URL = "nats://127.0.0.1:4222"
CLOSE_TIMEOUT_S = 1.0


class BusState(str, Enum):
    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"
    DRAINING = "DRAINING"
    CLOSED = "CLOSED"


@dataclass(frozen=True)
class ReconnectOptions:
    """Connect-time policy handed to the bus client.

    Args:
        max_reconnect_attempts: Reconnect budget after a drop; -1 retries forever.
        reconnect_time_wait: Seconds between reconnect attempts.
        connect_timeout: Seconds allowed for a single connect attempt.
        pending_size: Bytes buffered while disconnected before publish fails.
        initial_connect_timeout: Deadline for the connect performed at startup.
        name: Client name reported to the server.
    """

    max_reconnect_attempts: int = 60
    reconnect_time_wait: float = 2.0
    connect_timeout: float = 2.0
    pending_size: int = 2 * 1024 * 1024
    initial_connect_timeout: float = 5.0
    name: str = "telemetry-bridge"


class BaseBusConnection(ABC):
    @property
    @abstractmethod
    def state(self) -> BusState: ...

    @abstractmethod
    async def connect(self, address: str, options: ReconnectOptions) -> None: ...

    @abstractmethod
    async def publish(self, subject: str, payload: bytes) -> None: ...

    @abstractmethod
    async def drain(self, timeout: float) -> None: ...


class NatsBusConnection(BaseBusConnection):
    """Bus connection backed by a nats-py client."""

    def __init__(self, client: NATS | None = None) -> None:
        self._client = client or NATS()
        self._address: str | None = None

    @property
    def state(self) -> BusState:
        if self._client.is_closed:
            return BusState.CLOSED
        if self._client.is_draining:
            return BusState.DRAINING
        if self._client.is_connected:
            return BusState.CONNECTED
        if self._client.is_reconnecting or self._client.is_connecting:
            return BusState.CONNECTING
        return BusState.DISCONNECTED

    async def connect(self, address: str, options: ReconnectOptions) -> None:
        """Connect to the bus, failing if it is unreachable right now.

        Raises:
            BusConnectionError: If no connection is established before
                ``options.initial_connect_timeout`` expires.
        """
        self._address = address
        try:
            await asyncio.wait_for(
                self._client.connect(
                    servers=[address],
                    name=options.name,
                    allow_reconnect=True,
                    max_reconnect_attempts=options.max_reconnect_attempts,
                    reconnect_time_wait=options.reconnect_time_wait,
                    connect_timeout=options.connect_timeout,
                    pending_size=options.pending_size,
                    error_cb=self._on_error,
                    disconnected_cb=self._on_disconnected,
                    reconnected_cb=self._on_reconnected,
                    closed_cb=self._on_closed,
                ),
                timeout=options.initial_connect_timeout,
            )
        except (NatsError, OSError, asyncio.TimeoutError) as exc:
            await self._abandon()
            raise BusConnectionError(f"Cannot connect to bus at {address}: {exc!r}") from exc

        logger.info(
            "Connected to bus",
            address=address,
            max_reconnect_attempts=options.max_reconnect_attempts,
            reconnect_time_wait=options.reconnect_time_wait,
        )

    async def publish(self, subject: str, payload: bytes) -> None:
        """Hand a message to the client.

        Raises:
            PublishError: If the client is closed, draining, or its pending
                buffer is full.
        """
        try:
            await self._client.publish(subject, payload)
        except (NatsError, OSError) as exc:
            raise PublishError(f"Cannot publish to {subject}: {exc!r}") from exc

    async def drain(self, timeout: float) -> None:
        """Flush buffered messages and close the connection.

        On any failure the client is closed anyway, so no socket or reconnect
        loop outlives the call. The whole call, close included, returns within
        ``timeout``.

        Raises:
            DrainError: If the drain fails or does not finish within ``timeout``.
        """
        close_budget = min(CLOSE_TIMEOUT_S, timeout / 4)
        try:
            await asyncio.wait_for(self._client.drain(), timeout=timeout - close_budget)
        except asyncio.TimeoutError as exc:
            await self._abandon(close_budget)
            raise DrainError(f"Bus drain did not finish within {timeout}s") from exc
        except (NatsError, OSError) as exc:
            await self._abandon(close_budget)
            raise DrainError(f"Bus drain failed: {exc!r}") from exc
        logger.info("Bus connection drained", address=self._address)

    async def _abandon(self, timeout: float = CLOSE_TIMEOUT_S) -> None:
        # Stop a half-open or stuck client from reconnecting in the background.
        try:
            await asyncio.wait_for(self._client.close(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Bus client did not close in time", address=self._address, timeout_s=timeout)
        except (NatsError, OSError) as exc:
            logger.warning("Could not close failed bus client", error=repr(exc))

    # ── nats-py callbacks ──────────────────────────────────────────────────────

    async def _on_error(self, exc: Exception) -> None:
        logger.warning("Bus client error", address=self._address, error=repr(exc))

    async def _on_disconnected(self) -> None:
        logger.warning("Bus disconnected", address=self._address)

    async def _on_reconnected(self) -> None:
        logger.info("Bus reconnected", address=self._address)

    async def _on_closed(self) -> None:
        logger.info("Bus connection closed", address=self._address)


async def connect(address: str = DEFAULT_URL, options: ReconnectOptions | None = None) -> NatsBusConnection:
    """Create and connect the bus connection used by one service instance."""
    connection = NatsBusConnection()
    await connection.connect(address, options or ReconnectOptions())
    return connection
