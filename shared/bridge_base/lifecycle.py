import asyncio
from abc import ABC, abstractmethod
from enum import Enum

import structlog

from .errors import ServiceStateError

logger = structlog.get_logger()


class ServiceState(str, Enum):
    CREATED = "CREATED"
    STARTED = "STARTED"
    STOPPED = "STOPPED"


class BaseService(ABC):
    """Base class for long-running services.

    Implements the one-way lifecycle:
        CREATED → STARTED → STOPPED
        CREATED → STOPPED

    A stopped service is never restarted; construct a new one instead.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._state = ServiceState.CREATED
        self._lock = asyncio.Lock()

    @property
    def state(self) -> ServiceState:
        return self._state

    async def start(self) -> None:
        async with self._lock:
            if self._state == ServiceState.STOPPED:
                raise ServiceStateError(f"Service {self.name} is stopped and cannot be restarted")
            if self._state == ServiceState.STARTED:
                logger.warning("start() ignored", service=self.name, state=self._state)
                return
            await self._on_start()
            self._state = ServiceState.STARTED

    async def stop(self) -> None:
        async with self._lock:
            if self._state == ServiceState.STOPPED:
                return
            try:
                await self._on_stop()
            finally:
                self._state = ServiceState.STOPPED
            logger.info("Service stopped", service=self.name)

    @abstractmethod
    async def _on_start(self) -> None:
        """Hook called during transition CREATED → STARTED."""

    @abstractmethod
    async def _on_stop(self) -> None:
        """Hook called during transition to STOPPED. Must not raise."""
