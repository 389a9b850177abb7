from .bus import BaseBusConnection, BusState, NatsBusConnection, ReconnectOptions, connect
from .errors import BridgeError, BusConnectionError, DecodeError, DrainError, PublishError, ServiceStateError
from .lifecycle import BaseService, ServiceState
from .telemetry import TelemetryReading

__all__ = [
    "BaseBusConnection",
    "BusState",
    "NatsBusConnection",
    "ReconnectOptions",
    "connect",
    "BridgeError",
    "BusConnectionError",
    "DecodeError",
    "DrainError",
    "PublishError",
    "ServiceStateError",
    "BaseService",
    "ServiceState",
    "TelemetryReading",
]
