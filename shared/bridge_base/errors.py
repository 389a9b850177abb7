class BridgeError(Exception):
    """Base class for all telemetry bridge errors."""


class BusConnectionError(BridgeError):
    """The bus could not be reached while establishing the connection."""


class PublishError(BridgeError):
    """The bus client refused or could not accept a message."""


class DrainError(BridgeError):
    """Flushing and closing the bus connection failed or timed out."""


class DecodeError(BridgeError, ValueError):
    """An inbound telemetry body could not be decoded."""


class ServiceStateError(BridgeError, RuntimeError):
    """A lifecycle transition was requested from the wrong state."""
