import json
from dataclasses import asdict, dataclass

from .errors import DecodeError

SUBJECT_DEVICE_TELEMETRY = "device.{device_id}.telemetry"

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_decoder = json.JSONDecoder()


def _field(data: dict, name: str, kind: type, default):
    value = data.get(name)
    if value is None:
        return default
    # bool is an int subclass but never a valid numeric field
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise DecodeError(f"field {name!r} must be {kind.__name__}, got {type(value).__name__}")
    if kind is int and not INT64_MIN <= value <= INT64_MAX:
        raise DecodeError(f"field {name!r} is out of int64 range")
    return value


@dataclass(frozen=True)
class TelemetryReading:
    device_id: int
    health: str
    gps_level: int

    @classmethod
    def from_dict(cls, data) -> "TelemetryReading":
        """Build a reading from a decoded JSON body.

        Missing or null fields fall back to zero values, as does a null
        body. Present fields must carry the right JSON type, and integers
        must fit in 64 bits.

        Raises:
            DecodeError: If the body is not an object or a field has the wrong type.
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise DecodeError(f"telemetry body must be a JSON object, got {type(data).__name__}")
        return cls(
            device_id=_field(data, "device_id", int, 0),
            health=_field(data, "health", str, ""),
            gps_level=_field(data, "gps_level", int, 0),
        )

    @classmethod
    def from_json(cls, raw: bytes | str) -> "TelemetryReading":
        """Decode the first JSON value of a request body; anything after it is ignored."""
        try:
            text = raw.decode() if isinstance(raw, bytes) else raw
            data, _ = _decoder.raw_decode(text.lstrip(" \t\n\r"))
        except ValueError as exc:
            raise DecodeError(f"telemetry body is not valid JSON: {exc}") from exc
        return cls.from_dict(data)

    @property
    def subject(self) -> str:
        return SUBJECT_DEVICE_TELEMETRY.format(device_id=self.device_id)

    def to_dict(self) -> dict:
        return asdict(self)

    def to_message(self) -> bytes:
        """Encode the outbound bus payload."""
        return json.dumps(self.to_dict()).encode()
