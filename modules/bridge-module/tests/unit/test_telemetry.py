import json

import pytest

from bridge_base.errors import DecodeError
from bridge_base.telemetry import TelemetryReading


VALID_BODY = {"device_id": 42, "health": "HEALTHY", "gps_level": 7}


class TestDecode:
    def test_from_json_builds_reading(self) -> None:
        reading = TelemetryReading.from_json(json.dumps(VALID_BODY).encode())
        assert reading == TelemetryReading(device_id=42, health="HEALTHY", gps_level=7)

    def test_missing_fields_default_to_zero_values(self) -> None:
        reading = TelemetryReading.from_dict({"device_id": 3})
        assert reading.health == ""
        assert reading.gps_level == 0

    def test_unknown_fields_are_ignored(self) -> None:
        reading = TelemetryReading.from_dict({**VALID_BODY, "firmware": "1.2.3"})
        assert reading.device_id == 42

    def test_malformed_json_raises(self) -> None:
        with pytest.raises(DecodeError):
            TelemetryReading.from_json(b'{"device_id": 1,')

    def test_non_utf8_body_raises(self) -> None:
        with pytest.raises(DecodeError):
            TelemetryReading.from_json(b"\xff\xfe\x00")

    def test_non_object_body_raises(self) -> None:
        with pytest.raises(DecodeError, match="JSON object"):
            TelemetryReading.from_json(b"[1, 2, 3]")

    @pytest.mark.parametrize(
        "body",
        [
            {"device_id": "42", "health": "OK", "gps_level": 1},
            {"device_id": 42, "health": 5, "gps_level": 1},
            {"device_id": 42, "health": "OK", "gps_level": 1.5},
            {"device_id": True, "health": "OK", "gps_level": 1},
            {"device_id": 2**63, "health": "OK", "gps_level": 1},
            {"device_id": 1, "health": "OK", "gps_level": -(2**63) - 1},
        ],
    )
    def test_wrong_field_types_raise(self, body: dict) -> None:
        with pytest.raises(DecodeError):
            TelemetryReading.from_dict(body)

    def test_decode_error_is_a_value_error(self) -> None:
        with pytest.raises(ValueError):
            TelemetryReading.from_json(b"not json")

    def test_null_fields_default_to_zero_values(self) -> None:
        reading = TelemetryReading.from_json(b'{"device_id": null, "health": null, "gps_level": 4}')
        assert reading == TelemetryReading(device_id=0, health="", gps_level=4)

    def test_null_body_is_a_zero_reading(self) -> None:
        assert TelemetryReading.from_json(b"null") == TelemetryReading(0, "", 0)

    def test_data_after_first_value_is_ignored(self) -> None:
        body = json.dumps(VALID_BODY).encode() + b'\n{"device_id": 99} trailing'
        assert TelemetryReading.from_json(body).device_id == 42

    def test_leading_whitespace_is_accepted(self) -> None:
        assert TelemetryReading.from_json(b"\n  " + json.dumps(VALID_BODY).encode()).gps_level == 7

    def test_empty_body_raises(self) -> None:
        with pytest.raises(DecodeError):
            TelemetryReading.from_json(b"")

    def test_int64_bounds_are_accepted(self) -> None:
        reading = TelemetryReading.from_dict({"device_id": 2**63 - 1, "gps_level": -(2**63)})
        assert reading.subject == f"device.{2**63 - 1}.telemetry"


class TestEncode:
    def test_subject_is_keyed_by_device_id(self) -> None:
        assert TelemetryReading(7, "OK", 1).subject == "device.7.telemetry"

    def test_message_has_same_fields_as_request(self) -> None:
        reading = TelemetryReading.from_dict(VALID_BODY)
        assert json.loads(reading.to_message()) == VALID_BODY

    def test_reading_is_immutable(self) -> None:
        reading = TelemetryReading(1, "OK", 2)
        with pytest.raises(AttributeError):
            reading.device_id = 3
