"""
Tests for EDM types.

Covers type inference, wire encoding and annotation-driven decoding.
"""

import base64
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from aztables.table.exceptions import DecodeError
from aztables.table.types import (
    EdmType,
    TypedValue,
    decode_value,
    encode_value,
    format_datetime,
    infer_type,
    parse_datetime,
)


class TestEdmType:
    """Test EDM type enum and methods."""

    def test_wire_strings(self):
        """Test members carry their wire strings."""
        assert EdmType.INT32.value == "Edm.Int32"
        assert EdmType.INT64.value == "Edm.Int64"
        assert EdmType.DATETIME.value == "Edm.DateTime"
        assert EdmType.BINARY.value == "Edm.Binary"
        assert len(EdmType) == 8

    def test_from_wire(self):
        """Test lookup by wire string."""
        assert EdmType.from_wire("Edm.Guid") is EdmType.GUID
        assert EdmType.from_wire("Edm.Decimal") is None
        assert EdmType.from_wire(None) is None

    def test_only_string_skips_annotation(self):
        """Test that String is the only type without a sidecar."""
        assert not EdmType.STRING.needs_annotation()
        for edm_type in EdmType:
            if edm_type is not EdmType.STRING:
                assert edm_type.needs_annotation()

    def test_typed_value_repr(self):
        """Test TypedValue representation."""
        assert repr(TypedValue(42, EdmType.INT32)) == "TypedValue(42, Edm.Int32)"


class TestInferType:
    """Test type inference from Python values."""

    def test_bool_before_int(self):
        """Test booleans are not mistaken for integers."""
        assert infer_type(True) == EdmType.BOOLEAN
        assert infer_type(False) == EdmType.BOOLEAN

    @pytest.mark.parametrize("value", [0, 1, -1, 2147483647, -2147483648])
    def test_int32_range(self, value):
        """Test integers inside the signed 32-bit range."""
        assert infer_type(value) == EdmType.INT32

    @pytest.mark.parametrize("value", [2147483648, -2147483649, 2 ** 62])
    def test_int64_range(self, value):
        """Test integers outside the signed 32-bit range."""
        assert infer_type(value) == EdmType.INT64

    def test_other_types(self):
        """Test float, datetime, bytes and UUID inference."""
        assert infer_type(0.5) == EdmType.DOUBLE
        assert infer_type(datetime.now(timezone.utc)) == EdmType.DATETIME
        assert infer_type(b"\x00\x01") == EdmType.BINARY
        assert infer_type(uuid.uuid4()) == EdmType.GUID

    def test_strings_are_not_inspected(self):
        """Test numeric-looking strings stay strings."""
        assert infer_type("42") == EdmType.STRING
        assert infer_type("true") == EdmType.STRING
        assert infer_type("2025-03-14T15:36:40Z") == EdmType.STRING

    def test_unknown_defaults_to_string(self):
        """Test fallback for unknown types."""
        assert infer_type(None) == EdmType.STRING
        assert infer_type([1, 2]) == EdmType.STRING


class TestEncodeValue:
    """Test wire encoding of single values."""

    def test_int64_is_string(self):
        """Test Int64 values are rendered as decimal strings."""
        assert encode_value(2147483648, EdmType.INT64) == "2147483648"

    def test_binary_is_base64(self):
        """Test Binary values are rendered as base64 text."""
        assert encode_value(b"hello", EdmType.BINARY) == "aGVsbG8="
        assert encode_value("hello", EdmType.BINARY) == "aGVsbG8="

    def test_datetime_format(self):
        """Test DateTime rendering with 7 fractional digits."""
        value = datetime(2025, 3, 14, 15, 36, 40, 616953, tzinfo=timezone.utc)
        assert encode_value(value, EdmType.DATETIME) == "2025-03-14T15:36:40.6169530Z"

    def test_datetime_converted_to_utc(self):
        """Test aware datetimes are converted to UTC."""
        value = datetime(2025, 3, 14, 17, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_datetime(value) == "2025-03-14T15:00:00.0000000Z"

    def test_naive_datetime_taken_as_utc(self):
        """Test naive datetimes are rendered as-is."""
        assert format_datetime(datetime(2025, 1, 2, 3, 4, 5)) == "2025-01-02T03:04:05.0000000Z"

    def test_datetime_with_other_type_is_not_formatted(self):
        """Test explicit non-DateTime type skips formatting."""
        value = datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert encode_value(value, EdmType.STRING) is value

    def test_passthrough(self):
        """Test values passed through unchanged."""
        guid = uuid.uuid4()
        assert encode_value(True, EdmType.BOOLEAN) is True
        assert encode_value(1.5, EdmType.DOUBLE) == 1.5
        assert encode_value(7, EdmType.INT32) == 7
        assert encode_value(guid, EdmType.GUID) is guid
        assert encode_value("x", EdmType.STRING) == "x"


class TestDecodeValue:
    """Test annotation-driven decoding."""

    def test_int32(self):
        """Test Int32 conversion."""
        assert decode_value("30", "Edm.Int32") == TypedValue(30, EdmType.INT32)

    def test_boolean(self):
        """Test Boolean conversion from JSON and string forms."""
        assert decode_value(True, "Edm.Boolean").value is True
        assert decode_value("false", "Edm.Boolean").value is False
        assert decode_value("TRUE", "Edm.Boolean").value is True

    def test_boolean_invalid(self):
        """Test invalid Boolean text."""
        with pytest.raises(DecodeError):
            decode_value("maybe", "Edm.Boolean")

    def test_double(self):
        """Test Double conversion, including special values."""
        assert decode_value("0.25", "Edm.Double").value == 0.25
        assert decode_value("Infinity", "Edm.Double").value == float("inf")

    def test_binary(self):
        """Test Binary conversion."""
        decoded = decode_value(base64.b64encode(b"\x00\xffdata").decode(), "Edm.Binary")
        assert decoded == TypedValue(b"\x00\xffdata", EdmType.BINARY)

    def test_binary_invalid(self):
        """Test invalid base64."""
        with pytest.raises(DecodeError):
            decode_value("not base64!", "Edm.Binary")

    def test_int64_and_guid_stay_strings(self):
        """Test Int64 and Guid come back as strings."""
        assert decode_value("2147483648", "Edm.Int64") == TypedValue("2147483648", EdmType.INT64)
        guid = "c9da6455-213d-42c9-9a79-3e9149a57833"
        assert decode_value(guid, "Edm.Guid") == TypedValue(guid, EdmType.GUID)

    def test_unknown_annotation(self):
        """Test unknown annotations force a string."""
        assert decode_value(12, "Edm.Decimal") == TypedValue("12", EdmType.STRING)

    def test_int32_invalid(self):
        """Test invalid Int32 text."""
        with pytest.raises(DecodeError):
            decode_value("abc", "Edm.Int32")


class TestParseDatetime:
    """Test wire datetime parsing."""

    def test_seven_digit_fraction(self):
        """Test the service's 7-digit fraction is truncated to microseconds."""
        parsed = parse_datetime("2025-03-14T15:36:40.6169537Z")
        assert parsed == datetime(2025, 3, 14, 15, 36, 40, 616953, tzinfo=timezone.utc)

    def test_no_fraction(self):
        """Test timestamps without fraction."""
        parsed = parse_datetime("2025-03-14T15:36:40Z")
        assert parsed == datetime(2025, 3, 14, 15, 36, 40, tzinfo=timezone.utc)

    def test_offset(self):
        """Test timestamps with an explicit offset are normalized to UTC."""
        parsed = parse_datetime("2025-03-14T17:36:40.5+02:00")
        assert parsed == datetime(2025, 3, 14, 15, 36, 40, 500000, tzinfo=timezone.utc)
        assert parsed.tzinfo == timezone.utc

    def test_invalid(self):
        """Test malformed timestamps."""
        with pytest.raises(DecodeError):
            parse_datetime("14/03/2025")

    def test_round_trip(self):
        """Test encode then decode preserves microseconds."""
        original = datetime(2024, 2, 29, 23, 59, 59, 999999, tzinfo=timezone.utc)
        decoded = decode_value(encode_value(original, EdmType.DATETIME), "Edm.DateTime")
        assert decoded.value == original
