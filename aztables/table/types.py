"""
OData EDM (Entity Data Model) types for Azure Table Storage entities.

This module implements the wire-level type tags carried in
``<name>@odata.type`` sidecar keys, type inference for Python values and the
conversion of single values to and from their JSON wire representation.

References:
    - OData v3 Primitive Data Types
    - Azure Table Storage Entity Properties
"""

from __future__ import annotations

import base64
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from .exceptions import DecodeError


ODATA_TYPE_SUFFIX = "@odata.type"

INT32_MIN = -2147483648
INT32_MAX = 2147483647

# Fractional seconds are emitted with 7 digits, the last one always 0
DATETIME_WIRE_FORMAT = "%Y-%m-%dT%H:%M:%S.%f0Z"

_DATETIME_PATTERN = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<tz>Z|[+-]\d{2}:?\d{2})?$",
    re.IGNORECASE,
)


class EdmType(Enum):
    """
    Entity Data Model primitive types.

    Represents the set of property types supported by Azure Table Storage.
    The value of each member is its wire string.
    """
    STRING = "Edm.String"
    INT32 = "Edm.Int32"
    INT64 = "Edm.Int64"
    DOUBLE = "Edm.Double"
    BOOLEAN = "Edm.Boolean"
    DATETIME = "Edm.DateTime"
    GUID = "Edm.Guid"
    BINARY = "Edm.Binary"

    @classmethod
    def from_wire(cls, value: Any) -> Optional[EdmType]:
        """Return the member for a wire string, or None if unknown."""
        for member in cls:
            if member.value == value:
                return member
        return None

    def needs_annotation(self) -> bool:
        """String is the wire default and never carries a sidecar key."""
        return self is not EdmType.STRING


@dataclass(frozen=True)
class TypedValue:
    """
    Value with its EDM type.

    Immutable container produced when a property and its sidecar
    annotation are decoded together.
    """
    value: Any
    edm_type: EdmType

    def __repr__(self) -> str:
        return f"TypedValue({self.value!r}, {self.edm_type.value})"


def infer_type(value: Any) -> EdmType:
    """
    Infer EDM type from Python value.

    Strings are never inspected: "42" stays Edm.String.

    Args:
        value: Python value

    Returns:
        Inferred EDM type
    """
    if isinstance(value, bool):
        # Must check bool before int (bool is subclass of int)
        return EdmType.BOOLEAN
    elif isinstance(value, int):
        if INT32_MIN <= value <= INT32_MAX:
            return EdmType.INT32
        else:
            return EdmType.INT64
    elif isinstance(value, float):
        return EdmType.DOUBLE
    elif isinstance(value, datetime):
        return EdmType.DATETIME
    elif isinstance(value, (bytes, bytearray)):
        return EdmType.BINARY
    elif isinstance(value, uuid.UUID):
        return EdmType.GUID
    else:
        return EdmType.STRING


def format_datetime(value: datetime) -> str:
    """
    Render a datetime in the table service wire format.

    Naive values are taken to be UTC; aware values are converted to UTC.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(DATETIME_WIRE_FORMAT)


def parse_datetime(text: str) -> datetime:
    """
    Parse a wire datetime into a timezone-aware UTC datetime.

    The service sends 7 fractional digits; anything past microseconds
    is truncated.

    Raises:
        DecodeError: If the text is not an ISO 8601 timestamp
    """
    match = _DATETIME_PATTERN.match(text.strip())
    if not match:
        raise DecodeError(f"Invalid Edm.DateTime value: {text!r}")

    fraction = (match.group("fraction") or "")[:6].ljust(6, "0")
    tz = match.group("tz") or "Z"
    if tz.upper() == "Z":
        tz = "+00:00"
    elif ":" not in tz:
        tz = f"{tz[:3]}:{tz[3:]}"

    try:
        parsed = datetime.fromisoformat(f"{match.group('base')}.{fraction}{tz}")
    except ValueError as e:
        raise DecodeError(f"Invalid Edm.DateTime value: {text!r}: {e}")
    return parsed.astimezone(timezone.utc)


def encode_value(value: Any, edm_type: EdmType) -> Any:
    """
    Convert a Python value to its wire representation for the given type.

    Int64 becomes a decimal string, Binary becomes base64 text and a
    datetime declared as DateTime becomes the wire timestamp. Everything
    else is handed to the JSON encoder unchanged.
    """
    if edm_type is EdmType.DATETIME and isinstance(value, datetime):
        return format_datetime(value)

    if edm_type is EdmType.BINARY:
        if isinstance(value, str):
            value = value.encode("utf-8")
        return base64.b64encode(bytes(value)).decode("ascii")

    if edm_type is EdmType.INT64:
        return str(value)

    return value


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1"):
            return True
        if lowered in ("false", "0", ""):
            return False
        raise DecodeError(f"Invalid Edm.Boolean value: {value!r}")
    return bool(value)


def _to_float(value: Any) -> float:
    # "NaN", "Infinity" and "-Infinity" are legal wire values
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Invalid Edm.Double value: {value!r}: {e}")


def decode_value(value: Any, wire_type: str) -> TypedValue:
    """
    Convert a wire value according to its ``@odata.type`` annotation.

    Int64, Guid, String and unknown annotations come back as str.

    Raises:
        DecodeError: If the value cannot be converted
    """
    edm_type = EdmType.from_wire(wire_type)

    if edm_type is EdmType.INT32:
        try:
            return TypedValue(int(value), edm_type)
        except (TypeError, ValueError) as e:
            raise DecodeError(f"Invalid Edm.Int32 value: {value!r}: {e}")

    if edm_type is EdmType.BOOLEAN:
        return TypedValue(_to_bool(value), edm_type)

    if edm_type is EdmType.DOUBLE:
        return TypedValue(_to_float(value), edm_type)

    if edm_type is EdmType.BINARY:
        try:
            return TypedValue(base64.b64decode(value or "", validate=True), edm_type)
        except (TypeError, ValueError) as e:
            raise DecodeError(f"Invalid Edm.Binary value: {e}")

    if edm_type is EdmType.DATETIME:
        if isinstance(value, datetime):
            return TypedValue(value, edm_type)
        return TypedValue(parse_datetime(str(value)), edm_type)

    return TypedValue("" if value is None else str(value), edm_type or EdmType.STRING)
