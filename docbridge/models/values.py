"""Tagged value model used at the boundary between native documents and rows."""

from __future__ import annotations

import datetime
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from typing import Any

from bson import Binary, Decimal128, ObjectId, Timestamp


class ValueKind(str, Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    BYTES = "bytes"
    TIMESTAMP = "timestamp"
    MAP = "map"
    LIST = "list"


def normalize_value(value: Any) -> Any:
    """Convert a driver value into one of the plain Python types behind :class:`ValueKind`."""
    if value is None or isinstance(value, (bool, str, float)):
        return value
    if isinstance(value, int):
        # bson.Int64 is an int subclass
        return int(value)
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, Decimal128):
        return float(value.to_decimal())
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Binary):
        return bytes(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, Timestamp):
        return value.as_datetime()
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value
    if isinstance(value, Mapping):
        return {str(key): normalize_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [normalize_value(item) for item in value]
    return str(value)


def value_kind(value: Any) -> ValueKind:
    """Classify an already normalised value."""
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, bytes):
        return ValueKind.BYTES
    if isinstance(value, (datetime.datetime, datetime.date)):
        return ValueKind.TIMESTAMP
    if isinstance(value, dict):
        return ValueKind.MAP
    if isinstance(value, list):
        return ValueKind.LIST
    raise TypeError(f"Value of type {type(value).__name__} is not normalised")


__all__ = ["ValueKind", "normalize_value", "value_kind"]
