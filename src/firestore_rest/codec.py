"""Convert Python values to and from Firestore REST tagged values.

Firestore REST represents every field as an object with exactly one
populated tag (``stringValue``, ``integerValue``, ``mapValue`` ...). The
functions here are pure and never raise: values the wire format has no tag
for are sent as their string form.
"""

import math
import re
import sys
from collections.abc import Mapping
from datetime import UTC, date, datetime, time
from typing import Any, Union

from firestore_rest.paths import get_document_id

# Native side of a document field
FieldValue = Union[
    str,
    int,
    float,
    bool,
    None,
    datetime,
    list["FieldValue"],
    dict[str, "FieldValue"],
]

# Wire side of a document field
WireValue = dict[str, Any]

MAX_SAFE_INTEGER = 2**53 - 1
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_FLOAT_MAX_INT = int(sys.float_info.max)

# Firestore returns up to nanosecond precision; datetime keeps microseconds
_FRACTION_RE = re.compile(r"\.(\d+)")


def _double(value: float) -> WireValue:
    # JSON has no NaN or Infinity; the REST API takes them as strings
    if math.isnan(value):
        return {"doubleValue": "NaN"}
    if math.isinf(value):
        return {"doubleValue": "Infinity" if value > 0 else "-Infinity"}
    return {"doubleValue": value}


def _format_timestamp(value: date) -> str:
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    else:
        value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _parse_timestamp(value: str) -> datetime:
    value = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, 1)
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def encode_value(value: Any) -> WireValue:
    """Convert a Python value to a Firestore tagged value.

    Args:
        value: Any Python value.

    Returns:
        Dict with exactly one Firestore value tag.
    """
    if isinstance(value, date):
        return {"timestampValue": _format_timestamp(value)}
    if isinstance(value, str):
        return {"stringValue": value}
    # bool is a subclass of int
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        if _INT64_MIN <= value <= _INT64_MAX:
            return {"integerValue": str(value)}
        if abs(value) > _FLOAT_MAX_INT:
            return _double(math.inf if value > 0 else -math.inf)
        return _double(float(value))
    if isinstance(value, float):
        if value.is_integer() and abs(value) <= MAX_SAFE_INTEGER:
            return {"integerValue": str(int(value))}
        return _double(value)
    if value is None:
        return {"nullValue": None}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(item) for item in value]}}
    if isinstance(value, Mapping):
        return {
            "mapValue": {
                "fields": {str(k): encode_value(v) for k, v in value.items()}
            }
        }
    return {"stringValue": str(value)}


def decode_value(wire: WireValue) -> Any:
    """Convert a Firestore tagged value back to a Python value.

    Args:
        wire: Tagged value as returned by the REST API.

    Returns:
        Python value, or None when no known tag is present.
    """
    if "stringValue" in wire:
        return wire["stringValue"]
    if "integerValue" in wire:
        return int(wire["integerValue"])
    if "doubleValue" in wire:
        return float(wire["doubleValue"])
    if "booleanValue" in wire:
        return wire["booleanValue"]
    if "nullValue" in wire:
        return None
    if "timestampValue" in wire:
        return _parse_timestamp(wire["timestampValue"])
    if "mapValue" in wire:
        fields = (wire["mapValue"] or {}).get("fields") or {}
        return {k: decode_value(v) for k, v in fields.items()}
    if "arrayValue" in wire:
        values = (wire["arrayValue"] or {}).get("values") or []
        return [decode_value(v) for v in values]
    return None


def encode_document(data: Mapping[str, Any]) -> dict[str, Any]:
    """Convert a dict to a Firestore document body.

    Args:
        data: Document fields.

    Returns:
        ``{"fields": {...}}`` ready to be sent as a request body.
    """
    return {"fields": {str(k): encode_value(v) for k, v in data.items()}}


def decode_document(doc: Mapping[str, Any]) -> dict[str, Any]:
    """Convert a Firestore document resource to a dict with its ``id``.

    Args:
        doc: Document resource with ``name`` and optional ``fields``.

    Returns:
        Decoded fields plus ``id`` taken from the resource name.
    """
    doc_id = get_document_id(doc.get("name"))
    fields = doc.get("fields")
    if not fields:
        return {"id": doc_id}

    result = {k: decode_value(v) for k, v in fields.items()}
    result["id"] = doc_id
    return result
