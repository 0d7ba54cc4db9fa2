"""JSON encoding and decoding of :class:`~orsf.core.document.SetupDocument`.

Field names are the wire keys, except ``Car.car_class`` which travels as
``class``. ``None`` values are omitted on encode and ``null`` decodes as
absent. Unknown keys are ignored. Decoding fails hard on malformed JSON, on
wrongly typed values and on any ``schema`` other than ``orsf://v1``.
"""

from __future__ import annotations

import json
import math
from dataclasses import fields, is_dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .document import (
    LEAF_KIND,
    SCHEMA_ID,
    Aerodynamics,
    Brakes,
    Car,
    Context,
    CornerSuspension,
    Drivetrain,
    Electronics,
    Fuel,
    Gearing,
    JsonValue,
    Metadata,
    Setup,
    SetupDocument,
    Strategy,
    Suspension,
    Tires,
)

__all__ = [
    "DocumentDecodeError",
    "SchemaVersionError",
    "document_from_dict",
    "document_to_dict",
    "dump",
    "dumps",
    "load",
    "loads",
]

PathLike = Union[str, Path]


class DocumentDecodeError(ValueError):
    """Raised when a payload cannot be decoded into a setup document."""


class SchemaVersionError(DocumentDecodeError):
    """Raised when the payload does not declare ``orsf://v1``."""


_WIRE_NAMES: Mapping[type, Mapping[str, str]] = {Car: {"car_class": "class"}}

# Non-numeric fields that are not plain strings. Numeric leaves are found
# through their field metadata.
_FIELD_KINDS: Mapping[type, Mapping[str, Any]] = {
    SetupDocument: {
        "metadata": Metadata,
        "car": Car,
        "context": Context,
        "setup": Setup,
        "compat": "json_map",
    },
    Metadata: {"tags": "str_list"},
    Context: {"ambient_temp_c": float, "track_temp_c": float, "wetness": float},
    Setup: {
        "aero": Aerodynamics,
        "suspension": Suspension,
        "tires": Tires,
        "drivetrain": Drivetrain,
        "gearing": Gearing,
        "brakes": Brakes,
        "electronics": Electronics,
        "fuel": Fuel,
        "strategy": Strategy,
    },
    Suspension: {corner: CornerSuspension for corner in Suspension.CORNERS},
    Gearing: {"gear_ratios": "float_list"},
    Strategy: {"custom": "json_map"},
}


def _field_kind(cls: type, item: Any) -> Any:
    if LEAF_KIND in item.metadata:
        return item.metadata[LEAF_KIND]
    return _FIELD_KINDS.get(cls, {}).get(item.name, str)


def _wire_name(cls: type, name: str) -> str:
    return _WIRE_NAMES.get(cls, {}).get(name, name)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _encode(instance: Any) -> Dict[str, Any]:
    cls = type(instance)
    payload: Dict[str, Any] = {}
    for item in fields(cls):
        value = getattr(instance, item.name)
        if value is None:
            continue
        kind = _field_kind(cls, item)
        if is_dataclass(value):
            encoded: Any = _encode(value)
        elif kind is float:
            encoded = float(value)
        elif kind is int:
            encoded = int(value)
        elif kind == "float_list":
            encoded = [float(entry) for entry in value]
        elif kind in ("str_list", "json_map"):
            encoded = json.loads(json.dumps(value))
        else:
            encoded = value
        payload[_wire_name(cls, item.name)] = encoded
    return payload


def document_to_dict(doc: SetupDocument) -> Dict[str, Any]:
    """Return a JSON-ready mapping for ``doc`` with ``None`` values omitted."""

    return _encode(doc)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _type_error(path: str, expected: str, value: Any) -> DocumentDecodeError:
    return DocumentDecodeError(f"{path}: expected {expected}, got {type(value).__name__}")


def _number(path: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _type_error(path, "number", value)
    number = float(value)
    if not math.isfinite(number):
        raise DocumentDecodeError(f"{path}: expected finite number, got {value!r}")
    return number


def _integer(path: str, value: Any) -> int:
    number = _number(path, value)
    if not math.isfinite(number) or not number.is_integer():
        raise DocumentDecodeError(f"{path}: expected integer, got {value!r}")
    return int(number)


def _json_value(path: str, value: Any) -> JsonValue:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, list):
        return [_json_value(f"{path}[{index}]", entry) for index, entry in enumerate(value)]
    if isinstance(value, dict):
        return _json_map(path, value)
    raise _type_error(path, "JSON value", value)


def _json_map(path: str, value: Any) -> Dict[str, JsonValue]:
    if not isinstance(value, dict):
        raise _type_error(path, "object", value)
    result: Dict[str, JsonValue] = {}
    for key, entry in value.items():
        if not isinstance(key, str):
            raise _type_error(f"{path} key", "string", key)
        result[key] = _json_value(f"{path}.{key}", entry)
    return result


def _decode_value(path: str, kind: Any, value: Any) -> Any:
    if isinstance(kind, type) and is_dataclass(kind):
        return _decode(kind, value, path)
    if kind is float:
        return _number(path, value)
    if kind is int:
        return _integer(path, value)
    if kind == "float_list":
        if not isinstance(value, list):
            raise _type_error(path, "array", value)
        return [_number(f"{path}[{index}]", entry) for index, entry in enumerate(value)]
    if kind == "str_list":
        if not isinstance(value, list):
            raise _type_error(path, "array", value)
        for index, entry in enumerate(value):
            if not isinstance(entry, str):
                raise _type_error(f"{path}[{index}]", "string", entry)
        return list(value)
    if kind == "json_map":
        return _json_map(path, value)
    if not isinstance(value, str):
        raise _type_error(path, "string", value)
    return value


def _decode(cls: type, payload: Any, path: str) -> Any:
    if not isinstance(payload, dict):
        raise _type_error(path or "document", "object", payload)
    values: Dict[str, Any] = {}
    for item in fields(cls):
        wire = _wire_name(cls, item.name)
        raw = payload.get(wire)
        if raw is None:
            continue
        child = f"{path}.{wire}" if path else wire
        values[item.name] = _decode_value(child, _field_kind(cls, item), raw)
    return cls(**values)


def document_from_dict(payload: Mapping[str, Any]) -> SetupDocument:
    """Build a :class:`SetupDocument` from a decoded JSON mapping."""

    if not isinstance(payload, dict):
        raise _type_error("document", "object", payload)
    schema = payload.get("schema")
    if schema is None:
        raise SchemaVersionError(f"Missing schema (expected {SCHEMA_ID})")
    if schema != SCHEMA_ID:
        raise SchemaVersionError(f"Invalid schema version: {schema} (expected {SCHEMA_ID})")
    return _decode(SetupDocument, payload, "")


def dumps(doc: SetupDocument, indent: Optional[int] = None) -> str:
    """Encode ``doc`` as JSON; non-finite numbers raise :class:`ValueError`."""

    return json.dumps(document_to_dict(doc), indent=indent, ensure_ascii=False, allow_nan=False)


def loads(text: Union[str, bytes]) -> SetupDocument:
    """Decode JSON ``text`` into a document.

    Raises :class:`DocumentDecodeError` for malformed JSON as well.
    """

    try:
        payload = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DocumentDecodeError(f"Failed to parse JSON: {exc}") from exc
    return document_from_dict(payload)


def load(path: PathLike) -> SetupDocument:
    return loads(Path(path).read_text(encoding="utf-8"))


def dump(doc: SetupDocument, path: PathLike, indent: Optional[int] = 2) -> Path:
    target = Path(path)
    target.write_text(dumps(doc, indent=indent) + "\n", encoding="utf-8")
    return target
