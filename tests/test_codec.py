from __future__ import annotations

import json

import pytest

from orsf.core import codec
from orsf.core.codec import DocumentDecodeError, SchemaVersionError
from orsf.core.document import SCHEMA_ID
from tests.helpers import build_document, build_full_document


def test_encode_omits_absent_values_and_renames_class() -> None:
    doc = build_full_document()
    payload = codec.document_to_dict(doc)
    assert payload["schema"] == SCHEMA_ID
    assert payload["car"]["class"] == "GT3"
    assert "car_class" not in payload["car"]
    assert "variant" not in payload["car"]
    assert "rear_downforce_n" not in payload["setup"]["aero"]
    assert payload["setup"]["gearing"]["gear_ratios"] == [3.5, 2.8, 2.3, 1.9, 1.6]


def test_minimal_document_has_no_optional_sections() -> None:
    payload = codec.document_to_dict(build_document())
    assert set(payload) == {"schema", "metadata", "car", "setup"}
    assert payload["setup"] == {}


def test_dumps_and_loads_preserve_the_document(tmp_path) -> None:
    doc = build_full_document()
    assert codec.loads(codec.dumps(doc)) == doc
    target = codec.dump(doc, tmp_path / "setup.json")
    assert codec.load(target) == doc
    assert codec.loads(target.read_bytes()) == doc


def test_nulls_and_unknown_keys_are_ignored() -> None:
    payload = {
        "schema": SCHEMA_ID,
        "metadata": {"id": "a", "name": "b", "created_at": "2024-01-01T00:00:00Z", "notes": None},
        "car": {"make": "X", "model": "Y", "class": "GT3", "wheels": 4},
        "context": None,
        "setup": {"electronics": {"tc_level": 3.0}},
        "extension": {"anything": True},
    }
    doc = codec.document_from_dict(payload)
    assert doc.metadata.notes is None
    assert doc.car.car_class == "GT3"
    assert doc.context is None
    assert doc.setup.electronics.tc_level == 3
    assert isinstance(doc.setup.electronics.tc_level, int)


def test_missing_sections_decode_to_defaults() -> None:
    doc = codec.document_from_dict({"schema": SCHEMA_ID})
    assert doc.metadata.id == ""
    assert doc.car.make == ""
    assert doc.setup.aero is None


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"schema": "orsf://v2"},
    ],
)
def test_schema_must_be_v1(payload) -> None:
    with pytest.raises(SchemaVersionError):
        codec.document_from_dict(payload)


def test_invalid_schema_message() -> None:
    with pytest.raises(SchemaVersionError, match=r"Invalid schema version: orsf://v2 \(expected orsf://v1\)"):
        codec.document_from_dict({"schema": "orsf://v2"})


@pytest.mark.parametrize(
    "setup",
    [
        {"aero": {"front_wing": "high"}},
        {"aero": {"front_wing": True}},
        {"electronics": {"tc_level": 2.5}},
        {"gearing": {"gear_ratios": "3.5"}},
        {"gearing": {"gear_ratios": [3.5, None]}},
        {"aero": []},
    ],
)
def test_wrong_types_fail_to_decode(setup) -> None:
    with pytest.raises(DocumentDecodeError):
        codec.document_from_dict({"schema": SCHEMA_ID, "setup": setup})


def test_compat_must_hold_json_values() -> None:
    doc = codec.document_from_dict({"schema": SCHEMA_ID, "compat": {"sim": {"ids": [1, "a", None]}}})
    assert doc.compat == {"sim": {"ids": [1, "a", None]}}
    with pytest.raises(DocumentDecodeError):
        codec.document_from_dict({"schema": SCHEMA_ID, "compat": ["not", "an", "object"]})


def test_malformed_json_is_a_decode_error() -> None:
    with pytest.raises(DocumentDecodeError, match="Failed to parse JSON"):
        codec.loads("{not json")
    with pytest.raises(DocumentDecodeError):
        codec.loads(json.dumps([1, 2, 3]))


def test_non_finite_numbers_are_not_json() -> None:
    doc = build_full_document()
    doc.setup.aero.front_wing = float("inf")
    with pytest.raises(ValueError):
        codec.dumps(doc)
    with pytest.raises(DocumentDecodeError, match="finite"):
        codec.loads(
            '{"schema": "orsf://v1", "metadata": {"id": "x", "name": "y", "created_at": "2024-05-01T12:00:00Z"},'
            ' "car": {"make": "a", "model": "b"}, "setup": {"aero": {"front_wing": Infinity}}}'
        )
