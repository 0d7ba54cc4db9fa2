from __future__ import annotations

import logging

import pytest

from orsf.core.document import SetupDocument
from orsf.core.paths import FieldPath, PathError, get_value, iter_leaf_paths, parse_path, set_value


def test_parse_path_forms() -> None:
    assert parse_path("setup.aero.front_wing") == FieldPath("aero", "front_wing")
    assert parse_path("setup.suspension.rear_left.camber_deg") == FieldPath(
        "suspension", "camber_deg", corner="rear_left"
    )
    gear = parse_path("setup.gearing.gear_3")
    assert gear.gear_index == 3
    assert str(parse_path("setup.suspension.front_arb")) == "setup.suspension.front_arb"


@pytest.mark.parametrize(
    ("path", "reason"),
    [
        ("", "empty path"),
        ("car.aero.front_wing", "path must start with 'setup'"),
        ("setup.aero", "too few segments"),
        ("setup.engine.power", "unknown subsystem"),
        ("setup.suspension.middle.camber_deg", "unknown corner"),
        ("setup.aero.front_wing.extra", "too many segments"),
        ("setup.aero.sidepod", "unknown field"),
        ("setup.gearing.gear_x", "unknown field"),
    ],
)
def test_parse_path_rejects_malformed_paths(path: str, reason: str) -> None:
    with pytest.raises(PathError) as excinfo:
        parse_path(path)
    assert excinfo.value.reason.startswith(reason)


def test_get_value_never_creates_containers() -> None:
    doc = SetupDocument()
    assert get_value(doc, "setup.aero.front_wing") is None
    assert get_value(doc, "setup.suspension.front_left.camber_deg") is None
    assert get_value(doc, "not.a.path") is None
    assert doc.setup.aero is None
    assert doc.setup.suspension is None


def test_set_value_creates_containers() -> None:
    doc = SetupDocument()
    assert set_value(doc, "setup.suspension.front_left.camber_deg", -3.2)
    assert doc.setup.suspension.front_left.camber_deg == -3.2
    assert get_value(doc, "setup.suspension.front_left.camber_deg") == -3.2


def test_integer_leaves_round_half_away_from_zero() -> None:
    doc = SetupDocument()
    set_value(doc, "setup.electronics.tc_level", 2.5)
    set_value(doc, "setup.fuel.stint_target_laps", 27.4)
    assert doc.setup.electronics.tc_level == 3
    assert isinstance(doc.setup.electronics.tc_level, int)
    assert doc.setup.fuel.stint_target_laps == 27


def test_gear_writes_append_or_replace() -> None:
    doc = SetupDocument()
    assert set_value(doc, "setup.gearing.gear_0", 3.5)
    assert set_value(doc, "setup.gearing.gear_1", 2.8)
    assert set_value(doc, "setup.gearing.gear_0", 3.4)
    assert doc.setup.gearing.gear_ratios == [3.4, 2.8]
    assert get_value(doc, "setup.gearing.gear_1") == 2.8
    assert get_value(doc, "setup.gearing.gear_5") is None


def test_gear_write_beyond_end_is_rejected(caplog: pytest.LogCaptureFixture) -> None:
    doc = SetupDocument()
    with caplog.at_level(logging.WARNING, logger="orsf.core.paths"):
        assert not set_value(doc, "setup.gearing.gear_2", 1.9)
    assert doc.setup.gearing is None
    assert any(getattr(record, "event", None) == "paths.unresolvable" for record in caplog.records)


def test_malformed_write_is_logged_or_raised(caplog: pytest.LogCaptureFixture) -> None:
    doc = SetupDocument()
    with caplog.at_level(logging.WARNING, logger="orsf.core.paths"):
        assert not set_value(doc, "setup.aero.sidepod", 1.0)
    assert "Ignoring write" in caplog.text
    with pytest.raises(PathError):
        set_value(doc, "setup.aero.sidepod", 1.0, strict=True)


def test_iter_leaf_paths_covers_corners_and_skips_gears() -> None:
    paths = [str(path) for path in iter_leaf_paths()]
    assert paths[0] == "setup.aero.front_wing"
    assert "setup.suspension.rear_right.damper_rebound_fast_n_s_m" in paths
    assert "setup.gearing.reverse_ratio" in paths
    assert not any("gear_" in path for path in paths)
    assert len(paths) == len(set(paths))


@pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_writes_are_rejected(value: float) -> None:
    doc = SetupDocument()
    assert not set_value(doc, "setup.electronics.tc_level", value)
    assert not set_value(doc, "setup.aero.front_wing", value)
    assert doc.setup.electronics is None
    assert doc.setup.aero is None
    with pytest.raises(PathError, match="non-finite"):
        set_value(doc, "setup.gearing.gear_0", value, strict=True)
