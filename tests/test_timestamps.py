from __future__ import annotations

import pytest

from orsf.utils import is_valid_iso8601, iso8601_to_unix, now_iso8601, unix_to_iso8601


@pytest.mark.parametrize(
    "value",
    [
        "2024-05-01T12:00:00Z",
        "2024-05-01T12:00:00",
        "2024-05-01T12:00:00.123Z",
        "2024-05-01T12:00:00+02:00",
    ],
)
def test_accepted_shapes(value: str) -> None:
    assert is_valid_iso8601(value)


@pytest.mark.parametrize("value", ["2024-05-01", "2024-05-01 12:00:00", "yesterday", "", None])
def test_rejected_shapes(value) -> None:
    assert not is_valid_iso8601(value)


def test_conversions() -> None:
    assert iso8601_to_unix("1970-01-01T00:00:00Z") == 0
    assert iso8601_to_unix("1970-01-01T01:00:00") == 3600
    assert iso8601_to_unix("1970-01-01T02:00:00+02:00") == 0
    assert unix_to_iso8601(86400) == "1970-01-02T00:00:00Z"
    with pytest.raises(ValueError, match="Invalid ISO8601 timestamp"):
        iso8601_to_unix("not a timestamp")


def test_now_round_trips() -> None:
    stamp = now_iso8601()
    assert is_valid_iso8601(stamp)
    assert unix_to_iso8601(iso8601_to_unix(stamp)) == stamp
