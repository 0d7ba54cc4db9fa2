from __future__ import annotations

import numpy as np
import pytest

from orsf.core.lookup import LookupTable, LookupTableError


@pytest.fixture
def table() -> LookupTable:
    return LookupTable([(0.0, 0.0), (50.0, 25.0), (100.0, 50.0)])


def test_interpolate_and_reverse_lookup(table: LookupTable) -> None:
    assert table.interpolate(25.0) == pytest.approx(12.5)
    assert table.reverse_lookup(25.0) == pytest.approx(50.0)


def test_interpolate_clamps_to_table_bounds(table: LookupTable) -> None:
    assert table.interpolate(-10.0) == 0.0
    assert table.interpolate(150.0) == 50.0


def test_entries_are_sorted_and_copied() -> None:
    source = [(10.0, 1.0), (0.0, 0.0)]
    table = LookupTable(source)
    source.append((20.0, 2.0))
    assert table.entries == ((0.0, 0.0), (10.0, 1.0))
    assert len(table) == 2
    with pytest.raises(ValueError):
        table.inputs[0] = 5.0


def test_duplicate_inputs_keep_first_entry() -> None:
    table = LookupTable([(0.0, 0.0), (1.0, 10.0), (1.0, 20.0), (2.0, 30.0)])
    assert table.interpolate(1.0) == pytest.approx(10.0)


def test_empty_table_raises() -> None:
    with pytest.raises(LookupTableError):
        LookupTable([]).interpolate(1.0)


def test_from_columns_and_vectorised_interpolation() -> None:
    table = LookupTable.from_columns([0.0, 10.0], [0.0, 100.0])
    np.testing.assert_allclose(table.interpolate_many([0.0, 2.5, 10.0]), [0.0, 25.0, 100.0])
    assert table == LookupTable([(10.0, 100.0), (0.0, 0.0)])
    with pytest.raises(ValueError):
        LookupTable.from_columns([0.0], [1.0, 2.0])


def test_uneven_segments_interpolate_and_reverse() -> None:
    table = LookupTable([(0.0, 0.0), (50.0, 25.0), (100.0, 75.0)])
    assert table.interpolate(25.0) == pytest.approx(12.5)
    assert table.interpolate(75.0) == pytest.approx(50.0)
    assert table.reverse_lookup(25.0) == pytest.approx(50.0)
    assert table.reverse_lookup(50.0) == pytest.approx(75.0)
