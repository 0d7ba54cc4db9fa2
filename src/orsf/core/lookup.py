"""Piecewise-linear lookup tables with reverse interpolation."""

from __future__ import annotations

from typing import Iterable, Sequence, Tuple

import numpy as np

__all__ = ["LookupTable", "LookupTableError", "LUTEntry"]

LUTEntry = Tuple[float, float]

_SEGMENT_EPSILON = 1e-10


class LookupTableError(RuntimeError):
    """Raised when a lookup table cannot answer a query."""


def _frozen_column(values: np.ndarray) -> np.ndarray:
    column = np.ascontiguousarray(values, dtype=float)
    column.setflags(write=False)
    return column


def _sorted_columns(first: np.ndarray, second: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    order = np.argsort(first, kind="stable")
    return _frozen_column(first[order]), _frozen_column(second[order])


def _interpolate(value: float, xs: np.ndarray, ys: np.ndarray) -> float:
    if xs.size == 0:
        raise LookupTableError("Empty lookup table")

    if value <= xs[0]:
        return float(ys[0])
    if value >= xs[-1]:
        return float(ys[-1])

    # First segment whose upper bound reaches ``value``.
    upper = int(np.searchsorted(xs, value, side="left"))
    lower = upper - 1
    x0, x1 = float(xs[lower]), float(xs[upper])
    y0, y1 = float(ys[lower]), float(ys[upper])
    if abs(x1 - x0) < _SEGMENT_EPSILON:
        return y0
    return y0 + (y1 - y0) * (value - x0) / (x1 - x0)


class LookupTable:
    """Immutable table of ``(input, output)`` control points.

    Entries are sorted by input with a stable sort, so when two entries share
    an input the one given first takes precedence. The table copies its
    entries; later changes to the caller's sequence have no effect.

    :meth:`reverse_lookup` swaps the columns and interpolates over outputs.
    It is only a true inverse when outputs are monotonic in inputs; that
    precondition is not checked.
    """

    __slots__ = ("_inputs", "_outputs", "_reverse")

    def __init__(self, entries: Iterable[Sequence[float]]) -> None:
        pairs = [(float(entry[0]), float(entry[1])) for entry in entries]
        raw = np.asarray(pairs, dtype=float).reshape(-1, 2)
        self._inputs, self._outputs = _sorted_columns(raw[:, 0], raw[:, 1])
        self._reverse: tuple[np.ndarray, np.ndarray] | None = None

    @classmethod
    def from_columns(cls, inputs: Sequence[float], outputs: Sequence[float]) -> "LookupTable":
        if len(inputs) != len(outputs):
            raise ValueError("inputs and outputs must have the same length")
        return cls(zip(inputs, outputs))

    @property
    def entries(self) -> Tuple[LUTEntry, ...]:
        return tuple(
            (float(x), float(y)) for x, y in zip(self._inputs, self._outputs)
        )

    @property
    def inputs(self) -> np.ndarray:
        return self._inputs

    @property
    def outputs(self) -> np.ndarray:
        return self._outputs

    def __len__(self) -> int:
        return int(self._inputs.size)

    def __repr__(self) -> str:
        return f"LookupTable({list(self.entries)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LookupTable):
            return NotImplemented
        return self.entries == other.entries

    def __hash__(self) -> int:
        return hash(self.entries)

    def interpolate(self, value: float) -> float:
        """Return the output for ``value``, clamped to the table bounds."""

        return _interpolate(float(value), self._inputs, self._outputs)

    def reverse_lookup(self, value: float) -> float:
        """Return the input producing ``value`` (see class notes)."""

        if self._reverse is None:
            self._reverse = _sorted_columns(self._outputs, self._inputs)
        outputs, inputs = self._reverse
        return _interpolate(float(value), outputs, inputs)

    def interpolate_many(self, values: Iterable[float]) -> np.ndarray:
        """Apply :meth:`interpolate` to each of ``values``."""

        return np.fromiter(
            (self.interpolate(value) for value in values), dtype=float
        )
