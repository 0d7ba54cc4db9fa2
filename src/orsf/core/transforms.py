"""Composable scalar transforms used by field mappings.

Each constructor returns a :class:`Transform`: a named, callable
``float -> float`` function. Constructors never evaluate anything; failures
such as :func:`invert` on zero surface when the transform is applied.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Tuple

from . import units
from .lookup import LookupTable

__all__ = [
    "Transform",
    "TransformDomainError",
    "TransformError",
    "clamp",
    "compose",
    "identity",
    "invert",
    "linear",
    "lookup_table",
    "negate",
    "offset",
    "percent_to_ratio",
    "ratio_to_percent",
    "reverse_lookup_table",
    "scale",
    "unit_convert",
]

_INVERT_EPSILON = 1e-10


class TransformError(ValueError):
    """Raised when a transform cannot be built or inverted."""


class TransformDomainError(TransformError):
    """Raised when a transform receives an input outside its domain."""


@dataclass(frozen=True)
class Transform:
    """Pure scalar function with a descriptive name and parameters."""

    name: str
    func: Callable[[float], float] = field(repr=False, compare=False)
    params: Mapping[str, Any] = field(default_factory=dict, hash=False)
    steps: Tuple["Transform", ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def __call__(self, value: float) -> float:
        return self.func(float(value))

    def then(self, other: "Transform") -> "Transform":
        """Return ``other`` applied after ``self``."""

        return compose([self, other])

    def inverse(self) -> "Transform":
        """Return the transform undoing ``self``.

        ``clamp`` is a projection and inverts to :func:`identity`, which is
        exact for values inside its range.
        """

        builder = _INVERSES.get(self.name)
        if builder is None:
            raise TransformError(f"transform '{self.name}' has no inverse")
        return builder(self)


def identity() -> Transform:
    return Transform("identity", lambda value: value)


def scale(factor: float) -> Transform:
    factor = float(factor)
    return Transform("scale", lambda value: value * factor, {"factor": factor})


def offset(amount: float) -> Transform:
    amount = float(amount)
    return Transform("offset", lambda value: value + amount, {"amount": amount})


def linear(scale_factor: float, offset_amount: float) -> Transform:
    """Scale then offset: ``value * scale_factor + offset_amount``."""

    scale_factor = float(scale_factor)
    offset_amount = float(offset_amount)
    return Transform(
        "linear",
        lambda value: value * scale_factor + offset_amount,
        {"scale": scale_factor, "offset": offset_amount},
    )


def _reciprocal(value: float) -> float:
    if abs(value) < _INVERT_EPSILON:
        raise TransformDomainError("Cannot invert zero value")
    return 1.0 / value


def invert() -> Transform:
    """Reciprocal ``1 / value``; fails for inputs within ``1e-10`` of zero."""

    return Transform("invert", _reciprocal)


def negate() -> Transform:
    return Transform("negate", lambda value: -value)


def clamp(minimum: float, maximum: float, step: float = 0.0) -> Transform:
    minimum, maximum, step = float(minimum), float(maximum), float(step)
    if minimum > maximum:
        raise TransformError(f"clamp minimum {minimum} exceeds maximum {maximum}")
    return Transform(
        "clamp",
        lambda value: units.clamp(value, minimum, maximum, step),
        {"min": minimum, "max": maximum, "step": step},
    )


def percent_to_ratio() -> Transform:
    return Transform("percent_to_ratio", lambda value: value / 100.0)


def ratio_to_percent() -> Transform:
    return Transform("ratio_to_percent", lambda value: value * 100.0)


def unit_convert(from_unit: units.Unit | str, to_unit: units.Unit | str) -> Transform:
    source = units.Unit.parse(from_unit)
    target = units.Unit.parse(to_unit)
    if source.dimension is not target.dimension:
        raise units.UnitDimensionError(
            f"cannot convert {source.value!r} to {target.value!r}"
        )
    return Transform(
        "unit_convert",
        lambda value: units.convert(value, source, target),
        {"from": source, "to": target},
    )


def _as_table(lut: LookupTable | Iterable[Any]) -> LookupTable:
    # Always rebuild so the transform owns its own copy.
    entries = lut.entries if isinstance(lut, LookupTable) else lut
    return LookupTable(entries)


def lookup_table(lut: LookupTable | Iterable[Any]) -> Transform:
    table = _as_table(lut)
    return Transform("lookup_table", table.interpolate, {"table": table})


def reverse_lookup_table(lut: LookupTable | Iterable[Any]) -> Transform:
    table = _as_table(lut)
    return Transform("reverse_lookup_table", table.reverse_lookup, {"table": table})


def compose(transforms: Iterable[Transform | Callable[[float], float]]) -> Transform:
    """Apply ``transforms`` left to right; an empty sequence is the identity."""

    steps = tuple(
        item if isinstance(item, Transform) else Transform("callable", item)
        for item in transforms
    )
    if not steps:
        return identity()

    def _apply(value: float) -> float:
        result = value
        for step in steps:
            result = step(result)
        return result

    return Transform("compose", _apply, steps=steps)


def _invert_scale(transform: Transform) -> Transform:
    factor = transform.params["factor"]
    if factor == 0.0:
        raise TransformError("scale by zero has no inverse")
    return scale(1.0 / factor)


def _invert_linear(transform: Transform) -> Transform:
    factor = transform.params["scale"]
    if factor == 0.0:
        raise TransformError("linear transform with zero scale has no inverse")
    return linear(1.0 / factor, -transform.params["offset"] / factor)


_INVERSES: Mapping[str, Callable[[Transform], Transform]] = {
    "identity": lambda transform: identity(),
    "scale": _invert_scale,
    "offset": lambda transform: offset(-transform.params["amount"]),
    "linear": _invert_linear,
    "invert": lambda transform: invert(),
    "negate": lambda transform: negate(),
    "clamp": lambda transform: identity(),
    "percent_to_ratio": lambda transform: ratio_to_percent(),
    "ratio_to_percent": lambda transform: percent_to_ratio(),
    "unit_convert": lambda transform: unit_convert(
        transform.params["to"], transform.params["from"]
    ),
    "lookup_table": lambda transform: reverse_lookup_table(transform.params["table"]),
    "reverse_lookup_table": lambda transform: lookup_table(transform.params["table"]),
    "compose": lambda transform: compose(
        step.inverse() for step in reversed(transform.steps)
    ),
}
