"""Physical unit conversion between units sharing a dimension.

Every unit belongs to exactly one :class:`Dimension`. Conversions go through
the dimension's base unit, so a new unit only needs its own pair of
``to_base``/``from_base`` functions.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Callable, Mapping, Tuple

__all__ = [
    "Dimension",
    "Unit",
    "UnitDimensionError",
    "clamp",
    "convert",
    "round_half_away",
    "round_to_step",
]


class UnitDimensionError(ValueError):
    """Raised when converting between units of different dimensions."""


class Dimension(str, Enum):
    """Disjoint families of convertible units."""

    PRESSURE = "pressure"
    SPRING_RATE = "spring_rate"
    DAMPING = "damping"
    LENGTH = "length"
    TEMPERATURE = "temperature"
    TORQUE = "torque"
    FORCE = "force"
    SPEED = "speed"
    VOLUME = "volume"


class Unit(str, Enum):
    """Units understood by :func:`convert`."""

    KPA = "kpa"
    PSI = "psi"
    BAR = "bar"

    N_MM = "n_mm"
    LB_IN = "lb_in"

    N_S_M = "n_s_m"
    LB_S_IN = "lb_s_in"

    MM = "mm"
    INCHES = "in"
    CM = "cm"

    CELSIUS = "c"
    FAHRENHEIT = "f"
    KELVIN = "k"

    NM = "nm"
    LB_FT = "lb_ft"

    NEWTONS = "n"
    POUNDS = "lbf"

    KPH = "kph"
    MPH = "mph"
    MS = "m_s"

    LITERS = "l"
    GALLONS_US = "gal_us"
    GALLONS_UK = "gal_uk"

    @property
    def dimension(self) -> Dimension:
        return _CONVERSIONS[self][0]

    @classmethod
    def parse(cls, value: "Unit | str") -> "Unit":
        """Resolve ``value`` from a member, value, member name or alias."""

        if isinstance(value, Unit):
            return value
        if not isinstance(value, str):
            raise TypeError(f"unit must be a string, got {type(value).__name__}")
        token = value.strip().lower()
        try:
            return cls(token)
        except ValueError:
            pass
        member = cls.__members__.get(token.upper())
        if member is not None:
            return member
        alias = _ALIASES.get(token)
        if alias is not None:
            return alias
        raise ValueError(f"unknown unit {value!r}")


def _scaled(factor: float) -> Tuple[Callable[[float], float], Callable[[float], float]]:
    return (lambda value: value * factor, lambda value: value / factor)


def _base() -> Tuple[Callable[[float], float], Callable[[float], float]]:
    return (lambda value: value, lambda value: value)


# unit -> (dimension, (to_base, from_base))
_CONVERSIONS: Mapping[Unit, Tuple[Dimension, Tuple[Callable[[float], float], Callable[[float], float]]]] = {
    # pressure, base kPa
    Unit.KPA: (Dimension.PRESSURE, _base()),
    Unit.PSI: (Dimension.PRESSURE, _scaled(6.89476)),
    Unit.BAR: (Dimension.PRESSURE, _scaled(100.0)),
    # spring rate, base N/mm
    Unit.N_MM: (Dimension.SPRING_RATE, _base()),
    Unit.LB_IN: (Dimension.SPRING_RATE, _scaled(0.175127)),
    # damping, base N·s/m
    Unit.N_S_M: (Dimension.DAMPING, _base()),
    Unit.LB_S_IN: (Dimension.DAMPING, _scaled(175.127)),
    # length, base mm
    Unit.MM: (Dimension.LENGTH, _base()),
    Unit.INCHES: (Dimension.LENGTH, _scaled(25.4)),
    Unit.CM: (Dimension.LENGTH, _scaled(10.0)),
    # temperature, base °C
    Unit.CELSIUS: (Dimension.TEMPERATURE, _base()),
    Unit.FAHRENHEIT: (
        Dimension.TEMPERATURE,
        (
            lambda value: (value - 32.0) * 5.0 / 9.0,
            lambda value: value * 9.0 / 5.0 + 32.0,
        ),
    ),
    Unit.KELVIN: (
        Dimension.TEMPERATURE,
        (lambda value: value - 273.15, lambda value: value + 273.15),
    ),
    # torque, base N·m
    Unit.NM: (Dimension.TORQUE, _base()),
    Unit.LB_FT: (Dimension.TORQUE, _scaled(1.35582)),
    # force, base N
    Unit.NEWTONS: (Dimension.FORCE, _base()),
    Unit.POUNDS: (Dimension.FORCE, _scaled(4.44822)),
    # speed, base km/h
    Unit.KPH: (Dimension.SPEED, _base()),
    Unit.MPH: (Dimension.SPEED, _scaled(1.60934)),
    Unit.MS: (Dimension.SPEED, _scaled(3.6)),
    # volume, base L
    Unit.LITERS: (Dimension.VOLUME, _base()),
    Unit.GALLONS_US: (Dimension.VOLUME, _scaled(3.78541)),
    Unit.GALLONS_UK: (Dimension.VOLUME, _scaled(4.54609)),
}

_ALIASES: Mapping[str, Unit] = {
    "n/mm": Unit.N_MM,
    "lb/in": Unit.LB_IN,
    "lbs/in": Unit.LB_IN,
    "n·s/m": Unit.N_S_M,
    "n*s/m": Unit.N_S_M,
    "ns/m": Unit.N_S_M,
    "lb·s/in": Unit.LB_S_IN,
    "lb*s/in": Unit.LB_S_IN,
    "inch": Unit.INCHES,
    "inches": Unit.INCHES,
    "°c": Unit.CELSIUS,
    "celsius": Unit.CELSIUS,
    "°f": Unit.FAHRENHEIT,
    "fahrenheit": Unit.FAHRENHEIT,
    "kelvin": Unit.KELVIN,
    "n·m": Unit.NM,
    "n*m": Unit.NM,
    "lb·ft": Unit.LB_FT,
    "lb-ft": Unit.LB_FT,
    "newtons": Unit.NEWTONS,
    "lb": Unit.POUNDS,
    "pounds": Unit.POUNDS,
    "km/h": Unit.KPH,
    "m/s": Unit.MS,
    "liters": Unit.LITERS,
    "litres": Unit.LITERS,
    "gal": Unit.GALLONS_US,
}


def convert(value: float, from_unit: Unit | str, to_unit: Unit | str) -> float:
    """Convert ``value`` from ``from_unit`` to ``to_unit``.

    Raises :class:`UnitDimensionError` when the units measure different
    dimensions.
    """

    source = Unit.parse(from_unit)
    target = Unit.parse(to_unit)
    if source is target:
        return float(value)

    source_dimension, (to_base, _) = _CONVERSIONS[source]
    target_dimension, (_, from_base) = _CONVERSIONS[target]
    if source_dimension is not target_dimension:
        raise UnitDimensionError(
            f"cannot convert {source.value!r} ({source_dimension.value}) to "
            f"{target.value!r} ({target_dimension.value})"
        )
    return from_base(to_base(float(value)))


def round_half_away(value: float) -> float:
    """Round to the nearest integer, ties away from zero."""

    return math.copysign(math.floor(abs(value) + 0.5), value)


def round_to_step(value: float, step: float) -> float:
    """Round ``value`` to the nearest multiple of ``step``."""

    if step <= 0.0:
        return value
    return round_half_away(value / step) * step


def clamp(value: float, minimum: float, maximum: float, step: float = 0.0) -> float:
    """Clamp ``value`` into ``[minimum, maximum]`` and optionally snap to ``step``."""

    clamped = max(minimum, min(maximum, value))
    if step > 0.0:
        clamped = round_to_step(clamped, step)
    return clamped
