"""Severity-tagged validation of setup documents.

:func:`validate` runs an ordered list of rules. Each rule inspects the
document and yields :class:`Finding` values; rules never raise for bad data
and never mutate the document, and every rule runs regardless of what
earlier rules reported.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..utils.timestamps import is_valid_iso8601
from .document import (
    SCHEMA_ID,
    Aerodynamics,
    Brakes,
    CornerSuspension,
    Drivetrain,
    Electronics,
    Fuel,
    Gearing,
    SetupDocument,
    Suspension,
    Tires,
)

__all__ = [
    "DEFAULT_RULES",
    "Finding",
    "KNOWN_CAR_CLASSES",
    "KNOWN_RUBBER_LEVELS",
    "Severity",
    "ValidationCode",
    "ValidationRule",
    "check_car",
    "check_context",
    "check_metadata",
    "check_schema",
    "check_setup",
    "check_temperatures",
    "count_by_severity",
    "has_errors",
    "validate",
]


class Severity(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class ValidationCode(str, Enum):
    REQUIRED = "required"
    OUT_OF_RANGE = "out_of_range"
    INVALID_FORMAT = "invalid_format"
    INCOMPATIBLE = "incompatible"
    DEPRECATED = "deprecated"
    SCHEMA_INVALID = "schema_invalid"


@dataclass(frozen=True)
class Finding:
    """Single validation result attached to a field path."""

    severity: Severity
    code: ValidationCode
    field: str
    message: str
    expected: Optional[str] = None
    actual: Optional[str] = None

    def __str__(self) -> str:
        text = f"[{self.severity.value}] {self.field}: {self.message}"
        if self.expected is not None and self.actual is not None:
            text += f" (expected: {self.expected}, actual: {self.actual})"
        elif self.expected is not None:
            text += f" (expected: {self.expected})"
        return text

    def as_dict(self) -> Dict[str, Optional[str]]:
        return {
            "severity": self.severity.value,
            "code": self.code.value,
            "field": self.field,
            "message": self.message,
            "expected": self.expected,
            "actual": self.actual,
        }


ValidationRule = Callable[[SetupDocument], Iterable[Finding]]

KNOWN_CAR_CLASSES: Tuple[str, ...] = (
    "GT3", "GTE", "LMP2", "LMDh", "GT4", "TCR", "F1", "F2", "F3", "F4", "Formula",
)
KNOWN_RUBBER_LEVELS: Tuple[str, ...] = ("green", "low", "medium", "high", "saturated")

_ISO8601_SHAPE = "YYYY-MM-DDTHH:MM:SS(.sss)?(Z|[+-]HH:MM)?"

_AMBIENT_RANGE = (-50.0, 70.0)
_TRACK_RANGE = (-20.0, 80.0)
_CAMBER_RANGE = (-10.0, 5.0)
_TIRE_PRESSURE_RANGE = (50.0, 400.0)
_TRACK_BELOW_AMBIENT_LIMIT = 5.0
_TRACK_ABOVE_AMBIENT_LIMIT = 40.0


# ---------------------------------------------------------------------------
# Check helpers
# ---------------------------------------------------------------------------


def _required(field: str, value: Optional[str]) -> Iterator[Finding]:
    if not value:
        yield Finding(Severity.ERROR, ValidationCode.REQUIRED, field, "Required field is missing")


def _in_range(
    field: str,
    value: Optional[float],
    minimum: float,
    maximum: float,
    severity: Severity = Severity.ERROR,
) -> Iterator[Finding]:
    if value is None:
        return
    if value < minimum or value > maximum:
        yield Finding(
            severity,
            ValidationCode.OUT_OF_RANGE,
            field,
            "Value out of range",
            f"{minimum:g} to {maximum:g}",
            f"{value:f}",
        )


def _percentage(field: str, value: Optional[float]) -> Iterator[Finding]:
    return _in_range(field, value, 0.0, 100.0)


def _positive(field: str, value: Optional[float]) -> Iterator[Finding]:
    if value is not None and value <= 0.0:
        yield Finding(
            Severity.ERROR,
            ValidationCode.OUT_OF_RANGE,
            field,
            "Value must be positive",
            "> 0",
            f"{value:f}",
        )


def _non_negative(field: str, value: Optional[float]) -> Iterator[Finding]:
    if value is not None and value < 0.0:
        yield Finding(
            Severity.ERROR,
            ValidationCode.OUT_OF_RANGE,
            field,
            "Value must be non-negative",
            ">= 0",
            f"{value:f}",
        )


def _iso8601(field: str, value: str) -> Iterator[Finding]:
    if not is_valid_iso8601(value):
        yield Finding(
            Severity.WARNING,
            ValidationCode.INVALID_FORMAT,
            field,
            "Invalid ISO8601 timestamp format",
            _ISO8601_SHAPE,
            value,
        )


# ---------------------------------------------------------------------------
# Document level rules
# ---------------------------------------------------------------------------


def check_schema(doc: SetupDocument) -> Iterator[Finding]:
    if doc.schema != SCHEMA_ID:
        yield Finding(
            Severity.ERROR,
            ValidationCode.SCHEMA_INVALID,
            "schema",
            "Invalid schema version",
            SCHEMA_ID,
            str(doc.schema),
        )


def check_metadata(doc: SetupDocument) -> Iterator[Finding]:
    metadata = doc.metadata
    yield from _required("metadata.id", metadata.id)
    yield from _required("metadata.name", metadata.name)
    yield from _required("metadata.created_at", metadata.created_at)

    if metadata.created_at:
        yield from _iso8601("metadata.created_at", metadata.created_at)
    if metadata.updated_at:
        yield from _iso8601("metadata.updated_at", metadata.updated_at)

    # Plain string comparison; only meaningful for zero padded UTC timestamps.
    if metadata.updated_at is not None and metadata.updated_at < metadata.created_at:
        yield Finding(
            Severity.WARNING,
            ValidationCode.INCOMPATIBLE,
            "metadata.updated_at",
            "Updated timestamp is before created timestamp",
        )


def check_car(doc: SetupDocument) -> Iterator[Finding]:
    car = doc.car
    yield from _required("car.make", car.make)
    yield from _required("car.model", car.model)
    if car.car_class is not None and car.car_class not in KNOWN_CAR_CLASSES:
        yield Finding(
            Severity.WARNING,
            ValidationCode.INVALID_FORMAT,
            "car.class",
            f"Unknown car class: {car.car_class}",
        )


def check_context(doc: SetupDocument) -> Iterator[Finding]:
    context = doc.context
    if context is None:
        return
    yield from _in_range("context.ambient_temp_c", context.ambient_temp_c, *_AMBIENT_RANGE, Severity.WARNING)
    yield from _in_range("context.track_temp_c", context.track_temp_c, *_TRACK_RANGE, Severity.WARNING)
    yield from _in_range("context.wetness", context.wetness, 0.0, 1.0)
    if context.rubber is not None and context.rubber not in KNOWN_RUBBER_LEVELS:
        yield Finding(
            Severity.WARNING,
            ValidationCode.INVALID_FORMAT,
            "context.rubber",
            f"Unknown rubber level: {context.rubber}",
        )


# ---------------------------------------------------------------------------
# Setup subsystem rules
# ---------------------------------------------------------------------------


def _aero(aero: Aerodynamics) -> Iterator[Finding]:
    prefix = "setup.aero"
    yield from _positive(f"{prefix}.front_ride_height_mm", aero.front_ride_height_mm)
    yield from _positive(f"{prefix}.rear_ride_height_mm", aero.rear_ride_height_mm)
    yield from _percentage(f"{prefix}.brake_duct_front_pct", aero.brake_duct_front_pct)
    yield from _percentage(f"{prefix}.brake_duct_rear_pct", aero.brake_duct_rear_pct)
    yield from _percentage(f"{prefix}.radiator_opening_pct", aero.radiator_opening_pct)
    yield from _non_negative(f"{prefix}.front_downforce_n", aero.front_downforce_n)
    yield from _non_negative(f"{prefix}.rear_downforce_n", aero.rear_downforce_n)


def _corner(prefix: str, corner: CornerSuspension) -> Iterator[Finding]:
    yield from _in_range(f"{prefix}.camber_deg", corner.camber_deg, *_CAMBER_RANGE, Severity.WARNING)
    yield from _positive(f"{prefix}.spring_rate_n_mm", corner.spring_rate_n_mm)
    yield from _positive(f"{prefix}.ride_height_mm", corner.ride_height_mm)
    yield from _non_negative(f"{prefix}.bumpstop_gap_mm", corner.bumpstop_gap_mm)
    yield from _positive(f"{prefix}.bumpstop_rate_n_mm", corner.bumpstop_rate_n_mm)
    for name in (
        "damper_bump_slow_n_s_m",
        "damper_bump_fast_n_s_m",
        "damper_rebound_slow_n_s_m",
        "damper_rebound_fast_n_s_m",
    ):
        yield from _non_negative(f"{prefix}.{name}", getattr(corner, name))


def _suspension(suspension: Suspension) -> Iterator[Finding]:
    for name in Suspension.CORNERS:
        corner = suspension.corner(name)
        if corner is not None:
            yield from _corner(f"setup.suspension.{name}", corner)
    yield from _positive("setup.suspension.heave_spring_n_mm", suspension.heave_spring_n_mm)


def _tires(tires: Tires) -> Iterator[Finding]:
    for name in ("pressure_fl_kpa", "pressure_fr_kpa", "pressure_rl_kpa", "pressure_rr_kpa"):
        yield from _in_range(
            f"setup.tires.{name}", getattr(tires, name), *_TIRE_PRESSURE_RANGE, Severity.WARNING
        )


def _drivetrain(drivetrain: Drivetrain) -> Iterator[Finding]:
    prefix = "setup.drivetrain"
    yield from _non_negative(f"{prefix}.diff_preload_nm", drivetrain.diff_preload_nm)
    yield from _percentage(f"{prefix}.diff_power_ramp_pct", drivetrain.diff_power_ramp_pct)
    yield from _percentage(f"{prefix}.diff_coast_ramp_pct", drivetrain.diff_coast_ramp_pct)
    yield from _positive(f"{prefix}.final_drive_ratio", drivetrain.final_drive_ratio)
    if drivetrain.lsd_clutch_plates is not None and drivetrain.lsd_clutch_plates <= 0:
        yield Finding(
            Severity.ERROR,
            ValidationCode.OUT_OF_RANGE,
            f"{prefix}.lsd_clutch_plates",
            "LSD clutch plates must be positive",
        )


def _gearing(gearing: Gearing) -> Iterator[Finding]:
    ratios = gearing.gear_ratios
    if ratios is not None:
        if not ratios:
            yield Finding(
                Severity.WARNING,
                ValidationCode.INVALID_FORMAT,
                "setup.gearing.gear_ratios",
                "Gear ratios array is empty",
            )
        for index, ratio in enumerate(ratios):
            if ratio <= 0.0:
                yield Finding(
                    Severity.ERROR,
                    ValidationCode.OUT_OF_RANGE,
                    f"setup.gearing.gear_ratios[{index}]",
                    f"Gear ratio at index {index} must be positive",
                    "> 0",
                    f"{ratio:f}",
                )
    yield from _positive("setup.gearing.reverse_ratio", gearing.reverse_ratio)


def _brakes(brakes: Brakes) -> Iterator[Finding]:
    yield from _percentage("setup.brakes.brake_bias_pct", brakes.brake_bias_pct)
    yield from _positive("setup.brakes.max_force_n", brakes.max_force_n)


def _electronics(electronics: Electronics) -> Iterator[Finding]:
    yield from _positive("setup.electronics.pit_limiter_kph", electronics.pit_limiter_kph)


def _fuel(fuel: Fuel) -> Iterator[Finding]:
    yield from _non_negative("setup.fuel.start_fuel_l", fuel.start_fuel_l)
    yield from _positive("setup.fuel.per_lap_consumption_l", fuel.per_lap_consumption_l)
    if fuel.stint_target_laps is not None and fuel.stint_target_laps <= 0:
        yield Finding(
            Severity.ERROR,
            ValidationCode.OUT_OF_RANGE,
            "setup.fuel.stint_target_laps",
            "Stint target laps must be positive",
        )


_SUBSYSTEM_CHECKS: Tuple[Tuple[str, Callable[..., Iterator[Finding]]], ...] = (
    ("aero", _aero),
    ("suspension", _suspension),
    ("tires", _tires),
    ("drivetrain", _drivetrain),
    ("gearing", _gearing),
    ("brakes", _brakes),
    ("electronics", _electronics),
    ("fuel", _fuel),
)


def check_setup(doc: SetupDocument) -> Iterator[Finding]:
    for name, check in _SUBSYSTEM_CHECKS:
        section = getattr(doc.setup, name)
        if section is not None:
            yield from check(section)


def check_temperatures(doc: SetupDocument) -> Iterator[Finding]:
    context = doc.context
    if context is None or context.ambient_temp_c is None or context.track_temp_c is None:
        return
    ambient, track = context.ambient_temp_c, context.track_temp_c
    if track < ambient - _TRACK_BELOW_AMBIENT_LIMIT:
        yield Finding(
            Severity.WARNING,
            ValidationCode.INCOMPATIBLE,
            "context.track_temp_c",
            "Track temperature is significantly lower than ambient temperature",
        )
    if track > ambient + _TRACK_ABOVE_AMBIENT_LIMIT:
        yield Finding(
            Severity.WARNING,
            ValidationCode.INCOMPATIBLE,
            "context.track_temp_c",
            "Track temperature is unusually high compared to ambient",
        )


DEFAULT_RULES: Tuple[ValidationRule, ...] = (
    check_schema,
    check_metadata,
    check_car,
    check_context,
    check_setup,
    check_temperatures,
)


def validate(
    doc: SetupDocument,
    rules: Sequence[ValidationRule] = DEFAULT_RULES,
) -> List[Finding]:
    """Return the findings of every rule in ``rules``, in rule order."""

    findings: List[Finding] = []
    for rule in rules:
        findings.extend(rule(doc))
    return findings


def has_errors(findings: Iterable[Finding]) -> bool:
    return any(finding.severity is Severity.ERROR for finding in findings)


def count_by_severity(findings: Iterable[Finding]) -> Dict[Severity, int]:
    """Return how many findings carry each severity (zero counts included)."""

    counts = Counter(finding.severity for finding in findings)
    return {severity: counts.get(severity, 0) for severity in Severity}
