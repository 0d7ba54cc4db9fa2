"""Canonical ``orsf://v1`` setup document model.

Every optional value defaults to ``None`` meaning *absent*. Numeric leaves
are declared through :func:`leaf` so that path addressing and the codec can
discover them from the dataclass definitions.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple, Union

__all__ = [
    "Aerodynamics",
    "Brakes",
    "Car",
    "Context",
    "CornerSuspension",
    "Drivetrain",
    "Electronics",
    "Fuel",
    "Gearing",
    "JsonValue",
    "LEAF_KIND",
    "Metadata",
    "SCHEMA_ID",
    "Setup",
    "SetupDocument",
    "Strategy",
    "Suspension",
    "Tires",
    "leaf",
    "numeric_leaves",
]

SCHEMA_ID = "orsf://v1"

JsonValue = Union[None, bool, int, float, str, List["JsonValue"], Dict[str, "JsonValue"]]

LEAF_KIND = "leaf"


def leaf(kind: type = float) -> Any:
    """Declare an optional numeric leaf of ``kind`` (``float`` or ``int``)."""

    return field(default=None, metadata={LEAF_KIND: kind})


def numeric_leaves(cls: type) -> Tuple[Tuple[str, type], ...]:
    """Return ``(name, kind)`` for each numeric leaf of a dataclass, in order."""

    return tuple(
        (item.name, item.metadata[LEAF_KIND])
        for item in fields(cls)
        if LEAF_KIND in item.metadata
    )


@dataclass
class Metadata:
    id: str = ""
    name: str = ""
    created_at: str = ""
    notes: Optional[str] = None
    updated_at: Optional[str] = None
    created_by: Optional[str] = None
    tags: Optional[List[str]] = None
    source: Optional[str] = None
    origin_sim: Optional[str] = None


@dataclass
class Car:
    make: str = ""
    model: str = ""
    variant: Optional[str] = None
    car_class: Optional[str] = None
    bop_id: Optional[str] = None


@dataclass
class Context:
    """Session conditions the setup was built for."""

    track: Optional[str] = None
    layout: Optional[str] = None
    ambient_temp_c: Optional[float] = None
    track_temp_c: Optional[float] = None
    rubber: Optional[str] = None
    wetness: Optional[float] = None
    session_type: Optional[str] = None
    fuel_rule: Optional[str] = None


@dataclass
class Aerodynamics:
    front_wing: Optional[float] = leaf()
    rear_wing: Optional[float] = leaf()
    front_downforce_n: Optional[float] = leaf()
    rear_downforce_n: Optional[float] = leaf()
    front_ride_height_mm: Optional[float] = leaf()
    rear_ride_height_mm: Optional[float] = leaf()
    rake_mm: Optional[float] = leaf()
    brake_duct_front_pct: Optional[float] = leaf()
    brake_duct_rear_pct: Optional[float] = leaf()
    radiator_opening_pct: Optional[float] = leaf()


@dataclass
class CornerSuspension:
    camber_deg: Optional[float] = leaf()
    toe_deg: Optional[float] = leaf()
    caster_deg: Optional[float] = leaf()
    spring_rate_n_mm: Optional[float] = leaf()
    ride_height_mm: Optional[float] = leaf()
    bumpstop_gap_mm: Optional[float] = leaf()
    bumpstop_rate_n_mm: Optional[float] = leaf()
    packer_mm: Optional[float] = leaf()
    damper_bump_slow_n_s_m: Optional[float] = leaf()
    damper_bump_fast_n_s_m: Optional[float] = leaf()
    damper_rebound_slow_n_s_m: Optional[float] = leaf()
    damper_rebound_fast_n_s_m: Optional[float] = leaf()


@dataclass
class Suspension:
    front_left: Optional[CornerSuspension] = None
    front_right: Optional[CornerSuspension] = None
    rear_left: Optional[CornerSuspension] = None
    rear_right: Optional[CornerSuspension] = None
    front_arb: Optional[float] = leaf()
    rear_arb: Optional[float] = leaf()
    heave_spring_n_mm: Optional[float] = leaf()
    heave_packer_mm: Optional[float] = leaf()

    CORNERS = ("front_left", "front_right", "rear_left", "rear_right")

    def corner(self, name: str) -> Optional[CornerSuspension]:
        if name not in self.CORNERS:
            raise KeyError(name)
        return getattr(self, name)


@dataclass
class Tires:
    compound: Optional[str] = None
    pressure_fl_kpa: Optional[float] = leaf()
    pressure_fr_kpa: Optional[float] = leaf()
    pressure_rl_kpa: Optional[float] = leaf()
    pressure_rr_kpa: Optional[float] = leaf()
    stagger_mm: Optional[float] = leaf()


@dataclass
class Drivetrain:
    diff_preload_nm: Optional[float] = leaf()
    diff_power_ramp_pct: Optional[float] = leaf()
    diff_coast_ramp_pct: Optional[float] = leaf()
    final_drive_ratio: Optional[float] = leaf()
    lsd_clutch_plates: Optional[int] = leaf(int)


@dataclass
class Gearing:
    """Forward ratios are addressed positionally as ``gear_<index>``."""

    gear_ratios: Optional[List[float]] = None
    reverse_ratio: Optional[float] = leaf()


@dataclass
class Brakes:
    pad_compound: Optional[str] = None
    disc_type: Optional[str] = None
    brake_bias_pct: Optional[float] = leaf()
    max_force_n: Optional[float] = leaf()


@dataclass
class Electronics:
    tc_level: Optional[int] = leaf(int)
    tc2_level: Optional[int] = leaf(int)
    abs_level: Optional[int] = leaf(int)
    engine_map: Optional[int] = leaf(int)
    engine_brake_level: Optional[int] = leaf(int)
    pit_limiter_kph: Optional[float] = leaf()


@dataclass
class Fuel:
    start_fuel_l: Optional[float] = leaf()
    per_lap_consumption_l: Optional[float] = leaf()
    stint_target_laps: Optional[int] = leaf(int)
    mixture_setting: Optional[int] = leaf(int)


@dataclass
class Strategy:
    tire_change_policy: Optional[str] = None
    notes: Optional[str] = None
    custom: Optional[Dict[str, JsonValue]] = None


@dataclass
class Setup:
    aero: Optional[Aerodynamics] = None
    suspension: Optional[Suspension] = None
    tires: Optional[Tires] = None
    drivetrain: Optional[Drivetrain] = None
    gearing: Optional[Gearing] = None
    brakes: Optional[Brakes] = None
    electronics: Optional[Electronics] = None
    fuel: Optional[Fuel] = None
    strategy: Optional[Strategy] = None


@dataclass
class SetupDocument:
    """Root of a canonical setup.

    ``compat`` carries simulator specific data that has no canonical home.
    """

    schema: str = SCHEMA_ID
    metadata: Metadata = field(default_factory=Metadata)
    car: Car = field(default_factory=Car)
    context: Optional[Context] = None
    setup: Setup = field(default_factory=Setup)
    compat: Optional[Dict[str, JsonValue]] = None
